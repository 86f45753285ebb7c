#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
bounds.py — rigorous Y₀, Z₁, Z₂, Zᵤ for the reduced Gray-Scott spike

ETHOS
  • Input is the projected interval solution U₀ (𝒯U₀ ∋ 0) and an exact config.
  • Every scalar returned is an iv.mpf enclosure; floats only enter through
    exact point intervals (Bᵣ) or verified routines (opnorm2).

NOTATION
  Ω₀ = (2d)²,  f = π/d,  N = truncation order,  ‖·‖ on sequences is the
  orbit-weighted ℓ² norm, so operator norms are ‖P K P⁻¹‖₂ with P = √orbit.

  V₀  = 2U₀ − 3λ₁U₀²             (order 2N)
  DGᵣ = π_N 𝕍₀ π_N                (multiplication by V₀)
  Bᵣ  = (I + mid(DGᵣ)·diag(mid L₁₁⁻¹))⁻¹   (float inverse, then point interval)
  Mᵣ  = I + DGᵣ·diag(L₁₁⁻¹)

BOUNDS
  Y₀   = √Ω₀ · √(‖Bᵣ(L₁₁U₀ + Gᵣ)‖² + ‖G̃ − Gᵣ‖²),   G̃ = U₀² − λ₁U₀³,  Gᵣ = π_N G̃
  Z₂   = 6λ₁κ·√(‖Bᵣᵀ𝕌₀²Bᵣ‖ + ‖U₀‖₁²) + ‖Bᵣ‖(2κ + 3λ₁κ²s₀)
         κ₂ = 1/(2√(λ₁π))                                  (finite domain)
         κ̂₂ = √(1/(4πλ₁) + 1/(4d²) + π/(2d√λ₁))           (periodic)
  Zᵤ₁  = √2·C₀f₁₁(1 − e^{−4a₁d})(2π)^{1/4} a₁^{−3/4} √Ω₀ √⟨E₁V₀, V₀⟩
  Zᵤ₂  = 4/√Ω₀ · C₁ · (𝒞₁₁√⟨E₁V₀, V₀⟩ + 𝒞₂₁·C(V₀))
  Zᵤ   = √(Zᵤ₁² + Zᵤ₂²)
  Z₁   = φ(Z₁₁, Z₁₂, Z₁₃, Z₁₄) + ‖Bᵣ‖·Zᵤ
         Z₁₁ = √‖(I − BᵣMᵣ)(I − MᵣᵀBᵣᵀ)‖
         Z₁₂ = √‖Bᵣ(𝕍₀² − DGᵣ²)Bᵣᵀ‖ / l₁₁(N)
         Z₁₃ = √‖L₁₁⁻¹(𝕍₀² − DGᵣ²)L₁₁⁻¹‖
         Z₁₄ = ‖V₀‖₁ / l₁₁(N),   l₁₁(N) = λ₁((N+1)f)² + 1
         φ(A, B, C, D) = min(max(A, D) + max(B, C), √(A² + B² + C² + D²))
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict

import numpy as np
from mpmath import iv

from convolution import conv_small, conv_small_plain, cos_conv, multiply
from d4fourier import D4Fourier, Sequence, sequence_on_boundary, weighted_derivative
from defect_coeffs import char_1d_boundary_coeffs, char_boundary_coeffs, e1_coeffs
from interval_linalg import opnorm2
from intervals import IntervalArray, fourth_root, iabs, imax, imin, is_interval, isqrt
from operators import linear_part, multiplication_operator
from utils import console_interval, ledger_header

# ------------------------------ building blocks ------------------------------

def similarity(K: IntervalArray, P: IntervalArray) -> IntervalArray:
    """P K P⁻¹ for a diagonal weight P given as a vector."""
    return P.reshape(-1, 1) * K * P.reciprocal().reshape(1, -1)

def weighted_opnorm(K: IntervalArray, P: IntervalArray):
    return opnorm2(similarity(K, P))

def inner_product(x: Sequence, y: Sequence):
    """|Σ multiplicity·xᵢyᵢ| over two sequences of the same space."""
    if type(x.space) is not type(y.space) or x.order != y.order:
        raise ValueError(f"inner product of mismatched sequences {x!r}, {y!r}")
    w = x.space.multiplicities
    xc = x.coefficients if x.is_interval else IntervalArray(x.coefficients)
    return iabs((xc * y.coefficients * w).sum())

def phi(A, B, C, D):
    """min(max(A, D) + max(B, C), √(A² + B² + C² + D²))."""
    if any(is_interval(t) for t in (A, B, C, D)):
        return imin(imax(A, D) + imax(B, C), isqrt(A ** 2 + B ** 2 + C ** 2 + D ** 2))
    return min(max(A, D) + max(B, C), float(np.sqrt(A ** 2 + B ** 2 + C ** 2 + D ** 2)))

def kappa2(lam1):
    return 1 / (2 * isqrt(lam1 * iv.pi))

def kappa2_periodic(lam1, d):
    return isqrt(1 / (4 * iv.pi * lam1) + 1 / (4 * d * d) + iv.pi / (2 * d * isqrt(lam1)))


@dataclass
class ProofOperators:
    space: D4Fourier
    lam1: Any
    d: Any
    d_exact: Any
    s0: Any
    char_prec: int
    U0: Sequence
    U0_sq: Sequence
    V0: Sequence
    L11: IntervalArray
    L11_inv: IntervalArray
    DG: IntervalArray
    B: IntervalArray
    M: IntervalArray
    U0_sq_op: IntervalArray
    P: IntervalArray
    norm_B: Any

    @property
    def N(self) -> int:
        return self.space.order

    @property
    def omega0(self):
        return (2 * self.d) ** 2

    @property
    def a1(self):
        return isqrt(1 / self.lam1)


def build_operators(U0: Sequence, config) -> ProofOperators:
    lam1 = config.interval("lambda1")
    d = config.interval("d")
    space = D4Fourier(U0.order, iv.pi / d)
    U0 = Sequence(space, U0.coefficients if U0.is_interval else IntervalArray(U0.coefficients))

    L11, L11_inv = linear_part(space, lam1)
    U0_sq = multiply(U0, U0)
    V0 = U0 * 2 - U0_sq * (3 * lam1)
    DG = multiplication_operator(V0, space)

    n = space.dimension
    B = IntervalArray(np.linalg.inv(np.eye(n) + DG.mid() * L11_inv.mid()[None, :]))
    M = IntervalArray.eye(n) + DG * L11_inv.reshape(1, -1)
    P = space.exp_weights()
    norm_B = isqrt(weighted_opnorm(B @ B.T, P))

    return ProofOperators(space=space, lam1=lam1, d=d, d_exact=config.d, s0=config.interval("s0"),
                          char_prec=config.char_prec, U0=U0, U0_sq=U0_sq, V0=V0,
                          L11=L11, L11_inv=L11_inv, DG=DG, B=B, M=M,
                          U0_sq_op=multiplication_operator(U0_sq, space), P=P, norm_B=norm_B)

# ---------------------------------- bounds -----------------------------------

def bound_Y0(ops: ProofOperators):
    N = ops.N
    U0_cu = conv_small(ops.U0_sq, ops.U0, 3 * N)
    G_tilde = ops.U0_sq - U0_cu * ops.lam1
    G = G_tilde.project(N)
    BLG = Sequence(ops.space, ops.B @ (ops.L11 * ops.U0.coefficients + G.coefficients))
    tail = G_tilde - G
    return isqrt(ops.omega0) * isqrt(BLG.norm(2) ** 2 + tail.norm(2) ** 2)

def bound_Z2(ops: ProofOperators, kappa):
    lam1 = ops.lam1
    t = weighted_opnorm(ops.B.T @ ops.U0_sq_op @ ops.B, ops.P)
    return (6 * lam1 * kappa * isqrt(t + ops.U0.norm(1) ** 2)
            + ops.norm_B * (2 * kappa + 3 * lam1 * kappa ** 2 * ops.s0))

def e1_inner_product(ops: ProofOperators):
    """⟨E₁V₀, V₀⟩ with E₁ of order 4N and the product truncated to 2N."""
    E1 = e1_coeffs(4 * ops.N, ops.d_exact, ops.a1)
    return inner_product(ops.V0, conv_small(E1, ops.V0, 2 * ops.N))

def bound_Zu1(ops: ProofOperators, inner_E1V0):
    a1 = ops.a1
    C0f11 = imax(a1 ** 2 * (2 * iv.exp(iv.mpf(5) / 4)) * fourth_root(2 / a1),
                 a1 ** 2 * isqrt(iv.pi / (2 * isqrt(a1))))
    return (isqrt(2) * C0f11 * (1 - iv.exp(-4 * a1 * ops.d)) * fourth_root(2 * iv.pi)
            / fourth_root(a1) ** 3 * isqrt(ops.omega0) * isqrt(inner_E1V0))

def boundary_constant(ops: ProofOperators):
    """C(V₀) from the three boundary inner products of V₀."""
    N2 = 2 * ops.N
    char = char_boundary_coeffs(2 * N2, ops.d_exact, prec=ops.char_prec)
    char1 = char_1d_boundary_coeffs(2 * N2, ops.d_exact, prec=ops.char_prec)

    V0_tilde = weighted_derivative(ops.V0)
    bip_d = inner_product(V0_tilde, conv_small_plain(char, V0_tilde, N2))
    bip_V = inner_product(conv_small(char, ops.V0, N2), ops.V0)
    V0_d = sequence_on_boundary(ops.V0)
    bip_Vd = inner_product(cos_conv(char1, V0_d, N2), V0_d)

    return isqrt(iv.mpf(1) / 8 * isqrt(bip_d) * isqrt(bip_V) + 1 / (2 * ops.d) / 4 * bip_Vd)

def bound_Zu2(ops: ProofOperators, inner_E1V0, CV0):
    a1, d, omega0 = ops.a1, ops.d, ops.omega0
    C11f11 = a1 ** 3 * isqrt(iv.pi / 2) / isqrt(a1 + 1) * (1 + 1 / a1)
    C12f11 = a1 ** 2 * isqrt(iv.pi / 2) * (isqrt(2) * a1 + 1)
    C1 = isqrt(d ** 2 / (16 * a1 ** 2 * iv.pi ** 5) + 1 / a1 ** 4 + d / a1 ** 3)
    cal_C11 = 2 * isqrt(omega0) * iv.exp(-a1 * d) * (C11f11 * iv.exp(-a1) + C12f11) / a1
    ln2 = iv.log(2)
    cal_C21 = 2 * isqrt(omega0) * C11f11 * isqrt(ln2 ** 2 + 2 * ln2 + 2)
    return 4 / isqrt(omega0) * C1 * (cal_C11 * isqrt(inner_E1V0) + cal_C21 * CV0)

def bound_Zu(Zu1, Zu2):
    return isqrt(Zu1 ** 2 + Zu2 ** 2)

def bound_Z1_parts(ops: ProofOperators) -> Dict[str, Any]:
    """Z₁₁, Z₁₂, Z₁₃, Z₁₄ and φ of them."""
    N, lam1 = ops.N, ops.lam1
    V0_sq_op = multiplication_operator(multiply(ops.V0, ops.V0), ops.space)
    W = V0_sq_op - ops.DG @ ops.DG
    l11N = ((N + 1) * iv.pi / ops.d) ** 2 * lam1 + 1

    Linv = ops.L11_inv
    I = IntervalArray.eye(ops.space.dimension)
    Z11 = isqrt(weighted_opnorm((I - ops.B @ ops.M) @ (I - ops.M.T @ ops.B.T), ops.P))
    Z12 = isqrt(weighted_opnorm(ops.B @ W @ ops.B.T, ops.P)) / l11N
    Z13 = isqrt(weighted_opnorm(Linv.reshape(-1, 1) * W * Linv.reshape(1, -1), ops.P))
    Z14 = ops.V0.norm(1) / l11N
    return {"Z11": Z11, "Z12": Z12, "Z13": Z13, "Z14": Z14, "phi": phi(Z11, Z12, Z13, Z14)}

# ----------------------------------- driver ----------------------------------

@dataclass
class ProofBounds:
    Y0: Any
    Z1: Any            # φ + ‖Bᵣ‖·Zᵤ
    Z2: Any            # finite domain
    Z2_periodic: Any
    Zu: Any
    Zu1: Any
    Zu2: Any
    Z11: Any
    Z12: Any
    Z13: Any
    Z14: Any
    phi: Any
    norm_B: Any
    kappa2: Any
    kappa2_periodic: Any
    CV0: Any

    def items(self):
        return [(f.name, getattr(self, f.name)) for f in fields(self)]


def compute_bounds(U0: Sequence, config, verbose: bool = False) -> ProofBounds:
    """All bounds of the proof for the projected approximate solution U0."""
    ops = build_operators(U0, config)
    if verbose:
        ledger_header("Bounds")
        console_interval("||B||", ops.norm_B)

    Y0 = bound_Y0(ops)
    k2 = kappa2(ops.lam1)
    k2p = kappa2_periodic(ops.lam1, ops.d)
    Z2 = bound_Z2(ops, k2)
    Z2p = bound_Z2(ops, k2p)
    if verbose:
        console_interval("Y0", Y0)
        console_interval("Z2", Z2)
        console_interval("Z2 (per.)", Z2p)

    inner = e1_inner_product(ops)
    CV0 = boundary_constant(ops)
    Zu1 = bound_Zu1(ops, inner)
    Zu2 = bound_Zu2(ops, inner, CV0)
    Zu = bound_Zu(Zu1, Zu2)
    if verbose:
        console_interval("Zu1", Zu1)
        console_interval("Zu2", Zu2)
        console_interval("Zu", Zu)

    parts = bound_Z1_parts(ops)
    Z1 = parts["phi"] + ops.norm_B * Zu
    if verbose:
        for name in ("Z11", "Z12", "Z13", "Z14"):
            console_interval(name, parts[name])
        console_interval("Z1", Z1)

    return ProofBounds(Y0=Y0, Z1=Z1, Z2=Z2, Z2_periodic=Z2p, Zu=Zu, Zu1=Zu1, Zu2=Zu2,
                       Z11=parts["Z11"], Z12=parts["Z12"], Z13=parts["Z13"], Z14=parts["Z14"],
                       phi=parts["phi"], norm_B=ops.norm_B, kappa2=k2, kappa2_periodic=k2p, CV0=CV0)

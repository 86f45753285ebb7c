#!/usr/bin/env python3
"""
Tests for the bound pipeline building blocks and a small end-to-end bound run.
"""

import sys
from fractions import Fraction
from pathlib import Path

import numpy as np
import pytest
from mpmath import iv

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boundary_trace import compatibility_projection, trace_operator
from bounds import (ProofBounds, build_operators, compute_bounds, inner_product, kappa2,
                    kappa2_periodic, phi, similarity, weighted_opnorm)
from convolution import conv_small, multiply
from d4fourier import CosFourier2, D4Fourier, Sequence, to_full
from intervals import IntervalArray, inf, sup
from newton import initial_guess
from operators import linear_part, multiplication_operator
from proof_config import ProofConfig


# ============================================================================
# φ and scalar constants
# ============================================================================

def test_phi_takes_the_smaller_of_two_bounds():
    """φ is the minimum of the block bound and the Frobenius-type bound"""
    assert phi(1.0, 0.0, 0.0, 0.0) == 1.0
    assert phi(3.0, 4.0, 0.0, 0.0) == pytest.approx(5.0)
    assert phi(0.1, 0.2, 0.3, 0.05) == pytest.approx(np.sqrt(0.01 + 0.04 + 0.09 + 0.0025))
    for A, B, C, D in [(0.3, 0.01, 0.02, 0.25), (1.0, 2.0, 3.0, 4.0)]:
        v = phi(A, B, C, D)
        assert v <= max(A, D) + max(B, C) + 1e-15
        assert v <= np.sqrt(A * A + B * B + C * C + D * D) + 1e-15


def test_phi_interval_encloses_float():
    """The interval φ contains the float φ"""
    args = (0.3, 0.01, 0.02, 0.25)
    v = phi(*(iv.mpf(a) for a in args))
    assert inf(v) <= phi(*args) <= sup(v)


def test_kappa_constants():
    """κ₂ = 1/(2√(λ₁π)); the periodic constant is larger"""
    lam1 = iv.mpf(1) / 9
    k = kappa2(lam1)
    ref = 3 / (2 * np.sqrt(np.pi))
    assert inf(k) <= ref + 1e-15 and sup(k) >= ref - 1e-15
    assert inf(kappa2_periodic(lam1, iv.mpf(4))) > sup(k)


# ============================================================================
# Weighted norms and inner products
# ============================================================================

def test_inner_product_is_the_lattice_sum():
    """⟨x, y⟩ with orbit weights equals Σ over the full lattice"""
    rng = np.random.default_rng(0)
    space = D4Fourier(3)
    x = Sequence(space, rng.standard_normal(space.dimension))
    y = Sequence(space, rng.standard_normal(space.dimension))
    ref = abs((to_full(x) * to_full(y)).sum())
    ip = inner_product(x, y)
    assert inf(ip) <= ref + 1e-12 and sup(ip) >= ref - 1e-12


def test_inner_product_rejects_mismatched_spaces():
    """Same space type and order only"""
    x = Sequence(D4Fourier(2), np.ones(6))
    y = Sequence(CosFourier2(2), np.ones(9))
    with pytest.raises(ValueError):
        inner_product(x, y)


def test_weighted_opnorm_of_identity_and_diagonal():
    """Similarity by a diagonal weight leaves diagonal matrices unchanged"""
    space = D4Fourier(3)
    P = space.exp_weights()
    n = weighted_opnorm(IntervalArray.eye(space.dimension), P)
    assert inf(n) <= 1.0 <= sup(n)
    K = IntervalArray(np.diag(np.arange(1.0, space.dimension + 1)))
    S = similarity(K, P)
    assert np.all(S.contains(np.diag(np.arange(1.0, space.dimension + 1))))


# ============================================================================
# Small bound run
# ============================================================================

@pytest.fixture(scope="module")
def small_run():
    config = ProofConfig(N=4, d=Fraction(2), lambda1=Fraction(1, 9), s0=Fraction(1, 2000))
    U = initial_guess(config.N, 2.0, 1 / 9)
    space = D4Fourier(config.N, iv.pi / config.interval("d"))
    _, L11_inv = linear_part(space, config.interval("lambda1"))
    U0 = compatibility_projection(Sequence(space, U.coefficients), L11_inv, trace_operator(config.N))
    return config, U0, compute_bounds(U0, config)


def test_operators_are_consistent(small_run):
    """V₀ has order 2N; Bᵣ approximately inverts Mᵣ"""
    config, U0, _ = small_run
    ops = build_operators(U0, config)
    assert ops.V0.order == 2 * config.N
    n = ops.space.dimension
    BM = ops.B.mid() @ ops.M.mid()
    assert np.allclose(BM, np.eye(n), atol=1e-10)
    assert inf(ops.norm_B) > 0


def test_all_bounds_are_finite_and_nonnegative(small_run):
    """Every enclosure is finite with a nonnegative lower end"""
    _, _, bounds = small_run
    assert isinstance(bounds, ProofBounds)
    for name, value in bounds.items():
        assert np.isfinite(inf(value)) and np.isfinite(sup(value)), name
        assert inf(value) >= 0.0, name


def test_bound_composition(small_run):
    """Z₁ = φ + ‖B‖Zᵤ, Zᵤ dominates its parts, periodic Z₂ dominates finite Z₂"""
    _, _, b = small_run
    assert sup(b.Z1) >= inf(b.phi)
    assert sup(b.Zu) >= inf(b.Zu1) and sup(b.Zu) >= inf(b.Zu2)
    assert sup(b.Z2_periodic) >= inf(b.Z2)
    assert sup(b.phi) <= sup(b.Z11) + sup(b.Z12) + sup(b.Z13) + sup(b.Z14)
    assert inf(b.Y0) > 0


# ============================================================================
# Enclosures contain the same computation done in floating point
# ============================================================================

def _float_bounds(config, U0, B):
    """Y₀, Z₁₄, Z₂ and the periodic Z₂ from mid(U₀) in plain float64."""
    N, lam1, d, s0 = config.N, float(config.lambda1), float(config.d), float(config.s0)
    space = D4Fourier(N, np.pi / d)
    U = Sequence(space, U0.coefficients.mid())
    L11, _ = linear_part(space, lam1)
    U_sq = multiply(U, U)
    V = U * 2 - U_sq * (3 * lam1)

    G_tilde = U_sq - conv_small(U_sq, U, 3 * N) * lam1
    G = G_tilde.project(N)
    BLG = Sequence(space, B @ (L11 * U.coefficients + G.coefficients))
    Y0 = 2 * d * np.sqrt(BLG.norm(2) ** 2 + (G_tilde - G).norm(2) ** 2)

    Z14 = V.norm(1) / (lam1 * ((N + 1) * np.pi / d) ** 2 + 1)

    P = np.sqrt(space.multiplicities.astype(float))
    def wnorm(K):
        return np.linalg.norm(P[:, None] * K / P[None, :], 2)
    norm_B = np.sqrt(wnorm(B @ B.T))
    t = wnorm(B.T @ multiplication_operator(U_sq, space) @ B)
    def Z2(kappa):
        return (6 * lam1 * kappa * np.sqrt(t + U.norm(1) ** 2)
                + norm_B * (2 * kappa + 3 * lam1 * kappa ** 2 * s0))
    k2 = 1 / (2 * np.sqrt(lam1 * np.pi))
    k2p = np.sqrt(1 / (4 * np.pi * lam1) + 1 / (4 * d * d) + np.pi / (2 * d * np.sqrt(lam1)))
    return {"Y0": Y0, "Z14": Z14, "Z2": Z2(k2), "Z2_periodic": Z2(k2p), "norm_B": norm_B}


def test_bounds_enclose_the_float_computation(small_run):
    """Each enclosure contains the float value of the same formula at mid(U₀)"""
    config, U0, b = small_run
    B = build_operators(U0, config).B.mid()
    for name, value in _float_bounds(config, U0, B).items():
        enclosure = getattr(b, name)
        assert inf(enclosure) <= value <= sup(enclosure), (name, inf(enclosure), value, sup(enclosure))

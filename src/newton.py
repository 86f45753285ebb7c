#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
newton.py — floating-point spike of  λ₁ΔU − U + U² − λ₁U³ = 0  in D₄ Fourier coefficients

STAGE
  Non-rigorous. Produces the approximate solution U₀ that the interval stage
  later projects and certifies; nothing here is trusted.

INITIAL GUESS
  ū(x, y) = 3 / (1 + Q cosh(√((x² + y²)/λ₁))),   Q = √(1 − 9λ₁/2),
  sampled on the (2N+1)² grid x = 2d/(2N+1)·(−N..N), then
  fftshift(fft2(ifftshift(ū))) / (2N+1)², real part, folded to D₄.

ITERATION
  F(U)  = π_N(λ₁ΔU − U + U² − λ₁U³)
  DF(U) = λ₁Δ + 2𝕌 − 3λ₁𝕌² − I          (𝕌, 𝕌² multiplication operators)
  U ← U − DF(U)⁻¹F(U)   while ‖F(U)‖∞ > tol and fewer than max_iter steps.
  An iterate whose ℓ¹ norm drops below 1e-5 has collapsed to the trivial
  solution; the run stops with status "degenerate".

USAGE
  python src/newton.py --N 20 --d 4 --lambda1 1/9
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np
import mpmath as mp

from convolution import conv_small, multiply
from d4fourier import Sequence, from_full
from operators import laplacian_diagonal, multiplication_operator
from utils import (console_show, default_json_out, ledger_header, make_meta,
                   parse_number, require, write_json)

DEGENERATE_NORM = 1e-5

@dataclass(frozen=True)
class NewtonResult:
    status: str              # "converged" | "degenerate" | "not_converged"
    solution: Sequence
    residual: float          # ‖F‖∞ measured before the last update
    iterations: int
    norm: float              # ℓ¹ norm of the returned iterate

    @property
    def ok(self) -> bool:
        return self.status == "converged"

def initial_guess(N: int, d: float, lam1: float) -> Sequence:
    """FFT bootstrap of the explicit radial profile."""
    d, lam1 = float(d), float(lam1)
    require(9 * lam1 / 2 < 1, f"initial guess needs 9*lambda1/2 < 1, got lambda1={lam1}")
    Q = np.sqrt(1 - 9 * lam1 / 2)
    x = 2 * d / (2 * N + 1) * np.arange(-N, N + 1)
    X, Y = np.meshgrid(x, x, indexing="ij")
    u = 3 / (1 + Q * np.cosh(np.sqrt((X ** 2 + Y ** 2) / lam1)))
    u_hat = np.fft.fftshift(np.fft.fft2(np.fft.ifftshift(u))) / (2 * N + 1) ** 2
    return from_full(u_hat.real, N, np.pi / d)

def residual(U: Sequence, lam1: float) -> Sequence:
    N = U.order
    U2 = multiply(U, U)
    U3 = conv_small(U2, U, N)
    lap = laplacian_diagonal(U.space)
    c = lam1 * lap * U.coefficients - U.coefficients + U2.project(N).coefficients - lam1 * U3.coefficients
    return Sequence(U.space, c)

def jacobian(U: Sequence, lam1: float) -> np.ndarray:
    space = U.space
    lap = laplacian_diagonal(space)
    U2 = multiply(U, U)
    return (np.diag(lam1 * lap)
            + 2 * multiplication_operator(U, space)
            - 3 * lam1 * multiplication_operator(U2, space)
            - np.eye(space.dimension))

def newton(U0: Sequence, max_iter: int, lam1: float, tol: float = 1e-14,
           verbose: bool = False) -> NewtonResult:
    """Newton's method from U0; the returned status tells whether the result is usable."""
    lam1 = float(lam1)
    U = U0.mid()
    eps = np.inf
    j = 0
    while eps > tol and j < max_iter:
        F = residual(U, lam1)
        DF = jacobian(U, lam1)
        U = Sequence(U.space, U.coefficients - np.linalg.solve(DF, F.coefficients))
        eps = F.norm(np.inf)
        nu = U.norm(1)
        j += 1
        if verbose:
            print(f"  iter {j:>3d} : ||F||_inf = {eps:.3e}   ||U||_1 = {nu:.6e}")
        if nu < DEGENERATE_NORM:
            return NewtonResult("degenerate", U, eps, j, nu)
    if j == 0:
        eps = residual(U, lam1).norm(np.inf)
    nu = U.norm(1)
    if nu < DEGENERATE_NORM:
        return NewtonResult("degenerate", U, eps, j, nu)
    status = "converged" if eps <= tol else "not_converged"
    return NewtonResult(status, U, eps, j, nu)

def main() -> None:
    ap = argparse.ArgumentParser(description="Newton stage of the spike proof (float arithmetic).")
    ap.add_argument("--N", type=int, default=20, help="Truncation order.")
    ap.add_argument("--d", type=str, default="4", help='Half-width of the domain ("p/q" or decimal).')
    ap.add_argument("--lambda1", type=str, default="1/9", help='lambda1 ("p/q" or decimal).')
    ap.add_argument("--max-iter", type=int, default=30, help="Iteration cap.")
    ap.add_argument("--tol", type=float, default=1e-14, help="Stop when ||F||_inf <= tol.")
    ap.add_argument("--json-out", type=str, default=None, help="Optional output path (default: outputs/newton.json)")
    args = ap.parse_args()

    pn_d = parse_number(args.d)
    pn_l = parse_number(args.lambda1)
    require(args.N >= 0, "N must be >= 0")

    ledger_header("Newton iteration (float stage)")
    console_show("N", None, args.N)
    console_show("d", pn_d.rational, pn_d.float)
    console_show("lambda1", pn_l.rational, pn_l.float)

    guess = initial_guess(args.N, float(pn_d.fraction), float(pn_l.fraction))
    result = newton(guess, args.max_iter, float(pn_l.fraction), tol=args.tol, verbose=True)

    console_show("status", result.status, result.iterations)
    console_show("||F||_inf", None, result.residual)
    console_show("||U0||_1", None, result.norm)
    print()

    coeffs: List[Dict[str, Any]] = [
        {"k": [k1, k2], "value": repr(float(c))}
        for (k1, k2), c in zip(result.solution.space.pairs(), result.solution.coefficients)
    ]
    out: Dict[str, Any] = {
        "meta": make_meta(__file__,
            description="Approximate D4 spike of the reduced Gray-Scott equation (Newton).",
            ethos_note="Float stage; certified later by spike_proof.py."),
        "inputs": {"N": args.N, "d": pn_d.rational, "lambda1": pn_l.rational,
                   "max_iter": args.max_iter, "tol": repr(args.tol)},
        "outputs": {
            "status": result.status,
            "iterations": result.iterations,
            "residual_inf": mp.nstr(mp.mpf(result.residual), 17),
            "norm_l1": mp.nstr(mp.mpf(result.norm), 17),
            "coefficients": coeffs,
        },
        "status": {"ok": result.ok},
    }
    out_path = default_json_out(args.json_out, __file__)
    write_json(out_path, out)
    print(f"Wrote JSON results to: {out_path}")

if __name__ == "__main__":
    main()

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
defect_coeffs.py — rigorous Fourier coefficients of the boundary/defect functions

WHAT THIS CERTIFIES (all in mpmath.iv at --char-prec bits, then rounded outward)
  With θ = π(1/(2d) − 1), f = π/d and sinc(x) = sin(πx)/(πx):

  char_boundary_coeffs   1_{𝒟₀²} restricted to D₄:
      χ(n₁, n₂) = Re Σ_{rotations} (1/4d²) e^{i n₁θ} e^{i n₂θ} sinc(n₁/2d) sinc(n₂/2d)
                = cos(n₁θ) cos(n₂θ) sinc(n₁/2d) sinc(n₂/2d) / d²
  char_1d_boundary_coeffs   1_{𝒟₀} as a cosine series:
      χ₁(n) = Re(c(n) + c(−n)),  c(n) = (1/2d) e^{inθ} sinc(n/2d)
            = cos(nθ) sinc(n/2d) / d
  e1_coeffs   E₁ of the Zᵤ bounds:
      E₁(n₁, n₂) = (1/8d)[(−1)^{n₁} δ_{n₂0} 4a₁/(4a₁² + (n₁f)²)
                         + (−1)^{n₂} δ_{n₁0} 4a₁/(4a₁² + (n₂f)²)]

USAGE
  python src/defect_coeffs.py --N 20 --d 4 --lambda1 1/9 --char-prec 80
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List

from mpmath import iv

from d4fourier import CosFourier, D4Fourier, Sequence, d4_index, weighted_derivative
from intervals import IntervalArray, iv_precision, to_interval
from utils import (console_interval, default_json_out, interval_payload, ledger_header,
                   make_meta, parse_number, require, write_json)

__all__ = ["char_boundary_coeffs", "char_1d_boundary_coeffs", "e1_coeffs", "weighted_derivative"]

def _sinc_table(order: int, di) -> List:
    """sinc(n/2d), n = 0..order, at the current iv precision."""
    out = [iv.mpf(1)]
    for n in range(1, order + 1):
        x = iv.pi * n / (2 * di)
        out.append(iv.sin(x) / x)
    return out

def _cos_table(order: int, theta) -> List:
    return [iv.cos(n * theta) for n in range(order + 1)]

def char_boundary_coeffs(order: int, d, prec: int = 80) -> Sequence:
    """D₄ coefficients of the indicator of the boundary strip region (order N)."""
    require(order >= 0, "order must be >= 0")
    with iv_precision(prec):
        di = to_interval(d)
        theta = iv.pi * (1 / (2 * di) - 1)
        s = _sinc_table(order, di)
        c = _cos_table(order, theta)
        d_sq = di * di
        values = [s[k1] * s[k2] * c[k1] * c[k2] / d_sq for k1, k2 in d4_index(order)]
        coeffs = IntervalArray.from_intervals(values)
    di = to_interval(d)
    return Sequence(D4Fourier(order, iv.pi / di), coeffs)

def char_1d_boundary_coeffs(order: int, d, prec: int = 80) -> Sequence:
    """Cosine coefficients of the 1-d indicator."""
    require(order >= 0, "order must be >= 0")
    with iv_precision(prec):
        di = to_interval(d)
        theta = iv.pi * (1 / (2 * di) - 1)
        s = _sinc_table(order, di)
        c = _cos_table(order, theta)
        coeffs = IntervalArray.from_intervals(c[n] * s[n] / di for n in range(order + 1))
    di = to_interval(d)
    return Sequence(CosFourier(order, iv.pi / di), coeffs)

def e1_coeffs(order: int, d, a1, prec: int = 53) -> Sequence:
    """D₄ coefficients of E₁ (only the axes k₂ = 0 and, by symmetry, k₁ = 0 are nonzero)."""
    require(order >= 0, "order must be >= 0")
    with iv_precision(prec):
        di = to_interval(d)
        a = to_interval(a1)
        f = iv.pi / di
        four_a = 4 * a
        four_a_sq = 4 * a * a

        def axis_term(n: int):
            return (-1) ** n * four_a / (four_a_sq + (n * f) ** 2)

        values = []
        for k1, k2 in d4_index(order):
            term = iv.mpf(0)
            if k2 == 0:
                term += axis_term(k1)
            if k1 == 0:
                term += axis_term(k2)
            values.append(term / (8 * di))
        coeffs = IntervalArray.from_intervals(values)
    return Sequence(D4Fourier(order, iv.pi / to_interval(d)), coeffs)

def main() -> None:
    ap = argparse.ArgumentParser(description="Rigorous boundary/defect Fourier coefficients (mpmath.iv).")
    ap.add_argument("--N", type=int, default=20, help="Truncation order of the proof.")
    ap.add_argument("--d", type=str, default="4", help='Half-width of the domain ("p/q" or decimal).')
    ap.add_argument("--lambda1", type=str, default="1/9", help='lambda1 (fixes a1 = sqrt(1/lambda1)).')
    ap.add_argument("--char-prec", type=int, default=80, help="iv working precision in bits.")
    ap.add_argument("--json-out", type=str, default=None, help="Optional output path (default: outputs/defect_coeffs.json)")
    args = ap.parse_args()

    pn_d = parse_number(args.d)
    pn_l = parse_number(args.lambda1)
    require(pn_d.fraction > 0 and pn_l.fraction > 0, "d and lambda1 must be > 0")

    N = args.N
    a1 = iv.sqrt(1 / to_interval(pn_l.fraction))
    char = char_boundary_coeffs(4 * N, pn_d.fraction, prec=args.char_prec)
    char1 = char_1d_boundary_coeffs(4 * N, pn_d.fraction, prec=args.char_prec)
    E1 = e1_coeffs(4 * N, pn_d.fraction, a1)

    ledger_header("Boundary / defect coefficients")
    for k in [(0, 0), (1, 0), (1, 1), (2, 1)]:
        if max(k) <= 4 * N:
            console_interval(f"char{k}", char[k], width=14)
    console_interval("char1d(0)", char1[0], width=14)
    console_interval("E1(0,0)", E1[(0, 0)], width=14)
    console_interval("||char||_1", char.norm(1), width=14)
    console_interval("||E1||_1", E1.norm(1), width=14)
    print()

    def ledger(seq: Sequence) -> List[Dict[str, Any]]:
        return [{"k": list(k) if isinstance(k, tuple) else [k], **interval_payload(seq[k])}
                for k in seq.space.pairs()]

    out: Dict[str, Any] = {
        "meta": make_meta(__file__,
            description="Interval Fourier coefficients of the boundary indicator functions and E1.",
            ethos_note="All values are outward-rounded enclosures."),
        "inputs": {"N": N, "d": pn_d.rational, "lambda1": pn_l.rational, "char_prec": args.char_prec},
        "outputs": {
            "char_boundary": ledger(char),
            "char_1d_boundary": ledger(char1),
            "E1_norm_l1": interval_payload(E1.norm(1)),
        },
        "status": {"ok": True},
    }
    out_path = default_json_out(args.json_out, __file__)
    write_json(out_path, out)
    print(f"Wrote JSON results to: {out_path}")

if __name__ == "__main__":
    main()

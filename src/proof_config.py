#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
proof_config.py — immutable run parameters of the spike proof

  N                truncation order of the D₄ series
  d                half-width of the square Ω₀ = (−d, d)²
  lambda1          λ₁ of the reduced Gray-Scott equation (λ₁γ = 1)
  s0               radius at which the radii polynomial is evaluated
  newton_max_iter  cap on Newton iterations (float stage)
  newton_tol       stop once ‖F(U)‖∞ ≤ newton_tol
  char_prec        bits of iv precision for the boundary/defect coefficients
  gamma            optional γ; if given, λ₁·γ must equal 1 exactly

d, lambda1, s0 and gamma are exact Fractions; a stage asks for either a rigorous
enclosure (`interval`) or plain floats (`floats`).
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, Optional

from intervals import from_fraction
from utils import parse_number, require

def _exact(value) -> Fraction:
    if isinstance(value, Fraction):
        return value
    if isinstance(value, str):
        return parse_number(value).fraction
    return Fraction(value)


@dataclass(frozen=True)
class ProofConfig:
    N: int = 20
    d: Fraction = Fraction(4)
    lambda1: Fraction = Fraction(1, 9)
    s0: Fraction = Fraction(1, 2000)
    newton_max_iter: int = 30
    newton_tol: float = 1e-14
    char_prec: int = 80
    gamma: Optional[Fraction] = None

    def __post_init__(self) -> None:
        for name in ("d", "lambda1", "s0"):
            object.__setattr__(self, name, _exact(getattr(self, name)))
        if self.gamma is not None:
            object.__setattr__(self, "gamma", _exact(self.gamma))

        require(isinstance(self.N, int) and self.N >= 0, f"N must be a nonnegative integer, got {self.N!r}")
        require(self.d > 0, f"d must be > 0, got {self.d}")
        require(self.lambda1 > 0, f"lambda1 must be > 0, got {self.lambda1}")
        require(self.s0 > 0, f"s0 must be > 0, got {self.s0}")
        require(self.newton_max_iter >= 0, "newton_max_iter must be >= 0")
        require(self.newton_tol > 0, "newton_tol must be > 0")
        require(self.char_prec >= 53, "char_prec must be at least 53 bits")
        if self.gamma is not None:
            require(self.lambda1 * self.gamma == 1,
                    f"reduced model needs lambda1*gamma = 1, got {self.lambda1}*{self.gamma}")

    def interval(self, name: str):
        """iv.mpf enclosure of an exact parameter ("d", "lambda1", "s0", "gamma")."""
        value = getattr(self, name)
        require(isinstance(value, Fraction), f"{name} is not an exact parameter")
        return from_fraction(value)

    def floats(self) -> Dict[str, float]:
        return {"d": float(self.d), "lambda1": float(self.lambda1), "s0": float(self.s0)}

    def as_payload(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "N": self.N,
            "d": f"{self.d.numerator}/{self.d.denominator}",
            "lambda1": f"{self.lambda1.numerator}/{self.lambda1.denominator}",
            "s0": f"{self.s0.numerator}/{self.s0.denominator}",
            "newton_max_iter": self.newton_max_iter,
            "newton_tol": repr(self.newton_tol),
            "char_prec": self.char_prec,
        }
        if self.gamma is not None:
            out["gamma"] = f"{self.gamma.numerator}/{self.gamma.denominator}"
        return out

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ProofConfig":
        return cls(
            N=args.N,
            d=parse_number(args.d).fraction,
            lambda1=parse_number(args.lambda1).fraction,
            s0=parse_number(getattr(args, "s0", "0.0005")).fraction,
            newton_max_iter=args.newton_max_iter,
            char_prec=getattr(args, "char_prec", 80),
            gamma=parse_number(args.gamma).fraction if getattr(args, "gamma", None) else None,
        )

def add_config_arguments(ap: argparse.ArgumentParser) -> None:
    """Shared CLI flags of the proof scripts."""
    ap.add_argument("--N", type=int, default=20, help="Truncation order of the D4 series.")
    ap.add_argument("--d", type=str, default="4", help='Half-width of the square ("p/q" or decimal).')
    ap.add_argument("--lambda1", type=str, default="1/9", help='lambda1 = 1/gamma ("p/q" or decimal).')
    ap.add_argument("--gamma", type=str, default=None, help="Optional gamma; must satisfy lambda1*gamma = 1.")
    ap.add_argument("--s0", type=str, default="0.0005", help="Radius of the radii-polynomial check.")
    ap.add_argument("--newton-max-iter", type=int, default=30, help="Cap on Newton iterations.")
    ap.add_argument("--char-prec", type=int, default=80, help="iv bits for boundary/defect coefficients.")
    ap.add_argument("--json-out", type=str, default=None, help="Optional output path.")

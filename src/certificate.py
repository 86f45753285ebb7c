#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
certificate.py — radii polynomial verdict from (Y₀, Z₁, Z₂, s₀)

  1. Z₁ + Z₂s₀ must be certainly < 1; otherwise the linear term is not
     contractive ("Z1 too large" when even inf Z₁ > 1).
  2. q(s₀) = ½Z₂s₀² − (1 − Z₁)s₀ + Y₀ must be certainly < 0.
  On success, the existence interval [s_min, s_max] is reported whenever the
  discriminant (1 − Z₁)² − 2Y₀Z₂ is certainly positive:
      s_min = sup((1 − Z₁ − √disc)/Z₂)
      s_max = min(inf((1 − Z₁ + √disc)/Z₂), inf((1 − Z₁)/Z₂))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from intervals import inf, isqrt, mid, sup, to_interval

@dataclass(frozen=True)
class CertificateResult:
    ok: bool
    reason: str
    s0: float
    s_min: Optional[float] = None
    s_max: Optional[float] = None

    def message(self) -> str:
        if self.ok:
            return f"proof successful for s0 = {self.s0:.6g}"
        return f"proof failed ({self.reason})"

def existence_interval(Y0, Z1, Z2):
    """(s_min, s_max) floats, or (None, None) if the discriminant is not certainly positive."""
    one_minus = 1 - Z1
    disc = one_minus ** 2 - 2 * Y0 * Z2
    if not inf(disc) > 0 or not inf(Z2) > 0:
        return None, None
    root = isqrt(disc)
    s_min = sup((one_minus - root) / Z2)
    s_max = min(inf((one_minus + root) / Z2), inf(one_minus / Z2))
    return s_min, s_max

def radii_polynomial_check(Y0, Z1, Z2, s0) -> CertificateResult:
    Y0, Z1, Z2, s0 = (to_interval(x) for x in (Y0, Z1, Z2, s0))
    s0_f = mid(s0)
    if not sup(Z1 + Z2 * s0) < 1:
        reason = "Z1 too large" if inf(Z1) > 1 else "linear term non-contractive"
        return CertificateResult(False, reason, s0_f)
    q = Z2 * s0 ** 2 / 2 - (1 - Z1) * s0 + Y0
    if not sup(q) < 0:
        return CertificateResult(False, "2*Y0*Z2 >= (1-Z1)^2", s0_f)
    s_min, s_max = existence_interval(Y0, Z1, Z2)
    return CertificateResult(True, "radii polynomial negative at s0", s0_f, s_min, s_max)

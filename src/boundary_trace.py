#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
boundary_trace.py — boundary trace of a D₄ series and the compatibility projection

TRACE
  The value of u(x₁, d) as a cosine series in x₁ is, row by row,
      (𝒯U)[n₁] = Σ_{n₂=0..N} α(fold(n₁, n₂))·(−1)^{n₂}·U[fold(n₁, n₂)]
  with the orbit weights
      α(0,0) = 1,  α(k,k) = 4 (k ≠ 0),  α(k,0) = 2 (k ≠ 0),  α = 4 otherwise.

PROJECTION
  U ↦ U − L₁₁⁻¹𝒯ᵀ(𝒯L₁₁⁻¹𝒯ᵀ)⁻¹𝒯U
  in interval arithmetic, so that 𝒯U = 0 holds for the (exact) projected
  coefficients. The (N+1)×(N+1) system is enclosed by a verified inverse; if it
  cannot be verified the correction is undefined and ProjectionError is raised.
"""

from __future__ import annotations

import numpy as np

from d4fourier import Sequence, d4_index, fold
from interval_linalg import verified_inverse
from intervals import IntervalArray


class ProjectionError(RuntimeError):
    """𝒯L₁₁⁻¹𝒯ᵀ could not be verified invertible."""


def alpha(k1: int, k2: int) -> int:
    if k1 == 0 and k2 == 0:
        return 1
    if k1 == k2:
        return 4
    if k2 == 0:
        return 2
    return 4

def trace_operator(order: int) -> np.ndarray:
    """(N+1) × dim matrix of the trace on x₂ = d."""
    idx = d4_index(order)
    S = np.zeros((order + 1, idx.dimension))
    for n1 in range(order + 1):
        for n2 in range(order + 1):
            k = fold(n1, n2)
            S[n1, idx.offset(*k)] = alpha(*k) * (-1) ** n2
    return S

def compatibility_projection(U: Sequence, L11_inv: IntervalArray, T: np.ndarray) -> Sequence:
    """Interval enclosure of the projection of U onto ker 𝒯."""
    c = U.coefficients if U.is_interval else IntervalArray(U.coefficients)
    scaled_T = L11_inv.reshape(-1, 1) * T.T                 # L₁₁⁻¹𝒯ᵀ
    system = T @ scaled_T                                   # 𝒯L₁₁⁻¹𝒯ᵀ
    try:
        system_inv = verified_inverse(system)
    except np.linalg.LinAlgError as e:
        raise ProjectionError(f"trace system is not verifiably invertible: {e}") from e
    w = system_inv @ (T @ c)
    return Sequence(U.space, c - scaled_T @ w)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
operators.py — matrices of the linear pieces acting on a D₄ space of order N

  laplacian_diagonal(space)         Δ on cos(k₁fx)cos(k₂fy):  −f²(k₁² + k₂²)
  linear_part(space, λ₁)            L₁₁ = λ₁Δ − 1 (diagonal) and its inverse
  multiplication_operator(v, space) π_N ∘ (w ↦ v·w) restricted to the space:
        M[i, k] = Σ_{n ∈ orbit(k)} v[fold(i − n)]      (0 where |i − n| > order(v))

A column sums over the whole D₄ orbit of k because one stored coefficient w[k]
stands for every lattice coefficient in that orbit.
"""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from d4fourier import D4Fourier, Sequence
from intervals import IntervalArray, is_interval

def orbit(k1: int, k2: int) -> List[Tuple[int, int]]:
    """Distinct lattice points of the D₄ orbit of (k₁, k₂)."""
    pts = {(s1 * a, s2 * b) for a, b in ((k1, k2), (k2, k1)) for s1 in (1, -1) for s2 in (1, -1)}
    return sorted(pts)

def laplacian_diagonal(space: D4Fourier):
    """Diagonal of Δ; an IntervalArray when the frequency is an interval."""
    idx = space.index
    k_sq = (idx.k1 ** 2 + idx.k2 ** 2).astype(float)
    f = space.frequency
    if is_interval(f):
        return IntervalArray(-k_sq) * (f * f)
    return -(float(f) ** 2) * k_sq

def linear_part(space: D4Fourier, lam1):
    """(L₁₁, L₁₁⁻¹) as diagonals: L₁₁ = λ₁Δ − 1."""
    lap = laplacian_diagonal(space)
    if isinstance(lap, IntervalArray):
        L11 = lap * lam1 - 1.0
        return L11, L11.reciprocal()
    L11 = float(lam1) * lap - 1.0
    return L11, 1.0 / L11

def _masked(c, valid):
    if isinstance(c, IntervalArray):
        return c.where(valid)
    return np.where(valid, c, 0.0)

def multiplication_operator(v: Sequence, space: D4Fourier):
    """Matrix (dim × dim) of w ↦ π_space(v·w) in canonical coordinates."""
    idx = space.index
    vidx = v.space.index
    columns = []
    for k1, k2 in idx:
        col = None
        for n1, n2 in orbit(k1, k2):
            d1 = np.abs(idx.k1 - n1)
            d2 = np.abs(idx.k2 - n2)
            valid = np.maximum(d1, d2) <= v.order
            offs = vidx.canonical_offsets(np.where(valid, d1, 0), np.where(valid, d2, 0))
            term = _masked(v.coefficients[offs], valid)
            col = term if col is None else col + term
        columns.append(col)
    if isinstance(v.coefficients, IntervalArray):
        return IntervalArray.stack(columns, axis=1)
    return np.stack(columns, axis=1)

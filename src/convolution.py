#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
convolution.py — truncated products of symmetric cosine series

WHAT THIS COMPUTES
  For D₄ sequences u (order oᵤ) and v (order oᵥ) the product w = u·v has order
  oᵤ + oᵥ and, for a canonical index i,
      w[i] = Σ_j u[fold(i − j)] · v[fold(j)],
  where only j with |j₁|, |j₂| ≤ oᵥ and |i₁ − j₁|, |i₂ − j₂| ≤ oᵤ contribute:
      j₁ ∈ [max(i₁ − oᵤ, −oᵥ), min(i₁ + oᵤ, oᵥ)]   (j₂ likewise).
  `conv_small` evaluates w only on the canonical indices of order ≤ N, so the
  cost is driven by the target order and never by the full product.

  conv_small_plain  D₄ × CosFourier2 → CosFourier2 (v looked up at (|j₁|,|j₂|))
  cos_conv          1-d cosine series:  (a·b)[n] = Σ_m a[|n − m|] b[|m|]

NUMERICS
  Each target coefficient is one gathered dot product: numpy.dot for float
  sequences, element-wise outward-rounded products + exact fsum for intervals.
"""

from __future__ import annotations

import numpy as np

from d4fourier import CosFourier, CosFourier2, D4Fourier, Sequence
from intervals import dot, stack_scalars

def _window(i: int, ou: int, ov: int) -> np.ndarray:
    return np.arange(max(i - ou, -ov), min(i + ou, ov) + 1)

def conv_small(u: Sequence, v: Sequence, order: int) -> Sequence:
    """π_order(u·v) for two D₄ sequences."""
    ou, ov = u.order, v.order
    space = D4Fourier(order, u.space.frequency)
    iu, iv_ = u.space.index, v.space.index
    values = []
    for i1, i2 in space.pairs():
        j1, j2 = np.meshgrid(_window(i1, ou, ov), _window(i2, ou, ov), indexing="ij")
        tu = iu.canonical_offsets(i1 - j1, i2 - j2).ravel()
        tv = iv_.canonical_offsets(j1, j2).ravel()
        values.append(dot(u.coefficients[tu], v.coefficients[tv]))
    return Sequence(space, stack_scalars(values))

def conv_small_plain(u: Sequence, v: Sequence, order: int) -> Sequence:
    """π_order(u·v) for u ∈ D₄ and v ∈ CosFourier2; the result is a CosFourier2 sequence."""
    ou, ov = u.order, v.order
    space = CosFourier2(order, v.space.frequency)
    iu = u.space.index
    values = []
    for i1, i2 in space.pairs():
        j1, j2 = np.meshgrid(_window(i1, ou, ov), _window(i2, ou, ov), indexing="ij")
        tu = iu.canonical_offsets(i1 - j1, i2 - j2).ravel()
        tv = v.space.offsets(j1, j2).ravel()
        values.append(dot(u.coefficients[tu], v.coefficients[tv]))
    return Sequence(space, stack_scalars(values))

def cos_conv(a: Sequence, b: Sequence, order: int) -> Sequence:
    """π_order(a·b) for 1-d cosine series."""
    oa, ob = a.order, b.order
    values = []
    for n in range(order + 1):
        m = _window(n, oa, ob)
        values.append(dot(a.coefficients[np.abs(n - m)], b.coefficients[np.abs(m)]))
    return Sequence(CosFourier(order, a.space.frequency), stack_scalars(values))

def multiply(u: Sequence, v: Sequence) -> Sequence:
    """Full product u·v of two D₄ sequences (order oᵤ + oᵥ)."""
    return conv_small(u, v, u.order + v.order)

def square(u: Sequence) -> Sequence:
    return conv_small(u, u, 2 * u.order)

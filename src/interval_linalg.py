#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
interval_linalg.py — verified spectral norm and verified inverse of interval matrices

WHAT THIS CERTIFIES
  opnorm2(A)
    For every real matrix Â ∈ A, ‖Â‖₂ ∈ opnorm2(A).
    With an approximate SVD  mid(A) ≈ U Σ Vᵀ  and the interval matrix D = Uᵀ A V:
        δ_U ≥ ‖UᵀU − I‖₂,   δ_V ≥ ‖VᵀV − I‖₂        (via √(‖·‖₁‖·‖∞))
        ‖D‖₂ ≤ max_i |D_ii| + √(‖D_off‖₁ ‖D_off‖∞)
        ‖A‖₂ ≤ ‖D‖₂ / √((1−δ_U)(1−δ_V))
        ‖A‖₂ ≥ |D_00| / √((1+δ_U)(1+δ_V))
    When the orthogonality defect is not < 1 the crude bound √(‖A‖₁‖A‖∞) is used.

  verified_inverse(A)
    R ≈ mid(A)⁻¹,  E = I − R A,  e ≥ ‖E‖∞.  If e < 1 then every Â ∈ A is
    invertible and |Â⁻¹ − R| ≤ e‖R‖∞ / (1 − e) entry-wise.

NOTES
  The SVD and the approximate inverse are plain numpy floats; everything that
  turns them into bounds is outward rounded.
"""

from __future__ import annotations

import numpy as np
from mpmath import iv

from intervals import IntervalArray, hull, inf, iabs, isqrt, sup

_EPS = float(np.finfo(float).eps)

def _upper_abs_sum(M: np.ndarray, axis: int) -> np.ndarray:
    """Upper bounds of Σ|M| along axis for a nonnegative float matrix."""
    n = M.shape[axis]
    s = M.sum(axis=axis)
    return np.nextafter(s * (1.0 + (n + 2) * _EPS) + (n + 2) * float(np.finfo(float).tiny), np.inf)

def norm_inf_upper(A) -> float:
    """Upper bound of the ∞-norm (max row sum)."""
    M = A.mag() if isinstance(A, IntervalArray) else np.abs(np.asarray(A, dtype=float))
    return float(_upper_abs_sum(M, axis=1).max()) if M.size else 0.0

def norm_1_upper(A) -> float:
    """Upper bound of the 1-norm (max column sum)."""
    M = A.mag() if isinstance(A, IntervalArray) else np.abs(np.asarray(A, dtype=float))
    return float(_upper_abs_sum(M, axis=0).max()) if M.size else 0.0

def _holder_bound(A):
    """√(‖A‖₁‖A‖∞) as an iv.mpf upper bound of ‖A‖₂."""
    return iv.sqrt(iv.mpf(norm_1_upper(A)) * norm_inf_upper(A))

def opnorm2(A: IntervalArray):
    """Rigorous enclosure of the spectral norm of a square or rectangular interval matrix."""
    if A.size == 0:
        return iv.mpf(0)
    U, _, Vt = np.linalg.svd(A.mid())
    V = Vt.T
    D = U.T @ A @ V

    k = min(D.shape)
    Iu = IntervalArray.eye(U.shape[1])
    Iv = IntervalArray.eye(V.shape[1])
    dU = _holder_bound(U.T @ IntervalArray(U) - Iu)
    dV = _holder_bound(V.T @ IntervalArray(V) - Iv)

    diag = np.arange(k)
    diag_max = float(D.mag()[diag, diag].max())
    off = D.copy()
    off[diag, diag] = 0.0
    norm_D = iv.mpf(diag_max) + _holder_bound(off)

    crude = _holder_bound(A)
    if sup(dU) < 1 and sup(dV) < 1:
        upper = norm_D / isqrt((1 - dU) * (1 - dV))
        upper = iv.mpf(min(sup(upper), sup(crude)))
    else:
        upper = crude

    d00 = iabs(D.item((0, 0)))
    lower = d00 / iv.sqrt((1 + dU) * (1 + dV))
    lo = max(inf(lower), 0.0)
    return hull(min(lo, sup(upper)), sup(upper))

def verified_inverse(A: IntervalArray) -> IntervalArray:
    """Interval matrix containing the inverse of every matrix in A."""
    n, m = A.shape
    if n != m:
        raise ValueError(f"verified_inverse needs a square matrix, got {A.shape}")
    R = np.linalg.inv(A.mid())
    E = IntervalArray.eye(n) - R @ A
    e = norm_inf_upper(E)
    if not e < 1.0:
        raise np.linalg.LinAlgError(
            f"Cannot verify the inverse: ‖I − RA‖∞ ≤ {e:.3e} is not < 1")
    delta = sup(iv.mpf(norm_inf_upper(R)) * e / (1 - iv.mpf(e)))
    return IntervalArray(R) + IntervalArray(np.full((n, n), -delta), np.full((n, n), delta))

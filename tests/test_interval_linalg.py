#!/usr/bin/env python3
"""
Tests for the verified spectral norm and the verified inverse.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from interval_linalg import norm_1_upper, norm_inf_upper, opnorm2, verified_inverse
from intervals import IntervalArray, inf, sup


# ============================================================================
# opnorm2
# ============================================================================

def test_opnorm2_encloses_spectral_norm():
    """The enclosure is tight and contains the singular value computed by numpy"""
    rng = np.random.default_rng(2)
    A = rng.standard_normal((12, 12))
    s = np.linalg.norm(A, 2)
    n = opnorm2(IntervalArray(A))
    assert inf(n) <= s * (1 + 1e-12)
    assert sup(n) >= s * (1 - 1e-12)
    assert sup(n) - inf(n) < 1e-9 * s


def test_opnorm2_of_diagonal_matrix():
    """‖diag(3, −5, 1)‖₂ = 5"""
    n = opnorm2(IntervalArray(np.diag([3.0, -5.0, 1.0])))
    assert inf(n) <= 5.0 <= sup(n)
    assert sup(n) < 5.0 + 1e-12


def test_opnorm2_covers_every_member_of_a_wide_matrix():
    """Upper bound holds for the worst member of the interval matrix"""
    A = IntervalArray([[1.0, 0.0], [0.0, 1.0]], [[2.0, 0.0], [0.0, 1.0]])
    n = opnorm2(A)
    assert sup(n) >= 2.0
    assert inf(n) <= 1.0


def test_norm_upper_bounds():
    """1- and ∞-norm upper bounds dominate the exact values"""
    A = np.array([[1.0, -2.0], [3.0, 4.0]])
    assert norm_1_upper(A) >= 6.0
    assert norm_inf_upper(A) >= 7.0


# ============================================================================
# verified_inverse
# ============================================================================

def test_verified_inverse_contains_the_inverse():
    """A·X ∋ I for the enclosure X of A⁻¹"""
    rng = np.random.default_rng(3)
    A = rng.standard_normal((8, 8)) + 8 * np.eye(8)
    X = verified_inverse(IntervalArray(A))
    prod = IntervalArray(A) @ X
    assert np.all(prod.contains(np.eye(8)))
    assert np.all(X.hi - X.lo < 1e-12)


def test_verified_inverse_of_singular_matrix_raises():
    """An exactly singular midpoint cannot be verified"""
    A = IntervalArray(np.array([[1.0, 2.0], [2.0, 4.0]]))
    with pytest.raises(np.linalg.LinAlgError):
        verified_inverse(A)


def test_verified_inverse_rejects_non_square():
    """Only square matrices have inverses"""
    with pytest.raises(ValueError):
        verified_inverse(IntervalArray(np.ones((2, 3))))

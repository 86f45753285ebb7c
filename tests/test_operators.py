#!/usr/bin/env python3
"""
Tests for the Laplacian, the linear part and the multiplication operator.
"""

import sys
from fractions import Fraction
from pathlib import Path

import numpy as np
import pytest
from mpmath import iv

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from convolution import conv_small
from d4fourier import D4Fourier, Sequence
from intervals import IntervalArray
from operators import laplacian_diagonal, linear_part, multiplication_operator, orbit


def test_orbit_sizes():
    """1, 4, 4, 8 distinct lattice points"""
    assert orbit(0, 0) == [(0, 0)]
    assert len(orbit(2, 0)) == 4
    assert len(orbit(3, 3)) == 4
    assert len(orbit(3, 1)) == 8


def test_laplacian_diagonal():
    """−f²(k₁² + k₂²)"""
    space = D4Fourier(2, 0.5)
    lap = laplacian_diagonal(space)
    assert lap[space.lookup((2, 1))] == pytest.approx(-0.25 * 5)
    lap_iv = laplacian_diagonal(D4Fourier(2, iv.pi / 4))
    assert isinstance(lap_iv, IntervalArray)
    k = space.lookup((1, 1))
    exact = -2 * (np.pi / 4) ** 2
    assert lap_iv.lo[k] <= exact + 1e-12 and lap_iv.hi[k] >= exact - 1e-12
    assert lap_iv.hi[k] - lap_iv.lo[k] < 1e-12


def test_linear_part_and_inverse():
    """L₁₁ = λ₁Δ − 1 is negative definite and its inverse is the reciprocal"""
    space = D4Fourier(3, 1.0)
    L, Linv = linear_part(space, 0.25)
    assert np.all(L <= -1.0)
    assert np.allclose(L * Linv, 1.0)
    Li, Linv_i = linear_part(D4Fourier(3, iv.pi / 4), Fraction(1, 9))
    prod = Li * Linv_i
    assert np.all(prod.contains(np.ones(space.dimension)))


def test_multiplication_operator_matches_truncated_product():
    """M(v)·w = π_N(v·w) for every w of order N"""
    rng = np.random.default_rng(0)
    space = D4Fourier(4)
    v = Sequence(D4Fourier(6), rng.standard_normal(D4Fourier(6).dimension))
    w = Sequence(space, rng.standard_normal(space.dimension))
    M = multiplication_operator(v, space)
    assert M.shape == (space.dimension, space.dimension)
    assert np.allclose(M @ w.coefficients, conv_small(v, w, 4).coefficients, atol=1e-12)


def test_multiplication_operator_interval_encloses_float():
    """Interval entries contain the float operator"""
    rng = np.random.default_rng(1)
    v = Sequence(D4Fourier(3), rng.standard_normal(D4Fourier(3).dimension))
    space = D4Fourier(2)
    M = multiplication_operator(v, space)
    Mi = multiplication_operator(v.interval(), space)
    assert isinstance(Mi, IntervalArray)
    assert np.all(Mi.lo <= M + 1e-13) and np.all(Mi.hi >= M - 1e-13)


def test_multiplication_by_constant_is_scaled_identity():
    """v = c·1 gives c·I"""
    v = Sequence(D4Fourier(0), np.array([2.5]))
    M = multiplication_operator(v, D4Fourier(3))
    assert np.allclose(M, 2.5 * np.eye(D4Fourier(3).dimension))

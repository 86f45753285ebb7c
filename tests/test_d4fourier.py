#!/usr/bin/env python3
"""
Tests for the D₄ index bijection, the spaces and Sequence arithmetic.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from d4fourier import (CosFourier, CosFourier2, D4Fourier, D4Index, Sequence, fold,
                       from_full, sequence_on_boundary, to_full, weighted_derivative)
from intervals import IntervalArray, inf, sup


def _random(order, seed=0):
    rng = np.random.default_rng(seed)
    space = D4Fourier(order)
    return Sequence(space, rng.standard_normal(space.dimension))


# ============================================================================
# Index bijection
# ============================================================================

@pytest.mark.parametrize("N", [0, 1, 2, 5, 20])
def test_index_is_a_bijection(N):
    """No two canonical pairs share an offset and pair() inverts offset()"""
    idx = D4Index(N)
    assert idx.dimension == (N + 1) * (N + 2) // 2
    offsets = [idx.offset(k1, k2) for k1, k2 in idx]
    assert offsets == list(range(idx.dimension))
    for off in range(idx.dimension):
        assert idx.offset(*idx.pair(off)) == off


def test_storage_order():
    """k₂ outer, k₁ inner"""
    assert list(D4Index(2)) == [(0, 0), (1, 0), (2, 0), (1, 1), (2, 1), (2, 2)]


def test_canonical_offsets_fold_any_pair():
    """(−3, 1), (1, 3), (3, −1) all land on (3, 1)"""
    idx = D4Index(4)
    target = idx.offset(3, 1)
    assert list(idx.canonical_offsets([-3, 1, 3], [1, 3, -1])) == [target] * 3
    assert fold(-1, 4) == (4, 1)


def test_offset_rejects_non_canonical_pairs():
    """Only 0 ≤ k₂ ≤ k₁ ≤ N are stored"""
    idx = D4Index(3)
    with pytest.raises(IndexError):
        idx.offset(1, 2)
    with pytest.raises(IndexError):
        idx.offset(4, 0)
    with pytest.raises(IndexError):
        idx.pair(idx.dimension)


def test_multiplicities():
    """Orbit sizes 1, 4, 4, 8; CosFourier2 1, 2, 4; CosFourier 1, 2"""
    m = D4Fourier(2).multiplicities
    assert list(m) == [1, 4, 4, 4, 8, 4]
    assert list(CosFourier2(1).multiplicities) == [1, 2, 2, 4]
    assert list(CosFourier(3).multiplicities) == [1, 2, 2, 2]
    P = D4Fourier(2).exp_weights()
    assert inf(P.item(4)) <= np.sqrt(8) <= sup(P.item(4))


# ============================================================================
# Sequences
# ============================================================================

def test_lookup_is_symmetric():
    """u[(n₁, n₂)] is invariant under the D₄ action"""
    u = _random(4)
    assert u[(3, 1)] == u[(-1, 3)] == u[(1, -3)] == u[(-3, -1)]


def test_full_round_trip():
    """Symmetric full arrays survive to_full ∘ from_full exactly (and vice versa)"""
    u = _random(5, seed=1)
    F = to_full(u)
    assert np.array_equal(F, F.T)
    assert np.array_equal(F, F[::-1, :])
    v = from_full(F, 5)
    assert np.array_equal(v.coefficients, u.coefficients)
    assert np.array_equal(to_full(v), F)


def test_project_truncates_and_pads():
    """Padding inserts zeros; truncation keeps the low modes"""
    u = _random(3, seed=2)
    up = u.project(6)
    assert up.order == 6
    assert up[(3, 2)] == u[(3, 2)]
    assert up[(5, 1)] == 0.0
    assert np.array_equal(up.project(3).coefficients, u.coefficients)


def test_sum_aligns_orders():
    """u + v has the larger order"""
    u, v = _random(2, seed=3), _random(4, seed=4)
    w = u + v
    assert w.order == 4
    assert w[(1, 1)] == pytest.approx(u[(1, 1)] + v[(1, 1)])
    assert w[(4, 0)] == v[(4, 0)]
    assert (v - v).norm(np.inf) == 0.0


def test_weighted_norms_match_full_lattice_sums():
    """The orbit weights turn D₄ norms into plain sums over the lattice"""
    u = _random(4, seed=5)
    F = to_full(u)
    assert u.norm(1) == pytest.approx(np.abs(F).sum())
    assert u.norm(2) == pytest.approx(np.sqrt((F ** 2).sum()))
    assert u.norm(np.inf) == pytest.approx(np.abs(F).max())


def test_interval_norms_enclose_float_norms():
    """Interval norms contain the float values"""
    u = _random(3, seed=6)
    ui = u.interval()
    for p in (1, 2, np.inf):
        n = ui.norm(p)
        assert inf(n) <= u.norm(p) * (1 + 1e-14) and sup(n) >= u.norm(p) * (1 - 1e-14)


def test_scalar_multiplication_only():
    """Sequence × Sequence is a convolution, not an element-wise product"""
    u = _random(2)
    assert (u * 2.0)[(1, 0)] == 2 * u[(1, 0)]
    with pytest.raises(TypeError):
        u * u


def test_sequence_on_boundary_matches_lattice_sum():
    """b[n₁] = Σ_{n₂} a[(n₁, n₂)](−1)^{n₂} over the full lattice"""
    N = 4
    a = _random(N, seed=7)
    F = to_full(a)
    signs = np.array([(-1) ** n for n in range(-N, N + 1)])
    b = sequence_on_boundary(a)
    assert isinstance(b.space, CosFourier)
    for n1 in range(N + 1):
        assert b[n1] == pytest.approx(F[n1 + N] @ signs)


def test_weighted_derivative():
    """Ṽ[(n₁, n₂)] = n₁·f·V[(n₁, n₂)] in the plain doubly-even space"""
    V = Sequence(D4Fourier(3, 0.5), np.arange(1.0, 11.0))
    W = weighted_derivative(V)
    assert isinstance(W.space, CosFourier2)
    assert W[(0, 2)] == 0.0
    assert W[(2, 3)] == pytest.approx(2 * 0.5 * V[(3, 2)])
    assert W[(3, 1)] == pytest.approx(3 * 0.5 * V[(3, 1)])


def test_mismatched_length_rejected():
    """Coefficient count must equal the space dimension"""
    with pytest.raises(ValueError):
        Sequence(D4Fourier(2), np.zeros(5))


def test_interval_sequence_lookup_returns_interval():
    """Interval coefficients come back as iv.mpf"""
    u = Sequence(D4Fourier(1), IntervalArray([1.0, 2.0, 3.0], [1.5, 2.5, 3.5]))
    x = u[(0, 1)]
    assert (inf(x), sup(x)) == (2.0, 2.5)

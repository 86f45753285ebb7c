#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
d4fourier.py — D₄-symmetric cosine series on (−d, d)²

ETHOS
  • A D₄-symmetric function u(x, y) = u(±x, ±y) = u(y, x) is stored through its
    canonical coefficients a(k₁, k₂), 0 ≤ k₂ ≤ k₁ ≤ N; every other index folds
    onto one of them by (n₁, n₂) ↦ (max(|n₁|,|n₂|), min(|n₁|,|n₂|)).
  • The index bijection lives in its own type (D4Index); arithmetic never
    recomputes offsets by hand.

STORAGE ORDER (0-based)
  k₂ = 0..N outer, k₁ = k₂..N inner:
      offset(k₁, k₂) = k₂(N+1) − k₂(k₂−1)/2 + (k₁ − k₂),   dimension = (N+1)(N+2)/2
  e.g. N = 2:  (0,0) (1,0) (2,0) (1,1) (2,1) (2,2)

SPACES
  D4Fourier(N, f)    orbit multiplicities 1, 4, 4, 8 for (0,0), (k,0), (k,k), general
  CosFourier2(N, f)  doubly-even series, offset n₁(N+1)+n₂, multiplicities 1, 2, 4
  CosFourier(N, f)   1-d cosine series, multiplicities 1, 2

  The multiplicity is the number of full-lattice indices represented by one
  stored coefficient; weighted ℓ¹/ℓ² norms and inner products use it, and the
  weight P = √multiplicity makes the ℓ² norm of a sequence Euclidean.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterator, Tuple

import numpy as np
from mpmath import iv

from intervals import IntervalArray, dot, hull, isqrt, scale, stack_scalars, zeros_like_kind

# --------------------------------- index -------------------------------------

def fold(n1: int, n2: int) -> Tuple[int, int]:
    """Canonical representative of (n₁, n₂) under D₄."""
    a, b = abs(n1), abs(n2)
    return (a, b) if a >= b else (b, a)


class D4Index:
    """Bijection between canonical pairs (k₁, k₂), 0 ≤ k₂ ≤ k₁ ≤ order, and offsets."""

    def __init__(self, order: int):
        if order < 0:
            raise ValueError(f"order must be >= 0, got {order}")
        self.order = order
        pairs = [(k1, k2) for k2 in range(order + 1) for k1 in range(k2, order + 1)]
        self.k1 = np.array([p[0] for p in pairs], dtype=np.int64)
        self.k2 = np.array([p[1] for p in pairs], dtype=np.int64)
        self.dimension = len(pairs)

    def __len__(self) -> int:
        return self.dimension

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return zip(self.k1.tolist(), self.k2.tolist())

    def __contains__(self, pair) -> bool:
        k1, k2 = pair
        return 0 <= k2 <= k1 <= self.order

    def offset(self, k1: int, k2: int) -> int:
        if (k1, k2) not in self:
            raise IndexError(f"({k1}, {k2}) is not a canonical pair of order {self.order}")
        return k2 * (self.order + 1) - k2 * (k2 - 1) // 2 + (k1 - k2)

    def pair(self, offset: int) -> Tuple[int, int]:
        if not 0 <= offset < self.dimension:
            raise IndexError(f"offset {offset} out of range for order {self.order}")
        return int(self.k1[offset]), int(self.k2[offset])

    def canonical_offsets(self, n1, n2) -> np.ndarray:
        """Vectorised offset of fold(n₁, n₂); the folded pair must lie within the order."""
        a = np.abs(np.asarray(n1, dtype=np.int64))
        b = np.abs(np.asarray(n2, dtype=np.int64))
        k1 = np.maximum(a, b)
        k2 = np.minimum(a, b)
        return k2 * (self.order + 1) - k2 * (k2 - 1) // 2 + (k1 - k2)


@lru_cache(maxsize=None)
def d4_index(order: int) -> D4Index:
    return D4Index(order)

# --------------------------------- spaces ------------------------------------

def _sqrt_weights(multiplicities: np.ndarray) -> IntervalArray:
    roots = {int(m): isqrt(iv.mpf(int(m))) for m in np.unique(multiplicities)}
    return IntervalArray.from_intervals(roots[int(m)] for m in multiplicities)


@dataclass(frozen=True)
class D4Fourier:
    order: int
    frequency: Any = field(default=1.0, compare=False)

    @property
    def index(self) -> D4Index:
        return d4_index(self.order)

    @property
    def dimension(self) -> int:
        return self.index.dimension

    @property
    def multiplicities(self) -> np.ndarray:
        idx = self.index
        m = np.full(idx.dimension, 8, dtype=np.int64)
        m[(idx.k2 == 0) | (idx.k1 == idx.k2)] = 4
        m[0] = 1
        return m

    def exp_weights(self) -> IntervalArray:
        """P = √multiplicity, enclosed."""
        return _sqrt_weights(self.multiplicities)

    def with_order(self, order: int) -> "D4Fourier":
        return D4Fourier(order, self.frequency)

    def lookup(self, key) -> int:
        return self.index.offset(*fold(*key))

    def positions_of(self, smaller: "D4Fourier") -> np.ndarray:
        """Offsets in this space of every stored index of a space of lower order."""
        return self.index.canonical_offsets(smaller.index.k1, smaller.index.k2)

    def pairs(self) -> Iterator[Tuple[int, int]]:
        return iter(self.index)


@dataclass(frozen=True)
class CosFourier2:
    order: int
    frequency: Any = field(default=1.0, compare=False)

    @property
    def dimension(self) -> int:
        return (self.order + 1) ** 2

    @property
    def n1(self) -> np.ndarray:
        return np.repeat(np.arange(self.order + 1), self.order + 1)

    @property
    def n2(self) -> np.ndarray:
        return np.tile(np.arange(self.order + 1), self.order + 1)

    @property
    def multiplicities(self) -> np.ndarray:
        return (np.where(self.n1 == 0, 1, 2) * np.where(self.n2 == 0, 1, 2)).astype(np.int64)

    def exp_weights(self) -> IntervalArray:
        return _sqrt_weights(self.multiplicities)

    def with_order(self, order: int) -> "CosFourier2":
        return CosFourier2(order, self.frequency)

    def lookup(self, key) -> int:
        n1, n2 = abs(key[0]), abs(key[1])
        if n1 > self.order or n2 > self.order:
            raise IndexError(f"{key} outside order {self.order}")
        return n1 * (self.order + 1) + n2

    def offsets(self, n1, n2) -> np.ndarray:
        return np.abs(np.asarray(n1)) * (self.order + 1) + np.abs(np.asarray(n2))

    def positions_of(self, smaller: "CosFourier2") -> np.ndarray:
        return self.offsets(smaller.n1, smaller.n2)

    def pairs(self) -> Iterator[Tuple[int, int]]:
        return zip(self.n1.tolist(), self.n2.tolist())


@dataclass(frozen=True)
class CosFourier:
    order: int
    frequency: Any = field(default=1.0, compare=False)

    @property
    def dimension(self) -> int:
        return self.order + 1

    @property
    def multiplicities(self) -> np.ndarray:
        m = np.full(self.order + 1, 2, dtype=np.int64)
        m[0] = 1
        return m

    def exp_weights(self) -> IntervalArray:
        return _sqrt_weights(self.multiplicities)

    def with_order(self, order: int) -> "CosFourier":
        return CosFourier(order, self.frequency)

    def lookup(self, key) -> int:
        n = abs(key[0] if isinstance(key, tuple) else key)
        if n > self.order:
            raise IndexError(f"{key} outside order {self.order}")
        return n

    def positions_of(self, smaller: "CosFourier") -> np.ndarray:
        return np.arange(smaller.order + 1)

    def pairs(self) -> Iterator[int]:
        return iter(range(self.order + 1))

# -------------------------------- sequences ----------------------------------

class Sequence:
    """
    Coefficients of a series in one of the spaces above.

    `coefficients` is a float ndarray (approximate stage) or an IntervalArray
    (rigorous stage). Sums and differences zero-pad to the larger order.
    """

    def __init__(self, space, coefficients):
        if len(coefficients) != space.dimension:
            raise ValueError(f"{len(coefficients)} coefficients for a space of dimension {space.dimension}")
        self.space = space
        self.coefficients = coefficients

    @property
    def order(self) -> int:
        return self.space.order

    @property
    def is_interval(self) -> bool:
        return isinstance(self.coefficients, IntervalArray)

    def __len__(self) -> int:
        return self.space.dimension

    def __getitem__(self, key):
        off = self.space.lookup(key)
        if self.is_interval:
            return self.coefficients.item(off)
        return float(self.coefficients[off])

    def __setitem__(self, key, value) -> None:
        self.coefficients[self.space.lookup(key)] = value

    def copy(self) -> "Sequence":
        return Sequence(self.space, self.coefficients.copy())

    def interval(self) -> "Sequence":
        """Point-interval copy (exact)."""
        if self.is_interval:
            return self.copy()
        return Sequence(self.space, IntervalArray(self.coefficients))

    def mid(self) -> "Sequence":
        if self.is_interval:
            return Sequence(self.space, self.coefficients.mid())
        return self.copy()

    def project(self, order: int) -> "Sequence":
        """Truncate to, or zero-pad up to, the given order."""
        target = self.space.with_order(order)
        if order == self.order:
            return self.copy()
        if order < self.order:
            return Sequence(target, self.coefficients[self.space.positions_of(target)])
        out = zeros_like_kind(self.coefficients, target.dimension)
        out[target.positions_of(self.space)] = self.coefficients
        return Sequence(target, out)

    def _aligned(self, other: "Sequence"):
        if type(other.space) is not type(self.space):
            raise TypeError(f"Cannot combine {type(self.space).__name__} with {type(other.space).__name__}")
        order = max(self.order, other.order)
        return self.project(order), other.project(order)

    def __add__(self, other: "Sequence") -> "Sequence":
        a, b = self._aligned(other)
        return Sequence(a.space, a.coefficients + b.coefficients)

    def __sub__(self, other: "Sequence") -> "Sequence":
        a, b = self._aligned(other)
        return Sequence(a.space, a.coefficients - b.coefficients)

    def __neg__(self) -> "Sequence":
        return Sequence(self.space, -self.coefficients)

    def __mul__(self, scalar) -> "Sequence":
        if isinstance(scalar, Sequence):
            raise TypeError("Sequence products go through convolution.multiply")
        return Sequence(self.space, scale(self.coefficients, scalar))

    __rmul__ = __mul__

    def norm(self, p=1):
        """Weighted ℓ¹ / ℓ² norm or ℓ∞ norm (float, or iv.mpf for interval coefficients)."""
        w = self.space.multiplicities
        c = self.coefficients
        if self.is_interval:
            a = c.abs()
            if p == 1:
                return (a * w).sum()
            if p == 2:
                return isqrt((a.square() * w).sum())
            if p == np.inf:
                return hull(float(a.lo.max()), float(a.hi.max()))
        else:
            a = np.abs(c)
            if p == 1:
                return float(np.dot(a, w))
            if p == 2:
                return float(np.sqrt(np.dot(a * a, w)))
            if p == np.inf:
                return float(a.max())
        raise ValueError(f"Unsupported norm p={p!r}")

    def __repr__(self) -> str:
        kind = "interval" if self.is_interval else "float"
        return f"Sequence({type(self.space).__name__}(order={self.order}), {kind})"

# ------------------------------- conversions ---------------------------------

def from_full(array, order: int, frequency=1.0) -> Sequence:
    """D₄ form of a (2N+1)×(2N+1) coefficient array indexed [n₁+N, n₂+N]; keeps k₂ ≤ k₁."""
    a = np.asarray(array, dtype=float)
    if a.shape != (2 * order + 1, 2 * order + 1):
        raise ValueError(f"expected a {(2 * order + 1,) * 2} array, got {a.shape}")
    idx = d4_index(order)
    return Sequence(D4Fourier(order, frequency), a[idx.k1 + order, idx.k2 + order].copy())

def to_full(seq: Sequence):
    """(2N+1)×(2N+1) array of every lattice coefficient of a D₄ sequence."""
    N = seq.order
    n = np.arange(-N, N + 1)
    n1, n2 = np.meshgrid(n, n, indexing="ij")
    offs = seq.space.index.canonical_offsets(n1, n2).ravel()
    return seq.coefficients[offs].reshape(2 * N + 1, 2 * N + 1)

def sequence_on_boundary(a: Sequence) -> Sequence:
    """b[n₁] = Σ_{n₂=−N..N} a[(n₁, n₂)]·(−1)^{n₂}, the trace of the series on x₂ = d."""
    N = a.order
    n2 = np.arange(-N, N + 1)
    signs = np.where(n2 % 2 == 0, 1.0, -1.0)
    idx = a.space.index
    values = [dot(a.coefficients[idx.canonical_offsets(n1, n2)], signs) for n1 in range(N + 1)]
    return Sequence(CosFourier(N, a.space.frequency), stack_scalars(values))

def weighted_derivative(V: Sequence) -> Sequence:
    """Ṽ ∈ CosFourier2 with Ṽ[(n₁, n₂)] = n₁·f·V[(n₁, n₂)]."""
    space = CosFourier2(V.order, V.space.frequency)
    offs = V.space.index.canonical_offsets(space.n1, space.n2)
    coeffs = V.coefficients[offs] * space.n1.astype(float)
    return Sequence(space, scale(coeffs, V.space.frequency))

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
intervals.py — rigorous scalars (mpmath.iv) and dense interval arrays (numpy)

ETHOS
  • Every quantity that enters a bound is an enclosure: an `iv.mpf` scalar or
    an `IntervalArray` whose [lo, hi] arrays are rounded outward after every
    floating-point operation.
  • Plain floats may enter only as exact point intervals.

WHAT THIS PROVIDES
  Scalars (mpmath.iv)
    - to_interval(Fraction(1, 9))  -> iv.mpf enclosing 1/9
    - inf(x), sup(x), mid(x)       -> outward (resp. nearest) float endpoints
    - imax, imin, iabs             -> endpoint-wise max/min/abs of intervals
    - iv_precision(80)             -> context manager for the iv working precision

  Arrays (numpy)
    - IntervalArray(lo, hi)        -> +, -, *, / (element-wise, broadcasting),
                                      @ (midpoint-radius with a-priori BLAS bound),
                                      abs, square, sum (exact fsum), T, reshape
    - dot(a, b)                    -> float for float arrays, iv.mpf otherwise
    - stack_scalars([...])         -> IntervalArray or float ndarray

ROUNDING MODEL
  numpy computes in round-to-nearest; a single correctly rounded result is off
  by at most half an ulp, so one `nextafter` step towards ∓∞ gives a valid
  lower/upper bound. Matrix products use the midpoint-radius inclusion
      [Am ± Ar][Bm ± Br] ⊆ AmBm ± (|Am|Br + Ar(|Bm| + Br))
  and bound the BLAS rounding of AmBm by (n+2)·ε·|Am||Bm| + n·η.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from fractions import Fraction
from typing import Iterable, Tuple

import numpy as np
import mpmath as mp
from mpmath import iv

_EPS = float(np.finfo(float).eps)    # 2**-52
_ETA = float(np.finfo(float).tiny)   # smallest normal; covers underflow in products

# ------------------------------- rounding ------------------------------------

def _down(x):
    return np.nextafter(x, -np.inf)

def _up(x):
    return np.nextafter(x, np.inf)

def _float_down(v: mp.mpf) -> float:
    """Largest float <= v (exact comparison in mpmath)."""
    f = float(v)
    while mp.mpf(f) > v:
        f = float(_down(f))
    return f

def _float_up(v: mp.mpf) -> float:
    """Smallest float >= v."""
    f = float(v)
    while mp.mpf(f) < v:
        f = float(_up(f))
    return f

# ------------------------------- scalars -------------------------------------

def is_interval(x) -> bool:
    return hasattr(x, "_mpi_")

def from_fraction(fr: Fraction):
    """iv.mpf enclosure of an exact rational p/q."""
    return iv.mpf(fr.numerator) / fr.denominator

def to_interval(x):
    """Rigorous iv.mpf enclosure of an exact scalar (Fraction, int, float, str, iv.mpf)."""
    if is_interval(x):
        return x
    if isinstance(x, Fraction):
        return from_fraction(x)
    if isinstance(x, (int, np.integer)):
        return iv.mpf(int(x))
    if isinstance(x, (float, np.floating)):
        return iv.mpf(float(x))
    if isinstance(x, str):
        return to_interval(Fraction(x.strip()))
    raise TypeError(f"Cannot enclose {x!r} in an interval")

def endpoints(x) -> Tuple[mp.mpf, mp.mpf]:
    """Exact endpoints of x as mpf values."""
    if is_interval(x):
        a, b = x._mpi_
        return mp.make_mpf(a), mp.make_mpf(b)
    if isinstance(x, (Fraction, str)):
        return endpoints(to_interval(x))
    v = mp.mpf(float(x))
    return v, v

def inf(x) -> float:
    """Float lower bound of x."""
    return _float_down(endpoints(x)[0])

def sup(x) -> float:
    """Float upper bound of x."""
    return _float_up(endpoints(x)[1])

def mid(x) -> float:
    a, b = endpoints(x)
    return float((a + b) / 2)

def width(x) -> float:
    a, b = endpoints(x)
    return _float_up(b - a)

def hull(lo, hi):
    """iv.mpf [lo, hi] from float (or mpf) endpoints."""
    return iv.mpf([lo, hi])

def imax(x, y):
    xa, xb = endpoints(x)
    ya, yb = endpoints(y)
    return iv.mpf([max(xa, ya), max(xb, yb)])

def imin(x, y):
    xa, xb = endpoints(x)
    ya, yb = endpoints(y)
    return iv.mpf([min(xa, ya), min(xb, yb)])

def iabs(x):
    a, b = endpoints(x)
    if a >= 0:
        return iv.mpf([a, b])
    if b <= 0:
        return iv.mpf([-b, -a])
    return iv.mpf([0, max(-a, b)])

def isqrt(x):
    """Square root of a nonnegative quantity (a tiny negative lower end is clipped)."""
    a, b = endpoints(x)
    if b < 0:
        raise ValueError(f"sqrt of a negative interval [{a}, {b}]")
    return iv.sqrt(iv.mpf([max(a, 0), b]))

def fourth_root(x):
    return isqrt(isqrt(x))

@contextmanager
def iv_precision(bits: int):
    """Temporarily run iv arithmetic at `bits` of working precision."""
    saved = iv.prec
    iv.prec = bits
    try:
        yield
    finally:
        iv.prec = saved

# --------------------------- dense interval arrays ---------------------------

def _coerce(x):
    """(lo, hi) float data for any operand: IntervalArray, iv scalar, exact number or array."""
    if isinstance(x, IntervalArray):
        return x.lo, x.hi
    if is_interval(x) or isinstance(x, Fraction):
        return inf(x), sup(x)
    a = np.asarray(x, dtype=float)
    return a, a

def _mul_down(a, b):
    return np.where((a == 0) | (b == 0), 0.0, _down(a * b))

def _mul_up(a, b):
    return np.where((a == 0) | (b == 0), 0.0, _up(a * b))

def _mul(alo, ahi, blo, bhi):
    lows = [_mul_down(x, y) for x in (alo, ahi) for y in (blo, bhi)]
    highs = [_mul_up(x, y) for x in (alo, ahi) for y in (blo, bhi)]
    return np.minimum.reduce(lows), np.maximum.reduce(highs)

def _midrad(lo, hi):
    m = 0.5 * lo + 0.5 * hi
    r = _up(np.maximum(m - lo, hi - m))
    return m, r


class IntervalArray:
    """
    N-d array of real intervals stored as two float arrays (infimum, supremum).
    """

    __slots__ = ("lo", "hi")
    __array_ufunc__ = None   # let numpy defer to the reflected operators below

    def __init__(self, lo, hi=None):
        lo = np.array(lo, dtype=float)
        hi = lo.copy() if hi is None else np.array(hi, dtype=float)
        if lo.shape != hi.shape:
            lo, hi = np.broadcast_arrays(lo, hi)
            lo, hi = lo.copy(), hi.copy()
        if np.any(lo > hi):
            raise ValueError("IntervalArray with lo > hi (empty interval)")
        self.lo = lo
        self.hi = hi

    # ---- constructors ----
    @classmethod
    def zeros(cls, shape) -> "IntervalArray":
        return cls(np.zeros(shape))

    @classmethod
    def eye(cls, n: int) -> "IntervalArray":
        return cls(np.eye(n))

    @classmethod
    def from_intervals(cls, values: Iterable) -> "IntervalArray":
        values = list(values)
        return cls([inf(v) for v in values], [sup(v) for v in values])

    @classmethod
    def stack(cls, arrays, axis: int = 0) -> "IntervalArray":
        arrays = list(arrays)
        return cls(np.stack([a.lo for a in arrays], axis=axis),
                   np.stack([a.hi for a in arrays], axis=axis))

    @classmethod
    def concatenate(cls, arrays) -> "IntervalArray":
        arrays = [a if isinstance(a, IntervalArray) else cls(a) for a in arrays]
        return cls(np.concatenate([a.lo for a in arrays]),
                   np.concatenate([a.hi for a in arrays]))

    # ---- shape ----
    @property
    def shape(self):
        return self.lo.shape

    @property
    def ndim(self) -> int:
        return self.lo.ndim

    @property
    def size(self) -> int:
        return self.lo.size

    def __len__(self) -> int:
        return len(self.lo)

    @property
    def T(self) -> "IntervalArray":
        return IntervalArray(self.lo.T, self.hi.T)

    def reshape(self, *shape) -> "IntervalArray":
        return IntervalArray(self.lo.reshape(*shape), self.hi.reshape(*shape))

    def copy(self) -> "IntervalArray":
        return IntervalArray(self.lo, self.hi)

    def __getitem__(self, key) -> "IntervalArray":
        return IntervalArray(self.lo[key], self.hi[key])

    def __setitem__(self, key, value) -> None:
        lo, hi = _coerce(value)
        self.lo[key] = lo
        self.hi[key] = hi

    def item(self, key):
        """Single entry as an iv.mpf."""
        return iv.mpf([float(self.lo[key]), float(self.hi[key])])

    def where(self, mask) -> "IntervalArray":
        """Entries where mask holds, exact zeros elsewhere."""
        return IntervalArray(np.where(mask, self.lo, 0.0), np.where(mask, self.hi, 0.0))

    # ---- queries ----
    def mid(self) -> np.ndarray:
        return 0.5 * self.lo + 0.5 * self.hi

    def rad(self) -> np.ndarray:
        return _midrad(self.lo, self.hi)[1]

    def mag(self) -> np.ndarray:
        """Upper bound of |x| entry-wise."""
        return np.maximum(np.abs(self.lo), np.abs(self.hi))

    def contains(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        return (self.lo <= x) & (x <= self.hi)

    def is_point(self) -> bool:
        return bool(np.all(self.lo == self.hi))

    # ---- element-wise arithmetic ----
    def __neg__(self) -> "IntervalArray":
        return IntervalArray(-self.hi, -self.lo)

    def __pos__(self) -> "IntervalArray":
        return self

    def __add__(self, other) -> "IntervalArray":
        blo, bhi = _coerce(other)
        return IntervalArray(_down(self.lo + blo), _up(self.hi + bhi))

    __radd__ = __add__

    def __sub__(self, other) -> "IntervalArray":
        blo, bhi = _coerce(other)
        return IntervalArray(_down(self.lo - bhi), _up(self.hi - blo))

    def __rsub__(self, other) -> "IntervalArray":
        alo, ahi = _coerce(other)
        return IntervalArray(_down(alo - self.hi), _up(ahi - self.lo))

    def __mul__(self, other) -> "IntervalArray":
        blo, bhi = _coerce(other)
        return IntervalArray(*_mul(self.lo, self.hi, blo, bhi))

    __rmul__ = __mul__

    def reciprocal(self) -> "IntervalArray":
        if np.any((self.lo <= 0) & (self.hi >= 0)):
            raise ZeroDivisionError("reciprocal of an interval containing zero")
        return IntervalArray(_down(1.0 / self.hi), _up(1.0 / self.lo))

    def __truediv__(self, other) -> "IntervalArray":
        if not isinstance(other, IntervalArray):
            other = IntervalArray(*_coerce(other))
        return self * other.reciprocal()

    def __rtruediv__(self, other) -> "IntervalArray":
        return IntervalArray(*_coerce(other)) * self.reciprocal()

    def abs(self) -> "IntervalArray":
        lo = np.where(self.lo >= 0, self.lo, np.where(self.hi <= 0, -self.hi, 0.0))
        return IntervalArray(lo, self.mag())

    def square(self) -> "IntervalArray":
        a = self.abs()
        return IntervalArray(_mul_down(a.lo, a.lo), _mul_up(a.hi, a.hi))

    # ---- products ----
    def __matmul__(self, other) -> "IntervalArray":
        if not isinstance(other, IntervalArray):
            other = IntervalArray(np.asarray(other, dtype=float))
        return _matmul(self, other)

    def __rmatmul__(self, other) -> "IntervalArray":
        return _matmul(IntervalArray(np.asarray(other, dtype=float)), self)

    # ---- reductions ----
    def sum(self):
        """Exact sum of all entries (fsum), outward rounded, as iv.mpf."""
        lo = math.fsum(self.lo.ravel().tolist())
        hi = math.fsum(self.hi.ravel().tolist())
        return iv.mpf([float(_down(lo)), float(_up(hi))])

    def __repr__(self) -> str:
        return f"IntervalArray(lo={self.lo!r}, hi={self.hi!r})"


def _matmul(A: IntervalArray, B: IntervalArray) -> IntervalArray:
    am, ar = _midrad(A.lo, A.hi)
    bm, br = _midrad(B.lo, B.hi)
    n = am.shape[-1]
    cm = am @ bm
    aam = np.abs(am)
    rad = aam @ br + ar @ (np.abs(bm) + br) + ((n + 2) * _EPS) * (aam @ np.abs(bm))
    rad = _up((1.0 + (n + 4) * _EPS) * rad + (n + 2) * _ETA)
    return IntervalArray(_down(cm - rad), _up(cm + rad))

# ------------------------------ generic helpers ------------------------------

def dot(a, b):
    """Σ aᵢbᵢ: float for float arrays, rigorous iv.mpf when either side is an interval."""
    if isinstance(a, IntervalArray) or isinstance(b, IntervalArray):
        if not isinstance(a, IntervalArray):
            a, b = b, a
        return (a * b).sum()
    return float(np.dot(a, b))

def scale(coefficients, s):
    """coefficients·s; float data is promoted to an IntervalArray when s is an interval or a Fraction."""
    if isinstance(coefficients, IntervalArray):
        return coefficients * s
    if is_interval(s) or isinstance(s, Fraction):
        return IntervalArray(coefficients) * s
    return coefficients * float(s)

def stack_scalars(values):
    """1-d container from scalars: IntervalArray for intervals, float ndarray otherwise."""
    values = list(values)
    if values and is_interval(values[0]):
        return IntervalArray.from_intervals(values)
    return np.array(values, dtype=float)

def zeros_like_kind(coefficients, n: int):
    """Zero vector of length n of the same kind (interval or float) as `coefficients`."""
    if isinstance(coefficients, IntervalArray):
        return IntervalArray.zeros(n)
    return np.zeros(n)

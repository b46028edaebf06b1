from __future__ import annotations

"""Cartesian Gaussian bookkeeping (component ordering, primitive normalization).

Primitives are unnormalized exp(-a r^2) functions. Packed contraction
coefficients carry the primitive normalization used by libcint for
`cart=True`, so s and p functions come out normalized and higher-l Cartesian
components keep the usual radial-only normalization.
"""

from functools import lru_cache
from math import gamma, pi

import numpy as np


def ncart(l: int) -> int:
    """Number of Cartesian components for angular momentum l."""

    l = int(l)
    if l < 0:
        raise ValueError("l must be >= 0")
    return (l + 1) * (l + 2) // 2


@lru_cache(maxsize=None)
def cartesian_components(l: int) -> tuple[tuple[int, int, int], ...]:
    """Return `(lx, ly, lz)` exponent tuples for angular momentum l.

    Ordering is decreasing lx, then decreasing ly (x, y, z for p;
    xx, xy, xz, yy, yz, zz for d).
    """

    l = int(l)
    if l < 0:
        raise ValueError("l must be >= 0")
    out: list[tuple[int, int, int]] = []
    for lx in range(l, -1, -1):
        for ly in range(l - lx, -1, -1):
            out.append((lx, ly, l - lx - ly))
    return tuple(out)


def _gaussian_int(n: int, alpha: np.ndarray) -> np.ndarray:
    # ∫_0^∞ x^n exp(-alpha x^2) dx
    n1 = 0.5 * float(int(n) + 1)
    return (gamma(n1) / 2.0) / np.power(np.asarray(alpha, dtype=np.float64), n1)


def primitive_norm(l: int, exp: np.ndarray) -> np.ndarray:
    """Primitive coefficient scale for unnormalized Cartesian primitives."""

    l = int(l)
    if l < 0:
        raise ValueError("l must be >= 0")
    exp = np.asarray(exp, dtype=np.float64)
    if exp.ndim != 1:
        raise ValueError("exp must be 1D")
    if l <= 1:
        # N_l = (2a/pi)^(3/4) * (4a)^(l/2)
        return (2.0 * exp / pi) ** 0.75 * (4.0 * exp) ** (0.5 * l)
    return 1.0 / np.sqrt(_gaussian_int(2 * l + 2, 2.0 * exp))


__all__ = ["cartesian_components", "ncart", "primitive_norm"]

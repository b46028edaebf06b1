from __future__ import annotations

"""Gaussian product recursions shared by the one- and two-electron builders.

- `overlap_1d_table`: Obara–Saika 1D overlap S[i,j].
- `hermite_E_table`: McMurchie–Davidson expansion coefficients E[i,j,t].
- `hermite_R_table`: Hermite Coulomb integrals R_{tuv}(alpha, PC).
"""

from functools import lru_cache
from math import pi, sqrt

import numpy as np

from .boys import boys_fm_list
from .cart import cartesian_components


def overlap_1d_table(*, la: int, lb: int, a: float, b: float, Ax: float, Bx: float) -> np.ndarray:
    """Return 1D overlap integrals S[i,j] for i<=la, j<=lb."""

    la = int(la)
    lb = int(lb)
    if la < 0 or lb < 0:
        raise ValueError("la/lb must be >= 0")

    p = a + b
    inv_p = 1.0 / p
    mu = a * b * inv_p
    Px = (a * Ax + b * Bx) * inv_p
    PA = Px - Ax
    PB = Px - Bx
    AB = Ax - Bx
    inv_2p = 0.5 * inv_p

    out = np.zeros((la + 1, lb + 1), dtype=np.float64)
    out[0, 0] = sqrt(pi * inv_p) * np.exp(-mu * AB * AB)

    for j in range(0, lb):
        out[0, j + 1] = PB * out[0, j]
        if j > 0:
            out[0, j + 1] += float(j) * inv_2p * out[0, j - 1]

    for i in range(0, la):
        out[i + 1, 0] = PA * out[i, 0]
        if i > 0:
            out[i + 1, 0] += float(i) * inv_2p * out[i - 1, 0]
        for j in range(0, lb):
            out[i + 1, j + 1] = PA * out[i, j + 1]
            if i > 0:
                out[i + 1, j + 1] += float(i) * inv_2p * out[i - 1, j + 1]
            out[i + 1, j + 1] += float(j + 1) * inv_2p * out[i, j]

    return out


def hermite_E_table(*, la: int, lb: int, a: float, b: float, Ax: float, Bx: float) -> np.ndarray:
    """Return Hermite coefficients E[i,j,t] for one axis.

    E includes the 1D Gaussian product factor exp(-mu*(Ax-Bx)^2). `b == 0`
    describes a single Gaussian (used for auxiliary functions in DF).
    """

    la = int(la)
    lb = int(lb)
    if la < 0 or lb < 0:
        raise ValueError("la/lb must be >= 0")

    p = a + b
    inv_p = 1.0 / p
    mu = a * b * inv_p
    Px = (a * Ax + b * Bx) * inv_p
    PA = Px - Ax
    PB = Px - Bx
    AB = Ax - Bx
    inv_2p = 0.5 * inv_p

    E = np.zeros((la + 1, lb + 1, la + lb + 1), dtype=np.float64)
    E[0, 0, 0] = np.exp(-mu * AB * AB)

    for i in range(0, la):
        prev = E[i, 0]
        cur = E[i + 1, 0]
        for t in range(0, i + 2):
            val = PA * prev[t]
            if t > 0:
                val += inv_2p * prev[t - 1]
            if t + 1 <= i:
                val += float(t + 1) * prev[t + 1]
            cur[t] = val

    for i in range(0, la + 1):
        for j in range(0, lb):
            prev = E[i, j]
            cur = E[i, j + 1]
            for t in range(0, i + j + 2):
                val = PB * prev[t]
                if t > 0:
                    val += inv_2p * prev[t - 1]
                if t + 1 <= i + j:
                    val += float(t + 1) * prev[t + 1]
                cur[t] = val

    return E


def hermite_R_table(*, alpha: float, PC: np.ndarray, nmax: int) -> np.ndarray:
    """Return R[t,u,v] = R^0_{tuv}(alpha, PC) for t+u+v <= nmax.

    R^n_{tuv} = (-2 alpha)^n (d/dPx)^t (d/dPy)^u (d/dPz)^v F_n(alpha |PC|^2)
    """

    PC = np.asarray(PC, dtype=np.float64).reshape((3,))
    nmax = int(nmax)
    if nmax < 0:
        raise ValueError("nmax must be >= 0")

    L = nmax
    R = np.zeros((nmax + 1, L + 1, L + 1, L + 1), dtype=np.float64)

    F = boys_fm_list(float(alpha * float(np.dot(PC, PC))), nmax)
    fac = -2.0 * float(alpha)
    pow_fac = 1.0
    for n in range(0, nmax + 1):
        R[n, 0, 0, 0] = pow_fac * float(F[n])
        pow_fac *= fac

    X, Y, Z = map(float, PC)
    for n in range(nmax - 1, -1, -1):
        max_m = nmax - n
        for t in range(0, max_m + 1):
            for u in range(0, max_m - t + 1):
                for v in range(0, max_m - t - u + 1):
                    if t > 0:
                        val = X * R[n + 1, t - 1, u, v]
                        if t >= 2:
                            val += float(t - 1) * R[n + 1, t - 2, u, v]
                    elif u > 0:
                        val = Y * R[n + 1, t, u - 1, v]
                        if u >= 2:
                            val += float(u - 1) * R[n + 1, t, u - 2, v]
                    elif v > 0:
                        val = Z * R[n + 1, t, u, v - 1]
                        if v >= 2:
                            val += float(v - 1) * R[n + 1, t, u, v - 2]
                    else:
                        continue
                    R[n, t, u, v] = val

    return R[0]


@lru_cache(maxsize=None)
def hermite_index(L: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(t, u, v) index arrays over the flattened (L+1)^3 Hermite cube."""

    L = int(L)
    g = np.indices((L + 1, L + 1, L + 1)).reshape((3, -1))
    t, u, v = (np.ascontiguousarray(x, dtype=np.intp) for x in g)
    for x in (t, u, v):
        x.setflags(write=False)
    return t, u, v


def hermite_product_matrix(la: int, lb: int, Ex: np.ndarray, Ey: np.ndarray, Ez: np.ndarray) -> np.ndarray:
    """Flatten per-axis E tables into M[(i,j), tuv] for Cartesian component pairs."""

    L = int(la) + int(lb)
    t, u, v = hermite_index(L)
    compA = cartesian_components(la)
    compB = cartesian_components(lb)
    out = np.empty((len(compA) * len(compB), t.size), dtype=np.float64)
    row = 0
    for ax, ay, az in compA:
        for bx, by, bz in compB:
            out[row] = Ex[ax, bx][t] * Ey[ay, by][u] * Ez[az, bz][v]
            row += 1
    return out


__all__ = [
    "hermite_E_table",
    "hermite_R_table",
    "hermite_index",
    "hermite_product_matrix",
    "overlap_1d_table",
]

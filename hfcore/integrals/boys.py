from __future__ import annotations

"""Boys function F_m(T) = ∫_0^1 t^(2m) exp(-T t^2) dt."""

import math

import numpy as np


def boys_f0(T: float) -> float:
    if T < 0.0:
        raise ValueError("T must be >= 0")
    if T < 1e-12:
        return 1.0 - (T / 3.0) + (T * T / 10.0)
    return 0.5 * math.sqrt(math.pi / T) * math.erf(math.sqrt(T))


def boys_fm_list(T: float, m_max: int) -> np.ndarray:
    """Return [F_0(T), ..., F_{m_max}(T)] as a float64 array.

    Small T: series for the top order followed by downward recursion.
    Large T: upward recursion from F_0 (stable once exp(-T) is small relative
    to the leading term).
    """

    T = float(T)
    m_max = int(m_max)
    if m_max < 0:
        raise ValueError("m_max must be >= 0")
    if T < 0.0:
        raise ValueError("T must be >= 0")

    out = np.empty((m_max + 1,), dtype=np.float64)
    if m_max == 0:
        out[0] = boys_f0(T)
        return out

    e = math.exp(-T)
    if T < 5.0 + 1.5 * m_max:
        # F_m(T) = exp(-T) Σ_k (2T)^k / ((2m+1)(2m+3)...(2m+2k+1))
        term = 1.0 / float(2 * m_max + 1)
        acc = term
        k = 0
        while term > 1e-17 * acc:
            k += 1
            term *= 2.0 * T / float(2 * m_max + 2 * k + 1)
            acc += term
            if k > 400:
                break
        out[m_max] = e * acc
        for m in range(m_max, 0, -1):
            out[m - 1] = (2.0 * T * out[m] + e) / float(2 * m - 1)
        return out

    out[0] = boys_f0(T)
    inv_2T = 0.5 / T
    for m in range(1, m_max + 1):
        out[m] = (float(2 * m - 1) * out[m - 1] - e) * inv_2T
    return out


__all__ = ["boys_f0", "boys_fm_list"]

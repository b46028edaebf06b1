from __future__ import annotations

"""Whitened density-fitting factors.

Builds `B[μ,ν,Q]` such that

  (μν|λσ) ~= Σ_Q B[μν,Q] B[λσ,Q]

from the 3-index integrals X[μν,P] = (μν|P) and the Coulomb metric
V[P,Q] = (P|Q) = L L^T:  B^T = L^{-1} X^T.
"""

import time

import numpy as np
from scipy.linalg import cholesky, solve_triangular

from .basis import CartBasis
from .eri import build_int2c, build_int3c


def whiten_df_factors(int3c: np.ndarray, int2c: np.ndarray, *, profile: dict | None = None) -> np.ndarray:
    """Return B (nao, nao, naux) from (μν|P) and (P|Q)."""

    X = np.asarray(int3c, dtype=np.float64)
    V = np.asarray(int2c, dtype=np.float64)
    if X.ndim != 3 or X.shape[0] != X.shape[1]:
        raise ValueError("int3c must have shape (nao, nao, naux)")
    nao = int(X.shape[0])
    naux = int(X.shape[2])
    if V.shape != (naux, naux):
        raise ValueError("int2c must have shape (naux, naux)")

    t0 = time.perf_counter()
    L = cholesky(V, lower=True)
    if profile is not None:
        profile["t_metric_cholesky_s"] = float(time.perf_counter() - t0)

    t0 = time.perf_counter()
    X_flat = X.reshape((nao * nao, naux))
    BT = solve_triangular(L, X_flat.T, lower=True, trans="N", unit_diagonal=False, overwrite_b=False)
    B = np.asarray(BT.T, dtype=np.float64, order="C").reshape((nao, nao, naux))
    if profile is not None:
        profile["t_whiten_s"] = float(time.perf_counter() - t0)
        profile["nao"] = nao
        profile["naux"] = naux
    return B


def build_df_B(basis: CartBasis, aux_basis: CartBasis, *, profile: dict | None = None) -> np.ndarray:
    """Build whitened DF factors for an AO basis and its fitting basis."""

    t0 = time.perf_counter()
    X = build_int3c(basis, aux_basis)
    V = build_int2c(aux_basis)
    if profile is not None:
        profile["t_int3c2e_s"] = float(time.perf_counter() - t0)
    return whiten_df_factors(X, V, profile=profile)


__all__ = ["build_df_B", "whiten_df_factors"]

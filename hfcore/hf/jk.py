from __future__ import annotations

"""Coulomb/exchange contractions.

Dense ERIs use the ordered-pair layout `eri_mat[pq, rs]` with
`pq = p * nao + q`, `rs = r * nao + s`. DF factors satisfy
(μν|λσ) ~= Σ_Q B[μ,ν,Q] B[λ,σ,Q].
"""

import numpy as np


def _symmetrize(A: np.ndarray) -> np.ndarray:
    return 0.5 * (A + A.T)


def _check_density(D: np.ndarray) -> np.ndarray:
    D = np.asarray(D, dtype=np.float64)
    if D.ndim != 2 or int(D.shape[0]) != int(D.shape[1]):
        raise ValueError("D must be a square 2D matrix")
    return D


def _as_eri_tensor(eri_mat: np.ndarray, nao: int) -> np.ndarray:
    eri_mat = np.asarray(eri_mat, dtype=np.float64)
    n2 = int(nao) * int(nao)
    if eri_mat.ndim != 2 or tuple(map(int, eri_mat.shape)) != (n2, n2):
        raise ValueError(f"eri_mat must have shape ({n2},{n2}), got {tuple(map(int, eri_mat.shape))}")
    return eri_mat.reshape((nao, nao, nao, nao))


def dense_JK(eri_mat: np.ndarray, D: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """J_mn = Σ_ls (mn|ls) D_ls and K_mn = Σ_ls (ml|ns) D_ls."""

    D = _check_density(D)
    g = _as_eri_tensor(eri_mat, int(D.shape[0]))
    J = np.einsum("mnls,ls->mn", g, D, optimize=True)
    K = np.einsum("mlns,ls->mn", g, D, optimize=True)
    return _symmetrize(J), _symmetrize(K)


def df_JK(B: np.ndarray, D: np.ndarray, *, B2: np.ndarray | None = None) -> tuple[np.ndarray, np.ndarray]:
    """J and K from whitened DF factors B (nao, nao, naux)."""

    D = _check_density(D)
    B = np.asarray(B, dtype=np.float64)
    nao = int(D.shape[0])
    if B.ndim != 3 or tuple(B.shape[:2]) != (nao, nao):
        raise ValueError("B must have shape (nao, nao, naux) matching D")
    naux = int(B.shape[2])
    if B2 is None:
        B2 = B.reshape((nao * nao, naux))

    # J_{μν} = Σ_Q B_{μν}^Q Σ_{λσ} D_{λσ} B_{λσ}^Q
    v = B2.T @ D.reshape((nao * nao,))
    J = (B2 @ v).reshape((nao, nao))

    # K = Σ_Q B_Q D B_Q^T
    BQ = B.transpose((2, 0, 1))
    K = np.einsum("Qml,ls,Qns->mn", BQ, D, BQ, optimize=True)
    return _symmetrize(J), _symmetrize(K)


__all__ = ["dense_JK", "df_JK"]

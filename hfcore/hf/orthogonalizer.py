from __future__ import annotations

"""Canonical orthogonalization of the AO basis with linear-dependency removal."""

from dataclasses import dataclass

import numpy as np

LINDEP_TOL = 1e-7


def _symmetrize(A: np.ndarray) -> np.ndarray:
    return 0.5 * (A + A.T)


@dataclass(frozen=True)
class Orthogonalizer:
    """X such that X.T @ S @ X = I on the retained subspace.

    Attributes
    ----------
    X : np.ndarray
        (nbf, n_reduced) transformation; columns ordered by descending |s|.
    s_eigvals : np.ndarray
        All overlap eigenvalues, sorted by descending magnitude.
    mask : np.ndarray
        Boolean mask over `s_eigvals` of retained directions.
    n_dropped : int
        Number of discarded (near-linearly-dependent) directions.
    """

    X: np.ndarray
    s_eigvals: np.ndarray
    mask: np.ndarray
    n_dropped: int

    @property
    def nbf(self) -> int:
        return int(self.X.shape[0])

    @property
    def n_reduced(self) -> int:
        return int(self.X.shape[1])

    def to_orthogonal(self, F: np.ndarray) -> np.ndarray:
        return _symmetrize(self.X.T @ F @ self.X)

    def eigh(self, F: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Solve F C = S C e in the retained subspace; returns (e, C) with C = X C'."""

        e, Cp = np.linalg.eigh(self.to_orthogonal(np.asarray(F, dtype=np.float64)))
        return e, self.X @ Cp


def orthogonalizer(S: np.ndarray, *, lindep_tol: float = LINDEP_TOL) -> Orthogonalizer:
    """Build X = U |d|^{-1/2} from S = U d U^T, dropping |d| <= lindep_tol."""

    S = np.asarray(S, dtype=np.float64)
    if S.ndim != 2 or S.shape[0] != S.shape[1]:
        raise ValueError("S must be a square 2D matrix")
    d, U = np.linalg.eigh(_symmetrize(S))
    order = np.argsort(-np.abs(d), kind="stable")
    d = d[order]
    U = U[:, order]

    mask = np.abs(d) > float(lindep_tol)
    X = U[:, mask] / np.sqrt(np.abs(d[mask]))[None, :]
    X.setflags(write=False)
    return Orthogonalizer(X=X, s_eigvals=d, mask=mask, n_dropped=int(mask.size - np.count_nonzero(mask)))


__all__ = ["LINDEP_TOL", "Orthogonalizer", "orthogonalizer"]

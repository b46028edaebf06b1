from __future__ import annotations

"""Pulay DIIS over orthogonal-basis commutator errors."""

from collections import deque

import numpy as np


def fock_error(F: np.ndarray, D: np.ndarray, S: np.ndarray, X: np.ndarray) -> np.ndarray:
    """Orthogonal-basis RHF error X^T (F D S - S D F) X."""

    FDS = F @ D @ S
    return X.T @ (FDS - FDS.T) @ X


class DIIS:
    """Fixed-capacity history of (F, error) pairs; the oldest entry is evicted first."""

    def __init__(self, max_vec: int = 8):
        self.max_vec = int(max_vec)
        if self.max_vec < 1:
            raise ValueError("max_vec must be >= 1")
        self._F: deque[np.ndarray] = deque(maxlen=self.max_vec)
        self._e: deque[np.ndarray] = deque(maxlen=self.max_vec)

    def __len__(self) -> int:
        return len(self._F)

    def reset(self) -> None:
        self._F.clear()
        self._e.clear()

    def push(self, F: np.ndarray, e: np.ndarray) -> None:
        self._F.append(np.array(F, dtype=np.float64, copy=True))
        self._e.append(np.array(e, dtype=np.float64, copy=True))

    @property
    def error_norm(self) -> float:
        """Max-abs element of the newest error vector (0.0 when empty)."""

        if not self._e:
            return 0.0
        return float(np.max(np.abs(self._e[-1])))

    def extrapolate(self) -> np.ndarray:
        """Solve the Pulay system and return Σ_i c_i F_i (raises LinAlgError when singular)."""

        if not self._F:
            raise ValueError("DIIS history is empty")
        n = len(self._F)
        if n < 2:
            return self._F[-1]

        # G[i,j] = <e_i | e_j>
        E = np.stack([e.ravel() for e in self._e], axis=0)
        G = E @ E.T

        B = np.empty((n + 1, n + 1), dtype=np.float64)
        B[:n, :n] = G
        B[:n, n] = -1.0
        B[n, :n] = -1.0
        B[n, n] = 0.0

        rhs = np.zeros((n + 1,), dtype=np.float64)
        rhs[n] = -1.0
        coeff = np.linalg.solve(B, rhs)[:n]
        return np.tensordot(coeff, np.stack(list(self._F), axis=0), axes=(0, 0))


__all__ = ["DIIS", "fock_error"]

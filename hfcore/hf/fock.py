from __future__ import annotations

"""Fock-matrix builders for the SCF loop.

Both builders return F = H + 2J - K for a density D = Co Co^T.
"""

from typing import Protocol

import numpy as np

from hfcore.errors import InvalidOptionError
from hfcore.options import SCF_ALGORITHMS

from .jk import dense_JK, df_JK


class FockBuilder(Protocol):
    """Uniform "density → Fock" operation."""

    name: str

    def build_fock(self, D: np.ndarray) -> np.ndarray: ...


class ConventionalFockBuilder:
    """Contract the full four-index ERI matrix (integral key "ERI")."""

    name = "conventional"

    def __init__(self, helper):
        self.H = np.asarray(helper["H"], dtype=np.float64)
        self.eri_mat = helper["ERI"]

    def build_fock(self, D: np.ndarray) -> np.ndarray:
        J, K = dense_JK(self.eri_mat, D)
        return self.H + 2.0 * J - K


class DFFockBuilder:
    """Contract whitened DF factors (integral key "B")."""

    name = "df"

    def __init__(self, helper):
        self.H = np.asarray(helper["H"], dtype=np.float64)
        self.B = np.asarray(helper["B"], dtype=np.float64)
        nao = int(self.B.shape[0])
        self._B2 = self.B.reshape((nao * nao, int(self.B.shape[2])))

    @property
    def naux(self) -> int:
        return int(self.B.shape[2])

    def build_fock(self, D: np.ndarray) -> np.ndarray:
        J, K = df_JK(self.B, D, B2=self._B2)
        return self.H + 2.0 * J - K


_BUILDERS: dict[str, type] = {
    "conventional": ConventionalFockBuilder,
    "df": DFFockBuilder,
}


def select_fock_builder(name: str) -> type:
    """Map a validated algorithm name to its builder class."""

    key = str(name).strip().lower()
    if key not in _BUILDERS:
        raise InvalidOptionError("scf_alg", name, SCF_ALGORITHMS)
    return _BUILDERS[key]


__all__ = [
    "ConventionalFockBuilder",
    "DFFockBuilder",
    "FockBuilder",
    "select_fock_builder",
]

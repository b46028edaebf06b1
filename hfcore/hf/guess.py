from __future__ import annotations

"""Initial MO coefficients for RHF.

Every strategy diagonalises a model Fock matrix in the reduced orthogonal
basis of an `Orthogonalizer` and back-transforms the eigenvectors, except the
projection guess, which maps converged orbitals from another basis.

Strategies
----------
- core: F = H
- gwh: F_ij = 0.875 S_ij (H_ii + H_jj), F_ii = H_ii
- huckel: F_ii = ε_i S_ii, F_ij = 0.875 S_ij (ε_i + ε_j) with tabulated atomic
  orbital energies ε
- projection: Cb = Sbb^-1 S_ab^T Ca T^-1/2, T = Ca^T S_ab Sbb^-1 S_ab^T Ca
"""

from dataclasses import dataclass
from typing import Protocol

import numpy as np

from hfcore.errors import InvalidOptionError, ProjectionError
from hfcore.options import SCF_GUESSES

from .energy import density_from_occupied, rhf_energy
from .huckel_params import orbital_energy
from .orthogonalizer import Orthogonalizer

WH_CONSTANT = 0.875  # K/2 with the Wolfsberg–Helmholz K = 1.75


@dataclass(frozen=True)
class GuessResult:
    kind: str
    mo_coeff: np.ndarray  # (nbf, n_reduced)
    mo_energy: np.ndarray | None
    energy: float  # Σ D (H + F_model); F_model = H for core and projection
    n_dropped: int


class GuessStrategy(Protocol):
    kind: str

    def build(self, helper, ortho: Orthogonalizer, ndocc: int) -> GuessResult: ...


def _wolfsberg_helmholz(S: np.ndarray, diag: np.ndarray) -> np.ndarray:
    F = WH_CONSTANT * S * (diag[:, None] + diag[None, :])
    return F


def _diagonalize_model(kind: str, F: np.ndarray, H: np.ndarray, ortho: Orthogonalizer, ndocc: int) -> GuessResult:
    e, C = ortho.eigh(F)
    D = density_from_occupied(C, ndocc)
    return GuessResult(kind=kind, mo_coeff=C, mo_energy=e, energy=rhf_energy(D, H, F), n_dropped=ortho.n_dropped)


class CoreGuess:
    kind = "core"

    def build(self, helper, ortho: Orthogonalizer, ndocc: int) -> GuessResult:
        H = np.asarray(helper["H"], dtype=np.float64)
        return _diagonalize_model(self.kind, H, H, ortho, ndocc)


class GWHGuess:
    kind = "gwh"

    def build(self, helper, ortho: Orthogonalizer, ndocc: int) -> GuessResult:
        S = np.asarray(helper["S"], dtype=np.float64)
        H = np.asarray(helper["H"], dtype=np.float64)
        Hd = np.diag(H).copy()
        F = _wolfsberg_helmholz(S, Hd)
        np.fill_diagonal(F, Hd)
        return _diagonalize_model(self.kind, F, H, ortho, ndocc)


class HuckelGuess:
    kind = "huckel"

    @staticmethod
    def ao_energies(helper) -> np.ndarray:
        elements = helper.ao_element
        ao_l = helper.ao_l
        ao_rank = helper.ao_shell_rank
        return np.asarray(
            [orbital_energy(el, int(l), int(r)) for el, l, r in zip(elements, ao_l, ao_rank)],
            dtype=np.float64,
        )

    def build(self, helper, ortho: Orthogonalizer, ndocc: int) -> GuessResult:
        S = np.asarray(helper["S"], dtype=np.float64)
        H = np.asarray(helper["H"], dtype=np.float64)
        eps = self.ao_energies(helper)
        F = _wolfsberg_helmholz(S, eps)
        np.fill_diagonal(F, eps * np.diag(S))
        return _diagonalize_model(self.kind, F, H, ortho, ndocc)


def project_occupied(
    S_ab: np.ndarray,
    C_occ_a: np.ndarray,
    ortho_b: Orthogonalizer,
    *,
    tol: float = 1e-8,
) -> np.ndarray:
    """Map occupied orbitals of basis A into basis B with S_bb-orthonormal columns.

    `S_ab` is <a|b> (na, nb). S_bb^-1 is taken on the retained subspace as X X^T.
    Raises ProjectionError when T has an eigenvalue <= tol.
    """

    S_ab = np.asarray(S_ab, dtype=np.float64)
    C_occ_a = np.asarray(C_occ_a, dtype=np.float64)
    if C_occ_a.ndim != 2 or S_ab.shape[0] != C_occ_a.shape[0]:
        raise ValueError("S_ab rows must match the basis of C_occ_a")
    if S_ab.shape[1] != ortho_b.nbf:
        raise ValueError("S_ab columns must match the target basis")

    X = ortho_b.X
    Y = X.T @ (S_ab.T @ C_occ_a)  # occupied space in the orthogonal B basis
    T = Y.T @ Y
    t, V = np.linalg.eigh(0.5 * (T + T.T))
    t_min = float(t[0]) if t.size else 0.0
    if t.size == 0 or t_min <= float(tol):
        raise ProjectionError(
            "projected occupied space is not positive definite in the target basis",
            min_eigenvalue=t_min,
        )
    T_inv_half = (V / np.sqrt(t)[None, :]) @ V.T
    return X @ (Y @ T_inv_half)


def complete_virtuals(C_occ: np.ndarray, S: np.ndarray, ortho: Orthogonalizer) -> np.ndarray:
    """Append an S-orthonormal virtual complement to occupied columns."""

    nocc = int(C_occ.shape[1])
    Y = ortho.X.T @ S @ C_occ
    U, _s, _vt = np.linalg.svd(Y, full_matrices=True)
    return np.hstack([C_occ, ortho.X @ U[:, nocc:]])


class ProjectionGuess:
    """Start from occupied orbitals converged in another basis of the same molecule."""

    kind = "projection"

    def __init__(self, source_helper, source_mo_coeff: np.ndarray, *, tol: float = 1e-8):
        self.source_helper = source_helper
        self.source_mo_coeff = np.asarray(source_mo_coeff, dtype=np.float64)
        self.tol = float(tol)

    def build(self, helper, ortho: Orthogonalizer, ndocc: int) -> GuessResult:
        S_ab = helper.projector(self.source_helper)
        C_occ = project_occupied(S_ab, self.source_mo_coeff[:, :ndocc], ortho, tol=self.tol)
        S = np.asarray(helper["S"], dtype=np.float64)
        H = np.asarray(helper["H"], dtype=np.float64)
        C = complete_virtuals(C_occ, S, ortho)
        D = density_from_occupied(C, ndocc)
        return GuessResult(kind=self.kind, mo_coeff=C, mo_energy=None, energy=rhf_energy(D, H, H), n_dropped=ortho.n_dropped)


_GUESSES: dict[str, type] = {
    "core": CoreGuess,
    "gwh": GWHGuess,
    "huckel": HuckelGuess,
}


def select_guess(name: str) -> GuessStrategy:
    key = str(name).strip().lower()
    if key not in _GUESSES:
        raise InvalidOptionError("scf_guess", name, SCF_GUESSES)
    return _GUESSES[key]()


__all__ = [
    "CoreGuess",
    "GWHGuess",
    "GuessResult",
    "GuessStrategy",
    "HuckelGuess",
    "ProjectionGuess",
    "WH_CONSTANT",
    "complete_virtuals",
    "project_occupied",
    "select_guess",
]

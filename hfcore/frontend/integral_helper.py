from __future__ import annotations

"""Key-indexed AO integral storage for SCF runs.

`IntegralHelper` wraps a `Molecule` and a basis choice and builds integrals on
first access, caching the result:

  helper["S"], helper["T"], helper["V"], helper["H"]   (nbf, nbf)
  helper["ERI"]                                        (nbf*nbf, nbf*nbf), ordered-pair layout
  helper["B"]                                          (nbf, nbf, naux), whitened DF factors

`IntegralHelper.from_matrices` wraps externally computed matrices instead; such
a helper has no basis, so metadata used by the Hückel and projection guesses is
unavailable.
"""

import copy
import time
from typing import Any

import numpy as np

from hfcore.errors import InvalidOptionError
from hfcore.integrals.basis import CartBasis
from hfcore.integrals.df import build_df_B
from hfcore.integrals.eri import build_eri_mat
from hfcore.integrals.int1e import build_S, build_S_cross, build_T, build_V

from .basis_bse import load_autoaux_shells, load_basis_shells
from .basis_packer import pack_cart_basis, parse_basis_dict
from .molecule import Molecule

_KEYS = ("S", "T", "V", "H", "ERI", "B")
_FIT_SUFFIXES = ("-jkfit", "-jfit", "-rifit", "-ri", "-mp2fit")


def _unique_elements(mol: Molecule) -> list[str]:
    return sorted(set(mol.elements))


def build_ao_basis(mol: Molecule, basis: Any) -> tuple[CartBasis, str]:
    """Pack the orbital basis for `mol`; returns (basis, basis_name)."""

    elements = _unique_elements(mol)
    if isinstance(basis, str):
        shells = load_basis_shells(basis, elements=elements)
        name = str(basis)
    elif isinstance(basis, dict):
        shells = parse_basis_dict(basis, elements=elements)
        name = "<explicit>"
    else:
        raise TypeError("basis must be a string name or an explicit per-element basis dict")
    return pack_cart_basis(list(mol.atoms_bohr), shells), name


def build_aux_basis(mol: Molecule, basis: Any, jkfit: Any) -> tuple[CartBasis, str]:
    """Pack the DF fitting basis; returns (aux_basis, auxbasis_name).

    `jkfit` may be "auto"/"autoaux" (BSE autoaux of the orbital basis), a BSE
    name, or an explicit basis dict. Fitting-basis names BSE does not carry
    (e.g. "cc-pvdz-jkfit") resolve to the autoaux basis of their stem.
    """

    elements = _unique_elements(mol)
    if isinstance(jkfit, dict):
        return pack_cart_basis(list(mol.atoms_bohr), parse_basis_dict(jkfit, elements=elements)), "<explicit>"
    if not isinstance(jkfit, str):
        raise TypeError("jkfit must be 'auto', a basis name, or an explicit per-element basis dict")

    key = jkfit.strip()
    if key.lower() in ("auto", "autoaux"):
        if not isinstance(basis, str):
            raise ValueError("jkfit='auto' requires the orbital basis to be a string name")
        name, shells = load_autoaux_shells(basis, elements=elements)
    else:
        stem = None
        for suf in _FIT_SUFFIXES:
            if key.lower().endswith(suf):
                stem = key[: -len(suf)] or (basis if isinstance(basis, str) else None)
                break
        try:
            shells = load_basis_shells(key, elements=elements)
            name = key
        except (KeyError, ValueError, RuntimeError):
            if stem is None:
                raise
            name, shells = load_autoaux_shells(stem, elements=elements)
    return pack_cart_basis(list(mol.atoms_bohr), shells), name


class IntegralHelper:
    """Lazy, caching integral store for one molecule in one orbital basis."""

    def __init__(
        self,
        molecule: Molecule | None,
        basis: Any = None,
        jkfit: Any = "auto",
        *,
        verbose: int = 0,
        profile: dict | None = None,
    ):
        self.molecule = molecule
        self.jkfit = jkfit
        self.verbose = int(verbose)
        self.profile = profile
        self._cache: dict[str, np.ndarray] = {}
        self.auxbasis_name: str | None = None
        self._aux_basis: CartBasis | None = None
        self._energy_nuc: float | None = None

        if molecule is None:
            self.ao_basis: CartBasis | None = None
            self.basis_spec = basis
            self.basis_name = "<matrices>"
            return

        basis_in = molecule.basis if basis is None else basis
        if basis_in is None:
            basis_in = "sto-3g"
        self.basis_spec = basis_in
        self.ao_basis, self.basis_name = build_ao_basis(molecule, basis_in)

    @classmethod
    def from_matrices(
        cls,
        *,
        S: np.ndarray,
        T: np.ndarray,
        V: np.ndarray,
        ERI: np.ndarray | None = None,
        B: np.ndarray | None = None,
        energy_nuc: float = 0.0,
    ) -> "IntegralHelper":
        """Wrap precomputed AO matrices (ERI may be (n,n,n,n) or (n*n, n*n))."""

        helper = cls(None)
        S = np.asarray(S, dtype=np.float64)
        n = int(S.shape[0])
        if S.shape != (n, n):
            raise ValueError("S must be square")
        helper._cache["S"] = S
        for key, mat in (("T", T), ("V", V)):
            mat = np.asarray(mat, dtype=np.float64)
            if mat.shape != (n, n):
                raise ValueError(f"{key} must have shape {(n, n)}")
            helper._cache[key] = mat
        if ERI is not None:
            eri = np.asarray(ERI, dtype=np.float64)
            if eri.size != n**4:
                raise ValueError("ERI must hold n^4 elements")
            helper._cache["ERI"] = eri.reshape((n * n, n * n))
        if B is not None:
            B = np.asarray(B, dtype=np.float64)
            if B.ndim != 3 or B.shape[:2] != (n, n):
                raise ValueError("B must have shape (n, n, naux)")
            helper._cache["B"] = B
        helper._energy_nuc = float(energy_nuc)
        return helper

    # ---- metadata ----

    @property
    def nbf(self) -> int:
        if self.ao_basis is not None:
            return int(self.ao_basis.nao)
        return int(self._cache["S"].shape[0])

    @property
    def energy_nuc(self) -> float:
        if self._energy_nuc is None:
            self._energy_nuc = float(self.molecule.energy_nuc()) if self.molecule is not None else 0.0
        return float(self._energy_nuc)

    def _require_basis(self, what: str) -> CartBasis:
        if self.ao_basis is None:
            raise ValueError(f"{what} requires an IntegralHelper built from a Molecule and basis")
        return self.ao_basis

    @property
    def ao_atom(self) -> np.ndarray:
        return self._require_basis("ao_atom").ao_labels()[0]

    @property
    def ao_l(self) -> np.ndarray:
        return self._require_basis("ao_l").ao_labels()[1]

    @property
    def ao_shell_rank(self) -> np.ndarray:
        return self._require_basis("ao_shell_rank").ao_labels()[2]

    @property
    def ao_element(self) -> tuple[str, ...]:
        elements = self.molecule.elements
        return tuple(elements[int(ia)] for ia in self.ao_atom)

    # ---- storage ----

    def __contains__(self, key: str) -> bool:
        return key in self._cache

    def __getitem__(self, key: str) -> np.ndarray:
        if key not in _KEYS:
            raise KeyError(f"unknown integral key {key!r} (expected one of {', '.join(_KEYS)})")
        hit = self._cache.get(key)
        if hit is not None:
            return hit
        if key == "H":
            out = self["T"] + self["V"]
        else:
            if self.ao_basis is None:
                raise KeyError(f"integral {key!r} was not supplied to IntegralHelper.from_matrices")
            out = self._build(key)
        self._cache[key] = out
        return out

    def _build(self, key: str) -> np.ndarray:
        basis = self.ao_basis
        mol = self.molecule
        t0 = time.perf_counter()
        if key == "S":
            out = build_S(basis)
        elif key == "T":
            out = build_T(basis)
        elif key == "V":
            out = build_V(basis, atom_coords_bohr=mol.coords_bohr, atom_charges=mol.atom_charges)
        elif key == "ERI":
            out = build_eri_mat(basis)
        else:
            if self._aux_basis is None:
                self._aux_basis, self.auxbasis_name = build_aux_basis(mol, self.basis_spec, self.jkfit)
            out = build_df_B(basis, self._aux_basis)
        dt = time.perf_counter() - t0
        if self.profile is not None:
            self.profile[f"t_int_{key}_s"] = float(dt)
        if self.verbose >= 1:
            extra = f" aux={self.auxbasis_name}" if key == "B" else ""
            print(f"[integrals] built {key} basis={self.basis_name} nbf={basis.nao}{extra} ({dt:.3f}s)")
        return out

    def projector(self, other: "IntegralHelper") -> np.ndarray:
        """Cross overlap <other|self>, shape (other.nbf, self.nbf)."""

        return build_S_cross(other._require_basis("projector"), self._require_basis("projector"))

    def with_basis(self, basis: Any, jkfit: Any | None = None) -> "IntegralHelper":
        """A new helper for the same molecule in another orbital basis."""

        if self.molecule is None:
            raise ValueError("with_basis requires an IntegralHelper built from a Molecule")
        return IntegralHelper(
            self.molecule,
            basis,
            self.jkfit if jkfit is None else jkfit,
            verbose=self.verbose,
            profile=self.profile,
        )

    def with_jkfit(self, jkfit: Any) -> "IntegralHelper":
        """A helper in the same orbital basis with another fitting basis.

        Cached non-DF integrals are shared; DF factors are rebuilt on demand.
        """

        if self.molecule is None:
            raise InvalidOptionError("jkfit", jkfit, "no fitting basis for an IntegralHelper built from matrices")
        out = copy.copy(self)
        out.jkfit = jkfit
        out._cache = {k: v for k, v in self._cache.items() if k != "B"}
        out._aux_basis = None
        out.auxbasis_name = None
        return out


__all__ = ["IntegralHelper", "build_ao_basis", "build_aux_basis"]

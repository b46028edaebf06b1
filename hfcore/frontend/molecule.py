from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .periodic_table import atomic_number, element_symbol

_ANGSTROM_TO_BOHR = 1.8897259886


def _parse_atom_string(atom: str) -> list[tuple[str, np.ndarray]]:
    atoms: list[tuple[str, np.ndarray]] = []
    for frag in str(atom).replace("\n", ";").split(";"):
        frag = frag.strip()
        if not frag:
            continue
        tok = frag.split()
        if len(tok) != 4:
            raise ValueError(f"invalid atom fragment: {frag!r} (expected: 'El x y z')")
        xyz = np.asarray([float(x) for x in tok[1:]], dtype=np.float64)
        atoms.append((tok[0], xyz))
    return atoms


def _parse_atoms(atoms: Any) -> list[tuple[str, np.ndarray]]:
    if isinstance(atoms, str):
        out = _parse_atom_string(atoms)
    elif isinstance(atoms, (list, tuple)):
        out = []
        for item in atoms:
            if isinstance(item, str):
                out.extend(_parse_atom_string(item))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                out.append((str(item[0]), np.asarray(item[1], dtype=np.float64).reshape((3,))))
            else:
                raise ValueError(f"invalid atom entry: {item!r}")
    else:
        raise TypeError("atoms must be an 'El x y z; ...' string or a list of (sym, (x,y,z))")
    if not out:
        raise ValueError("no atoms parsed")
    # normalise "h" / "H1" to "H" so basis lookups see canonical symbols
    return [(element_symbol(atomic_number(sym)), xyz) for sym, xyz in out]


@dataclass(frozen=True)
class Molecule:
    """Closed-shell molecule descriptor: geometry (Bohr), charge, spin and basis spec."""

    atoms_bohr: tuple[tuple[str, np.ndarray], ...]
    charge: int = 0
    spin: int = 0  # nalpha - nbeta
    basis: Any = None  # orbital basis: name string or explicit basis dict

    @classmethod
    def from_atoms(
        cls,
        atoms: Any,
        *,
        unit: str = "Bohr",
        charge: int = 0,
        spin: int = 0,
        basis: Any = None,
    ) -> "Molecule":
        atoms_list = _parse_atoms(atoms)
        unit_norm = str(unit).strip().lower()
        if unit_norm in ("bohr", "a0", "au"):
            scale = 1.0
        elif unit_norm in ("angstrom", "ang", "a"):
            scale = _ANGSTROM_TO_BOHR
        else:
            raise ValueError("unit must be 'Bohr' or 'Angstrom'")
        atoms_bohr = tuple((sym, xyz * scale) for sym, xyz in atoms_list)
        return cls(atoms_bohr=atoms_bohr, charge=int(charge), spin=int(spin), basis=basis)

    @property
    def elements(self) -> tuple[str, ...]:
        return tuple(sym for sym, _ in self.atoms_bohr)

    @property
    def natm(self) -> int:
        return int(len(self.atoms_bohr))

    @property
    def coords_bohr(self) -> np.ndarray:
        """Atomic coordinates as an array (natm, 3) in Bohr."""

        return np.asarray([xyz for _sym, xyz in self.atoms_bohr], dtype=np.float64).reshape((self.natm, 3))

    @property
    def atom_charges(self) -> np.ndarray:
        return np.asarray([float(atomic_number(sym)) for sym in self.elements], dtype=np.float64)

    @property
    def nelectron(self) -> int:
        zsum = sum(atomic_number(sym) for sym in self.elements)
        return int(zsum - int(self.charge))

    @property
    def ndocc(self) -> int:
        """Number of doubly occupied orbitals (electron pairs)."""

        nelec = self.nelectron
        if int(self.spin) != 0:
            raise ValueError(f"RHF requires spin=0 (got spin={self.spin})")
        if nelec < 0 or nelec % 2 != 0:
            raise ValueError(f"RHF requires an even, non-negative electron count (got {nelec})")
        return nelec // 2

    def energy_nuc(self) -> float:
        """Nuclear repulsion energy in Hartree (Bohr geometry)."""

        Z = self.atom_charges
        R = self.coords_bohr
        e = 0.0
        for i in range(self.natm):
            for j in range(i + 1, self.natm):
                Rij = float(np.linalg.norm(R[i] - R[j]))
                if Rij == 0.0:
                    raise ValueError("coincident nuclei")
                e += float(Z[i] * Z[j]) / Rij
        return float(e)

    def with_basis(self, basis: Any) -> "Molecule":
        return Molecule(atoms_bohr=self.atoms_bohr, charge=self.charge, spin=self.spin, basis=basis)


__all__ = ["Molecule"]

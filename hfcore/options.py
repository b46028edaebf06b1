from __future__ import annotations

"""Resolved SCF settings.

`SCFOptions` is validated on construction, so an unrecognised algorithm or
guess name is rejected before any integral or matrix is built.
"""

from dataclasses import dataclass, fields, replace as _dc_replace
from typing import Any, Mapping

from .errors import InvalidOptionError

SCF_ALGORITHMS = frozenset({"conventional", "df"})
SCF_GUESSES = frozenset({"core", "gwh", "huckel"})


def _validate_choice(name: str, value: Any, allowed: frozenset[str]) -> str:
    if not isinstance(value, str):
        raise InvalidOptionError(name, value, allowed)
    v = value.strip().lower()
    if v not in allowed:
        raise InvalidOptionError(name, value, allowed)
    return v


def _validate_positive_float(name: str, value: Any) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidOptionError(name, value, "a positive float") from exc
    if not v > 0.0:
        raise InvalidOptionError(name, value, "a positive float")
    return v


def _validate_int(name: str, value: Any, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOptionError(name, value, f"an integer >= {minimum}")
    if value < minimum:
        raise InvalidOptionError(name, value, f"an integer >= {minimum}")
    return int(value)


@dataclass(frozen=True)
class SCFOptions:
    """Settings for one RHF run.

    Parameters
    ----------
    scf_alg : str
        Fock-build algorithm: "conventional" (four-index ERIs) or "df".
    scf_guess : str
        Initial guess: "core", "gwh" or "huckel".
    scf_max_rms : float
        Convergence threshold on the RMS change of the density matrix.
    scf_max_iter : int
        Maximum number of SCF iterations.
    oda, oda_cutoff, oda_shutoff
        Optimal damping switch; damping stays on while RMS(dD) > oda_cutoff
        and the iteration count is below oda_shutoff.
    basis, jkfit
        Orbital and fitting basis identifiers handed to the integral layer.
    diis, diis_space, diis_start
        Pulay extrapolation switch, history capacity, and first eligible cycle.
    lindep_tol : float
        Overlap eigenvalues with magnitude <= lindep_tol are projected out.
    verbose : int
        0 silent, 1 summary lines, 2 one line per iteration.
    """

    scf_alg: str = "conventional"
    scf_guess: str = "gwh"
    scf_max_rms: float = 1e-10
    scf_max_iter: int = 50
    oda: bool = True
    oda_cutoff: float = 1e-1
    oda_shutoff: int = 20
    basis: Any = "sto-3g"
    jkfit: Any = "auto"
    diis: bool = True
    diis_space: int = 8
    diis_start: int = 1
    lindep_tol: float = 1e-7
    verbose: int = 0

    def __post_init__(self) -> None:
        # frozen dataclass: write normalised values through object.__setattr__
        set_ = object.__setattr__
        set_(self, "scf_alg", _validate_choice("scf_alg", self.scf_alg, SCF_ALGORITHMS))
        set_(self, "scf_guess", _validate_choice("scf_guess", self.scf_guess, SCF_GUESSES))
        set_(self, "scf_max_rms", _validate_positive_float("scf_max_rms", self.scf_max_rms))
        set_(self, "scf_max_iter", _validate_int("scf_max_iter", self.scf_max_iter, minimum=1))
        set_(self, "oda_cutoff", _validate_positive_float("oda_cutoff", self.oda_cutoff))
        set_(self, "oda_shutoff", _validate_int("oda_shutoff", self.oda_shutoff, minimum=0))
        set_(self, "diis_space", _validate_int("diis_space", self.diis_space, minimum=2))
        set_(self, "diis_start", _validate_int("diis_start", self.diis_start, minimum=1))
        set_(self, "lindep_tol", _validate_positive_float("lindep_tol", self.lindep_tol))
        set_(self, "verbose", _validate_int("verbose", self.verbose, minimum=0))
        for name in ("oda", "diis"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidOptionError(name, getattr(self, name), "a bool")
        if not isinstance(self.basis, (str, dict)):
            raise InvalidOptionError("basis", self.basis, "a basis name or per-element basis dict")
        if not isinstance(self.jkfit, (str, dict)):
            raise InvalidOptionError("jkfit", self.jkfit, "'auto', a basis name, or a per-element basis dict")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SCFOptions":
        known = {f.name for f in fields(cls)}
        for key in mapping:
            if key not in known:
                raise InvalidOptionError(str(key), mapping[key], "a known SCF option name")
        return cls(**dict(mapping))

    def replace(self, **changes: Any) -> "SCFOptions":
        known = {f.name for f in fields(self)}
        for key in changes:
            if key not in known:
                raise InvalidOptionError(str(key), changes[key], "a known SCF option name")
        return _dc_replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


__all__ = ["SCF_ALGORITHMS", "SCF_GUESSES", "SCFOptions"]

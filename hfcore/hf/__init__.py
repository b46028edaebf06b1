from __future__ import annotations

"""Closed-shell Hartree–Fock SCF over precomputed AO integrals."""

from .diis import DIIS, fock_error
from .energy import density_from_occupied, rhf_energy
from .fock import ConventionalFockBuilder, DFFockBuilder, FockBuilder, select_fock_builder
from .guess import (
    CoreGuess,
    GuessResult,
    GuessStrategy,
    GWHGuess,
    HuckelGuess,
    ProjectionGuess,
    complete_virtuals,
    project_occupied,
    select_guess,
)
from .jk import dense_JK, df_JK
from .oda import ODAStep, oda_lambda, oda_step
from .orthogonalizer import LINDEP_TOL, Orthogonalizer, orthogonalizer
from .rhf import RHF, SCFIteration, SCFNotConverged, SCFPhase, SCFState, rhf_kernel, run_rhf

__all__ = [
    "ConventionalFockBuilder",
    "CoreGuess",
    "DFFockBuilder",
    "DIIS",
    "FockBuilder",
    "GWHGuess",
    "GuessResult",
    "GuessStrategy",
    "HuckelGuess",
    "LINDEP_TOL",
    "ODAStep",
    "Orthogonalizer",
    "ProjectionGuess",
    "RHF",
    "SCFIteration",
    "SCFNotConverged",
    "SCFPhase",
    "SCFState",
    "complete_virtuals",
    "dense_JK",
    "density_from_occupied",
    "df_JK",
    "fock_error",
    "oda_lambda",
    "oda_step",
    "orthogonalizer",
    "project_occupied",
    "rhf_energy",
    "rhf_kernel",
    "run_rhf",
    "select_fock_builder",
    "select_guess",
]

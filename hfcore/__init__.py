from __future__ import annotations

"""hfcore: closed-shell restricted Hartree–Fock with conventional and density-fitted Fock builds."""

from .errors import HFCoreError, InvalidOptionError, ProjectionError, SCFConvergenceError
from .frontend import IntegralHelper, Molecule
from .hf import RHF, SCFNotConverged, SCFPhase, run_rhf
from .options import SCFOptions

__version__ = "0.1.0"

__all__ = [
    "HFCoreError",
    "IntegralHelper",
    "InvalidOptionError",
    "Molecule",
    "ProjectionError",
    "RHF",
    "SCFConvergenceError",
    "SCFNotConverged",
    "SCFOptions",
    "SCFPhase",
    "run_rhf",
]

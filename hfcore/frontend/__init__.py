from __future__ import annotations

"""Front-end building blocks: molecules, basis sets and integral storage."""

from .integral_helper import IntegralHelper, build_ao_basis, build_aux_basis
from .molecule import Molecule

__all__ = ["IntegralHelper", "Molecule", "build_ao_basis", "build_aux_basis"]

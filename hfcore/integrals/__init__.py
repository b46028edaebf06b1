from __future__ import annotations

"""Reference Gaussian integral engine (Cartesian GTOs, pure NumPy)."""

from .basis import CartBasis
from .df import build_df_B, whiten_df_factors
from .eri import build_eri_mat, build_int2c, build_int3c
from .int1e import build_S, build_S_cross, build_T, build_V

__all__ = [
    "CartBasis",
    "build_S",
    "build_S_cross",
    "build_T",
    "build_V",
    "build_df_B",
    "build_eri_mat",
    "build_int2c",
    "build_int3c",
    "whiten_df_factors",
]

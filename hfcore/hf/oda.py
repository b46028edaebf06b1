from __future__ import annotations

"""Optimal damping (Cancès–Le Bris) for RHF.

The RHF energy is quadratic along D(λ) = D̃ + λ (D - D̃):

  E(λ) = E(D̃) + 2 λ s + λ² c
  s = Tr(F̃ (D - D̃)),   c = Tr((F - F̃)(D - D̃))

where F̃ = F[D̃] and F = F[D]. The minimiser over [0, 1] is taken and both
the density and the (linear in D) Fock matrix are interpolated with it.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ODAStep:
    lam: float
    D: np.ndarray
    F: np.ndarray
    energy: float  # predicted E(λ)


def oda_lambda(slope: float, curvature: float) -> float:
    if curvature > 0.0 and -slope / curvature < 1.0:
        lam = -slope / curvature
    else:
        lam = 1.0
    return float(min(1.0, max(0.0, lam)))


def oda_step(
    D_tilde: np.ndarray,
    F_tilde: np.ndarray,
    E_tilde: float,
    D_new: np.ndarray,
    F_new: np.ndarray,
) -> ODAStep:
    """Exact line search between (D̃, F̃) and the newly built (D, F)."""

    dD = D_new - D_tilde
    dF = F_new - F_tilde
    s = float(np.sum(F_tilde * dD))
    c = float(np.sum(dF * dD))
    lam = oda_lambda(s, c)
    return ODAStep(
        lam=lam,
        D=D_tilde + lam * dD,
        F=F_tilde + lam * dF,
        energy=float(E_tilde + 2.0 * lam * s + lam * lam * c),
    )


__all__ = ["ODAStep", "oda_lambda", "oda_step"]

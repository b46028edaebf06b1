from __future__ import annotations

import numpy as np


def rhf_energy(D: np.ndarray, H: np.ndarray, F: np.ndarray) -> float:
    """RHF electronic energy Σ_ij D_ij (H_ij + F_ij) for D = Co Co^T."""

    D = np.asarray(D, dtype=np.float64)
    H = np.asarray(H, dtype=np.float64)
    F = np.asarray(F, dtype=np.float64)
    if not (D.shape == H.shape == F.shape) or D.ndim != 2:
        raise ValueError("D, H and F must be square matrices of equal shape")
    return float(np.sum(D * (H + F)))


def density_from_occupied(C: np.ndarray, ndocc: int) -> np.ndarray:
    """D = Co Co^T with Co = C[:, :ndocc] (no factor of 2)."""

    C = np.asarray(C, dtype=np.float64)
    if C.ndim != 2:
        raise ValueError("C must be 2D")
    ndocc = int(ndocc)
    if ndocc < 0 or ndocc > int(C.shape[1]):
        raise ValueError(f"ndocc={ndocc} out of range for {C.shape[1]} orbitals")
    Co = C[:, :ndocc]
    D = Co @ Co.T
    return 0.5 * (D + D.T)


__all__ = ["density_from_occupied", "rhf_energy"]

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .cart import ncart


@dataclass(frozen=True)
class CartBasis:
    """Packed Cartesian AO basis (structure of arrays).

    Every logical shell is a single contraction of unnormalized primitives
    exp(-a r^2); `prim_coef` already includes primitive and contraction
    normalization.

    Parameters
    ----------
    shell_cxyz : np.ndarray
        Shell centers in Bohr. Shape: `(nShell, 3)`.
    shell_prim_start : np.ndarray
        Offset of each shell's primitives in `prim_exp`/`prim_coef`.
    shell_nprim : np.ndarray
        Number of primitives per shell.
    shell_l : np.ndarray
        Angular momentum per shell.
    shell_ao_start : np.ndarray
        First AO index of each shell; the `ncart(l)` components follow.
    shell_atom : np.ndarray
        Index of the atom a shell sits on.
    shell_rank : np.ndarray
        0-based rank of the shell among shells with the same l on its atom
        (0 = innermost listed shell of that l).
    prim_exp, prim_coef : np.ndarray
        Primitive exponents and contraction coefficients. Shape: `(nPrim,)`.
    """

    shell_cxyz: np.ndarray
    shell_prim_start: np.ndarray
    shell_nprim: np.ndarray
    shell_l: np.ndarray
    shell_ao_start: np.ndarray
    shell_atom: np.ndarray
    shell_rank: np.ndarray
    prim_exp: np.ndarray
    prim_coef: np.ndarray

    def __post_init__(self) -> None:
        if self.shell_cxyz.dtype != np.float64:
            raise TypeError("shell_cxyz must be float64")
        if self.shell_cxyz.ndim != 2 or self.shell_cxyz.shape[1] != 3:
            raise ValueError("shell_cxyz must have shape (nShell, 3)")
        n_shell = int(self.shell_cxyz.shape[0])
        for name in ("shell_prim_start", "shell_nprim", "shell_l", "shell_ao_start", "shell_atom", "shell_rank"):
            arr = getattr(self, name)
            if arr.dtype != np.int32:
                raise TypeError(f"{name} must be int32")
            if arr.shape != (n_shell,):
                raise ValueError(f"{name} must have shape (nShell,)")
        if self.prim_exp.dtype != np.float64 or self.prim_coef.dtype != np.float64:
            raise TypeError("prim_exp/prim_coef must be float64")
        if self.prim_exp.shape != self.prim_coef.shape or self.prim_exp.ndim != 1:
            raise ValueError("prim_exp and prim_coef must be 1D arrays with identical shape")

    @property
    def nshell(self) -> int:
        return int(self.shell_l.shape[0])

    @property
    def nao(self) -> int:
        if self.nshell == 0:
            return 0
        return int(max(int(a0) + ncart(int(l)) for a0, l in zip(self.shell_ao_start, self.shell_l)))

    def shell_prims(self, sh: int) -> tuple[np.ndarray, np.ndarray]:
        """Return (exps, coefs) of one shell."""

        s0 = int(self.shell_prim_start[sh])
        n = int(self.shell_nprim[sh])
        return self.prim_exp[s0 : s0 + n], self.prim_coef[s0 : s0 + n]

    def ao_labels(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Per-AO (atom index, l, shell rank) arrays, each of shape (nao,)."""

        nao = self.nao
        ao_atom = np.empty((nao,), dtype=np.int32)
        ao_l = np.empty((nao,), dtype=np.int32)
        ao_rank = np.empty((nao,), dtype=np.int32)
        for sh in range(self.nshell):
            a0 = int(self.shell_ao_start[sh])
            n = ncart(int(self.shell_l[sh]))
            ao_atom[a0 : a0 + n] = self.shell_atom[sh]
            ao_l[a0 : a0 + n] = self.shell_l[sh]
            ao_rank[a0 : a0 + n] = self.shell_rank[sh]
        return ao_atom, ao_l, ao_rank


__all__ = ["CartBasis"]

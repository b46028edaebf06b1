from __future__ import annotations

"""AO one-electron integrals over packed Cartesian bases.

Scope
-----
- Overlap S, and the rectangular cross-basis overlap S_ab
- Kinetic T
- Nuclear attraction V (sum over nuclei, -Z/|r-C|)
"""

from math import pi

import numpy as np

from .basis import CartBasis
from .cart import cartesian_components, ncart
from .hermite import hermite_E_table, hermite_R_table, overlap_1d_table


def _overlap_tile(basis_a: CartBasis, shA: int, basis_b: CartBasis, shB: int) -> np.ndarray:
    la = int(basis_a.shell_l[shA])
    lb = int(basis_b.shell_l[shB])
    compA = cartesian_components(la)
    compB = cartesian_components(lb)
    cA = basis_a.shell_cxyz[shA]
    cB = basis_b.shell_cxyz[shB]
    expA, coefA = basis_a.shell_prims(shA)
    expB, coefB = basis_b.shell_prims(shB)

    tile = np.zeros((ncart(la), ncart(lb)), dtype=np.float64)
    for a, ca in zip(expA, coefA):
        for b, cb in zip(expB, coefB):
            Sx = overlap_1d_table(la=la, lb=lb, a=float(a), b=float(b), Ax=float(cA[0]), Bx=float(cB[0]))
            Sy = overlap_1d_table(la=la, lb=lb, a=float(a), b=float(b), Ax=float(cA[1]), Bx=float(cB[1]))
            Sz = overlap_1d_table(la=la, lb=lb, a=float(a), b=float(b), Ax=float(cA[2]), Bx=float(cB[2]))
            c = float(ca) * float(cb)
            for i, (ax, ay, az) in enumerate(compA):
                for j, (bx, by, bz) in enumerate(compB):
                    tile[i, j] += c * Sx[ax, bx] * Sy[ay, by] * Sz[az, bz]
    return tile


def _kinetic_1d(S: np.ndarray, i: int, j: int, b: float) -> float:
    # ket-derivative form: T(i,j) = b(2j+1)S(i,j) - 2b^2 S(i,j+2) - j(j-1)/2 S(i,j-2)
    val = b * (2.0 * float(j) + 1.0) * float(S[i, j]) - 2.0 * b * b * float(S[i, j + 2])
    if j >= 2:
        val -= 0.5 * float(j * (j - 1)) * float(S[i, j - 2])
    return val


def _kinetic_tile(basis: CartBasis, shA: int, shB: int) -> np.ndarray:
    la = int(basis.shell_l[shA])
    lb = int(basis.shell_l[shB])
    compA = cartesian_components(la)
    compB = cartesian_components(lb)
    cA = basis.shell_cxyz[shA]
    cB = basis.shell_cxyz[shB]
    expA, coefA = basis.shell_prims(shA)
    expB, coefB = basis.shell_prims(shB)

    tile = np.zeros((ncart(la), ncart(lb)), dtype=np.float64)
    for a, ca in zip(expA, coefA):
        for b, cb in zip(expB, coefB):
            a = float(a)
            b = float(b)
            S1 = [
                overlap_1d_table(la=la, lb=lb + 2, a=a, b=b, Ax=float(cA[k]), Bx=float(cB[k]))
                for k in range(3)
            ]
            c = float(ca) * float(cb)
            for i, ai in enumerate(compA):
                for j, bj in enumerate(compB):
                    s = [float(S1[k][ai[k], bj[k]]) for k in range(3)]
                    t = [_kinetic_1d(S1[k], ai[k], bj[k], b) for k in range(3)]
                    tile[i, j] += c * (t[0] * s[1] * s[2] + s[0] * t[1] * s[2] + s[0] * s[1] * t[2])
    return tile


def _nuclear_tile(
    basis: CartBasis,
    shA: int,
    shB: int,
    atom_coords_bohr: np.ndarray,
    atom_charges: np.ndarray,
) -> np.ndarray:
    la = int(basis.shell_l[shA])
    lb = int(basis.shell_l[shB])
    compA = cartesian_components(la)
    compB = cartesian_components(lb)
    cA = basis.shell_cxyz[shA]
    cB = basis.shell_cxyz[shB]
    expA, coefA = basis.shell_prims(shA)
    expB, coefB = basis.shell_prims(shB)

    tile = np.zeros((ncart(la), ncart(lb)), dtype=np.float64)
    for a, ca in zip(expA, coefA):
        for b, cb in zip(expB, coefB):
            a = float(a)
            b = float(b)
            p = a + b
            P = (a * cA + b * cB) / p
            E = [hermite_E_table(la=la, lb=lb, a=a, b=b, Ax=float(cA[k]), Bx=float(cB[k])) for k in range(3)]
            pref = float(ca) * float(cb) * (2.0 * pi) / p
            for C, Z in zip(atom_coords_bohr, atom_charges):
                if float(Z) == 0.0:
                    continue
                R = hermite_R_table(alpha=p, PC=P - C, nmax=la + lb)
                for i, (ax, ay, az) in enumerate(compA):
                    for j, (bx, by, bz) in enumerate(compB):
                        ex = E[0][ax, bx, : ax + bx + 1]
                        ey = E[1][ay, by, : ay + by + 1]
                        ez = E[2][az, bz, : az + bz + 1]
                        Rb = R[: ax + bx + 1, : ay + by + 1, : az + bz + 1]
                        s = float(np.einsum("t,u,v,tuv->", ex, ey, ez, Rb))
                        tile[i, j] -= float(Z) * pref * s
    return tile


def _fill_symmetric(basis: CartBasis, tile_fn) -> np.ndarray:
    nao = basis.nao
    out = np.zeros((nao, nao), dtype=np.float64)
    for shA in range(basis.nshell):
        aoA = int(basis.shell_ao_start[shA])
        nA = ncart(int(basis.shell_l[shA]))
        for shB in range(shA + 1):
            aoB = int(basis.shell_ao_start[shB])
            nB = ncart(int(basis.shell_l[shB]))
            tile = tile_fn(shA, shB)
            out[aoA : aoA + nA, aoB : aoB + nB] = tile
            if shA != shB:
                out[aoB : aoB + nB, aoA : aoA + nA] = tile.T
    return out


def build_S(basis: CartBasis) -> np.ndarray:
    """AO overlap S (nao, nao)."""

    return _fill_symmetric(basis, lambda a, b: _overlap_tile(basis, a, basis, b))


def build_T(basis: CartBasis) -> np.ndarray:
    """AO kinetic energy T (nao, nao)."""

    return _fill_symmetric(basis, lambda a, b: _kinetic_tile(basis, a, b))


def build_V(basis: CartBasis, *, atom_coords_bohr: np.ndarray, atom_charges: np.ndarray) -> np.ndarray:
    """AO nuclear attraction V (nao, nao)."""

    coords = np.asarray(atom_coords_bohr, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] != 3:
        raise ValueError("atom_coords_bohr must have shape (natm, 3)")
    charges = np.asarray(atom_charges, dtype=np.float64).ravel()
    if charges.shape != (int(coords.shape[0]),):
        raise ValueError("atom_charges must have shape (natm,)")
    return _fill_symmetric(basis, lambda a, b: _nuclear_tile(basis, a, b, coords, charges))


def build_S_cross(basis_bra: CartBasis, basis_ket: CartBasis) -> np.ndarray:
    """Rectangular overlap <bra|ket> between two bases, shape (nao_bra, nao_ket).

    The two bases may differ in shells and centers (e.g. a small and a large
    basis on the same molecule).
    """

    out = np.zeros((basis_bra.nao, basis_ket.nao), dtype=np.float64)
    for shA in range(basis_bra.nshell):
        aoA = int(basis_bra.shell_ao_start[shA])
        nA = ncart(int(basis_bra.shell_l[shA]))
        for shB in range(basis_ket.nshell):
            aoB = int(basis_ket.shell_ao_start[shB])
            nB = ncart(int(basis_ket.shell_l[shB]))
            out[aoA : aoA + nA, aoB : aoB + nB] = _overlap_tile(basis_bra, shA, basis_ket, shB)
    return out


__all__ = ["build_S", "build_S_cross", "build_T", "build_V"]

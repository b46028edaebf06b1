from __future__ import annotations

"""Two-electron Coulomb integrals (McMurchie–Davidson, Cartesian GTOs).

(ab|cd) = 2 pi^(5/2) / (p q sqrt(p+q))
          * Σ_{tuv} E^{ab}_{tuv} Σ_{τνφ} (-1)^{τ+ν+φ} E^{cd}_{τνφ} R_{t+τ,u+ν,v+φ}(α, P-Q)

Auxiliary (density-fitting) functions are handled as shell pairs whose second
member is a unit s-function with zero exponent, so the same pair/pair kernel
yields the 4-index ERIs, the 3-index (μν|P) and the 2-index metric (P|Q).

Layouts
-------
- 4-index: ordered-pair matrix `eri_mat[μ*nao+ν, λ*nao+σ]`
- 3-index: `int3c[μ, ν, P]`
- 2-index: `int2c[P, Q]`
"""

from dataclasses import dataclass
from functools import lru_cache
from math import pi, sqrt
import time

import numpy as np

from .basis import CartBasis
from .cart import ncart
from .hermite import hermite_E_table, hermite_index, hermite_product_matrix, hermite_R_table

_TWO_PI_2P5 = 2.0 * pi**2.5


@dataclass(frozen=True)
class _PrimPair:
    p: float
    P: np.ndarray  # (3,)
    M: np.ndarray  # (nA*nB, (L+1)^3), includes contraction coefficients


@dataclass(frozen=True)
class _ShellPair:
    L: int
    nA: int
    nB: int
    prims: tuple[_PrimPair, ...]


def _shell_pair(basis_a: CartBasis, shA: int, basis_b: CartBasis | None, shB: int) -> _ShellPair:
    """Build Hermite expansions for a shell pair; `basis_b=None` pairs shA with a unit s-function."""

    la = int(basis_a.shell_l[shA])
    cA = basis_a.shell_cxyz[shA]
    expA, coefA = basis_a.shell_prims(shA)
    if basis_b is None:
        lb = 0
        cB = cA
        expB = np.zeros((1,), dtype=np.float64)
        coefB = np.ones((1,), dtype=np.float64)
    else:
        lb = int(basis_b.shell_l[shB])
        cB = basis_b.shell_cxyz[shB]
        expB, coefB = basis_b.shell_prims(shB)

    prims: list[_PrimPair] = []
    for a, ca in zip(expA, coefA):
        for b, cb in zip(expB, coefB):
            a = float(a)
            b = float(b)
            p = a + b
            E = [hermite_E_table(la=la, lb=lb, a=a, b=b, Ax=float(cA[k]), Bx=float(cB[k])) for k in range(3)]
            M = hermite_product_matrix(la, lb, E[0], E[1], E[2]) * (float(ca) * float(cb))
            prims.append(_PrimPair(p=p, P=(a * cA + b * cB) / p, M=M))
    return _ShellPair(L=la + lb, nA=ncart(la), nB=ncart(lb), prims=tuple(prims))


@lru_cache(maxsize=None)
def _coupling_index(L1: int, L2: int) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Index arrays into R for (t+τ, u+ν, v+φ) and the ket sign (-1)^{τ+ν+φ}."""

    t1, u1, v1 = hermite_index(L1)
    t2, u2, v2 = hermite_index(L2)
    it = t1[:, None] + t2[None, :]
    iu = u1[:, None] + u2[None, :]
    iv = v1[:, None] + v2[None, :]
    sign = np.where((t2 + u2 + v2) % 2 == 0, 1.0, -1.0)
    for x in (it, iu, iv, sign):
        x.setflags(write=False)
    return it, iu, iv, sign


def _pair_pair_block(bra: _ShellPair, ket: _ShellPair) -> np.ndarray:
    """Return (ab|cd) as a (nA*nB, nC*nD) block."""

    it, iu, iv, sign = _coupling_index(bra.L, ket.L)
    out = np.zeros((bra.nA * bra.nB, ket.nA * ket.nB), dtype=np.float64)
    nmax = bra.L + ket.L
    for pb in bra.prims:
        for pk in ket.prims:
            p = pb.p
            q = pk.p
            alpha = p * q / (p + q)
            R = hermite_R_table(alpha=alpha, PC=pb.P - pk.P, nmax=nmax)
            Rmat = R[it, iu, iv] * sign[None, :]
            pref = _TWO_PI_2P5 / (p * q * sqrt(p + q))
            out += pref * (pb.M @ Rmat @ pk.M.T)
    return out


def build_eri_mat(basis: CartBasis, *, profile: dict | None = None) -> np.ndarray:
    """Full AO ERIs in ordered-pair layout, shape (nao*nao, nao*nao)."""

    t0 = time.perf_counter()
    nao = basis.nao
    nsh = basis.nshell
    pairs: dict[tuple[int, int], _ShellPair] = {}
    for a in range(nsh):
        for b in range(a + 1):
            pairs[(a, b)] = _shell_pair(basis, a, basis, b)

    eri = np.zeros((nao, nao, nao, nao), dtype=np.float64)
    keys = list(pairs.keys())
    for i, (a, b) in enumerate(keys):
        pab = pairs[(a, b)]
        a0 = int(basis.shell_ao_start[a])
        b0 = int(basis.shell_ao_start[b])
        for c, d in keys[: i + 1]:
            pcd = pairs[(c, d)]
            c0 = int(basis.shell_ao_start[c])
            d0 = int(basis.shell_ao_start[d])
            blk = _pair_pair_block(pab, pcd).reshape((pab.nA, pab.nB, pcd.nA, pcd.nB))
            sa = slice(a0, a0 + pab.nA)
            sb = slice(b0, b0 + pab.nB)
            sc = slice(c0, c0 + pcd.nA)
            sd = slice(d0, d0 + pcd.nB)
            # 8-fold permutational symmetry
            eri[sa, sb, sc, sd] = blk
            eri[sb, sa, sc, sd] = blk.transpose(1, 0, 2, 3)
            eri[sa, sb, sd, sc] = blk.transpose(0, 1, 3, 2)
            eri[sb, sa, sd, sc] = blk.transpose(1, 0, 3, 2)
            eri[sc, sd, sa, sb] = blk.transpose(2, 3, 0, 1)
            eri[sd, sc, sa, sb] = blk.transpose(3, 2, 0, 1)
            eri[sc, sd, sb, sa] = blk.transpose(2, 3, 1, 0)
            eri[sd, sc, sb, sa] = blk.transpose(3, 2, 1, 0)

    if profile is not None:
        profile["nao"] = int(nao)
        profile["nshell_pairs"] = int(len(keys))
        profile["t_build_s"] = float(time.perf_counter() - t0)
    return eri.reshape((nao * nao, nao * nao))


def build_int3c(basis: CartBasis, aux_basis: CartBasis) -> np.ndarray:
    """Three-index integrals (μν|P), shape (nao, nao, naux)."""

    nao = basis.nao
    naux = aux_basis.nao
    aux_pairs = [_shell_pair(aux_basis, P, None, 0) for P in range(aux_basis.nshell)]
    out = np.zeros((nao, nao, naux), dtype=np.float64)
    for a in range(basis.nshell):
        a0 = int(basis.shell_ao_start[a])
        for b in range(a + 1):
            b0 = int(basis.shell_ao_start[b])
            pab = _shell_pair(basis, a, basis, b)
            for P, pP in enumerate(aux_pairs):
                p0 = int(aux_basis.shell_ao_start[P])
                blk = _pair_pair_block(pab, pP).reshape((pab.nA, pab.nB, pP.nA))
                out[a0 : a0 + pab.nA, b0 : b0 + pab.nB, p0 : p0 + pP.nA] = blk
                out[b0 : b0 + pab.nB, a0 : a0 + pab.nA, p0 : p0 + pP.nA] = blk.transpose(1, 0, 2)
    return out


def build_int2c(aux_basis: CartBasis) -> np.ndarray:
    """Two-index Coulomb metric (P|Q), shape (naux, naux)."""

    naux = aux_basis.nao
    aux_pairs = [_shell_pair(aux_basis, P, None, 0) for P in range(aux_basis.nshell)]
    out = np.zeros((naux, naux), dtype=np.float64)
    for P, pP in enumerate(aux_pairs):
        p0 = int(aux_basis.shell_ao_start[P])
        for Q in range(P + 1):
            pQ = aux_pairs[Q]
            q0 = int(aux_basis.shell_ao_start[Q])
            blk = _pair_pair_block(pP, pQ)
            out[p0 : p0 + pP.nA, q0 : q0 + pQ.nA] = blk
            out[q0 : q0 + pQ.nA, p0 : p0 + pP.nA] = blk.T
    return out


__all__ = ["build_eri_mat", "build_int2c", "build_int3c"]

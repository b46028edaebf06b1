from __future__ import annotations

"""Packing basis data into `hfcore.integrals.CartBasis`.

Input
-----
- Basis Set Exchange shells (see `hfcore.frontend.basis_bse`)
- Explicit basis dicts:
    {"H": [[0, [exp, c1, c2, ...], ...], ...], ...}

Contractions are renormalised so every packed s/p function (and the radial
part of higher-l functions) has unit norm, independent of how the source
scaled its coefficients.
"""

import re
from typing import Any

import numpy as np

from hfcore.integrals.basis import CartBasis
from hfcore.integrals.cart import ncart, primitive_norm

from .basis_bse import Shells


def _parse_shell_entry(entry: Any) -> Shells:
    """Parse `[l, [exp, c1, ...], ...]` or `[l1, l2, [exp, c(l1), c(l2)], ...]` (SP shells)."""

    if not isinstance(entry, (list, tuple)) or len(entry) < 2:
        raise ValueError(f"invalid basis shell entry: {entry!r}")

    ls: list[int] = []
    prim_start = None
    for i, item in enumerate(entry):
        if isinstance(item, (int, np.integer)):
            ls.append(int(item))
            continue
        prim_start = i
        break
    if prim_start is None or not ls:
        raise ValueError(f"invalid basis shell entry header: {entry!r}")

    exps: list[float] = []
    rows: list[list[float]] = []
    for line in entry[prim_start:]:
        if not isinstance(line, (list, tuple)) or len(line) < 2:
            raise ValueError(f"invalid primitive line: {line!r}")
        exps.append(float(line[0]))
        rows.append([float(x) for x in line[1:]])

    exps_arr = np.asarray(exps, dtype=np.float64)
    coeff = np.asarray(rows, dtype=np.float64)
    if coeff.ndim != 2:
        raise ValueError(f"ragged primitive lines in entry {entry!r}")

    nL = len(ls)
    ncols = int(coeff.shape[1])
    if ncols % nL != 0:
        raise ValueError(f"coeff column count ({ncols}) not divisible by nL ({nL}) for entry {entry!r}")
    nctr = ncols // nL
    return [(int(l), exps_arr, coeff[:, i * nctr : (i + 1) * nctr]) for i, l in enumerate(ls)]


def parse_basis_dict(basis: Any, *, elements: list[str]) -> dict[str, Shells]:
    """Parse an explicit basis dict into per-element `(l, exps, coefs)` shells."""

    if not isinstance(basis, dict):
        raise TypeError("basis must be a dict mapping element symbol -> shell list")

    # accept "h", "H1", ... as keys
    norm_basis: dict[str, Any] = {}
    for key, val in basis.items():
        key_s = str(key).strip()
        m = re.match(r"^([A-Za-z]{1,2})", key_s)
        norm_basis.setdefault((m.group(1) if m is not None else key_s).capitalize(), val)

    out: dict[str, Shells] = {}
    for sym in elements:
        spec = basis.get(sym, norm_basis.get(sym))
        if spec is None:
            raise KeyError(f"missing basis for element {sym!r}")
        if not isinstance(spec, (list, tuple)):
            raise TypeError(f"basis[{sym!r}] must be a list of shells")
        shells: Shells = []
        for entry in spec:
            shells.extend(_parse_shell_entry(entry))
        out[sym] = shells
    return out


def contraction_norm(l: int, exps: np.ndarray, coefs: np.ndarray) -> float:
    """Self-overlap of a contraction of normalised primitives."""

    a = np.asarray(exps, dtype=np.float64)
    c = np.asarray(coefs, dtype=np.float64)
    ratio = 2.0 * np.sqrt(np.outer(a, a)) / (a[:, None] + a[None, :])
    return float(c @ (ratio ** (float(l) + 1.5)) @ c)


def pack_cart_basis(
    atoms_bohr: list[tuple[str, np.ndarray]] | tuple[tuple[str, np.ndarray], ...],
    basis_shells: dict[str, Shells],
) -> CartBasis:
    """Pack per-element shells onto atoms; general contractions become separate shells."""

    shell_cxyz: list[np.ndarray] = []
    shell_prim_start: list[int] = []
    shell_nprim: list[int] = []
    shell_l: list[int] = []
    shell_ao_start: list[int] = []
    shell_atom: list[int] = []
    shell_rank: list[int] = []
    prim_exp: list[float] = []
    prim_coef: list[float] = []

    ao_cursor = 0
    for ia, (sym, xyz) in enumerate(atoms_bohr):
        xyz = np.asarray(xyz, dtype=np.float64).reshape((3,))
        shells = basis_shells.get(str(sym).strip())
        if shells is None:
            raise KeyError(f"missing basis shells for element {sym!r}")
        rank_by_l: dict[int, int] = {}
        for l, exps, coefs in shells:
            l = int(l)
            exps = np.asarray(exps, dtype=np.float64).ravel()
            coefs = np.asarray(coefs, dtype=np.float64)
            if coefs.ndim == 1:
                coefs = coefs.reshape((-1, 1))
            if coefs.ndim != 2 or int(coefs.shape[0]) != int(exps.size):
                raise ValueError("coefs must have shape (nprim, nctr)")
            if exps.size == 0 or np.any(exps <= 0.0):
                raise ValueError("primitive exponents must be positive")

            norm = primitive_norm(l, exps)
            for ctr in range(int(coefs.shape[1])):
                col = coefs[:, ctr]
                s = contraction_norm(l, exps, col)
                if not s > 0.0:
                    raise ValueError(f"contraction on {sym!r} (l={l}) has zero norm")

                shell_cxyz.append(xyz)
                shell_prim_start.append(len(prim_exp))
                shell_nprim.append(int(exps.size))
                shell_l.append(l)
                shell_ao_start.append(ao_cursor)
                shell_atom.append(ia)
                shell_rank.append(rank_by_l.get(l, 0))
                rank_by_l[l] = rank_by_l.get(l, 0) + 1

                prim_exp.extend(exps.tolist())
                prim_coef.extend((col * norm / np.sqrt(s)).tolist())
                ao_cursor += ncart(l)

    return CartBasis(
        shell_cxyz=np.asarray(shell_cxyz, dtype=np.float64).reshape((-1, 3)),
        shell_prim_start=np.asarray(shell_prim_start, dtype=np.int32),
        shell_nprim=np.asarray(shell_nprim, dtype=np.int32),
        shell_l=np.asarray(shell_l, dtype=np.int32),
        shell_ao_start=np.asarray(shell_ao_start, dtype=np.int32),
        shell_atom=np.asarray(shell_atom, dtype=np.int32),
        shell_rank=np.asarray(shell_rank, dtype=np.int32),
        prim_exp=np.asarray(prim_exp, dtype=np.float64),
        prim_coef=np.asarray(prim_coef, dtype=np.float64),
    )


__all__ = ["contraction_norm", "pack_cart_basis", "parse_basis_dict"]

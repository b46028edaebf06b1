from __future__ import annotations

"""Basis-set loading via Basis Set Exchange.

Shells are returned per element as `(l, exps, coefs)` with `coefs` shaped
`(nprim, nctr)`; fused SP shells are split into one entry per l.
"""

import json
from typing import Any

import numpy as np

from .periodic_table import atomic_number

Shells = list[tuple[int, np.ndarray, np.ndarray]]


def _require_bse():
    try:
        import basis_set_exchange as bse  # type: ignore
    except ImportError as e:  # pragma: no cover
        raise RuntimeError(
            "basis_set_exchange is required to load basis sets by name. "
            "Install it (e.g. `pip install basis_set_exchange`) or pass an explicit basis dict."
        ) from e
    return bse


def _parse_bse_shell(shell: dict[str, Any]) -> Shells:
    ams = [int(x) for x in shell["angular_momentum"]]
    if not ams:
        raise ValueError("invalid BSE shell: empty angular_momentum")

    exps = np.asarray(shell["exponents"], dtype=np.float64)
    if exps.ndim != 1 or exps.size == 0:
        raise ValueError("invalid BSE shell: empty exponents")
    nprim = int(exps.size)

    # BSE stores one coefficient row per general contraction; for fused shells
    # (e.g. SP) row k belongs to angular momentum ams[k].
    coeff = np.asarray(shell["coefficients"], dtype=np.float64)
    if coeff.ndim != 2 or int(coeff.shape[1]) != nprim:
        raise ValueError("unexpected BSE coefficients shape")

    if len(ams) == 1:
        return [(ams[0], exps, coeff.T)]
    if int(coeff.shape[0]) != len(ams):
        raise ValueError("fused BSE shell: coefficient rows do not match angular momenta")
    return [(int(l), exps, coeff[k].reshape((nprim, 1))) for k, l in enumerate(ams)]


def _element_shells(data: dict[str, Any], elements: list[str]) -> dict[str, Shells]:
    out: dict[str, Shells] = {}
    for sym in elements:
        Z = atomic_number(sym)
        try:
            shells = data["elements"][str(Z)]["electron_shells"]
        except KeyError as exc:
            raise KeyError(f"basis {data.get('name', '?')!r} has no shells for element {sym!r}") from exc
        buf: Shells = []
        for sh in shells:
            buf.extend(_parse_bse_shell(sh))
        out[sym] = buf
    return out


def load_basis_shells(basis_name: str, *, elements: list[str]) -> dict[str, Shells]:
    """Load per-element basis shells from BSE by name."""

    bse = _require_bse()
    elements = [str(e).strip() for e in elements]
    if not elements:
        raise ValueError("elements must be non-empty")
    data = json.loads(bse.get_basis(str(basis_name), elements=elements, fmt="json", header=False))
    return _element_shells(data, elements)


def load_autoaux_shells(orbital_basis_name: str, *, elements: list[str]) -> tuple[str, dict[str, Shells]]:
    """Load the BSE autoaux fitting basis generated for an orbital basis."""

    bse = _require_bse()
    elements = [str(e).strip() for e in elements]
    if not elements:
        raise ValueError("elements must be non-empty")
    data = json.loads(
        bse.get_basis(str(orbital_basis_name), elements=elements, fmt="json", header=False, get_aux=1)
    )
    aux_name = str(data.get("name", ""))
    if not aux_name:
        raise ValueError("BSE did not return an auxiliary basis name")
    return aux_name, _element_shells(data, elements)


__all__ = ["Shells", "load_autoaux_shells", "load_basis_shells"]

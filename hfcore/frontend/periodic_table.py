from __future__ import annotations

"""Element symbol ↔ atomic number lookup (H through Kr)."""


_SYMBOLS = (None,) + tuple(
    """
    H He
    Li Be B C N O F Ne
    Na Mg Al Si P S Cl Ar
    K Ca Sc Ti V Cr Mn Fe Co Ni Cu Zn Ga Ge As Se Br Kr
    """.split()
)

_SYMBOL_TO_Z = {s.upper(): i for i, s in enumerate(_SYMBOLS) if s is not None}


def atomic_number(symbol: str) -> int:
    sym = str(symbol).strip()
    if not sym:
        raise ValueError("empty element symbol")
    # labels such as "H1" or "O2" carry a non-semantic index
    i = 0
    while i < len(sym) and sym[i].isalpha():
        i += 1
    if i > 0:
        sym = sym[:i]
    try:
        return int(_SYMBOL_TO_Z[sym.upper()])
    except KeyError as exc:
        raise ValueError(f"unknown element symbol: {symbol!r}") from exc


def element_symbol(Z: int) -> str:
    Z = int(Z)
    if Z <= 0 or Z >= len(_SYMBOLS):
        raise ValueError(f"invalid atomic number: {Z}")
    return str(_SYMBOLS[Z])


__all__ = ["atomic_number", "element_symbol"]

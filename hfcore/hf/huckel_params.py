from __future__ import annotations

"""Atomic Hartree–Fock orbital energies (Eh) used by the Hückel guess.

Keys are `(l, rank)` with rank counting shells of the same l from the core
outwards: (0, 0) = 1s, (0, 1) = 2s, (1, 0) = 2p, (0, 2) = 3s, (1, 1) = 3p.
Unoccupied valence p levels of the alkali and alkaline-earth atoms are
rough estimates.
"""

ORBITAL_ENERGIES: dict[str, dict[tuple[int, int], float]] = {
    "H": {(0, 0): -0.500},
    "He": {(0, 0): -0.918},
    "Li": {(0, 0): -2.478, (0, 1): -0.196, (1, 0): -0.128},
    "Be": {(0, 0): -4.733, (0, 1): -0.309, (1, 0): -0.190},
    "B": {(0, 0): -7.695, (0, 1): -0.495, (1, 0): -0.310},
    "C": {(0, 0): -11.326, (0, 1): -0.706, (1, 0): -0.433},
    "N": {(0, 0): -15.629, (0, 1): -0.945, (1, 0): -0.568},
    "O": {(0, 0): -20.669, (0, 1): -1.244, (1, 0): -0.632},
    "F": {(0, 0): -26.383, (0, 1): -1.573, (1, 0): -0.730},
    "Ne": {(0, 0): -32.772, (0, 1): -1.930, (1, 0): -0.850},
    "Na": {(0, 0): -40.479, (0, 1): -2.797, (1, 0): -1.518, (0, 2): -0.182, (1, 1): -0.110},
    "Mg": {(0, 0): -49.032, (0, 1): -3.768, (1, 0): -2.282, (0, 2): -0.253, (1, 1): -0.150},
    "Al": {(0, 0): -58.501, (0, 1): -4.911, (1, 0): -3.218, (0, 2): -0.394, (1, 1): -0.210},
    "Si": {(0, 0): -68.812, (0, 1): -6.157, (1, 0): -4.256, (0, 2): -0.540, (1, 1): -0.297},
    "P": {(0, 0): -79.970, (0, 1): -7.511, (1, 0): -5.401, (0, 2): -0.696, (1, 1): -0.392},
    "S": {(0, 0): -92.005, (0, 1): -9.004, (1, 0): -6.683, (0, 2): -0.880, (1, 1): -0.437},
    "Cl": {(0, 0): -104.884, (0, 1): -10.607, (1, 0): -8.072, (0, 2): -1.073, (1, 1): -0.506},
    "Ar": {(0, 0): -118.610, (0, 1): -12.322, (1, 0): -9.571, (0, 2): -1.277, (1, 1): -0.591},
}


def orbital_energy(element: str, l: int, rank: int) -> float:
    """Tabulated energy for an AO shell; shells beyond the table take the valence value.

    Extra shells of a tabulated l (split-valence, diffuse) use the outermost
    level of that l; polarization shells of an untabulated l use the
    least-bound tabulated level of the atom.
    """

    try:
        table = ORBITAL_ENERGIES[str(element)]
    except KeyError as exc:
        raise KeyError(f"no Hückel parameters for element {element!r}") from exc
    l = int(l)
    rank = int(rank)
    hit = table.get((l, rank))
    if hit is not None:
        return float(hit)
    same_l = [(r, e) for (ll, r), e in table.items() if ll == l]
    if same_l:
        return float(max(same_l)[1])
    return float(max(table.values()))


__all__ = ["ORBITAL_ENERGIES", "orbital_energy"]

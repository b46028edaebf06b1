from __future__ import annotations

import pytest

# STO-3G (Basis Set Exchange), explicit so tests do not need network/basis data.
H_STO3G = [
    [0, [3.42525091, 0.15432897], [0.62391373, 0.53532814], [0.16885540, 0.44463454]],
]
HE_STO3G = [
    [0, [6.36242139, 0.15432897], [1.15892300, 0.53532814], [0.31364979, 0.44463454]],
]
O_STO3G = [
    [0, [130.7093200, 0.15432897], [23.8088610, 0.53532814], [6.4436083, 0.44463454]],
    [
        0,
        1,
        [5.0331513, -0.09996723, 0.15591627],
        [1.1695961, 0.39951283, 0.60768372],
        [0.3803890, 0.70011547, 0.39195739],
    ],
]
STO3G = {"H": H_STO3G, "He": HE_STO3G, "O": O_STO3G}

# even-tempered fitting set for H
H_FIT = {
    "H": [[0, [e, 1.0]] for e in (16.0, 8.0, 4.0, 2.0, 1.0, 0.5, 0.25, 0.125)]
    + [[1, [e, 1.0]] for e in (2.0, 0.6, 0.2)]
}

H2_ATOMS = "H 0 0 0; H 0 0 1.4"
HEH_ATOMS = "He 0 0 0; H 0 0 1.4632"
WATER_ATOMS = "O 0 0 -0.1294; H 0 -1.4941 1.0274; H 0 1.4941 1.0274"

# H2 / STO-3G at R = 1.4 bohr
H2_STO3G_E_TOT = -1.11671432506257


@pytest.fixture(scope="session")
def h2_mol():
    from hfcore.frontend import Molecule

    return Molecule.from_atoms(H2_ATOMS, basis=STO3G)


@pytest.fixture(scope="session")
def heh_mol():
    from hfcore.frontend import Molecule

    return Molecule.from_atoms(HEH_ATOMS, charge=1, basis=STO3G)


@pytest.fixture(scope="session")
def water_mol():
    from hfcore.frontend import Molecule

    return Molecule.from_atoms(WATER_ATOMS, basis=STO3G)


@pytest.fixture(scope="session")
def h2_helper(h2_mol):
    from hfcore.frontend import IntegralHelper

    return IntegralHelper(h2_mol, jkfit=H_FIT)


@pytest.fixture(scope="session")
def heh_helper(heh_mol):
    from hfcore.frontend import IntegralHelper

    return IntegralHelper(heh_mol)


@pytest.fixture(scope="session")
def water_helper(water_mol):
    from hfcore.frontend import IntegralHelper

    return IntegralHelper(water_mol)

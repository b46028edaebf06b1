"""Tests for initial-guess strategies."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import STO3G


def test_select_guess_names():
    from hfcore.errors import InvalidOptionError
    from hfcore.hf import CoreGuess, GWHGuess, HuckelGuess, select_guess

    assert isinstance(select_guess("core"), CoreGuess)
    assert isinstance(select_guess(" GWH "), GWHGuess)
    assert isinstance(select_guess("huckel"), HuckelGuess)
    with pytest.raises(InvalidOptionError, match="sad"):
        select_guess("sad")


def test_core_guess_diagonalises_hcore(water_helper):
    from hfcore.hf import CoreGuess, orthogonalizer

    ortho = orthogonalizer(water_helper["S"])
    g = CoreGuess().build(water_helper, ortho, 5)
    H = water_helper["H"]
    S = water_helper["S"]
    assert g.kind == "core"
    assert np.allclose(H @ g.mo_coeff, S @ g.mo_coeff * g.mo_energy[None, :], atol=1e-10)
    D = g.mo_coeff[:, :5] @ g.mo_coeff[:, :5].T
    assert g.energy == pytest.approx(2.0 * np.sum(D * H))


def test_gwh_guess_matrix_and_energy(h2_helper):
    """For H2 the GWH model Fock is known in closed form; the guess energy is Σ D (H + F_gwh)."""
    from hfcore.hf import GWHGuess, orthogonalizer

    S = h2_helper["S"]
    H = h2_helper["H"]
    ortho = orthogonalizer(S)
    g = GWHGuess().build(h2_helper, ortho, 1)

    F = np.array([[H[0, 0], 0.875 * S[0, 1] * (H[0, 0] + H[1, 1])], [0.875 * S[0, 1] * (H[0, 0] + H[1, 1]), H[1, 1]]])
    c = g.mo_coeff[:, 0]
    D = np.outer(c, c)
    assert g.energy == pytest.approx(float(np.sum(D * (H + F))), abs=1e-12)
    # bonding combination of the two 1s functions
    assert c[0] == pytest.approx(c[1], abs=1e-12)
    assert float(c @ S @ c) == pytest.approx(1.0, abs=1e-12)
    assert g.n_dropped == 0


def test_huckel_orbital_energies(water_helper):
    from hfcore.hf import HuckelGuess

    eps = HuckelGuess.ao_energies(water_helper)
    assert np.allclose(eps, [-20.669, -1.244, -0.632, -0.632, -0.632, -0.5, -0.5])


def test_huckel_parameters_fall_back_to_valence():
    from hfcore.hf.huckel_params import orbital_energy

    assert orbital_energy("C", 0, 1) == pytest.approx(-0.706)
    # split-valence second s shell on H and third s shell on C
    assert orbital_energy("H", 0, 1) == pytest.approx(-0.5)
    assert orbital_energy("C", 0, 2) == pytest.approx(-0.706)
    # polarization d on O takes the least-bound tabulated level
    assert orbital_energy("O", 2, 0) == pytest.approx(-0.632)
    with pytest.raises(KeyError):
        orbital_energy("Kr", 0, 0)


def test_huckel_guess_is_orthonormal(water_helper):
    from hfcore.hf import HuckelGuess, orthogonalizer

    S = water_helper["S"]
    ortho = orthogonalizer(S)
    g = HuckelGuess().build(water_helper, ortho, 5)
    C = g.mo_coeff
    assert C.shape == (7, 7)
    assert np.allclose(C.T @ S @ C, np.eye(7), atol=1e-10)
    assert np.all(np.diff(g.mo_energy) >= 0.0)
    # the lowest orbital is essentially O 1s
    assert abs(C[0, 0]) > 0.95


def test_project_occupied_orthonormal(h2_mol):
    """Occupied orbitals from a one-primitive basis map to S-orthonormal STO-3G orbitals."""
    from hfcore.frontend import IntegralHelper
    from hfcore.hf import ProjectionGuess, orthogonalizer

    small = IntegralHelper(h2_mol, {"H": [[0, [0.4, 1.0]]]})
    ortho_small = orthogonalizer(small["S"])
    _e, Ca = ortho_small.eigh(small["H"])

    target = IntegralHelper(h2_mol, STO3G)
    S = target["S"]
    ortho = orthogonalizer(S)
    g = ProjectionGuess(small, Ca).build(target, ortho, 1)
    C = g.mo_coeff
    assert g.kind == "projection"
    assert C.shape == (2, 2)
    assert np.allclose(C.T @ S @ C, np.eye(2), atol=1e-10)
    # symmetric occupied orbital survives the projection
    assert C[0, 0] == pytest.approx(C[1, 0], abs=1e-10)


def test_projection_into_orthogonal_space_is_reported():
    """s orbitals cannot be represented by p functions on the same centre."""
    from hfcore.errors import ProjectionError
    from hfcore.frontend import IntegralHelper, Molecule
    from hfcore.hf import ProjectionGuess, orthogonalizer

    mol = Molecule.from_atoms("He 0 0 0")
    source = IntegralHelper(mol, {"He": [[0, [1.0, 1.0]]]})
    Ca = np.array([[1.0]])
    target = IntegralHelper(mol, {"He": [[1, [1.0, 1.0]]]})
    ortho = orthogonalizer(target["S"])
    with pytest.raises(ProjectionError) as exc:
        ProjectionGuess(source, Ca).build(target, ortho, 1)
    assert exc.value.min_eigenvalue == pytest.approx(0.0, abs=1e-12)

"""Tests for option validation and the error taxonomy."""

from __future__ import annotations

import pytest

from conftest import H2_ATOMS


def test_defaults():
    from hfcore import SCFOptions

    opts = SCFOptions()
    assert opts.scf_alg == "conventional"
    assert opts.scf_guess == "gwh"
    assert opts.scf_max_rms == 1e-10
    assert opts.scf_max_iter == 50
    assert opts.oda is True
    assert opts.oda_cutoff == 1e-1
    assert opts.oda_shutoff == 20
    assert opts.basis == "sto-3g"
    assert opts.jkfit == "auto"


def test_names_are_normalised():
    from hfcore import SCFOptions

    opts = SCFOptions(scf_alg=" DF ", scf_guess="Huckel")
    assert opts.scf_alg == "df"
    assert opts.scf_guess == "huckel"


@pytest.mark.parametrize(
    "kw",
    [
        {"scf_alg": "bogus"},
        {"scf_guess": "sad"},
        {"scf_max_rms": 0.0},
        {"scf_max_iter": 0},
        {"scf_max_iter": 2.5},
        {"oda": "yes"},
        {"oda_shutoff": -1},
        {"diis_space": 1},
        {"verbose": -1},
        {"basis": 3},
    ],
)
def test_invalid_values(kw):
    from hfcore import InvalidOptionError, SCFOptions

    with pytest.raises(InvalidOptionError) as exc:
        SCFOptions(**kw)
    (name, value), = kw.items()
    assert exc.value.option == name
    assert exc.value.value == value
    assert repr(value) in str(exc.value)


def test_invalid_option_error_is_value_error():
    from hfcore import HFCoreError, InvalidOptionError, SCFOptions

    with pytest.raises(ValueError):
        SCFOptions(scf_alg="bogus")
    assert issubclass(InvalidOptionError, HFCoreError)


def test_from_mapping_and_replace():
    from hfcore import InvalidOptionError, SCFOptions

    opts = SCFOptions.from_mapping({"scf_guess": "core", "scf_max_iter": 10})
    assert opts.scf_guess == "core"
    assert opts.scf_max_iter == 10
    assert SCFOptions.from_mapping(opts.as_dict()) == opts
    assert opts.replace(oda=False).oda is False
    assert opts.oda is True
    with pytest.raises(InvalidOptionError, match="scf_typo"):
        SCFOptions.from_mapping({"scf_typo": 1})
    with pytest.raises(InvalidOptionError, match="bogus"):
        opts.replace(scf_alg="bogus")


def test_bogus_algorithm_fails_before_integrals():
    """The basis name cannot be resolved, so reaching integral work would raise something else."""
    from hfcore import InvalidOptionError, Molecule, run_rhf

    mol = Molecule.from_atoms(H2_ATOMS, basis="no-such-basis")
    with pytest.raises(InvalidOptionError) as exc:
        run_rhf(mol, scf_alg="bogus")
    assert exc.value.option == "scf_alg"
    assert "bogus" in str(exc.value)


def test_bogus_guess_fails_before_integrals():
    from hfcore import InvalidOptionError, Molecule, run_rhf

    mol = Molecule.from_atoms(H2_ATOMS, basis="no-such-basis")
    with pytest.raises(InvalidOptionError, match="bogus"):
        run_rhf(mol, guess="bogus")

"""End-to-end RHF runs on small closed-shell systems."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import H2_ATOMS, H2_STO3G_E_TOT, H_FIT, STO3G


def test_h2_sto3g_energy(h2_helper):
    from hfcore import RHF, run_rhf

    res = run_rhf(h2_helper)
    assert isinstance(res, RHF)
    assert res.converged
    assert res.energy == pytest.approx(H2_STO3G_E_TOT, abs=1e-8)
    assert res.e_nuc == pytest.approx(1.0 / 1.4, abs=1e-14)
    assert res.e_elec + res.e_nuc == pytest.approx(res.energy, abs=1e-14)
    assert res.total_energy == res.energy
    assert (res.ndocc, res.nvir) == (1, 1)
    assert res.mo_energy[0] == pytest.approx(-0.578202977512459, abs=1e-6)
    assert res.drms < res.options.scf_max_rms


def test_molecule_input_uses_its_basis(h2_mol):
    from hfcore import run_rhf

    res = run_rhf(h2_mol, basis="no-such-basis")
    assert res.energy == pytest.approx(H2_STO3G_E_TOT, abs=1e-8)


def test_repeat_runs_are_identical(water_helper):
    from hfcore import run_rhf

    a = run_rhf(water_helper)
    b = run_rhf(water_helper)
    assert a.energy == b.energy
    assert np.array_equal(a.mo_energy, b.mo_energy)
    assert a.niter == b.niter


def test_guesses_reach_the_same_state(water_helper):
    from hfcore import run_rhf

    energies = {}
    for name in ("core", "gwh", "huckel"):
        res = run_rhf(water_helper, scf_guess=name, scf_max_iter=100, strict=True)
        assert res.guess.kind == name
        energies[name] = res.energy
    assert energies["core"] == pytest.approx(energies["gwh"], abs=1e-8)
    assert energies["huckel"] == pytest.approx(energies["gwh"], abs=1e-8)
    # Cartesian STO-3G water at this geometry
    assert energies["gwh"] == pytest.approx(-74.96466567435, abs=1e-8)


def test_density_trace_is_electron_pair_count(water_helper):
    from hfcore import run_rhf

    res = run_rhf(water_helper, scf_guess="core")
    S = water_helper["S"]
    assert res.ndocc == 5
    for it in res.history:
        assert it.trace_ds == pytest.approx(5.0, abs=1e-10)
    assert float(np.sum(res.density * S)) == pytest.approx(5.0, abs=1e-10)
    C = res.mo_coeff
    assert np.allclose(C.T @ S @ C, np.eye(C.shape[1]), atol=1e-10)


def test_converged_fock_commutes_with_density(water_helper):
    from hfcore import run_rhf

    res = run_rhf(water_helper)
    S = water_helper["S"]
    comm = res.fock @ res.density @ S - S @ res.density @ res.fock
    assert np.max(np.abs(comm)) < 1e-6


def test_oda_energies_do_not_increase(heh_helper):
    from hfcore import run_rhf

    res = run_rhf(
        heh_helper,
        scf_guess="core",
        oda_cutoff=1e-6,
        oda_shutoff=100,
        scf_max_iter=100,
        diis=False,
    )
    oda = [it for it in res.history if it.stabilizer == "oda"]
    assert len(oda) >= 2
    for prev, cur in zip(oda, oda[1:]):
        assert cur.energy <= prev.energy + 1e-10
    assert all(0.0 <= it.oda_lambda <= 1.0 for it in oda)
    # once damping stops it never comes back
    stabilizers = [it.stabilizer for it in res.history]
    if "oda" in stabilizers and stabilizers[-1] != "oda":
        first_off = next(i for i, s in enumerate(stabilizers) if s != "oda")
        assert "oda" not in stabilizers[first_off:]


def test_oda_disabled_uses_diis(heh_helper):
    from hfcore import run_rhf

    res = run_rhf(heh_helper, oda=False)
    assert res.converged
    assert all(it.stabilizer == "diis" for it in res.history)
    assert all(it.oda_lambda is None for it in res.history)


def test_iteration_limit_returns_not_converged(heh_helper):
    from hfcore import RHF, SCFNotConverged, run_rhf

    profile: dict = {}
    res = run_rhf(heh_helper, scf_guess="core", scf_max_iter=1, profile=profile)
    assert isinstance(res, SCFNotConverged)
    assert not isinstance(res, RHF)
    assert not res.converged
    assert res.niter == 1
    assert len(res.history) == 1
    assert res.drms >= res.options.scf_max_rms
    assert profile["scf"]["phase"] == "max_iter_exceeded"


def test_iteration_limit_strict_raises(heh_helper):
    from hfcore import SCFConvergenceError, SCFNotConverged, run_rhf

    with pytest.raises(SCFConvergenceError) as exc:
        run_rhf(heh_helper, scf_guess="core", scf_max_iter=1, strict=True)
    assert isinstance(exc.value.result, SCFNotConverged)
    assert "1 iterations" in str(exc.value)


def test_density_fitting_close_to_conventional(h2_helper):
    from hfcore import run_rhf

    conv = run_rhf(h2_helper)
    df = run_rhf(h2_helper, scf_alg="df")
    assert df.converged
    assert df.energy == pytest.approx(conv.energy, abs=5e-3)


def test_jkfit_option_reaches_prepared_helper(h2_mol, h2_helper):
    from hfcore import IntegralHelper, SCFOptions, run_rhf

    helper = IntegralHelper(h2_mol)
    assert helper.jkfit == "auto"
    conv = run_rhf(helper)
    df = run_rhf(helper, scf_alg="df", jkfit=H_FIT)
    assert df.converged
    assert df.helper.jkfit == H_FIT
    assert df.energy == pytest.approx(conv.energy, abs=5e-3)
    assert df.energy == pytest.approx(run_rhf(h2_helper, scf_alg="df").energy, abs=1e-12)
    # the caller's helper keeps its own fitting basis and shares the non-DF integrals
    assert helper.jkfit == "auto"
    assert "B" not in helper
    assert df.helper["ERI"] is helper["ERI"]

    res = run_rhf(helper, SCFOptions(scf_alg="df", jkfit=H_FIT))
    assert res.energy == pytest.approx(df.energy, abs=1e-12)


def test_jkfit_option_rejected_for_precomputed_matrices(h2_helper):
    from hfcore import IntegralHelper, InvalidOptionError, run_rhf

    helper = IntegralHelper.from_matrices(S=h2_helper["S"], T=h2_helper["T"], V=h2_helper["V"], ERI=h2_helper["ERI"])
    with pytest.raises(InvalidOptionError) as exc:
        run_rhf(helper, ndocc=1, jkfit=H_FIT)
    assert exc.value.option == "jkfit"


def test_virtual_count_excludes_dropped_functions(h2_mol):
    """Two nearly identical s functions per atom leave one independent direction each."""
    from hfcore import IntegralHelper, run_rhf

    single = {"H": [[0, [0.4, 1.0]]]}
    doubled = {"H": [[0, [0.4, 1.0]], [0, [0.4 * (1.0 + 1e-9), 1.0]]]}
    ref = run_rhf(IntegralHelper(h2_mol, single), scf_guess="core")
    res = run_rhf(IntegralHelper(h2_mol, doubled), scf_guess="core")
    assert res.helper.nbf == 4
    assert res.n_dropped == 2
    assert res.mo_coeff.shape == (4, 2)
    assert (res.ndocc, res.nvir) == (1, 1)
    assert res.nvir == res.helper.nbf - res.n_dropped - res.ndocc
    assert res.energy == pytest.approx(ref.energy, abs=1e-8)


def test_projection_restart_from_smaller_basis(h2_mol):
    from hfcore import run_rhf
    from hfcore.frontend import IntegralHelper

    small = run_rhf(IntegralHelper(h2_mol, {"H": [[0, [0.4, 1.0]]]}))
    assert small.converged
    res = run_rhf(IntegralHelper(h2_mol, STO3G), guess=small)
    assert res.guess.kind == "projection"
    assert res.energy == pytest.approx(H2_STO3G_E_TOT, abs=1e-8)


def test_precomputed_matrices(h2_helper):
    from hfcore import IntegralHelper, run_rhf

    helper = IntegralHelper.from_matrices(
        S=h2_helper["S"],
        T=h2_helper["T"],
        V=h2_helper["V"],
        ERI=h2_helper["ERI"],
        energy_nuc=1.0 / 1.4,
    )
    with pytest.raises(ValueError, match="ndocc"):
        run_rhf(helper)
    res = run_rhf(helper, ndocc=1)
    assert res.molecule is None
    assert res.energy == pytest.approx(H2_STO3G_E_TOT, abs=1e-8)


def test_verbose_output_and_profile(h2_helper, capsys):
    from hfcore import run_rhf

    profile: dict = {}
    res = run_rhf(h2_helper, verbose=2, profile=profile)
    out = capsys.readouterr().out
    assert "[rhf] guess=gwh" in out
    assert "[rhf] iter=  1" in out
    assert "converged" in out
    scf = profile["scf"]
    assert scf["iters"] == res.niter
    assert scf["guess"] == "gwh"
    assert scf["phase"] == "converged"
    for key in ("jk_ms", "diag_ms", "diis_ms", "oda_steps", "diis_fallbacks", "n_dropped"):
        assert key in scf


def test_quiet_by_default(h2_helper, capsys):
    from hfcore import run_rhf

    run_rhf(h2_helper)
    assert capsys.readouterr().out == ""


def test_molecule_run_builds_integrals():
    from hfcore import Molecule, run_rhf

    mol = Molecule.from_atoms(H2_ATOMS)
    res = run_rhf(mol, basis=STO3G)
    assert res.energy == pytest.approx(H2_STO3G_E_TOT, abs=1e-8)
    assert res.helper.nbf == 2

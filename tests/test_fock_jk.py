"""Tests for Coulomb/exchange contractions and Fock builders."""

from __future__ import annotations

import numpy as np
import pytest


def _random_density(n, nocc, seed=0):
    rng = np.random.default_rng(seed)
    C = rng.standard_normal((n, nocc))
    return C @ C.T


def test_dense_jk_matches_explicit_loops(water_helper):
    from hfcore.hf import dense_JK

    n = water_helper.nbf
    g = water_helper["ERI"].reshape((n, n, n, n))
    D = _random_density(n, 3)
    J, K = dense_JK(water_helper["ERI"], D)
    J_ref = np.zeros((n, n))
    K_ref = np.zeros((n, n))
    for m in range(n):
        for v in range(n):
            J_ref[m, v] = np.sum(g[m, v] * D)
            K_ref[m, v] = np.sum(g[m, :, v, :] * D)
    assert np.allclose(J, J_ref, atol=1e-12)
    assert np.allclose(K, K_ref, atol=1e-12)


def test_df_jk_equals_dense_jk_for_factorised_eri():
    """When eri_mat = B B^T exactly, DF and dense contractions coincide."""
    from hfcore.hf import dense_JK, df_JK

    rng = np.random.default_rng(5)
    n, naux = 4, 7
    B = rng.standard_normal((n, n, naux))
    B = 0.5 * (B + B.transpose(1, 0, 2))
    B2 = B.reshape((n * n, naux))
    eri_mat = B2 @ B2.T
    D = _random_density(n, 2, seed=6)
    J1, K1 = dense_JK(eri_mat, D)
    J2, K2 = df_JK(B, D)
    assert np.allclose(J1, J2, atol=1e-10)
    assert np.allclose(K1, K2, atol=1e-10)


def test_jk_shape_errors():
    from hfcore.hf import dense_JK, df_JK

    with pytest.raises(ValueError):
        dense_JK(np.zeros((9, 9)), np.zeros((2, 2)))
    with pytest.raises(ValueError):
        df_JK(np.zeros((3, 3, 2)), np.zeros((2, 2)))
    with pytest.raises(ValueError):
        dense_JK(np.zeros((4, 4)), np.zeros((2, 3)))


def test_conventional_fock_form(h2_helper):
    """F = H + 2J - K and the H2 energy expression with D = Co Co^T."""
    from hfcore.hf import ConventionalFockBuilder, dense_JK, rhf_energy

    S = h2_helper["S"]
    H = h2_helper["H"]
    c = np.array([1.0, 1.0]) / np.sqrt(2.0 * (1.0 + S[0, 1]))
    D = np.outer(c, c)
    F = ConventionalFockBuilder(h2_helper).build_fock(D)
    J, K = dense_JK(h2_helper["ERI"], D)
    assert np.allclose(F, H + 2.0 * J - K, atol=1e-14)
    # one doubly occupied orbital: J_gg = K_gg = (gg|gg)
    assert float(c @ J @ c) == pytest.approx(float(c @ K @ c), abs=1e-12)
    E = rhf_energy(D, H, F)
    assert E + h2_helper.energy_nuc == pytest.approx(-1.11671432506257, abs=1e-9)


def test_df_fock_close_to_conventional(h2_helper):
    from hfcore.hf import ConventionalFockBuilder, DFFockBuilder

    S = h2_helper["S"]
    c = np.array([1.0, 1.0]) / np.sqrt(2.0 * (1.0 + S[0, 1]))
    D = np.outer(c, c)
    F_conv = ConventionalFockBuilder(h2_helper).build_fock(D)
    df = DFFockBuilder(h2_helper)
    F_df = df.build_fock(D)
    assert df.naux == h2_helper["B"].shape[2]
    assert np.max(np.abs(F_df - F_conv)) < 5e-3


def test_select_fock_builder():
    from hfcore.errors import InvalidOptionError
    from hfcore.hf import ConventionalFockBuilder, DFFockBuilder, select_fock_builder

    assert select_fock_builder("conventional") is ConventionalFockBuilder
    assert select_fock_builder("DF") is DFFockBuilder
    with pytest.raises(InvalidOptionError, match="bogus"):
        select_fock_builder("bogus")


def test_energy_is_elementwise_sum():
    from hfcore.hf import density_from_occupied, rhf_energy

    rng = np.random.default_rng(1)
    A = rng.standard_normal((3, 3))
    D = density_from_occupied(np.linalg.qr(A)[0], 2)
    H = np.diag([1.0, 2.0, 3.0])
    F = H + 0.1
    assert rhf_energy(D, H, F) == pytest.approx(float(np.trace(D @ (H + F))))
    with pytest.raises(ValueError):
        rhf_energy(D, H[:2, :2], F)

from __future__ import annotations

"""Closed-shell RHF SCF loop.

State machine
-------------
GUESSING → ITERATING → CONVERGED
                     → MAX_ITER_EXCEEDED

One cycle (D = Co Co^T throughout, no factor of 2):

1. stabilise the current Fock matrix: ODA keeps an interpolated pair (D̃, F̃)
   during the early phase; afterwards DIIS extrapolates over the history of
   orthogonal-basis commutators. The two never act in the same cycle.
2. diagonalise in the reduced orthogonal basis and back-transform.
3. build D and F = H + 2J - K for the new orbitals; E = Σ D∘(H + F).
4. converged when RMS(D_new - D_ref) < scf_max_rms, where D_ref is the density
   whose Fock matrix was diagonalised.

Exhausting `scf_max_iter` yields an `SCFNotConverged` record (never an `RHF`).
"""

from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Any

import numpy as np

from hfcore.errors import SCFConvergenceError
from hfcore.options import SCFOptions

from .diis import DIIS, fock_error
from .energy import density_from_occupied, rhf_energy
from .fock import FockBuilder, select_fock_builder
from .guess import GuessResult, GuessStrategy, ProjectionGuess, select_guess
from .oda import oda_step
from .orthogonalizer import Orthogonalizer, orthogonalizer


class SCFPhase(str, Enum):
    GUESSING = "guessing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITER_EXCEEDED = "max_iter_exceeded"


@dataclass(frozen=True)
class SCFIteration:
    cycle: int
    energy: float  # electronic; the damped energy E(D̃) while ODA is active
    delta_e: float
    drms: float
    diis_error: float | None
    stabilizer: str  # "oda", "diis" or "none"
    oda_lambda: float | None
    trace_ds: float  # Tr(D S) of the newly built density


@dataclass
class SCFState:
    """Mutable working set owned by one `rhf_kernel` call."""

    phase: SCFPhase = SCFPhase.GUESSING
    cycle: int = 0
    mo_coeff: np.ndarray | None = None
    mo_energy: np.ndarray | None = None
    D: np.ndarray | None = None
    F: np.ndarray | None = None
    energy: float = 0.0
    D_tilde: np.ndarray | None = None
    F_tilde: np.ndarray | None = None
    energy_tilde: float = 0.0
    diis: DIIS | None = None
    oda_active: bool = True
    drms: float = float("inf")
    history: list[SCFIteration] = field(default_factory=list)


@dataclass(frozen=True)
class RHF:
    """Converged closed-shell RHF wavefunction.

    `mo_coeff` has one column per retained orthogonal direction, so with
    linearly dependent basis functions projected out
    `nvir = nbf - n_dropped - ndocc`, not `nbf - ndocc`.
    """

    molecule: Any
    helper: Any
    options: SCFOptions
    energy: float  # total, including nuclear repulsion
    e_elec: float
    e_nuc: float
    ndocc: int
    nvir: int  # virtuals in the retained space
    mo_energy: np.ndarray
    mo_coeff: np.ndarray
    density: np.ndarray
    fock: np.ndarray
    niter: int
    n_dropped: int
    guess: GuessResult
    history: tuple[SCFIteration, ...]

    converged = True

    @property
    def total_energy(self) -> float:
        return self.energy

    @property
    def basis(self) -> Any:
        return getattr(self.helper, "basis_name", None)

    @property
    def drms(self) -> float:
        return float(self.history[-1].drms) if self.history else 0.0


@dataclass(frozen=True)
class SCFNotConverged:
    """Terminal record of an SCF run that exhausted `scf_max_iter`."""

    molecule: Any
    helper: Any
    options: SCFOptions
    energy: float  # total energy of the last iterate
    e_elec: float
    e_nuc: float
    ndocc: int
    nvir: int  # virtuals in the retained space
    mo_energy: np.ndarray
    mo_coeff: np.ndarray
    density: np.ndarray
    fock: np.ndarray
    niter: int
    n_dropped: int
    guess: GuessResult
    history: tuple[SCFIteration, ...]

    converged = False

    @property
    def drms(self) -> float:
        return float(self.history[-1].drms) if self.history else float("inf")


def _rms(A: np.ndarray) -> float:
    return float(np.sqrt(np.mean(A * A)))


def _is_finite_matrix(A: np.ndarray) -> bool:
    return bool(np.all(np.isfinite(A)))


def rhf_kernel(
    helper,
    guess: GuessStrategy | GuessResult,
    ortho: Orthogonalizer,
    fock_builder: FockBuilder,
    options: SCFOptions,
    *,
    ndocc: int,
    profile: dict | None = None,
) -> RHF | SCFNotConverged:
    """Run the SCF iterations from a guess; returns `RHF` or `SCFNotConverged`."""

    verbose = int(options.verbose)
    S = np.asarray(helper["S"], dtype=np.float64)
    H = np.asarray(helper["H"], dtype=np.float64)
    X = ortho.X
    ndocc = int(ndocc)
    nvir = int(ortho.n_reduced) - ndocc
    if ndocc <= 0:
        raise ValueError("RHF requires at least one doubly occupied orbital")
    if nvir < 0:
        raise ValueError(f"ndocc={ndocc} exceeds the {ortho.n_reduced} linearly independent basis functions")
    e_nuc = float(getattr(helper, "energy_nuc", 0.0))

    if profile is not None:
        prof = profile.setdefault("scf", {})
        prof.setdefault("jk_ms", 0.0)
        prof.setdefault("diag_ms", 0.0)
        prof.setdefault("diis_ms", 0.0)
        prof.setdefault("diis_fallbacks", 0)
        prof.setdefault("oda_steps", 0)
        prof.setdefault("iters", 0)

    def _build(D: np.ndarray) -> tuple[np.ndarray, float]:
        t = time.perf_counter()
        F = fock_builder.build_fock(D)
        if profile is not None:
            profile["scf"]["jk_ms"] += 1000.0 * (time.perf_counter() - t)
        return F, rhf_energy(D, H, F)

    state = SCFState(diis=DIIS(max_vec=options.diis_space) if options.diis else None, oda_active=bool(options.oda))

    # ---- guess ----
    if isinstance(guess, GuessResult):
        g = guess
    else:
        g = guess.build(helper, ortho, ndocc)
    if g.mo_coeff.shape[0] != S.shape[0] or g.mo_coeff.shape[1] < ndocc:
        raise ValueError("guess orbitals do not match the basis")
    if verbose >= 1:
        print(
            f"[rhf] guess={g.kind} nbf={S.shape[0]} n_reduced={ortho.n_reduced} "
            f"dropped={ortho.n_dropped} ndocc={ndocc} nvir={nvir} alg={fock_builder.name}"
        )
        if g.kind != "core":
            print(f"[rhf] guess energy: {g.energy:+.12f}")
    if profile is not None:
        profile["scf"]["guess"] = g.kind
        profile["scf"]["guess_energy"] = float(g.energy)
        profile["scf"]["n_dropped"] = int(ortho.n_dropped)

    state.mo_coeff = g.mo_coeff
    state.mo_energy = g.mo_energy
    state.D = density_from_occupied(g.mo_coeff, ndocc)
    state.F, state.energy = _build(state.D)
    state.D_tilde, state.F_tilde, state.energy_tilde = state.D, state.F, state.energy
    state.phase = SCFPhase.ITERATING
    e_prev = state.energy

    for cycle in range(1, int(options.scf_max_iter) + 1):
        state.cycle = cycle
        oda_on = bool(
            state.oda_active
            and cycle < int(options.oda_shutoff)
            and state.drms > float(options.oda_cutoff)
        )
        # damping does not resume once switched off
        state.oda_active = oda_on

        diis_err = None
        stabilizer = "none"
        if oda_on:
            F_diag = state.F_tilde
            D_ref = state.D_tilde
            stabilizer = "oda"
        else:
            F_diag = state.F
            D_ref = state.D
            if state.diis is not None and cycle >= int(options.diis_start):
                t = time.perf_counter()
                err = fock_error(state.F, state.D, S, X)
                state.diis.push(state.F, err)
                diis_err = state.diis.error_norm
                stabilizer = "diis"
                try:
                    F_try = state.diis.extrapolate()
                except np.linalg.LinAlgError:
                    F_try = None
                if F_try is None or not _is_finite_matrix(F_try):
                    # singular Pulay system: restart the history from this Fock matrix
                    state.diis.reset()
                    state.diis.push(state.F, err)
                    if profile is not None:
                        profile["scf"]["diis_fallbacks"] += 1
                else:
                    F_diag = 0.5 * (F_try + F_try.T)
                if profile is not None:
                    profile["scf"]["diis_ms"] += 1000.0 * (time.perf_counter() - t)

        t = time.perf_counter()
        e_orb, C = ortho.eigh(F_diag)
        if profile is not None:
            profile["scf"]["diag_ms"] += 1000.0 * (time.perf_counter() - t)

        D_new = density_from_occupied(C, ndocc)
        F_new, E_new = _build(D_new)
        drms = _rms(D_new - D_ref)

        lam = None
        if oda_on:
            step = oda_step(state.D_tilde, state.F_tilde, state.energy_tilde, D_new, F_new)
            lam = step.lam
            state.D_tilde = step.D
            state.F_tilde = step.F
            state.energy_tilde = rhf_energy(step.D, H, step.F)
            e_report = state.energy_tilde
            if profile is not None:
                profile["scf"]["oda_steps"] += 1
        else:
            state.D_tilde, state.F_tilde, state.energy_tilde = D_new, F_new, E_new
            e_report = E_new

        state.mo_coeff = C
        state.mo_energy = e_orb
        state.D = D_new
        state.F = F_new
        state.energy = E_new
        state.drms = drms

        it = SCFIteration(
            cycle=cycle,
            energy=float(e_report),
            delta_e=float(e_report - e_prev),
            drms=float(drms),
            diis_error=diis_err,
            stabilizer=stabilizer,
            oda_lambda=lam,
            trace_ds=float(np.sum(D_new * S)),
        )
        state.history.append(it)
        e_prev = e_report
        if profile is not None:
            profile["scf"]["iters"] = int(cycle)

        if verbose >= 2:
            extra = ""
            if lam is not None:
                extra = f"  lambda={lam:.4f}"
            elif diis_err is not None:
                extra = f"  diis_err={diis_err:.3e}"
            print(
                f"[rhf] iter={cycle:3d}  E={e_report + e_nuc:+.12f}  dE={it.delta_e:+.3e}  "
                f"rms(dD)={drms:.3e}  {stabilizer}{extra}"
            )

        if drms < float(options.scf_max_rms):
            state.phase = SCFPhase.CONVERGED
            break
    else:
        state.phase = SCFPhase.MAX_ITER_EXCEEDED

    if profile is not None:
        profile["scf"]["phase"] = state.phase.value

    fields_common = dict(
        molecule=getattr(helper, "molecule", None),
        helper=helper,
        options=options,
        energy=float(state.energy + e_nuc),
        e_elec=float(state.energy),
        e_nuc=e_nuc,
        ndocc=ndocc,
        nvir=nvir,
        mo_energy=state.mo_energy,
        mo_coeff=state.mo_coeff,
        density=state.D,
        fock=state.F,
        niter=int(state.cycle),
        n_dropped=int(ortho.n_dropped),
        guess=g,
        history=tuple(state.history),
    )
    if state.phase is SCFPhase.CONVERGED:
        if verbose >= 1:
            print(f"[rhf] converged in {state.cycle} iterations  E(RHF)={state.energy + e_nuc:+.12f}")
        return RHF(**fields_common)

    if verbose >= 1:
        print(
            f"[rhf] not converged after {state.cycle} iterations "
            f"(rms(dD)={state.drms:.3e} > {options.scf_max_rms:.1e})"
        )
    return SCFNotConverged(**fields_common)


def _resolve_guess(guess: Any, options: SCFOptions) -> GuessStrategy | GuessResult:
    if guess is None:
        return select_guess(options.scf_guess)
    if isinstance(guess, (RHF, SCFNotConverged)):
        return ProjectionGuess(guess.helper, guess.mo_coeff)
    if isinstance(guess, str):
        return select_guess(guess)
    if isinstance(guess, GuessResult) or hasattr(guess, "build"):
        return guess
    raise TypeError("guess must be None, a guess name, a guess strategy, or a previous RHF result")


def run_rhf(
    system,
    options: SCFOptions | None = None,
    *,
    guess: Any = None,
    ndocc: int | None = None,
    strict: bool = False,
    profile: dict | None = None,
    **overrides: Any,
) -> RHF | SCFNotConverged:
    """Run RHF for a `Molecule` or a prepared `IntegralHelper`.

    Parameters
    ----------
    system : Molecule | IntegralHelper
        A molecule (integrals are built in `options.basis`, or in
        `molecule.basis` when that is set) or an existing integral store.
        A `jkfit` given explicitly overrides the helper's fitting basis;
        the caller's helper is left untouched.
    options : SCFOptions, optional
        Resolved settings; keyword `overrides` are applied on top.
    guess : None | str | GuessStrategy | RHF
        None uses `options.scf_guess`; a previous RHF (any basis) seeds a
        projection guess.
    ndocc : int, optional
        Required only for helpers without a molecule.
    strict : bool
        Raise `SCFConvergenceError` instead of returning `SCFNotConverged`.
    """

    from hfcore.frontend.integral_helper import IntegralHelper  # noqa: PLC0415

    # a fitting basis given by the caller replaces the one a prepared helper carries
    jkfit_given = "jkfit" in overrides or (options is not None and options.jkfit != SCFOptions.jkfit)
    if options is None:
        options = SCFOptions(**overrides) if overrides else SCFOptions()
    elif overrides:
        options = options.replace(**overrides)

    # configuration is resolved before any integral is touched
    builder_cls = select_fock_builder(options.scf_alg)
    guess_obj = _resolve_guess(guess, options)

    if isinstance(system, IntegralHelper):
        helper = system
        if jkfit_given and options.jkfit != helper.jkfit:
            helper = helper.with_jkfit(options.jkfit)
    else:
        basis = system.basis if getattr(system, "basis", None) is not None else options.basis
        helper = IntegralHelper(system, basis, options.jkfit, verbose=options.verbose, profile=profile)

    if ndocc is None:
        if helper.molecule is None:
            raise ValueError("ndocc is required when the IntegralHelper has no molecule")
        ndocc = helper.molecule.ndocc

    ortho = orthogonalizer(helper["S"], lindep_tol=options.lindep_tol)
    if options.verbose >= 1 and ortho.n_dropped:
        print(f"[rhf] projected out {ortho.n_dropped} linearly dependent basis functions")
    fock_builder = builder_cls(helper)
    result = rhf_kernel(helper, guess_obj, ortho, fock_builder, options, ndocc=int(ndocc), profile=profile)
    if strict and not result.converged:
        raise SCFConvergenceError(result)
    return result


__all__ = [
    "RHF",
    "SCFIteration",
    "SCFNotConverged",
    "SCFPhase",
    "SCFState",
    "rhf_kernel",
    "run_rhf",
]

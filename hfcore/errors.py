from __future__ import annotations

"""Exception hierarchy for hfcore."""

from typing import Any


class HFCoreError(Exception):
    """Base class for errors raised by hfcore."""


class InvalidOptionError(HFCoreError, ValueError):
    """An SCF option has an unrecognised or out-of-range value."""

    def __init__(self, option: str, value: Any, allowed: Any = None):
        self.option = str(option)
        self.value = value
        self.allowed = allowed
        msg = f"invalid value for option {self.option!r}: {value!r}"
        if allowed is not None:
            if isinstance(allowed, (tuple, list, frozenset, set)):
                allowed = ", ".join(repr(a) for a in sorted(allowed))
            msg += f" (expected {allowed})"
        super().__init__(msg)


class ProjectionError(HFCoreError, ValueError):
    """Projecting occupied orbitals into a target basis gave a non-positive-definite overlap."""

    def __init__(self, message: str, *, min_eigenvalue: float):
        self.min_eigenvalue = float(min_eigenvalue)
        super().__init__(f"{message} (smallest eigenvalue {self.min_eigenvalue:.3e})")


class SCFConvergenceError(HFCoreError, RuntimeError):
    """SCF iterations were exhausted before reaching the convergence threshold."""

    def __init__(self, result: Any):
        self.result = result
        super().__init__(
            f"SCF did not converge in {result.niter} iterations "
            f"(last RMS(dD)={result.drms:.3e}, threshold={result.options.scf_max_rms:.1e})"
        )


__all__ = ["HFCoreError", "InvalidOptionError", "ProjectionError", "SCFConvergenceError"]

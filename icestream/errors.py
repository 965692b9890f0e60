"""Custom exceptions for the :mod:`icestream` package."""
from __future__ import annotations

from typing import Any, Optional, Sequence


class IceStreamError(Exception):
    """Base exception for ice-stream simulation errors."""


class ConfigurationError(IceStreamError, ValueError):
    """Invalid or out-of-range parameter, raised before integration starts."""


class IntegrationError(IceStreamError, RuntimeError):
    """The solver failed to meet tolerance or the rate law returned a non-finite value.

    ``t`` and ``state`` identify where the run failed.  ``trajectory`` holds
    the accepted steps up to the failure, flagged incomplete; it is attached
    for inspection only and is refused by the diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        t: Optional[float] = None,
        state: Optional[Sequence[float]] = None,
        trajectory: Any = None,
    ) -> None:
        self.t = t
        self.state = None if state is None else tuple(float(v) for v in state)
        self.trajectory = trajectory
        detail = message
        if t is not None:
            detail += f" (t={t:.6e} s"
            if self.state is not None:
                detail += ", X=[" + ", ".join(f"{v:.6g}" for v in self.state) + "]"
            detail += ")"
        super().__init__(detail)


class IntegrationCancelled(IntegrationError):
    """Integration stopped by a cancel request, wall-clock limit or step ceiling."""


class DiagnosticError(IceStreamError, ValueError):
    """Post-processing hit a zero divisor, a non-finite value or an unusable trajectory."""

    def __init__(self, message: str, *, index: Optional[int] = None, t: Optional[float] = None) -> None:
        self.index = index
        self.t = t
        detail = message
        if index is not None:
            detail += f" (sample {index}"
            if t is not None:
                detail += f", t={t:.6e} s"
            detail += ")"
        super().__init__(detail)


__all__ = [
    "IceStreamError",
    "ConfigurationError",
    "IntegrationError",
    "IntegrationCancelled",
    "DiagnosticError",
]

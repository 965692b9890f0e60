"""Runtime helpers used by the integrator."""

from .history import TrajectoryBuffer
from .progress import ProgressReporter

__all__ = [
    "ProgressReporter",
    "TrajectoryBuffer",
]

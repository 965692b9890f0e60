"""Ice-stream box model: till, thermal and geometric evolution of an ice stream."""
from . import constants, physics
from .diagnostics import Diagnostics, compute_diagnostics
from .errors import (
    ConfigurationError,
    DiagnosticError,
    IceStreamError,
    IntegrationCancelled,
    IntegrationError,
)
from .integrator import Trajectory, integrate
from .run import RunResult, run_model
from .schema import Config, build_config

__all__ = [
    "constants",
    "physics",
    "Config",
    "build_config",
    "Trajectory",
    "integrate",
    "Diagnostics",
    "compute_diagnostics",
    "RunResult",
    "run_model",
    "IceStreamError",
    "ConfigurationError",
    "IntegrationError",
    "IntegrationCancelled",
    "DiagnosticError",
]

"""Run orchestration: configuration -> integration -> diagnostics."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import pandas as pd

from .diagnostics import Diagnostics, compute_diagnostics
from .integrator import Trajectory, integrate
from .physics.rates import RateLaw, box_model_rate
from .runtime import ProgressReporter
from .schema import Config, build_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class RunResult:
    """A completed run: the configuration, raw trajectory and diagnostics."""

    config: Config
    trajectory: Trajectory
    diagnostics: Diagnostics

    def to_frame(self) -> pd.DataFrame:
        """Raw state (``*_raw`` columns) alongside the reported diagnostics, time in years."""

        df = self.diagnostics.to_frame(year=self.config.year)
        for name in ("e", "h_till", "T_b"):
            df[f"{name}_raw"] = getattr(self.trajectory, name)
        return df


def run_model(
    config: Optional[Config] = None,
    *,
    rate: RateLaw = box_model_rate,
    progress: bool = False,
    cancel: Optional[Callable[[], bool]] = None,
) -> RunResult:
    """Integrate the box model and post-process the trajectory.

    ``config`` defaults to the reference run.  Either both the trajectory and
    its diagnostics are returned or the first failure propagates.
    """

    cfg = config if config is not None else build_config()
    start = time.monotonic()
    logger.info("stage=integrate t_final=%g yr", cfg.t_final)
    reporter = ProgressReporter(cfg.tspan[1], year_s=cfg.year, enabled=progress)
    trajectory = integrate(cfg, rate, progress=reporter, cancel=cancel)
    logger.info("stage=diagnostics samples=%d", len(trajectory))
    diagnostics = compute_diagnostics(trajectory, cfg)
    logger.info("stage=done wall=%.2f s", time.monotonic() - start)
    return RunResult(config=cfg, trajectory=trajectory, diagnostics=diagnostics)


__all__ = ["RunResult", "run_model"]

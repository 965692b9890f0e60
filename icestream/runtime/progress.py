"""Lightweight terminal progress reporting keyed on simulated time."""

from __future__ import annotations

import math
import sys
import time

ETA_EWMA_ALPHA = 0.1
ETA_MIN_SAMPLES = 3


class ProgressReporter:
    """Terminal progress bar with ETA feedback for adaptive-step runs.

    Adaptive integration has no fixed step count, so progress is the fraction
    of the simulated horizon already covered.  The ETA extrapolates an
    exponentially weighted wall-clock cost per simulated second.
    """

    def __init__(
        self,
        total_time_s: float,
        *,
        year_s: float,
        enabled: bool = False,
    ) -> None:
        self.total_time_s = max(float(total_time_s), 0.0)
        self.enabled = bool(enabled and self.total_time_s > 0.0)
        self.year_s = float(year_s)
        self._finished = False
        self._isatty = sys.stdout.isatty()
        self._last_percent_int: int = -1
        self._eta_ewma: float | None = None
        self._eta_samples: int = 0
        self._last_wall: float | None = None
        self._last_sim: float | None = None

    def update(self, step_no: int, sim_time_s: float, *, force: bool = False) -> None:
        """Render the bar when the percent changes by 0.1% or when forced."""

        if not self.enabled or self._finished:
            return
        now = time.monotonic()
        self._update_eta(sim_time_s, now)
        frac = min(max(sim_time_s / self.total_time_s, 0.0), 1.0) if math.isfinite(sim_time_s) else 0.0
        is_last = frac >= 1.0
        percent_tenth = int(frac * 1000)
        if not force and not is_last and percent_tenth == self._last_percent_int:
            return
        self._last_percent_int = percent_tenth
        bar_width = 28
        filled = int(bar_width * frac)
        bar = "#" * filled + "-" * (bar_width - filled)
        sim_years = sim_time_s / self.year_s if math.isfinite(sim_time_s) else float("nan")
        eta_seconds = float("nan")
        if self._eta_ewma is not None and self._eta_samples >= ETA_MIN_SAMPLES:
            eta_seconds = self._eta_ewma * max(self.total_time_s - sim_time_s, 0.0)
        line = (
            f"[{bar}] {frac * 100:5.1f}% step {step_no} "
            f"t={sim_years:.4g} yr {_format_eta(eta_seconds)}"
        )
        if self._isatty:
            sys.stdout.write(f"\r\033[2K{line}")
            if is_last:
                sys.stdout.write("\n")
        else:
            sys.stdout.write(f"{line}\n")
        if is_last:
            self._finished = True
        sys.stdout.flush()

    def finish(self, step_no: int, sim_time_s: float) -> None:
        """Force a final render to end the line cleanly."""

        if not self.enabled:
            return
        self.update(step_no, sim_time_s, force=True)

    def _update_eta(self, sim_time_s: float, now: float) -> None:
        """Update the EWMA of wall seconds per simulated second."""

        if self._last_wall is not None and self._last_sim is not None:
            sim_delta = sim_time_s - self._last_sim
            if sim_delta > 0.0:
                cost = (now - self._last_wall) / sim_delta
                if math.isfinite(cost) and cost > 0.0:
                    if self._eta_ewma is None:
                        self._eta_ewma = cost
                    else:
                        self._eta_ewma = ETA_EWMA_ALPHA * cost + (1.0 - ETA_EWMA_ALPHA) * self._eta_ewma
                    self._eta_samples += 1
        self._last_wall = now
        self._last_sim = sim_time_s


def _format_eta(seconds: float) -> str:
    if not math.isfinite(seconds) or seconds < 0.0:
        return "ETA ?"
    if seconds >= 3600.0:
        return f"ETA {seconds/3600.0:.1f}h"
    if seconds >= 60.0:
        return f"ETA {seconds/60.0:.1f}m"
    return f"ETA {seconds:.0f}s"

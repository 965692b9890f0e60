"""Surge-cycle statistics of the sliding-velocity series.

Binge–purge cycles show up as isolated peaks in the centreline velocity.
:func:`detect_surges` locates them with :func:`scipy.signal.find_peaks` and
reports their timing in years and magnitude in m/yr.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.signal import find_peaks

from .diagnostics import Diagnostics

logger = logging.getLogger(__name__)

# Peaks must rise this fraction of the velocity range above their surroundings
DEFAULT_RELATIVE_PROMINENCE = 0.1


@dataclass(frozen=True, eq=False)
class SurgeSummary:
    """Peak times [yr], peak velocities [m/yr] and the mean period between surges [yr]."""

    peak_times_yr: np.ndarray
    peak_velocities_m_per_yr: np.ndarray
    mean_period_yr: float

    @property
    def count(self) -> int:
        return int(self.peak_times_yr.size)


def detect_surges(
    diagnostics: Diagnostics,
    year: float,
    *,
    prominence: Optional[float] = None,
) -> SurgeSummary:
    """Locate surge peaks in ``diagnostics.U``.

    Parameters
    ----------
    diagnostics:
        Output of :func:`~icestream.diagnostics.compute_diagnostics`.
    year:
        Seconds per year, used to express times and velocities per year.
    prominence:
        Minimum peak prominence in m/yr.  Defaults to
        ``DEFAULT_RELATIVE_PROMINENCE`` times the velocity range.

    Returns
    -------
    SurgeSummary
        ``mean_period_yr`` is NaN when fewer than two peaks are found.
    """

    t_yr = diagnostics.t / year
    U_yr = diagnostics.U * year
    if prominence is None:
        span = float(U_yr.max() - U_yr.min()) if U_yr.size else 0.0
        prominence = DEFAULT_RELATIVE_PROMINENCE * span
    if U_yr.size < 3 or prominence <= 0.0:
        empty = np.empty(0, dtype=float)
        return SurgeSummary(empty, empty.copy(), math.nan)

    peaks, _ = find_peaks(U_yr, prominence=prominence)
    peak_times = t_yr[peaks]
    period = float(np.mean(np.diff(peak_times))) if peaks.size > 1 else math.nan
    logger.info("detect_surges: %d peaks, mean period %.4g yr", peaks.size, period)
    return SurgeSummary(peak_times, U_yr[peaks], period)


__all__ = ["SurgeSummary", "detect_surges", "DEFAULT_RELATIVE_PROMINENCE"]

"""Diagnostic post-processing of a finished trajectory.

The map is applied sample by sample and feeds nothing back into the
integration.  The model state may leave its physical range during
integration; only the reported series are bounded here:

* ``e`` is capped at the consolidation void ratio ``e_c``;
* ``h_till`` is clamped to ``[h_t_min, htill_init]``;
* ``T_b`` is floored at zero (the pressure-melting point).

``deltaT`` and the till yield stress ``tau_f`` are computed from the *raw*
``T_b`` and ``e``; the reported series are not used for derived quantities.
A sample with zero ice thickness has no defined sliding velocity and fails
the whole computation with :class:`~icestream.errors.DiagnosticError`.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd

from .errors import DiagnosticError
from .integrator import Trajectory
from .physics.stress import driving_stress, sliding_velocity, yield_stress
from .schema import Config
from .warnings import PhysicsWarning

logger = logging.getLogger(__name__)

FIELDS = ("t", "h", "e", "h_till", "T_b", "deltaT", "tau_d", "tau_f", "U")


@dataclass(frozen=True, eq=False)
class Diagnostics:
    """Per-sample reporting series; all arrays share the trajectory's length.

    ``e``, ``h_till`` and ``T_b`` are the bounded reporting values, ``h`` is
    the raw ice thickness.  Stresses are in Pa and ``U`` in m/s.
    """

    t: np.ndarray
    h: np.ndarray
    e: np.ndarray
    h_till: np.ndarray
    T_b: np.ndarray
    deltaT: np.ndarray
    tau_d: np.ndarray
    tau_f: np.ndarray
    U: np.ndarray

    def __len__(self) -> int:
        return int(self.t.size)

    def as_dict(self) -> Dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in FIELDS}

    def to_frame(self, year: Optional[float] = None) -> pd.DataFrame:
        """Return the series as a DataFrame.

        With ``year`` (seconds per year) the display columns ``t_yr`` and
        ``U_m_per_yr`` are appended.
        """

        df = pd.DataFrame(self.as_dict())
        if year is not None:
            df["t_yr"] = self.t / year
            df["U_m_per_yr"] = self.U * year
        return df


def _out_of_bounds_counts(trajectory: Trajectory, cfg: Config) -> Dict[str, int]:
    return {
        "e>e_c": int(np.count_nonzero(trajectory.e > cfg.e_c)),
        "h_till<h_t_min": int(np.count_nonzero(trajectory.h_till < cfg.h_t_min)),
        "h_till>htill_init": int(np.count_nonzero(trajectory.h_till > cfg.htill_init)),
        "T_b<0": int(np.count_nonzero(trajectory.T_b < 0.0)),
    }


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


def compute_diagnostics(trajectory: Trajectory, cfg: Config) -> Diagnostics:
    """Derive the bounded reporting series and stresses from ``trajectory``.

    Raises
    ------
    DiagnosticError
        If the trajectory is incomplete or empty, a sample has zero ice
        thickness, or any derived quantity is non-finite.
    """

    if not trajectory.complete:
        raise DiagnosticError("refusing to post-process an incomplete trajectory")
    if len(trajectory) == 0:
        raise DiagnosticError("trajectory has no samples")

    t = trajectory.t
    h = trajectory.h
    e_raw = trajectory.e
    T_b_raw = trajectory.T_b

    zero = np.flatnonzero(h == 0.0)
    if zero.size:
        idx = int(zero[0])
        raise DiagnosticError("ice thickness is zero; sliding velocity undefined", index=idx, t=float(t[idx]))

    deltaT = cfg.T_s - T_b_raw
    e_rep = np.minimum(e_raw, cfg.e_c)
    h_till_rep = np.clip(trajectory.h_till, cfg.h_t_min, cfg.htill_init)
    T_b_rep = np.maximum(T_b_raw, 0.0)

    with np.errstate(over="ignore", invalid="ignore"):
        tau_d = driving_stress(h, cfg)
        tau_f = yield_stress(e_raw, cfg)
        U = sliding_velocity(h, tau_d, tau_f, cfg)

    derived = {"deltaT": deltaT, "tau_d": tau_d, "tau_f": tau_f, "U": U}
    for name, values in derived.items():
        bad = np.flatnonzero(~np.isfinite(values))
        if bad.size:
            idx = int(bad[0])
            raise DiagnosticError(f"non-finite {name}={values[idx]!r}", index=idx, t=float(t[idx]))

    negative = int(np.count_nonzero(h < 0.0))
    if negative:
        warnings.warn(
            f"negative ice thickness in {negative} of {len(trajectory)} samples",
            PhysicsWarning,
            stacklevel=2,
        )
    counts = _out_of_bounds_counts(trajectory, cfg)
    logger.info("compute_diagnostics: %d samples, clamped for reporting: %s", len(trajectory), counts)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "compute_diagnostics: U_max=%.3e tau_d_max=%.3e tau_f_min=%.3e",
            float(np.max(U)),
            float(np.max(tau_d)),
            float(np.min(tau_f)),
        )

    return Diagnostics(
        t=_readonly(np.array(t, dtype=float)),
        h=_readonly(np.array(h, dtype=float)),
        e=_readonly(e_rep),
        h_till=_readonly(h_till_rep),
        T_b=_readonly(T_b_rep),
        deltaT=_readonly(deltaT),
        tau_d=_readonly(np.asarray(tau_d, dtype=float)),
        tau_f=_readonly(np.asarray(tau_f, dtype=float)),
        U=_readonly(np.asarray(U, dtype=float)),
    )


__all__ = ["Diagnostics", "compute_diagnostics", "FIELDS"]

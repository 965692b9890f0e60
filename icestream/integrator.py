"""Adaptive integration of the box model.

:func:`integrate` advances :class:`scipy.integrate.RK45` (the Dormand–Prince
4(5) embedded pair) one accepted step at a time so that every step can be
recorded together with its error estimate, rate-law output can be checked
for non-finite values, and long runs can be cancelled between steps.  A run
either returns a complete :class:`Trajectory` or raises
:class:`~icestream.errors.IntegrationError`.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy.integrate import RK45

from .errors import DiagnosticError, IntegrationCancelled, IntegrationError
from .physics.rates import RateLaw, box_model_rate
from .runtime import ProgressReporter, TrajectoryBuffer
from .schema import Config

logger = logging.getLogger(__name__)

N_STATE = 4


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Time-ordered samples ``(t, X)`` produced by one run.

    ``error_norms[i]`` is the scaled RMS local error estimate of the step
    that ended at ``t[i]`` (zero for the initial sample); accepted steps
    satisfy ``error_norms <= 1``.  Arrays are read-only.
    """

    t: np.ndarray
    y: np.ndarray
    error_norms: np.ndarray
    complete: bool = True
    n_rhs: int = 0

    @classmethod
    def from_samples(cls, t, y, *, error_norms=None) -> "Trajectory":
        """Wrap externally produced samples as a complete trajectory."""

        t_arr = np.array(t, dtype=float)
        y_arr = np.array(y, dtype=float)
        if y_arr.ndim == 1 and y_arr.size == N_STATE:
            y_arr = y_arr.reshape(1, N_STATE)
        if t_arr.ndim != 1 or y_arr.shape != (t_arr.size, N_STATE):
            raise DiagnosticError(f"samples must be t (N,) and y (N, {N_STATE}); got {t_arr.shape} and {y_arr.shape}")
        if t_arr.size == 0:
            raise DiagnosticError("trajectory has no samples")
        if np.any(np.diff(t_arr) <= 0.0):
            raise DiagnosticError("trajectory times must be strictly increasing")
        err_arr = np.zeros(t_arr.size) if error_norms is None else np.array(error_norms, dtype=float)
        if err_arr.shape != t_arr.shape:
            raise DiagnosticError("error_norms must match the number of samples")
        for arr in (t_arr, y_arr, err_arr):
            arr.flags.writeable = False
        return cls(t=t_arr, y=y_arr, error_norms=err_arr, complete=True)

    def __len__(self) -> int:
        return int(self.t.size)

    @property
    def n_steps(self) -> int:
        return max(len(self) - 1, 0)

    @property
    def h(self) -> np.ndarray:
        return self.y[:, 0]

    @property
    def e(self) -> np.ndarray:
        return self.y[:, 1]

    @property
    def h_till(self) -> np.ndarray:
        return self.y[:, 2]

    @property
    def T_b(self) -> np.ndarray:
        return self.y[:, 3]

    def t_years(self, year: float) -> np.ndarray:
        return self.t / year


def _freeze(buffer: TrajectoryBuffer, *, complete: bool, n_rhs: int) -> Trajectory:
    t, y, err = buffer.to_arrays()
    return Trajectory(t=t, y=y, error_norms=err, complete=complete, n_rhs=n_rhs)


def _step_error_norm(solver: RK45, t_old: float, y_old: np.ndarray) -> float:
    """Recompute the scaled RMS error norm RK45 used to accept the last step."""

    h = solver.t - t_old
    scale = solver.atol + np.maximum(np.abs(y_old), np.abs(solver.y)) * solver.rtol
    err = np.dot(solver.K.T, solver.E) * h / scale
    return float(np.linalg.norm(err) / err.size ** 0.5)


def integrate(
    cfg: Config,
    rate: RateLaw = box_model_rate,
    *,
    progress: Optional[ProgressReporter] = None,
    cancel: Optional[Callable[[], bool]] = None,
) -> Trajectory:
    """Integrate ``rate`` from ``cfg.ic`` over ``cfg.tspan``.

    Parameters
    ----------
    cfg:
        Run configuration; supplies the initial state, time span and solver
        tolerances, and is passed unchanged to every rate evaluation.
    rate:
        Rate law ``rate(t, X, cfg) -> dX/dt``.
    progress:
        Optional reporter updated after each accepted step.
    cancel:
        Optional callable polled between accepted steps; returning ``True``
        aborts the run.

    Returns
    -------
    Trajectory
        Complete trajectory with ``t[0] == 0`` and ``t[-1] == year * t_final``.

    Raises
    ------
    IntegrationError
        If the rate law returns a non-finite or mis-shaped value, raises an
        arithmetic error, or the step size collapses.
    IntegrationCancelled
        If ``cancel`` fires, the wall-clock limit passes or the accepted-step
        ceiling is reached.
    """

    t0, t_end = cfg.tspan
    y0 = cfg.ic
    settings = cfg.solver
    n_rhs = 0

    def fun(t: float, y: np.ndarray) -> np.ndarray:
        nonlocal n_rhs
        n_rhs += 1
        try:
            dydt = np.asarray(rate(t, y, cfg), dtype=float)
        except ArithmeticError as exc:
            raise IntegrationError(f"rate law raised {exc.__class__.__name__}: {exc}", t=t, state=y) from exc
        if dydt.shape != (N_STATE,):
            raise IntegrationError(f"rate law returned shape {dydt.shape}, expected ({N_STATE},)", t=t, state=y)
        if not np.all(np.isfinite(dydt)):
            raise IntegrationError(f"rate law returned non-finite dX/dt={dydt.tolist()}", t=t, state=y)
        return dydt

    buffer = TrajectoryBuffer(N_STATE)
    buffer.append(t0, y0, 0.0)
    logger.info(
        "integrate: t_final=%g yr rtol=%g atol=%g ic=%s",
        cfg.t_final,
        settings.rtol,
        settings.atol,
        y0.tolist(),
    )
    wall_start = time.monotonic()
    try:
        solver = RK45(
            fun,
            t0,
            y0,
            t_end,
            max_step=settings.max_step if settings.max_step is not None else np.inf,
            rtol=settings.rtol,
            atol=settings.atol,
            first_step=settings.first_step,
        )
        while solver.status == "running":
            step_no = buffer.row_count
            if step_no > settings.max_steps:
                raise IntegrationCancelled(
                    f"accepted-step ceiling max_steps={settings.max_steps} reached",
                    t=solver.t,
                    state=solver.y,
                )
            if cancel is not None and cancel():
                raise IntegrationCancelled("integration cancelled", t=solver.t, state=solver.y)
            if settings.wall_time_limit_s is not None:
                elapsed = time.monotonic() - wall_start
                if elapsed > settings.wall_time_limit_s:
                    raise IntegrationCancelled(
                        f"wall-clock limit of {settings.wall_time_limit_s:g} s exceeded",
                        t=solver.t,
                        state=solver.y,
                    )
            t_old = solver.t
            y_old = solver.y.copy()
            message = solver.step()
            if solver.status == "failed":
                raise IntegrationError(f"solver failed: {message}", t=solver.t, state=solver.y)
            error_norm = _step_error_norm(solver, t_old, y_old)
            buffer.append(solver.t, solver.y, error_norm)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "step %d: t=%.6e dt=%.3e err=%.3e X=%s",
                    step_no,
                    solver.t,
                    solver.t - t_old,
                    error_norm,
                    solver.y.tolist(),
                )
            if progress is not None:
                progress.update(step_no, solver.t)
    except IntegrationError as exc:
        exc.trajectory = _freeze(buffer, complete=False, n_rhs=n_rhs)
        logger.error("integrate: failed after %d accepted steps: %s", buffer.row_count - 1, exc)
        raise

    if progress is not None:
        progress.finish(buffer.row_count - 1, buffer.last_time)
    trajectory = _freeze(buffer, complete=True, n_rhs=n_rhs)
    logger.info(
        "integrate: finished %d steps, %d rate evaluations, %.2f s wall",
        trajectory.n_steps,
        n_rhs,
        time.monotonic() - wall_start,
    )
    return trajectory


__all__ = ["Trajectory", "integrate", "N_STATE"]

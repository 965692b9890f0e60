"""Accepted-step buffer owned by the integrator while a run is in progress."""

from __future__ import annotations

from typing import Iterable, List, Tuple

import numpy as np


class TrajectoryBuffer:
    """Append-only row buffer for accepted integration steps.

    Each row holds the step time, the state vector and the scaled error norm
    of the step that produced it.  The buffer is converted to read-only
    arrays once with :meth:`to_arrays`.
    """

    def __init__(self, n_state: int) -> None:
        if n_state <= 0:
            raise ValueError("n_state must be positive")
        self._n_state = int(n_state)
        self._t: List[float] = []
        self._y: List[np.ndarray] = []
        self._err: List[float] = []

    @property
    def row_count(self) -> int:
        return len(self._t)

    def __len__(self) -> int:
        return len(self._t)

    def __bool__(self) -> bool:
        return bool(self._t)

    @property
    def last_time(self) -> float:
        if not self._t:
            raise IndexError("TrajectoryBuffer is empty")
        return self._t[-1]

    def append(self, t: float, y: Iterable[float], error_norm: float = 0.0) -> None:
        state = np.array(y, dtype=float)
        if state.shape != (self._n_state,):
            raise ValueError(f"state must have shape ({self._n_state},), got {state.shape}")
        t_val = float(t)
        if self._t and not t_val > self._t[-1]:
            raise ValueError(f"time {t_val!r} does not increase past {self._t[-1]!r}")
        self._t.append(t_val)
        self._y.append(state)
        self._err.append(float(error_norm))

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return read-only ``(t, y, error_norms)`` copies of the buffer."""

        t = np.array(self._t, dtype=float)
        if self._y:
            y = np.vstack(self._y)
        else:
            y = np.empty((0, self._n_state), dtype=float)
        err = np.array(self._err, dtype=float)
        for arr in (t, y, err):
            arr.flags.writeable = False
        return t, y, err


__all__ = ["TrajectoryBuffer"]

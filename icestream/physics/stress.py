"""Basal stresses and sliding velocity of the ice-stream trunk.

The same closed forms are used by the rate law during integration and by the
diagnostic post-processor afterwards, so both read their constants from the
one :class:`~icestream.schema.Config` they are given.  All functions accept
scalars or numpy arrays and broadcast element-wise.
"""
from __future__ import annotations

import numpy as np

from ..schema import Config

__all__ = ["driving_stress", "yield_stress", "sliding_velocity"]


def driving_stress(h, cfg: Config):
    """Return the driving stress ``tau_d = rho_i g h^2 / L`` [Pa].

    The surface slope of the box is approximated by ``h / L``.
    """

    return cfg.rho_i * cfg.g * np.square(h) / cfg.L


def yield_stress(e, cfg: Config):
    """Return the till yield stress ``tau_f = tau0 exp(-c e)`` [Pa]."""

    return cfg.tau0 * np.exp(-cfg.c * np.asarray(e, dtype=float))


def sliding_velocity(h, tau_d, tau_f, cfg: Config):
    """Return the centreline sliding velocity [m/s], floored at zero.

    ``U = (A_f / 256) W^(n+1) ((tau_d - tau_f) / h)^n``.  The stress ratio is
    floored at zero before the power is taken, which equals flooring ``U``
    for the odd integer exponents :class:`~icestream.schema.Config` accepts.  A zero
    thickness yields a non-finite result; callers decide how to treat it.
    """

    ratio = (np.asarray(tau_d, dtype=float) - tau_f) / h
    prefactor = (cfg.A_f / 256.0) * cfg.W ** (cfg.n + 1.0)
    return prefactor * np.power(np.maximum(ratio, 0.0), cfg.n)

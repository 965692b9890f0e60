"""Rate law of the ice-stream box model.

A rate law maps ``(t, X, cfg)`` to ``dX/dt`` for the state
``X = (h, e, h_till, T_b)``.  The integrator only relies on the
:class:`RateLaw` protocol; :func:`box_model_rate` is the reference
implementation of the Robel et al. (JGR, 2013) binge–purge model.

The basal heat budget

    G = q_g + tau_b U - K_i (T_s - T_b) / h

drives one of three mutually exclusive basal regimes:

``frozen``
    Till at its minimum thickness with the bed below melting (or losing
    heat).  No sliding; the basal layer cools or warms,
    ``dT_b/dt = -G_0 / (C_ice eta_b)`` with ``G_0`` the budget without
    frictional heating (``T_b`` is a depression, so heat loss raises it).
``freeze_thaw``
    Consolidated till (``e <= e_c``) that is either partly frozen or losing
    heat; the unfrozen till layer grows or shrinks,
    ``dh_till/dt = G / (rho_i L_f)``.
``till_water``
    Otherwise meltwater enters or leaves the till pores,
    ``de/dt = G / (rho_i L_f h_till)``.

In every regime the ice column follows ``dh/dt = a - U h / L``.

The integrator probes states outside the physical range while it searches
for a step size.  The rate law therefore evaluates stresses at
``max(e, e_c)`` and at ``h_till`` clamped to ``[h_t_min, htill_init]`` and
never raises for such states; singular inputs (``h == 0``) come back as
non-finite rates for the integrator to report.
"""
from __future__ import annotations

from typing import Literal, Protocol, Tuple

import numpy as np

from ..schema import Config
from .stress import driving_stress, sliding_velocity, yield_stress

__all__ = [
    "RateLaw",
    "Regime",
    "conductive_loss",
    "basal_heat_balance",
    "classify_regime",
    "box_model_rate",
]

Regime = Literal["frozen", "freeze_thaw", "till_water"]


class RateLaw(Protocol):
    """Callable returning the 4-component rate of change of the state."""

    def __call__(self, t: float, X: np.ndarray, cfg: Config) -> np.ndarray:
        ...


def conductive_loss(h, T_b, cfg: Config):
    """Heat conducted from the bed into the ice column [W m^-2]."""

    return cfg.K_i * (cfg.T_s - T_b) / h


def basal_heat_balance(h, T_b, tau_b, U, cfg: Config):
    """Net basal heat flux: geothermal plus frictional minus conductive [W m^-2]."""

    return cfg.q_g + tau_b * U - conductive_loss(h, T_b, cfg)


def _evaluate(X, cfg: Config) -> Tuple[Regime, float, float, float, float]:
    """Return ``(regime, U, G, G_0, h_till_eff)`` for state ``X``."""

    h, e, h_till, T_b = np.asarray(X, dtype=float)
    tau_b = yield_stress(max(e, cfg.e_c), cfg)
    tau_d = driving_stress(h, cfg)
    U = sliding_velocity(h, tau_d, tau_b, cfg)
    heat = basal_heat_balance(h, T_b, tau_b, U, cfg)
    heat_still = basal_heat_balance(h, T_b, tau_b, 0.0, cfg)
    h_till_eff = min(max(h_till, cfg.h_t_min), cfg.htill_init)

    if h_till <= cfg.h_t_min and (T_b > 0.0 or heat_still < 0.0):
        return "frozen", 0.0, heat_still, heat_still, h_till_eff
    if e <= cfg.e_c and (h_till < cfg.htill_init or heat < 0.0):
        return "freeze_thaw", U, heat, heat_still, h_till_eff
    return "till_water", U, heat, heat_still, h_till_eff


def classify_regime(X, cfg: Config) -> Regime:
    """Return the basal regime the rate law applies at state ``X``."""

    return _evaluate(X, cfg)[0]


def box_model_rate(t: float, X, cfg: Config) -> np.ndarray:
    """Return ``dX/dt`` of the box model at time ``t`` [s] and state ``X``.

    The model is autonomous; ``t`` is accepted to satisfy :class:`RateLaw`.
    """

    regime, U, heat, heat_still, h_till_eff = _evaluate(X, cfg)
    h = np.asarray(X, dtype=float)[0]

    dhdt = cfg.a - U * h / cfg.L
    dedt = 0.0
    dhtilldt = 0.0
    dTbdt = 0.0
    if regime == "frozen":
        dTbdt = -heat_still / (cfg.C_ice * cfg.eta_b)
    elif regime == "freeze_thaw":
        dhtilldt = heat / (cfg.rho_i * cfg.L_f)
    else:
        dedt = heat / (cfg.rho_i * cfg.L_f * h_till_eff)
    return np.array([dhdt, dedt, dhtilldt, dTbdt], dtype=float)

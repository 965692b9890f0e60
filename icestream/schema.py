"""Configuration schema for ice-stream box-model runs.

This module defines the Pydantic models that hold every physical and
numerical constant of a run.  A :class:`Config` is immutable once built and
is passed explicitly to the rate law, the integrator and the diagnostic
post-processor, which makes it the only channel through which constants are
shared.  Defaults reproduce the reference run of Robel et al. (JGR, 2013).
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from . import constants
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class InitialCondition(BaseModel):
    """Initial state vector ``(h, e, h_till, T_b)``."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    h: float = Field(constants.H_INIT, gt=0.0, description="Ice thickness [m]")
    e: float = Field(constants.E_INIT, description="Till void ratio [-]")
    h_till: Optional[float] = Field(
        None,
        description="Unfrozen till thickness [m]; defaults to htill_init when unset",
    )
    T_b: float = Field(
        constants.TB_INIT,
        description="Basal temperature depression below the pressure-melting point [K]",
    )


class SolverSettings(BaseModel):
    """Adaptive RK45 integration controls."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    rtol: float = Field(constants.RTOL, gt=0.0, description="Relative tolerance per component")
    atol: float = Field(constants.ATOL, gt=0.0, description="Absolute tolerance per component")
    first_step: Optional[float] = Field(None, gt=0.0, description="Initial step [s]; chosen automatically if unset")
    max_step: Optional[float] = Field(None, gt=0.0, description="Upper bound on the step size [s]")
    max_steps: int = Field(5_000_000, gt=0, description="Ceiling on the number of accepted steps")
    wall_time_limit_s: Optional[float] = Field(
        None,
        gt=0.0,
        description="Cancel the run once this much wall-clock time has elapsed",
    )


class Config(BaseModel):
    """Complete parameter set for one box-model run.

    Field names follow the symbols of the model equations.  The accumulation
    rate ``a`` is expressed in m/s; when omitted it is derived as
    ``0.1 m/yr / year``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    year: float = Field(constants.SECONDS_PER_YEAR, gt=0.0, description="Seconds per year")
    t_final: float = Field(constants.T_FINAL_YR, gt=0.0, description="Simulated duration [yr]")
    L: float = Field(constants.LENGTH, gt=0.0, description="Ice-stream length [m]")
    W: float = Field(constants.WIDTH, gt=0.0, description="Ice-stream width [m]")
    n: float = Field(constants.GLEN_N, gt=0.0, description="Glen flow-law exponent")
    q_g: float = Field(constants.Q_GEOTHERMAL, gt=0.0, description="Geothermal heat flux [W m^-2]")
    htill_init: float = Field(constants.HTILL_INIT, gt=0.0, description="Initial/maximum unfrozen till thickness [m]")
    T_s: float = Field(constants.T_SURFACE, description="Surface temperature depression below melting [K]")
    rho_i: float = Field(constants.RHO_ICE, gt=0.0, description="Ice density [kg m^-3]")
    L_f: float = Field(constants.LATENT_HEAT, gt=0.0, description="Latent heat of fusion [J kg^-1]")
    K_i: float = Field(constants.K_ICE, gt=0.0, description="Thermal conductivity of ice [W m^-1 K^-1]")
    A_f: float = Field(constants.A_FLOW, gt=0.0, description="Glen flow-law rate factor [Pa^-n s^-1]")
    g: float = Field(constants.GRAVITY, gt=0.0, description="Gravitational acceleration [m s^-2]")
    e_c: float = Field(constants.E_C, description="Till consolidation void ratio")
    tau0: float = Field(constants.TAU0, gt=0.0, description="Empirical till strength coefficient [Pa]")
    c: float = Field(constants.TILL_C, gt=0.0, description="Empirical till strength exponent")
    C_ice: float = Field(constants.C_ICE, gt=0.0, description="Volumetric heat capacity of ice [J K^-1 m^-3]")
    eta_b: float = Field(constants.ETA_B, gt=0.0, description="Basal ice layer thickness [m]")
    h_t_min: float = Field(constants.H_T_MIN, gt=0.0, description="Minimum unfrozen till thickness [m]")
    a: float = Field(
        default_factory=lambda data: constants.ACCUMULATION_M_PER_YR
        / data.get("year", constants.SECONDS_PER_YEAR),
        gt=0.0,
        description="Accumulation rate [m s^-1]; derived from year when unset",
    )
    initial_condition: InitialCondition = Field(default_factory=InitialCondition)
    solver: SolverSettings = Field(default_factory=SolverSettings)

    @model_validator(mode="before")
    @classmethod
    def _drop_unset_accumulation(cls, data: Any) -> Any:
        """Treat ``a=None`` as not given so the default is derived from ``year``."""

        if isinstance(data, dict) and "a" in data and data["a"] is None:
            data = {key: value for key, value in data.items() if key != "a"}
        return data

    @model_validator(mode="after")
    def _check_bounds(self) -> "Config":
        if not 0.0 < self.e_c < 1.0:
            raise ConfigurationError(f"e_c ({self.e_c}) must lie strictly between 0 and 1")
        if self.n != int(self.n) or int(self.n) % 2 != 1:
            # the sliding law floors the stress ratio, which equals flooring U only for odd n
            raise ConfigurationError(f"n ({self.n}) must be an odd integer")
        if self.h_t_min >= self.htill_init:
            raise ConfigurationError(
                f"h_t_min ({self.h_t_min}) must be less than htill_init ({self.htill_init})"
            )
        return self

    @property
    def A(self) -> float:
        """Ice-stream area ``L * W`` [m^2]."""

        return self.L * self.W

    @property
    def tspan(self) -> Tuple[float, float]:
        """Integration interval in seconds."""

        return 0.0, self.year * self.t_final

    @property
    def ic(self) -> np.ndarray:
        """Initial state vector ``(h, e, h_till, T_b)``."""

        init = self.initial_condition
        h_till = self.htill_init if init.h_till is None else init.h_till
        return np.array([init.h, init.e, h_till, init.T_b], dtype=float)

    def with_updates(self, **changes: Any) -> "Config":
        """Return a validated copy with ``changes`` applied.

        A derived accumulation rate is derived again from the new ``year``.
        """

        data = self.model_dump()
        if "a" not in self.model_fields_set:
            data.pop("a")
        data.update(changes)
        return build_config(**data)


def build_config(**overrides: Any) -> Config:
    """Build a :class:`Config`, reporting any invalid input as :class:`ConfigurationError`."""

    try:
        cfg = Config(**overrides)
    except ValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"invalid configuration: {messages}") from exc
    logger.debug("build_config: t_final=%g yr L=%g W=%g e_c=%g", cfg.t_final, cfg.L, cfg.W, cfg.e_c)
    return cfg


__all__ = ["InitialCondition", "SolverSettings", "Config", "build_config"]

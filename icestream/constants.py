"""Unit conversions and default physical constants for the ice-stream box model.

Values are the literal constants of the reference run (Robel et al., JGR,
2013).  All quantities are in SI units unless the comment says otherwise.
They seed the defaults of :class:`icestream.schema.Config`; model code
reads them through a config instance rather than from this module.
"""
from __future__ import annotations

# Seconds in a (365 day) year
SECONDS_PER_YEAR: float = 3600.0 * 24.0 * 365.0

# Simulated duration (years)
T_FINAL_YR: float = 1.0e4

# Ice-stream geometry (m)
LENGTH: float = 500.0e3
WIDTH: float = 40.0e3

# Glen flow law exponent and rate factor (Pa^-3 s^-1)
GLEN_N: float = 3.0
A_FLOW: float = 5.0e-25

# Geothermal heat flux (W m^-2)
Q_GEOTHERMAL: float = 0.07

# Initial (and maximum) unfrozen till thickness (m)
HTILL_INIT: float = 1.0

# Surface temperature as a depression below the melting point (K)
T_SURFACE: float = 23.0

RHO_ICE: float = 917.0         # kg m^-3
LATENT_HEAT: float = 3.335e5   # J kg^-1
K_ICE: float = 2.1             # W m^-1 K^-1
GRAVITY: float = 9.81          # m s^-2

# Till consolidation void ratio and empirical strength law tau0 * exp(-c e)
E_C: float = 0.3
TAU0: float = 9.44e8           # Pa
TILL_C: float = 21.7

# Volumetric heat capacity of ice (J K^-1 m^-3)
C_ICE: float = 1.94e6

# Basal ice layer thickness (m) and till thickness floor (m)
ETA_B: float = 10.0
H_T_MIN: float = 1.0e-3

# Accumulation rate (m/yr); converted to m/s by the config
ACCUMULATION_M_PER_YR: float = 0.1

# Initial state; the unfrozen till starts at HTILL_INIT
H_INIT: float = 700.0         # ice thickness, m
E_INIT: float = 0.6           # till void ratio
TB_INIT: float = 0.0          # basal temperature depression, K

# Solver tolerances
RTOL: float = 1.0e-6
ATOL: float = 1.0e-6

from __future__ import annotations

import math

import numpy as np
import pytest

from icestream.analysis import detect_surges
from icestream.diagnostics import Diagnostics


def _diagnostics(t_yr, U_m_per_yr, year):
    t = np.asarray(t_yr, dtype=float) * year
    zeros = np.zeros_like(t)
    return Diagnostics(
        t=t,
        h=zeros + 700.0,
        e=zeros,
        h_till=zeros,
        T_b=zeros,
        deltaT=zeros,
        tau_d=zeros,
        tau_f=zeros,
        U=np.asarray(U_m_per_yr, dtype=float) / year,
    )


def test_detect_surges_finds_periodic_peaks(cfg):
    t_yr = np.linspace(0.0, 1000.0, 2001)
    U = np.full_like(t_yr, 20.0)
    for centre in (100.0, 350.0, 600.0, 850.0):
        U += 1000.0 * np.exp(-(((t_yr - centre) / 5.0) ** 2))
    summary = detect_surges(_diagnostics(t_yr, U, cfg.year), cfg.year)
    assert summary.count == 4
    np.testing.assert_allclose(summary.peak_times_yr, [100.0, 350.0, 600.0, 850.0])
    np.testing.assert_allclose(summary.peak_velocities_m_per_yr, 1020.0, rtol=1e-6)
    assert summary.mean_period_yr == pytest.approx(250.0)


def test_detect_surges_ignores_small_wiggles(cfg):
    t_yr = np.linspace(0.0, 100.0, 501)
    U = 100.0 + 50.0 * np.exp(-(((t_yr - 50.0) / 2.0) ** 2)) + 0.1 * np.sin(t_yr)
    summary = detect_surges(_diagnostics(t_yr, U, cfg.year), cfg.year)
    assert summary.count == 1
    assert math.isnan(summary.mean_period_yr)


def test_detect_surges_flat_series(cfg):
    t_yr = np.linspace(0.0, 10.0, 11)
    summary = detect_surges(_diagnostics(t_yr, np.zeros_like(t_yr), cfg.year), cfg.year)
    assert summary.count == 0
    assert math.isnan(summary.mean_period_yr)

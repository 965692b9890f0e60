"""End-to-end run of the reference configuration over 10,000 years."""

from __future__ import annotations

import math

import numpy as np
import pytest

from icestream import run_model
from icestream.analysis import detect_surges
from icestream.diagnostics import FIELDS, compute_diagnostics
from icestream.schema import build_config


@pytest.fixture(scope="module")
def reference_result():
    cfg = build_config(initial_condition={"h": 700.0, "e": 0.6, "h_till": 1.0, "T_b": 0.0})
    return run_model(cfg)


def test_reference_run_completes(reference_result):
    traj = reference_result.trajectory
    cfg = reference_result.config
    assert traj.complete
    assert len(traj) >= 2
    assert traj.t[0] == 0.0
    assert traj.t[-1] >= cfg.year * cfg.t_final
    assert np.all(np.diff(traj.t) > 0.0)
    assert np.all(traj.error_norms <= 1.0)
    assert np.all(np.isfinite(traj.y))


def test_reference_run_reported_bounds(reference_result):
    diag = reference_result.diagnostics
    cfg = reference_result.config
    assert len(diag) == len(reference_result.trajectory)
    assert np.all(diag.e <= cfg.e_c)
    assert np.all(diag.h_till >= cfg.h_t_min)
    assert np.all(diag.h_till <= cfg.htill_init)
    assert np.all(diag.T_b >= 0.0)
    assert np.all(diag.U >= 0.0)


def test_reference_run_diagnostics_idempotent(reference_result):
    again = compute_diagnostics(reference_result.trajectory, reference_result.config)
    for name in FIELDS:
        np.testing.assert_array_equal(getattr(again, name), getattr(reference_result.diagnostics, name))


def test_reference_run_frame(reference_result):
    df = reference_result.to_frame()
    assert len(df) == len(reference_result.trajectory)
    for column in ("t_yr", "U_m_per_yr", "e_raw", "h_till_raw", "T_b_raw"):
        assert column in df.columns
    assert df["t_yr"].iloc[-1] == pytest.approx(1.0e4)


def test_reference_run_surge_summary(reference_result):
    summary = detect_surges(reference_result.diagnostics, reference_result.config.year)
    assert summary.count >= 2
    assert math.isfinite(summary.mean_period_yr)
    assert 500.0 < summary.mean_period_yr < 5000.0
    assert np.max(summary.peak_velocities_m_per_yr) > 50.0
    assert np.all(summary.peak_velocities_m_per_yr >= 0.0)
    assert np.all((summary.peak_times_yr >= 0.0) & (summary.peak_times_yr <= 1.0e4))

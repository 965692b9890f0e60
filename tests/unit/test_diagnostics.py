from __future__ import annotations

import math
import warnings

import numpy as np
import pytest

from icestream.diagnostics import FIELDS, compute_diagnostics
from icestream.errors import DiagnosticError
from icestream.integrator import Trajectory
from icestream.physics.stress import driving_stress, yield_stress
from icestream.warnings import PhysicsWarning

SAMPLES = np.array(
    [
        [700.0, 0.9, -5.0, -10.0],
        [700.0, 0.6, 50.0, 5.0],
        [700.0, 0.3, 0.5, 0.0],
        [650.0, 0.2, 1.0e-4, 2.0],
    ]
)


@pytest.fixture
def traj():
    return Trajectory.from_samples([0.0, 1.0, 2.0, 3.0], SAMPLES)


def test_output_matches_trajectory_length_and_order(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    assert len(diag) == len(traj)
    for name in FIELDS:
        assert getattr(diag, name).shape == (len(traj),)
    np.testing.assert_array_equal(diag.t, traj.t)
    np.testing.assert_array_equal(diag.h, traj.h)


def test_void_ratio_capped_at_consolidation_bound(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    assert diag.e[0] == pytest.approx(0.3)
    np.testing.assert_allclose(diag.e, [0.3, 0.3, 0.3, 0.2])
    assert np.all(diag.e <= cfg.e_c)


def test_till_thickness_clamped_to_bounds(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    assert diag.h_till[0] == pytest.approx(1.0e-3)
    assert diag.h_till[1] == pytest.approx(1.0)
    assert diag.h_till[2] == 0.5
    assert diag.h_till[3] == pytest.approx(cfg.h_t_min)
    assert np.all((diag.h_till >= cfg.h_t_min) & (diag.h_till <= cfg.htill_init))


def test_basal_temperature_floored_but_delta_uses_raw_value(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    assert diag.T_b[0] == 0.0
    assert diag.deltaT[0] == pytest.approx(33.0)
    np.testing.assert_allclose(diag.deltaT, cfg.T_s - SAMPLES[:, 3])
    assert np.all(diag.T_b >= 0.0)


def test_yield_stress_uses_raw_void_ratio(traj, cfg):
    # the reported e is capped at e_c but tau_f is evaluated at the raw value
    diag = compute_diagnostics(traj, cfg)
    assert diag.tau_f[0] == pytest.approx(cfg.tau0 * math.exp(-cfg.c * 0.9))
    assert diag.tau_f[0] != pytest.approx(float(yield_stress(diag.e[0], cfg)))


def test_velocity_zero_when_till_outstrengths_driving_stress(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    assert diag.tau_f[2] >= diag.tau_d[2]
    assert diag.U[2] == 0.0
    assert diag.U[0] > 0.0
    assert np.all(diag.U >= 0.0)
    np.testing.assert_allclose(diag.tau_d, driving_stress(SAMPLES[:, 0], cfg))


def test_diagnostics_are_idempotent(traj, cfg):
    first = compute_diagnostics(traj, cfg)
    second = compute_diagnostics(traj, cfg)
    for name in FIELDS:
        np.testing.assert_array_equal(getattr(first, name), getattr(second, name))


def test_outputs_are_read_only(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    with pytest.raises(ValueError):
        diag.U[0] = 1.0


def test_zero_thickness_fails_fast(cfg):
    samples = SAMPLES.copy()
    samples[1, 0] = 0.0
    traj = Trajectory.from_samples([0.0, 1.0, 2.0, 3.0], samples)
    with pytest.raises(DiagnosticError, match="zero") as excinfo:
        compute_diagnostics(traj, cfg)
    assert excinfo.value.index == 1
    assert excinfo.value.t == 1.0


def test_non_finite_derived_value_fails(cfg):
    samples = SAMPLES.copy()
    samples[3, 1] = -100.0
    traj = Trajectory.from_samples([0.0, 1.0, 2.0, 3.0], samples)
    with pytest.raises(DiagnosticError, match="tau_f") as excinfo:
        compute_diagnostics(traj, cfg)
    assert excinfo.value.index == 3


def test_negative_thickness_warns(cfg):
    samples = SAMPLES.copy()
    samples[0, 0] = -100.0
    traj = Trajectory.from_samples([0.0, 1.0, 2.0, 3.0], samples)
    with pytest.warns(PhysicsWarning, match="negative ice thickness"):
        diag = compute_diagnostics(traj, cfg)
    assert diag.U[0] == 0.0


def test_physical_trajectory_does_not_warn(traj, cfg):
    with warnings.catch_warnings():
        warnings.simplefilter("error", PhysicsWarning)
        compute_diagnostics(traj, cfg)


def test_incomplete_trajectory_refused(traj, cfg):
    partial = Trajectory(t=traj.t, y=traj.y, error_norms=traj.error_norms, complete=False)
    with pytest.raises(DiagnosticError, match="incomplete"):
        compute_diagnostics(partial, cfg)


def test_to_frame_adds_display_units(traj, cfg):
    diag = compute_diagnostics(traj, cfg)
    df = diag.to_frame(year=cfg.year)
    assert list(df.columns[: len(FIELDS)]) == list(FIELDS)
    np.testing.assert_allclose(df["U_m_per_yr"], diag.U * cfg.year)
    np.testing.assert_allclose(df["t_yr"], diag.t / cfg.year)
    assert "t_yr" not in diag.to_frame().columns

import math

import numpy as np
import pytest

from processing.kinematics import (
    analyze_motion,
    compute_angle_variance,
    compute_mean_jitter,
    compute_timing,
    wrap_angles,
)
from trace_factory import densify, human_times, noisy_points


def _line(n=64):
    return np.column_stack([np.linspace(0, 1, n), np.zeros(n)])


def test_wrap_angles_into_half_open_interval():
    wrapped = wrap_angles(np.array([math.pi, -math.pi, 1.5 * math.pi, -1.5 * math.pi, 0.0, 7.0]))
    assert wrapped == pytest.approx([math.pi, math.pi, -0.5 * math.pi, 0.5 * math.pi, 0.0, 7.0 - 2 * math.pi])


def test_uniform_straight_motion_is_flat():
    pts = _line()
    motion = analyze_motion(pts, np.linspace(0, 630, 64))
    assert motion.timing.duration_ms == pytest.approx(630.0)
    assert motion.timing.speed_std == pytest.approx(0.0, abs=1e-9)
    assert motion.timing.speed_cv == pytest.approx(0.0, abs=1e-9)
    # 1/63 of the stroke every 10 ms
    assert motion.timing.mean_speed == pytest.approx(100.0 / 63)
    assert motion.angle_variance == pytest.approx(0.0, abs=1e-12)
    assert motion.mean_jitter == pytest.approx(0.0, abs=1e-12)


def test_missing_times_leave_timing_absent():
    motion = analyze_motion(_line(), None)
    assert motion.timing is None
    assert motion.angle_variance == pytest.approx(0.0, abs=1e-12)


def test_uneven_pace_has_speed_spread():
    u = np.linspace(0, 1, 64)
    timing = compute_timing(_line(), 1000 * u ** 2)
    assert timing.speed_std > 1.0
    assert timing.speed_cv > 0.3
    assert len(timing.speeds) == 63


def test_duplicate_timestamps_are_floored():
    times = np.zeros(64)
    timing = compute_timing(_line(), times, min_dt_ms=1.0)
    assert np.all(np.isfinite(timing.speeds))
    assert timing.duration_ms == 0.0
    assert timing.speeds == pytest.approx(np.full(63, 1000.0 / 63))


def test_constant_turn_rate_has_no_angle_variance():
    theta = np.linspace(0, math.pi, 64)
    arc = np.column_stack([np.cos(theta), np.sin(theta)])
    assert compute_angle_variance(arc) == pytest.approx(0.0, abs=1e-9)


def test_heading_changes_across_the_branch_cut_are_small():
    # Heading flips between +pi and -pi; wrapped turns are tiny
    pts = np.array([[0.0, 0.0], [-1.0, 0.01], [-2.0, 0.0], [-3.0, 0.01], [-4.0, 0.0]])
    assert compute_angle_variance(pts) < 0.05


def test_zigzag_has_jitter():
    x = np.linspace(0, 1, 64)
    y = np.where(np.arange(64) % 2 == 0, 0.0, 0.02)
    pts = np.column_stack([x, y])
    assert compute_mean_jitter(pts) == pytest.approx(0.02)
    assert compute_mean_jitter(_line()) == pytest.approx(0.0, abs=1e-12)


def test_jitter_of_collapsed_points_is_zero():
    assert compute_mean_jitter(np.zeros((10, 2))) == 0.0


def test_polygon_corners_do_not_hide_straight_edges():
    square = densify([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)], 64)
    assert compute_angle_variance(square) == pytest.approx(0.0, abs=1e-9)
    assert compute_angle_variance(noisy_points(square)) > 0.01


def test_speed_spread_does_not_depend_on_drawing_speed():
    pts = densify([(0, 0), (1, 0), (1, 1)], 64)
    slow = compute_timing(pts, human_times(64, total_ms=8000))
    fast = compute_timing(pts, human_times(64, total_ms=1600))
    assert fast.speed_std > slow.speed_std
    assert fast.speed_cv == pytest.approx(slow.speed_cv)

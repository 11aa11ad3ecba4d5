"""
Kinematic Analysis

Motion statistics for a resampled, time-stamped stroke. Pure numpy.

- Timing: duration and per-segment speed. Speeds are measured in stroke
  lengths per second so they do not depend on the drawing scale; their
  coefficient of variation does not depend on the drawing speed either.
- Angular variance: robust spread (scaled median absolute deviation) of
  consecutive heading changes. A constant heading or constant turn rate
  gives ~0, and the few sharp turns at polygon corners do not mask it.
- Jitter: perpendicular offset of each interior point from the midpoint of
  its two neighbours, a proxy for hand tremor. Synthetic motion is ~0.
"""

from dataclasses import dataclass

import numpy as np

from config import MIN_SEGMENT_DT_MS


@dataclass
class TimingMetrics:
    duration_ms: float
    speeds: np.ndarray
    speed_std: float
    mean_speed: float
    speed_cv: float  # speed_std / mean_speed


@dataclass
class MotionMetrics:
    timing: TimingMetrics | None
    angle_variance: float
    mean_jitter: float


def compute_timing(
    points: np.ndarray,
    times: np.ndarray,
    min_dt_ms: float = MIN_SEGMENT_DT_MS,
) -> TimingMetrics:
    seg = np.hypot(*np.diff(points, axis=0).T)
    total = float(seg.sum())
    normalized = seg / total if total > 0 else np.zeros_like(seg)

    # Duplicate timestamps would otherwise divide by zero
    dt_ms = np.maximum(np.diff(times), min_dt_ms)
    speeds = normalized / (dt_ms / 1000.0)
    speed_std = float(np.std(speeds))
    mean_speed = float(np.mean(speeds))

    return TimingMetrics(
        duration_ms=float(times[-1] - times[0]),
        speeds=speeds,
        speed_std=speed_std,
        mean_speed=mean_speed,
        speed_cv=speed_std / mean_speed if mean_speed > 0 else 0.0,
    )


def wrap_angles(angles: np.ndarray) -> np.ndarray:
    """Map angles into (-pi, pi]."""
    return angles - 2 * np.pi * np.ceil((angles - np.pi) / (2 * np.pi))


def compute_angle_variance(points: np.ndarray) -> float:
    deltas = np.diff(points, axis=0)
    headings = np.arctan2(deltas[:, 1], deltas[:, 0])
    turns = wrap_angles(np.diff(headings))
    if len(turns) == 0:
        return 0.0
    # 1.4826 * MAD estimates the std of normally distributed turns
    return float(1.4826 * np.median(np.abs(turns - np.median(turns))))


def compute_mean_jitter(points: np.ndarray) -> float:
    if len(points) < 3:
        return 0.0

    prev_pts = points[:-2]
    next_pts = points[2:]
    offsets = points[1:-1] - (prev_pts + next_pts) / 2.0
    chords = next_pts - prev_pts
    chord_len = np.hypot(chords[:, 0], chords[:, 1])

    cross = np.abs(chords[:, 0] * offsets[:, 1] - chords[:, 1] * offsets[:, 0])
    full = np.hypot(offsets[:, 0], offsets[:, 1])
    # Without a chord direction fall back to the full offset
    perpendicular = np.where(chord_len > 0, cross / np.where(chord_len > 0, chord_len, 1.0), full)
    return float(np.mean(perpendicular))


def analyze_motion(
    points: np.ndarray,
    times: np.ndarray | None,
    min_dt_ms: float = MIN_SEGMENT_DT_MS,
) -> MotionMetrics:
    """Analyze a resampled stroke. times=None means timing is unknown."""
    timing = None if times is None else compute_timing(points, times, min_dt_ms)
    return MotionMetrics(
        timing=timing,
        angle_variance=compute_angle_variance(points),
        mean_jitter=compute_mean_jitter(points),
    )

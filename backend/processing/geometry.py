import math

import numpy as np


def distance(a, b) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def point_to_segment_distance(p, a, b) -> float:
    """Distance from p to segment ab using the clamped orthogonal projection."""
    ax, ay = a[0], a[1]
    dx = b[0] - ax
    dy = b[1] - ay
    seg_len_sq = dx * dx + dy * dy
    if seg_len_sq == 0:
        return distance(p, a)
    t = ((p[0] - ax) * dx + (p[1] - ay) * dy) / seg_len_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (ax + t * dx), p[1] - (ay + t * dy))


def point_to_polyline_distance(p, polyline: np.ndarray) -> float:
    """Minimum distance from p to any segment of an ordered polyline.

    Returns +inf when the polyline has fewer than 2 points.
    """
    polyline = np.asarray(polyline, dtype=np.float64)
    if len(polyline) < 2:
        return math.inf

    point = np.asarray(p, dtype=np.float64)[:2]
    starts = polyline[:-1]
    seg = polyline[1:] - starts
    seg_len_sq = np.einsum("ij,ij->i", seg, seg)
    rel = point - starts

    # Zero-length segments project onto their start point
    safe_len = np.where(seg_len_sq == 0, 1.0, seg_len_sq)
    t = np.where(seg_len_sq == 0, 0.0, np.einsum("ij,ij->i", rel, seg) / safe_len)
    t = np.clip(t, 0.0, 1.0)

    closest = starts + t[:, None] * seg
    dists = np.hypot(*(point - closest).T)
    return float(dists.min())


def polyline_deviations(points: np.ndarray, polyline: np.ndarray) -> np.ndarray:
    """point_to_polyline_distance for every row of points."""
    return np.array([point_to_polyline_distance(p, polyline) for p in points])


def bounding_box(points: np.ndarray) -> tuple[float, float, float, float]:
    """Axis-aligned (min_x, min_y, max_x, max_y)."""
    pts = np.asarray(points, dtype=np.float64)
    mins = pts.min(axis=0)
    maxs = pts.max(axis=0)
    return float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1])


def bounding_box_area(points: np.ndarray) -> float:
    min_x, min_y, max_x, max_y = bounding_box(points)
    return (max_x - min_x) * (max_y - min_y)

"""
Shape Alignment & Distance

Removes translation, uniform scale and rotation between a resampled user
stroke and a resampled template, then measures how far apart they are.

- Centering subtracts the centroid (translation).
- Scale normalization divides by the RMS radius (uniform scale).
- The optimal rotation is the polar factor of the 2x2 cross-covariance
  H = P^T Q, i.e. U = H (H^T H)^(-1/2). Reflections are never allowed:
  a mirrored trace must not match.

Every distance below is expressed in RMS-normalized units, so thresholds
do not depend on the canvas size the stroke was drawn on.
"""

from dataclasses import dataclass

import numpy as np
from scipy.linalg import polar

from config import SCALE_FLOOR, VerificationSettings
from processing.geometry import bounding_box_area, polyline_deviations
from schemas.messages import ShapeMetrics


@dataclass
class Alignment:
    user: np.ndarray       # (N, 2) centered, scaled, rotated onto the template
    template: np.ndarray   # (N, 2) centered, scaled
    rotation: np.ndarray   # (2, 2) proper rotation applied to the user stroke
    shape_distance: float  # RMSD between the two, lower is better


def center(points: np.ndarray) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    return pts - pts.mean(axis=0)


def normalize_scale(points: np.ndarray, floor: float = SCALE_FLOOR) -> np.ndarray:
    """Scale so the RMS distance from the origin is 1.

    The floor keeps degenerate (single-point) strokes from dividing by zero;
    they simply stay collapsed at the origin.
    """
    pts = np.asarray(points, dtype=np.float64)
    rms = float(np.sqrt(np.mean(np.sum(pts ** 2, axis=1))))
    return pts / max(rms, floor)


def optimal_rotation(source: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Rotation R minimizing sum |source_i @ R - target_i|^2 over matched rows.

    Points are rows, so the rotation is applied as ``source @ R``.
    """
    cross_cov = source.T @ target
    rotation, _ = polar(cross_cov, side="right")

    if np.linalg.det(rotation) < 0:
        rotation = rotation.copy()
        rotation[:, 1] = -rotation[:, 1]
    return rotation


def rmsd(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.sqrt(np.mean(np.sum((a - b) ** 2, axis=1))))


def align(user: np.ndarray, template: np.ndarray, scale_floor: float = SCALE_FLOOR) -> Alignment:
    """Align two equally sized point sequences and return their shape distance."""
    user_norm = normalize_scale(center(user), scale_floor)
    template_norm = normalize_scale(center(template), scale_floor)

    rotation = optimal_rotation(user_norm, template_norm)
    rotated = user_norm @ rotation

    return Alignment(
        user=rotated,
        template=template_norm,
        rotation=rotation,
        shape_distance=rmsd(rotated, template_norm),
    )


def measure_shape(
    alignment: Alignment,
    user_raw: np.ndarray,
    template_raw: np.ndarray,
    settings: VerificationSettings,
) -> ShapeMetrics:
    """Compute the full family of shape-distance metrics.

    Args:
        alignment: output of align() on the resampled sequences
        user_raw: resampled user stroke before normalization (size check)
        template_raw: resampled template before normalization (size check)
    """
    deviations = polyline_deviations(alignment.user, alignment.template)
    pair_dists = np.hypot(*(alignment.user - alignment.template).T)

    # Turn the user stroke into the template's orientation first, so an
    # axis-aligned box does not grow or shrink with rotation
    user_oriented = center(user_raw) @ alignment.rotation
    template_area = bounding_box_area(template_raw)
    size_ratio = bounding_box_area(user_oriented) / template_area if template_area > 0 else float("inf")

    return ShapeMetrics(
        shape_distance=alignment.shape_distance,
        max_deviation=float(deviations.max()),
        avg_deviation=float(deviations.mean()),
        outlier_fraction=float(np.mean(deviations > settings.outlier_distance)),
        coverage_fraction=float(np.mean(pair_dists <= settings.coverage_distance)),
        size_ratio=float(size_ratio),
    )


def evaluate_shape(metrics: ShapeMetrics, settings: VerificationSettings) -> tuple[bool, dict]:
    """Apply each shape sub-threshold. Returns (shape_pass, signals).

    Every failing check sets its own signal, so a rejection always names
    which part of the match was off.
    """
    signals = {}

    if metrics.shape_distance > settings.shape_distance_threshold:
        signals["shape_distance_exceeded"] = metrics.shape_distance
    if metrics.max_deviation > settings.max_deviation_threshold:
        signals["max_deviation_exceeded"] = metrics.max_deviation
    if metrics.avg_deviation > settings.avg_deviation_threshold:
        signals["avg_deviation_exceeded"] = metrics.avg_deviation
    if metrics.outlier_fraction > settings.max_outlier_fraction:
        signals["too_many_outliers"] = metrics.outlier_fraction
    if metrics.coverage_fraction < settings.min_coverage_fraction:
        signals["insufficient_coverage"] = metrics.coverage_fraction
    if not settings.size_ratio_min <= metrics.size_ratio <= settings.size_ratio_max:
        signals["size_ratio_out_of_range"] = metrics.size_ratio

    return not signals, signals

import logging
import math
import time

import numpy as np

from config import VerificationSettings
from models.registry import Template
from processing.alignment import align, evaluate_shape, measure_shape
from processing.bot_scoring import score_bot_likelihood
from processing.kinematics import analyze_motion
from processing.resample import resample
from schemas.messages import STAGE_MESSAGES, Verdict, VerificationStage
from schemas.trace import CanvasSize, Point
from state.ledger import ChallengeLedger

logger = logging.getLogger("uvicorn.error")


def _fields(point) -> tuple:
    if isinstance(point, dict):
        return point.get("x"), point.get("y"), point.get("t")
    return getattr(point, "x", None), getattr(point, "y", None), getattr(point, "t", None)


def _timestamps(raw: list) -> np.ndarray | None:
    """Timestamps as an array, or None when timing is unknown.

    Missing, non-finite or decreasing timestamps all degrade to unknown.
    """
    if not raw or any(t is None for t in raw):
        return None
    try:
        ts = np.array(raw, dtype=np.float64)
    except (TypeError, ValueError):
        return None
    if not np.all(np.isfinite(ts)) or np.any(np.diff(ts) < 0):
        return None
    return ts


def stroke_to_arrays(stroke) -> tuple[np.ndarray, np.ndarray | None] | None:
    """Convert Points (or {x, y, t} dicts) to (points, times). None if malformed."""
    coords = []
    raw_times = []
    for point in stroke:
        x, y, t = _fields(point)
        try:
            x, y = float(x), float(y)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        coords.append((x, y))
        raw_times.append(t)

    points = np.array(coords, dtype=np.float64).reshape(-1, 2)
    return points, _timestamps(raw_times)


def normalize_to_canvas(points: list[Point], canvas: CanvasSize | None) -> list[Point]:
    """Divide pixel coordinates by the canvas size. Timestamps are kept as-is."""
    if canvas is None or canvas.width <= 0 or canvas.height <= 0:
        return points
    return [Point(x=p.x / canvas.width, y=p.y / canvas.height, t=p.t) for p in points]


def _verdict(
    stage: VerificationStage,
    settings: VerificationSettings,
    shape_pass: bool = False,
    **fields,
) -> Verdict:
    return Verdict(
        success=stage == VerificationStage.PASSED,
        shape_pass=shape_pass,
        stage=stage,
        message=STAGE_MESSAGES[stage],
        bot_threshold=settings.bot_score_threshold,
        **fields,
    )


def verify_trace(
    stroke,
    template: Template | None,
    challenge_id: str | None,
    ledger: ChallengeLedger,
    settings: VerificationSettings | None = None,
) -> Verdict:
    """Verify one traced stroke against a template. Always returns a Verdict.

    Checks run cheapest first: input shape, minimum point count, challenge.
    Input failures leave the challenge untouched; from the challenge check on,
    the attempt counts and the challenge is consumed whatever the outcome.
    """
    settings = settings or VerificationSettings()
    t_start = time.perf_counter()

    if not isinstance(stroke, (list, tuple)) or template is None:
        return _verdict(VerificationStage.INVALID_INPUT, settings)

    parsed = stroke_to_arrays(stroke)
    if parsed is None:
        return _verdict(VerificationStage.INVALID_INPUT, settings)
    points, times = parsed

    if len(points) < settings.min_stroke_points:
        logger.info(f"[Verify] rejected: {len(points)} points < {settings.min_stroke_points}")
        return _verdict(VerificationStage.TOO_FEW_POINTS, settings)

    # Check-and-consume is atomic, so only one concurrent attempt per id gets past here
    if not ledger.consume(challenge_id):
        logger.info("[Verify] rejected: invalid, expired or already used challenge")
        return _verdict(VerificationStage.INVALID_CHALLENGE, settings)

    n = settings.resample_points
    user_rs, user_times = resample(points, n, times)
    template_rs, _ = resample(template.points, n)

    alignment = align(user_rs, template_rs, settings.scale_floor)
    metrics = measure_shape(alignment, user_rs, template_rs, settings)
    shape_pass, shape_signals = evaluate_shape(metrics, settings)

    # A replay of the already resampled template only differs from it by the
    # corners a second resample cuts; compare against that copy as well
    template_echo, _ = resample(template_rs, n)
    echo_distance = align(user_rs, template_echo, settings.scale_floor).shape_distance
    replay_distance = min(metrics.shape_distance, echo_distance)

    motion = analyze_motion(alignment.user, user_times, settings.min_segment_dt_ms)
    bot = score_bot_likelihood(motion, replay_distance, settings)

    if not shape_pass:
        stage = VerificationStage.SHAPE_MISMATCH
    elif bot.score >= settings.bot_score_threshold:
        stage = VerificationStage.BOT_SUSPECTED
    else:
        stage = VerificationStage.PASSED

    elapsed_ms = (time.perf_counter() - t_start) * 1000
    logger.info(
        f"[Verify] template={template.name}, shape_distance={metrics.shape_distance:.4f}, "
        f"coverage={metrics.coverage_fraction:.2f}, size_ratio={metrics.size_ratio:.2f}, "
        f"bot_score={bot.score:.2f}, stage={stage.value}, {elapsed_ms:.1f}ms"
    )

    return _verdict(
        stage,
        settings,
        shape_pass=shape_pass,
        shape_metrics=metrics,
        bot_score=bot.score,
        signals={**shape_signals, **bot.signals},
    )

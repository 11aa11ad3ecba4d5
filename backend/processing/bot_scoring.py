"""
Bot-Likelihood Scoring

Additive evidence: every suspicious property of the motion adds a fixed
weight and raises a named signal. No single signal is fatal; only the sum
crossing BOT_SCORE_THRESHOLD marks a trace as automated.

Timestamps come from the client, so this is a bounded-confidence heuristic,
not proof of automation.
"""

import logging
from dataclasses import dataclass, field

from config import VerificationSettings
from processing.kinematics import MotionMetrics

logger = logging.getLogger("uvicorn.error")


@dataclass
class BotAssessment:
    score: float = 0.0
    signals: dict = field(default_factory=dict)

    def flag(self, name: str, weight: float, detail) -> None:
        self.score += weight
        self.signals[name] = detail


def score_bot_likelihood(
    motion: MotionMetrics,
    shape_distance: float | None = None,
    settings: VerificationSettings | None = None,
) -> BotAssessment:
    settings = settings or VerificationSettings()
    assessment = BotAssessment()

    timing = motion.timing
    if timing is None:
        assessment.flag("missing_timing", settings.weight_missing_timing, True)
    else:
        if timing.duration_ms < settings.min_human_duration_ms:
            assessment.flag("too_fast", settings.weight_too_fast, timing.duration_ms)
        if timing.speed_cv < settings.speed_cv_floor:
            assessment.flag("constant_velocity", settings.weight_constant_velocity, timing.speed_cv)

    if motion.mean_jitter < settings.jitter_floor:
        assessment.flag("too_smooth", settings.weight_too_smooth, motion.mean_jitter)

    if motion.angle_variance < settings.angle_variance_floor:
        assessment.flag("too_straight", settings.weight_too_straight, motion.angle_variance)

    # Reproducing the template (or its resampling) exactly is itself suspicious
    if shape_distance is not None and shape_distance < settings.exact_match_distance:
        assessment.flag("exact_template_match", settings.weight_exact_match, shape_distance)

    logger.info(
        f"[Bot] score={assessment.score:.2f}/{settings.bot_score_threshold:.2f}, "
        f"signals={sorted(assessment.signals)}"
    )
    return assessment

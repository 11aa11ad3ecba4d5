from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VerificationStage(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    TOO_FEW_POINTS = "TOO_FEW_POINTS"
    INVALID_CHALLENGE = "INVALID_CHALLENGE"
    SHAPE_MISMATCH = "SHAPE_MISMATCH"
    BOT_SUSPECTED = "BOT_SUSPECTED"
    PASSED = "PASSED"


STAGE_MESSAGES = {
    VerificationStage.INVALID_INPUT: "Invalid input",
    VerificationStage.TOO_FEW_POINTS: "Path missing or too short",
    VerificationStage.INVALID_CHALLENGE: "Invalid or expired challenge",
    VerificationStage.SHAPE_MISMATCH: "Trace did not match the shape",
    VerificationStage.BOT_SUSPECTED: "Movement looks automated",
    VerificationStage.PASSED: "Pass",
}


class ShapeMetrics(BaseModel):
    shape_distance: float
    max_deviation: float
    avg_deviation: float
    outlier_fraction: float
    coverage_fraction: float
    size_ratio: float


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "verification_result"
    success: bool
    shape_pass: bool
    stage: VerificationStage
    message: str
    shape_metrics: ShapeMetrics | None = None
    bot_score: float | None = None
    bot_threshold: float
    signals: dict[str, Any] = Field(default_factory=dict)


class ChallengeResponse(BaseModel):
    type: str = "challenge"
    challenge_id: str
    shape: str | None = None
    display_rotation: float
    display_scale: float
    expires_at: float

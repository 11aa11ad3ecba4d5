import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

BASE_DIR = Path(__file__).resolve().parent

# Shape templates
TEMPLATES_DIR = BASE_DIR / os.getenv("TEMPLATES_DIR", "shapes")
DEFAULT_SHAPE = os.getenv("DEFAULT_SHAPE", "Heart")

# Stroke preparation
RESAMPLE_POINTS = int(os.getenv("RESAMPLE_POINTS", "64"))
MIN_STROKE_POINTS = int(os.getenv("MIN_STROKE_POINTS", "12"))
SCALE_FLOOR = 1e-9

# Challenges
CHALLENGE_TTL_SECONDS = float(os.getenv("CHALLENGE_TTL_SECONDS", "120"))
CHALLENGE_SWEEP_INTERVAL_SECONDS = float(os.getenv("CHALLENGE_SWEEP_INTERVAL_SECONDS", "30"))
DISPLAY_ROTATION_MAX_DEG = 35.0
DISPLAY_SCALE_MIN = 0.85
DISPLAY_SCALE_MAX = 1.15

# Shape matching (distances are in RMS-normalized units)
SHAPE_DISTANCE_THRESHOLD = float(os.getenv("SHAPE_DISTANCE_THRESHOLD", "0.25"))
MAX_DEVIATION_THRESHOLD = float(os.getenv("MAX_DEVIATION_THRESHOLD", "0.6"))
AVG_DEVIATION_THRESHOLD = float(os.getenv("AVG_DEVIATION_THRESHOLD", "0.15"))
OUTLIER_DISTANCE = 0.25
MAX_OUTLIER_FRACTION = float(os.getenv("MAX_OUTLIER_FRACTION", "0.2"))
COVERAGE_DISTANCE = 0.35
MIN_COVERAGE_FRACTION = float(os.getenv("MIN_COVERAGE_FRACTION", "0.75"))
SIZE_RATIO_MIN = float(os.getenv("SIZE_RATIO_MIN", "0.2"))
SIZE_RATIO_MAX = float(os.getenv("SIZE_RATIO_MAX", "5.0"))

# Motion heuristics
MIN_HUMAN_DURATION_MS = float(os.getenv("MIN_HUMAN_DURATION_MS", "300"))
MIN_SEGMENT_DT_MS = 1.0
SPEED_CV_FLOOR = 0.05        # speed std / mean speed
JITTER_FLOOR = 0.002
ANGLE_VARIANCE_FLOOR = 0.01  # radians, robust spread of turns
EXACT_MATCH_DISTANCE = 1e-3

# Bot score weights
BOT_WEIGHT_TOO_FAST = 2.0
BOT_WEIGHT_CONSTANT_VELOCITY = 1.5
BOT_WEIGHT_TOO_SMOOTH = 1.0
BOT_WEIGHT_TOO_STRAIGHT = 1.0
BOT_WEIGHT_EXACT_MATCH = 1.5
BOT_WEIGHT_MISSING_TIMING = 0.5
BOT_SCORE_THRESHOLD = float(os.getenv("BOT_SCORE_THRESHOLD", "3.0"))

# Server
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")


@dataclass(frozen=True)
class VerificationSettings:
    """Every tunable the verifier consults, defaulting to the values above."""

    resample_points: int = RESAMPLE_POINTS
    min_stroke_points: int = MIN_STROKE_POINTS
    scale_floor: float = SCALE_FLOOR

    shape_distance_threshold: float = SHAPE_DISTANCE_THRESHOLD
    max_deviation_threshold: float = MAX_DEVIATION_THRESHOLD
    avg_deviation_threshold: float = AVG_DEVIATION_THRESHOLD
    outlier_distance: float = OUTLIER_DISTANCE
    max_outlier_fraction: float = MAX_OUTLIER_FRACTION
    coverage_distance: float = COVERAGE_DISTANCE
    min_coverage_fraction: float = MIN_COVERAGE_FRACTION
    size_ratio_min: float = SIZE_RATIO_MIN
    size_ratio_max: float = SIZE_RATIO_MAX

    min_human_duration_ms: float = MIN_HUMAN_DURATION_MS
    min_segment_dt_ms: float = MIN_SEGMENT_DT_MS
    speed_cv_floor: float = SPEED_CV_FLOOR
    jitter_floor: float = JITTER_FLOOR
    angle_variance_floor: float = ANGLE_VARIANCE_FLOOR
    exact_match_distance: float = EXACT_MATCH_DISTANCE

    weight_too_fast: float = BOT_WEIGHT_TOO_FAST
    weight_constant_velocity: float = BOT_WEIGHT_CONSTANT_VELOCITY
    weight_too_smooth: float = BOT_WEIGHT_TOO_SMOOTH
    weight_too_straight: float = BOT_WEIGHT_TOO_STRAIGHT
    weight_exact_match: float = BOT_WEIGHT_EXACT_MATCH
    weight_missing_timing: float = BOT_WEIGHT_MISSING_TIMING
    bot_score_threshold: float = BOT_SCORE_THRESHOLD

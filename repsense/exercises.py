"""
Per-exercise configuration for the generic rep machine in reps.py.
Each exercise is one ExerciseConfig: a measure function (confidence gating +
signal), thresholds, and the debounce/confirmation/calibration knobs.
"""
from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from .config import Settings
from .geometry import angle_deg, distance, mean_or_none, midpoint
from .pose import KeypointName as K
from .pose import Pose


class Zone(enum.Enum):
    ACTIVE = "active"
    REST = "rest"
    NEUTRAL = "neutral"


class Reading(NamedTuple):
    """Signal value for one accepted frame; zone is set only by pose-classified exercises."""
    value: float
    zone: Optional[Zone] = None


class Thresholds(NamedTuple):
    """Hysteresis band: enter ACTIVE below enter_below, return to REST above exit_above."""
    enter_below: float
    exit_above: float


Measure = Callable[[Pose], Optional[Reading]]


@dataclass(frozen=True)
class ExerciseConfig:
    name: str
    display_name: str
    measure: Measure
    # None: measure() classifies the zone itself.
    thresholds: Optional[Thresholds] = None
    # Thresholds are offsets from the calibrated baseline.
    baseline_relative: bool = False
    smoothing_window: int = 1
    debounce_ms: int = 0
    confirm_frames: int = 1
    # Neutral frames keep confirmation streaks instead of resetting them.
    hold_streak_on_neutral: bool = False
    calibration_frames: int = 0

    def __post_init__(self) -> None:
        if self.smoothing_window < 1:
            raise ValueError(f"{self.name}: smoothing_window must be >= 1")
        if self.confirm_frames < 1:
            raise ValueError(f"{self.name}: confirm_frames must be >= 1")
        if self.debounce_ms < 0:
            raise ValueError(f"{self.name}: debounce_ms must be >= 0")
        if self.calibration_frames < 0:
            raise ValueError(f"{self.name}: calibration_frames must be >= 0")
        if self.baseline_relative and self.calibration_frames == 0:
            raise ValueError(f"{self.name}: baseline_relative thresholds need calibration_frames")
        if self.thresholds is not None and self.thresholds.enter_below > self.thresholds.exit_above:
            raise ValueError(f"{self.name}: enter_below must not exceed exit_above")


# --- Measures -------------------------------------------------------------

# Minimum keypoint scores (hand-tuned per joint).
SQUAT_MIN_SCORE = 0.5
PUSHUP_MIN_SCORES = {
    K.LEFT_SHOULDER: 0.3,
    K.LEFT_ELBOW: 0.3,
    K.LEFT_WRIST: 0.3,
    K.LEFT_HIP: 0.3,
    K.NOSE: 0.4,
}
BICEPS_MIN_SCORE = 0.4
JUMPING_JACK_MIN_SCORES = {
    K.LEFT_SHOULDER: 0.4,
    K.RIGHT_SHOULDER: 0.4,
    K.LEFT_HIP: 0.4,
    K.RIGHT_HIP: 0.4,
    K.LEFT_ELBOW: 0.5,
    K.RIGHT_ELBOW: 0.5,
    K.LEFT_WRIST: 0.3,
    K.RIGHT_WRIST: 0.3,
    K.LEFT_ANKLE: 0.3,
    K.RIGHT_ANKLE: 0.3,
}
JUMP_MIN_SCORE = 0.5

# Push-up: nose and hip within this vertical distance (px) means torso is horizontal.
PUSHUP_MAX_TORSO_DROP_PX = 100.0
# Jumping jack: ankle gap relative to hip width.
JJ_LEGS_OPEN_RATIO = 1.5
JJ_LEGS_CLOSED_RATIO = 1.1
# Jumping jack: wrists must clear the shoulder line by this fraction of torso length.
JJ_ARM_MARGIN_RATIO = 0.05

_LEG_SIDES = (
    (K.LEFT_HIP, K.LEFT_KNEE, K.LEFT_ANKLE),
    (K.RIGHT_HIP, K.RIGHT_KNEE, K.RIGHT_ANKLE),
)
_ARM_SIDES = (
    (K.LEFT_SHOULDER, K.LEFT_ELBOW, K.LEFT_WRIST),
    (K.RIGHT_SHOULDER, K.RIGHT_ELBOW, K.RIGHT_WRIST),
)


def _gated(pose: Pose, min_scores: dict[str, float]) -> Optional[dict[str, tuple[float, float]]]:
    """Positions of all required keypoints, or None if any is missing/low-confidence."""
    points = {}
    for name, min_score in min_scores.items():
        kp = pose.confident(name, min_score)
        if kp is None:
            return None
        points[name] = kp.xy
    return points


def _best_side_angle(
    pose: Pose,
    sides: tuple[tuple[str, str, str], ...],
    min_score: float,
) -> Optional[float]:
    """
    Mean joint angle over the sides whose three keypoints all pass the gate.
    One confident side uses that side alone; no confident side skips the frame.
    """
    angles = []
    for a, b, c in sides:
        kps = [pose.confident(name, min_score) for name in (a, b, c)]
        if any(kp is None for kp in kps):
            continue
        angles.append(angle_deg(kps[0].xy, kps[1].xy, kps[2].xy))
    return mean_or_none(angles)


def measure_squat(pose: Pose) -> Optional[Reading]:
    """Hip-knee-ankle angle."""
    angle = _best_side_angle(pose, _LEG_SIDES, SQUAT_MIN_SCORE)
    return Reading(angle) if angle is not None else None


def measure_pushup(pose: Pose) -> Optional[Reading]:
    """Left shoulder-elbow-wrist angle, only while the torso is horizontal."""
    pts = _gated(pose, PUSHUP_MIN_SCORES)
    if pts is None:
        return None
    if abs(pts[K.NOSE][1] - pts[K.LEFT_HIP][1]) > PUSHUP_MAX_TORSO_DROP_PX:
        return None
    angle = angle_deg(pts[K.LEFT_SHOULDER], pts[K.LEFT_ELBOW], pts[K.LEFT_WRIST])
    return Reading(angle) if angle is not None else None


def measure_biceps(pose: Pose) -> Optional[Reading]:
    """Shoulder-elbow-wrist angle over the confident arms."""
    angle = _best_side_angle(pose, _ARM_SIDES, BICEPS_MIN_SCORE)
    return Reading(angle) if angle is not None else None


def measure_jumping_jack(pose: Pose) -> Optional[Reading]:
    """
    Classify open (arms up, legs apart) vs closed (arms down, legs together).
    Value is the ankle gap in hip widths, for display.
    """
    pts = _gated(pose, JUMPING_JACK_MIN_SCORES)
    if pts is None:
        return None
    hip_width = abs(pts[K.LEFT_HIP][0] - pts[K.RIGHT_HIP][0])
    torso = distance(
        midpoint(pts[K.LEFT_SHOULDER], pts[K.RIGHT_SHOULDER]),
        midpoint(pts[K.LEFT_HIP], pts[K.RIGHT_HIP]),
    )
    if hip_width < 1e-6 or torso is None or torso < 1e-6:
        return None
    gap_ratio = abs(pts[K.LEFT_ANKLE][0] - pts[K.RIGHT_ANKLE][0]) / hip_width

    shoulder_y = (pts[K.LEFT_SHOULDER][1] + pts[K.RIGHT_SHOULDER][1]) / 2.0
    margin = JJ_ARM_MARGIN_RATIO * torso
    wrist_ys = (pts[K.LEFT_WRIST][1], pts[K.RIGHT_WRIST][1])
    arms_up = all(y < shoulder_y - margin for y in wrist_ys)
    arms_down = all(y > shoulder_y + margin for y in wrist_ys)

    if arms_up and gap_ratio > JJ_LEGS_OPEN_RATIO:
        zone = Zone.ACTIVE
    elif arms_down and gap_ratio < JJ_LEGS_CLOSED_RATIO:
        zone = Zone.REST
    else:
        zone = Zone.NEUTRAL
    return Reading(gap_ratio, zone)


def measure_vertical_jump(pose: Pose) -> Optional[Reading]:
    """Mean ankle Y (px; smaller = higher)."""
    la = pose.confident(K.LEFT_ANKLE, JUMP_MIN_SCORE)
    ra = pose.confident(K.RIGHT_ANKLE, JUMP_MIN_SCORE)
    if la is None or ra is None:
        return None
    return Reading((la.y + ra.y) / 2.0)


# --- Registry -------------------------------------------------------------

SQUAT = ExerciseConfig(
    name="squat",
    display_name="Squats",
    measure=measure_squat,
    thresholds=Thresholds(enter_below=100.0, exit_above=160.0),
)

PUSHUP = ExerciseConfig(
    name="pushup",
    display_name="Push Ups",
    measure=measure_pushup,
    thresholds=Thresholds(enter_below=90.0, exit_above=150.0),
)

BICEPS = ExerciseConfig(
    name="biceps",
    display_name="Biceps",
    measure=measure_biceps,
    thresholds=Thresholds(enter_below=90.0, exit_above=160.0),
    smoothing_window=5,
    debounce_ms=800,
)

JUMPING_JACK = ExerciseConfig(
    name="jumping_jack",
    display_name="Jumping Jacks",
    measure=measure_jumping_jack,
    confirm_frames=5,
)

VERTICAL_JUMP = ExerciseConfig(
    name="vertical_jump",
    display_name="Vertical Jumps",
    measure=measure_vertical_jump,
    # Airborne 30 px above the ground baseline, landed within 10 px of it.
    thresholds=Thresholds(enter_below=-30.0, exit_above=-10.0),
    baseline_relative=True,
    confirm_frames=3,
    hold_streak_on_neutral=True,
    calibration_frames=60,
)

EXERCISES: dict[str, ExerciseConfig] = {
    cfg.name: cfg for cfg in (SQUAT, PUSHUP, BICEPS, JUMPING_JACK, VERTICAL_JUMP)
}

_ALIASES = {
    "squats": "squat",
    "push_up": "pushup",
    "push_ups": "pushup",
    "pushups": "pushup",
    "bicep": "biceps",
    "bicep_curl": "biceps",
    "dip": "biceps",
    "dips": "biceps",
    "jumping_jacks": "jumping_jack",
    "jumpingjack": "jumping_jack",
    "jump": "vertical_jump",
    "jumps": "vertical_jump",
}


def _apply_settings(cfg: ExerciseConfig, settings: Settings) -> ExerciseConfig:
    changes: dict[str, int] = {}
    if cfg.name == "biceps":
        changes["debounce_ms"] = settings.biceps_debounce_ms
        changes["smoothing_window"] = settings.smoothing_window
    if cfg.calibration_frames:
        changes["calibration_frames"] = settings.jump_calibration_frames
    if settings.confirm_frames is not None and cfg.confirm_frames > 1:
        changes["confirm_frames"] = settings.confirm_frames
    return dataclasses.replace(cfg, **changes) if changes else cfg


def get_exercise(name: str, settings: Optional[Settings] = None) -> ExerciseConfig:
    """Look up an exercise by name or alias (case/space/dash-insensitive)."""
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    key = _ALIASES.get(key, key)
    cfg = EXERCISES.get(key)
    if cfg is None:
        raise ValueError(f"Unknown exercise {name!r}; expected one of {sorted(EXERCISES)}")
    if settings is not None:
        cfg = _apply_settings(cfg, settings)
    return cfg

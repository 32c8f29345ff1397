"""
Runtime settings from environment variables (REPSENSE_*).
The CLI loads .env first; library code only reads what it is given.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_LOG_LEVEL = "WARNING"
# Minimum gap between counted biceps reps (ms).
DEFAULT_BICEPS_DEBOUNCE_MS = 800
# Moving-average window for the biceps elbow angle (samples).
DEFAULT_SMOOTHING_WINDOW = 5
# Valid ankle samples collected before vertical jump measuring starts (~2 s at 30 fps).
DEFAULT_JUMP_CALIBRATION_FRAMES = 60


@dataclass(frozen=True)
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    biceps_debounce_ms: int = DEFAULT_BICEPS_DEBOUNCE_MS
    smoothing_window: int = DEFAULT_SMOOTHING_WINDOW
    jump_calibration_frames: int = DEFAULT_JUMP_CALIBRATION_FRAMES
    # None keeps each exercise's own confirmation count.
    confirm_frames: Optional[int] = None


def _int_var(env: Mapping[str, str], key: str, default: Optional[int], minimum: int) -> Optional[int]:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from env (defaults to os.environ)."""
    if env is None:
        env = os.environ
    return Settings(
        log_level=(env.get("REPSENSE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        biceps_debounce_ms=_int_var(env, "REPSENSE_BICEPS_DEBOUNCE_MS", DEFAULT_BICEPS_DEBOUNCE_MS, 0),
        smoothing_window=_int_var(env, "REPSENSE_SMOOTHING_WINDOW", DEFAULT_SMOOTHING_WINDOW, 1),
        jump_calibration_frames=_int_var(
            env, "REPSENSE_JUMP_CALIBRATION_FRAMES", DEFAULT_JUMP_CALIBRATION_FRAMES, 1
        ),
        confirm_frames=_int_var(env, "REPSENSE_CONFIRM_FRAMES", None, 1),
    )

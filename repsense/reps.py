"""
Rep detection: one generic hysteresis phase machine driven by ExerciseConfig.
step() is pure (state in, state + events out); RepCounter wraps it for live use.
"""
from __future__ import annotations

import dataclasses
import enum
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Union

from .config import Settings
from .exercises import ExerciseConfig, Zone, get_exercise
from .pose import Pose
from .signals import collect_baseline, push_sample

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    REST = "rest"
    ACTIVE = "active"


@dataclass(frozen=True)
class DetectorState:
    phase: Phase = Phase.REST
    # Last smoothed-window samples, oldest first.
    angle_history: tuple[float, ...] = ()
    last_rep_ms: Optional[float] = None
    repetition_count: int = 0
    # Set once calibration completes; never changed afterwards.
    ground_baseline: Optional[float] = None
    calibration_samples: tuple[float, ...] = ()
    active_streak: int = 0
    rest_streak: int = 0
    last_frame_ms: Optional[float] = None

    def calibrating(self, config: ExerciseConfig) -> bool:
        return config.calibration_frames > 0 and self.ground_baseline is None


@dataclass(frozen=True)
class RepetitionEvent:
    exercise: str
    timestamp_ms: float


@dataclass(frozen=True)
class SignalUpdate(RepetitionEvent):
    """Smoothed signal (degrees for angle exercises); advisory."""
    value: float


@dataclass(frozen=True)
class PhaseChange(RepetitionEvent):
    previous: Phase
    current: Phase


@dataclass(frozen=True)
class RepCompleted(RepetitionEvent):
    count: int


@dataclass(frozen=True)
class CalibrationCompleted(RepetitionEvent):
    baseline: float


def _zone(config: ExerciseConfig, state: DetectorState, value: float, zone: Optional[Zone]) -> Zone:
    if config.thresholds is None:
        return zone if zone is not None else Zone.NEUTRAL
    enter, exit_ = config.thresholds
    if config.baseline_relative:
        enter += state.ground_baseline
        exit_ += state.ground_baseline
    if value < enter:
        return Zone.ACTIVE
    if value > exit_:
        return Zone.REST
    return Zone.NEUTRAL


def _streaks(config: ExerciseConfig, state: DetectorState, zone: Zone) -> tuple[int, int]:
    if zone is Zone.ACTIVE:
        return state.active_streak + 1, 0
    if zone is Zone.REST:
        return 0, state.rest_streak + 1
    if config.hold_streak_on_neutral:
        return state.active_streak, state.rest_streak
    return 0, 0


def step(
    config: ExerciseConfig,
    state: DetectorState,
    pose: Optional[Pose],
    now_ms: float,
) -> tuple[DetectorState, list[RepetitionEvent]]:
    """
    Advance the machine by one frame.
    Frames that fail confidence gating (or give a non-finite signal) return
    the input state unchanged and no events.
    """
    if state.last_frame_ms is not None and now_ms < state.last_frame_ms:
        raise ValueError(
            f"{config.name}: frame at {now_ms} ms is earlier than the previous frame at {state.last_frame_ms} ms"
        )
    reading = config.measure(pose) if pose else None
    if reading is None or not math.isfinite(reading.value):
        logger.debug("rep_counter: %s frame skipped at %s ms", config.name, now_ms)
        return state, []

    name = config.name
    events: list[RepetitionEvent] = []

    if state.calibrating(config):
        samples, baseline = collect_baseline(
            state.calibration_samples, reading.value, config.calibration_frames
        )
        state = dataclasses.replace(
            state, calibration_samples=samples, ground_baseline=baseline, last_frame_ms=now_ms
        )
        if baseline is not None:
            logger.info("rep_counter: %s calibrated (baseline=%.1f)", name, baseline)
            events.append(CalibrationCompleted(name, now_ms, baseline))
        return state, events

    history, smoothed = push_sample(state.angle_history, reading.value, config.smoothing_window)
    events.append(SignalUpdate(name, now_ms, smoothed))

    zone = _zone(config, state, smoothed, reading.zone)
    active_streak, rest_streak = _streaks(config, state, zone)
    phase = state.phase
    count = state.repetition_count
    last_rep_ms = state.last_rep_ms

    if phase is Phase.REST and active_streak >= config.confirm_frames:
        phase = Phase.ACTIVE
        events.append(PhaseChange(name, now_ms, Phase.REST, Phase.ACTIVE))
    elif phase is Phase.ACTIVE and rest_streak >= config.confirm_frames:
        if last_rep_ms is None or now_ms - last_rep_ms >= config.debounce_ms:
            phase = Phase.REST
            count += 1
            last_rep_ms = now_ms
            events.append(PhaseChange(name, now_ms, Phase.ACTIVE, Phase.REST))
            events.append(RepCompleted(name, now_ms, count))
            logger.info("rep_counter: %s rep %s at %s ms", name, count, now_ms)

    state = dataclasses.replace(
        state,
        phase=phase,
        angle_history=history,
        last_rep_ms=last_rep_ms,
        repetition_count=count,
        active_streak=active_streak,
        rest_streak=rest_streak,
        last_frame_ms=now_ms,
    )
    return state, events


def replay(
    config: ExerciseConfig,
    frames: Iterable[tuple[float, Optional[Pose]]],
    state: Optional[DetectorState] = None,
) -> tuple[DetectorState, list[RepetitionEvent]]:
    """Run a finite sequence of (timestamp_ms, pose) through a fresh (or given) state."""
    if state is None:
        state = DetectorState()
    events: list[RepetitionEvent] = []
    for now_ms, pose in frames:
        state, frame_events = step(config, state, pose, now_ms)
        events.extend(frame_events)
    return state, events


class RepCounter:
    """
    One exercise, one subject. Holds the DetectorState between frames and
    timestamps frames with an injectable clock (seconds, like time.perf_counter).
    """

    def __init__(
        self,
        exercise: Union[str, ExerciseConfig],
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        if isinstance(exercise, ExerciseConfig):
            self.config = exercise
        else:
            self.config = get_exercise(exercise, settings)
        self.clock = clock
        self.state = DetectorState()
        self._last_value: Optional[float] = None

    @property
    def count(self) -> int:
        return self.state.repetition_count

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def reset(self) -> None:
        self.state = DetectorState()
        self._last_value = None

    def push(self, pose: Optional[Pose], timestamp_ms: Optional[float] = None) -> list[RepetitionEvent]:
        """Push one frame; returns the events it produced."""
        if timestamp_ms is None:
            timestamp_ms = self.clock() * 1000.0
        self.state, events = step(self.config, self.state, pose, timestamp_ms)
        for ev in events:
            if isinstance(ev, SignalUpdate):
                self._last_value = ev.value
        return events

    def snapshot(self) -> dict[str, Any]:
        """Current state for a display sink."""
        if self.state.calibrating(self.config):
            status = f"Calibrating {len(self.state.calibration_samples)}/{self.config.calibration_frames}"
        elif self.state.last_frame_ms is None:
            status = "Waiting for pose"
        else:
            status = "Tracking"
        return {
            "exercise": self.config.name,
            "rep_count": self.count,
            "phase": self.phase.value,
            "signal": self._last_value,
            "baseline": self.state.ground_baseline,
            "status": status,
        }

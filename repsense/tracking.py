"""
Persistence sink boundary. The counter forwards each completed rep as
(exercise_name, repetitions=1, notes); the sink accumulates a same-day total
per user and exercise. InMemoryTracker is the in-process reference sink.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Protocol

from .reps import RepCompleted, RepetitionEvent

logger = logging.getLogger(__name__)


class RepetitionSink(Protocol):
    def record(self, exercise_name: str, repetitions: int, notes: Optional[str] = None) -> object:
        ...


@dataclass
class ExerciseRecord:
    id: str
    user_id: str
    exercise_name: str
    repetitions: int
    date: datetime
    notes: Optional[str] = None


def forward_reps(
    events: Iterable[RepetitionEvent],
    sink: RepetitionSink,
    exercise_name: str,
    notes: Optional[str] = None,
) -> int:
    """Send one repetition per RepCompleted event to sink; returns how many were sent."""
    sent = 0
    for ev in events:
        if isinstance(ev, RepCompleted):
            sink.record(exercise_name, 1, notes)
            sent += 1
    return sent


class InMemoryTracker:
    """Upsert-by-day tracker: one record per (user, exercise, calendar day)."""

    def __init__(self, user_id: str = "local", clock: Callable[[], datetime] = datetime.now):
        self.user_id = user_id
        self.clock = clock
        self._records: list[ExerciseRecord] = []

    def records(self, user_id: Optional[str] = None) -> list[ExerciseRecord]:
        uid = user_id or self.user_id
        return [r for r in self._records if r.user_id == uid]

    def add_or_update(
        self,
        exercise_name: str,
        repetitions: int,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ExerciseRecord:
        if repetitions < 1:
            raise ValueError(f"repetitions must be >= 1, got {repetitions}")
        uid = user_id or self.user_id
        now = self.clock()
        for rec in self._records:
            if rec.user_id == uid and rec.exercise_name == exercise_name and rec.date.date() == now.date():
                rec.repetitions += repetitions
                if notes is not None:
                    rec.notes = notes
                logger.debug("tracking: %s %s -> %s reps", uid, exercise_name, rec.repetitions)
                return rec
        rec = ExerciseRecord(
            id=uuid.uuid4().hex,
            user_id=uid,
            exercise_name=exercise_name,
            repetitions=repetitions,
            date=now,
            notes=notes,
        )
        self._records.append(rec)
        logger.debug("tracking: %s %s new day record (%s reps)", uid, exercise_name, repetitions)
        return rec

    def record(self, exercise_name: str, repetitions: int, notes: Optional[str] = None) -> ExerciseRecord:
        return self.add_or_update(exercise_name, repetitions, notes)

    def update_note(self, record_id: str, notes: str, user_id: Optional[str] = None) -> Optional[ExerciseRecord]:
        """Replace the notes of one of the user's records; None if it does not exist."""
        uid = user_id or self.user_id
        for rec in self._records:
            if rec.id == record_id and rec.user_id == uid:
                rec.notes = notes
                return rec
        return None

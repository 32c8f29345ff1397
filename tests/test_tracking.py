from datetime import datetime

import pytest

from repsense.reps import Phase, PhaseChange, RepCompleted, SignalUpdate
from repsense.tracking import InMemoryTracker, forward_reps


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class RecordingSink:
    def __init__(self):
        self.calls = []

    def record(self, exercise_name, repetitions, notes=None):
        self.calls.append((exercise_name, repetitions, notes))


def test_forward_reps_sends_one_per_completed_rep():
    events = [
        SignalUpdate("squat", 0.0, 95.0),
        PhaseChange("squat", 0.0, Phase.REST, Phase.ACTIVE),
        SignalUpdate("squat", 33.0, 170.0),
        PhaseChange("squat", 33.0, Phase.ACTIVE, Phase.REST),
        RepCompleted("squat", 33.0, 1),
        RepCompleted("squat", 99.0, 2),
    ]
    sink = RecordingSink()
    assert forward_reps(events, sink, "Squats", notes="morning") == 2
    assert sink.calls == [("Squats", 1, "morning"), ("Squats", 1, "morning")]


def test_tracker_accumulates_same_day():
    clock = Clock(datetime(2025, 6, 18, 9, 0))
    tracker = InMemoryTracker(user_id="u1", clock=clock)
    first = tracker.record("Squats", 1, "warmup")
    clock.now = datetime(2025, 6, 18, 21, 30)
    second = tracker.record("Squats", 2)
    assert second is first
    assert second.repetitions == 3
    # No notes keeps the existing ones.
    assert second.notes == "warmup"
    assert len(tracker.records()) == 1


def test_tracker_new_record_per_day_and_exercise():
    clock = Clock(datetime(2025, 6, 18, 9, 0))
    tracker = InMemoryTracker(clock=clock)
    tracker.record("Squats", 1)
    tracker.record("Biceps", 1)
    clock.now = datetime(2025, 6, 19, 0, 5)
    tracker.record("Squats", 1)
    names = sorted((r.exercise_name, r.date.day) for r in tracker.records())
    assert names == [("Biceps", 18), ("Squats", 18), ("Squats", 19)]


def test_tracker_separates_users():
    tracker = InMemoryTracker(user_id="a", clock=Clock(datetime(2025, 6, 18)))
    tracker.add_or_update("Squats", 4, user_id="b")
    tracker.record("Squats", 1)
    assert [r.repetitions for r in tracker.records()] == [1]
    assert [r.repetitions for r in tracker.records("b")] == [4]


def test_tracker_rejects_non_positive_reps():
    tracker = InMemoryTracker()
    with pytest.raises(ValueError):
        tracker.record("Squats", 0)


def test_update_note():
    tracker = InMemoryTracker(user_id="a", clock=Clock(datetime(2025, 6, 18)))
    rec = tracker.record("Squats", 1)
    assert tracker.update_note(rec.id, "felt strong").notes == "felt strong"
    assert tracker.update_note("missing", "x") is None
    assert tracker.update_note(rec.id, "x", user_id="someone-else") is None

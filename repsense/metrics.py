"""
Aggregate tracked reps into history metrics: per-day calendar, period totals,
active days, week/month comparison and the current streak.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from .tracking import ExerciseRecord

logger = logging.getLogger(__name__)

ACTIVE_DAYS_WINDOW = 30


def _start_of_week(d: date) -> date:
    # Weeks start on Sunday.
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _month_range(d: date) -> tuple[date, date]:
    start = d.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def _in_range(records: Iterable[ExerciseRecord], start: date, end: date) -> list[ExerciseRecord]:
    return [r for r in records if start <= r.date.date() <= end]


def _total(records: Iterable[ExerciseRecord]) -> int:
    return sum(r.repetitions for r in records)


def _by_exercise(records: Iterable[ExerciseRecord]) -> list[dict[str, Any]]:
    sums: dict[str, int] = defaultdict(int)
    for r in records:
        sums[r.exercise_name] += r.repetitions
    ranked = sorted(sums.items(), key=lambda kv: (-kv[1], kv[0]))
    return [{"exercise_name": name, "repetitions": reps} for name, reps in ranked]


def _pct_change(current: int, previous: int) -> int:
    if previous <= 0:
        return 0
    return round((current - previous) / previous * 100.0)


def calendar(records: Iterable[ExerciseRecord]) -> list[dict[str, Any]]:
    """
    One entry per day with activity, newest first:
    {date, count, exercises, notes, id}. notes/id come from the newest record of the day.
    """
    days: dict[str, dict[str, Any]] = {}
    for r in sorted(records, key=lambda rec: rec.date, reverse=True):
        day = r.date.strftime("%Y-%m-%d")
        entry = days.get(day)
        if entry is None:
            entry = {"date": day, "count": 0, "exercises": [], "notes": r.notes or "", "id": r.id}
            days[day] = entry
        entry["count"] += r.repetitions
        entry["exercises"].append(f"{r.exercise_name} ({r.repetitions} reps)")
    return list(days.values())


def totals(records: Iterable[ExerciseRecord], today: Optional[date] = None) -> dict[str, Any]:
    """Daily, weekly and monthly totals plus the most repeated exercise in each period."""
    today = today or date.today()
    records = list(records)
    week_start = _start_of_week(today)
    month_start, month_end = _month_range(today)
    daily = _by_exercise(_in_range(records, today, today))
    weekly = _by_exercise(_in_range(records, week_start, week_start + timedelta(days=6)))
    monthly = _by_exercise(_in_range(records, month_start, month_end))
    return {
        "daily_total": sum(e["repetitions"] for e in daily),
        "weekly_total": sum(e["repetitions"] for e in weekly),
        "monthly_total": sum(e["repetitions"] for e in monthly),
        "most_repeated_today": daily[0] if daily else None,
        "most_repeated_week": weekly[0] if weekly else None,
        "most_repeated_month": monthly[0] if monthly else None,
    }


def active_days(
    records: Iterable[ExerciseRecord],
    today: Optional[date] = None,
    window: int = ACTIVE_DAYS_WINDOW,
) -> dict[str, int]:
    """Distinct days with activity in the last `window` days (today included)."""
    today = today or date.today()
    start = today - timedelta(days=window - 1)
    days = {r.date.date() for r in _in_range(records, start, today) if r.repetitions > 0}
    return {"active_days": len(days), "inactive_days": window - len(days)}


def comparison(records: Iterable[ExerciseRecord], today: Optional[date] = None) -> dict[str, int]:
    """Week-over-week and month-over-month change in total reps (percent, rounded)."""
    today = today or date.today()
    records = list(records)
    week_start = _start_of_week(today)
    prev_week_start = week_start - timedelta(days=7)
    this_week = _total(_in_range(records, week_start, week_start + timedelta(days=6)))
    last_week = _total(_in_range(records, prev_week_start, week_start - timedelta(days=1)))

    month_start, month_end = _month_range(today)
    prev_start, prev_end = _month_range(month_start - timedelta(days=1))
    this_month = _total(_in_range(records, month_start, month_end))
    last_month = _total(_in_range(records, prev_start, prev_end))

    logger.debug(
        "metrics: week %s vs %s, month %s vs %s", this_week, last_week, this_month, last_month
    )
    return {
        "week_change": _pct_change(this_week, last_week),
        "month_change": _pct_change(this_month, last_month),
    }


def current_streak(records: Iterable[ExerciseRecord], today: Optional[date] = None) -> int:
    """
    Consecutive active days ending today. If today has no reps yet the streak
    still counts back from yesterday, so it does not drop to 0 in the morning.
    """
    today = today or date.today()
    days = {r.date.date() for r in records if r.repetitions > 0}
    day = today if today in days else today - timedelta(days=1)
    streak = 0
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak

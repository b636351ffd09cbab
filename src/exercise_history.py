"""
exercise_history.py – Per-Exercise History & Comparison
========================================================
How did today's set of an exercise compare with earlier sessions?

For a reference workout date the history holds the previous session and
average volume / max weight over the trailing 7, 14, 28 days and all time.
Only workouts strictly *before* the reference instant count, so the
reference workout never compares against itself.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

# ── Project root on sys.path for config import ────────────────────────────────
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from config.settings import HISTORY_WINDOWS_DAYS

from exercise_parser import Workout
from workout_stats import round_half_up

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviousSession:
    volume: float
    max_weight: float
    date: datetime
    sets: list[float]
    reps: list[float]


@dataclass(frozen=True)
class WindowAverage:
    volume: Optional[int]
    max_weight: Optional[int]
    sessions: int


@dataclass(frozen=True)
class ExerciseHistory:
    previous_session: Optional[PreviousSession]
    one_week_avg: WindowAverage
    two_week_avg: WindowAverage
    four_week_avg: WindowAverage
    all_time_avg: WindowAverage


def _window_average(sessions: list[PreviousSession]) -> WindowAverage:
    # None (not 0) signals "no data" for an empty window
    if not sessions:
        return WindowAverage(volume=None, max_weight=None, sessions=0)
    n = len(sessions)
    return WindowAverage(
        volume=round_half_up(sum(s.volume for s in sessions) / n),
        max_weight=round_half_up(sum(s.max_weight for s in sessions) / n),
        sessions=n,
    )


def calculate_exercise_history(
    exercise_name: str,
    current_date: Optional[datetime],
    all_workouts: Iterable[Workout],
    now: Optional[datetime] = None,
) -> ExerciseHistory:
    """
    Historical comparison data for *exercise_name*.

    *current_date* is the reference instant; when None every dated workout
    is history and the windows are anchored at *now* (wall clock unless
    injected).  Names match case-insensitively after trimming.
    """
    target = exercise_name.lower().strip()

    history: list[PreviousSession] = []
    for workout in all_workouts:
        if workout.date_object is None:
            continue
        if current_date is not None and workout.date_object >= current_date:
            continue

        match = next((e for e in workout.exercises if e.name.lower().strip() == target), None)
        if match is None:
            continue

        history.append(PreviousSession(
            volume=match.volume,
            max_weight=match.max_weight,
            date=workout.date_object,
            sets=list(match.sets),
            reps=list(match.reps),
        ))

    history.sort(key=lambda s: s.date, reverse=True)

    anchor = current_date or now or datetime.now()
    windows = {
        label: _window_average([s for s in history if s.date >= anchor - timedelta(days=days)])
        for label, days in HISTORY_WINDOWS_DAYS.items()
    }

    log.debug("%s: %d earlier sessions", exercise_name, len(history))
    return ExerciseHistory(
        previous_session=history[0] if history else None,
        one_week_avg=windows["one_week"],
        two_week_avg=windows["two_week"],
        four_week_avg=windows["four_week"],
        all_time_avg=_window_average(history),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PERCENT CHANGE
# ═══════════════════════════════════════════════════════════════════════════════
def calculate_change(current: float, previous: Optional[float]) -> dict:
    """{"percentage", "direction", "display"}; a missing or zero baseline is N/A."""
    if previous is None or previous == 0:
        return {"percentage": None, "direction": "neutral", "display": "N/A"}

    change = (current - previous) / previous * 100
    if change > 0:
        return {"percentage": change, "direction": "up", "display": f"+{change:.1f}%"}
    if change < 0:
        return {"percentage": change, "direction": "down", "display": f"{change:.1f}%"}
    return {"percentage": change, "direction": "neutral", "display": f"{change:.1f}%"}

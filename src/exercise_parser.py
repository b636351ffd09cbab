"""
exercise_parser.py – Worksheet → Workout Parser
================================================
Turns the raw rows of one training-log tab into a Workout.

Row layout (positional, header row first)
-----------------------------------------
    [Exercise name, Sets (weights "95, 95, 95"), Max, Reps ("8,8,8"), Volume]

Spreadsheet data is messy, so nothing here raises:
  • unparsable numeric tokens are dropped from their list
  • empty / header / placeholder rows return None and are skipped
  • a tab label that is not a date gives ``date_object = None``
"""

from __future__ import annotations

import logging
import math
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional, Sequence, Union

# ── Project root on sys.path for config import ────────────────────────────────
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from config.settings import (
    COL_NAME, COL_SETS, COL_MAX_WEIGHT, COL_REPS, COL_VOLUME,
    HEADER_MARKERS, TWO_DIGIT_YEAR_PIVOT,
)

from muscle_mapping import get_muscle_groups

log = logging.getLogger(__name__)

# Leading number of a token, the way spreadsheet users type it ("135lb" → 135)
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_DIGITS = re.compile(r"[0-9]+")


@dataclass
class Exercise:
    name: str
    sets: list[float]
    reps: list[float]
    max_weight: float
    volume: float
    muscle_groups: list[str] = field(default_factory=list)
    # seconds from workout start per set, when the source records them
    timestamps: list[float] = field(default_factory=list)


@dataclass
class Workout:
    date: str
    date_object: Optional[datetime]
    exercises: list[Exercise] = field(default_factory=list)
    total_volume: float = 0.0
    exercise_count: int = 0


# ═══════════════════════════════════════════════════════════════════════════════
# CELL HELPERS
# ═══════════════════════════════════════════════════════════════════════════════
def _cell(row: Sequence[Any], idx: int) -> Any:
    return row[idx] if idx < len(row) else None


def _cell_text(value: Any) -> str:
    """Cell → text; None / NaN become "" and whole floats lose their ".0"."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def parse_number(value: Any) -> Optional[float]:
    """Lenient float parse; returns None when no leading number is present."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else float(value)
    m = _LEADING_NUMBER.match(_cell_text(value).strip())
    return float(m.group(0)) if m else None


def parse_comma_separated(value: Any) -> list[float]:
    """Parse "95, 95, 95," into [95.0, 95.0, 95.0].

    Tokens that do not parse (including the empty one after a trailing
    comma) are dropped; the order of the rest is kept.
    """
    if not value or not isinstance(value, str):
        return []
    result = []
    for token in value.split(","):
        num = parse_number(token.strip())
        if num is not None:
            result.append(num)
    return result


def reps_for_index(reps: Sequence[float], i: int) -> float:
    """Reps of set *i*; sets past the end of the reps list repeat the last count."""
    if not reps:
        return 0.0
    return reps[i] if i < len(reps) else reps[-1]


# ═══════════════════════════════════════════════════════════════════════════════
# ROW → EXERCISE
# ═══════════════════════════════════════════════════════════════════════════════
def parse_exercise_row(
    row: Sequence[Any],
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> Optional[Exercise]:
    name = _cell_text(_cell(row, COL_NAME)).strip()

    lowered = name.lower()
    if not name or any(marker in lowered for marker in HEADER_MARKERS):
        return None

    sets = parse_comma_separated(_cell_text(_cell(row, COL_SETS)))
    reps = parse_comma_separated(_cell_text(_cell(row, COL_REPS)))
    max_weight = parse_number(_cell(row, COL_MAX_WEIGHT)) or 0.0
    volume = parse_number(_cell(row, COL_VOLUME)) or 0.0

    # exercise listed on the log but nothing recorded that day
    if not sets and max_weight == 0 and volume == 0:
        log.debug("Skipping placeholder row %r", name)
        return None

    # supplied volume always wins, even when it disagrees with sets × reps
    if volume == 0 and sets and reps:
        volume = sum(weight * reps_for_index(reps, i) for i, weight in enumerate(sets))

    return Exercise(
        name=name,
        sets=sets,
        reps=reps,
        max_weight=max_weight,
        volume=volume,
        muscle_groups=get_muscle_groups(name, custom_mappings),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# WORKSHEET → WORKOUT
# ═══════════════════════════════════════════════════════════════════════════════
def parse_date_string(date_str: Optional[str]) -> Optional[datetime]:
    """Parse "M/D/YYYY" or "M/D/YY" into a local-midnight datetime.

    Anything else (wrong part count, parts that are not plain digits,
    impossible calendar date) gives None.
    """
    if not date_str:
        return None

    parts = str(date_str).split("/")
    if len(parts) != 3:
        return None

    parts = [p.strip() for p in parts]
    if not all(_DIGITS.fullmatch(p) for p in parts):
        return None
    month, day, year = (int(p) for p in parts)

    if year < 100:
        year += 1900 if year > TWO_DIGIT_YEAR_PIVOT else 2000

    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_worksheet(
    sheet_name: str,
    rows: Sequence[Sequence[Any]],
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> Workout:
    workout = Workout(date=sheet_name, date_object=parse_date_string(sheet_name))

    # row 0 is always the header
    for row in rows[1:]:
        exercise = parse_exercise_row(row, custom_mappings)
        if exercise is None:
            continue
        workout.exercises.append(exercise)
        workout.total_volume += exercise.volume

    workout.exercise_count = len(workout.exercises)

    if workout.date_object is None:
        log.debug("Tab %r is not a date – workout will be unsortable", sheet_name)
    return workout


# ═══════════════════════════════════════════════════════════════════════════════
# ORDERING, FILTERING, DISPLAY
# ═══════════════════════════════════════════════════════════════════════════════
def sort_workouts_by_date(workouts: Iterable[Workout]) -> list[Workout]:
    """Newest first; undated workouts go last in their original order."""
    workouts = list(workouts)
    dated = sorted((w for w in workouts if w.date_object is not None),
                   key=lambda w: w.date_object, reverse=True)
    return dated + [w for w in workouts if w.date_object is None]


def filter_workouts_by_date_range(
    workouts: Iterable[Workout],
    days: Union[int, str],
    now: Optional[datetime] = None,
) -> list[Workout]:
    """Workouts within the last *days* days of *now*; 0 or "all" keeps all.

    Undated workouts are excluded from any bounded range.
    """
    if days == 0 or days == "all":
        return list(workouts)

    cutoff = (now or datetime.now()) - timedelta(days=int(days))
    return [w for w in workouts if w.date_object is not None and w.date_object >= cutoff]


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return f"{value:%a}, {value:%b} {value.day}, {value.year}"


def format_number(num: float) -> str:
    if isinstance(num, float) and num.is_integer():
        num = int(num)
    if isinstance(num, int):
        return f"{num:,}"
    return f"{num:,.3f}".rstrip("0").rstrip(".")

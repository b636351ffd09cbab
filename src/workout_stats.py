"""
workout_stats.py – Aggregate Statistics & Muscle Volume
========================================================
Totals, personal records and per-muscle volume across a set of workouts,
plus a flat pandas view used for the CSV reports.
"""

from __future__ import annotations

import logging
import math
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable

# ── Project root on sys.path for config import ────────────────────────────────
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import pandas as pd

from config.settings import CUSTOM_MUSCLE_CATEGORY

from exercise_parser import Workout, format_date
from muscle_mapping import MuscleGroup, get_muscle_color, get_muscle_display_name, get_muscles_by_category

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonalRecord:
    name: str
    weight: float
    date: str


@dataclass
class WorkoutStats:
    total_workouts: int
    total_volume: float
    total_exercises: int
    personal_records: list[PersonalRecord] = field(default_factory=list)
    pr_count: int = 0


def round_half_up(value: float) -> int:
    """Nearest integer with .5 rounding up (Python's round() is banker's)."""
    return math.floor(value + 0.5)


# ═══════════════════════════════════════════════════════════════════════════════
# TOTALS & PERSONAL RECORDS
# ═══════════════════════════════════════════════════════════════════════════════
def calculate_stats(workouts: Iterable[Workout]) -> WorkoutStats:
    workouts = list(workouts)

    # lower-cased name → best so far; strictly heavier replaces, ties keep first
    best: dict[str, PersonalRecord] = {}
    for workout in workouts:
        for ex in workout.exercises:
            key = ex.name.lower()
            current = best.get(key)
            if current is None or ex.max_weight > current.weight:
                best[key] = PersonalRecord(ex.name, ex.max_weight, workout.date)

    records = [pr for pr in best.values() if pr.weight > 0]
    log.debug("%d workouts, %d personal records", len(workouts), len(records))
    return WorkoutStats(
        total_workouts=len(workouts),
        total_volume=sum(w.total_volume for w in workouts),
        total_exercises=sum(w.exercise_count for w in workouts),
        personal_records=records,
        pr_count=len(records),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# VOLUME BY MUSCLE GROUP
# ═══════════════════════════════════════════════════════════════════════════════
def calculate_muscle_volume(workouts: Iterable[Workout]) -> dict[str, dict]:
    """muscle_id → {"volume": int, "exercises": [names]}.

    Each exercise's volume is split evenly over its muscle groups.
    Unattributed exercises land in no bucket.
    """
    volume: dict[str, float] = {}
    names: dict[str, dict[str, None]] = {}

    for workout in workouts:
        for ex in workout.exercises:
            share = ex.volume / max(len(ex.muscle_groups), 1)
            for muscle in ex.muscle_groups:
                volume[muscle] = volume.get(muscle, 0.0) + share
                names.setdefault(muscle, {})[ex.name] = None

    return {
        muscle: {"volume": round_half_up(total), "exercises": list(names[muscle])}
        for muscle, total in volume.items()
    }


def _category_index(custom_groups: Iterable[MuscleGroup] = ()) -> dict[str, str]:
    return {
        group.id: category
        for category, groups in get_muscles_by_category(custom_groups).items()
        for group in groups
    }


def calculate_category_volume(
    muscle_volume: dict[str, dict],
    custom_groups: Iterable[MuscleGroup] = (),
) -> dict[str, int]:
    """Category → summed muscle volume; ids outside the catalog count as Custom."""
    category_of = _category_index(custom_groups)
    totals: dict[str, int] = {}
    for muscle, data in muscle_volume.items():
        category = category_of.get(muscle, CUSTOM_MUSCLE_CATEGORY)
        totals[category] = totals.get(category, 0) + data["volume"]
    return totals


# ═══════════════════════════════════════════════════════════════════════════════
# FLAT VIEW (reports)
# ═══════════════════════════════════════════════════════════════════════════════
WORKOUT_COLS = [
    "date", "date_iso", "weekday", "exercise", "sets", "reps",
    "max_weight", "volume", "muscle_groups",
]


def workouts_to_frame(workouts: Iterable[Workout]) -> pd.DataFrame:
    """One row per exercise; list columns joined with ", "."""
    rows = []
    for workout in workouts:
        iso = workout.date_object.date().isoformat() if workout.date_object else ""
        for ex in workout.exercises:
            rows.append({
                "date": workout.date,
                "date_iso": iso,
                "weekday": format_date(workout.date_object),
                "exercise": ex.name,
                "sets": ", ".join(f"{v:g}" for v in ex.sets),
                "reps": ", ".join(f"{v:g}" for v in ex.reps),
                "max_weight": ex.max_weight,
                "volume": ex.volume,
                "muscle_groups": ", ".join(ex.muscle_groups),
            })
    return pd.DataFrame(rows, columns=WORKOUT_COLS)


def personal_records_frame(stats: WorkoutStats) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"exercise": pr.name, "weight": pr.weight, "date": pr.date} for pr in stats.personal_records],
        columns=["exercise", "weight", "date"],
    )
    return df.sort_values("weight", ascending=False, kind="stable").reset_index(drop=True)


MUSCLE_VOLUME_COLS = ["muscle", "display_name", "category", "color", "volume", "exercises"]


def muscle_volume_frame(
    muscle_volume: dict[str, dict],
    custom_groups: Iterable[MuscleGroup] = (),
) -> pd.DataFrame:
    custom_groups = list(custom_groups)
    category_of = _category_index(custom_groups)
    df = pd.DataFrame(
        [
            {
                "muscle": m,
                "display_name": get_muscle_display_name(m, custom_groups),
                "category": category_of.get(m, CUSTOM_MUSCLE_CATEGORY),
                "color": get_muscle_color(m, custom_groups),
                "volume": d["volume"],
                "exercises": ", ".join(d["exercises"]),
            }
            for m, d in muscle_volume.items()
        ],
        columns=MUSCLE_VOLUME_COLS,
    )
    return df.sort_values("volume", ascending=False, kind="stable").reset_index(drop=True)

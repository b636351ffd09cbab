"""
muscle_mapping.py – Exercise → Muscle Group Attribution
========================================================
Built-in muscle catalog and the default exercise table used to distribute
training volume across muscles.

Lookup order (first hit wins, no merging)
-----------------------------------------
1. exact key in the custom mapping
2. exact key in DEFAULT_MUSCLE_MAPPINGS
3. partial key in DEFAULT_MUSCLE_MAPPINGS (table order)
4. partial key in the custom mapping (insertion order)
5. []

A *partial* hit means the normalized name contains the key or the key
contains the normalized name.  Because the default table is scanned in
order, "cable shoulder press" must stay ahead of "shoulder press" etc.
"""

from __future__ import annotations

import os
import random
import sys
from dataclasses import dataclass
from typing import Iterable, Optional

# ── Project root on sys.path for config import ────────────────────────────────
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from config.settings import DEFAULT_MUSCLE_COLOR, CUSTOM_MUSCLE_CATEGORY


@dataclass(frozen=True)
class MuscleGroup:
    id: str
    display_name: str
    category: str
    color: str


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT EXERCISE TABLE (order matters for partial matching)
# ═══════════════════════════════════════════════════════════════════════════════
DEFAULT_MUSCLE_MAPPINGS: dict[str, list[str]] = {
    # Shoulders
    "cable shoulder press": ["front_delt", "middle_delt", "triceps"],
    "shoulder press": ["front_delt", "middle_delt", "triceps"],
    "military press": ["front_delt", "middle_delt", "triceps"],
    "lateral raise": ["middle_delt"],
    "front raise": ["front_delt"],
    "rear delt": ["rear_delt"],
    "rear delt fly": ["rear_delt"],
    "face pull": ["rear_delt", "traps", "rhomboids"],

    # Legs
    "leg press": ["quads", "glutes", "hamstrings"],
    "squat": ["quads", "glutes", "hamstrings", "lower_back"],
    "leg curl": ["hamstrings"],
    "leg extension": ["quads"],
    "calf raise": ["calves"],
    "leg raise": ["hip_flexors", "abs"],
    "romanian deadlift": ["hamstrings", "glutes", "lower_back"],
    "hip thrust": ["glutes", "hamstrings"],
    "lunge": ["quads", "glutes", "hamstrings"],

    # Chest
    "pec fly": ["mid_chest"],
    "pec deck": ["mid_chest"],
    "chest fly": ["mid_chest"],
    "con. chest press": ["mid_chest", "triceps"],
    "chest press": ["mid_chest", "front_delt", "triceps"],
    "barbell chest press": ["mid_chest", "front_delt", "triceps"],
    "bench press": ["mid_chest", "front_delt", "triceps"],
    "incline bench press": ["upper_chest", "front_delt", "triceps"],
    "incline press": ["upper_chest", "front_delt", "triceps"],
    "decline press": ["lower_chest", "triceps"],
    "dips": ["lower_chest", "triceps", "front_delt"],

    # Back
    "div. seated row": ["lats", "rhomboids", "biceps"],
    "seated row": ["lats", "rhomboids", "biceps", "rear_delt"],
    "cable row": ["lats", "rhomboids", "biceps"],
    "lat pull down": ["lats", "biceps"],
    "lat pull down (dual handle)": ["lats", "biceps", "rhomboids"],
    "lat pulldown": ["lats", "biceps"],
    "pull up": ["lats", "biceps", "rhomboids"],
    "chin up": ["lats", "biceps"],
    "barbell row": ["lats", "rhomboids", "rear_delt", "biceps"],
    "t-bar row": ["lats", "rhomboids", "rear_delt"],
    "back extension": ["lower_back", "glutes"],
    "deadlift": ["lower_back", "glutes", "hamstrings", "traps"],
    "shrug": ["traps"],

    # Arms
    "bicep curl": ["biceps"],
    "hammer curl": ["biceps", "forearms"],
    "preacher curl": ["biceps"],
    "concentration curl": ["biceps"],
    "tricep ext": ["triceps_long", "triceps_lateral"],
    "tricep extension": ["triceps_long", "triceps_lateral"],
    "tricep pushdown": ["triceps_lateral"],
    "skull crusher": ["triceps_long", "triceps_medial"],
    "close grip bench": ["triceps", "mid_chest"],
    "wrist curl": ["forearms"],

    # Core
    "plank": ["abs", "obliques"],
    "crunch": ["abs"],
    "sit up": ["abs", "hip_flexors"],
    "russian twist": ["obliques"],
    "cable crunch": ["abs"],
    "hanging leg raise": ["abs", "hip_flexors"],
    "ab wheel": ["abs", "obliques"],
}


# ═══════════════════════════════════════════════════════════════════════════════
# MUSCLE CATALOG
# ═══════════════════════════════════════════════════════════════════════════════
def _catalog(*rows: tuple[str, str, str, str]) -> dict[str, MuscleGroup]:
    return {mid: MuscleGroup(mid, name, cat, color) for mid, name, cat, color in rows}


MUSCLE_GROUPS: dict[str, MuscleGroup] = _catalog(
    # Shoulders
    ("front_delt",      "Front Deltoid",          "Shoulders", "#6366f1"),
    ("middle_delt",     "Middle Deltoid",         "Shoulders", "#818cf8"),
    ("rear_delt",       "Rear Deltoid",           "Shoulders", "#a5b4fc"),
    # Chest
    ("upper_chest",     "Upper Chest",            "Chest",     "#ec4899"),
    ("mid_chest",       "Mid Chest",              "Chest",     "#f472b6"),
    ("lower_chest",     "Lower Chest",            "Chest",     "#f9a8d4"),
    # Back
    ("lats",            "Latissimus Dorsi",       "Back",      "#3b82f6"),
    ("upper_back",      "Upper Back",             "Back",      "#60a5fa"),
    ("lower_back",      "Lower Back",             "Back",      "#93c5fd"),
    ("rhomboids",       "Rhomboids",              "Back",      "#bfdbfe"),
    ("traps",           "Trapezius",              "Back",      "#2563eb"),
    # Arms
    ("biceps",          "Biceps",                 "Arms",      "#22c55e"),
    ("triceps",         "Triceps",                "Arms",      "#4ade80"),
    ("triceps_long",    "Triceps (Long Head)",    "Arms",      "#86efac"),
    ("triceps_lateral", "Triceps (Lateral Head)", "Arms",      "#bbf7d0"),
    ("triceps_medial",  "Triceps (Medial Head)",  "Arms",      "#dcfce7"),
    ("forearms",        "Forearms",               "Arms",      "#16a34a"),
    # Legs
    ("quads",           "Quadriceps",             "Legs",      "#f97316"),
    ("hamstrings",      "Hamstrings",             "Legs",      "#fb923c"),
    ("glutes",          "Glutes",                 "Legs",      "#fdba74"),
    ("calves",          "Calves",                 "Legs",      "#fed7aa"),
    ("hip_flexors",     "Hip Flexors",            "Legs",      "#ea580c"),
    # Core
    ("abs",             "Abdominals",             "Core",      "#06b6d4"),
    ("obliques",        "Obliques",               "Core",      "#22d3ee"),
)


# ═══════════════════════════════════════════════════════════════════════════════
# LOOKUP
# ═══════════════════════════════════════════════════════════════════════════════
def normalize_name(name: str) -> str:
    return name.lower().strip()


def _partial_match(normalized: str, table: dict[str, list[str]]) -> Optional[list[str]]:
    for key, muscles in table.items():
        if key in normalized or normalized in key:
            return muscles
    return None


def get_muscle_groups(
    exercise_name: str,
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> list[str]:
    """Resolve the muscle ids trained by *exercise_name*.

    Custom exact beats default exact, but default partial beats custom
    partial.  Returns a fresh list so callers may keep it on an Exercise.
    """
    custom = custom_mappings or {}
    normalized = normalize_name(exercise_name)

    if normalized in custom:
        return list(custom[normalized])
    if normalized in DEFAULT_MUSCLE_MAPPINGS:
        return list(DEFAULT_MUSCLE_MAPPINGS[normalized])

    for table in (DEFAULT_MUSCLE_MAPPINGS, custom):
        hit = _partial_match(normalized, table)
        if hit is not None:
            return list(hit)

    return []


def normalize_custom_mappings(raw: dict) -> dict[str, list[str]]:
    """Lower-case/trim keys and coerce values to lists of muscle ids.

    Insertion order is kept because partial matching depends on it.
    """
    result: dict[str, list[str]] = {}
    for key, muscles in raw.items():
        if isinstance(muscles, str):
            muscles = [muscles]
        result[normalize_name(str(key))] = [str(m) for m in muscles]
    return result


def get_merged_mappings(
    workouts: Iterable,
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> dict[str, list[str]]:
    """Effective mapping view: every attributed exercise seen in *workouts*,
    then custom overrides on top."""
    merged: dict[str, list[str]] = {}
    for workout in workouts:
        for ex in workout.exercises:
            key = normalize_name(ex.name)
            if key not in merged and ex.muscle_groups:
                merged[key] = list(ex.muscle_groups)
    merged.update(custom_mappings or {})
    return merged


# ═══════════════════════════════════════════════════════════════════════════════
# CATALOG HELPERS
# ═══════════════════════════════════════════════════════════════════════════════
def _all_groups(custom_groups: Iterable[MuscleGroup] = ()) -> dict[str, MuscleGroup]:
    groups = dict(MUSCLE_GROUPS)
    for group in custom_groups:
        groups[group.id] = group
    return groups


def get_muscle_display_name(muscle_id: str, custom_groups: Iterable[MuscleGroup] = ()) -> str:
    """Catalog name, or the id title-cased ("hip_abductors" → "Hip Abductors")."""
    group = _all_groups(custom_groups).get(muscle_id)
    if group is not None:
        return group.display_name
    return " ".join(part[:1].upper() + part[1:] for part in muscle_id.split("_") if part)


def get_muscle_color(muscle_id: str, custom_groups: Iterable[MuscleGroup] = ()) -> str:
    group = _all_groups(custom_groups).get(muscle_id)
    return group.color if group is not None else DEFAULT_MUSCLE_COLOR


def get_muscles_by_category(custom_groups: Iterable[MuscleGroup] = ()) -> dict[str, list[MuscleGroup]]:
    categories: dict[str, list[MuscleGroup]] = {}
    for group in _all_groups(custom_groups).values():
        categories.setdefault(group.category or CUSTOM_MUSCLE_CATEGORY, []).append(group)
    return categories


def create_custom_muscle_group(name: str, color: Optional[str] = None) -> MuscleGroup:
    """User-defined muscle: id is the name lower-cased with whitespace → "_"."""
    muscle_id = "_".join(name.lower().split())
    if color is None:
        color = f"#{random.randrange(0x1000000):06x}"
    return MuscleGroup(muscle_id, name.strip(), CUSTOM_MUSCLE_CATEGORY, color)

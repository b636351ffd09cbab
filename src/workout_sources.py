"""
workout_sources.py – Local Training-Log & HR Stream Loaders
============================================================
Reads the exported data the analytics engine works on.  No network access:
the spreadsheet is exported to .xlsx (or one CSV per tab) and HR streams are
saved as .fit / .csv next to it.

Inputs
------
* data/workouts.xlsx           – one tab per workout, tab name = date
                                  (Excel forbids "/" in tab names, so
                                  "1-29-2026" is accepted and normalised)
* data/tabs/1-29-2026.csv      – alternative: one CSV per tab
* data/hr/1-29-2026.fit|.csv   – HR stream for that workout
* data/custom_mappings.json    – {"exercise name": ["muscle_id", …]}
* data/custom_muscle_groups.json – ["Neck", {"name": "Grip", "color": "#aabbcc"}]
"""

from __future__ import annotations

import glob
import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

# ── Project root on sys.path for config import ────────────────────────────────
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import pandas as pd
from fitparse import FitFile

from config.settings import DATE_TAB_PATTERN

from exercise_parser import Workout, parse_worksheet
from hr_analysis import HRStream
from muscle_mapping import MuscleGroup, create_custom_muscle_group, normalize_custom_mappings

log = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ═══════════════════════════════════════════════════════════════════════════════
# TRAINING LOG
# ═══════════════════════════════════════════════════════════════════════════════
def is_date_tab(name: str) -> bool:
    return bool(DATE_TAB_PATTERN.match(name.strip()))


def normalize_tab_label(name: str) -> str:
    """ "1-29-2026" → "1/29/2026" """
    return name.strip().replace("-", "/")


def _frame_to_rows(df: pd.DataFrame) -> list[list]:
    return df.astype(object).where(df.notna(), None).values.tolist()


def _collect(
    tabs: dict[str, pd.DataFrame],
    custom_mappings: Optional[dict[str, list[str]]],
) -> list[Workout]:
    workouts: list[Workout] = []
    for name, df in tabs.items():
        if not is_date_tab(name):
            log.debug("Skipping non-date tab %r", name)
            continue
        try:
            workout = parse_worksheet(normalize_tab_label(name), _frame_to_rows(df), custom_mappings)
        except Exception as exc:
            log.error("Cannot parse tab %s: %s", name, exc)
            continue

        if workout.exercises:
            workouts.append(workout)
        else:
            log.debug("Tab %s has no recorded exercises", name)

    log.info("Loaded %d workouts from %d tabs", len(workouts), len(tabs))
    return workouts


def load_workbook(
    path: PathLike,
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> list[Workout]:
    """Parse every date tab of an exported .xlsx training log."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Workbook not found: {path}")

    tabs = pd.read_excel(path, sheet_name=None, header=None, dtype=object)
    return _collect({str(k): v for k, v in tabs.items()}, custom_mappings)


def load_csv_directory(
    path: PathLike,
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> list[Workout]:
    """Parse a folder of per-tab CSV exports named like "1-29-2026.csv"."""
    path = Path(path)
    if not path.is_dir():
        raise FileNotFoundError(f"Tab directory not found: {path}")

    tabs: dict[str, pd.DataFrame] = {}
    for csv_path in sorted(path.glob("*.csv")):
        try:
            tabs[csv_path.stem] = pd.read_csv(csv_path, header=None, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            log.warning("Empty tab file %s – skipping.", csv_path.name)
    return _collect(tabs, custom_mappings)


def load_training_log(
    path: PathLike,
    custom_mappings: Optional[dict[str, list[str]]] = None,
) -> list[Workout]:
    """Workbook file or CSV directory, whichever *path* is."""
    if Path(path).is_dir():
        return load_csv_directory(path, custom_mappings)
    return load_workbook(path, custom_mappings)


def load_custom_mappings(path: Optional[PathLike]) -> dict[str, list[str]]:
    """Read-only custom exercise → muscle overrides; a missing file means none."""
    if path is None or not Path(path).is_file():
        return {}
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object of exercise → muscle ids")
    return normalize_custom_mappings(raw)


def load_custom_muscle_groups(path: Optional[PathLike]) -> list[MuscleGroup]:
    """User-defined muscle groups: ["Neck", {"name": "Grip", "color": "#aabbcc"}, …]."""
    if path is None or not Path(path).is_file():
        return []
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of muscle groups")

    groups: list[MuscleGroup] = []
    for entry in raw:
        if isinstance(entry, str):
            group = create_custom_muscle_group(entry)
        elif isinstance(entry, dict) and entry.get("name"):
            group = create_custom_muscle_group(str(entry["name"]), entry.get("color"))
            if entry.get("id"):
                group = replace(group, id=str(entry["id"]))
        else:
            raise ValueError(f"{path}: invalid muscle group entry {entry!r}")
        groups.append(group)
    log.info("Loaded %d custom muscle groups", len(groups))
    return groups


# ═══════════════════════════════════════════════════════════════════════════════
# HEART-RATE STREAMS
# ═══════════════════════════════════════════════════════════════════════════════
def load_hr_stream_fit(path: PathLike) -> HRStream:
    """HR samples from the FIT ``record`` messages, time in s from the first record."""
    fitfile = FitFile(str(path))

    t0 = None
    times: list[float] = []
    heartrate: list[float] = []
    for msg in fitfile.get_messages("record"):
        values = msg.get_values()
        ts = values.get("timestamp")
        hr = values.get("heart_rate")
        if ts is None:
            continue
        if t0 is None:
            t0 = ts
        if hr is None:
            continue
        times.append((ts - t0).total_seconds())
        heartrate.append(float(hr))

    if not heartrate:
        log.warning("%s: no heart_rate in record messages", path)
    return HRStream(time=times, heartrate=heartrate, activity_id=Path(path).stem)


def load_hr_stream_csv(path: PathLike) -> HRStream:
    """CSV with ``time`` and ``heartrate`` (or ``heart_rate``) columns."""
    df = pd.read_csv(path)
    df = df.rename(columns={"heart_rate": "heartrate"})
    missing = {"time", "heartrate"} - set(df.columns)
    if missing:
        raise ValueError(f"{path}: missing column(s) {sorted(missing)}")

    df["time"] = pd.to_numeric(df["time"], errors="coerce")
    df["heartrate"] = pd.to_numeric(df["heartrate"], errors="coerce")
    df = df.dropna(subset=["time", "heartrate"]).sort_values("time")
    return HRStream(
        time=df["time"].astype(float).tolist(),
        heartrate=df["heartrate"].astype(float).tolist(),
        activity_id=Path(path).stem,
    )


def find_hr_stream_file(hr_dir: PathLike, workout: Workout) -> Optional[str]:
    """Locate the stream saved for *workout* ("1-29-2026.fit", "01-29-2026.csv", …)."""
    if workout.date_object is None:
        return None
    d = workout.date_object
    stems = [
        f"{d.month}-{d.day}-{d.year}",
        f"{d.month:02d}-{d.day:02d}-{d.year}",
        d.date().isoformat(),
    ]
    for stem in stems:
        for ext in (".fit", ".csv"):
            p = os.path.join(str(hr_dir), stem + ext)
            if os.path.isfile(p):
                return p
    # glob fallback – e.g. "2026-01-29_strength.fit"
    for p in sorted(glob.glob(os.path.join(str(hr_dir), f"*{d.date().isoformat()}*"))):
        return p
    return None


def load_hr_stream(path: PathLike) -> HRStream:
    if not Path(path).is_file():
        raise FileNotFoundError(f"HR stream not found: {path}")
    if str(path).lower().endswith(".fit"):
        return load_hr_stream_fit(path)
    return load_hr_stream_csv(path)

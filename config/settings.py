"""
Lift Log Analytics – Centralized Configuration
===============================================
All file paths, parsing conventions and heart-rate thresholds in one place.
Edit this file (or the .env overrides) to match YOUR training log – never
hardcode values in individual scripts.
"""

import os
import re
from pathlib import Path

from dotenv import load_dotenv

# Values from .env never override variables already set in the shell
load_dotenv(override=False)

# ============================================================
# PROJECT PATHS (relative to project root)
# ============================================================
PROJECT_ROOT = Path(__file__).resolve().parent.parent

DATA_DIR        = PROJECT_ROOT / "data"
REPORTS_DIR     = PROJECT_ROOT / "reports"
LOGS_DIR        = PROJECT_ROOT / "logs"

# Exported training log (one tab per workout date)
WORKBOOK_PATH        = Path(os.getenv("WORKBOOK_PATH", str(DATA_DIR / "workouts.xlsx")))
# Read-only exercise → muscle overrides (JSON object)
CUSTOM_MAPPINGS_PATH = Path(os.getenv("CUSTOM_MAPPINGS_PATH", str(DATA_DIR / "custom_mappings.json")))
# User-defined muscle groups (JSON list of names or {"name", "color"} objects)
CUSTOM_MUSCLE_GROUPS_PATH = Path(os.getenv("CUSTOM_MUSCLE_GROUPS_PATH", str(DATA_DIR / "custom_muscle_groups.json")))
# Heart-rate streams named after the workout date: 1-29-2026.fit / .csv
HR_STREAM_DIR        = Path(os.getenv("HR_STREAM_DIR", str(DATA_DIR / "hr")))

# ============================================================
# WORKSHEET LAYOUT
# ============================================================
# Positional columns: [name, sets_csv, max_weight, reps_csv, volume]
COL_NAME        = 0
COL_SETS        = 1
COL_MAX_WEIGHT  = 2
COL_REPS        = 3
COL_VOLUME      = 4

# Lower-cased substrings that mark a header row embedded mid-sheet
HEADER_MARKERS  = ("exercise", "s1")

# Two-digit years: > pivot → 19xx, otherwise 20xx
TWO_DIGIT_YEAR_PIVOT = 50

# Tab / file names treated as workout dates (M/D/YY, M/D/YYYY, M-D-YYYY)
DATE_TAB_PATTERN = re.compile(r"^\d{1,2}[/-]\d{1,2}[/-]\d{2,4}$")

# ============================================================
# HISTORY / COMPARISON
# ============================================================
# Trailing windows (days) anchored at the reference workout
HISTORY_WINDOWS_DAYS = {
    "one_week": 7,
    "two_week": 14,
    "four_week": 28,
}

# ============================================================
# HEART-RATE PEAK DETECTION
# ============================================================
PEAK_WINDOW_SIZE        = 30   # samples either side for local maximum
PEAK_MIN_DISTANCE_S     = 45   # seconds between accepted peaks
PEAK_THRESHOLD_ABOVE_AVG = 15  # bpm above rolling average
ROLLING_AVG_HALF_WINDOW = 30   # samples either side for rolling baseline

# ============================================================
# SET ↔ HR CORRELATION
# ============================================================
TIMESTAMP_MATCH_TOLERANCE_S = 60    # max |peak − set timestamp|
PEAK_STATS_HALF_WINDOW_S    = 20    # ± seconds summarised around a peak
POSITION_MATCH_MIN_RATIO    = 0.7   # peaks / sets ratio for 1:1 matching
POSITION_MATCH_MAX_RATIO    = 1.5

# ============================================================
# DEMO HR STREAM
# ============================================================
DEMO_REST_HR        = 85
DEMO_PEAK_HR        = 155
DEMO_SET_SECONDS    = 45
DEMO_REST_SECONDS   = 90
DEMO_WARMUP_SECONDS = 300

# ============================================================
# MUSCLE CATALOG
# ============================================================
DEFAULT_MUSCLE_COLOR    = "#6366f1"
CUSTOM_MUSCLE_CATEGORY  = "Custom"

# ============================================================
# CSV FILE NAMES (inside REPORTS_DIR)
# ============================================================
CSV_WORKOUTS          = "workouts.csv"
CSV_PERSONAL_RECORDS  = "personal_records.csv"
CSV_MUSCLE_VOLUME     = "muscle_volume.csv"
CSV_EXERCISE_HISTORY  = "exercise_history.csv"
CSV_SET_HR            = "set_hr.csv"

"""Shared fixtures – puts src/ and the project root on sys.path like main.py."""

import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
for _p in (PROJECT_ROOT, SRC_DIR):
    if _p not in sys.path:
        sys.path.insert(0, _p)

from exercise_parser import parse_worksheet  # noqa: E402
from hr_analysis import HRStream  # noqa: E402

HEADER = ["Exercise", "s1, s2.. sN", "Max (lbs)", "s1_rps, s2_rps", "Volume"]

SAMPLE_SHEET = "1/29/2026"
SAMPLE_ROWS = [
    HEADER,
    ["Cable shoulder press", "100,100", "100", "10,10", "2000"],
    ["Div. Seated row", "200,210,210,220", "220", "8,8, 8, 8", "6720"],
    ["Pec fly", "", "", "", ""],
    ["Leg curl", "90,95,95,90", "95", "8,8,8,8", "2960"],
    ["Leg press", "", "", "", ""],
    ["Lat pull down", "100,110,120,120", "120", "10,8,8,8", "3650"],
    ["Bicep curl", "30,35,35,30", "35", "12,10,10,12", "2810"],
    ["Tricep ext", "45,45,50,50", "50", "20,20,18,18", "3780"],
    ["Barbell chest press", "", "", "", ""],
    ["Con. Chest press", "", "50", "", ""],
]
SAMPLE_EXERCISE_COUNT = 7
SAMPLE_TOTAL_VOLUME = 2000 + 6720 + 2960 + 3650 + 2810 + 3780 + 0


@pytest.fixture
def sample_rows():
    return [list(r) for r in SAMPLE_ROWS]


@pytest.fixture
def sample_workout():
    return parse_worksheet(SAMPLE_SHEET, SAMPLE_ROWS)


def make_workout(label, *rows):
    """Workout from a date label and (name, sets, max, reps, volume) rows."""
    return parse_worksheet(label, [HEADER, *[list(r) for r in rows]])


def spike_stream(centers, n=600, base=90.0, height=50.0, slope=5.0):
    """1 Hz stream at *base* bpm with triangular spikes peaking at *centers*."""
    hr = [base] * n
    for c in centers:
        for i in range(n):
            hr[i] = max(hr[i], base + max(0.0, height - slope * abs(i - c)))
    return HRStream(time=[float(t) for t in range(n)], heartrate=hr)

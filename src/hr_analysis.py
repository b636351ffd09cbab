"""
hr_analysis.py – Heart-Rate Peaks & Set Correlation
====================================================
A strength session shows up in the HR stream as a saw-tooth: HR climbs
during a set and decays in the rest.  The top of each tooth is taken as the
moment a set finished.

Modules
-------
A. Rolling baseline (centered moving average)
B. Peak detection (local max, threshold above baseline, min spacing)
C. Window HR summary (avg / max / min over [start, end])
D. Set ↔ peak correlation
     • timestamp  – sets carry their own time → nearest peak within 60 s
     • position   – ~1 peak per set → map by relative position
     • segment    – otherwise split the session into equal segments
E. Whole-workout analysis (flatten sets, detect, correlate, overall stats)
F. Synthetic demo stream

Input streams are parallel ``time`` (s from start) / ``heartrate`` (bpm)
arrays.  Empty streams never raise; they produce no peaks and ``hr_data``
of None.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

# ── Project root on sys.path for config import ────────────────────────────────
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import numpy as np

from config.settings import (
    PEAK_WINDOW_SIZE, PEAK_MIN_DISTANCE_S, PEAK_THRESHOLD_ABOVE_AVG,
    ROLLING_AVG_HALF_WINDOW,
    TIMESTAMP_MATCH_TOLERANCE_S, PEAK_STATS_HALF_WINDOW_S,
    POSITION_MATCH_MIN_RATIO, POSITION_MATCH_MAX_RATIO,
    DEMO_REST_HR, DEMO_PEAK_HR, DEMO_SET_SECONDS, DEMO_REST_SECONDS,
    DEMO_WARMUP_SECONDS,
)

from exercise_parser import Workout, reps_for_index
from workout_stats import round_half_up

log = logging.getLogger(__name__)

MATCHED_BY_TIMESTAMP = "timestamp"
MATCHED_BY_POSITION = "position"
MATCHED_BY_SEGMENT = "segment"


@dataclass(frozen=True)
class HRPeak:
    index: int
    time: float
    hr: float
    avg_hr: float


@dataclass
class HRStream:
    time: list[float]
    heartrate: list[float]
    activity_id: str = ""


@dataclass
class WorkoutHRAnalysis:
    peaks: list[HRPeak]
    correlated_sets: list[dict]
    overall_stats: dict
    stream: HRStream
    activity: dict = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# A + B: ROLLING BASELINE & PEAK DETECTION
# ═══════════════════════════════════════════════════════════════════════════════
def rolling_average(hr: np.ndarray, half_window: int = ROLLING_AVG_HALF_WINDOW) -> np.ndarray:
    """Mean of hr[i - half_window : i + half_window] for every i, clamped at the ends."""
    n = len(hr)
    if n == 0:
        return np.empty(0)
    csum = np.concatenate(([0.0], np.cumsum(hr, dtype=float)))
    idx = np.arange(n)
    lo = np.maximum(0, idx - half_window)
    hi = np.minimum(n, idx + half_window)
    return (csum[hi] - csum[lo]) / (hi - lo)


def detect_hr_peaks(
    hr_data: Sequence[float],
    time_data: Sequence[float],
    window_size: int = PEAK_WINDOW_SIZE,
    min_peak_distance: float = PEAK_MIN_DISTANCE_S,
    threshold_above_avg: float = PEAK_THRESHOLD_ABOVE_AVG,
    rolling_half_window: int = ROLLING_AVG_HALF_WINDOW,
) -> list[HRPeak]:
    """
    Find set-end peaks in an HR stream.

    Index *i* is a peak when:
      1. no sample in hr[i - window_size : i + window_size] is higher (ties ok)
      2. hr[i] > rolling_avg[i] + threshold_above_avg
      3. time[i] is at least min_peak_distance after the last accepted peak

    Only indices in [window_size, n - window_size) are candidates, so the
    edges with incomplete windows never produce a peak.  Selection is greedy
    left to right.
    """
    if hr_data is None or len(hr_data) == 0:
        return []

    hr = np.asarray(hr_data, dtype=float)
    times = np.asarray(time_data, dtype=float)
    n = len(hr)
    baseline = rolling_average(hr, rolling_half_window)

    peaks: list[HRPeak] = []
    for i in range(window_size, n - window_size):
        value = hr[i]
        if value <= baseline[i] + threshold_above_avg:
            continue

        lo = max(0, i - window_size)
        hi = min(n, i + window_size)
        if not np.all(hr[lo:hi] <= value):
            continue

        if peaks and times[i] - peaks[-1].time < min_peak_distance:
            continue

        peaks.append(HRPeak(
            index=i,
            time=float(times[i]),
            hr=float(value),
            avg_hr=float(baseline[i]),
        ))

    log.debug("Detected %d HR peaks in %d samples", len(peaks), n)
    return peaks


# ═══════════════════════════════════════════════════════════════════════════════
# C: WINDOW HR SUMMARY
# ═══════════════════════════════════════════════════════════════════════════════
def calculate_window_hr_stats(
    hr_data: Sequence[float],
    time_data: Sequence[float],
    start_time: float,
    end_time: float,
) -> dict:
    """{"avg_hr", "max_hr", "min_hr"} over samples with start ≤ t ≤ end (all None if empty)."""
    hr = np.asarray(hr_data, dtype=float)
    times = np.asarray(time_data, dtype=float)
    window = hr[(times >= start_time) & (times <= end_time)] if len(hr) else hr

    if window.size == 0:
        return {"avg_hr": None, "max_hr": None, "min_hr": None}

    return {
        "avg_hr": round_half_up(float(window.mean())),
        "max_hr": round_half_up(float(window.max())),
        "min_hr": round_half_up(float(window.min())),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# D: SET ↔ PEAK CORRELATION
# ═══════════════════════════════════════════════════════════════════════════════
def _peak_hr_data(peak: HRPeak, stream: HRStream, matched_by: str, half_window: float) -> dict:
    stats = calculate_window_hr_stats(
        stream.heartrate, stream.time,
        peak.time - half_window, peak.time + half_window,
    )
    return {"peak_hr": peak.hr, "peak_time": peak.time, **stats, "matched_by": matched_by}


def _has_timestamp(s: dict) -> bool:
    return s.get("timestamp") is not None


def _correlate_by_timestamp(
    sets: list[dict],
    peaks: list[HRPeak],
    stream: HRStream,
    tolerance: float,
    half_window: float,
) -> list[dict]:
    result = []
    for s in sets:
        if not _has_timestamp(s):
            result.append({**s, "hr_data": None})
            continue

        set_time = float(s["timestamp"])
        nearest: Optional[HRPeak] = None
        for peak in peaks:
            distance = abs(peak.time - set_time)
            if distance < tolerance and (nearest is None or distance < abs(nearest.time - set_time)):
                nearest = peak

        if nearest is None:
            result.append({**s, "hr_data": None})
        else:
            result.append({**s, "hr_data": _peak_hr_data(nearest, stream, MATCHED_BY_TIMESTAMP, half_window)})
    return result


def _correlate_by_position(
    sets: list[dict],
    peaks: list[HRPeak],
    stream: HRStream,
    workout_duration: float,
    min_ratio: float,
    max_ratio: float,
    half_window: float,
) -> list[dict]:
    total = len(sets)

    # roughly one peak per set → match by relative order
    if total * min_ratio <= len(peaks) <= total * max_ratio:
        result = []
        for i, s in enumerate(sets):
            peak = peaks[min(int(i / total * len(peaks)), len(peaks) - 1)]
            result.append({**s, "hr_data": _peak_hr_data(peak, stream, MATCHED_BY_POSITION, half_window)})
        return result

    segment = workout_duration / total
    result = []
    for i, s in enumerate(sets):
        seg_start = i * segment
        seg_end = (i + 1) * segment

        highest: Optional[HRPeak] = None
        for peak in peaks:
            if seg_start <= peak.time < seg_end and (highest is None or peak.hr > highest.hr):
                highest = peak

        if highest is not None:
            result.append({**s, "hr_data": _peak_hr_data(highest, stream, MATCHED_BY_SEGMENT, half_window)})
            continue

        stats = calculate_window_hr_stats(stream.heartrate, stream.time, seg_start, seg_end)
        hr_data = {**stats, "matched_by": MATCHED_BY_SEGMENT} if stats["avg_hr"] is not None else None
        result.append({**s, "hr_data": hr_data})
    return result


def correlate_sets_to_hr(
    sets: Sequence[dict],
    peaks: Sequence[HRPeak],
    stream: HRStream,
    workout_duration: Optional[float] = None,
    timestamp_tolerance: float = TIMESTAMP_MATCH_TOLERANCE_S,
    peak_half_window: float = PEAK_STATS_HALF_WINDOW_S,
    position_min_ratio: float = POSITION_MATCH_MIN_RATIO,
    position_max_ratio: float = POSITION_MATCH_MAX_RATIO,
) -> list[dict]:
    """
    Return copies of *sets* with an ``hr_data`` entry.

    Sets are plain mappings; an optional ``timestamp`` (s from start)
    switches to timestamp matching for the whole list.
    *workout_duration* defaults to the last stream timestamp.
    """
    sets = list(sets)
    peaks = list(peaks)

    if not peaks or not sets:
        return [{**s, "hr_data": None} for s in sets]

    if any(_has_timestamp(s) for s in sets):
        log.debug("Correlating %d sets by timestamp", len(sets))
        return _correlate_by_timestamp(sets, peaks, stream, timestamp_tolerance, peak_half_window)

    if workout_duration is None:
        workout_duration = float(stream.time[-1]) if len(stream.time) else 0.0

    return _correlate_by_position(
        sets, peaks, stream, workout_duration,
        position_min_ratio, position_max_ratio, peak_half_window,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# E: WHOLE-WORKOUT ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════
def flatten_sets(workout: Workout) -> list[dict]:
    """Every set of every exercise, in log order.

    A set past the end of the reps list takes the last recorded count, not
    the first, so ``reps`` here always agrees with the volume fallback in
    ``parse_exercise_row``.
    """
    all_sets: list[dict[str, Any]] = []
    for ex_index, ex in enumerate(workout.exercises):
        for set_index, weight in enumerate(ex.sets):
            all_sets.append({
                "exercise_name": ex.name,
                "exercise_index": ex_index,
                "set_index": set_index,
                "weight": weight,
                "reps": reps_for_index(ex.reps, set_index),
                "timestamp": ex.timestamps[set_index] if set_index < len(ex.timestamps) else None,
            })
    return all_sets


def analyze_workout_hr(
    workout: Workout,
    stream: Optional[HRStream],
    activity: Optional[dict] = None,
) -> Optional[WorkoutHRAnalysis]:
    if stream is None or len(stream.heartrate) == 0 or len(stream.time) == 0:
        return None

    hr = np.asarray(stream.heartrate, dtype=float)
    duration = float(stream.time[-1])

    peaks = detect_hr_peaks(stream.heartrate, stream.time)
    all_sets = flatten_sets(workout)
    correlated = correlate_sets_to_hr(all_sets, peaks, stream, workout_duration=duration)

    overall = {
        "avg_hr": round_half_up(float(hr.mean())),
        "max_hr": round_half_up(float(hr.max())),
        "min_hr": round_half_up(float(hr.min())),
        "duration": duration,
        "peaks_detected": len(peaks),
        "total_sets": len(all_sets),
    }
    log.info(
        "%s: %d sets, %d peaks, avg HR %d",
        workout.date, len(all_sets), len(peaks), overall["avg_hr"],
    )
    return WorkoutHRAnalysis(
        peaks=peaks,
        correlated_sets=correlated,
        overall_stats=overall,
        stream=stream,
        activity=dict(activity or {}),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# F: SYNTHETIC DEMO STREAM
# ═══════════════════════════════════════════════════════════════════════════════
def generate_demo_hr_stream(
    duration_minutes: int = 60,
    num_sets: int = 12,
    seed: Optional[int] = None,
) -> HRStream:
    """1 Hz warm-up → (set, peak, recovery) × num_sets → cool-down."""
    rng = np.random.default_rng(seed)
    total_seconds = duration_minutes * 60
    rest, peak = DEMO_REST_HR, DEMO_PEAK_HR

    hr: list[float] = []

    # warm-up: slow climb from rest
    for i in range(min(DEMO_WARMUP_SECONDS, total_seconds)):
        hr.append(rest + rng.random() * 10 + (i / DEMO_WARMUP_SECONDS) * 15)

    cooldown_start = total_seconds - DEMO_WARMUP_SECONDS
    set_index = 0
    while set_index < num_sets and len(hr) < cooldown_start:
        # set: linear ramp towards peak
        for i in range(DEMO_SET_SECONDS):
            progress = i / DEMO_SET_SECONDS
            value = rest + 20 + progress * (peak - rest - 20) + rng.random() * 8
            hr.append(min(peak + 10, value))
        # top of the set
        for _ in range(10):
            hr.append(peak + rng.random() * 15 - 5)
        # rest: exponential decay
        for i in range(DEMO_REST_SECONDS):
            if len(hr) >= cooldown_start:
                break
            decay = np.exp(-i / 30)
            hr.append(rest + 15 + decay * (peak - rest - 15) + rng.random() * 5)
        set_index += 1

    while len(hr) < total_seconds:
        remaining = total_seconds - len(hr)
        hr.append(max(rest - 5, rest + 10 * (remaining / DEMO_WARMUP_SECONDS) + rng.random() * 5))

    return HRStream(
        time=[float(t) for t in range(len(hr))],
        heartrate=[float(v) for v in hr],
        activity_id="demo",
    )

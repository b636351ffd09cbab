#!/usr/bin/env python3
"""
main.py – Lift Log Analytics · Central Entry Point
===================================================
Orchestrates the pipeline over an exported training log:

  1. PARSE   – Read date tabs → workouts  (workout_sources, exercise_parser)
  2. STATS   – Totals, personal records, volume by muscle  (workout_stats)
  3. HISTORY – Latest workout vs. previous session & trailing averages  (exercise_history)
  4. HR      – Match saved HR streams to sets  (hr_analysis)
  5. DEMO    – Same as HR but on a synthetic stream for the latest workout

Usage
-----
    python main.py                          # parse → stats → history
    python main.py stats                    # only stats (parse runs implicitly)
    python main.py hr --hr-dir data/hr      # correlate saved HR streams
    python main.py demo                     # HR analysis on a synthetic stream
    python main.py --workbook data/tabs     # directory of per-tab CSVs
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

# ── Project root on sys.path ─────────────────────────────────────────────────
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
for _p in (PROJECT_ROOT, SRC_DIR):
    if _p not in sys.path:
        sys.path.insert(0, _p)

import pandas as pd

from config.settings import (
    DATA_DIR, REPORTS_DIR, LOGS_DIR,
    WORKBOOK_PATH, CUSTOM_MAPPINGS_PATH, CUSTOM_MUSCLE_GROUPS_PATH, HR_STREAM_DIR,
    CSV_WORKOUTS, CSV_PERSONAL_RECORDS, CSV_MUSCLE_VOLUME,
    CSV_EXERCISE_HISTORY, CSV_SET_HR,
)

from exercise_history import calculate_change, calculate_exercise_history
from exercise_parser import format_date, format_number, sort_workouts_by_date
from hr_analysis import analyze_workout_hr, generate_demo_hr_stream
from workout_sources import (
    find_hr_stream_file, load_custom_mappings, load_custom_muscle_groups,
    load_hr_stream, load_training_log,
)
from workout_stats import (
    calculate_category_volume, calculate_muscle_volume, calculate_stats,
    muscle_volume_frame, personal_records_frame, workouts_to_frame,
)

# ── Logging ──────────────────────────────────────────────────────────────────
LOGS_DIR.mkdir(parents=True, exist_ok=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(LOGS_DIR / "main.log", encoding="utf-8"),
    ],
)
log = logging.getLogger("main")


# ═══════════════════════════════════════════════════════════════════════════════
# PIPELINE STEPS
# ═══════════════════════════════════════════════════════════════════════════════

def ensure_directories() -> None:
    """Create all required data directories if they don't exist."""
    for d in (DATA_DIR, REPORTS_DIR, LOGS_DIR):
        d.mkdir(parents=True, exist_ok=True)
    log.info("Directory structure verified.")


def _banner(title: str) -> None:
    log.info("=" * 60)
    log.info(title)
    log.info("=" * 60)


def _write_report(df: pd.DataFrame, name: str) -> None:
    out = REPORTS_DIR / name
    df.to_csv(out, index=False)
    log.info(f"  → {out}  ({len(df)} rows)")


def step_parse(ctx: dict) -> None:
    """Step 1 – Read the training log into workouts."""
    _banner("STEP 1 : PARSE – Training log → workouts")
    ctx["custom_mappings"] = load_custom_mappings(ctx["mappings_path"])
    if ctx["custom_mappings"]:
        log.info(f"Custom mappings: {len(ctx['custom_mappings'])}")
    ctx["custom_groups"] = load_custom_muscle_groups(ctx["muscle_groups_path"])
    workouts = load_training_log(ctx["workbook"], ctx["custom_mappings"])
    ctx["workouts"] = sort_workouts_by_date(workouts)
    _write_report(workouts_to_frame(ctx["workouts"]), CSV_WORKOUTS)


def step_stats(ctx: dict) -> None:
    """Step 2 – Totals, personal records and volume per muscle."""
    _banner("STEP 2 : STATS – Totals, PRs, muscle volume")
    workouts = ctx["workouts"]
    stats = calculate_stats(workouts)
    log.info(
        f"Workouts: {stats.total_workouts}  |  Exercises: {stats.total_exercises}  |  "
        f"Volume: {format_number(stats.total_volume)}  |  PRs: {stats.pr_count}"
    )
    _write_report(personal_records_frame(stats), CSV_PERSONAL_RECORDS)
    muscle_volume = calculate_muscle_volume(workouts)
    for category, volume in calculate_category_volume(muscle_volume, ctx["custom_groups"]).items():
        log.info(f"  {category:<12} {format_number(volume)}")
    _write_report(muscle_volume_frame(muscle_volume, ctx["custom_groups"]), CSV_MUSCLE_VOLUME)


def step_history(ctx: dict) -> None:
    """Step 3 – Compare the latest workout with earlier sessions."""
    _banner("STEP 3 : HISTORY – Latest workout vs. history")
    dated = [w for w in ctx["workouts"] if w.date_object is not None]
    if not dated:
        log.warning("No dated workouts – skipping history.")
        return

    latest = dated[0]
    log.info(f"Reference workout: {format_date(latest.date_object)}")
    rows = []
    for ex in latest.exercises:
        hist = calculate_exercise_history(ex.name, latest.date_object, ctx["workouts"])
        prev = hist.previous_session
        vs_prev = calculate_change(ex.volume, prev.volume if prev else None)
        vs_4wk = calculate_change(ex.volume, hist.four_week_avg.volume)
        rows.append({
            "exercise": ex.name,
            "volume": ex.volume,
            "max_weight": ex.max_weight,
            "previous_date": prev.date.date().isoformat() if prev else "",
            "previous_volume": prev.volume if prev else None,
            "vs_previous": vs_prev["display"],
            "one_week_avg_volume": hist.one_week_avg.volume,
            "two_week_avg_volume": hist.two_week_avg.volume,
            "four_week_avg_volume": hist.four_week_avg.volume,
            "vs_four_week": vs_4wk["display"],
            "all_time_avg_volume": hist.all_time_avg.volume,
            "all_time_sessions": hist.all_time_avg.sessions,
        })
    _write_report(pd.DataFrame(rows), CSV_EXERCISE_HISTORY)


def _set_rows(workout, analysis) -> list[dict]:
    rows = []
    for s in analysis.correlated_sets:
        hr_data = s["hr_data"] or {}
        rows.append({
            "date": workout.date,
            "exercise": s["exercise_name"],
            "set": s["set_index"] + 1,
            "weight": s["weight"],
            "reps": s["reps"],
            "peak_hr": hr_data.get("peak_hr"),
            "peak_time": hr_data.get("peak_time"),
            "avg_hr": hr_data.get("avg_hr"),
            "max_hr": hr_data.get("max_hr"),
            "min_hr": hr_data.get("min_hr"),
            "matched_by": hr_data.get("matched_by", ""),
        })
    return rows


def step_hr(ctx: dict) -> None:
    """Step 4 – Correlate saved HR streams with each workout's sets."""
    _banner("STEP 4 : HR – Peak detection & set correlation")
    rows = []
    for workout in ctx["workouts"]:
        path = find_hr_stream_file(ctx["hr_dir"], workout)
        if path is None:
            continue
        try:
            stream = load_hr_stream(path)
        except Exception as exc:
            log.error("Cannot read HR stream %s: %s", path, exc)
            continue
        analysis = analyze_workout_hr(workout, stream)
        if analysis is not None:
            rows.extend(_set_rows(workout, analysis))

    if not rows:
        log.warning(f"No HR streams matched in {ctx['hr_dir']}.")
        return
    _write_report(pd.DataFrame(rows), CSV_SET_HR)


def step_demo(ctx: dict) -> None:
    """Step 5 – HR analysis of the latest workout on a synthetic stream."""
    _banner("STEP 5 : DEMO – Synthetic HR stream")
    if not ctx["workouts"]:
        log.warning("No workouts – skipping demo.")
        return
    workout = ctx["workouts"][0]
    total_sets = sum(len(ex.sets) for ex in workout.exercises)
    stream = generate_demo_hr_stream(num_sets=max(total_sets, 1), seed=ctx["seed"])
    analysis = analyze_workout_hr(workout, stream, activity={"id": "demo", "name": "Demo Weight Training"})
    if analysis is None:
        return
    for key, value in analysis.overall_stats.items():
        log.info(f"  {key:<15} {value}")
    _write_report(pd.DataFrame(_set_rows(workout, analysis)), CSV_SET_HR)


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN
# ═══════════════════════════════════════════════════════════════════════════════

STEPS = {
    "parse": step_parse,
    "stats": step_stats,
    "history": step_history,
    "hr": step_hr,
    "demo": step_demo,
}
DEFAULT_STEPS = ["parse", "stats", "history"]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Lift Log Analytics – pipeline runner",
        epilog="Without arguments runs: parse → stats → history",
    )
    parser.add_argument(
        "steps",
        nargs="*",
        choices=list(STEPS.keys()),
        default=DEFAULT_STEPS,
        help="Pipeline step(s) to run (default: parse stats history)",
    )
    parser.add_argument("--workbook", default=str(WORKBOOK_PATH),
                        help="Exported .xlsx or directory of per-tab CSVs")
    parser.add_argument("--mappings", default=str(CUSTOM_MAPPINGS_PATH),
                        help="Custom exercise → muscle JSON (optional)")
    parser.add_argument("--muscle-groups", default=str(CUSTOM_MUSCLE_GROUPS_PATH),
                        help="Custom muscle groups JSON (optional)")
    parser.add_argument("--hr-dir", default=str(HR_STREAM_DIR),
                        help="Directory of per-workout HR streams (.fit / .csv)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for the demo HR stream")
    args = parser.parse_args()

    # parse is a prerequisite for every other step
    steps = list(dict.fromkeys(["parse", *args.steps]))

    log.info("Lift Log Analytics  ·  Pipeline Start")
    log.info(f"Steps: {', '.join(steps)}")

    ensure_directories()

    ctx = {
        "workbook": args.workbook,
        "mappings_path": args.mappings,
        "muscle_groups_path": args.muscle_groups,
        "hr_dir": args.hr_dir,
        "seed": args.seed,
        "workouts": [],
        "custom_groups": [],
    }

    t0 = time.time()
    try:
        for name in steps:
            STEPS[name](ctx)
    except (FileNotFoundError, ValueError) as exc:
        log.error(str(exc))
        sys.exit(1)
    elapsed = time.time() - t0

    log.info("=" * 60)
    log.info(f"Pipeline finished in {elapsed:.1f} s")
    log.info("=" * 60)


if __name__ == "__main__":
    main()

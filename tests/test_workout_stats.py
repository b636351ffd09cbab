from conftest import SAMPLE_EXERCISE_COUNT, SAMPLE_TOTAL_VOLUME, make_workout
from exercise_parser import Exercise, Workout
from muscle_mapping import create_custom_muscle_group
from workout_stats import (
    calculate_category_volume,
    calculate_muscle_volume,
    calculate_stats,
    muscle_volume_frame,
    personal_records_frame,
    round_half_up,
    workouts_to_frame,
)


def _workout(date, *exercises):
    w = Workout(date=date, date_object=None, exercises=list(exercises))
    w.total_volume = sum(e.volume for e in exercises)
    w.exercise_count = len(exercises)
    return w


def _ex(name, max_weight=0.0, volume=0.0, muscles=()):
    return Exercise(name=name, sets=[], reps=[], max_weight=max_weight, volume=volume,
                    muscle_groups=list(muscles))


def test_stats_on_sample(sample_workout):
    stats = calculate_stats([sample_workout])
    assert stats.total_workouts == 1
    assert stats.total_exercises == SAMPLE_EXERCISE_COUNT
    assert stats.total_volume == SAMPLE_TOTAL_VOLUME
    assert stats.pr_count == len(stats.personal_records) == SAMPLE_EXERCISE_COUNT
    seated = next(pr for pr in stats.personal_records if "seated row" in pr.name.lower())
    assert seated.weight == 220


def test_best_pr_across_workouts():
    w1 = make_workout("1/28/2026", ("Bench Press", "135,155", "155", "10,8", "2590"))
    w2 = make_workout("1/29/2026", ("Bench Press", "145,165,185", "185", "8,6,4", "3060"))
    stats = calculate_stats([w1, w2])
    bench = next(pr for pr in stats.personal_records if pr.name == "Bench Press")
    assert bench.weight == 185
    assert bench.date == "1/29/2026"


def test_pr_tie_keeps_first_and_name_is_case_insensitive():
    stats = calculate_stats([
        _workout("1/1/2026", _ex("Squat", 200)),
        _workout("1/2/2026", _ex("SQUAT", 200)),
    ])
    assert stats.pr_count == 1
    assert stats.personal_records[0].date == "1/1/2026"
    assert stats.personal_records[0].name == "Squat"


def test_zero_weight_excluded_from_records():
    stats = calculate_stats([_workout("1/1/2026", _ex("Plank", 0, 0), _ex("Squat", 100, 500))])
    assert [pr.name for pr in stats.personal_records] == ["Squat"]
    assert stats.pr_count == 1


def test_empty_stats():
    stats = calculate_stats([])
    assert stats.total_workouts == 0
    assert stats.total_volume == 0
    assert stats.personal_records == []


def test_muscle_volume_split_evenly():
    w = _workout("1/1/2026",
                 _ex("Bench", 100, 300, ["mid_chest", "front_delt", "triceps"]),
                 _ex("Pushdown", 50, 100, ["triceps"]),
                 _ex("Farmer walk", 100, 1000))
    mv = calculate_muscle_volume([w])
    assert mv["mid_chest"] == {"volume": 100, "exercises": ["Bench"]}
    assert mv["triceps"] == {"volume": 200, "exercises": ["Bench", "Pushdown"]}
    # unattributed volume appears in no bucket
    assert sum(d["volume"] for d in mv.values()) == 400


def test_muscle_volume_rounded_at_output_only():
    w1 = _workout("1/1/2026", _ex("A", 1, 1, ["x", "y"]))
    w2 = _workout("1/2/2026", _ex("A", 1, 1, ["x", "y"]))
    assert calculate_muscle_volume([w1])["x"]["volume"] == 1   # 0.5 rounds up
    assert calculate_muscle_volume([w1, w2])["x"]["volume"] == 1
    assert calculate_muscle_volume([w1, w2])["x"]["exercises"] == ["A"]


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(-0.5) == 0


def test_frames(sample_workout):
    df = workouts_to_frame([sample_workout])
    assert len(df) == SAMPLE_EXERCISE_COUNT
    assert df.loc[0, "exercise"] == "Cable shoulder press"
    assert df.loc[0, "sets"] == "100, 100"
    assert df.loc[0, "date_iso"] == "2026-01-29"

    prs = personal_records_frame(calculate_stats([sample_workout]))
    assert prs.loc[0, "exercise"] == "Div. Seated row"

    mv = muscle_volume_frame(calculate_muscle_volume([sample_workout]))
    assert list(mv.columns) == ["muscle", "display_name", "category", "color", "volume", "exercises"]
    assert mv["volume"].is_monotonic_decreasing


def test_muscle_volume_frame_uses_custom_groups():
    neck = create_custom_muscle_group("Neck", "#123456")
    w = _workout("1/1/2026", _ex("Shrug", 100, 300, ["traps", "neck", "grip_x"]))
    mv = muscle_volume_frame(calculate_muscle_volume([w]), [neck]).set_index("muscle")
    assert mv.loc["neck", "display_name"] == "Neck"
    assert mv.loc["neck", "color"] == "#123456"
    assert mv.loc["neck", "category"] == "Custom"
    assert mv.loc["traps", "category"] == "Back"
    assert mv.loc["grip_x", "display_name"] == "Grip X"
    assert mv.loc["grip_x", "color"] == "#6366f1"


def test_category_volume():
    neck = create_custom_muscle_group("Neck", "#123456")
    w = _workout("1/1/2026",
                 _ex("Bench", 100, 300, ["mid_chest", "front_delt", "triceps"]),
                 _ex("Neck curl", 10, 50, ["neck"]))
    totals = calculate_category_volume(calculate_muscle_volume([w]), [neck])
    assert totals == {"Chest": 100, "Shoulders": 100, "Arms": 100, "Custom": 50}

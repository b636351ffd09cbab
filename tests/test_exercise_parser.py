from datetime import datetime

import pytest

from conftest import (
    HEADER, SAMPLE_EXERCISE_COUNT, SAMPLE_SHEET, SAMPLE_TOTAL_VOLUME, make_workout,
)
from exercise_parser import (
    filter_workouts_by_date_range,
    format_date,
    format_number,
    parse_comma_separated,
    parse_date_string,
    parse_exercise_row,
    parse_worksheet,
    sort_workouts_by_date,
)


# ── parse_comma_separated ─────────────────────────────────────────────────────

def test_comma_separated_simple():
    assert parse_comma_separated("100,100") == [100, 100]


def test_comma_separated_spaces():
    assert parse_comma_separated("65, 90, 90") == [65, 90, 90]


def test_comma_separated_trailing_comma_dropped():
    assert parse_comma_separated("8,8,8,") == [8, 8, 8]


def test_comma_separated_drops_non_numeric_keeps_order():
    assert parse_comma_separated("100, abc, 200") == [100, 200]


def test_comma_separated_empty_or_missing():
    assert parse_comma_separated("") == []
    assert parse_comma_separated(None) == []


def test_comma_separated_leading_number_with_unit():
    assert parse_comma_separated("135lb, 2.5") == [135, 2.5]


# ── parse_date_string ─────────────────────────────────────────────────────────

def test_date_four_digit_year():
    assert parse_date_string("1/29/2026") == datetime(2026, 1, 29)


def test_date_two_digit_years():
    assert parse_date_string("12/25/24").year == 2024
    assert parse_date_string("12/25/99").year == 1999
    assert parse_date_string("12/25/50").year == 2050
    assert parse_date_string("12/25/51").year == 1951


@pytest.mark.parametrize("label", ["invalid", "", None, "1/29", "1/29/2026/1", "a/b/c", "13/45/2026",
                                   "1_2/1/2026", "+1/2/2026"])
def test_date_invalid_is_none(label):
    assert parse_date_string(label) is None


# ── parse_exercise_row ────────────────────────────────────────────────────────

def test_row_complete():
    ex = parse_exercise_row(["Cable shoulder press", "100,100", "100", "10,10", "2000"])
    assert ex.name == "Cable shoulder press"
    assert ex.sets == [100, 100]
    assert ex.max_weight == 100
    assert ex.reps == [10, 10]
    assert ex.volume == 2000
    assert ex.muscle_groups == ["front_delt", "middle_delt", "triceps"]


def test_row_header_rejected():
    assert parse_exercise_row(HEADER) is None
    assert parse_exercise_row(["Exercises (Day B)", "1", "1", "1", "1"]) is None


@pytest.mark.parametrize("name", ["", "   ", None])
def test_row_blank_name_rejected(name):
    assert parse_exercise_row([name, "100", "100", "10", "1000"]) is None


def test_row_placeholder_rejected():
    assert parse_exercise_row(["Pec fly", "", "", "", ""]) is None
    assert parse_exercise_row(["Pec fly"]) is None


def test_row_volume_inferred_when_missing():
    ex = parse_exercise_row(["Leg curl", "125,125, 120, 120", "125", "8,8,8,8", ""])
    assert ex.volume == 125 * 8 + 125 * 8 + 120 * 8 + 120 * 8


def test_row_volume_inference_repeats_last_rep_count():
    ex = parse_exercise_row(["Leg curl", "100,100,100", "100", "10,8,", ""])
    assert ex.reps == [10, 8]
    assert ex.volume == 100 * 10 + 100 * 8 + 100 * 8


def test_row_supplied_volume_wins_even_when_inconsistent():
    ex = parse_exercise_row(["Div. Seated row", "200,210,210,220", "220", "8,8, 8, 8", "1"])
    assert ex.volume == 1


def test_row_max_only_kept_with_zero_volume():
    ex = parse_exercise_row(["Con. Chest press", "", "50", "", ""])
    assert ex.sets == []
    assert ex.max_weight == 50
    assert ex.volume == 0


def test_row_numeric_cells_from_workbook():
    ex = parse_exercise_row(["Squat", 225.0, 225.0, 5, float("nan")])
    assert ex.sets == [225]
    assert ex.volume == 225 * 5


def test_row_custom_mapping_applied():
    ex = parse_exercise_row(["Leg curl", "100", "100", "10", ""], {"leg curl": ["x"]})
    assert ex.muscle_groups == ["x"]


# ── parse_worksheet ───────────────────────────────────────────────────────────

def test_worksheet_sample(sample_workout):
    assert sample_workout.date == SAMPLE_SHEET
    assert sample_workout.date_object == datetime(2026, 1, 29)
    assert sample_workout.exercise_count == SAMPLE_EXERCISE_COUNT
    assert sample_workout.total_volume == SAMPLE_TOTAL_VOLUME


def test_worksheet_skips_placeholders(sample_workout):
    names = [e.name for e in sample_workout.exercises]
    assert "Pec fly" not in names
    assert "Leg press" not in names
    assert "Barbell chest press" not in names
    assert names[0] == "Cable shoulder press"


def test_worksheet_total_is_sum_of_exercises(sample_workout):
    assert sample_workout.total_volume == sum(e.volume for e in sample_workout.exercises)
    assert sample_workout.exercise_count == len(sample_workout.exercises)


def test_worksheet_first_row_always_skipped():
    w = parse_worksheet("1/1/2026", [["Squat", "100", "100", "5", "500"], ["Bench", "100", "100", "5", "500"]])
    assert [e.name for e in w.exercises] == ["Bench"]


def test_worksheet_bad_label_keeps_workout():
    w = parse_worksheet("Template", [HEADER, ["Squat", "100", "100", "5", "500"]])
    assert w.date_object is None
    assert w.exercise_count == 1


# ── ordering / filtering / display ────────────────────────────────────────────

def test_sort_newest_first_undated_last():
    a = make_workout("1/20/2026", ("Squat", "100", "100", "5", ""))
    b = make_workout("Notes", ("Squat", "100", "100", "5", ""))
    c = make_workout("1/28/2026", ("Squat", "100", "100", "5", ""))
    assert [w.date for w in sort_workouts_by_date([a, b, c])] == ["1/28/2026", "1/20/2026", "Notes"]


def test_filter_by_date_range():
    now = datetime(2026, 1, 30)
    a = make_workout("1/20/2026", ("Squat", "100", "100", "5", ""))
    b = make_workout("Notes", ("Squat", "100", "100", "5", ""))
    c = make_workout("1/28/2026", ("Squat", "100", "100", "5", ""))
    assert filter_workouts_by_date_range([a, b, c], 7, now=now) == [c]
    assert filter_workouts_by_date_range([a, b, c], 0, now=now) == [a, b, c]
    assert filter_workouts_by_date_range([a, b, c], "all") == [a, b, c]


def test_format_helpers():
    assert format_date(datetime(2026, 1, 29)) == "Thu, Jan 29, 2026"
    assert format_date(None) == ""
    assert format_number(21920.0) == "21,920"
    assert format_number(1234.5) == "1,234.5"

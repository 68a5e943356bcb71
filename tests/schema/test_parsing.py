"""Tests for reading and writing PWF documents."""

import pytest
import yaml

from pwf.schema.common import Modality, Sport, normalize_sport, parse_sport
from pwf.schema.history import PoolConfig, PoolLengthUnit, SwimmingLength, SwimmingSetData, TimeSeriesData
from pwf.schema.parsing import DocumentParseError, dump_document, parse_history, parse_plan


def test_parse_plan_reads_cycle(minimal_plan_yaml: str):
    """Test that a minimal plan parses into days and exercises."""
    plan = parse_plan(minimal_plan_yaml)

    assert plan.plan_version == 1
    assert plan.meta is None
    assert len(plan.cycle.days) == 1
    exercise = plan.cycle.days[0].exercises[0]
    assert exercise.name == "Push-ups"
    assert exercise.modality == Modality.STRENGTH


def test_parse_plan_accepts_camel_case_meta_aliases():
    """Test that daysPerWeek and recommendedFirst populate the snake_case fields."""
    plan = parse_plan(
        "plan_version: 1\n"
        "meta:\n  title: Block\n  daysPerWeek: 4\n  recommendedFirst: true\n"
        "cycle:\n  days:\n    - exercises:\n        - name: Row\n          modality: stopwatch\n"
    )

    assert plan.meta.days_per_week == 4
    assert plan.meta.recommended_first is True


def test_parse_plan_rejects_non_mapping():
    """Test that a YAML list is not accepted as a plan."""
    with pytest.raises(DocumentParseError, match="must be a YAML mapping"):
        parse_plan("- a\n- b\n")


def test_parse_plan_reports_yaml_syntax_error():
    """Test that malformed YAML raises a parse error mentioning YAML syntax."""
    with pytest.raises(DocumentParseError, match="YAML syntax error"):
        parse_plan("plan_version: [1\n")


def test_parse_history_requires_version():
    """Test that a history without history_version names the missing field."""
    with pytest.raises(DocumentParseError, match="Missing required field: history_version"):
        parse_history("exported_at: '2025-01-01T00:00:00Z'\nworkouts: []\n")


def test_parse_history_normalizes_sport_spellings():
    """Test that sport values are case-insensitive and accept aliases."""
    history = parse_history(
        "history_version: 1\nexported_at: '2025-01-01T00:00:00Z'\n"
        "workouts:\n"
        "  - date: '2025-01-01'\n    sport: Strength_Training\n    exercises: []\n"
        "  - date: '2025-01-02'\n    sport: CrossFit\n    exercises: []\n"
    )

    assert history.workouts[0].sport == Sport.STRENGTH_TRAINING
    assert history.workouts[1].sport == Sport.FUNCTIONAL_FITNESS


def test_dump_document_omits_absent_values(strength_history_yaml: str):
    """Test that serialization drops None fields and keeps the canonical spellings."""
    history = parse_history(strength_history_yaml)

    data = yaml.safe_load(dump_document(history))

    first_set = data["workouts"][0]["exercises"][0]["sets"][0]
    assert first_set == {"set_number": 1, "reps": 5, "weight_kg": 100.0}
    assert data["workouts"][0]["sport"] == "strength-training"
    assert "personal_records" not in data


def test_dump_document_round_trips(multisport_history_yaml: str):
    """Test that dumping and re-parsing preserves the document."""
    history = parse_history(multisport_history_yaml)

    assert parse_history(dump_document(history)) == history


def test_parse_sport_falls_back_to_other():
    """Test that unknown sport names map to other."""
    assert parse_sport("underwater-hockey") == Sport.OTHER
    assert parse_sport(None) == Sport.OTHER
    assert parse_sport("Run") == Sport.RUNNING


def test_normalize_sport_uses_kebab_case():
    """Test that spaces and underscores become hyphens."""
    assert normalize_sport("Cross Country_Skiing") == "cross-country-skiing"


def test_sport_display_name():
    """Test that display names are title cased words."""
    assert Sport.STAND_UP_PADDLING.display_name == "Stand Up Paddling"


def test_swolf_uses_whole_seconds():
    """Test that SWOLF adds strokes to the floored length duration."""
    length = SwimmingLength(length_number=1, duration_sec=45.9, stroke_count=30)

    assert length.calculate_swolf() == 75


def test_average_swolf_is_floored():
    """Test that the set average SWOLF is the floor of the mean."""
    swimming = SwimmingSetData(
        lengths=[
            SwimmingLength(length_number=1, duration_sec=45, stroke_count=30),
            SwimmingLength(length_number=2, duration_sec=50, stroke_count=32),
        ]
    )

    assert swimming.calculate_avg_swolf() == 78


def test_active_lengths_count_unknown_as_active():
    """Test that only lengths explicitly marked inactive are excluded."""
    swimming = SwimmingSetData(
        lengths=[
            SwimmingLength(length_number=1, duration_sec=40, active=True),
            SwimmingLength(length_number=2, duration_sec=20, active=False),
            SwimmingLength(length_number=3, duration_sec=41),
        ]
    )

    assert swimming.count_active_lengths() == 2


def test_pool_length_in_meters_converts_yards():
    """Test that a 25 yard pool is reported in meters."""
    pool = PoolConfig(pool_length=25, pool_length_unit=PoolLengthUnit.YARDS)

    assert pool.length_in_meters() == pytest.approx(22.86)


def test_time_series_length_mismatches():
    """Test that every array shorter or longer than timestamps is described."""
    series = TimeSeriesData(
        timestamps=["t0", "t1", "t2"],
        heart_rate=[120, 121],
        power=[200, 210, 220],
    )

    assert series.length_mismatches() == ["heart_rate length (2) doesn't match timestamps length (3)"]
    with pytest.raises(ValueError, match="heart_rate length"):
        series.validate_lengths()


def test_unquoted_history_dates_stay_strings():
    """Test that bare YAML dates and timestamps are read as the text written."""
    history = parse_history(
        "history_version: 1\n"
        "exported_at: 2025-01-15T10:30:00Z\n"
        "workouts:\n"
        "  - date: 2025-01-15\n    exercises: []\n"
        "personal_records:\n"
        "  - exercise_name: Squat\n    record_type: 1rm\n    value: 140\n    achieved_at: 2025-01-10\n"
    )

    assert history.exported_at == "2025-01-15T10:30:00Z"
    assert history.workouts[0].date == "2025-01-15"
    assert history.personal_records[0].achieved_at == "2025-01-10"


def test_unquoted_plan_timestamps_stay_strings():
    """Test that bare activated_at and completed_at values parse into plan meta."""
    plan = parse_plan(
        "plan_version: 1\n"
        "meta:\n  title: Block\n  activated_at: 2025-01-15T10:30:00Z\n  completed_at: 2025-02-15T10:30:00+01:00\n"
        "cycle:\n  days:\n    - exercises:\n        - name: Row\n          modality: stopwatch\n"
    )

    assert plan.meta.activated_at == "2025-01-15T10:30:00Z"
    assert plan.meta.completed_at == "2025-02-15T10:30:00+01:00"

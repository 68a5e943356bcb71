"""Tests for TCX to PWF history conversion."""

import pytest

from pwf.converters.errors import DataQualityIssue, TcxReadError
from pwf.converters.tcx import tcx_to_pwf
from pwf.converters.tcx.mappings import map_pwf_sport_to_tcx, map_tcx_sport
from pwf.schema.common import Modality, Sport
from pwf.schema.parsing import parse_history
from pwf.validation import validate_history

EMPTY_TCX = b"""<?xml version="1.0"?>
<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2">
  <Activities/>
</TrainingCenterDatabase>
"""


def test_activity_becomes_workout(tcx_bytes: bytes):
    """Test workout-level fields of a converted activity."""
    result = tcx_to_pwf(tcx_bytes)
    history = parse_history(result.pwf_yaml)

    assert result.warnings == []
    assert history.history_version == 2
    assert history.exported_at == "2025-03-01T08:00:00Z"
    assert history.export_source.platform == "TCX file (Forerunner 265)"

    workout = history.workouts[0]
    assert workout.sport == Sport.RUNNING
    assert workout.title == "Running Workout"
    assert workout.date == "2025-03-01"
    assert workout.duration_sec == 240
    assert workout.ended_at == "2025-03-01T08:04:00Z"
    assert workout.notes == "Easy shakeout"


def test_laps_become_stopwatch_exercises(tcx_bytes: bytes):
    """Test that each lap is one exercise with a single set."""
    workout = parse_history(tcx_to_pwf(tcx_bytes).pwf_yaml).workouts[0]

    assert [e.name for e in workout.exercises] == ["Lap 1", "Lap 2"]
    assert all(e.modality == Modality.STOPWATCH for e in workout.exercises)

    first_set = workout.exercises[0].sets[0]
    assert first_set.set_number == 1
    assert first_set.duration_sec == 120
    assert first_set.distance_meters == 400
    assert first_set.completed_at == "2025-03-01T08:02:00Z"
    assert first_set.telemetry.speed_max_mps == 3.8
    assert first_set.telemetry.calories == 30


def test_workout_telemetry_aggregates_laps(tcx_bytes: bytes):
    """Test heart rate, calories, distance and cadence totals."""
    telemetry = parse_history(tcx_to_pwf(tcx_bytes).pwf_yaml).workouts[0].telemetry

    assert telemetry.heart_rate_avg == 145
    assert telemetry.heart_rate_max == 160
    assert telemetry.total_calories == 62
    assert telemetry.total_distance_km == pytest.approx(0.82)
    assert telemetry.cadence_avg == 86


def test_trackpoints_fill_route_and_time_series(tcx_bytes: bytes):
    """Test the GPS route and the first lap's time series."""
    workout = parse_history(tcx_to_pwf(tcx_bytes).pwf_yaml).workouts[0]

    route = workout.telemetry.gps_route
    assert route.route_id == "route-20250301080000"
    assert route.recording_mode == "every_second"
    assert len(route.positions) == 3
    assert route.total_distance_m == 820
    assert route.total_ascent_m == pytest.approx(2.0)
    assert route.total_descent_m == pytest.approx(1.0)
    assert route.positions[1].speed_mps == 3.4

    series = workout.exercises[0].sets[0].telemetry.time_series
    assert series.elapsed_sec == [0, 60, 120]
    assert series.heart_rate == [130, 150, 158]
    assert series.cadence == [84, 86, 88]
    assert series.latitude == [52.52, 52.521, 52.522]
    assert workout.exercises[1].sets[0].telemetry.time_series is None


def test_converted_history_validates(tcx_bytes: bytes):
    """Test that the converted document passes history validation."""
    assert validate_history(tcx_to_pwf(tcx_bytes).pwf_yaml).valid


def test_summary_only_drops_route_and_series(tcx_bytes: bytes):
    """Test that summary-only conversion keeps lap aggregates."""
    history = parse_history(tcx_to_pwf(tcx_bytes, summary_only=True).pwf_yaml)

    workout = history.workouts[0]
    assert history.history_version == 2
    assert workout.telemetry.gps_route is None
    assert workout.telemetry.heart_rate_max == 160
    assert workout.exercises[0].sets[0].telemetry.time_series is None


def test_summary_only_history_validates(tcx_bytes: bytes):
    """Test that lap telemetry kept in summary-only mode is declared as version 2."""
    result = validate_history(tcx_to_pwf(tcx_bytes, summary_only=True).pwf_yaml)

    assert result.valid
    assert result.errors == []


def test_non_finite_numbers_are_dropped(tcx_bytes: bytes):
    """Test that NaN and infinite values are treated as missing."""
    data = tcx_bytes.replace(b"<Calories>30</Calories>", b"<Calories>NaN</Calories>").replace(
        b"<MaximumSpeed>3.8</MaximumSpeed>", b"<MaximumSpeed>inf</MaximumSpeed>"
    )

    result = tcx_to_pwf(data)
    workout = parse_history(result.pwf_yaml).workouts[0]

    first_set = workout.exercises[0].sets[0]
    assert first_set.telemetry.calories is None
    assert first_set.telemetry.speed_max_mps is None
    assert workout.telemetry.total_calories == 32
    assert validate_history(result.pwf_yaml).valid


def test_null_island_trackpoints_are_dropped(tcx_bytes: bytes):
    """Test that (0, 0) positions stay out of the route and the coordinate series."""
    data = tcx_bytes.replace(
        b"<LatitudeDegrees>52.52</LatitudeDegrees><LongitudeDegrees>13.405</LongitudeDegrees>",
        b"<LatitudeDegrees>0.0</LatitudeDegrees><LongitudeDegrees>0.0</LongitudeDegrees>",
    )

    workout = parse_history(tcx_to_pwf(data).pwf_yaml).workouts[0]

    positions = workout.telemetry.gps_route.positions
    assert [p.latitude_deg for p in positions] == [52.521, 52.522]
    series = workout.exercises[0].sets[0].telemetry.time_series
    assert series.latitude is None
    assert series.heart_rate == [130, 150, 158]


def test_no_activities_warns():
    """Test that a file without activities yields an empty history and a warning."""
    result = tcx_to_pwf(EMPTY_TCX)

    assert parse_history(result.pwf_yaml).workouts == []
    assert result.warnings == [DataQualityIssue(issue="No activities found in TCX file")]
    assert result.has_warnings()


def test_activity_without_start_is_reported():
    """Test that an activity with neither Id nor lap StartTime is skipped with a warning."""
    data = EMPTY_TCX.replace(b"<Activities/>", b'<Activities><Activity Sport="Biking"/></Activities>')

    result = tcx_to_pwf(data)

    assert parse_history(result.pwf_yaml).workouts == []
    assert "Failed to convert activity" in str(result.warnings[0])


def test_malformed_xml_raises():
    """Test that broken XML raises TcxReadError."""
    with pytest.raises(TcxReadError, match="Failed to parse TCX"):
        tcx_to_pwf(b"<TrainingCenterDatabase><Activities>")


@pytest.mark.parametrize(
    ("name", "sport"),
    [
        ("Running", Sport.RUNNING),
        ("biking", Sport.CYCLING),
        ("StrengthTraining", Sport.STRENGTH_TRAINING),
        ("Other", Sport.OTHER),
        (None, Sport.OTHER),
    ],
)
def test_map_tcx_sport(name, sport: Sport):
    """Test TCX sport attribute mapping."""
    assert map_tcx_sport(name) == sport


def test_map_pwf_sport_to_tcx():
    """Test that only running and cycling have their own TCX sport."""
    assert map_pwf_sport_to_tcx(Sport.RUNNING) == "Running"
    assert map_pwf_sport_to_tcx(Sport.CYCLING) == "Biking"
    assert map_pwf_sport_to_tcx(Sport.SWIMMING) == "Other"

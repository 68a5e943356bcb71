"""Tests for PWF history to GPX export."""

from datetime import datetime, timezone

import gpxpy

from pwf.converters.errors import DataQualityIssue, MissingField
from pwf.converters.gpx import gpx_to_pwf, pwf_to_gpx
from pwf.schema.common import Sport
from pwf.schema.history import History
from pwf.schema.parsing import parse_history


def test_route_becomes_track(gps_history: History):
    """Test that a workout route is written as one named track."""
    result = pwf_to_gpx(gps_history)
    gpx = gpxpy.parse(result.gpx_xml)

    assert gpx.creator == "PWF Converters"
    assert len(gpx.tracks) == 1
    track = gpx.tracks[0]
    assert track.name == "Tempo Run"
    assert track.type == "running"
    assert track.description == "Felt good & strong"

    points = track.segments[0].points
    assert len(points) == 2
    assert points[0].latitude == 40.0
    assert points[1].elevation == 1604.0
    assert points[1].time == datetime(2025, 5, 10, 7, 0, 30, tzinfo=timezone.utc)


def test_dropped_heart_rate_is_reported(gps_history: History):
    """Test that heart rate on positions is reported as dropped."""
    result = pwf_to_gpx(gps_history)

    assert [w.source_field for w in result.warnings if isinstance(w, MissingField)] == ["heart_rate_bpm"]


def test_workouts_without_routes_warn(strength_history_yaml: str):
    """Test warnings when no workout has GPS data."""
    result = pwf_to_gpx(parse_history(strength_history_yaml))

    assert len(gpxpy.parse(result.gpx_xml).tracks) == 0
    assert [str(w) for w in result.warnings] == [
        "Missing field 'telemetry': Workout 'Push Day' has no telemetry data",
        "Missing field 'telemetry': Workout 'Push Day' has no telemetry data",
        "Data quality issue: No GPS routes found in any workouts",
    ]


def test_workout_with_telemetry_but_no_route(gps_history: History):
    """Test the warning for telemetry without a GPS route."""
    gps_history.workouts[0].telemetry.gps_route = None

    result = pwf_to_gpx(gps_history)

    assert result.warnings[0] == MissingField(
        source_field="gps_route", reason="Workout 'Tempo Run' has no GPS route data"
    )
    assert result.warnings[-1] == DataQualityIssue(issue="No GPS routes found in any workouts")


def test_exported_gpx_imports_back(gps_history: History):
    """Test that the exported track converts back to the same sport and points."""
    result = gpx_to_pwf(pwf_to_gpx(gps_history).gpx_xml.encode("utf-8"))
    workout = parse_history(result.pwf_yaml).workouts[0]

    assert workout.sport == Sport.RUNNING
    assert workout.title == "Tempo Run"
    assert workout.duration_sec == 30
    assert len(workout.telemetry.gps_route.positions) == 2

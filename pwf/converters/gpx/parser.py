"""GPX track to PWF history conversion."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import gpxpy
import gpxpy.gpx
from loguru import logger

from pwf.converters.base import new_history, serialize_history
from pwf.converters.errors import (
    ConversionError,
    ConversionResult,
    DataQualityIssue,
    GpxReadError,
    InvalidGpxDataError,
    UnsupportedFeature,
)
from pwf.converters.gpx.mappings import infer_track_sport
from pwf.converters.utils import (
    build_route,
    choose_history_version,
    derive_exported_at,
    haversine_m,
    to_iso8601,
)
from pwf.schema.common import Modality
from pwf.schema.history import (
    CompletedExercise,
    CompletedSet,
    GpsPosition,
    SetTelemetry,
    TimeSeriesData,
    Workout,
    WorkoutTelemetry,
)

MAX_IMPLIED_SPEED_MPS = 200.0
IMPLIED_SPEED_WINDOW_SEC = 60.0
FALLBACK_DATE = "1970-01-01"


class _Point:
    """A track point with its Garmin TrackPointExtension values."""

    def __init__(self, point: gpxpy.gpx.GPXTrackPoint) -> None:
        self.latitude = point.latitude
        self.longitude = point.longitude
        self.elevation = point.elevation
        self.time = _as_utc(point.time) if point.time else None
        self.heart_rate: int | None = None
        self.cadence: int | None = None
        for extension in point.extensions:
            for element in extension.iter():
                tag = element.tag.rsplit("}", 1)[-1]
                if tag == "hr":
                    self.heart_rate = _to_int(element.text)
                elif tag == "cad":
                    self.cadence = _to_int(element.text)

    @property
    def timestamp(self) -> str | None:
        return to_iso8601(self.time) if self.time else None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _to_int(text: str | None) -> int | None:
    if not text:
        return None
    try:
        return int(round(float(text.strip())))
    except ValueError:
        return None


def gpx_to_pwf(data: bytes, summary_only: bool = False) -> ConversionResult:
    """Convert a GPX file into PWF history YAML.

    Every track becomes a workout holding one "GPS Activity" exercise.

    Args:
        data: Raw GPX file bytes
        summary_only: Skip the GPS route and time series, keeping aggregates

    Returns:
        ConversionResult with the YAML document and conversion warnings

    Raises:
        GpxReadError: If the XML cannot be parsed as GPX
        InvalidGpxDataError: If the file holds no convertible track
    """
    try:
        gpx = gpxpy.parse(data.decode("utf-8-sig"))
    except (gpxpy.gpx.GPXException, UnicodeDecodeError) as e:
        raise GpxReadError(f"Failed to parse GPX file: {e}") from e

    warnings: list = []
    workouts: list[Workout] = []
    for track_idx, track in enumerate(gpx.tracks):
        try:
            workouts.append(_convert_track(track_idx, track, gpx, summary_only, warnings))
        except ConversionError as e:
            warnings.append(DataQualityIssue(issue=f"Failed to convert track {track_idx}: {e}"))

    if not workouts:
        if gpx.routes:
            warnings.append(UnsupportedFeature(feature="GPX routes are not fully supported. Use tracks instead."))
        if gpx.waypoints:
            warnings.append(
                UnsupportedFeature(
                    feature="GPX file contains only waypoints. Waypoint-only files cannot be converted to workouts."
                )
            )
        for warning in warnings:
            logger.warning(str(warning))
        raise InvalidGpxDataError("No valid tracks found in GPX file")

    history = new_history(f"GPX Import ({gpx.creator or 'Unknown'})")
    history.workouts = workouts
    history.history_version = choose_history_version(history)
    history.exported_at = derive_exported_at(history)
    logger.info(f"Converted GPX file: {len(workouts)} track(s), {len(warnings)} warning(s)")
    return ConversionResult(pwf_yaml=serialize_history(history), warnings=warnings)


def _convert_track(
    track_idx: int,
    track: gpxpy.gpx.GPXTrack,
    gpx: gpxpy.gpx.GPX,
    summary_only: bool,
    warnings: list,
) -> Workout:
    points = [_Point(point) for segment in track.segments for point in segment.points]
    if not points:
        raise InvalidGpxDataError("Track has no points")

    sport = infer_track_sport(track, gpx)
    _check_implied_speeds(points, warnings)

    distance_m = sum(
        haversine_m(a.latitude, a.longitude, b.latitude, b.longitude) for a, b in zip(points, points[1:], strict=False)
    )
    timed = [p for p in points if p.time is not None]
    if len(timed) < len(points):
        warnings.append(DataQualityIssue(issue="Some track points missing timestamps - skipped"))

    started_at = timed[0].timestamp if timed else None
    ended_at = timed[-1].timestamp if timed else None
    duration_sec = max(int((timed[-1].time - timed[0].time).total_seconds()), 0) if timed else None
    if started_at is None:
        warnings.append(DataQualityIssue(issue="No valid timestamps found in track points"))

    heart_rates = [p.heart_rate for p in points if p.heart_rate is not None]
    cadences = [p.cadence for p in points if p.cadence is not None]

    route = build_route(
        f"gpx-track-{track_idx}",
        [
            GpsPosition(
                latitude_deg=p.latitude,
                longitude_deg=p.longitude,
                timestamp=p.timestamp or "",
                elevation_m=p.elevation,
                heart_rate_bpm=p.heart_rate,
                cadence=p.cadence,
            )
            for p in points
        ],
        total_distance_m=distance_m,
        name=track.name,
    )
    telemetry = WorkoutTelemetry(
        heart_rate_avg=sum(heart_rates) // len(heart_rates) if heart_rates else None,
        heart_rate_max=max(heart_rates) if heart_rates else None,
        cadence_avg=sum(cadences) // len(cadences) if cadences else None,
        total_distance_m=distance_m,
        total_elevation_gain_m=route.total_ascent_m,
        total_elevation_loss_m=route.total_descent_m,
        gps_route=None if summary_only else route,
    )

    set_telemetry = None
    if not summary_only and timed:
        set_telemetry = SetTelemetry(time_series=_time_series(timed))

    return Workout(
        date=started_at[:10] if started_at else FALLBACK_DATE,
        started_at=started_at,
        ended_at=ended_at,
        duration_sec=duration_sec,
        title=track.name or f"GPX Track {track_idx + 1}",
        notes=track.description or track.comment,
        exercises=[
            CompletedExercise(
                name="GPS Activity",
                modality=Modality.STOPWATCH,
                sport=sport,
                notes=track.comment,
                sets=[
                    CompletedSet(
                        set_number=1,
                        duration_sec=duration_sec,
                        distance_meters=distance_m,
                        completed_at=ended_at,
                        telemetry=set_telemetry,
                    )
                ],
            )
        ],
        telemetry=telemetry,
        sport=sport,
    )


def _check_implied_speeds(points: list[_Point], warnings: list) -> None:
    """Flag consecutive points recorded close together but implausibly far apart."""
    for index, (a, b) in enumerate(zip(points, points[1:], strict=False)):
        if a.time is None or b.time is None:
            continue
        elapsed = (b.time - a.time).total_seconds()
        if elapsed <= 0 or elapsed >= IMPLIED_SPEED_WINDOW_SEC:
            continue
        speed = haversine_m(a.latitude, a.longitude, b.latitude, b.longitude) / elapsed
        if speed > MAX_IMPLIED_SPEED_MPS:
            warnings.append(
                DataQualityIssue(
                    issue=f"Implied speed of {speed:.0f} m/s between track points {index} and {index + 1} exceeds {MAX_IMPLIED_SPEED_MPS:.0f} m/s"
                )
            )


def _time_series(points: list[_Point]) -> TimeSeriesData:
    first = points[0].time
    cumulative = 0.0
    distances = [0.0]
    for a, b in zip(points, points[1:], strict=False):
        cumulative += haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)
        distances.append(cumulative)

    series: dict[str, Any] = {
        "timestamps": [p.timestamp for p in points],
        "elapsed_sec": [int((p.time - first).total_seconds()) for p in points],
        "latitude": [p.latitude for p in points],
        "longitude": [p.longitude for p in points],
        "distance_m": distances,
    }
    if all(p.elevation is not None for p in points):
        series["elevation_m"] = [p.elevation for p in points]
    if all(p.heart_rate is not None for p in points):
        series["heart_rate"] = [p.heart_rate for p in points]
    if all(p.cadence is not None for p in points):
        series["cadence"] = [p.cadence for p in points]
    return TimeSeriesData(**series)

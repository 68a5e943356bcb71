"""TCX activity to PWF history conversion.

Each Activity becomes a workout with one stopwatch exercise per lap. Missing
optional elements are tolerated; only an activity without any start time is
rejected (and reported as a warning).
"""

from __future__ import annotations

import math
from typing import Any

from loguru import logger
from lxml import etree

from pwf.converters.base import new_history, serialize_history
from pwf.converters.errors import (
    ConversionError,
    ConversionResult,
    DataQualityIssue,
    InvalidTcxDataError,
    TcxReadError,
)
from pwf.converters.tcx.mappings import map_tcx_sport
from pwf.converters.utils import (
    build_route,
    derive_exported_at,
    is_null_island,
    meters_to_km,
    offset_iso8601,
    parse_iso8601,
    to_iso8601,
)
from pwf.schema.common import DistanceUnit, Modality, WeightUnit
from pwf.schema.history import (
    CompletedExercise,
    CompletedSet,
    GpsPosition,
    GpsRoute,
    SetTelemetry,
    TimeSeriesData,
    Units,
    Workout,
    WorkoutTelemetry,
)

APP_NAME = "PWF TCX Converter"
PLATFORM = "TCX file"

TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
ACTIVITY_EXTENSION_NS = "http://www.garmin.com/xmlschemas/ActivityExtension/v2"
NS = {"tcx": TCX_NS, "ns3": ACTIVITY_EXTENSION_NS}


class _Trackpoint:
    """Values read from one TCX Trackpoint."""

    def __init__(self, element: etree._Element) -> None:
        time_text = element.findtext("tcx:Time", namespaces=NS)
        moment = parse_iso8601(time_text.strip()) if time_text else None
        self.time = to_iso8601(moment) if moment else None
        self.latitude = _float(element, "tcx:Position/tcx:LatitudeDegrees")
        self.longitude = _float(element, "tcx:Position/tcx:LongitudeDegrees")
        self.altitude = _float(element, "tcx:AltitudeMeters")
        self.distance = _float(element, "tcx:DistanceMeters")
        self.heart_rate = _int(element, "tcx:HeartRateBpm/tcx:Value")
        self.cadence = _int(element, "tcx:Cadence")
        if self.cadence is None:
            self.cadence = _int(element, "tcx:Extensions/ns3:TPX/ns3:RunCadence")
        self.speed = _float(element, "tcx:Extensions/ns3:TPX/ns3:Speed")
        self.watts = _int(element, "tcx:Extensions/ns3:TPX/ns3:Watts")

    @property
    def has_position(self) -> bool:
        return (
            self.latitude is not None
            and self.longitude is not None
            and not is_null_island(self.latitude, self.longitude)
        )


def _float(element: etree._Element, path: str) -> float | None:
    text = element.findtext(path, namespaces=NS)
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _int(element: etree._Element, path: str) -> int | None:
    value = _float(element, path)
    return int(round(value)) if value is not None else None


def tcx_to_pwf(data: bytes, summary_only: bool = False) -> ConversionResult:
    """Convert TCX XML into PWF history YAML.

    Args:
        data: Raw TCX file bytes
        summary_only: Skip GPS routes and time series, keeping aggregates

    Returns:
        ConversionResult with the YAML document and conversion warnings

    Raises:
        TcxReadError: If the XML is malformed
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise TcxReadError(f"Failed to parse TCX: {e}") from e

    warnings: list = []
    activities = root.findall("tcx:Activities/tcx:Activity", namespaces=NS)
    history = new_history(APP_NAME, PLATFORM, Units(weight=WeightUnit.KG, distance=DistanceUnit.KILOMETERS))
    # TCX imports carry lap telemetry, so they are always written as version 2
    history.history_version = 2

    if not activities:
        warnings.append(DataQualityIssue(issue="No activities found in TCX file"))
        history.exported_at = derive_exported_at(history)
        return ConversionResult(pwf_yaml=serialize_history(history), warnings=warnings)

    creator = root.findtext("tcx:Activities/tcx:Activity/tcx:Creator/tcx:Name", namespaces=NS)
    if creator and history.export_source is not None:
        history.export_source.platform = f"{PLATFORM} ({creator.strip()})"

    for activity in activities:
        try:
            history.workouts.append(_convert_activity(activity, summary_only))
        except ConversionError as e:
            warnings.append(DataQualityIssue(issue=f"Failed to convert activity: {e}"))

    history.exported_at = derive_exported_at(history)
    logger.info(f"Converted TCX file: {len(history.workouts)} workout(s), {len(warnings)} warning(s)")
    return ConversionResult(pwf_yaml=serialize_history(history), warnings=warnings)


def _activity_start(activity: etree._Element) -> str:
    candidates = [activity.findtext("tcx:Id", namespaces=NS)]
    first_lap = activity.find("tcx:Lap", namespaces=NS)
    if first_lap is not None:
        candidates.append(first_lap.get("StartTime"))

    for candidate in candidates:
        if candidate:
            moment = parse_iso8601(candidate.strip())
            if moment is not None:
                return to_iso8601(moment)
    raise InvalidTcxDataError("Activity has no Id or lap StartTime")


def _convert_activity(activity: etree._Element, summary_only: bool) -> Workout:
    sport = map_tcx_sport(activity.get("Sport"))
    started_at = _activity_start(activity)

    exercises: list[CompletedExercise] = []
    all_points: list[_Trackpoint] = []
    total_duration = 0.0
    total_distance = 0.0
    total_calories = 0
    lap_hr_avgs: list[int] = []
    hr_max_values: list[int] = []

    for lap_idx, lap in enumerate(activity.findall("tcx:Lap", namespaces=NS)):
        duration = _float(lap, "tcx:TotalTimeSeconds") or 0.0
        distance = _float(lap, "tcx:DistanceMeters") or 0.0
        calories = _int(lap, "tcx:Calories")
        hr_avg = _int(lap, "tcx:AverageHeartRateBpm/tcx:Value")
        hr_max = _int(lap, "tcx:MaximumHeartRateBpm/tcx:Value")
        points = [_Trackpoint(tp) for tp in lap.findall("tcx:Track/tcx:Trackpoint", namespaces=NS)]
        all_points.extend(points)

        total_duration += duration
        total_distance += distance
        total_calories += calories or 0
        if hr_avg is not None:
            lap_hr_avgs.append(hr_avg)
        if hr_max is not None:
            hr_max_values.append(hr_max)
        hr_max_values.extend(p.heart_rate for p in points if p.heart_rate is not None)

        lap_start = lap.get("StartTime")
        lap_started = parse_iso8601(lap_start) if lap_start else None
        telemetry = _lap_telemetry(lap, points, hr_avg, hr_max, calories, summary_only)
        exercises.append(
            CompletedExercise(
                name=f"Lap {lap_idx + 1}",
                modality=Modality.STOPWATCH,
                notes=lap.findtext("tcx:Notes", namespaces=NS),
                sets=[
                    CompletedSet(
                        set_number=1,
                        duration_sec=int(duration),
                        distance_meters=distance,
                        completed_at=offset_iso8601(to_iso8601(lap_started), duration) if lap_started else None,
                        telemetry=telemetry,
                    )
                ],
            )
        )

    cadences = [p.cadence for p in all_points if p.cadence is not None]
    watts = [p.watts for p in all_points if p.watts is not None]
    telemetry = WorkoutTelemetry(
        heart_rate_avg=sum(lap_hr_avgs) // len(lap_hr_avgs) if lap_hr_avgs else None,
        heart_rate_max=max(hr_max_values) if hr_max_values else None,
        power_avg=sum(watts) // len(watts) if watts else None,
        power_max=max(watts) if watts else None,
        total_calories=total_calories or None,
        total_distance_km=meters_to_km(total_distance) if total_distance > 0 else None,
        cadence_avg=sum(cadences) // len(cadences) if cadences else None,
    )
    if not summary_only:
        telemetry.gps_route = _extract_gps_route(all_points, started_at, total_distance)

    duration_sec = int(total_duration) if exercises else None
    return Workout(
        date=started_at[:10],
        started_at=started_at,
        ended_at=offset_iso8601(started_at, total_duration) if exercises else None,
        duration_sec=duration_sec,
        title=f"{sport.display_name} Workout",
        notes=activity.findtext("tcx:Notes", namespaces=NS),
        exercises=exercises,
        telemetry=telemetry if telemetry.model_dump(exclude_none=True) else None,
        sport=sport,
    )


def _lap_telemetry(
    lap: etree._Element,
    points: list[_Trackpoint],
    hr_avg: int | None,
    hr_max: int | None,
    calories: int | None,
    summary_only: bool,
) -> SetTelemetry | None:
    values: dict[str, Any] = {
        "heart_rate_avg": hr_avg,
        "heart_rate_max": hr_max,
        "cadence_avg": _int(lap, "tcx:Cadence"),
        "speed_max_mps": _float(lap, "tcx:MaximumSpeed"),
        "calories": calories,
    }
    if not summary_only:
        values["time_series"] = _time_series(points)
    present = {key: value for key, value in values.items() if value is not None}
    return SetTelemetry(**present) if present else None


# (time series array, trackpoint attribute)
SERIES_ATTRIBUTES = (
    ("heart_rate", "heart_rate"),
    ("cadence", "cadence"),
    ("power", "watts"),
    ("speed_mps", "speed"),
    ("distance_m", "distance"),
    ("elevation_m", "altitude"),
)


def _time_series(points: list[_Trackpoint]) -> TimeSeriesData | None:
    """Lap samples as parallel arrays; an array is kept only if every sample has it."""
    timed = [p for p in points if p.time is not None]
    if not timed:
        return None

    first = parse_iso8601(timed[0].time)
    series: dict[str, Any] = {
        "timestamps": [p.time for p in timed],
        "elapsed_sec": [int((parse_iso8601(p.time) - first).total_seconds()) for p in timed],
    }
    for name, attribute in SERIES_ATTRIBUTES:
        values = [getattr(p, attribute) for p in timed]
        if all(value is not None for value in values):
            series[name] = values
    if all(p.has_position for p in timed):
        series["latitude"] = [p.latitude for p in timed]
        series["longitude"] = [p.longitude for p in timed]
    return TimeSeriesData(**series)


def _extract_gps_route(points: list[_Trackpoint], activity_id: str, total_distance: float) -> GpsRoute | None:
    positions = [
        GpsPosition(
            latitude_deg=p.latitude,
            longitude_deg=p.longitude,
            timestamp=p.time or "",
            elevation_m=p.altitude,
            speed_mps=p.speed,
            heart_rate_bpm=p.heart_rate,
            power_watts=p.watts,
            cadence=p.cadence,
        )
        for p in points
        if p.has_position
    ]
    if not positions:
        return None

    route_id = "route-" + "".join(ch for ch in activity_id if ch not in ":-TZ")
    return build_route(
        route_id,
        positions,
        total_distance_m=total_distance if total_distance > 0 else None,
        recording_mode="every_second",
    )

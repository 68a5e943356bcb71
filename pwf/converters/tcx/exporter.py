"""PWF history to Garmin TCX export."""

from __future__ import annotations

from loguru import logger

from pwf.converters.base import HistoryExporter
from pwf.converters.errors import (
    ConversionError,
    DataQualityIssue,
    MissingField,
    TcxExportResult,
    TcxWriteError,
    UnsupportedFeature,
    ValueClamped,
)
from pwf.converters.tcx.mappings import TCX_OTHER, map_pwf_sport_to_tcx
from pwf.converters.utils import offset_iso8601, parse_iso8601, to_iso8601
from pwf.schema.common import Modality
from pwf.schema.history import CompletedExercise, GpsPosition, History, Workout

TCX_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xsi:schemaLocation="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2 '
    'http://www.garmin.com/xmlschemas/TrainingCenterDatabasev2.xsd" '
    'xmlns:ns3="http://www.garmin.com/xmlschemas/ActivityExtension/v2">\n'
)
TCX_FOOTER = "</TrainingCenterDatabase>\n"

# TCX stores heart rate and cadence as unsigned bytes; cadence stops at 254
TCX_HEART_RATE_MAX = 255
TCX_CADENCE_MAX = 254


def xml_escape(text: str) -> str:
    """Escape the five XML special characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def _clamp(value: int, upper: int, field: str, result: TcxExportResult) -> int:
    clamped = min(max(value, 0), upper)
    if clamped != value:
        result.add_warning(ValueClamped(field=field, original=str(value), clamped=str(clamped)))
    return clamped


class _Lap:
    """Aggregated values for one exported lap."""

    def __init__(self, exercise: CompletedExercise | None = None) -> None:
        self.total_time = 0.0
        self.distance = 0.0
        self.calories = 0
        self.hr_avg: int | None = None
        self.hr_max: int | None = None
        self.cadence: int | None = None
        self.max_speed: float | None = None
        if exercise is None:
            return

        hr_avgs: list[int] = []
        hr_maxes: list[int] = []
        cadences: list[int] = []
        speeds: list[float] = []
        for completed_set in exercise.sets:
            self.total_time += completed_set.duration_sec or 0
            self.distance += completed_set.distance_meters or 0.0
            telemetry = completed_set.telemetry
            if telemetry is None:
                continue
            self.calories += telemetry.calories or 0
            if telemetry.heart_rate_avg is not None:
                hr_avgs.append(telemetry.heart_rate_avg)
            if telemetry.heart_rate_max is not None:
                hr_maxes.append(telemetry.heart_rate_max)
            if telemetry.cadence_avg is not None:
                cadences.append(telemetry.cadence_avg)
            if telemetry.speed_max_mps is not None:
                speeds.append(telemetry.speed_max_mps)

        self.hr_avg = sum(hr_avgs) // len(hr_avgs) if hr_avgs else None
        self.hr_max = max(hr_maxes) if hr_maxes else None
        self.cadence = sum(cadences) // len(cadences) if cadences else None
        self.max_speed = max(speeds) if speeds else None


class TcxExporter(HistoryExporter[TcxExportResult]):
    """Writes every workout of a history as a TCX Activity.

    Each exercise becomes a lap. GPS positions from the workout route are
    written as the track of the first lap.
    """

    export_type = "tcx"

    def build(self, history: History) -> TcxExportResult:
        result = TcxExportResult(tcx_xml="")
        activities: list[str] = []

        for workout in history.workouts:
            try:
                activities.append(self._activity(workout, result))
            except ConversionError as e:
                result.add_warning(DataQualityIssue(issue=f"Failed to convert workout: {e}"))

        if not activities:
            result.add_warning(DataQualityIssue(issue="No workouts to export"))

        body = ["  <Activities>\n", *activities, "  </Activities>\n"]
        result.tcx_xml = TCX_HEADER + "".join(body) + TCX_FOOTER
        logger.info(f"Exported {len(activities)} workout(s) to TCX")
        return result

    def _activity(self, workout: Workout, result: TcxExportResult) -> str:
        if workout.sport is None:
            result.add_warning(MissingField(source_field="sport", reason="Workout has no sport, defaulting to 'Other'"))
            sport = TCX_OTHER
        else:
            sport = map_pwf_sport_to_tcx(workout.sport)

        activity_id = workout.started_at or f"{workout.date}T00:00:00Z"
        if parse_iso8601(activity_id) is None:
            raise TcxWriteError(f"Invalid workout start time: {activity_id}")

        parts = [f'    <Activity Sport="{sport}">\n', f"      <Id>{xml_escape(activity_id)}</Id>\n"]

        laps = []
        for exercise in workout.exercises:
            if exercise.modality == Modality.STRENGTH:
                result.add_warning(
                    UnsupportedFeature(
                        feature=f"Strength exercise '{exercise.name}' does not map well to TCX format (TCX is primarily for cardio)"
                    )
                )
            laps.append(_Lap(exercise))

        if not laps:
            minimal = _Lap()
            minimal.total_time = float(workout.duration_sec or 0)
            laps.append(minimal)

        telemetry = workout.telemetry
        if telemetry is not None and telemetry.total_calories and not any(lap.calories for lap in laps):
            laps[0].calories = telemetry.total_calories

        positions = []
        if telemetry is not None and telemetry.gps_route is not None:
            positions = telemetry.gps_route.positions

        elapsed = 0.0
        for lap_idx, lap in enumerate(laps):
            lap_start = offset_iso8601(activity_id, elapsed)
            parts.append(self._lap(lap, lap_start, positions if lap_idx == 0 else [], result))
            elapsed += lap.total_time

        if workout.notes:
            parts.append(f"      <Notes>{xml_escape(workout.notes)}</Notes>\n")
        parts.append("    </Activity>\n")
        return "".join(parts)

    def _lap(self, lap: _Lap, start_time: str, positions: list[GpsPosition], result: TcxExportResult) -> str:
        parts = [
            f'      <Lap StartTime="{start_time}">\n',
            f"        <TotalTimeSeconds>{lap.total_time}</TotalTimeSeconds>\n",
            f"        <DistanceMeters>{lap.distance}</DistanceMeters>\n",
        ]
        if lap.max_speed is not None:
            parts.append(f"        <MaximumSpeed>{lap.max_speed}</MaximumSpeed>\n")
        parts.append(f"        <Calories>{lap.calories}</Calories>\n")
        if lap.hr_avg is not None:
            hr_avg = _clamp(lap.hr_avg, TCX_HEART_RATE_MAX, "heart_rate_avg", result)
            parts.append(f"        <AverageHeartRateBpm><Value>{hr_avg}</Value></AverageHeartRateBpm>\n")
        if lap.hr_max is not None:
            hr_max = _clamp(lap.hr_max, TCX_HEART_RATE_MAX, "heart_rate_max", result)
            parts.append(f"        <MaximumHeartRateBpm><Value>{hr_max}</Value></MaximumHeartRateBpm>\n")
        parts.append("        <Intensity>Active</Intensity>\n")
        if lap.cadence is not None:
            cadence = _clamp(lap.cadence, TCX_CADENCE_MAX, "cadence_avg", result)
            parts.append(f"        <Cadence>{cadence}</Cadence>\n")
        parts.append("        <TriggerMethod>Manual</TriggerMethod>\n")

        if positions:
            parts.append("        <Track>\n")
            parts.extend(_trackpoint(position, result) for position in positions)
            parts.append("        </Track>\n")

        parts.append("      </Lap>\n")
        return "".join(parts)


def _trackpoint(position: GpsPosition, result: TcxExportResult) -> str:
    moment = parse_iso8601(position.timestamp) if position.timestamp else None
    if moment is None:
        raise TcxWriteError(f"Invalid trackpoint timestamp: {position.timestamp!r}")

    parts = [
        "          <Trackpoint>\n",
        f"            <Time>{to_iso8601(moment)}</Time>\n",
        "            <Position>\n",
        f"              <LatitudeDegrees>{position.latitude_deg}</LatitudeDegrees>\n",
        f"              <LongitudeDegrees>{position.longitude_deg}</LongitudeDegrees>\n",
        "            </Position>\n",
    ]
    if position.elevation_m is not None:
        parts.append(f"            <AltitudeMeters>{position.elevation_m}</AltitudeMeters>\n")
    if position.heart_rate_bpm is not None:
        heart_rate = _clamp(position.heart_rate_bpm, TCX_HEART_RATE_MAX, "heart_rate_bpm", result)
        parts.append(f"            <HeartRateBpm><Value>{heart_rate}</Value></HeartRateBpm>\n")
    if position.cadence is not None:
        cadence = _clamp(position.cadence, TCX_CADENCE_MAX, "cadence", result)
        parts.append(f"            <Cadence>{cadence}</Cadence>\n")
    if position.speed_mps is not None or position.power_watts is not None:
        parts.append("            <Extensions>\n              <ns3:TPX>\n")
        if position.speed_mps is not None:
            parts.append(f"                <ns3:Speed>{position.speed_mps}</ns3:Speed>\n")
        if position.power_watts is not None:
            parts.append(f"                <ns3:Watts>{position.power_watts}</ns3:Watts>\n")
        parts.append("              </ns3:TPX>\n            </Extensions>\n")
    parts.append("          </Trackpoint>\n")
    return "".join(parts)


def pwf_to_tcx(history: History) -> TcxExportResult:
    """Export a PWF history as TCX XML."""
    return TcxExporter().build(history)

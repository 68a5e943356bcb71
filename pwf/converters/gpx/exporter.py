"""PWF history to GPX 1.1 export."""

from __future__ import annotations

import gpxpy.gpx
from loguru import logger

from pwf.converters.base import HistoryExporter
from pwf.converters.errors import DataQualityIssue, GpxExportResult, GpxWriteError, MissingField
from pwf.converters.utils import parse_iso8601
from pwf.schema.history import GpsRoute, History, Workout

GPX_CREATOR = "PWF Converters"
GPX_VERSION = "1.1"

# GpsPosition fields GPX 1.1 has no element for
DROPPED_POSITION_FIELDS = {
    "heart_rate_bpm": "heart rate",
    "power_watts": "power",
    "cadence": "cadence",
}


class GpxExporter(HistoryExporter[GpxExportResult]):
    """Writes one track per workout that carries a GPS route."""

    export_type = "gpx"

    def build(self, history: History) -> GpxExportResult:
        result = GpxExportResult(gpx_xml="")
        gpx = gpxpy.gpx.GPX()
        gpx.creator = GPX_CREATOR

        for workout in history.workouts:
            label = workout.title or workout.date
            if workout.telemetry is None:
                result.add_warning(
                    MissingField(source_field="telemetry", reason=f"Workout '{label}' has no telemetry data")
                )
                continue
            route = workout.telemetry.gps_route
            if route is None:
                result.add_warning(
                    MissingField(source_field="gps_route", reason=f"Workout '{label}' has no GPS route data")
                )
                continue
            if not route.positions:
                result.add_warning(DataQualityIssue(issue=f"GPS route '{route.name or route.route_id}' has no positions"))
                continue
            gpx.tracks.append(self._track(workout, route, result))

        if not gpx.tracks:
            result.add_warning(DataQualityIssue(issue="No GPS routes found in any workouts"))

        try:
            result.gpx_xml = gpx.to_xml(version=GPX_VERSION)
        except gpxpy.gpx.GPXException as e:
            raise GpxWriteError(str(e)) from e
        logger.info(f"Exported {len(gpx.tracks)} track(s) to GPX")
        return result

    def _track(self, workout: Workout, route: GpsRoute, result: GpxExportResult) -> gpxpy.gpx.GPXTrack:
        track = gpxpy.gpx.GPXTrack(
            name=workout.title or f"Workout {workout.date}",
            description=workout.notes,
        )
        if workout.sport is not None:
            track.type = workout.sport.value

        segment = gpxpy.gpx.GPXTrackSegment()
        for position in route.positions:
            segment.points.append(
                gpxpy.gpx.GPXTrackPoint(
                    latitude=position.latitude_deg,
                    longitude=position.longitude_deg,
                    elevation=position.elevation_m,
                    time=parse_iso8601(position.timestamp) if position.timestamp else None,
                )
            )
        track.segments.append(segment)

        for field, label in DROPPED_POSITION_FIELDS.items():
            if any(getattr(position, field) is not None for position in route.positions):
                result.add_warning(
                    MissingField(
                        source_field=field,
                        reason=f"GPX 1.1 has no {label} element; values from route '{route.route_id}' were dropped",
                    )
                )
        return track


def pwf_to_gpx(history: History) -> GpxExportResult:
    """Export the GPS routes of a PWF history as GPX XML."""
    return GpxExporter().build(history)

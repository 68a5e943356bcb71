"""Unit and time helpers shared by the converters."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from pwf.schema.history import GpsPosition, GpsRoute, History
from pwf.validation.history_validator import find_v2_fields

# FIT epoch: 1989-12-31T00:00:00Z, in Unix seconds
FIT_EPOCH = 631065600
SEMICIRCLES_PER_DEGREE = 2**31 / 180.0
EARTH_RADIUS_M = 6_371_000.0
# FIT and TCX encode "no fix" as (0, 0)
NULL_ISLAND_TOLERANCE = 1e-3
UNIX_EPOCH_ISO = "1970-01-01T00:00:00Z"


def to_iso8601(moment: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso8601(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC.

    Returns:
        Aware datetime, or None when the string is not a timestamp
    """
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def fit_timestamp_to_datetime(fit_timestamp: int) -> datetime:
    return datetime.fromtimestamp(FIT_EPOCH + fit_timestamp, tz=timezone.utc)


def meters_to_km(meters: float) -> float:
    return meters / 1000.0


def mps_to_kph(mps: float) -> float:
    return mps * 3.6


def semicircles_to_degrees(semicircles: int) -> float:
    return semicircles / SEMICIRCLES_PER_DEGREE


def is_null_island(latitude: float, longitude: float) -> bool:
    return abs(latitude) < NULL_ISLAND_TOLERANCE and abs(longitude) < NULL_ISLAND_TOLERANCE


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, a)))


def offset_iso8601(start: str, seconds: float) -> str:
    """Shift an ISO-8601 timestamp by ``seconds``; unparseable input is returned unchanged."""
    moment = parse_iso8601(start)
    if moment is None:
        return start
    return to_iso8601(moment + timedelta(seconds=seconds))


def build_route(route_id: str, positions: list[GpsPosition], total_distance_m: float | None = None, **extra) -> GpsRoute:
    """Build a GpsRoute with elevation and bounding-box aggregates.

    Ascent and descent sum successive elevation deltas over points that carry an
    elevation. Zero totals are left unset.

    Args:
        route_id: Identifier for the route
        positions: Ordered positions (must not be empty)
        total_distance_m: Known route length; computed by Haversine when omitted
        **extra: Additional GpsRoute fields (name, recording_mode, gps_fix)
    """
    ascent = 0.0
    descent = 0.0
    elevations: list[float] = []
    previous: float | None = None
    for position in positions:
        if position.elevation_m is None:
            continue
        elevations.append(position.elevation_m)
        if previous is not None:
            delta = position.elevation_m - previous
            if delta > 0:
                ascent += delta
            else:
                descent += -delta
        previous = position.elevation_m

    if total_distance_m is None:
        total_distance_m = sum(
            haversine_m(a.latitude_deg, a.longitude_deg, b.latitude_deg, b.longitude_deg)
            for a, b in zip(positions, positions[1:], strict=False)
        )

    latitudes = [p.latitude_deg for p in positions]
    longitudes = [p.longitude_deg for p in positions]
    return GpsRoute(
        route_id=route_id,
        positions=positions,
        total_distance_m=total_distance_m,
        total_ascent_m=ascent if ascent > 0 else None,
        total_descent_m=descent if descent > 0 else None,
        min_elevation_m=min(elevations) if elevations else None,
        max_elevation_m=max(elevations) if elevations else None,
        bbox_sw_lat=min(latitudes),
        bbox_sw_lng=min(longitudes),
        bbox_ne_lat=max(latitudes),
        bbox_ne_lng=max(longitudes),
        **extra,
    )


def choose_history_version(history: History) -> int:
    """2 when the document carries any v2.1 content, else 1."""
    return 2 if find_v2_fields(history) else 1


def derive_exported_at(history: History, fallback: str = UNIX_EPOCH_ISO) -> str:
    """Latest workout start in the document, or ``fallback`` when there is none."""
    starts = [moment for w in history.workouts if w.started_at and (moment := parse_iso8601(w.started_at))]
    if not starts:
        return fallback
    return to_iso8601(max(starts))

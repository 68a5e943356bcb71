"""Sport inference for GPX tracks.

GPX has no standard activity field. ``<trk><type>`` is used when present,
otherwise the file metadata is scanned for hints.
"""

from __future__ import annotations

import gpxpy.gpx

from pwf.schema.common import Sport, parse_sport

GPX_TYPES: dict[str, Sport] = {
    "run": Sport.RUNNING,
    "running": Sport.RUNNING,
    "bike": Sport.CYCLING,
    "biking": Sport.CYCLING,
    "cycling": Sport.CYCLING,
    "hike": Sport.HIKING,
    "hiking": Sport.HIKING,
    "walk": Sport.WALKING,
    "walking": Sport.WALKING,
    "swim": Sport.SWIMMING,
    "swimming": Sport.SWIMMING,
    "paddle": Sport.KAYAKING,
    "paddling": Sport.KAYAKING,
    "kayaking": Sport.KAYAKING,
    "row": Sport.ROWING,
    "rowing": Sport.ROWING,
}

# Substring hints, checked in order
KEYWORD_HINTS: list[tuple[tuple[str, ...], Sport]] = [
    (("run",), Sport.RUNNING),
    (("bike", "cycl"), Sport.CYCLING),
    (("hike",), Sport.HIKING),
    (("walk",), Sport.WALKING),
    (("swim",), Sport.SWIMMING),
]


def map_gpx_type_to_sport(gpx_type: str | None) -> Sport:
    """Map a ``<trk><type>`` value onto a PWF sport."""
    if not gpx_type:
        return Sport.OTHER
    key = gpx_type.strip().lower()
    if key in GPX_TYPES:
        return GPX_TYPES[key]
    return parse_sport(key)


def _match_hint(text: str | None, hints: list[tuple[tuple[str, ...], Sport]]) -> Sport | None:
    if not text:
        return None
    lowered = text.lower()
    for needles, sport in hints:
        if any(needle in lowered for needle in needles):
            return sport
    return None


def infer_sport_from_metadata(gpx: gpxpy.gpx.GPX) -> Sport:
    """Scan metadata keywords, then the description, for sport hints."""
    sport = _match_hint(gpx.keywords, KEYWORD_HINTS)
    if sport is None:
        # descriptions are not checked for swimming
        sport = _match_hint(gpx.description, KEYWORD_HINTS[:-1])
    return sport or Sport.OTHER


def infer_track_sport(track: gpxpy.gpx.GPXTrack, gpx: gpxpy.gpx.GPX) -> Sport:
    """Explicit track type wins over metadata inference."""
    if track.type:
        return map_gpx_type_to_sport(track.type)
    return infer_sport_from_metadata(gpx)

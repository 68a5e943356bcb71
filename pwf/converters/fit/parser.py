"""FIT activity to PWF history conversion.

Sessions become workouts. When sessions cover more than one sport (a
triathlon, for example) they are merged into a single workout with one sport
segment per session, and transition sessions become the segments' transitions.
Laps become stopwatch sets under a synthetic "Activity" exercise.
"""

from __future__ import annotations

import bisect
import math
from datetime import datetime, timedelta
from typing import Any

from loguru import logger

from pwf.converters.base import new_history, serialize_history
from pwf.converters.errors import (
    ConversionError,
    ConversionResult,
    DataQualityIssue,
    InvalidFitDataError,
    MissingRequiredFieldError,
)
from pwf.converters.fit.mappings import (
    is_active_length,
    map_device_type,
    map_fit_sport,
    map_manufacturer,
    map_swim_stroke,
)
from pwf.converters.fit.records import (
    DEVICE_INFO,
    FILE_ID,
    LAP,
    LENGTH,
    RECORD,
    SESSION,
    FitRecord,
    decode_fit,
)
from pwf.converters.utils import (
    UNIX_EPOCH_ISO,
    build_route,
    choose_history_version,
    derive_exported_at,
    is_null_island,
    meters_to_km,
    mps_to_kph,
    semicircles_to_degrees,
    to_iso8601,
)
from pwf.schema.common import DistanceUnit, Modality, Sport, WeightUnit
from pwf.schema.history import (
    AdvancedMetrics,
    CompletedExercise,
    CompletedSet,
    DeviceInfo,
    GpsFix,
    GpsPosition,
    GpsRoute,
    PoolConfig,
    PoolLengthUnit,
    PowerMetrics,
    SetTelemetry,
    SportSegment,
    SwimmingLength,
    SwimmingSetData,
    TimeSeriesData,
    TransitionData,
    Units,
    Workout,
    WorkoutTelemetry,
)

APP_NAME = "PWF FIT Converter"
PLATFORM = "FIT file"
EXERCISE_NAME = "Activity"

# Pool lengths between these bounds are read as 50 m and 33 1/3 yd pools
METER_POOL_BAND = (45.0, 55.0)
YARD_POOL_BAND = (30.0, 40.0)


def fit_to_pwf(data: bytes, summary_only: bool = False) -> ConversionResult:
    """Convert FIT bytes into PWF history YAML.

    Args:
        data: Raw FIT file bytes
        summary_only: Skip GPS routes and time series, keeping aggregates

    Returns:
        ConversionResult with the YAML document and conversion warnings

    Raises:
        FitReadError: If the bytes cannot be decoded
    """
    return convert_fit_records(decode_fit(data), summary_only=summary_only)


def convert_fit_records(records: list[FitRecord], summary_only: bool = False) -> ConversionResult:
    """Convert a decoded FIT record stream into PWF history YAML."""
    warnings: list = []
    by_kind: dict[str, list[FitRecord]] = {SESSION: [], LAP: [], RECORD: [], LENGTH: [], DEVICE_INFO: [], FILE_ID: []}
    for record in records:
        if record.kind in by_kind:
            by_kind[record.kind].append(record)

    history = new_history(
        APP_NAME,
        PLATFORM,
        Units(weight=WeightUnit.KG, distance=DistanceUnit.KILOMETERS),
    )
    fallback_exported_at = _file_created_at(by_kind[FILE_ID])

    sessions = by_kind[SESSION]
    if not sessions:
        warnings.append(DataQualityIssue(issue="No session data found in FIT file"))
        history.exported_at = fallback_exported_at
        return ConversionResult(pwf_yaml=serialize_history(history), warnings=warnings)

    devices = _convert_devices(by_kind[DEVICE_INFO])
    contexts = _build_session_contexts(sessions, by_kind, warnings)

    if _is_multisport(contexts):
        workout = _convert_multisport(contexts, devices, summary_only, warnings)
        if workout is not None:
            history.workouts.append(workout)
    else:
        for context in contexts:
            try:
                history.workouts.append(_convert_session(context, devices, summary_only, warnings))
            except ConversionError as e:
                warnings.append(DataQualityIssue(issue=f"Failed to convert session: {e}"))

    history.history_version = choose_history_version(history)
    history.exported_at = derive_exported_at(history, fallback_exported_at)
    logger.info(f"Converted FIT file: {len(history.workouts)} workout(s), {len(warnings)} warning(s)")
    return ConversionResult(pwf_yaml=serialize_history(history), warnings=warnings)


def _file_created_at(file_ids: list[FitRecord]) -> str:
    for record in file_ids:
        created = record.time("time_created")
        if created is not None:
            return to_iso8601(created)
    return UNIX_EPOCH_ISO


# ---------------------------------------------------------------------------
# Session grouping
# ---------------------------------------------------------------------------


class _SessionContext:
    """A session and the laps, records and lengths that fall inside it."""

    def __init__(self, session: FitRecord, start: datetime | None) -> None:
        self.session = session
        self.start = start
        self.sport = map_fit_sport(session.get("sport"))
        self.laps: list[FitRecord] = []
        self.records: list[FitRecord] = []
        self.lengths: list[FitRecord] = []

    @property
    def duration_sec(self) -> float | None:
        return self.session.number("total_elapsed_time", "total_timer_time")

    @property
    def end(self) -> datetime | None:
        if self.start is None or self.duration_sec is None:
            return None
        return self.start + timedelta(seconds=self.duration_sec)


def _build_session_contexts(
    sessions: list[FitRecord],
    by_kind: dict[str, list[FitRecord]],
    warnings: list,
) -> list[_SessionContext]:
    contexts = [_SessionContext(s, s.time("start_time", "timestamp")) for s in sessions]
    if len(contexts) == 1:
        contexts[0].laps = list(by_kind[LAP])
        contexts[0].records = list(by_kind[RECORD])
        contexts[0].lengths = list(by_kind[LENGTH])
        return contexts

    contexts.sort(key=lambda c: c.start.timestamp() if c.start else math.inf)
    timed = [c for c in contexts if c.start is not None]
    starts = [c.start.timestamp() for c in timed]
    unplaced = 0

    def owner(record: FitRecord) -> _SessionContext | None:
        moment = record.time("start_time", "timestamp")
        if moment is None or not starts:
            return None
        idx = bisect.bisect_right(starts, moment.timestamp()) - 1
        return timed[max(idx, 0)]

    for kind, attr in ((LAP, "laps"), (RECORD, "records"), (LENGTH, "lengths")):
        for record in by_kind[kind]:
            context = owner(record)
            if context is None:
                unplaced += 1
                continue
            getattr(context, attr).append(record)

    if unplaced:
        warnings.append(DataQualityIssue(issue=f"{unplaced} record(s) without timestamps could not be assigned to a session"))
    return contexts


def _is_multisport(contexts: list[_SessionContext]) -> bool:
    if len(contexts) <= 1:
        return False
    sports = {c.sport for c in contexts if c.sport != Sport.TRANSITION}
    return len(sports) > 1


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


def _convert_session(
    context: _SessionContext,
    devices: list[DeviceInfo],
    summary_only: bool,
    warnings: list,
) -> Workout:
    if context.start is None:
        raise MissingRequiredFieldError("start_time")

    # A lone transition session is recorded as running
    sport = Sport.RUNNING if context.sport == Sport.TRANSITION else context.sport
    started_at = to_iso8601(context.start)
    duration = context.duration_sec
    if duration is not None and duration < 0:
        raise InvalidFitDataError(f"negative session duration ({duration:g}s)")

    return Workout(
        date=started_at[:10],
        started_at=started_at,
        ended_at=to_iso8601(context.end) if context.end else None,
        duration_sec=int(duration) if duration is not None else None,
        title=f"{sport.display_name} Workout",
        exercises=[_convert_laps(context, summary_only, warnings)],
        telemetry=_session_telemetry(context, summary_only),
        devices=list(devices),
        sport=sport,
    )


def _convert_multisport(
    contexts: list[_SessionContext],
    devices: list[DeviceInfo],
    summary_only: bool,
    warnings: list,
) -> Workout | None:
    segments: list[SportSegment] = []
    exercises: list[CompletedExercise] = []
    pending_transition: _SessionContext | None = None

    for context in contexts:
        if context.start is None:
            warnings.append(DataQualityIssue(issue="Failed to convert session: Missing required field: start_time"))
            continue

        if context.sport == Sport.TRANSITION:
            if not segments:
                warnings.append(DataQualityIssue(issue="Transition before the first sport segment skipped"))
            else:
                pending_transition = context
            continue

        if pending_transition is not None:
            segments[-1].transition = _transition(pending_transition, segments[-1].sport, context.sport, len(segments))
            pending_transition = None

        index = len(segments)
        exercise = _convert_laps(context, summary_only, warnings)
        exercise.id = f"segment-{index}-activity"
        exercise.name = context.sport.display_name
        exercise.sport = context.sport
        exercises.append(exercise)

        duration = context.duration_sec
        segments.append(
            SportSegment(
                segment_id=f"segment-{index}",
                sport=context.sport,
                segment_index=index,
                started_at=to_iso8601(context.start),
                duration_sec=int(duration) if duration is not None else None,
                distance_m=context.session.number("total_distance"),
                exercise_ids=[exercise.id],
                telemetry=_session_telemetry(context, summary_only),
            )
        )

    if pending_transition is not None:
        warnings.append(DataQualityIssue(issue="Transition after the last sport segment skipped"))

    if not segments:
        warnings.append(DataQualityIssue(issue="No sport segments could be converted"))
        return None

    timed = [c for c in contexts if c.start is not None]
    first, last = timed[0], timed[-1]
    started_at = to_iso8601(first.start)
    ended = last.end
    duration = int((ended - first.start).total_seconds()) if ended else None
    logger.debug(f"Merged {len(segments)} sport segments into one multisport workout")

    return Workout(
        date=started_at[:10],
        started_at=started_at,
        ended_at=to_iso8601(ended) if ended else None,
        duration_sec=duration,
        title="Multisport Workout",
        exercises=exercises,
        telemetry=_multisport_telemetry(timed),
        devices=list(devices),
        sport_segments=segments,
    )


def _transition(context: _SessionContext, from_sport: Sport, to_sport: Sport, index: int) -> TransitionData:
    duration = context.duration_sec
    return TransitionData(
        transition_id=f"transition-{index}",
        from_sport=from_sport,
        to_sport=to_sport,
        duration_sec=int(duration) if duration is not None else None,
        started_at=to_iso8601(context.start) if context.start else None,
        heart_rate_avg=context.session.integer("avg_heart_rate"),
    )


def _multisport_telemetry(contexts: list[_SessionContext]) -> WorkoutTelemetry | None:
    distance = [d for c in contexts if (d := c.session.number("total_distance")) is not None]
    calories = [k for c in contexts if (k := c.session.integer("total_calories")) is not None]
    hr_max = [h for c in contexts if (h := c.session.integer("max_heart_rate")) is not None]
    return _drop_empty(
        WorkoutTelemetry,
        total_distance_km=meters_to_km(sum(distance)) if distance else None,
        total_calories=sum(calories) if calories else None,
        heart_rate_max=max(hr_max) if hr_max else None,
    )


# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------


def _drop_empty(model: type, **values: Any):
    """Instantiate ``model`` with the non-null values, or return None when there are none."""
    present = {key: value for key, value in values.items() if value is not None}
    if not present:
        return None
    return model(**present)


def _kph(record: FitRecord, *names: str) -> float | None:
    speed = record.number(*names)
    return mps_to_kph(speed) if speed is not None else None


def _session_telemetry(context: _SessionContext, summary_only: bool) -> WorkoutTelemetry | None:
    session = context.session
    distance = session.number("total_distance")
    total_work = session.number("total_work")
    recovery = session.integer("recovery_time")

    power_metrics = _drop_empty(
        PowerMetrics,
        normalized_power=session.integer("normalized_power"),
        training_stress_score=session.number("training_stress_score"),
        intensity_factor=session.number("intensity_factor"),
        variability_index=session.number("variability_index"),
        ftp_watts=session.integer("threshold_power"),
        total_work_kj=total_work / 1000.0 if total_work is not None else None,
    )
    advanced_metrics = _drop_empty(
        AdvancedMetrics,
        training_effect=session.number("total_training_effect"),
        anaerobic_training_effect=session.number("total_anaerobic_training_effect"),
        recovery_time_hours=recovery // 60 if recovery is not None else None,
    )

    return _drop_empty(
        WorkoutTelemetry,
        heart_rate_avg=session.integer("avg_heart_rate"),
        heart_rate_max=session.integer("max_heart_rate"),
        power_avg=session.integer("avg_power"),
        power_max=session.integer("max_power"),
        total_distance_km=meters_to_km(distance) if distance is not None else None,
        total_elevation_gain_m=session.number("total_ascent"),
        total_elevation_loss_m=session.number("total_descent"),
        speed_avg_kph=_kph(session, "enhanced_avg_speed", "avg_speed"),
        speed_max_kph=_kph(session, "enhanced_max_speed", "max_speed"),
        total_calories=session.integer("total_calories"),
        cadence_avg=session.integer("avg_cadence"),
        power_metrics=power_metrics,
        advanced_metrics=advanced_metrics,
        gps_route=None if summary_only else _extract_gps_route(context),
    )


def _position(record: FitRecord) -> tuple[float, float] | None:
    lat = record.get("position_lat")
    lng = record.get("position_long")
    if not isinstance(lat, int) or not isinstance(lng, int):
        return None
    latitude = semicircles_to_degrees(lat)
    longitude = semicircles_to_degrees(lng)
    if is_null_island(latitude, longitude):
        return None
    return latitude, longitude


def _extract_gps_route(context: _SessionContext) -> GpsRoute | None:
    positions: list[GpsPosition] = []
    for record in context.records:
        position = _position(record)
        moment = record.time("timestamp")
        if position is None or moment is None:
            continue
        heading = record.number("heading")
        positions.append(
            GpsPosition(
                latitude_deg=position[0],
                longitude_deg=position[1],
                timestamp=to_iso8601(moment),
                elevation_m=record.number("enhanced_altitude", "altitude"),
                speed_mps=record.number("enhanced_speed", "speed"),
                heading_deg=heading % 360.0 if heading is not None else None,
                heart_rate_bpm=record.integer("heart_rate"),
                power_watts=record.integer("power"),
                cadence=record.integer("cadence"),
                temperature_c=record.number("temperature"),
            )
        )

    if not positions:
        return None

    start = context.session.integer("start_time")
    if start is None and context.start is not None:
        start = int(context.start.timestamp())
    return build_route(
        f"route-{start}" if start is not None else "route-unknown",
        positions,
        total_distance_m=context.session.number("total_distance"),
        recording_mode="smart",
        gps_fix=GpsFix.FIX_3D,
    )


# ---------------------------------------------------------------------------
# Laps, sets and swimming
# ---------------------------------------------------------------------------


def _convert_laps(context: _SessionContext, summary_only: bool, warnings: list) -> CompletedExercise:
    swimming, pool_config = (None, None)
    if context.sport == Sport.SWIMMING and context.lengths:
        swimming, pool_config = _extract_swimming(context)

    session = context.session
    if not context.laps:
        warnings.append(DataQualityIssue(issue="No lap data found, creating single exercise"))
        duration = context.duration_sec
        sets = [
            CompletedSet(
                set_number=1,
                duration_sec=int(duration) if duration is not None else None,
                distance_meters=session.number("total_distance"),
                swimming=swimming,
            )
        ]
    else:
        sets = [
            _convert_lap(lap, i + 1, context, summary_only, swimming if i == 0 else None, i == len(context.laps) - 1)
            for i, lap in enumerate(context.laps)
        ]

    return CompletedExercise(
        name=EXERCISE_NAME,
        modality=Modality.STOPWATCH,
        sets=sets,
        pool_config=pool_config,
    )


def _convert_lap(
    lap: FitRecord,
    set_number: int,
    context: _SessionContext,
    summary_only: bool,
    swimming: SwimmingSetData | None,
    is_last_lap: bool = True,
) -> CompletedSet:
    duration = lap.number("total_elapsed_time", "total_timer_time")
    start = lap.time("start_time")
    end = start + timedelta(seconds=duration) if start is not None and duration is not None else lap.time("timestamp")

    time_series = None
    if not summary_only and start is not None and end is not None:
        time_series = _lap_time_series(context.records, start, end, include_end=is_last_lap)

    telemetry = _drop_empty(
        SetTelemetry,
        heart_rate_avg=lap.integer("avg_heart_rate"),
        heart_rate_max=lap.integer("max_heart_rate"),
        power_avg=lap.integer("avg_power"),
        power_max=lap.integer("max_power"),
        speed_avg_mps=lap.number("enhanced_avg_speed", "avg_speed"),
        speed_max_mps=lap.number("enhanced_max_speed", "max_speed"),
        cadence_avg=lap.integer("avg_cadence"),
        cadence_max=lap.integer("max_cadence"),
        elevation_gain_m=lap.number("total_ascent"),
        elevation_loss_m=lap.number("total_descent"),
        calories=lap.integer("total_calories"),
        time_series=time_series,
    )

    return CompletedSet(
        set_number=set_number,
        duration_sec=int(duration) if duration is not None else None,
        distance_meters=lap.number("total_distance"),
        completed_at=to_iso8601(end) if end is not None else None,
        telemetry=telemetry,
        swimming=swimming,
    )


# (time series array, FIT field names, cast)
SERIES_FIELDS: tuple[tuple[str, tuple[str, ...], type], ...] = (
    ("heart_rate", ("heart_rate",), int),
    ("power", ("power",), int),
    ("cadence", ("cadence",), int),
    ("speed_mps", ("enhanced_speed", "speed"), float),
    ("distance_m", ("distance",), float),
    ("elevation_m", ("enhanced_altitude", "altitude"), float),
    ("temperature_c", ("temperature",), float),
)


def _lap_time_series(
    records: list[FitRecord],
    start: datetime,
    end: datetime,
    include_end: bool = False,
) -> TimeSeriesData | None:
    """Per-second samples recorded during a lap.

    A sample on the boundary between two laps belongs to the later one; only the
    last lap keeps samples stamped exactly at its end.

    An array is included only when every sample in the lap carries the value, so
    all arrays stay parallel to ``timestamps``.
    """
    samples = [
        (moment, r)
        for r in records
        if (moment := r.time("timestamp")) is not None and (start <= moment < end or (include_end and moment == end))
    ]
    if not samples:
        return None

    series: dict[str, Any] = {
        "timestamps": [to_iso8601(moment) for moment, _ in samples],
        "elapsed_sec": [int((moment - start).total_seconds()) for moment, _ in samples],
    }
    for name, fit_names, cast in SERIES_FIELDS:
        values = [record.number(*fit_names) for _, record in samples]
        if all(value is not None for value in values):
            series[name] = [cast(value) for value in values]

    positions = [_position(record) for _, record in samples]
    if all(position is not None for position in positions):
        series["latitude"] = [position[0] for position in positions]
        series["longitude"] = [position[1] for position in positions]

    return TimeSeriesData(**series)


def _pool_unit(pool_length: float) -> PoolLengthUnit:
    if METER_POOL_BAND[0] <= pool_length <= METER_POOL_BAND[1]:
        return PoolLengthUnit.METERS
    if YARD_POOL_BAND[0] <= pool_length <= YARD_POOL_BAND[1]:
        return PoolLengthUnit.YARDS
    return PoolLengthUnit.METERS


def _extract_swimming(context: _SessionContext) -> tuple[SwimmingSetData | None, PoolConfig | None]:
    lengths: list[SwimmingLength] = []
    for record in context.lengths:
        duration = record.number("total_elapsed_time", "total_timer_time")
        if duration is None:
            continue
        strokes = record.integer("total_strokes")
        started = record.time("start_time", "timestamp")
        lengths.append(
            SwimmingLength(
                length_number=len(lengths) + 1,
                stroke_type=map_swim_stroke(record.get("swim_stroke")),
                duration_sec=duration,
                stroke_count=strokes,
                swolf=strokes + math.floor(duration) if strokes is not None else None,
                started_at=to_iso8601(started) if started else None,
                active=is_active_length(record.get("length_type")),
            )
        )

    if not lengths:
        return None, None

    strokes = {length.stroke_type for length in lengths}
    swimming = SwimmingSetData(
        lengths=lengths,
        stroke_type=lengths[0].stroke_type if len(strokes) == 1 else None,
        total_lengths=len(lengths),
    )
    swimming.active_lengths = swimming.count_active_lengths()
    swimming.swolf_avg = swimming.calculate_avg_swolf()

    pool_length = None
    for record in [*context.lengths, context.session]:
        pool_length = record.number("pool_length")
        if pool_length is not None:
            break
    pool_config = None
    if pool_length is not None:
        pool_config = PoolConfig(pool_length=pool_length, pool_length_unit=_pool_unit(pool_length))
    return swimming, pool_config


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------


def _software_version(value: Any) -> str | None:
    if isinstance(value, int):
        return f"{value // 100}.{value % 100}"
    if isinstance(value, float):
        return f"{value:g}"
    return None


def _convert_devices(records: list[FitRecord]) -> list[DeviceInfo]:
    devices: list[DeviceInfo] = []
    seen: set[tuple[Any, Any]] = set()
    for record in records:
        device_type = map_device_type(record.get("device_type"))
        if device_type is None:
            continue
        key = (record.get("device_index"), record.get("serial_number"))
        if key in seen:
            continue
        seen.add(key)

        product = record.get("garmin_product", "product")
        serial = record.get("serial_number")
        hardware = record.get("hardware_version")
        operating = record.number("cum_operating_time")
        device_index = record.get("device_index")
        devices.append(
            DeviceInfo(
                device_index=device_index if isinstance(device_index, int) else None,
                device_type=device_type,
                manufacturer=map_manufacturer(record.get("manufacturer")),
                product=f"Product #{product}" if isinstance(product, int) else product,
                serial_number=str(serial) if serial is not None else None,
                software_version=_software_version(record.get("software_version")),
                hardware_version=str(hardware) if hardware is not None else None,
                cumulative_operating_time_hours=operating / 3600.0 if operating is not None else None,
            )
        )
    return devices

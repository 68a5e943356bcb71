"""Validation rules for PWF history exports.

Walk order: root, units, workouts (exercises, sets), personal records, body
measurements, telemetry at every level, then multi-sport segments. Range checks
on telemetry are warnings: out-of-range samples may be legitimate and are only
reported for review. Structural problems (GPS coordinates, segment indices) are
errors.
"""

from __future__ import annotations

import re
from datetime import date

from loguru import logger

from pwf.schema.common import IMPERIAL_DISTANCE_UNITS, WeightUnit
from pwf.schema.history import (
    DISTANCE_TIME_RECORD_TYPES,
    WEIGHT_RECORD_TYPES,
    AdvancedMetrics,
    CompletedExercise,
    GpsRoute,
    History,
    HistoryStatistics,
    PoolLengthUnit,
    PowerMetrics,
    SetTelemetry,
    SportSegment,
    TimeInZones,
    TimeSeriesData,
    Units,
    Workout,
    WorkoutTelemetry,
)
from pwf.schema.parsing import DocumentParseError, parse_history
from pwf.validation import codes
from pwf.validation.diagnostics import DiagnosticCollector, ValidationResult

SUPPORTED_HISTORY_VERSIONS = frozenset({1, 2})
LB_TO_KG = 0.45359237
SWOLF_TOLERANCE = 1
RATIO_TOLERANCE = 0.02

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# (fields, low, high, code, unit label); None means unbounded on that side
TelemetryRange = tuple[tuple[str, ...], float | None, float | None, str, str]

TELEMETRY_RANGES: tuple[TelemetryRange, ...] = (
    (("heart_rate_avg", "heart_rate_max", "heart_rate_min"), 20, 250, codes.HEART_RATE_OUT_OF_RANGE, "bpm"),
    (("power_avg", "power_max", "power_min"), 0, None, codes.NEGATIVE_POWER, "W"),
    (("cadence_avg", "cadence_max"), 0, 255, codes.CADENCE_OUT_OF_RANGE, "rpm"),
    (
        (
            "total_elevation_gain_m",
            "total_elevation_gain_ft",
            "total_elevation_loss_m",
            "total_elevation_loss_ft",
            "elevation_gain_m",
            "elevation_gain_ft",
            "elevation_loss_m",
            "elevation_loss_ft",
        ),
        0,
        None,
        codes.NEGATIVE_ELEVATION_CHANGE,
        "",
    ),
    (("humidity_percent",), 0, 100, codes.HUMIDITY_OUT_OF_RANGE, "%"),
    (("temperature_c",), -50, 60, codes.TEMPERATURE_OUT_OF_RANGE, "°C"),
    (("temperature_f",), -58, 140, codes.TEMPERATURE_OUT_OF_RANGE, "°F"),
    (
        (
            "speed_avg_mps",
            "speed_avg_kph",
            "speed_avg_mph",
            "speed_max_mps",
            "speed_max_kph",
            "speed_max_mph",
        ),
        0,
        None,
        codes.NEGATIVE_SPEED,
        "",
    ),
    (("total_distance_m", "total_distance_km", "total_distance_mi"), 0, None, codes.NEGATIVE_DISTANCE, ""),
)

# Per-sample checks on time series arrays: (array, low, high, code, severity is error)
SAMPLE_RANGES: tuple[tuple[str, float | None, float | None, str, bool], ...] = (
    ("heart_rate", 20, 250, codes.HEART_RATE_OUT_OF_RANGE, False),
    ("power", 0, None, codes.NEGATIVE_POWER, False),
    ("cadence", 0, 255, codes.CADENCE_OUT_OF_RANGE, False),
    ("speed_mps", 0, None, codes.NEGATIVE_SPEED, False),
    ("temperature_c", -50, 60, codes.TEMPERATURE_OUT_OF_RANGE, False),
    ("distance_m", 0, None, codes.NEGATIVE_DISTANCE, False),
    ("latitude", -90, 90, codes.LATITUDE_OUT_OF_RANGE, True),
    ("longitude", -180, 180, codes.LONGITUDE_OUT_OF_RANGE, True),
)

METRIC_DISTANCE_FIELDS = (
    "total_distance_m",
    "total_distance_km",
    "total_elevation_gain_m",
    "total_elevation_loss_m",
    "elevation_gain_m",
    "elevation_loss_m",
    "speed_avg_kph",
    "speed_max_kph",
    "pace_avg_sec_per_km",
)
IMPERIAL_DISTANCE_FIELDS = (
    "total_distance_mi",
    "total_elevation_gain_ft",
    "total_elevation_loss_ft",
    "elevation_gain_ft",
    "elevation_loss_ft",
    "speed_avg_mph",
    "speed_max_mph",
    "pace_avg_sec_per_mi",
)


class HistoryValidationResult(ValidationResult[History, HistoryStatistics]):
    @property
    def history(self) -> History | None:
        return self.document


def validate_history(yaml_text: str) -> HistoryValidationResult:
    """Validate YAML text as a PWF history export.

    Args:
        yaml_text: History document as YAML

    Returns:
        HistoryValidationResult; ``history`` and ``statistics`` are set only when valid
    """
    collector = DiagnosticCollector()
    try:
        history = parse_history(yaml_text)
    except DocumentParseError as e:
        collector.error("", str(e))
        return HistoryValidationResult(valid=False, errors=collector.errors, warnings=collector.warnings)

    _validate_root(history, collector)
    _validate_units(history, collector)

    for workout_idx, workout in enumerate(history.workouts):
        _validate_workout(workout, f"workouts[{workout_idx}]", collector)

    _validate_personal_records(history, collector)
    _validate_body_measurements(history, collector)

    for workout_idx, workout in enumerate(history.workouts):
        _validate_workout_telemetry(workout, f"workouts[{workout_idx}]", collector)

    for workout_idx, workout in enumerate(history.workouts):
        if workout.sport_segments:
            _validate_segments(workout.sport_segments, f"workouts[{workout_idx}].sport_segments", collector)

    valid = not collector.has_errors
    logger.debug(f"History validated: valid={valid} errors={len(collector.errors)} warnings={len(collector.warnings)}")
    return HistoryValidationResult(
        valid=valid,
        document=history if valid else None,
        errors=collector.errors,
        warnings=collector.warnings,
        statistics=compute_history_statistics(history) if valid else None,
    )


def find_v2_fields(history: History) -> list[str]:
    """Names of v2.1 features present anywhere in the document, in first-seen order."""
    found: list[str] = []

    def mark(name: str) -> None:
        if name not in found:
            found.append(name)

    def scan_telemetry(telemetry: WorkoutTelemetry | None) -> None:
        if telemetry is None:
            return
        if telemetry.gps_route is not None:
            mark("gps_route")
        if telemetry.time_in_zones is not None:
            mark("time_in_zones")
        if telemetry.power_metrics is not None:
            mark("power_metrics")
        if telemetry.advanced_metrics is not None:
            mark("advanced_metrics")

    for workout in history.workouts:
        scan_telemetry(workout.telemetry)
        if workout.devices:
            mark("devices")
        if workout.sport_segments:
            mark("sport_segments")
            for segment in workout.sport_segments:
                scan_telemetry(segment.telemetry)
        for exercise in workout.exercises:
            if exercise.pool_config is not None:
                mark("pool_config")
            for completed_set in exercise.sets:
                if completed_set.swimming is not None:
                    mark("swimming")
                if completed_set.telemetry is not None and completed_set.telemetry.time_series is not None:
                    mark("time_series")
    return found


def _validate_root(history: History, collector: DiagnosticCollector) -> None:
    if history.history_version not in SUPPORTED_HISTORY_VERSIONS:
        collector.error(
            "history_version",
            f"Unsupported history_version: {history.history_version}. Supported versions: 1, 2",
            codes.INVALID_HISTORY_VERSION,
        )
    elif history.history_version == 1:
        v2_fields = find_v2_fields(history)
        if v2_fields:
            collector.error(
                "history_version",
                f"history_version 2 is required for: {', '.join(v2_fields)}",
                codes.V2_FIELDS_ON_V1,
            )

    if not history.exported_at.strip():
        collector.error("exported_at", "exported_at timestamp is required", codes.MISSING_EXPORTED_AT)


def _declared_units(history: History) -> list[tuple[str, Units]]:
    declared: list[tuple[str, Units]] = []
    if "units" in history.model_fields_set:
        declared.append(("units", history.units))
    if history.export_source is not None and history.export_source.preferred_units is not None:
        declared.append(("export_source.preferred_units", history.export_source.preferred_units))
    return declared


def _iter_telemetry(history: History):
    for workout in history.workouts:
        if workout.telemetry is not None:
            yield workout.telemetry
        for segment in workout.sport_segments or []:
            if segment.telemetry is not None:
                yield segment.telemetry
        for exercise in workout.exercises:
            for completed_set in exercise.sets:
                if completed_set.telemetry is not None:
                    yield completed_set.telemetry


def _validate_units(history: History, collector: DiagnosticCollector) -> None:
    declared = _declared_units(history)
    if not declared:
        return

    sets = [s for workout in history.workouts for exercise in workout.exercises for s in exercise.sets]
    uses_kg = any(s.weight_kg is not None for s in sets)
    uses_lb = any(s.weight_lb is not None for s in sets)

    telemetry = list(_iter_telemetry(history))
    uses_metric = any(getattr(t, f, None) is not None for t in telemetry for f in METRIC_DISTANCE_FIELDS)
    uses_imperial = any(getattr(t, f, None) is not None for t in telemetry for f in IMPERIAL_DISTANCE_FIELDS)

    for prefix, units in declared:
        if units.weight == WeightUnit.LB and uses_kg and not uses_lb:
            collector.warning(
                f"{prefix}.weight",
                "Weight unit is 'lb', but only kg values are present in workouts",
                codes.WEIGHT_UNITS_MISMATCH,
            )
        elif units.weight == WeightUnit.KG and uses_lb and not uses_kg:
            collector.warning(
                f"{prefix}.weight",
                "Weight unit is 'kg', but only lb values are present in workouts",
                codes.WEIGHT_UNITS_MISMATCH,
            )

        imperial = units.distance in IMPERIAL_DISTANCE_UNITS
        if imperial and uses_metric and not uses_imperial:
            collector.warning(
                f"{prefix}.distance",
                f"Distance unit is '{units.distance}', but telemetry only uses metric fields",
                codes.DISTANCE_UNITS_MISMATCH,
            )
        elif not imperial and uses_imperial and not uses_metric:
            collector.warning(
                f"{prefix}.distance",
                f"Distance unit is '{units.distance}', but telemetry only uses imperial fields",
                codes.DISTANCE_UNITS_MISMATCH,
            )


def _is_calendar_date(value: str) -> bool:
    if not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _validate_workout(workout: Workout, path: str, collector: DiagnosticCollector) -> None:
    if not workout.date.strip():
        collector.error(f"{path}.date", "Workout date is required", codes.MISSING_WORKOUT_DATE)
    elif not _is_calendar_date(workout.date):
        collector.warning(f"{path}.date", f"Workout date should be YYYY-MM-DD, got '{workout.date}'", codes.INVALID_WORKOUT_DATE)

    if not workout.exercises:
        collector.warning(f"{path}.exercises", "Workout has no exercises", codes.NO_EXERCISES)

    for ex_idx, exercise in enumerate(workout.exercises):
        _validate_exercise(exercise, f"{path}.exercises[{ex_idx}]", collector)


def _validate_exercise(exercise: CompletedExercise, path: str, collector: DiagnosticCollector) -> None:
    if not exercise.name.strip():
        collector.error(f"{path}.name", "Exercise name is required", codes.MISSING_EXERCISE_NAME)

    if not exercise.sets:
        collector.warning(f"{path}.sets", "Exercise has no recorded sets", codes.NO_SETS)

    for set_idx, completed_set in enumerate(exercise.sets):
        set_path = f"{path}.sets[{set_idx}]"

        has_metric = any(
            value is not None
            for value in (
                completed_set.reps,
                completed_set.weight_kg,
                completed_set.weight_lb,
                completed_set.duration_sec,
                completed_set.distance_meters,
            )
        )
        if not has_metric:
            collector.warning(
                set_path,
                "Set has no recorded metrics (reps, weight, duration, or distance)",
                codes.NO_METRICS,
            )

        if completed_set.rpe is not None and not 0.0 <= completed_set.rpe <= 10.0:
            collector.warning(
                f"{set_path}.rpe",
                f"RPE should be between 0 and 10, got {completed_set.rpe:g}",
                codes.RPE_OUT_OF_RANGE,
            )
        if completed_set.rir is not None and not 0 <= completed_set.rir <= 10:
            collector.warning(
                f"{set_path}.rir",
                f"RIR typically ranges 0-10, got {completed_set.rir}",
                codes.RIR_OUT_OF_RANGE,
            )
        if completed_set.rpe is not None and completed_set.rir is not None:
            collector.warning(
                set_path,
                "Both RPE and RIR are set. Typically only one should be used.",
                codes.RPE_RIR_BOTH_SET,
            )


def _validate_personal_records(history: History, collector: DiagnosticCollector) -> None:
    for pr_idx, record in enumerate(history.personal_records):
        path = f"personal_records[{pr_idx}]"

        if not record.exercise_name.strip():
            collector.error(f"{path}.exercise_name", "Personal record must have exercise_name", codes.MISSING_PR_EXERCISE)
        if not record.achieved_at.strip():
            collector.error(f"{path}.achieved_at", "Personal record must have achieved_at date", codes.MISSING_PR_DATE)

        if record.unit is None:
            if record.record_type in WEIGHT_RECORD_TYPES:
                collector.warning(
                    f"{path}.unit",
                    "Weight-based personal records should specify a unit (kg or lb)",
                    codes.PR_MISSING_UNIT,
                )
            elif record.record_type in DISTANCE_TIME_RECORD_TYPES:
                collector.warning(
                    f"{path}.unit",
                    "Distance/time personal records should specify appropriate units",
                    codes.PR_MISSING_UNIT,
                )


def _validate_body_measurements(history: History, collector: DiagnosticCollector) -> None:
    for bm_idx, measurement in enumerate(history.body_measurements):
        path = f"body_measurements[{bm_idx}]"

        if not measurement.date.strip():
            collector.error(f"{path}.date", "Body measurement must have date", codes.MISSING_BM_DATE)

        has_value = (
            measurement.weight_kg is not None
            or measurement.weight_lb is not None
            or measurement.body_fat_percent is not None
            or measurement.measurements is not None
        )
        if not has_value:
            collector.warning(path, "Body measurement entry has no recorded values", codes.NO_BM_VALUES)


# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------


def _validate_workout_telemetry(workout: Workout, path: str, collector: DiagnosticCollector) -> None:
    if workout.telemetry is not None:
        _check_telemetry(workout.telemetry, f"{path}.telemetry", collector)

    for ex_idx, exercise in enumerate(workout.exercises):
        ex_path = f"{path}.exercises[{ex_idx}]"

        if exercise.pool_config is not None:
            pool = exercise.pool_config
            if pool.pool_length <= 0:
                collector.error(
                    f"{ex_path}.pool_config.pool_length",
                    f"Pool length must be positive, got {pool.pool_length:g}",
                    codes.INVALID_POOL_CONFIG,
                )
            if pool.pool_length_unit not in set(PoolLengthUnit):
                collector.error(
                    f"{ex_path}.pool_config.pool_length_unit",
                    f"Unknown pool length unit '{pool.pool_length_unit}' (expected meters or yards)",
                    codes.INVALID_POOL_CONFIG,
                )

        for set_idx, completed_set in enumerate(exercise.sets):
            set_path = f"{ex_path}.sets[{set_idx}]"
            if completed_set.telemetry is not None:
                _check_telemetry(completed_set.telemetry, f"{set_path}.telemetry", collector)
            if completed_set.swimming is not None:
                for len_idx, length in enumerate(completed_set.swimming.lengths):
                    expected = length.calculate_swolf()
                    if length.swolf is not None and expected is not None and abs(length.swolf - expected) > SWOLF_TOLERANCE:
                        collector.warning(
                            f"{set_path}.swimming.lengths[{len_idx}].swolf",
                            f"SWOLF {length.swolf} does not match stroke_count + duration ({expected})",
                            codes.SWOLF_MISMATCH,
                        )

    for seg_idx, segment in enumerate(workout.sport_segments or []):
        if segment.telemetry is not None:
            _check_telemetry(segment.telemetry, f"{path}.sport_segments[{seg_idx}].telemetry", collector)


def _format_range(low: float | None, high: float | None, unit: str) -> str:
    suffix = f" {unit}" if unit else ""
    if high is None:
        return f">= {low:g}{suffix}"
    return f"{low:g}-{high:g}{suffix}"


def _in_range(value: float, low: float | None, high: float | None) -> bool:
    if low is not None and value < low:
        return False
    return not (high is not None and value > high)


def _check_telemetry(telemetry: WorkoutTelemetry | SetTelemetry, path: str, collector: DiagnosticCollector) -> None:
    for fields, low, high, code, unit in TELEMETRY_RANGES:
        for field in fields:
            value = getattr(telemetry, field, None)
            if value is not None and not _in_range(value, low, high):
                collector.warning(
                    f"{path}.{field}",
                    f"{field} {value:g} is outside the expected range ({_format_range(low, high, unit)})",
                    code,
                )

    for field in ("pace_avg_sec_per_km", "pace_avg_sec_per_mi"):
        value = getattr(telemetry, field)
        if value is not None and value <= 0:
            collector.warning(f"{path}.{field}", f"{field} must be positive, got {value:g}", codes.NON_POSITIVE_PACE)

    if isinstance(telemetry, WorkoutTelemetry):
        if telemetry.gps_route is not None:
            _check_gps_route(telemetry.gps_route, f"{path}.gps_route", collector)
        if telemetry.advanced_metrics is not None:
            _check_advanced_metrics(telemetry.advanced_metrics, f"{path}.advanced_metrics", collector)
        if telemetry.power_metrics is not None:
            _check_power_metrics(telemetry.power_metrics, telemetry.power_avg, f"{path}.power_metrics", collector)
        if telemetry.time_in_zones is not None:
            _check_zones(telemetry.time_in_zones, f"{path}.time_in_zones", collector)
    elif telemetry.time_series is not None:
        _check_time_series(telemetry.time_series, f"{path}.time_series", collector)


def _check_gps_route(route: GpsRoute, path: str, collector: DiagnosticCollector) -> None:
    if route.total_distance_m is not None and route.total_distance_m < 0:
        collector.warning(f"{path}.total_distance_m", "Route distance cannot be negative", codes.NEGATIVE_DISTANCE)

    for idx, position in enumerate(route.positions):
        pos_path = f"{path}.positions[{idx}]"
        if not -90.0 <= position.latitude_deg <= 90.0:
            collector.error(
                f"{pos_path}.latitude_deg",
                f"Latitude {position.latitude_deg:g} is outside [-90, 90]",
                codes.LATITUDE_OUT_OF_RANGE,
            )
        if not -180.0 <= position.longitude_deg <= 180.0:
            collector.error(
                f"{pos_path}.longitude_deg",
                f"Longitude {position.longitude_deg:g} is outside [-180, 180]",
                codes.LONGITUDE_OUT_OF_RANGE,
            )
        if position.heading_deg is not None and not 0.0 <= position.heading_deg < 360.0:
            collector.error(
                f"{pos_path}.heading_deg",
                f"Heading {position.heading_deg:g} is outside [0, 360)",
                codes.HEADING_OUT_OF_RANGE,
            )
        if position.heart_rate_bpm is not None and not 20 <= position.heart_rate_bpm <= 250:
            collector.warning(
                f"{pos_path}.heart_rate_bpm",
                f"heart_rate_bpm {position.heart_rate_bpm} is outside the expected range (20-250 bpm)",
                codes.HEART_RATE_OUT_OF_RANGE,
            )


def _check_advanced_metrics(metrics: AdvancedMetrics, path: str, collector: DiagnosticCollector) -> None:
    for field in ("training_effect", "anaerobic_training_effect"):
        value = getattr(metrics, field)
        if value is not None and not 0.0 <= value <= 5.0:
            collector.warning(f"{path}.{field}", f"{field} {value:g} is outside 0.0-5.0", codes.TRAINING_EFFECT_OUT_OF_RANGE)

    condition = metrics.performance_condition
    if condition is not None and not -20 <= condition <= 20:
        collector.warning(
            f"{path}.performance_condition",
            f"performance_condition {condition} is outside -20 to 20",
            codes.PERFORMANCE_CONDITION_OUT_OF_RANGE,
        )


def _ratio_mismatch(reported: float, numerator: float, denominator: float) -> float | None:
    """Return the expected ratio when ``reported`` deviates from it beyond tolerance."""
    if denominator <= 0:
        return None
    expected = numerator / denominator
    if expected == 0:
        return None
    if abs(reported - expected) / expected > RATIO_TOLERANCE:
        return expected
    return None


def _check_power_metrics(metrics: PowerMetrics, power_avg: int | None, path: str, collector: DiagnosticCollector) -> None:
    np_watts = metrics.normalized_power
    if np_watts is None:
        return

    if metrics.intensity_factor is not None and metrics.ftp_watts:
        expected = _ratio_mismatch(metrics.intensity_factor, np_watts, metrics.ftp_watts)
        if expected is not None:
            collector.warning(
                f"{path}.intensity_factor",
                f"intensity_factor {metrics.intensity_factor:g} does not match normalized_power / ftp_watts ({expected:.3f})",
                codes.INTENSITY_FACTOR_MISMATCH,
            )

    if metrics.variability_index is not None and power_avg:
        expected = _ratio_mismatch(metrics.variability_index, np_watts, power_avg)
        if expected is not None:
            collector.warning(
                f"{path}.variability_index",
                f"variability_index {metrics.variability_index:g} does not match normalized_power / power_avg ({expected:.3f})",
                codes.VARIABILITY_INDEX_MISMATCH,
            )


def _check_zones(zones: TimeInZones, path: str, collector: DiagnosticCollector) -> None:
    pairs = (
        ("hr_zones_sec", "hr_zone_boundaries"),
        ("power_zones_sec", "power_zone_boundaries"),
        ("pace_zones_sec", "pace_zone_boundaries"),
    )
    for zones_field, boundaries_field in pairs:
        times = getattr(zones, zones_field)
        boundaries = getattr(zones, boundaries_field)
        if times is None or boundaries is None:
            continue
        # n zones are bounded by n-1 interior, n upper or n+1 edge values
        if abs(len(boundaries) - len(times)) > 1:
            collector.warning(
                f"{path}.{boundaries_field}",
                f"{boundaries_field} has {len(boundaries)} values but {zones_field} has {len(times)} zones",
                codes.ZONE_LENGTH_MISMATCH,
            )


def _check_time_series(series: TimeSeriesData, path: str, collector: DiagnosticCollector) -> None:
    for message in series.length_mismatches():
        collector.warning(path, message, codes.TIME_SERIES_LENGTH_MISMATCH)

    for field, low, high, code, is_error in SAMPLE_RANGES:
        samples = getattr(series, field)
        if not samples:
            continue
        bad = sum(1 for value in samples if not _in_range(value, low, high))
        if bad:
            message = f"{bad} {field} sample(s) outside {_format_range(low, high, '')}"
            if is_error:
                collector.error(f"{path}.{field}", message, code)
            else:
                collector.warning(f"{path}.{field}", message, code)


# ---------------------------------------------------------------------------
# Multi-sport
# ---------------------------------------------------------------------------


def _validate_segments(segments: list[SportSegment], path: str, collector: DiagnosticCollector) -> None:
    seen: set[int] = set()
    for idx, segment in enumerate(segments):
        if segment.segment_index in seen:
            collector.error(
                f"{path}[{idx}].segment_index",
                f"Duplicate segment_index: {segment.segment_index}",
                codes.DUPLICATE_SEGMENT_INDEX,
            )
        seen.add(segment.segment_index)

    if seen != set(range(len(seen))):
        collector.error(
            path,
            f"segment_index values must be 0..{len(seen) - 1} without gaps, got {sorted(seen)}",
            codes.SEGMENT_INDEX_GAP,
        )

    ordered = sorted(enumerate(segments), key=lambda item: item[1].segment_index)
    for position, (idx, segment) in enumerate(ordered):
        transition = segment.transition
        if transition is None:
            continue
        transition_path = f"{path}[{idx}].transition"
        if transition.from_sport != segment.sport:
            collector.error(
                f"{transition_path}.from_sport",
                f"Transition from_sport '{transition.from_sport}' does not match segment sport '{segment.sport}'",
                codes.TRANSITION_SPORT_MISMATCH,
            )
        if position + 1 < len(ordered):
            next_segment = ordered[position + 1][1]
            if transition.to_sport != next_segment.sport:
                collector.error(
                    f"{transition_path}.to_sport",
                    f"Transition to_sport '{transition.to_sport}' does not match next segment sport '{next_segment.sport}'",
                    codes.TRANSITION_SPORT_MISMATCH,
                )


def set_volume_kg(reps: int | None, weight_kg: float | None, weight_lb: float | None) -> float:
    """Volume of one set in kilograms; lb-only sets are converted."""
    if reps is None:
        return 0.0
    if weight_kg is not None:
        return reps * weight_kg
    if weight_lb is not None:
        return reps * weight_lb * LB_TO_KG
    return 0.0


def compute_history_statistics(history: History) -> HistoryStatistics:
    stats = HistoryStatistics(
        total_workouts=len(history.workouts),
        personal_records_count=len(history.personal_records),
        body_measurements_count=len(history.body_measurements),
    )

    dates: list[str] = []
    volume = 0.0
    for workout in history.workouts:
        if workout.date:
            dates.append(workout.date)
        stats.total_exercises += len(workout.exercises)
        stats.sport_segments_count += len(workout.sport_segments or [])
        for exercise in workout.exercises:
            stats.total_sets += len(exercise.sets)
            for completed_set in exercise.sets:
                volume += set_volume_kg(completed_set.reps, completed_set.weight_kg, completed_set.weight_lb)

    stats.total_volume_kg = volume
    if dates:
        dates.sort()
        stats.date_range_start = dates[0]
        stats.date_range_end = dates[-1]
    return stats

"""History document model (completed workouts with optional telemetry).

Covers history_version 1 and the v2 telemetry additions: time series,
zones, power and advanced metrics, GPS routes, swimming lengths, devices and
multi-sport segments.
"""

from __future__ import annotations

import math
from enum import StrEnum

from pydantic import Field

from pwf.schema.base import PwfModel
from pwf.schema.common import (
    DistanceUnit,
    DistanceUnitField,
    ModalityField,
    SportField,
    WeightUnit,
    WeightUnitField,
)

YARDS_TO_METERS = 0.9144


class SetType(StrEnum):
    WORKING = "working"
    WARMUP = "warmup"
    DROPSET = "dropset"
    FAILURE = "failure"
    AMRAP = "amrap"


class RecordType(StrEnum):
    ONE_REP_MAX = "1rm"
    MAX_WEIGHT_3RM = "max_weight_3rm"
    MAX_WEIGHT_5RM = "max_weight_5rm"
    MAX_WEIGHT_8RM = "max_weight_8rm"
    MAX_WEIGHT_10RM = "max_weight_10rm"
    MAX_WEIGHT = "max_weight"
    MAX_REPS = "max_reps"
    MAX_VOLUME = "max_volume"
    MAX_DURATION = "max_duration"
    MAX_DISTANCE = "max_distance"
    FASTEST_TIME = "fastest_time"


WEIGHT_RECORD_TYPES = frozenset(
    {
        RecordType.ONE_REP_MAX,
        RecordType.MAX_WEIGHT_3RM,
        RecordType.MAX_WEIGHT_5RM,
        RecordType.MAX_WEIGHT_8RM,
        RecordType.MAX_WEIGHT_10RM,
        RecordType.MAX_WEIGHT,
    }
)
DISTANCE_TIME_RECORD_TYPES = frozenset({RecordType.MAX_DISTANCE, RecordType.FASTEST_TIME})


class StrokeType(StrEnum):
    FREESTYLE = "freestyle"
    BACKSTROKE = "backstroke"
    BREASTSTROKE = "breaststroke"
    BUTTERFLY = "butterfly"
    DRILL = "drill"
    MIXED = "mixed"
    IM = "im"

    @classmethod
    def _missing_(cls, value: object) -> StrokeType | None:
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "individual_medley":
                return cls.IM
            for member in cls:
                if member.value == key:
                    return member
        return None


class PoolLengthUnit(StrEnum):
    METERS = "meters"
    YARDS = "yards"


class TrainingStatus(StrEnum):
    DETRAINING = "detraining"
    RECOVERY = "recovery"
    MAINTAINING = "maintaining"
    PRODUCTIVE = "productive"
    PEAKING = "peaking"
    OVERREACHING = "overreaching"
    UNKNOWN = "unknown"


class GpsFix(StrEnum):
    NONE = "none"
    FIX_2D = "fix_2d"
    FIX_3D = "fix_3d"
    DGPS = "dgps"
    UNKNOWN = "unknown"


class DeviceType(StrEnum):
    WATCH = "watch"
    BIKE_COMPUTER = "bike_computer"
    HEART_RATE_MONITOR = "heart_rate_monitor"
    POWER_METER = "power_meter"
    SPEED_SENSOR = "speed_sensor"
    CADENCE_SENSOR = "cadence_sensor"
    SPEED_CADENCE_SENSOR = "speed_cadence_sensor"
    FOOT_POD = "foot_pod"
    SMART_TRAINER = "smart_trainer"
    CAMERA = "camera"
    PHONE = "phone"
    OTHER = "other"


class Manufacturer(StrEnum):
    """Known device makers; any other maker is carried as a plain string."""

    GARMIN = "garmin"
    WAHOO = "wahoo"
    POLAR = "polar"
    SUUNTO = "suunto"
    COROS = "coros"
    HAMMERHEAD = "hammerhead"
    STAGES = "stages"
    SRAM = "sram"
    SHIMANO = "shimano"
    QUARQ = "quarq"
    POWER_TAP = "power_tap"
    STRYD = "stryd"
    WHOOP = "whoop"
    APPLE = "apple"
    SAMSUNG = "samsung"
    FITBIT = "fitbit"
    OTHER = "other"


class BatteryStatus(StrEnum):
    GOOD = "good"
    LOW = "low"
    CRITICAL = "critical"
    CHARGING = "charging"
    UNKNOWN = "unknown"


class ConnectionType(StrEnum):
    LOCAL = "local"
    ANT_PLUS = "ant_plus"
    BLUETOOTH_LE = "bluetooth_le"
    BLUETOOTH = "bluetooth"
    WIFI = "wifi"
    USB = "usb"
    UNKNOWN = "unknown"


class Units(PwfModel):
    weight: WeightUnitField = WeightUnit.KG
    distance: DistanceUnitField = DistanceUnit.METERS


class ExportSource(PwfModel):
    app_name: str | None = None
    app_version: str | None = None
    platform: str | None = None
    preferred_units: Units | None = None


# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------


class LactateThreshold(PwfModel):
    heart_rate_bpm: int | None = None
    speed_mps: float | None = None
    power_watts: int | None = None
    detected_at: str | None = None


class AdvancedMetrics(PwfModel):
    """Physiological estimates, mostly from device algorithms."""

    training_effect: float | None = None
    anaerobic_training_effect: float | None = None
    recovery_time_hours: int | None = None
    vo2_max_estimate: float | None = None
    lactate_threshold: LactateThreshold | None = None
    performance_condition: int | None = None
    training_load: float | None = None
    training_status: TrainingStatus | None = None


class PowerMetrics(PwfModel):
    normalized_power: int | None = None
    training_stress_score: float | None = None
    intensity_factor: float | None = None
    variability_index: float | None = None
    ftp_watts: int | None = None
    total_work_kj: float | None = None
    left_right_balance: float | None = None
    left_pedal_smoothness: float | None = None
    right_pedal_smoothness: float | None = None
    left_torque_effectiveness: float | None = None
    right_torque_effectiveness: float | None = None


class TimeInZones(PwfModel):
    hr_zones_sec: list[int] | None = None
    power_zones_sec: list[int] | None = None
    hr_zone_boundaries: list[int] | None = None
    power_zone_boundaries: list[int] | None = None
    pace_zones_sec: list[int] | None = None
    pace_zone_boundaries: list[float] | None = None


class GpsPosition(PwfModel):
    latitude_deg: float
    longitude_deg: float
    timestamp: str = ""
    elevation_m: float | None = None
    accuracy_m: float | None = None
    speed_mps: float | None = None
    heading_deg: float | None = None
    heart_rate_bpm: int | None = None
    power_watts: int | None = None
    cadence: int | None = None
    temperature_c: float | None = None


class GpsRoute(PwfModel):
    route_id: str
    name: str | None = None
    positions: list[GpsPosition] = Field(default_factory=list)
    total_distance_m: float | None = None
    total_ascent_m: float | None = None
    total_descent_m: float | None = None
    min_elevation_m: float | None = None
    max_elevation_m: float | None = None
    bbox_sw_lat: float | None = None
    bbox_sw_lng: float | None = None
    bbox_ne_lat: float | None = None
    bbox_ne_lng: float | None = None
    recording_mode: str | None = None
    gps_fix: GpsFix | None = None


# Parallel arrays of TimeSeriesData, in column order
TIME_SERIES_FIELDS: tuple[str, ...] = (
    "elapsed_sec",
    "heart_rate",
    "power",
    "cadence",
    "speed_mps",
    "distance_m",
    "elevation_m",
    "temperature_c",
    "latitude",
    "longitude",
    "grade_percent",
    "respiration_rate",
    "core_temperature_c",
    "muscle_oxygen_percent",
    "power_balance",
    "left_pedal_smoothness",
    "right_pedal_smoothness",
    "left_torque_effectiveness",
    "right_torque_effectiveness",
    "stride_length_m",
    "vertical_oscillation_cm",
    "ground_contact_time_ms",
    "ground_contact_balance",
    "stroke_rate",
    "stroke_count",
    "swolf",
    "stroke_type",
)


class TimeSeriesData(PwfModel):
    """Per-sample data; every present array is parallel to ``timestamps``."""

    timestamps: list[str] = Field(default_factory=list)
    elapsed_sec: list[int] | None = None
    heart_rate: list[int] | None = None
    power: list[int] | None = None
    cadence: list[int] | None = None
    speed_mps: list[float] | None = None
    distance_m: list[float] | None = None
    elevation_m: list[float] | None = None
    temperature_c: list[float] | None = None
    latitude: list[float] | None = None
    longitude: list[float] | None = None
    grade_percent: list[float] | None = None
    respiration_rate: list[int] | None = None
    core_temperature_c: list[float] | None = None
    muscle_oxygen_percent: list[float] | None = None
    power_balance: list[float] | None = None
    left_pedal_smoothness: list[float] | None = None
    right_pedal_smoothness: list[float] | None = None
    left_torque_effectiveness: list[float] | None = None
    right_torque_effectiveness: list[float] | None = None
    stride_length_m: list[float] | None = None
    vertical_oscillation_cm: list[float] | None = None
    ground_contact_time_ms: list[int] | None = None
    ground_contact_balance: list[float] | None = None
    stroke_rate: list[int] | None = None
    stroke_count: list[int] | None = None
    swolf: list[int] | None = None
    stroke_type: list[StrokeType] | None = None

    def __len__(self) -> int:
        return len(self.timestamps)

    def length_mismatches(self) -> list[str]:
        """Describe every parallel array whose length differs from ``timestamps``."""
        expected = len(self.timestamps)
        messages: list[str] = []
        for name in TIME_SERIES_FIELDS:
            data = getattr(self, name)
            if data is not None and len(data) != expected:
                messages.append(f"{name} length ({len(data)}) doesn't match timestamps length ({expected})")
        return messages

    def validate_lengths(self) -> None:
        """Check parallel array lengths.

        Raises:
            ValueError: With the first mismatch message
        """
        mismatches = self.length_mismatches()
        if mismatches:
            raise ValueError(mismatches[0])

    def duration_sec(self) -> int | None:
        if self.elapsed_sec:
            return self.elapsed_sec[-1]
        return None


class WorkoutTelemetry(PwfModel):
    heart_rate_avg: int | None = None
    heart_rate_max: int | None = None
    heart_rate_min: int | None = None
    power_avg: int | None = None
    power_max: int | None = None
    total_distance_m: float | None = None
    total_distance_km: float | None = None
    total_distance_mi: float | None = None
    total_elevation_gain_m: float | None = None
    total_elevation_gain_ft: float | None = None
    total_elevation_loss_m: float | None = None
    total_elevation_loss_ft: float | None = None
    speed_avg_kph: float | None = None
    speed_avg_mph: float | None = None
    speed_max_kph: float | None = None
    speed_max_mph: float | None = None
    pace_avg_sec_per_km: float | None = None
    pace_avg_sec_per_mi: float | None = None
    cadence_avg: int | None = None
    temperature_c: float | None = None
    temperature_f: float | None = None
    humidity_percent: float | None = None
    total_calories: int | None = None
    gps_route_id: str | None = None
    gps_route: GpsRoute | None = None
    advanced_metrics: AdvancedMetrics | None = None
    power_metrics: PowerMetrics | None = None
    time_in_zones: TimeInZones | None = None


class SetTelemetry(PwfModel):
    heart_rate_avg: int | None = None
    heart_rate_max: int | None = None
    heart_rate_min: int | None = None
    power_avg: int | None = None
    power_max: int | None = None
    power_min: int | None = None
    elevation_gain_m: float | None = None
    elevation_gain_ft: float | None = None
    elevation_loss_m: float | None = None
    elevation_loss_ft: float | None = None
    speed_avg_mps: float | None = None
    speed_avg_kph: float | None = None
    speed_avg_mph: float | None = None
    speed_max_mps: float | None = None
    speed_max_kph: float | None = None
    speed_max_mph: float | None = None
    pace_avg_sec_per_km: float | None = None
    pace_avg_sec_per_mi: float | None = None
    cadence_avg: int | None = None
    cadence_max: int | None = None
    temperature_c: float | None = None
    humidity_percent: float | None = None
    calories: int | None = None
    stroke_rate: int | None = None
    gps_route_id: str | None = None
    time_series: TimeSeriesData | None = None


# ---------------------------------------------------------------------------
# Swimming
# ---------------------------------------------------------------------------


class PoolConfig(PwfModel):
    pool_length: float
    pool_length_unit: PoolLengthUnit | str = Field(default=PoolLengthUnit.METERS, union_mode="left_to_right")

    def length_in_meters(self) -> float:
        if self.pool_length_unit == PoolLengthUnit.YARDS:
            return self.pool_length * YARDS_TO_METERS
        return self.pool_length


class SwimmingLength(PwfModel):
    length_number: int
    stroke_type: StrokeType = StrokeType.FREESTYLE
    duration_sec: float
    stroke_count: int | None = None
    swolf: int | None = None
    started_at: str | None = None
    active: bool | None = None

    def calculate_swolf(self) -> int | None:
        """SWOLF = strokes + whole seconds for the length."""
        if self.stroke_count is None:
            return None
        return self.stroke_count + math.floor(self.duration_sec)


class SwimmingSetData(PwfModel):
    lengths: list[SwimmingLength] = Field(default_factory=list)
    stroke_type: StrokeType | None = None
    total_lengths: int | None = None
    active_lengths: int | None = None
    swolf_avg: int | None = None
    drill_mode: bool | None = None

    def calculate_avg_swolf(self) -> int | None:
        values: list[int] = []
        for length in self.lengths:
            swolf = length.swolf if length.swolf is not None else length.calculate_swolf()
            if swolf is not None:
                values.append(swolf)
        if not values:
            return None
        return sum(values) // len(values)

    def count_active_lengths(self) -> int:
        return sum(1 for length in self.lengths if length.active is not False)


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


class CompletedSet(PwfModel):
    set_number: int | None = None
    set_type: SetType | None = None
    reps: int | None = None
    weight_kg: float | None = None
    weight_lb: float | None = None
    duration_sec: int | None = None
    distance_meters: float | None = None
    rpe: float | None = None
    rir: int | None = None
    notes: str | None = None
    is_pr: bool | None = None
    completed_at: str | None = None
    telemetry: SetTelemetry | None = None
    swimming: SwimmingSetData | None = None


class CompletedExercise(PwfModel):
    id: str | None = None
    name: str = ""
    modality: ModalityField | None = None
    notes: str | None = None
    sets: list[CompletedSet] = Field(default_factory=list)
    pool_config: PoolConfig | None = None
    sport: SportField | None = None


class TransitionData(PwfModel):
    transition_id: str
    from_sport: SportField
    to_sport: SportField
    duration_sec: int | None = None
    started_at: str | None = None
    heart_rate_avg: int | None = None
    notes: str | None = None


class SportSegment(PwfModel):
    segment_id: str
    sport: SportField
    segment_index: int
    started_at: str | None = None
    duration_sec: int | None = None
    distance_m: float | None = None
    exercise_ids: list[str] = Field(default_factory=list)
    telemetry: WorkoutTelemetry | None = None
    transition: TransitionData | None = None
    notes: str | None = None


class Battery(PwfModel):
    start_percent: int | None = None
    end_percent: int | None = None
    voltage: float | None = None
    status: BatteryStatus | None = None


class DeviceConnection(PwfModel):
    connection_type: ConnectionType | None = Field(default=None, alias="type")
    ant_device_number: int | None = None
    bluetooth_id: str | None = None


class Calibration(PwfModel):
    calibration_factor: float | None = Field(default=None, alias="factor")
    last_calibrated: str | None = None
    auto_zero_enabled: bool | None = None


class DeviceInfo(PwfModel):
    device_index: int | None = None
    device_type: DeviceType
    manufacturer: Manufacturer | str = Field(union_mode="left_to_right")
    product: str | None = None
    serial_number: str | None = None
    software_version: str | None = None
    hardware_version: str | None = None
    battery: Battery | None = None
    cumulative_operating_time_hours: float | None = None
    connection: DeviceConnection | None = None
    calibration: Calibration | None = None


class Workout(PwfModel):
    id: str | None = None
    date: str = ""
    started_at: str | None = None
    ended_at: str | None = None
    duration_sec: int | None = None
    title: str | None = None
    notes: str | None = None
    plan_id: str | None = None
    plan_day_id: str | None = None
    exercises: list[CompletedExercise] = Field(default_factory=list)
    telemetry: WorkoutTelemetry | None = None
    devices: list[DeviceInfo] = Field(default_factory=list)
    sport: SportField | None = None
    sport_segments: list[SportSegment] | None = None


class PersonalRecord(PwfModel):
    exercise_name: str = ""
    record_type: RecordType
    value: float
    unit: str | None = None
    achieved_at: str = ""
    workout_id: str | None = None
    notes: str | None = None


class BodyMeasurementValues(PwfModel):
    """Circumferences in centimetres."""

    neck: float | None = None
    shoulders: float | None = None
    chest: float | None = None
    waist: float | None = None
    hips: float | None = None
    bicep_left: float | None = None
    bicep_right: float | None = None
    forearm_left: float | None = None
    forearm_right: float | None = None
    thigh_left: float | None = None
    thigh_right: float | None = None
    calf_left: float | None = None
    calf_right: float | None = None


class BodyMeasurement(PwfModel):
    date: str = ""
    recorded_at: str | None = None
    weight_kg: float | None = None
    weight_lb: float | None = None
    body_fat_percent: float | None = None
    notes: str | None = None
    measurements: BodyMeasurementValues | None = None


class History(PwfModel):
    """Top-level history export document."""

    history_version: int
    exported_at: str = ""
    export_source: ExportSource | None = None
    units: Units = Field(default_factory=Units)
    workouts: list[Workout] = Field(default_factory=list)
    personal_records: list[PersonalRecord] = Field(default_factory=list)
    body_measurements: list[BodyMeasurement] = Field(default_factory=list)

    @property
    def is_v2(self) -> bool:
        return self.history_version == 2


class HistoryStatistics(PwfModel):
    total_workouts: int = 0
    total_exercises: int = 0
    total_sets: int = 0
    total_volume_kg: float = 0.0
    date_range_start: str | None = None
    date_range_end: str | None = None
    personal_records_count: int = 0
    body_measurements_count: int = 0
    sport_segments_count: int = 0

"""FIT enumerations mapped onto PWF types.

Decoded FIT values arrive either as raw profile numbers or, when fitparse knows
the profile type, as symbolic names. Both spellings are accepted.
"""

from __future__ import annotations

from typing import Any

from pwf.schema.common import Sport, parse_sport
from pwf.schema.history import DeviceType, Manufacturer, StrokeType

SPORT_CODES: dict[int, Sport] = {
    0: Sport.RUNNING,
    1: Sport.CYCLING,
    2: Sport.TRANSITION,
    5: Sport.SWIMMING,
}

SPORT_NAMES: dict[str, Sport] = {
    "fitness_equipment": Sport.STRENGTH_TRAINING,
    "training": Sport.STRENGTH_TRAINING,
    "alpine_skiing": Sport.DOWNHILL_SKIING,
    "stand_up_paddleboarding": Sport.STAND_UP_PADDLING,
    "generic": Sport.OTHER,
}

STROKE_CODES: dict[int, StrokeType] = {
    0: StrokeType.FREESTYLE,
    1: StrokeType.BACKSTROKE,
    2: StrokeType.BREASTSTROKE,
    3: StrokeType.BUTTERFLY,
    4: StrokeType.DRILL,
    5: StrokeType.MIXED,
    6: StrokeType.IM,
}

DEVICE_TYPE_CODES: dict[int, DeviceType] = {
    1: DeviceType.WATCH,
    11: DeviceType.BIKE_COMPUTER,
    120: DeviceType.HEART_RATE_MONITOR,
    12: DeviceType.POWER_METER,
    121: DeviceType.POWER_METER,
}

# fitparse names from the antplus_device_type profile
DEVICE_TYPE_NAMES: dict[str, DeviceType] = {
    "heart_rate": DeviceType.HEART_RATE_MONITOR,
    "bike_power": DeviceType.POWER_METER,
    "bike_speed_cadence": DeviceType.SPEED_CADENCE_SENSOR,
    "bike_speed": DeviceType.SPEED_SENSOR,
    "bike_cadence": DeviceType.CADENCE_SENSOR,
    "stride_speed_distance": DeviceType.FOOT_POD,
    "fitness_equipment": DeviceType.SMART_TRAINER,
}

MANUFACTURER_CODES: dict[int, Manufacturer] = {
    1: Manufacturer.GARMIN,
    2: Manufacturer.POLAR,
    3: Manufacturer.WAHOO,
    15: Manufacturer.SUUNTO,
    260: Manufacturer.COROS,
}

MANUFACTURER_NAMES: dict[str, Manufacturer] = {
    "garmin": Manufacturer.GARMIN,
    "polar": Manufacturer.POLAR,
    "polar_electro": Manufacturer.POLAR,
    "wahoo_fitness": Manufacturer.WAHOO,
    "suunto": Manufacturer.SUUNTO,
    "coros": Manufacturer.COROS,
    "hammerhead": Manufacturer.HAMMERHEAD,
    "stages_cycling": Manufacturer.STAGES,
    "sram": Manufacturer.SRAM,
    "shimano": Manufacturer.SHIMANO,
    "quarq": Manufacturer.QUARQ,
    "stryd": Manufacturer.STRYD,
}

UNKNOWN_MANUFACTURER = "Unknown"


def map_fit_sport(value: Any) -> Sport:
    """Map a FIT ``sport`` value; unknown codes become ``Sport.OTHER``."""
    if isinstance(value, int):
        return SPORT_CODES.get(value, Sport.OTHER)
    if isinstance(value, str):
        key = value.strip().lower()
        return SPORT_NAMES.get(key) or parse_sport(key)
    return Sport.OTHER


def map_swim_stroke(value: Any) -> StrokeType:
    """Map a FIT ``swim_stroke`` value, defaulting to freestyle."""
    if isinstance(value, int):
        return STROKE_CODES.get(value, StrokeType.FREESTYLE)
    if isinstance(value, str):
        try:
            return StrokeType(value)
        except ValueError:
            return StrokeType.FREESTYLE
    return StrokeType.FREESTYLE


def map_device_type(value: Any) -> DeviceType | None:
    """Map a FIT ``device_type``; None for types PWF does not track."""
    if isinstance(value, int):
        return DEVICE_TYPE_CODES.get(value)
    if isinstance(value, str):
        return DEVICE_TYPE_NAMES.get(value.strip().lower())
    return None


def map_manufacturer(value: Any) -> Manufacturer | str:
    if isinstance(value, int):
        return MANUFACTURER_CODES.get(value, UNKNOWN_MANUFACTURER)
    if isinstance(value, str):
        return MANUFACTURER_NAMES.get(value.strip().lower(), UNKNOWN_MANUFACTURER)
    return UNKNOWN_MANUFACTURER


def is_active_length(value: Any) -> bool | None:
    """FIT ``length_type``: 0/idle is rest, 1/active is swimming."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() == "active"
    return value == 1

"""Shared enumerations for PWF plan and history documents.

Wire spellings are lowercase (kebab-case for sports). Parsing is forgiving about
case; serialization always emits the canonical spelling.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BeforeValidator


class Modality(StrEnum):
    """Shape of an exercise prescription."""

    STRENGTH = "strength"
    COUNTDOWN = "countdown"
    STOPWATCH = "stopwatch"
    INTERVAL = "interval"
    CYCLING = "cycling"
    RUNNING = "running"
    ROWING = "rowing"
    SWIMMING = "swimming"


class Sport(StrEnum):
    """Activity category for completed work."""

    SWIMMING = "swimming"
    CYCLING = "cycling"
    RUNNING = "running"
    ROWING = "rowing"
    TRANSITION = "transition"
    STRENGTH = "strength"
    STRENGTH_TRAINING = "strength-training"
    HIKING = "hiking"
    WALKING = "walking"
    YOGA = "yoga"
    PILATES = "pilates"
    FUNCTIONAL_FITNESS = "functional-fitness"
    CALISTHENICS = "calisthenics"
    CARDIO = "cardio"
    CROSS_COUNTRY_SKIING = "cross-country-skiing"
    DOWNHILL_SKIING = "downhill-skiing"
    SNOWBOARDING = "snowboarding"
    STAND_UP_PADDLING = "stand-up-paddling"
    KAYAKING = "kayaking"
    ELLIPTICAL = "elliptical"
    STAIR_CLIMBING = "stair-climbing"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Title-cased name, e.g. ``Cross Country Skiing``."""
        return " ".join(part.capitalize() for part in self.value.split("-"))


class WeightUnit(StrEnum):
    KG = "kg"
    LB = "lb"


class DistanceUnit(StrEnum):
    METERS = "meters"
    KILOMETERS = "kilometers"
    MILES = "miles"
    FEET = "feet"
    YARDS = "yards"


IMPERIAL_DISTANCE_UNITS = frozenset({DistanceUnit.MILES, DistanceUnit.FEET, DistanceUnit.YARDS})

# Recognised equipment tags for plan meta
EQUIPMENT_TAGS: tuple[str, ...] = (
    "barbell",
    "dumbbells",
    "kettlebell",
    "pullup_bar",
    "bench",
    "cables",
    "bands",
    "bodyweight",
    "machine",
)

SPORT_ALIASES: dict[str, Sport] = {
    "cross-fit": Sport.FUNCTIONAL_FITNESS,
    "crossfit": Sport.FUNCTIONAL_FITNESS,
    "sup": Sport.STAND_UP_PADDLING,
    "kayak": Sport.KAYAKING,
    "run": Sport.RUNNING,
    "bike": Sport.CYCLING,
    "biking": Sport.CYCLING,
    "swim": Sport.SWIMMING,
}


def _lowercase(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def normalize_sport(value: Any) -> Any:
    """Normalize a sport spelling to its kebab-case wire value.

    Args:
        value: Raw value from a document or converter

    Returns:
        Normalized string (or the input unchanged when it is not a string)
    """
    if not isinstance(value, str):
        return value
    key = value.strip().lower().replace("_", "-").replace(" ", "-")
    alias = SPORT_ALIASES.get(key)
    if alias is not None:
        return alias.value
    return key


def parse_sport(value: str | None) -> Sport:
    """Parse a sport name, falling back to ``Sport.OTHER`` for unknown names."""
    if not value:
        return Sport.OTHER
    try:
        return Sport(normalize_sport(value))
    except ValueError:
        return Sport.OTHER


ModalityField = Annotated[Modality, BeforeValidator(_lowercase)]
SportField = Annotated[Sport, BeforeValidator(normalize_sport)]
WeightUnitField = Annotated[WeightUnit, BeforeValidator(_lowercase)]
DistanceUnitField = Annotated[DistanceUnit, BeforeValidator(_lowercase)]

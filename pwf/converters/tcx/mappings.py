"""Sport names between TCX and PWF."""

from __future__ import annotations

from pwf.schema.common import Sport

TCX_SPORTS: dict[str, Sport] = {
    "running": Sport.RUNNING,
    "biking": Sport.CYCLING,
    "cycling": Sport.CYCLING,
    "swimming": Sport.SWIMMING,
    "rowing": Sport.ROWING,
    "transition": Sport.TRANSITION,
    "strength": Sport.STRENGTH,
    "strength_training": Sport.STRENGTH_TRAINING,
    "strength-training": Sport.STRENGTH_TRAINING,
    "strengthtraining": Sport.STRENGTH_TRAINING,
    "hiking": Sport.HIKING,
    "walking": Sport.WALKING,
    "yoga": Sport.YOGA,
    "pilates": Sport.PILATES,
    "crossfit": Sport.FUNCTIONAL_FITNESS,
    "cross-fit": Sport.FUNCTIONAL_FITNESS,
    "functional-fitness": Sport.FUNCTIONAL_FITNESS,
    "functionalfitness": Sport.FUNCTIONAL_FITNESS,
    "calisthenics": Sport.CALISTHENICS,
    "cardio": Sport.CARDIO,
    "fitness": Sport.CARDIO,
    "cross_country_skiing": Sport.CROSS_COUNTRY_SKIING,
    "cross-country-skiing": Sport.CROSS_COUNTRY_SKIING,
    "xc_skiing": Sport.CROSS_COUNTRY_SKIING,
    "downhill_skiing": Sport.DOWNHILL_SKIING,
    "downhill-skiing": Sport.DOWNHILL_SKIING,
    "alpine_skiing": Sport.DOWNHILL_SKIING,
    "skiing": Sport.DOWNHILL_SKIING,
    "elliptical": Sport.ELLIPTICAL,
    "stair_climbing": Sport.STAIR_CLIMBING,
    "stair-climbing": Sport.STAIR_CLIMBING,
    "stairs": Sport.STAIR_CLIMBING,
}

# TCX v2 only defines Running, Biking and Other
PWF_TO_TCX: dict[Sport, str] = {
    Sport.RUNNING: "Running",
    Sport.CYCLING: "Biking",
}
TCX_OTHER = "Other"


def map_tcx_sport(name: str | None) -> Sport:
    """Map a TCX ``Sport`` attribute (case-insensitive) onto a PWF sport."""
    if not name:
        return Sport.OTHER
    return TCX_SPORTS.get(name.strip().lower(), Sport.OTHER)


def map_pwf_sport_to_tcx(sport: Sport) -> str:
    return PWF_TO_TCX.get(sport, TCX_OTHER)

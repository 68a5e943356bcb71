"""Plan document model (prescriptive workout templates).

One type graph covers plan_version 1 and 2. Fields that only make sense in v2
(exercise_library, exercise_ref, templates, progression_rules) are simply absent
on v1 documents; the plan validator enforces the version rules.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pwf.schema.base import PwfModel
from pwf.schema.common import ModalityField


class PlanStatus(StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PercentOf(StrEnum):
    """Base for percentage loading."""

    ONE_RM = "1rm"
    THREE_RM = "3rm"
    FIVE_RM = "5rm"
    TEN_RM = "10rm"


class GroupType(StrEnum):
    SUPERSET = "superset"
    CIRCUIT = "circuit"


class Difficulty(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ProgressionType(StrEnum):
    LINEAR = "linear"
    DOUBLE_PROGRESSION = "double_progression"


class SuccessCondition(StrEnum):
    ALL_SETS_COMPLETED = "all_sets_completed"
    LAST_SET_COMPLETED = "last_set_completed"
    AVERAGE_REPS_REACHED = "average_reps_reached"


class DeloadCondition(StrEnum):
    FAILED_ONCE_CONSECUTIVE = "failed_once_consecutive"
    FAILED_TWICE_CONSECUTIVE = "failed_twice_consecutive"
    FAILED_THREE_CONSECUTIVE = "failed_three_consecutive"
    RIR_ABOVE_TARGET = "rir_above_target"


class AthleteProfile(PwfModel):
    """Reference thresholds used to interpret zone targets."""

    ftp_watts: int | None = None
    threshold_hr_bpm: int | None = None
    max_hr_bpm: int | None = None
    threshold_pace_sec_per_km: float | None = None
    weight_kg: float | None = None


class PlanMeta(PwfModel):
    id: str | None = None
    title: str = ""
    description: str | None = None
    author: str | None = None
    status: PlanStatus | None = None
    activated_at: str | None = None
    completed_at: str | None = None
    equipment: list[str] = Field(default_factory=list)
    days_per_week: int | None = Field(default=None, alias="daysPerWeek")
    recommended_first: bool = Field(default=False, alias="recommendedFirst")
    tags: list[str] = Field(default_factory=list)
    athlete_profile: AthleteProfile | None = None


class ProgressionRules(PwfModel):
    """Automatic load progression for strength work."""

    type: ProgressionType
    success_condition: SuccessCondition | None = None
    weight_increment_kg: float | None = None
    weight_increment_lbs: float | None = None
    reps_range_min: int | None = None
    reps_range_max: int | None = None
    reps_increment: int | None = None
    deload_condition: DeloadCondition | None = None
    deload_percent: float | None = None
    deload_weeks: int | None = None
    max_weight_kg: float | None = None
    max_weight_lbs: float | None = None
    notes: str | None = None


class TrainingZone(PwfModel):
    zone: int
    duration_sec: int | None = None
    target_power_watts: int | None = None
    target_hr_bpm: int | None = None
    target_pace_sec_per_km: float | None = None


class RampConfig(PwfModel):
    start_power_watts: int
    end_power_watts: int
    duration_sec: int
    step_duration_sec: int | None = None


class IntervalPhase(PwfModel):
    name: str
    duration_sec: int
    target_power_watts: int | None = None
    target_hr_bpm: int | None = None
    target_pace_sec_per_km: float | None = None
    cadence_rpm: int | None = None


class PlanExercise(PwfModel):
    id: str | None = None
    name: str | None = None
    exercise_ref: str | None = None
    modality: ModalityField | None = None
    target_sets: int | None = None
    target_reps: int | None = None
    target_duration_sec: int | None = None
    target_distance_meters: float | None = None
    target_load: str | None = None
    target_weight_percent: float | None = None
    percent_of: PercentOf | None = None
    reference_exercise: str | None = None
    cues: str | None = None
    target_notes: str | None = None
    link: str | None = None
    image: str | None = None
    group: str | None = None
    group_type: GroupType | None = None
    rest_between_sets_sec: int | None = None
    rest_after_sec: int | None = None
    progression_rules: ProgressionRules | None = None
    zones: list[TrainingZone] = Field(default_factory=list)
    ramp: RampConfig | None = None
    interval_phases: list[IntervalPhase] = Field(default_factory=list)


class PlanDay(PwfModel):
    id: str | None = None
    order: int | None = None
    focus: str | None = None
    notes: str | None = None
    scheduled_date: str | None = None
    target_session_length_min: int | None = None
    template_ref: str | None = None
    exercises: list[PlanExercise] = Field(default_factory=list)


class DayTemplate(PwfModel):
    """Reusable block of exercises a day can pull in via ``template_ref``."""

    id: str
    focus: str | None = None
    target_session_length_min: int | None = None
    exercises: list[PlanExercise] = Field(default_factory=list)


class ExerciseLibraryEntry(PwfModel):
    id: str
    name: str
    description: str | None = None
    modality: ModalityField
    equipment: list[str] = Field(default_factory=list)
    muscle_groups: list[str] = Field(default_factory=list)
    difficulty: Difficulty | None = None
    default_sets: int | None = None
    default_reps: int | None = None
    default_duration_sec: int | None = None
    default_distance_meters: float | None = None
    cues: str | None = None
    link: str | None = None
    image: str | None = None


class PlanCycle(PwfModel):
    start_date: str | None = None
    notes: str | None = None
    days: list[PlanDay] = Field(default_factory=list)


class Plan(PwfModel):
    """Top-level plan document."""

    plan_version: int
    meta: PlanMeta | None = None
    glossary: dict[str, str] = Field(default_factory=dict)
    exercise_library: list[ExerciseLibraryEntry] = Field(default_factory=list)
    templates: list[DayTemplate] = Field(default_factory=list)
    cycle: PlanCycle

    @property
    def is_v2(self) -> bool:
        return self.plan_version == 2


class PlanStatistics(PwfModel):
    total_days: int = 0
    total_exercises: int = 0
    strength_count: int = 0
    countdown_count: int = 0
    stopwatch_count: int = 0
    interval_count: int = 0
    equipment: list[str] = Field(default_factory=list)

"""Exercise library resolution for v2 plans.

A plan exercise may point at an ``exercise_library`` entry through
``exercise_ref``. Resolution merges the two by value: plan-level values win,
library defaults fill the gaps.
"""

from __future__ import annotations

from pydantic import Field

from pwf.schema.base import PwfModel
from pwf.schema.common import Modality
from pwf.schema.plan import (
    DayTemplate,
    ExerciseLibraryEntry,
    GroupType,
    PercentOf,
    PlanDay,
    PlanExercise,
    ProgressionRules,
)

UNNAMED_EXERCISE = "Unnamed Exercise"


class ResolvedExercise(PwfModel):
    """Fully populated view of a plan exercise."""

    id: str | None = None
    name: str
    modality: Modality
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
    library_entry_id: str | None = None


class ResolvedDay(PwfModel):
    id: str | None = None
    order: int | None = None
    focus: str | None = None
    notes: str | None = None
    scheduled_date: str | None = None
    target_session_length_min: int | None = None
    exercises: list[PlanExercise] = Field(default_factory=list)


def find_library_entry(exercise_ref: str, library: list[ExerciseLibraryEntry]) -> ExerciseLibraryEntry | None:
    """Linear lookup of a library entry by id."""
    for entry in library:
        if entry.id == exercise_ref:
            return entry
    return None


def _plan_fields(exercise: PlanExercise) -> dict:
    return {
        "id": exercise.id,
        "target_load": exercise.target_load,
        "target_weight_percent": exercise.target_weight_percent,
        "percent_of": exercise.percent_of,
        "reference_exercise": exercise.reference_exercise,
        "target_notes": exercise.target_notes,
        "group": exercise.group,
        "group_type": exercise.group_type,
        "rest_between_sets_sec": exercise.rest_between_sets_sec,
        "rest_after_sec": exercise.rest_after_sec,
        "progression_rules": exercise.progression_rules,
    }


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def resolve_exercise(exercise: PlanExercise, library: list[ExerciseLibraryEntry]) -> ResolvedExercise | None:
    """Merge a plan exercise with its library entry.

    Args:
        exercise: Exercise as written in the plan
        library: The plan's exercise_library (may be empty)

    Returns:
        The resolved exercise, or None when ``exercise_ref`` does not match any
        library entry, or when there is no reference and no modality.
    """
    if exercise.exercise_ref is not None:
        entry = find_library_entry(exercise.exercise_ref, library)
        if entry is None:
            return None
        return ResolvedExercise(
            name=exercise.name or entry.name,
            modality=entry.modality,
            target_sets=_first(exercise.target_sets, entry.default_sets),
            target_reps=_first(exercise.target_reps, entry.default_reps),
            target_duration_sec=_first(exercise.target_duration_sec, entry.default_duration_sec),
            target_distance_meters=_first(exercise.target_distance_meters, entry.default_distance_meters),
            cues=_first(exercise.cues, entry.cues),
            link=_first(exercise.link, entry.link),
            image=_first(exercise.image, entry.image),
            library_entry_id=entry.id,
            **_plan_fields(exercise),
        )

    if exercise.modality is None:
        return None

    return ResolvedExercise(
        name=exercise.name or UNNAMED_EXERCISE,
        modality=exercise.modality,
        target_sets=exercise.target_sets,
        target_reps=exercise.target_reps,
        target_duration_sec=exercise.target_duration_sec,
        target_distance_meters=exercise.target_distance_meters,
        cues=exercise.cues,
        link=exercise.link,
        image=exercise.image,
        **_plan_fields(exercise),
    )


def find_template(template_ref: str, templates: list[DayTemplate]) -> DayTemplate | None:
    for template in templates:
        if template.id == template_ref:
            return template
    return None


def resolve_day(day: PlanDay, templates: list[DayTemplate]) -> ResolvedDay:
    """Expand a day's ``template_ref``.

    Template exercises come first, followed by the day's own. The day's focus and
    target session length take precedence over the template's.
    """
    template = find_template(day.template_ref, templates) if day.template_ref else None
    exercises = list(day.exercises)
    focus = day.focus
    session_length = day.target_session_length_min
    if template is not None:
        exercises = [*template.exercises, *exercises]
        focus = _first(focus, template.focus)
        session_length = _first(session_length, template.target_session_length_min)

    return ResolvedDay(
        id=day.id,
        order=day.order,
        focus=focus,
        notes=day.notes,
        scheduled_date=day.scheduled_date,
        target_session_length_min=session_length,
        exercises=exercises,
    )

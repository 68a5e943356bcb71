"""Tests for exercise library and template resolution."""

from pwf.resolver import UNNAMED_EXERCISE, resolve_day, resolve_exercise
from pwf.schema.common import Modality
from pwf.schema.plan import DayTemplate, ExerciseLibraryEntry, PlanDay, PlanExercise


def _library() -> list[ExerciseLibraryEntry]:
    return [
        ExerciseLibraryEntry(
            id="bench",
            name="Bench Press",
            modality=Modality.STRENGTH,
            default_sets=3,
            default_reps=8,
            cues="Retract shoulder blades",
        ),
    ]


def test_plan_values_override_library_defaults():
    """Test that plan-level targets win over library defaults."""
    exercise = PlanExercise(exercise_ref="bench", target_reps=5, target_notes="Heavy day")

    resolved = resolve_exercise(exercise, _library())

    assert resolved.name == "Bench Press"
    assert resolved.modality == Modality.STRENGTH
    assert resolved.target_sets == 3
    assert resolved.target_reps == 5
    assert resolved.cues == "Retract shoulder blades"
    assert resolved.target_notes == "Heavy day"
    assert resolved.library_entry_id == "bench"


def test_library_modality_wins_over_plan_modality():
    """Test that a referenced exercise takes the library modality."""
    exercise = PlanExercise(exercise_ref="bench", modality=Modality.STOPWATCH, name="Paused Bench")

    resolved = resolve_exercise(exercise, _library())

    assert resolved.modality == Modality.STRENGTH
    assert resolved.name == "Paused Bench"


def test_unknown_reference_does_not_resolve():
    """Test that a dangling exercise_ref resolves to None."""
    assert resolve_exercise(PlanExercise(exercise_ref="squat"), _library()) is None


def test_inline_exercise_resolves_without_library():
    """Test that an exercise with a modality resolves on its own."""
    resolved = resolve_exercise(PlanExercise(modality=Modality.COUNTDOWN, target_duration_sec=45), [])

    assert resolved.name == UNNAMED_EXERCISE
    assert resolved.target_duration_sec == 45
    assert resolved.library_entry_id is None


def test_exercise_without_modality_does_not_resolve():
    """Test that neither modality nor reference yields None."""
    assert resolve_exercise(PlanExercise(name="Mystery"), []) is None


def test_resolve_day_prepends_template_exercises():
    """Test that template exercises come before the day's own and fill its focus."""
    template = DayTemplate(
        id="warmup",
        focus="Mobility",
        target_session_length_min=15,
        exercises=[PlanExercise(name="Hip Circles", modality=Modality.COUNTDOWN)],
    )
    day = PlanDay(
        template_ref="warmup",
        target_session_length_min=60,
        exercises=[PlanExercise(name="Squat", modality=Modality.STRENGTH)],
    )

    resolved = resolve_day(day, [template])

    assert [e.name for e in resolved.exercises] == ["Hip Circles", "Squat"]
    assert resolved.focus == "Mobility"
    assert resolved.target_session_length_min == 60


def test_resolve_day_without_template():
    """Test that a day without template_ref is unchanged."""
    day = PlanDay(focus="Legs", exercises=[PlanExercise(name="Squat", modality=Modality.STRENGTH)])

    resolved = resolve_day(day, [])

    assert resolved.focus == "Legs"
    assert len(resolved.exercises) == 1

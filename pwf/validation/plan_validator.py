"""Validation rules for PWF plan documents.

Validation never raises on a bad document: every rule appends a diagnostic and
the walk continues, so callers always get the full report. The walk order is
root, meta, glossary, exercise_library, templates, then each day and exercise.
"""

from __future__ import annotations

import re
from datetime import datetime

from loguru import logger

from pwf.resolver import ResolvedExercise, resolve_day, resolve_exercise
from pwf.schema.common import Modality
from pwf.schema.parsing import DocumentParseError, parse_plan
from pwf.schema.plan import (
    ExerciseLibraryEntry,
    Plan,
    PlanExercise,
    PlanMeta,
    PlanStatistics,
    PlanStatus,
    ProgressionRules,
    ProgressionType,
)
from pwf.validation import codes
from pwf.validation.diagnostics import DiagnosticCollector, ValidationResult

SUPPORTED_PLAN_VERSIONS = frozenset({1, 2})

MAX_TITLE_LENGTH = 80
MAX_GLOSSARY_ENTRIES = 100
MAX_TERM_LENGTH = 50
MAX_DEFINITION_LENGTH = 500
MAX_LIBRARY_ENTRIES = 500
MAX_LIBRARY_NAME_LENGTH = 100
MAX_LIBRARY_DESCRIPTION_LENGTH = 500
MAX_WEIGHT_PERCENT = 200.0

# Thresholds above which progression values are flagged as unusual
REPS_RANGE_MAX_WARNING = 100
INCREMENT_KG_WARNING = 50.0
INCREMENT_LBS_WARNING = 100.0
DELOAD_WEEKS_WARNING = 4
REPS_INCREMENT_WARNING = 10
DELOAD_PERCENT_RANGE = (50.0, 100.0)

GLOSSARY_TERM_PATTERN = re.compile(r"^[A-Za-z0-9 '\-]+$")
LIBRARY_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
GROUP_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,50}$")


class PlanValidationResult(ValidationResult[Plan, PlanStatistics]):
    @property
    def plan(self) -> Plan | None:
        return self.document


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 datetime that carries an explicit timezone.

    Returns:
        The aware datetime, or None when the value has no date/time separator,
        is malformed, or lacks a timezone.
    """
    if "T" not in value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def validate_plan(yaml_text: str) -> PlanValidationResult:
    """Validate YAML text as a PWF plan.

    Args:
        yaml_text: Plan document as YAML

    Returns:
        PlanValidationResult; ``plan`` and ``statistics`` are set only when valid
    """
    collector = DiagnosticCollector()
    try:
        plan = parse_plan(yaml_text)
    except DocumentParseError as e:
        collector.error("", str(e))
        return PlanValidationResult(valid=False, errors=collector.errors, warnings=collector.warnings)

    _validate_plan_document(plan, collector)

    valid = not collector.has_errors
    logger.debug(f"Plan validated: valid={valid} errors={len(collector.errors)} warnings={len(collector.warnings)}")
    return PlanValidationResult(
        valid=valid,
        document=plan if valid else None,
        errors=collector.errors,
        warnings=collector.warnings,
        statistics=compute_plan_statistics(plan) if valid else None,
    )


def _validate_plan_document(plan: Plan, collector: DiagnosticCollector) -> None:
    if plan.plan_version not in SUPPORTED_PLAN_VERSIONS:
        collector.error(
            "plan_version",
            f"Unsupported plan_version: {plan.plan_version}. Supported versions: 1, 2",
            codes.UNSUPPORTED_PLAN_VERSION,
        )

    if plan.meta is None:
        collector.warning("meta", "Missing meta section - plan will have no title", codes.MISSING_META)
    else:
        _validate_meta(plan.meta, collector)

    _validate_glossary(plan.glossary, collector)
    _validate_library(plan, collector)

    known_names = _collect_exercise_names(plan)

    for template_idx, template in enumerate(plan.templates):
        for ex_idx, exercise in enumerate(template.exercises):
            _validate_exercise(exercise, f"templates[{template_idx}].exercises[{ex_idx}]", plan, known_names, collector)

    days = plan.cycle.days
    if not days:
        collector.error("cycle.days", "Must have at least 1 day", codes.NO_DAYS)

    seen_orders: set[int] = set()
    for day_idx, day in enumerate(days):
        day_path = f"cycle.days[{day_idx}]"

        if day.order is not None:
            if day.order in seen_orders:
                collector.error(f"{day_path}.order", f"Duplicate day order: {day.order}", codes.DUPLICATE_DAY_ORDER)
            seen_orders.add(day.order)

        if day.template_ref is not None:
            if not plan.is_v2:
                collector.warning(
                    f"{day_path}.template_ref",
                    "template_ref requires plan_version 2",
                    codes.V2_FEATURE_ON_V1,
                )
            if all(template.id != day.template_ref for template in plan.templates):
                collector.warning(
                    f"{day_path}.template_ref",
                    f"template_ref '{day.template_ref}' does not match any template",
                    codes.UNRESOLVED_TEMPLATE_REF,
                )

        if not resolve_day(day, plan.templates).exercises:
            collector.error(f"{day_path}.exercises", "Day must have at least 1 exercise", codes.DAY_WITHOUT_EXERCISES)

        for ex_idx, exercise in enumerate(day.exercises):
            _validate_exercise(exercise, f"{day_path}.exercises[{ex_idx}]", plan, known_names, collector)


def _validate_meta(meta: PlanMeta, collector: DiagnosticCollector) -> None:
    if not meta.title.strip():
        collector.error("meta.title", "Plan title is required", codes.INVALID_TITLE)
    elif len(meta.title) > MAX_TITLE_LENGTH:
        collector.error(
            "meta.title",
            f"Title exceeds {MAX_TITLE_LENGTH} characters ({len(meta.title)})",
            codes.INVALID_TITLE,
        )

    activated = completed = None
    if meta.activated_at is not None:
        activated = parse_timestamp(meta.activated_at)
        if activated is None:
            collector.error(
                "meta.activated_at",
                f"activated_at must be an ISO-8601 datetime with timezone, got '{meta.activated_at}'",
                codes.INVALID_ACTIVATED_AT,
            )
    if meta.completed_at is not None:
        completed = parse_timestamp(meta.completed_at)
        if completed is None:
            collector.error(
                "meta.completed_at",
                f"completed_at must be an ISO-8601 datetime with timezone, got '{meta.completed_at}'",
                codes.INVALID_COMPLETED_AT,
            )

    if meta.status == PlanStatus.ACTIVE and meta.activated_at is None:
        collector.warning(
            "meta.activated_at",
            "Plan status is 'active' but activated_at is not set",
            codes.ACTIVE_WITHOUT_ACTIVATED_AT,
        )
    if meta.status == PlanStatus.COMPLETED and meta.completed_at is None:
        collector.warning(
            "meta.completed_at",
            "Plan status is 'completed' but completed_at is not set",
            codes.COMPLETED_WITHOUT_COMPLETED_AT,
        )

    if activated is not None and completed is not None and activated >= completed:
        collector.error("meta", "activated_at must be before completed_at", codes.ACTIVATED_NOT_BEFORE_COMPLETED)


def _validate_glossary(glossary: dict[str, str], collector: DiagnosticCollector) -> None:
    if len(glossary) > MAX_GLOSSARY_ENTRIES:
        collector.error(
            "glossary",
            f"Glossary has {len(glossary)} entries; maximum is {MAX_GLOSSARY_ENTRIES}",
            codes.GLOSSARY_TOO_LARGE,
        )

    for term, definition in glossary.items():
        path = f"glossary.{term}"
        if not 1 <= len(term) <= MAX_TERM_LENGTH:
            collector.error(
                path,
                f"Glossary term must be 1-{MAX_TERM_LENGTH} characters",
                codes.GLOSSARY_TERM_LENGTH,
            )
        elif not GLOSSARY_TERM_PATTERN.match(term):
            collector.error(
                path,
                "Glossary term may only contain letters, digits, spaces, hyphens and apostrophes",
                codes.GLOSSARY_TERM_CHARSET,
            )

        if not definition or not definition.strip():
            collector.error(path, "Glossary definition cannot be empty", codes.GLOSSARY_DEFINITION_EMPTY)
        elif len(definition) > MAX_DEFINITION_LENGTH:
            collector.error(
                path,
                f"Glossary definition exceeds {MAX_DEFINITION_LENGTH} characters ({len(definition)})",
                codes.GLOSSARY_DEFINITION_TOO_LONG,
            )


def _validate_library(plan: Plan, collector: DiagnosticCollector) -> None:
    library = plan.exercise_library
    if library and not plan.is_v2:
        collector.warning(
            "exercise_library",
            "exercise_library requires plan_version 2 and is ignored by v1 consumers",
            codes.V2_FEATURE_ON_V1,
        )
    if plan.templates and not plan.is_v2:
        collector.warning("templates", "templates require plan_version 2", codes.V2_FEATURE_ON_V1)

    if len(library) > MAX_LIBRARY_ENTRIES:
        collector.error(
            "exercise_library",
            f"exercise_library has {len(library)} entries; maximum is {MAX_LIBRARY_ENTRIES}",
            codes.LIBRARY_TOO_LARGE,
        )

    seen_ids: set[str] = set()
    for idx, entry in enumerate(library):
        _validate_library_entry(entry, f"exercise_library[{idx}]", seen_ids, collector)


def _validate_library_entry(
    entry: ExerciseLibraryEntry,
    path: str,
    seen_ids: set[str],
    collector: DiagnosticCollector,
) -> None:
    if not LIBRARY_ID_PATTERN.match(entry.id):
        collector.error(
            f"{path}.id",
            f"Library id '{entry.id}' may only contain letters, digits, '-' and '_'",
            codes.INVALID_LIBRARY_ID,
        )
    if entry.id in seen_ids:
        collector.error(f"{path}.id", f"Duplicate library id: {entry.id}", codes.DUPLICATE_LIBRARY_ID)
    seen_ids.add(entry.id)

    if not entry.name.strip():
        collector.error(f"{path}.name", "Library entry name is required", codes.INVALID_LIBRARY_NAME)
    elif len(entry.name) > MAX_LIBRARY_NAME_LENGTH:
        collector.error(
            f"{path}.name",
            f"Library entry name exceeds {MAX_LIBRARY_NAME_LENGTH} characters",
            codes.INVALID_LIBRARY_NAME,
        )

    if entry.description is not None and len(entry.description) > MAX_LIBRARY_DESCRIPTION_LENGTH:
        collector.error(
            f"{path}.description",
            f"Library entry description exceeds {MAX_LIBRARY_DESCRIPTION_LENGTH} characters",
            codes.LIBRARY_DESCRIPTION_TOO_LONG,
        )

    _validate_urls(entry.link, entry.image, path, collector)


def _collect_exercise_names(plan: Plan) -> set[str]:
    """Names a ``reference_exercise`` may point at, compared case-insensitively."""
    names = {entry.name.lower() for entry in plan.exercise_library}
    exercises = [ex for day in plan.cycle.days for ex in day.exercises]
    exercises.extend(ex for template in plan.templates for ex in template.exercises)
    for exercise in exercises:
        if exercise.name:
            names.add(exercise.name.lower())
    return names


def _validate_exercise(
    exercise: PlanExercise,
    path: str,
    plan: Plan,
    known_names: set[str],
    collector: DiagnosticCollector,
) -> None:
    resolved = resolve_exercise(exercise, plan.exercise_library)

    if exercise.exercise_ref is None and exercise.modality is None:
        collector.error(
            path,
            "Exercise must specify either modality or exercise_ref",
            codes.MISSING_MODALITY_AND_REF,
        )
    if exercise.exercise_ref is not None:
        if not plan.is_v2:
            collector.warning(
                f"{path}.exercise_ref",
                "exercise_ref requires plan_version 2",
                codes.V2_FEATURE_ON_V1,
            )
        if exercise.modality is not None:
            collector.warning(
                path,
                "Both modality and exercise_ref are set; the library modality is used",
                codes.MODALITY_AND_REF_BOTH_SET,
            )
        if resolved is None:
            collector.error(
                f"{path}.exercise_ref",
                f"exercise_ref '{exercise.exercise_ref}' not found in exercise_library",
                codes.UNRESOLVED_EXERCISE_REF,
            )

    if not exercise.name and exercise.exercise_ref is None:
        collector.warning(f"{path}.name", "Exercise missing name", codes.EXERCISE_WITHOUT_NAME)

    if resolved is not None:
        _check_modality_targets(resolved, path, collector)

    _validate_loading(exercise, path, known_names, collector)
    _validate_grouping(exercise, path, collector)
    _validate_urls(exercise.link, exercise.image, path, collector)

    if exercise.progression_rules is not None:
        modality = resolved.modality if resolved is not None else exercise.modality
        _validate_progression(exercise.progression_rules, modality, f"{path}.progression_rules", plan, collector)


def _check_modality_targets(exercise: ResolvedExercise, path: str, collector: DiagnosticCollector) -> None:
    if exercise.modality == Modality.STRENGTH:
        if exercise.target_sets is None and exercise.target_reps is None:
            collector.warning(
                path,
                "Strength exercise missing target_sets/target_reps",
                codes.MODALITY_TARGET_MISSING,
            )
    elif exercise.modality == Modality.COUNTDOWN:
        if exercise.target_duration_sec is None:
            collector.warning(path, "Countdown exercise missing target_duration_sec", codes.MODALITY_TARGET_MISSING)
    elif exercise.modality == Modality.INTERVAL:
        if exercise.target_sets is None:
            collector.warning(path, "Interval exercise missing target_sets", codes.MODALITY_TARGET_MISSING)


def _validate_loading(
    exercise: PlanExercise,
    path: str,
    known_names: set[str],
    collector: DiagnosticCollector,
) -> None:
    percent = exercise.target_weight_percent
    uses_percent = percent is not None or exercise.percent_of is not None

    if percent is not None and exercise.percent_of is None:
        collector.error(
            f"{path}.percent_of",
            "target_weight_percent requires percent_of (1rm, 3rm, 5rm or 10rm)",
            codes.PERCENT_WITHOUT_PERCENT_OF,
        )
    if exercise.percent_of is not None and percent is None:
        collector.error(
            f"{path}.target_weight_percent",
            "percent_of requires target_weight_percent",
            codes.PERCENT_OF_WITHOUT_PERCENT,
        )
    if exercise.target_load is not None and uses_percent:
        collector.error(
            f"{path}.target_load",
            "target_load cannot be combined with percentage loading (target_weight_percent/percent_of)",
            codes.LOAD_CONFLICTS_WITH_PERCENT,
        )
    if percent is not None and not 0 <= percent <= MAX_WEIGHT_PERCENT:
        collector.error(
            f"{path}.target_weight_percent",
            f"target_weight_percent must be between 0 and {MAX_WEIGHT_PERCENT:g}, got {percent:g}",
            codes.PERCENT_OUT_OF_RANGE,
        )

    reference = exercise.reference_exercise
    if reference is not None:
        if percent is None:
            collector.error(
                f"{path}.reference_exercise",
                "reference_exercise requires target_weight_percent",
                codes.REFERENCE_WITHOUT_PERCENT,
            )
        if reference.lower() not in known_names:
            collector.warning(
                f"{path}.reference_exercise",
                f"reference_exercise '{reference}' does not match any exercise in the plan",
                codes.REFERENCE_EXERCISE_NOT_FOUND,
            )


def _validate_grouping(exercise: PlanExercise, path: str, collector: DiagnosticCollector) -> None:
    if exercise.group is not None and exercise.group_type is None:
        collector.error(f"{path}.group_type", "group requires group_type (superset or circuit)", codes.GROUP_WITHOUT_TYPE)
    if exercise.group_type is not None and exercise.group is None:
        collector.error(f"{path}.group", "group_type requires group", codes.GROUP_TYPE_WITHOUT_GROUP)
    if exercise.group is not None and not GROUP_ID_PATTERN.match(exercise.group):
        collector.error(
            f"{path}.group",
            "group must be 1-50 characters of letters, digits, '-' or '_'",
            codes.INVALID_GROUP_ID,
        )


def _validate_urls(link: str | None, image: str | None, path: str, collector: DiagnosticCollector) -> None:
    if link is not None and not link.startswith("https://"):
        if link.startswith("http://"):
            collector.warning(f"{path}.link", "HTTP URLs not allowed, use HTTPS", codes.INVALID_LINK)
        else:
            collector.error(f"{path}.link", "Link must be an HTTPS URL", codes.INVALID_LINK)
    if image is not None and not image.startswith("https://"):
        collector.warning(f"{path}.image", "Image URL should use HTTPS", codes.INSECURE_IMAGE)


def _validate_progression(
    rules: ProgressionRules,
    modality: Modality | None,
    path: str,
    plan: Plan,
    collector: DiagnosticCollector,
) -> None:
    """Check progression rule consistency; every applicable rule is reported."""
    if not plan.is_v2:
        collector.warning(path, "progression_rules require plan_version 2", codes.PROGRESSION_ON_V1)
    if modality is not None and modality != Modality.STRENGTH:
        collector.warning(
            path,
            f"progression_rules are intended for strength exercises, not {modality}",
            codes.PROGRESSION_ON_NON_STRENGTH,
        )

    kg = rules.weight_increment_kg
    lbs = rules.weight_increment_lbs
    has_increment = kg is not None or lbs is not None
    has_reps_range = rules.reps_range_min is not None or rules.reps_range_max is not None

    if rules.type == ProgressionType.LINEAR:
        if not has_increment:
            collector.error(
                path,
                "Linear progression requires weight_increment_kg or weight_increment_lbs",
                codes.LINEAR_WITHOUT_INCREMENT,
            )
        if has_reps_range:
            collector.warning(
                path,
                "reps_range_min/reps_range_max are ignored by linear progression",
                codes.REPS_RANGE_ON_LINEAR,
            )
    else:
        if rules.reps_range_min is None or rules.reps_range_max is None:
            collector.error(
                path,
                "Double progression requires reps_range_min and reps_range_max",
                codes.DOUBLE_WITHOUT_REPS_RANGE,
            )
        if not has_increment:
            collector.error(
                path,
                "Double progression requires weight_increment_kg or weight_increment_lbs",
                codes.DOUBLE_WITHOUT_INCREMENT,
            )

    if kg is not None and lbs is not None:
        collector.error(
            path,
            "Specify weight_increment_kg or weight_increment_lbs, not both",
            codes.INCREMENT_BOTH_UNITS,
        )

    rmin, rmax = rules.reps_range_min, rules.reps_range_max
    if rmin is not None and rmax is not None and rmin >= rmax:
        collector.error(
            f"{path}.reps_range_min",
            f"reps_range_min ({rmin}) must be less than reps_range_max ({rmax})",
            codes.REPS_RANGE_MIN_NOT_BELOW_MAX,
        )
    if rmin is not None and rmin < 1:
        collector.error(f"{path}.reps_range_min", "reps_range_min must be at least 1", codes.REPS_RANGE_MIN_ZERO)
    if rmax is not None and rmax > REPS_RANGE_MAX_WARNING:
        collector.warning(
            f"{path}.reps_range_max",
            f"reps_range_max of {rmax} is unusually high",
            codes.REPS_RANGE_MAX_HIGH,
        )

    if kg is not None:
        if kg < 0:
            collector.error(f"{path}.weight_increment_kg", "weight_increment_kg cannot be negative", codes.INCREMENT_KG_NEGATIVE)
        elif kg > INCREMENT_KG_WARNING:
            collector.warning(
                f"{path}.weight_increment_kg",
                f"weight_increment_kg of {kg:g} is very large",
                codes.INCREMENT_KG_LARGE,
            )
    if lbs is not None:
        if lbs < 0:
            collector.error(
                f"{path}.weight_increment_lbs",
                "weight_increment_lbs cannot be negative",
                codes.INCREMENT_LBS_NEGATIVE,
            )
        elif lbs > INCREMENT_LBS_WARNING:
            collector.warning(
                f"{path}.weight_increment_lbs",
                f"weight_increment_lbs of {lbs:g} is very large",
                codes.INCREMENT_LBS_LARGE,
            )

    low, high = DELOAD_PERCENT_RANGE
    if rules.deload_percent is not None and not low <= rules.deload_percent <= high:
        collector.error(
            f"{path}.deload_percent",
            f"deload_percent must be between {low:g} and {high:g}, got {rules.deload_percent:g}",
            codes.DELOAD_PERCENT_OUT_OF_RANGE,
        )
    if rules.deload_weeks is not None:
        if rules.deload_weeks < 1:
            collector.error(f"{path}.deload_weeks", "deload_weeks must be at least 1", codes.DELOAD_WEEKS_ZERO)
        elif rules.deload_weeks > DELOAD_WEEKS_WARNING:
            collector.warning(
                f"{path}.deload_weeks",
                f"deload_weeks of {rules.deload_weeks} is unusually long",
                codes.DELOAD_WEEKS_LONG,
            )

    if rules.max_weight_kg is not None and rules.max_weight_lbs is not None:
        collector.error(path, "Specify max_weight_kg or max_weight_lbs, not both", codes.MAX_WEIGHT_BOTH_UNITS)
    if rules.max_weight_kg is not None and rules.max_weight_kg < 0:
        collector.error(f"{path}.max_weight_kg", "max_weight_kg cannot be negative", codes.MAX_WEIGHT_KG_NEGATIVE)
    if rules.max_weight_lbs is not None and rules.max_weight_lbs < 0:
        collector.error(f"{path}.max_weight_lbs", "max_weight_lbs cannot be negative", codes.MAX_WEIGHT_LBS_NEGATIVE)

    if rules.reps_increment is not None:
        if rules.reps_increment < 1:
            collector.error(f"{path}.reps_increment", "reps_increment must be at least 1", codes.REPS_INCREMENT_ZERO)
        elif rules.reps_increment > REPS_INCREMENT_WARNING:
            collector.warning(
                f"{path}.reps_increment",
                f"reps_increment of {rules.reps_increment} is very large",
                codes.REPS_INCREMENT_LARGE,
            )

    if rules.deload_condition is not None and rules.deload_percent is None:
        collector.warning(
            f"{path}.deload_condition",
            "deload_condition is set but deload_percent is missing",
            codes.DELOAD_CONDITION_WITHOUT_PERCENT,
        )


def compute_plan_statistics(plan: Plan) -> PlanStatistics:
    """Count days and exercises by modality (library references resolved)."""
    stats = PlanStatistics(
        total_days=len(plan.cycle.days),
        equipment=list(plan.meta.equipment) if plan.meta else [],
    )
    counters = {
        Modality.STRENGTH: "strength_count",
        Modality.COUNTDOWN: "countdown_count",
        Modality.STOPWATCH: "stopwatch_count",
        Modality.INTERVAL: "interval_count",
    }
    for day in plan.cycle.days:
        for exercise in resolve_day(day, plan.templates).exercises:
            stats.total_exercises += 1
            resolved = resolve_exercise(exercise, plan.exercise_library)
            if resolved is None:
                continue
            attribute = counters.get(resolved.modality)
            if attribute is not None:
                setattr(stats, attribute, getattr(stats, attribute) + 1)
    return stats

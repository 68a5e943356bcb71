"""Tests for plan validation diagnostics and statistics."""

import pytest

from pwf.validation import Severity, validate_plan
from pwf.validation import codes


def _plan(exercise: str, *, version: int = 1, extra: str = "") -> str:
    """Single-day plan around one exercise body (indented as a list item)."""
    return (
        f"plan_version: {version}\n"
        "meta:\n  title: Test Plan\n"
        f"{extra}"
        "cycle:\n  days:\n    - exercises:\n"
        f"{exercise}"
    )


def test_minimal_plan_is_valid(minimal_plan_yaml: str):
    """Test that a plan without meta validates with the expected warnings and statistics."""
    result = validate_plan(minimal_plan_yaml)

    assert result.valid
    assert result.errors == []
    assert codes.MISSING_META in result.warning_codes()
    assert codes.MODALITY_TARGET_MISSING in result.warning_codes()
    assert result.statistics.total_days == 1
    assert result.statistics.total_exercises == 1
    assert result.statistics.strength_count == 1
    assert result.plan is not None


def test_percentage_load_conflict_is_single_error():
    """Test that target_load combined with percentage loading yields only P013."""
    result = validate_plan(
        _plan(
            "        - name: Squat\n"
            "          modality: strength\n"
            "          target_sets: 5\n"
            "          target_reps: 5\n"
            "          target_weight_percent: 85\n"
            "          percent_of: 1rm\n"
            '          target_load: "100kg"\n'
        )
    )

    assert not result.valid
    assert result.error_codes() == [codes.LOAD_CONFLICTS_WITH_PERCENT]
    assert result.errors[0].path == "cycle.days[0].exercises[0].target_load"
    assert result.statistics is None
    assert result.plan is None


def test_unparseable_plan_reports_root_error():
    """Test that a YAML error becomes a single root diagnostic."""
    result = validate_plan("plan_version: 1\ncycle: [\n")

    assert not result.valid
    assert len(result.errors) == 1
    assert result.errors[0].path == ""
    assert result.errors[0].severity == Severity.ERROR


def test_unsupported_plan_version():
    """Test that plan_version 3 is rejected."""
    result = validate_plan(_plan("        - name: Plank\n          modality: countdown\n          target_duration_sec: 60\n", version=3))

    assert codes.UNSUPPORTED_PLAN_VERSION in result.error_codes()


def test_plan_without_days():
    """Test that an empty cycle is an error."""
    result = validate_plan("plan_version: 1\nmeta:\n  title: Empty\ncycle:\n  days: []\n")

    assert result.error_codes() == [codes.NO_DAYS]


def test_duplicate_day_order_and_empty_day():
    """Test that repeated day orders and days without exercises are errors."""
    result = validate_plan(
        "plan_version: 1\nmeta:\n  title: Orders\ncycle:\n  days:\n"
        "    - order: 1\n      exercises:\n        - name: Row\n          modality: stopwatch\n"
        "    - order: 1\n      exercises: []\n"
    )

    assert codes.DUPLICATE_DAY_ORDER in result.error_codes()
    assert codes.DAY_WITHOUT_EXERCISES in result.error_codes()


def test_missing_title_is_error():
    """Test that a blank meta title is rejected."""
    result = validate_plan(
        "plan_version: 1\nmeta:\n  title: ''\ncycle:\n  days:\n    - exercises:\n        - name: Row\n          modality: stopwatch\n"
    )

    assert result.error_codes() == [codes.INVALID_TITLE]


def test_meta_lifecycle_timestamps():
    """Test the activated/completed timestamp rules."""
    result = validate_plan(
        _plan(
            "        - name: Row\n          modality: stopwatch\n",
            extra="",
        ).replace(
            "  title: Test Plan\n",
            "  title: Test Plan\n  status: completed\n"
            '  activated_at: "2025-02-01T00:00:00Z"\n'
            '  completed_at: "2025-01-01T00:00:00+01:00"\n',
        )
    )

    assert result.error_codes() == [codes.ACTIVATED_NOT_BEFORE_COMPLETED]


def test_meta_timestamp_requires_timezone():
    """Test that naive timestamps and missing activated_at are reported."""
    result = validate_plan(
        _plan("        - name: Row\n          modality: stopwatch\n").replace(
            "  title: Test Plan\n",
            '  title: Test Plan\n  status: active\n  completed_at: "2025-01-01T10:00:00"\n',
        )
    )

    assert codes.INVALID_COMPLETED_AT in result.error_codes()
    assert codes.ACTIVE_WITHOUT_ACTIVATED_AT in result.warning_codes()


def test_unquoted_meta_timestamps_validate():
    """Test that bare YAML timestamps in meta are checked like quoted ones."""
    result = validate_plan(
        _plan("        - name: Row\n          modality: stopwatch\n").replace(
            "  title: Test Plan\n",
            "  title: Test Plan\n  status: active\n  activated_at: 2025-01-15T10:30:00Z\n",
        )
    )

    assert result.valid
    assert result.plan.meta.activated_at == "2025-01-15T10:30:00Z"
    assert codes.ACTIVE_WITHOUT_ACTIVATED_AT not in result.warning_codes()


def test_unquoted_naive_timestamp_is_still_rejected():
    """Test that a bare timestamp without timezone keeps its P-code error."""
    result = validate_plan(
        _plan("        - name: Row\n          modality: stopwatch\n").replace(
            "  title: Test Plan\n",
            "  title: Test Plan\n  completed_at: 2025-01-01T10:00:00\n",
        )
    )

    assert result.error_codes() == [codes.INVALID_COMPLETED_AT]


def test_glossary_rules():
    """Test glossary term charset and empty definitions."""
    result = validate_plan(
        _plan(
            "        - name: Row\n          modality: stopwatch\n",
            extra='glossary:\n  "RPE": "Rate of perceived exertion"\n  "E2MOM!": "Every two minutes"\n  "AMRAP": ""\n',
        )
    )

    assert codes.GLOSSARY_TERM_CHARSET in result.error_codes()
    assert codes.GLOSSARY_DEFINITION_EMPTY in result.error_codes()
    assert len(result.errors) == 2


def test_exercise_needs_modality_or_reference():
    """Test that an exercise with neither modality nor exercise_ref is an error."""
    result = validate_plan(_plan("        - name: Mystery\n"))

    assert result.error_codes() == [codes.MISSING_MODALITY_AND_REF]


def test_exercise_without_name_warns():
    """Test that an unnamed exercise is a warning."""
    result = validate_plan(_plan("        - modality: stopwatch\n"))

    assert result.valid
    assert codes.EXERCISE_WITHOUT_NAME in result.warning_codes()


@pytest.mark.parametrize(
    ("exercise", "expected"),
    [
        ("        - name: Wall Sit\n          modality: countdown\n", codes.MODALITY_TARGET_MISSING),
        ("        - name: Sprints\n          modality: interval\n", codes.MODALITY_TARGET_MISSING),
    ],
)
def test_modality_targets(exercise: str, expected: str):
    """Test the per-modality target warnings."""
    result = validate_plan(_plan(exercise))

    assert result.valid
    assert result.warning_codes() == [expected]


def test_percentage_loading_rules():
    """Test percent_of pairing, range and reference checks."""
    result = validate_plan(
        _plan(
            "        - name: Squat\n          modality: strength\n          target_sets: 3\n"
            "          target_weight_percent: 250\n"
            "        - name: Front Squat\n          modality: strength\n          target_sets: 3\n"
            "          percent_of: 5rm\n"
            "          reference_exercise: Zercher Squat\n"
        )
    )

    assert codes.PERCENT_WITHOUT_PERCENT_OF in result.error_codes()
    assert codes.PERCENT_OUT_OF_RANGE in result.error_codes()
    assert codes.PERCENT_OF_WITHOUT_PERCENT in result.error_codes()
    assert codes.REFERENCE_WITHOUT_PERCENT in result.error_codes()
    assert codes.REFERENCE_EXERCISE_NOT_FOUND in result.warning_codes()


def test_reference_exercise_matches_case_insensitively():
    """Test that reference_exercise may name another exercise in any case."""
    result = validate_plan(
        _plan(
            "        - name: Back Squat\n          modality: strength\n          target_sets: 3\n"
            "        - name: Pause Squat\n          modality: strength\n          target_sets: 3\n"
            "          target_weight_percent: 70\n          percent_of: 1rm\n"
            "          reference_exercise: back squat\n"
        )
    )

    assert result.valid
    assert result.warnings == []


def test_grouping_rules():
    """Test group and group_type pairing and id format."""
    result = validate_plan(
        _plan(
            "        - name: Curl\n          modality: strength\n          target_sets: 3\n          group: A\n"
            "        - name: Dip\n          modality: strength\n          target_sets: 3\n          group_type: superset\n"
            "        - name: Fly\n          modality: strength\n          target_sets: 3\n"
            "          group: 'bad id!'\n          group_type: circuit\n"
        )
    )

    assert result.error_codes() == [codes.GROUP_WITHOUT_TYPE, codes.GROUP_TYPE_WITHOUT_GROUP, codes.INVALID_GROUP_ID]


def test_link_and_image_urls():
    """Test that http links warn, non-URLs fail and insecure images warn."""
    result = validate_plan(
        _plan(
            "        - name: Row\n          modality: stopwatch\n"
            "          link: http://example.com/row\n          image: http://example.com/row.png\n"
            "        - name: Ski\n          modality: stopwatch\n          link: example.com/ski\n"
        )
    )

    assert result.error_codes() == [codes.INVALID_LINK]
    assert result.warning_codes() == [codes.INVALID_LINK, codes.INSECURE_IMAGE]


LIBRARY = (
    "exercise_library:\n"
    "  - id: bench\n    name: Bench Press\n    modality: strength\n    default_sets: 3\n    default_reps: 8\n"
    "  - id: plank\n    name: Plank\n    modality: countdown\n    default_duration_sec: 60\n"
)


def test_library_references_resolve_for_statistics():
    """Test that statistics count modalities taken from the library."""
    result = validate_plan(
        _plan(
            "        - exercise_ref: bench\n        - exercise_ref: plank\n",
            version=2,
            extra=LIBRARY,
        )
    )

    assert result.valid
    assert result.warnings == []
    assert result.statistics.strength_count == 1
    assert result.statistics.countdown_count == 1


def test_unresolved_reference_is_error():
    """Test that exercise_ref must match a library id."""
    result = validate_plan(_plan("        - exercise_ref: deadlift\n", version=2, extra=LIBRARY))

    assert result.error_codes() == [codes.UNRESOLVED_EXERCISE_REF]


def test_reference_with_modality_warns():
    """Test that setting both modality and exercise_ref is a warning."""
    result = validate_plan(_plan("        - exercise_ref: bench\n          modality: stopwatch\n", version=2, extra=LIBRARY))

    assert result.valid
    assert result.warning_codes() == [codes.MODALITY_AND_REF_BOTH_SET]


def test_v2_features_on_v1_plan_warn():
    """Test that a v1 plan using the library gets version warnings."""
    result = validate_plan(_plan("        - exercise_ref: bench\n", version=1, extra=LIBRARY))

    assert result.valid
    assert result.warning_codes().count(codes.V2_FEATURE_ON_V1) == 2


def test_library_entry_rules():
    """Test library id format and uniqueness."""
    result = validate_plan(
        _plan(
            "        - name: Row\n          modality: stopwatch\n",
            version=2,
            extra=(
                "exercise_library:\n"
                "  - id: row\n    name: Row\n    modality: stopwatch\n"
                "  - id: row\n    name: Row Again\n    modality: stopwatch\n"
                "  - id: 'bad id'\n    name: Bad\n    modality: stopwatch\n"
            ),
        )
    )

    assert result.error_codes() == [codes.DUPLICATE_LIBRARY_ID, codes.INVALID_LIBRARY_ID]


def test_template_ref_expands_day():
    """Test that a day may take its exercises from a template."""
    result = validate_plan(
        "plan_version: 2\nmeta:\n  title: Templates\n"
        "templates:\n  - id: upper\n    exercises:\n"
        "      - name: Row\n        modality: stopwatch\n"
        "      - name: Press\n        modality: strength\n        target_sets: 3\n"
        "cycle:\n  days:\n    - template_ref: upper\n"
    )

    assert result.valid
    assert result.statistics.total_exercises == 2


def test_unknown_template_ref():
    """Test that an unknown template leaves the day empty and warns."""
    result = validate_plan("plan_version: 2\nmeta:\n  title: Templates\ncycle:\n  days:\n    - template_ref: legs\n")

    assert codes.UNRESOLVED_TEMPLATE_REF in result.warning_codes()
    assert result.error_codes() == [codes.DAY_WITHOUT_EXERCISES]


def _progression(rules: str, *, version: int = 2, modality: str = "strength") -> str:
    return _plan(
        f"        - name: Squat\n          modality: {modality}\n          target_sets: 3\n"
        f"          progression_rules:\n{rules}",
        version=version,
    )


def test_valid_linear_progression():
    """Test that a complete linear rule has no diagnostics."""
    result = validate_plan(_progression("            type: linear\n            weight_increment_kg: 2.5\n"))

    assert result.valid
    assert result.warnings == []


def test_progression_on_v1_and_non_strength():
    """Test the version and modality warnings for progression rules."""
    result = validate_plan(
        _progression("            type: linear\n            weight_increment_kg: 2.5\n", version=1, modality="stopwatch")
    )

    assert result.valid
    assert result.warning_codes() == [codes.PROGRESSION_ON_V1, codes.PROGRESSION_ON_NON_STRENGTH]


def test_linear_progression_rules():
    """Test that every applicable linear progression diagnostic is emitted."""
    result = validate_plan(
        _progression(
            "            type: linear\n"
            "            reps_range_min: 8\n"
            "            reps_range_max: 8\n"
            "            deload_condition: failed_twice_consecutive\n"
        )
    )

    assert result.error_codes() == [codes.LINEAR_WITHOUT_INCREMENT, codes.REPS_RANGE_MIN_NOT_BELOW_MAX]
    assert result.warning_codes() == [codes.REPS_RANGE_ON_LINEAR, codes.DELOAD_CONDITION_WITHOUT_PERCENT]


def test_double_progression_rules():
    """Test the double progression requirements."""
    result = validate_plan(_progression("            type: double_progression\n            reps_range_min: 6\n"))

    assert result.error_codes() == [codes.DOUBLE_WITHOUT_REPS_RANGE, codes.DOUBLE_WITHOUT_INCREMENT]


def test_progression_value_ranges():
    """Test increment, deload and max weight bounds."""
    result = validate_plan(
        _progression(
            "            type: linear\n"
            "            weight_increment_kg: 60\n"
            "            weight_increment_lbs: -5\n"
            "            deload_percent: 40\n"
            "            deload_weeks: 6\n"
            "            max_weight_kg: 200\n"
            "            max_weight_lbs: 440\n"
            "            reps_increment: 0\n"
        )
    )

    assert result.error_codes() == [
        codes.INCREMENT_BOTH_UNITS,
        codes.INCREMENT_LBS_NEGATIVE,
        codes.DELOAD_PERCENT_OUT_OF_RANGE,
        codes.MAX_WEIGHT_BOTH_UNITS,
        codes.REPS_INCREMENT_ZERO,
    ]
    assert result.warning_codes() == [codes.INCREMENT_KG_LARGE, codes.DELOAD_WEEKS_LONG]


def test_strict_mode_fails_on_warnings(minimal_plan_yaml: str):
    """Test that strict mode treats warnings as failures."""
    result = validate_plan(minimal_plan_yaml)

    assert result.passes()
    assert not result.passes(strict=True)


def test_diagnostic_string_includes_code(minimal_plan_yaml: str):
    """Test the human-readable diagnostic rendering."""
    result = validate_plan(minimal_plan_yaml)

    assert str(result.warnings[0]) == "[PWF-P020] meta: Missing meta section - plan will have no title"

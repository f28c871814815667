from __future__ import annotations

import pytest

from exverify.core.config import DEFAULT_CONVENTIONS
from exverify.core.errors import InvalidExerciseId
from exverify.registry.naming import (
    candidate_modules,
    category_of,
    convention_patterns,
    exercise_id_from_path,
    module_path,
    module_token,
    validate_exercise_id,
)


def test_module_path_normalises_each_segment() -> None:
    assert module_path("react-hooks/04-custom-hooks") == "react_hooks.ex_04_custom_hooks"
    assert module_token("Full-Stack!") == "full_stack"
    assert module_token("10-database") == "ex_10_database"


def test_candidate_modules_follow_convention_order() -> None:
    assert candidate_modules("react-hooks/04-custom-hooks", "exercises", DEFAULT_CONVENTIONS) == [
        "exercises.react_hooks.ex_04_custom_hooks.verify",
        "exercises.react_hooks.ex_04_custom_hooks.tests",
    ]


def test_candidate_modules_without_root() -> None:
    assert candidate_modules("hooks/01-state", None, DEFAULT_CONVENTIONS) == [
        "hooks.ex_01_state.verify",
        "hooks.ex_01_state.tests",
    ]


def test_convention_patterns_recover_exercise_ids() -> None:
    primary, legacy = convention_patterns("exercises", DEFAULT_CONVENTIONS)

    match = primary.match("exercises.react_hooks.ex_04_custom_hooks.verify")
    assert match is not None
    assert exercise_id_from_path(match.group("path")) == "react-hooks/04-custom-hooks"
    assert legacy.match("exercises.full_stack_integration.ex_10_database_integration.tests")
    assert primary.match("exercises.react_hooks.helpers") is None
    assert primary.match("other.react_hooks.ex_04_custom_hooks.verify") is None


@pytest.mark.parametrize("exercise_id", ["react-hooks/04-custom-hooks", "performance-optimization/04-virtual-scrolling", "solo"])
def test_path_mapping_is_reversible_for_canonical_ids(exercise_id: str) -> None:
    assert exercise_id_from_path(module_path(exercise_id)) == exercise_id


def test_validate_strips_surrounding_whitespace() -> None:
    assert validate_exercise_id("  react-hooks/01  ") == "react-hooks/01"


@pytest.mark.parametrize("exercise_id", [None, 7, "", "\t", "a//b", "a/b/", "hooks/use state"])
def test_validate_rejects_malformed_ids(exercise_id: object) -> None:
    with pytest.raises(InvalidExerciseId) as excinfo:
        validate_exercise_id(exercise_id)
    assert isinstance(excinfo.value, ValueError)


def test_segment_without_usable_characters_is_rejected() -> None:
    with pytest.raises(InvalidExerciseId):
        module_path("hooks/---")


def test_category_of() -> None:
    assert category_of("react-hooks/04-custom-hooks") == "react-hooks"
    assert category_of("solo") == "uncategorized"

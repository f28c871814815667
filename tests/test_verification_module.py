from __future__ import annotations

import pytest

from exverify.engine.evaluator import ResultSet, ResultStatus, RuleEvaluator
from exverify.engine.module import FunctionVerificationModule, UnavailableModule, VerificationModule
from exverify.engine.rules import Contains, PredicateRule, Subject


def test_declarations_listed_in_first_use_order() -> None:
    module = VerificationModule(
        "ex",
        [
            PredicateRule(name="a", subject=Subject.of("useFetch"), condition=Contains("x")),
            PredicateRule(name="b", condition=Contains("y")),
            PredicateRule(name="c", subject=Subject.of("App"), condition=Contains("z")),
            PredicateRule(name="d", subject=Subject.of("useFetch"), condition=Contains("w")),
        ],
    )
    assert module.declarations == ["useFetch", "App"]
    assert module.title == "ex"


def test_legacy_function_results_are_coerced() -> None:
    def run_tests(code: str):
        return [
            {"name": "has provider", "passed": "Provider" in code, "error": "Provider missing", "executionTime": 1},
            {"name": "no todo", "passed": "TODO" not in code, "error": "still has TODO"},
            {"status": "passed"},
        ]

    module = FunctionVerificationModule("legacy/ex", run_tests, title="Legacy")
    results = module.run("Provider // TODO")

    assert results.names == ["has provider", "no todo", "Legacy check 3"]
    assert [result.status for result in results] == [ResultStatus.PASSED, ResultStatus.FAILED, ResultStatus.PASSED]
    assert results[0].message is None
    assert results[1].message == "still has TODO"
    assert results[0].execution_time == 1.0


def test_legacy_function_that_raises_becomes_one_error_result() -> None:
    def run_tests(code: str):
        raise KeyError("compiledCode")

    results = FunctionVerificationModule("legacy/ex", run_tests).run("anything")
    assert len(results) == 1
    assert results[0].is_evaluation_error


def test_legacy_non_mapping_entries_fail() -> None:
    results = FunctionVerificationModule("legacy/ex", lambda code: ["oops"]).run("")
    assert results[0].status is ResultStatus.FAILED
    assert "unexpected result type" in results[0].message


def test_unavailable_module_returns_empty_result_set() -> None:
    sentinel = UnavailableModule("missing/ex", reason="not found")
    assert not sentinel.available
    assert sentinel.run("function Foo() {}") == ResultSet()
    assert len(sentinel.run("")) == 0


def test_bind_evaluator_keeps_explicit_evaluator() -> None:
    shared = RuleEvaluator(time_budget_ms=100)
    own = RuleEvaluator()
    default_module = VerificationModule("a", [])
    explicit_module = VerificationModule("b", [], evaluator=own)

    default_module.bind_evaluator(shared)
    explicit_module.bind_evaluator(shared)

    assert default_module.evaluator is shared
    assert explicit_module.evaluator is own


def test_function_module_rejects_non_string_blob() -> None:
    with pytest.raises(TypeError):
        FunctionVerificationModule("legacy/ex", lambda code: []).run(b"bytes")  # type: ignore[arg-type]


def test_malformed_legacy_entry_fails_only_itself() -> None:
    def run_tests(code: str):
        return [
            {"name": "timed oddly", "passed": True, "executionTime": "fast"},
            {"name": "fine", "passed": True},
        ]

    results = FunctionVerificationModule("legacy/ex", run_tests).run("x")

    assert results.names == ["timed oddly", "fine"]
    assert results[0].is_evaluation_error
    assert "ValueError" in results[0].message
    assert results[1].passed

"""Per-exercise verification modules and the "not verifiable" sentinel."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from .evaluator import Result, ResultSet, ResultStatus, RuleEvaluator, evaluation_error
from .rules import PredicateRule

LOGGER = logging.getLogger(__name__)


class VerificationModule:
    """Bundle of predicate rules for one exercise, exposing ``run(blob)``."""

    available = True

    def __init__(
        self,
        exercise_id: str,
        rules: Sequence[PredicateRule],
        *,
        title: str | None = None,
        evaluator: RuleEvaluator | None = None,
    ) -> None:
        self.exercise_id = exercise_id
        self.rules: List[PredicateRule] = list(rules)
        self.title = title or exercise_id
        self._explicit_evaluator = evaluator is not None
        self.evaluator = evaluator or RuleEvaluator()

    def bind_evaluator(self, evaluator: RuleEvaluator) -> None:
        """Adopt a shared evaluator unless the module was built with its own."""
        if not self._explicit_evaluator:
            self.evaluator = evaluator

    @property
    def declarations(self) -> List[str]:
        """Declaration names targeted by the rules, in first-use order."""
        seen: dict[str, None] = {}
        for rule in self.rules:
            if rule.subject.declaration is not None:
                seen.setdefault(rule.subject.declaration, None)
        return list(seen)

    def run(self, blob: str) -> ResultSet:
        return self.evaluator.evaluate(self.rules, blob)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.exercise_id!r}, rules={len(self.rules)})"


class FunctionVerificationModule(VerificationModule):
    """Adapter for legacy content exposing ``run_tests(blob) -> list[dict]``."""

    def __init__(self, exercise_id: str, run_tests: Callable[[str], Iterable[Any]], *, title: str | None = None) -> None:
        super().__init__(exercise_id, [], title=title)
        self._run_tests = run_tests

    def run(self, blob: str) -> ResultSet:
        if not isinstance(blob, str):
            raise TypeError(f"Source blob must be a string, received {type(blob).__name__}")
        started = time.perf_counter()
        try:
            raw = list(self._run_tests(blob))
        except Exception as exc:  # noqa: BLE001 - broken content degrades to a result
            LOGGER.warning("Legacy verification for %s raised: %s", self.exercise_id, exc)
            elapsed = round((time.perf_counter() - started) * 1000, 3)
            return ResultSet([evaluation_error(f"{self.title} verification", exc, elapsed)])
        return ResultSet(self._coerce_guarded(entry, index) for index, entry in enumerate(raw, start=1))

    def _coerce_guarded(self, entry: Any, index: int) -> Result:
        try:
            return self._coerce(entry, index)
        except Exception as exc:  # noqa: BLE001 - one malformed entry becomes a failed result
            LOGGER.warning("Legacy result %d for %s is malformed: %s", index, self.exercise_id, exc)
            name = entry.get("name") if isinstance(entry, Mapping) else None
            return evaluation_error(str(name or f"{self.title} check {index}"), exc)

    def _coerce(self, entry: Any, index: int) -> Result:
        if isinstance(entry, Result):
            return entry
        if not isinstance(entry, Mapping):
            return Result(
                name=f"{self.title} check {index}",
                status=ResultStatus.FAILED,
                message=f"Evaluation error: unexpected result type {type(entry).__name__}",
            )
        name = str(entry.get("name") or f"{self.title} check {index}")
        passed = _entry_passed(entry)
        message: Optional[str] = entry.get("message") or entry.get("error")
        return Result(
            name=name,
            status=ResultStatus.PASSED if passed else ResultStatus.FAILED,
            message=None if passed else (str(message) if message else None),
            execution_time=float(entry.get("executionTime", entry.get("execution_time", 0.0)) or 0.0),
        )


def _entry_passed(entry: Mapping[str, Any]) -> bool:
    if "status" in entry:
        return str(entry["status"]).lower() == ResultStatus.PASSED.value
    return bool(entry.get("passed"))


class UnavailableModule(VerificationModule):
    """Sentinel returned when no verification module can be loaded."""

    available = False

    def __init__(self, exercise_id: str, reason: str | None = None) -> None:
        super().__init__(exercise_id, [])
        self.reason = reason

    def run(self, blob: str) -> ResultSet:
        return ResultSet()


__all__ = ["FunctionVerificationModule", "UnavailableModule", "VerificationModule"]

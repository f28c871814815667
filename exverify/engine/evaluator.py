"""Run an ordered batch of predicate rules against one source blob."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .extractor import DeclarationKind, Segment, extract_segment
from .rules import PredicateRule, Subject

LOGGER = logging.getLogger(__name__)

EVALUATION_ERROR_PREFIX = "Evaluation error"


class ResultStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class Result:
    """Outcome of one rule. ``execution_time`` (ms) never takes part in equality."""

    name: str
    status: ResultStatus
    message: Optional[str] = None
    execution_time: float = field(default=0.0, compare=False)

    @property
    def passed(self) -> bool:
        return self.status is ResultStatus.PASSED

    @property
    def is_evaluation_error(self) -> bool:
        return bool(self.message) and self.message.startswith(EVALUATION_ERROR_PREFIX)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "name": self.name,
            "status": self.status.value,
            "executionTime": self.execution_time,
        }
        if self.message is not None:
            payload["message"] = self.message
        return payload


def evaluation_error(name: str, exc: BaseException, execution_time: float = 0.0) -> Result:
    return Result(
        name=name,
        status=ResultStatus.FAILED,
        message=f"{EVALUATION_ERROR_PREFIX}: {type(exc).__name__}: {exc}",
        execution_time=execution_time,
    )


class ResultSet(Sequence[Result]):
    """Ordered, immutable collection of results for one verification run."""

    def __init__(self, results: Iterable[Result] = ()) -> None:
        self._results: Tuple[Result, ...] = tuple(results)

    def __getitem__(self, index):  # type: ignore[override]
        if isinstance(index, slice):
            return ResultSet(self._results[index])
        return self._results[index]

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self._results)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResultSet):
            return self._results == other._results
        return NotImplemented

    def __repr__(self) -> str:
        return f"ResultSet({list(self._results)!r})"

    @property
    def names(self) -> List[str]:
        return [result.name for result in self._results]

    @property
    def passed(self) -> List[Result]:
        return [result for result in self._results if result.passed]

    @property
    def failed(self) -> List[Result]:
        return [result for result in self._results if not result.passed]

    @property
    def all_passed(self) -> bool:
        return bool(self._results) and not self.failed

    @property
    def total_time(self) -> float:
        return sum(result.execution_time for result in self._results)

    def to_list(self) -> List[Dict[str, object]]:
        return [result.to_dict() for result in self._results]


class RuleEvaluator:
    """Evaluate rules in order; one broken rule never aborts the batch."""

    def __init__(self, *, time_budget_ms: float | None = None) -> None:
        self.time_budget_ms = time_budget_ms

    def evaluate(self, rules: Sequence[PredicateRule], blob: str) -> ResultSet:
        if not isinstance(blob, str):
            raise TypeError(f"Source blob must be a string, received {type(blob).__name__}")

        started = time.perf_counter()
        segments: Dict[Tuple[str, Optional[DeclarationKind]], Segment] = {}
        results = [self._evaluate_rule(rule, blob, segments) for rule in rules]

        elapsed_ms = (time.perf_counter() - started) * 1000
        if self.time_budget_ms is not None and elapsed_ms > self.time_budget_ms:
            LOGGER.warning(
                "Verification run took %.1fms for %d rules (budget %.1fms)",
                elapsed_ms,
                len(results),
                self.time_budget_ms,
            )
        return ResultSet(results)

    def _evaluate_rule(
        self,
        rule: PredicateRule,
        blob: str,
        segments: Dict[Tuple[str, Optional[DeclarationKind]], Segment],
    ) -> Result:
        started = time.perf_counter()
        try:
            text = self._subject_text(rule.subject, blob, segments)
            verdict = rule.check(text)
        except Exception as exc:  # noqa: BLE001 - rule faults become results
            LOGGER.warning("Rule %r raised during evaluation: %s", rule.name, exc)
            return evaluation_error(rule.name, exc, _elapsed_ms(started))

        return Result(
            name=rule.name,
            status=ResultStatus.PASSED if verdict.satisfied else ResultStatus.FAILED,
            message=None if verdict.satisfied else verdict.detail,
            execution_time=_elapsed_ms(started),
        )

    @staticmethod
    def _subject_text(
        subject: Subject,
        blob: str,
        segments: Dict[Tuple[str, Optional[DeclarationKind]], Segment],
    ) -> str:
        if subject.is_whole_blob:
            return blob
        key = (subject.declaration, subject.kind)
        segment = segments.get(key)
        if segment is None:
            segment = extract_segment(blob, subject.declaration, subject.kind)
            segments[key] = segment
        return segment.text


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


__all__ = [
    "EVALUATION_ERROR_PREFIX",
    "Result",
    "ResultSet",
    "ResultStatus",
    "RuleEvaluator",
    "evaluation_error",
]

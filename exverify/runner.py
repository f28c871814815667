"""Compile a learner submission and verify it with the exercise's module."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Protocol, Union

from exverify.core.errors import CompilationFailed
from exverify.engine.evaluator import ResultSet
from exverify.registry.module_registry import ModuleRegistry

LOGGER = logging.getLogger(__name__)


class Compiler(Protocol):
    def compile(self, source: str) -> str:
        """Return compiled text or raise ``CompilationFailed``."""


CompilerLike = Union[Compiler, Callable[[str], str]]


class ExerciseStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    UNVERIFIED = "unverified"


@dataclass
class ExerciseReport:
    exercise_id: str
    status: ExerciseStatus
    results: ResultSet = field(default_factory=ResultSet)
    compilation_errors: List[str] = field(default_factory=list)
    total_execution_time: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "exerciseId": self.exercise_id,
            "status": self.status.value,
            "tests": self.results.to_list(),
            "compilationErrors": list(self.compilation_errors),
            "totalExecutionTime": self.total_execution_time,
        }


def identity_compiler(source: str) -> str:
    """Pass-through for content that is already plain JavaScript."""
    return source


class ExerciseRunner:
    """Glue between the external compiler, the registry and the evaluator."""

    def __init__(self, registry: ModuleRegistry, compiler: CompilerLike = identity_compiler) -> None:
        self.registry = registry
        self._compile = compiler.compile if hasattr(compiler, "compile") else compiler

    def run(self, exercise_id: str, source: str) -> ExerciseReport:
        if not isinstance(source, str):
            raise TypeError(f"Submission source must be a string, received {type(source).__name__}")
        started = time.perf_counter()
        module = self.registry.resolve(exercise_id)

        try:
            compiled = self._compile(source)
        except CompilationFailed as exc:
            LOGGER.info("Submission for %s did not compile: %s", exercise_id, exc)
            return ExerciseReport(
                exercise_id=exercise_id,
                status=ExerciseStatus.FAILED,
                compilation_errors=exc.errors,
                total_execution_time=_elapsed_ms(started),
            )

        results = module.run(compiled)
        if not module.available:
            status = ExerciseStatus.UNVERIFIED
        elif not results.failed:
            status = ExerciseStatus.COMPLETED
        else:
            status = ExerciseStatus.FAILED
        return ExerciseReport(
            exercise_id=exercise_id,
            status=status,
            results=results,
            total_execution_time=_elapsed_ms(started),
        )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


__all__ = ["Compiler", "ExerciseReport", "ExerciseRunner", "ExerciseStatus", "identity_compiler"]

"""Exception types for integration-level faults.

Learner mistakes (missing declarations, unmet rules, broken content modules)
are reported as results. Only misuse at the integration boundary raises.
"""

from __future__ import annotations

from typing import List, Sequence


class VerifierError(Exception):
    """Base class for errors raised by the verification engine."""


class InvalidExerciseId(VerifierError, ValueError):
    """Raised when an exercise identifier is missing or malformed."""

    def __init__(self, exercise_id: object, reason: str) -> None:
        super().__init__(f"Invalid exercise id {exercise_id!r}: {reason}")
        self.exercise_id = exercise_id
        self.reason = reason


class ModuleLoadError(VerifierError):
    """A verification module could not be imported or had no entry point.

    Raised inside the registry only; `resolve` converts it to the sentinel.
    """

    def __init__(self, exercise_id: str, attempts: Sequence[str]) -> None:
        joined = "; ".join(attempts) if attempts else "no loaders available"
        super().__init__(f"No verification module for {exercise_id}: {joined}")
        self.exercise_id = exercise_id
        self.attempts: List[str] = list(attempts)


class CompilationFailed(VerifierError):
    """Raised by a compiler adapter when the learner's source does not compile."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = [str(error) for error in errors]
        summary = self.errors[0] if self.errors else "unknown compilation error"
        super().__init__(f"Compilation failed: {summary}")


__all__ = ["CompilationFailed", "InvalidExerciseId", "ModuleLoadError", "VerifierError"]

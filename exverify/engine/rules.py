"""Predicate rules: named textual checks with ordered diagnostics.

A rule pairs a subject (the whole blob or one declaration body) with a
condition built from small checks. When the condition fails, the message of
the first unmet check, in declaration order, becomes the diagnostic so a
learner fixes one requirement at a time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, NamedTuple, Optional, Sequence, Tuple

from .extractor import DeclarationKind


class Verdict(NamedTuple):
    satisfied: bool
    detail: str


class Check:
    """Base class for composable text checks."""

    message: Optional[str] = None

    def __call__(self, text: str) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    @property
    def diagnostic(self) -> str:
        return self.message or self.describe()

    def first_unmet(self, text: str) -> Optional["Check"]:
        """Return the check responsible for a failure, or ``None`` when satisfied."""
        return None if self(text) else self

    def __and__(self, other: "Check") -> "AllOf":
        return AllOf(self, other)

    def __or__(self, other: "Check") -> "AnyOf":
        return AnyOf(self, other)


@dataclass(frozen=True)
class Contains(Check):
    token: str
    message: Optional[str] = None
    ignore_case: bool = False

    def __call__(self, text: str) -> bool:
        if self.ignore_case:
            return self.token.lower() in text.lower()
        return self.token in text

    def describe(self) -> str:
        return f"missing `{self.token}`"


@dataclass(frozen=True)
class Absent(Check):
    token: str
    message: Optional[str] = None

    def __call__(self, text: str) -> bool:
        return self.token not in text

    def describe(self) -> str:
        return f"still contains `{self.token}`"


@dataclass(frozen=True)
class Matches(Check):
    """Regex search; an invalid pattern raises when the rule is evaluated."""

    pattern: str
    message: Optional[str] = None
    flags: int = 0

    def __call__(self, text: str) -> bool:
        return re.search(self.pattern, text, self.flags) is not None

    def describe(self) -> str:
        return f"does not match /{self.pattern}/"


@dataclass(frozen=True)
class MinLength(Check):
    length: int
    message: Optional[str] = None

    def __call__(self, text: str) -> bool:
        return len(text.strip()) >= self.length

    def describe(self) -> str:
        return f"shorter than {self.length} characters"


@dataclass(frozen=True)
class CountAtLeast(Check):
    token: str
    count: int
    message: Optional[str] = None

    def __call__(self, text: str) -> bool:
        return text.count(self.token) >= self.count

    def describe(self) -> str:
        return f"expected `{self.token}` at least {self.count} times"


class AllOf(Check):
    """Conjunction; reports the first failing member."""

    def __init__(self, *checks: Check, message: Optional[str] = None) -> None:
        if not checks:
            raise ValueError("AllOf requires at least one check")
        self.checks: Tuple[Check, ...] = tuple(checks)
        self.message = message

    def __call__(self, text: str) -> bool:
        return all(check(text) for check in self.checks)

    def first_unmet(self, text: str) -> Optional[Check]:
        for check in self.checks:
            unmet = check.first_unmet(text)
            if unmet is not None:
                return unmet
        return None

    def describe(self) -> str:
        return " and ".join(check.describe() for check in self.checks)

    def __repr__(self) -> str:
        return f"AllOf{self.checks!r}"


class AnyOf(Check):
    """Disjunction; when nothing matches the disjunction itself is reported."""

    def __init__(self, *checks: Check, message: Optional[str] = None) -> None:
        if not checks:
            raise ValueError("AnyOf requires at least one check")
        self.checks: Tuple[Check, ...] = tuple(checks)
        self.message = message

    def __call__(self, text: str) -> bool:
        return any(check(text) for check in self.checks)

    def describe(self) -> str:
        return "none of: " + "; ".join(check.describe() for check in self.checks)

    def __repr__(self) -> str:
        return f"AnyOf{self.checks!r}"


@dataclass(frozen=True)
class Subject:
    """What a rule inspects: the whole blob, or one declaration's body."""

    declaration: Optional[str] = None
    kind: Optional[DeclarationKind] = None

    @classmethod
    def whole_blob(cls) -> "Subject":
        return cls()

    @classmethod
    def of(cls, name: str, kind: DeclarationKind | None = None) -> "Subject":
        if not name or not name.strip():
            raise ValueError("Declaration subject needs a name")
        return cls(declaration=name.strip(), kind=kind)

    @property
    def is_whole_blob(self) -> bool:
        return self.declaration is None


WHOLE_BLOB = Subject()


@dataclass(frozen=True)
class PredicateRule:
    """Named, stateless check against the blob or a declaration body."""

    name: str
    condition: Check
    subject: Subject = field(default=WHOLE_BLOB)
    message: Optional[str] = None
    explain: Optional[Callable[[str], str]] = None

    def check(self, text: str) -> Verdict:
        if self.condition(text):
            return Verdict(True, "")
        return Verdict(False, self._explain(text))

    def _explain(self, text: str) -> str:
        if self.explain is not None:
            return self.explain(text)
        unmet = self.condition.first_unmet(text)
        if unmet is not None and (unmet.message or self.message is None):
            return unmet.diagnostic
        if self.message:
            return self.message
        return f"{self.name}: requirement not met"


# ----------------------------------------------------------------------
# Rule factories shared by exercise content


def _subject_label(subject: Subject) -> str:
    return subject.declaration or "submission"


def placeholder_rule(
    name: str,
    subject: Subject = WHOLE_BLOB,
    *,
    markers: Sequence[str] = ("TODO", "Not implemented"),
) -> PredicateRule:
    """Fail while stub markers are still present in the subject."""

    label = _subject_label(subject)
    checks = [Absent(marker, message=f"{label} still contains {marker} placeholders") for marker in markers]
    condition: Check = AllOf(*checks) if len(checks) > 1 else checks[0]
    return PredicateRule(name=name, condition=condition, subject=subject)


def component_rule(
    component: str,
    *,
    required_hooks: Iterable[str] = (),
    required_elements: Iterable[str] = (),
    custom: Optional[Check] = None,
    message: Optional[str] = None,
    kind: DeclarationKind | None = None,
) -> PredicateRule:
    """Rule for a UI component: renders markup, not ``return null``, uses hooks/elements."""

    checks: list[Check] = [
        AnyOf(Contains("_jsx"), Contains("<"), message=f"{component} should render JSX"),
        Absent("return null", message=f"{component} should not return null"),
    ]
    checks.extend(Contains(hook, message=f"{component} should use {hook}") for hook in required_hooks)
    checks.extend(
        Contains(element, ignore_case=True, message=f"{component} should render {element}")
        for element in required_elements
    )
    if custom is not None:
        checks.append(custom)
    return PredicateRule(
        name=f"{component} component implementation",
        condition=AllOf(*checks),
        subject=Subject.of(component, kind),
        message=message,
        explain=(lambda _text: message) if message else None,
    )


def hook_rule(
    hook: str,
    *,
    required_hooks: Iterable[str] = (),
    required_returns: Iterable[str] = (),
    forbidden_stubs: Iterable[str] = (),
    custom: Optional[Check] = None,
    message: Optional[str] = None,
    kind: DeclarationKind | None = None,
) -> PredicateRule:
    """Rule for a custom hook: calls hooks, returns the expected names, no stub values."""

    checks: list[Check] = [MinLength(1, message=f"{hook} hook not found")]
    checks.extend(Contains(name, message=f"{hook} should use {name}") for name in required_hooks)
    checks.extend(Contains(name, message=f"{hook} should return {name}") for name in required_returns)
    checks.extend(
        Absent(stub, message=f"{hook} still returns stub value {stub}") for stub in forbidden_stubs
    )
    if custom is not None:
        checks.append(custom)
    return PredicateRule(
        name=f"{hook} custom hook implementation",
        condition=AllOf(*checks),
        subject=Subject.of(hook, kind),
        message=message,
        explain=(lambda _text: message) if message else None,
    )


__all__ = [
    "Absent",
    "AllOf",
    "AnyOf",
    "Check",
    "Contains",
    "CountAtLeast",
    "Matches",
    "MinLength",
    "PredicateRule",
    "Subject",
    "Verdict",
    "WHOLE_BLOB",
    "component_rule",
    "hook_rule",
    "placeholder_rule",
]

"""Segment extraction, predicate rules and rule evaluation."""

from __future__ import annotations

from .evaluator import Result, ResultSet, ResultStatus, RuleEvaluator
from .extractor import DeclarationKind, Segment, brace_balance, extract_declaration, extract_segment
from .module import FunctionVerificationModule, UnavailableModule, VerificationModule
from .rules import (
    Absent,
    AllOf,
    AnyOf,
    Contains,
    CountAtLeast,
    Matches,
    MinLength,
    PredicateRule,
    Subject,
    component_rule,
    hook_rule,
    placeholder_rule,
)

__all__ = [
    "Absent",
    "AllOf",
    "AnyOf",
    "Contains",
    "CountAtLeast",
    "DeclarationKind",
    "FunctionVerificationModule",
    "Matches",
    "MinLength",
    "PredicateRule",
    "Result",
    "ResultSet",
    "ResultStatus",
    "RuleEvaluator",
    "Segment",
    "Subject",
    "UnavailableModule",
    "VerificationModule",
    "brace_balance",
    "component_rule",
    "extract_declaration",
    "extract_segment",
    "hook_rule",
    "placeholder_rule",
]

"""Locate the body of a named declaration inside compiled exercise code.

Extraction is textual on purpose. Three regex shapes cover the common output
of the compiler (class, ``function`` and ``const`` bound closures); when they
miss, or capture nothing, a brace-counting scan from the declaration header
gives the nesting-correct answer. The first textual occurrence of a name wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import List, Optional, Tuple

_NAME_END = r"(?![\w$])"


class DeclarationKind(str, Enum):
    """Declaration shapes the extractor knows how to anchor on."""

    FUNCTION = "function"
    CONSTANT = "constant"
    CLASS = "class"


class ExtractionStrategy(str, Enum):
    """Which tier produced a segment."""

    CLASS_PATTERN = "class_pattern"
    FUNCTION_PATTERN = "function_pattern"
    CONSTANT_PATTERN = "constant_pattern"
    BRACE_COUNT = "brace_count"
    NONE = "none"


@dataclass(frozen=True)
class Segment:
    """Body text of one declaration plus its ``[start, end)`` offsets in the blob."""

    name: str
    text: str
    start: int
    end: int
    strategy: ExtractionStrategy = ExtractionStrategy.NONE

    @property
    def found(self) -> bool:
        return self.strategy is not ExtractionStrategy.NONE

    def __len__(self) -> int:
        return len(self.text)

    @classmethod
    def missing(cls, name: str) -> "Segment":
        return cls(name=name, text="", start=0, end=0)


def _looks_like_class(name: str) -> bool:
    # Content modules never declared a kind; these suffixes were the only hint.
    return "Cache" in name or "Class" in name


@lru_cache(maxsize=512)
def _patterns(name: str, kind: Optional[DeclarationKind]) -> Tuple[List[Tuple[ExtractionStrategy, re.Pattern[str]]], re.Pattern[str]]:
    escaped = re.escape(name)
    class_pattern = re.compile(
        rf"class\s+{escaped}{_NAME_END}[\s\S]*?\{{([\s\S]*?)\}}\s*(?=class|function|export|\Z)",
        re.IGNORECASE,
    )
    function_pattern = re.compile(
        rf"function\s+{escaped}\s*\(.*?\)\s*\{{([\s\S]*?)\}}(?=\s*(?:function|export|class|\Z))",
        re.IGNORECASE,
    )
    constant_pattern = re.compile(
        rf"const\s+{escaped}\s*=.*?\{{([\s\S]*?)\}}(?=\s*(?:function|export|const|\Z))",
        re.IGNORECASE,
    )

    tiers: List[Tuple[ExtractionStrategy, re.Pattern[str]]] = []
    if kind is DeclarationKind.CLASS or (kind is None and _looks_like_class(name)):
        tiers.append((ExtractionStrategy.CLASS_PATTERN, class_pattern))
    if kind in (None, DeclarationKind.FUNCTION):
        tiers.append((ExtractionStrategy.FUNCTION_PATTERN, function_pattern))
    if kind in (None, DeclarationKind.CONSTANT):
        tiers.append((ExtractionStrategy.CONSTANT_PATTERN, constant_pattern))

    keywords = {
        None: "function|const|let|var|class",
        DeclarationKind.FUNCTION: "function",
        DeclarationKind.CONSTANT: "const|let|var",
        DeclarationKind.CLASS: "class",
    }[kind]
    header = re.compile(rf"(?:{keywords})\s+{escaped}{_NAME_END}[\s\S]*?\{{", re.IGNORECASE)
    return tiers, header


def _validate(blob: object, name: object) -> None:
    if not isinstance(blob, str):
        raise TypeError(f"Source blob must be a string, received {type(blob).__name__}")
    if not isinstance(name, str):
        raise TypeError(f"Declaration name must be a string, received {type(name).__name__}")
    if not name.strip():
        raise ValueError("Declaration name must not be empty")


def _count_braces(blob: str, header: re.Pattern[str], name: str) -> Segment:
    match = header.search(blob)
    if match is None:
        return Segment.missing(name)

    start = match.end()
    depth = 1
    for index in range(start, len(blob)):
        char = blob[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return Segment(
                    name=name,
                    text=blob[start:index],
                    start=start,
                    end=index,
                    strategy=ExtractionStrategy.BRACE_COUNT,
                )
    # Unbalanced tail: the compiler output was truncated or malformed.
    return Segment.missing(name)


def extract_segment(blob: str, name: str, kind: DeclarationKind | None = None) -> Segment:
    """Return the body of declaration ``name`` in ``blob``.

    Never raises for content problems: a missing or unbalanced declaration
    yields an empty segment whose ``found`` flag is false.
    """

    _validate(blob, name)
    name = name.strip()
    tiers, header = _patterns(name, kind)

    for strategy, pattern in tiers:
        match = pattern.search(blob)
        # A capture that closes a brace it never opened ran past the first body.
        if match and match.group(1) and _nests_cleanly(match.group(1)):
            return Segment(
                name=name,
                text=match.group(1),
                start=match.start(1),
                end=match.end(1),
                strategy=strategy,
            )

    return _count_braces(blob, header, name)


def extract_declaration(blob: str, name: str, kind: DeclarationKind | None = None) -> str:
    """Shorthand returning only the segment text ("" when absent)."""
    return extract_segment(blob, name, kind).text


def brace_balance(text: str) -> int:
    """Opening minus closing braces; zero for a balanced body."""
    return text.count("{") - text.count("}")


def _nests_cleanly(text: str) -> bool:
    depth = 0
    for char in text:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


__all__ = [
    "DeclarationKind",
    "ExtractionStrategy",
    "Segment",
    "brace_balance",
    "extract_declaration",
    "extract_segment",
]

"""Exercise identifiers and the module naming conventions used to find them.

Exercise ids are ``/``-separated paths such as ``react-hooks/04-custom-hooks``.
Each part maps onto a Python-safe module token (``react_hooks``,
``ex_04_custom_hooks``) and conventions place the resulting dotted path
inside the content package, e.g. ``exercises.react_hooks.ex_04_custom_hooks.verify``.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from exverify.core.errors import InvalidExerciseId

_TOKEN_CLEAN = re.compile(r"[^0-9a-z]+")
_DIGIT_PREFIX = "ex_"


def validate_exercise_id(exercise_id: object) -> str:
    """Return the stripped id or raise ``InvalidExerciseId``."""

    if not isinstance(exercise_id, str):
        raise InvalidExerciseId(exercise_id, "expected a string")
    candidate = exercise_id.strip()
    if not candidate:
        raise InvalidExerciseId(exercise_id, "must not be empty")
    if any(char.isspace() for char in candidate):
        raise InvalidExerciseId(exercise_id, "must not contain whitespace")
    if any(not part for part in candidate.split("/")):
        raise InvalidExerciseId(exercise_id, "contains an empty path segment")
    return candidate


def module_token(part: str) -> str:
    token = _TOKEN_CLEAN.sub("_", part.lower()).strip("_")
    if not token:
        raise InvalidExerciseId(part, "segment has no usable characters")
    if token[0].isdigit():
        token = _DIGIT_PREFIX + token
    return token


def module_path(exercise_id: str) -> str:
    """Dotted module path for an exercise id (without root or convention suffix)."""
    return ".".join(module_token(part) for part in validate_exercise_id(exercise_id).split("/"))


def exercise_id_from_path(path: str) -> str:
    """Inverse of ``module_path`` for ids made of lower-case, dash-separated parts."""

    parts = []
    for token in path.split("."):
        if token.startswith(_DIGIT_PREFIX) and token[len(_DIGIT_PREFIX) : len(_DIGIT_PREFIX) + 1].isdigit():
            token = token[len(_DIGIT_PREFIX) :]
        parts.append(token.replace("_", "-"))
    return "/".join(parts)


def _format(template: str, root: Optional[str], path: str) -> str:
    if root:
        return template.format(root=root, path=path)
    return template.replace("{root}.", "").replace("{root}", "").format(path=path)


def candidate_modules(exercise_id: str, root: Optional[str], conventions: Sequence[str]) -> List[str]:
    """Module names to try for ``exercise_id``, in convention order."""
    path = module_path(exercise_id)
    return [_format(template, root, path) for template in conventions]


def convention_patterns(root: Optional[str], conventions: Sequence[str]) -> List[re.Pattern[str]]:
    """Regexes recovering the ``path`` part from a discovered module name."""

    patterns = []
    for template in conventions:
        marker = "\x00PATH\x00"
        literal = re.escape(_format(template, root, marker))
        patterns.append(re.compile("^" + literal.replace(re.escape(marker), r"(?P<path>[\w.]+?)") + "$"))
    return patterns


def category_of(exercise_id: str) -> str:
    head, sep, _ = exercise_id.partition("/")
    return head if sep else "uncategorized"


__all__ = [
    "candidate_modules",
    "category_of",
    "convention_patterns",
    "exercise_id_from_path",
    "module_path",
    "module_token",
    "validate_exercise_id",
]

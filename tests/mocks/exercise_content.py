"""Throw-away exercise content packages and instrumented loaders for registry tests."""

from __future__ import annotations

import threading
import time
import uuid
from pathlib import Path
from textwrap import dedent
from types import ModuleType
from typing import Callable, Dict, List, Mapping

from exverify.engine import Contains, PredicateRule, VerificationModule

VERIFY_TEMPLATE = """
from exverify.engine import Contains, PredicateRule, VerificationModule

MODULE = VerificationModule(
    "{exercise_id}",
    [PredicateRule(name="{rule_name}", condition=Contains("{token}"))],
)
"""

LEGACY_TEMPLATE = """
def run_tests(compiled_code):
    return [{{"name": "{rule_name}", "passed": "{token}" in compiled_code, "error": "missing {token}"}}]
"""


def unique_package_name(prefix: str = "content") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def write_content_package(base: Path, package: str, files: Mapping[str, str]) -> Path:
    """Create ``package`` under ``base`` with ``files`` (relative module paths -> source).

    Every intermediate directory receives an ``__init__.py`` so ``pkgutil`` can walk it.
    """

    root = base / package
    root.mkdir(parents=True, exist_ok=True)
    (root / "__init__.py").write_text("", encoding="utf-8")
    for relative, source in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        directory = target.parent
        while directory != base:
            init = directory / "__init__.py"
            if not init.exists():
                init.write_text("", encoding="utf-8")
            directory = directory.parent
        target.write_text(dedent(source).lstrip(), encoding="utf-8")
    return root


def verify_source(exercise_id: str, rule_name: str, token: str) -> str:
    return VERIFY_TEMPLATE.format(exercise_id=exercise_id, rule_name=rule_name, token=token)


def legacy_source(rule_name: str, token: str) -> str:
    return LEGACY_TEMPLATE.format(rule_name=rule_name, token=token)


def simple_module(exercise_id: str, token: str = "useState") -> VerificationModule:
    return VerificationModule(exercise_id, [PredicateRule(name=f"uses {token}", condition=Contains(token))])


class CountingLoader:
    """Loader that records invocations and can be slowed down or blocked."""

    def __init__(self, module: VerificationModule, *, delay: float = 0.0, gate: threading.Event | None = None) -> None:
        self.module = module
        self.delay = delay
        self.gate = gate
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self) -> VerificationModule:
        with self._lock:
            self.calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        return self.module


class FakeImporter:
    """Stand-in for ``importlib.import_module`` backed by a dict of modules."""

    def __init__(self, modules: Dict[str, ModuleType] | None = None) -> None:
        self.modules = dict(modules or {})
        self.requested: List[str] = []

    def __call__(self, name: str) -> ModuleType:
        self.requested.append(name)
        if name not in self.modules:
            raise ModuleNotFoundError(f"No module named {name!r}", name=name)
        return self.modules[name]


def python_module(name: str, **attributes: object) -> ModuleType:
    module = ModuleType(name)
    for key, value in attributes.items():
        setattr(module, key, value)
    return module


def raising(message: str) -> Callable[..., object]:
    def _raise(*_args: object, **_kwargs: object) -> object:
        raise RuntimeError(message)

    return _raise

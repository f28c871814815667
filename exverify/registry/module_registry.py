"""Registry resolving exercise ids to verification modules.

The registry is an owned object: build one at application start and pass it
to whatever runs verifications. It caches loaded modules per exercise id,
coalesces concurrent loads of the same id onto one pending future, and falls
back to an empty-result sentinel when nothing can be loaded.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
import sys
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from functools import partial
from types import ModuleType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from exverify.core.config import DEFAULT_CONVENTIONS
from exverify.core.errors import ModuleLoadError
from exverify.engine.evaluator import RuleEvaluator
from exverify.engine.module import FunctionVerificationModule, UnavailableModule, VerificationModule

from .naming import (
    candidate_modules,
    category_of,
    convention_patterns,
    exercise_id_from_path,
    validate_exercise_id,
)

LOGGER = logging.getLogger(__name__)

Loader = Callable[[], Any]


@dataclass(frozen=True)
class ModuleDescriptor:
    """Exercise id plus the callable that produces its verification module."""

    exercise_id: str
    loader: Loader
    origin: str = "explicit"


class RegistryStats(BaseModel):
    """Counters exposed to authoring tools before publishing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    total_registered: int = 0
    total_loaded: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    coalesced_waits: int = 0
    load_failures: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ModuleRegistry:
    """Lazy, caching lookup from exercise id to ``VerificationModule``."""

    def __init__(
        self,
        *,
        root_package: str | None = None,
        conventions: Sequence[str] = DEFAULT_CONVENTIONS,
        importer: Callable[[str], ModuleType] = importlib.import_module,
        evaluator: RuleEvaluator | None = None,
    ) -> None:
        if not conventions:
            raise ValueError("At least one naming convention is required")
        self.root_package = root_package
        self.conventions = list(conventions)
        self._importer = importer
        self._evaluator = evaluator

        self._lock = threading.Lock()
        self._descriptors: Dict[str, ModuleDescriptor] = {}
        self._cache: Dict[str, VerificationModule] = {}
        self._pending: Dict[str, Future] = {}
        self._imported: Dict[str, List[str]] = {}
        self._hits = 0
        self._misses = 0
        self._coalesced = 0
        self._failures = 0

    # ------------------------------------------------------------------
    # Registration

    def register(self, exercise_id: str, loader: Loader, *, replace: bool = False, origin: str = "explicit") -> ModuleDescriptor:
        exercise_id = validate_exercise_id(exercise_id)
        if not callable(loader):
            raise TypeError(f"Loader for {exercise_id} must be callable")
        descriptor = ModuleDescriptor(exercise_id=exercise_id, loader=loader, origin=origin)
        with self._lock:
            if exercise_id in self._descriptors and not replace:
                raise ValueError(f"Exercise {exercise_id} already registered")
            self._descriptors[exercise_id] = descriptor
        if replace:
            self._evict(exercise_id)
        return descriptor

    def register_module(self, module: VerificationModule, *, replace: bool = False) -> ModuleDescriptor:
        return self.register(module.exercise_id, lambda: module, replace=replace)

    def discover(self) -> List[str]:
        """Walk the root package and register every module matching a convention."""

        if not self.root_package:
            return []
        try:
            root = self._importer(self.root_package)
        except Exception as exc:  # noqa: BLE001 - content packages may be absent
            LOGGER.warning("Cannot import exercise package %s: %s", self.root_package, exc)
            return []
        search_path = getattr(root, "__path__", None)
        if search_path is None:
            LOGGER.warning("Exercise root %s is not a package; nothing to discover", self.root_package)
            return []

        patterns = convention_patterns(self.root_package, self.conventions)
        discovered: List[str] = []
        for info in pkgutil.walk_packages(search_path, prefix=f"{self.root_package}.", onerror=self._on_walk_error):
            for pattern in patterns:
                match = pattern.match(info.name)
                if match is None:
                    continue
                exercise_id = exercise_id_from_path(match.group("path"))
                if exercise_id in discovered:
                    break
                discovered.append(exercise_id)
                with self._lock:
                    self._descriptors.setdefault(
                        exercise_id,
                        ModuleDescriptor(
                            exercise_id=exercise_id,
                            loader=partial(self._load_by_convention, exercise_id),
                            origin="discovered",
                        ),
                    )
                break

        LOGGER.info("Discovered %d verification modules under %s", len(discovered), self.root_package)
        return discovered

    @staticmethod
    def _on_walk_error(name: str) -> None:
        LOGGER.warning("Failed to import %s while discovering exercises", name)

    # ------------------------------------------------------------------
    # Resolution

    def resolve(self, exercise_id: str) -> VerificationModule:
        """Return the cached module, loading it once; never raises for content faults."""

        exercise_id = validate_exercise_id(exercise_id)
        with self._lock:
            cached = self._cache.get(exercise_id)
            if cached is not None:
                self._hits += 1
                return cached
            pending = self._pending.get(exercise_id)
            owner = pending is None
            if owner:
                self._misses += 1
                pending = Future()
                self._pending[exercise_id] = pending
            else:
                self._coalesced += 1

        if not owner:
            return pending.result()

        module: VerificationModule = UnavailableModule(exercise_id)
        try:
            module = self._load(exercise_id)
        except ModuleLoadError as exc:
            LOGGER.warning("%s", exc)
            module = UnavailableModule(exercise_id, reason=str(exc))
        finally:
            with self._lock:
                self._pending.pop(exercise_id, None)
                if module.available:
                    self._cache[exercise_id] = module
                else:
                    self._failures += 1
            pending.set_result(module)
        LOGGER.debug("Resolved %s -> %r", exercise_id, module)
        return module

    def invalidate(self, exercise_id: str) -> bool:
        """Drop the cached module (and imported content) so the next resolve reloads it."""

        return self._evict(validate_exercise_id(exercise_id))

    def _evict(self, exercise_id: str) -> bool:
        with self._lock:
            removed = self._cache.pop(exercise_id, None) is not None
            module_names = self._imported.pop(exercise_id, [])
        for name in module_names:
            sys.modules.pop(name, None)
        if module_names:
            importlib.invalidate_caches()
        return removed

    def _load(self, exercise_id: str) -> VerificationModule:
        attempts: List[str] = []
        descriptor = self._descriptors.get(exercise_id)
        if descriptor is not None and descriptor.origin != "discovered":
            try:
                return self._bind(self._coerce(exercise_id, descriptor.loader()))
            except Exception as exc:  # noqa: BLE001 - loader faults fall back to conventions
                LOGGER.warning("Loader for %s failed: %s", exercise_id, exc)
                attempts.append(f"{descriptor.origin} loader: {exc}")
        try:
            return self._load_by_convention(exercise_id)
        except ModuleLoadError as exc:
            raise ModuleLoadError(exercise_id, attempts + exc.attempts) from exc

    def _load_by_convention(self, exercise_id: str) -> VerificationModule:
        if not self.root_package:
            raise ModuleLoadError(exercise_id, ["no exercise package configured"])
        attempts: List[str] = []
        for module_name in candidate_modules(exercise_id, self.root_package, self.conventions):
            try:
                python_module = self._importer(module_name)
            except ModuleNotFoundError as exc:
                attempts.append(f"{module_name}: not found")
                if exc.name not in (None, module_name) and not module_name.startswith(f"{exc.name}."):
                    LOGGER.warning("%s imports a missing module: %s", module_name, exc)
                continue
            except Exception as exc:  # noqa: BLE001 - broken content degrades to the next convention
                LOGGER.warning("Importing %s failed: %s", module_name, exc)
                attempts.append(f"{module_name}: {type(exc).__name__}: {exc}")
                continue

            with self._lock:
                self._imported.setdefault(exercise_id, []).append(module_name)
            try:
                return self._bind(self._from_python_module(exercise_id, python_module))
            except Exception as exc:  # noqa: BLE001 - a faulty entry point falls through to the next convention
                LOGGER.warning("Building verification module from %s failed: %s", module_name, exc)
                attempts.append(f"{module_name}: {type(exc).__name__}: {exc}")
        raise ModuleLoadError(exercise_id, attempts)

    def _coerce(self, exercise_id: str, loaded: Any) -> VerificationModule:
        if isinstance(loaded, VerificationModule):
            return loaded
        if isinstance(loaded, ModuleType):
            return self._from_python_module(exercise_id, loaded)
        if callable(loaded):
            return FunctionVerificationModule(exercise_id, loaded)
        raise TypeError(f"Loader returned unsupported object {type(loaded).__name__}")

    @staticmethod
    def _from_python_module(exercise_id: str, python_module: ModuleType) -> VerificationModule:
        declared = getattr(python_module, "MODULE", None)
        if isinstance(declared, VerificationModule):
            return declared
        build = getattr(python_module, "build_module", None)
        if callable(build):
            built = build()
            if not isinstance(built, VerificationModule):
                raise TypeError(f"{python_module.__name__}.build_module() returned {type(built).__name__}")
            return built
        run_tests = getattr(python_module, "run_tests", None)
        if callable(run_tests):
            return FunctionVerificationModule(exercise_id, run_tests, title=getattr(python_module, "TITLE", None))
        raise AttributeError(f"{python_module.__name__} exposes no MODULE, build_module or run_tests")

    def _bind(self, module: VerificationModule) -> VerificationModule:
        if self._evaluator is not None:
            module.bind_evaluator(self._evaluator)
        return module

    # ------------------------------------------------------------------
    # Introspection

    def exercises(self) -> List[str]:
        with self._lock:
            return sorted(self._descriptors)

    def categories(self) -> List[str]:
        return sorted({category_of(exercise_id) for exercise_id in self.exercises()})

    def exercises_in(self, category: str) -> List[str]:
        return [exercise_id for exercise_id in self.exercises() if category_of(exercise_id) == category]

    def is_cached(self, exercise_id: str) -> bool:
        with self._lock:
            return exercise_id in self._cache

    def stats(self) -> RegistryStats:
        with self._lock:
            categories: Dict[str, int] = {}
            for exercise_id in self._descriptors:
                category = category_of(exercise_id)
                categories[category] = categories.get(category, 0) + 1
            return RegistryStats(
                total_registered=len(self._descriptors),
                total_loaded=len(self._cache),
                cache_hits=self._hits,
                cache_misses=self._misses,
                coalesced_waits=self._coalesced,
                load_failures=self._failures,
                categories=dict(sorted(categories.items())),
            )

    def unreachable(self) -> List[str]:
        """Registered exercises that resolve only to the sentinel."""
        return [exercise_id for exercise_id in self.exercises() if not self.resolve(exercise_id).available]

    def describe(self) -> Mapping[str, object]:
        with self._lock:
            return {
                "root_package": self.root_package,
                "conventions": list(self.conventions),
                "exercises": {exercise_id: d.origin for exercise_id, d in sorted(self._descriptors.items())},
                "cached": sorted(self._cache),
            }


__all__ = ["ModuleDescriptor", "ModuleRegistry", "RegistryStats"]

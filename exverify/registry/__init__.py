"""Discovery, loading and caching of per-exercise verification modules."""

from __future__ import annotations

from .bootstrap import build_registry, build_registry_from_file
from .module_registry import ModuleDescriptor, ModuleRegistry, RegistryStats
from .naming import candidate_modules, module_path, validate_exercise_id

__all__ = [
    "ModuleDescriptor",
    "ModuleRegistry",
    "RegistryStats",
    "build_registry",
    "build_registry_from_file",
    "candidate_modules",
    "module_path",
    "validate_exercise_id",
]

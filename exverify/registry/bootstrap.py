"""Build a ready-to-use registry from configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from types import ModuleType
from typing import Callable

from exverify.core.config import VerifierConfig, load_verifier_config
from exverify.engine.evaluator import RuleEvaluator

from .module_registry import ModuleRegistry

DEFAULT_CONFIG_PATH = Path("config/verifier.yaml")
LOGGER = logging.getLogger(__name__)


def build_registry(
    config: VerifierConfig | None = None,
    *,
    root_package_override: str | None = None,
    importer: Callable[[str], ModuleType] | None = None,
) -> ModuleRegistry:
    """
    Construct a registry and, when configured, pre-register discovered content.

    Parameters
    ----------
    config:
        Parsed verifier config. Defaults to ``VerifierConfig()``.
    root_package_override:
        Dotted content package that replaces ``config.registry.root_package``.
    importer:
        Replacement for ``importlib.import_module`` (tests, sandboxes).
    """

    config = config or VerifierConfig()
    settings = config.registry
    root_package = root_package_override or settings.root_package
    evaluator = None
    if config.evaluator.time_budget_ms is not None:
        evaluator = RuleEvaluator(time_budget_ms=config.evaluator.time_budget_ms)

    kwargs = {}
    if importer is not None:
        kwargs["importer"] = importer
    registry = ModuleRegistry(
        root_package=root_package,
        conventions=settings.conventions,
        evaluator=evaluator,
        **kwargs,
    )
    if settings.discover_on_start:
        registry.discover()
    LOGGER.debug("Registry ready: %s", registry.stats().to_dict())
    return registry


def build_registry_from_file(path: Path | None = None, *, root_package_override: str | None = None) -> ModuleRegistry:
    """Load ``config/verifier.yaml`` (or ``path``) and build the registry it describes."""
    config = load_verifier_config(path or DEFAULT_CONFIG_PATH)
    return build_registry(config, root_package_override=root_package_override)


__all__ = ["DEFAULT_CONFIG_PATH", "build_registry", "build_registry_from_file"]

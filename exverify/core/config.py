"""
Typed configuration for the verification engine and authoring tools.

The engine itself reads no environment variables; the surrounding
application (or the CLI) loads these models from YAML and passes them in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Primary convention first; the legacy layout is only tried when it is absent.
DEFAULT_CONVENTIONS: tuple[str, ...] = (
    "{root}.{path}.verify",
    "{root}.{path}.tests",
)


class RegistrySettings(BaseModel):
    """Where verification modules live and how their module paths are named."""

    model_config = ConfigDict(extra="forbid")

    root_package: str | None = Field(default="exercises", description="Dotted package holding exercise content.")
    conventions: List[str] = Field(default_factory=lambda: list(DEFAULT_CONVENTIONS))
    discover_on_start: bool = Field(default=True, description="Walk the root package when the registry is built.")

    @field_validator("root_package", mode="before")
    @classmethod
    def strip_root(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("conventions")
    @classmethod
    def require_placeholders(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("At least one naming convention is required")
        for template in value:
            if "{path}" not in template:
                raise ValueError(f"Convention {template!r} must contain a {{path}} placeholder")
        return [template.strip() for template in value]


class EvaluatorSettings(BaseModel):
    """Soft limits applied to one verification run."""

    model_config = ConfigDict(extra="forbid")

    time_budget_ms: float | None = Field(default=None, gt=0, description="Log a warning when a run exceeds this budget.")


class VerifierConfig(BaseModel):
    """Top-level configuration for registry + evaluator."""

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    evaluator: EvaluatorSettings = Field(default_factory=EvaluatorSettings)


def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at root of {path}, received {type(data)}")
    return data


def load_verifier_config(path: Path) -> VerifierConfig:
    """Parse the verifier YAML into a typed model."""
    path = path.expanduser().resolve()
    data = read_yaml_file(path)
    try:
        return VerifierConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid verifier config in {path}") from exc


__all__ = [
    "DEFAULT_CONVENTIONS",
    "EvaluatorSettings",
    "RegistrySettings",
    "VerifierConfig",
    "load_verifier_config",
    "read_yaml_file",
]

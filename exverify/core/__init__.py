"""
Configuration and error types shared by the engine, registry and CLI.
"""

from .config import EvaluatorSettings, RegistrySettings, VerifierConfig, load_verifier_config, read_yaml_file
from .errors import CompilationFailed, InvalidExerciseId, ModuleLoadError, VerifierError

__all__ = [
    "CompilationFailed",
    "EvaluatorSettings",
    "InvalidExerciseId",
    "ModuleLoadError",
    "RegistrySettings",
    "VerifierConfig",
    "VerifierError",
    "load_verifier_config",
    "read_yaml_file",
]

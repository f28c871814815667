"""
Exercise verification engine.

Extracts declaration bodies from compiled exercise code and runs the
per-exercise predicate rules against them. Importing the package stays cheap:
engine and registry modules are imported from their subpackages.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("exercise-verifier")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]

"""Utilities for accessing the installed repomanifest version."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources


_PACKAGE_NAME = "repomanifest"
_VERSION_FILENAME = "VERSION"


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the current repomanifest version string."""
    try:
        version_file = resources.files(_PACKAGE_NAME).joinpath(_VERSION_FILENAME)
        return version_file.read_text(encoding="utf-8").strip()
    except (FileNotFoundError, ModuleNotFoundError):
        return "unknown"


def user_agent() -> str:
    """Value sent as ``User-Agent`` to the candidate source."""
    return f"{_PACKAGE_NAME}/{get_version()}"


__all__ = ["get_version", "user_agent", "__version__"]

__version__ = get_version()

"""Installed codechunk version, read from the package metadata."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    try:
        return version("codechunk")
    except PackageNotFoundError:
        # Running from a source checkout that was never installed.
        return "0+unknown"


__version__ = get_version()

__all__ = ["get_version", "__version__"]

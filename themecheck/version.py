from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Installed version of themecheck ("0.0.0" when running from a source tree
    that was never installed). Imports nothing from the package itself.
    """
    try:
        return metadata.version("themecheck")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["tool_version"]

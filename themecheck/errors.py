"""
Base exceptions for themecheck.

Errors the user can fix (a broken config file, an unreadable theme root)
inherit from ThemeCheckUserError so callers can show a clean message.

Everything that goes wrong inside a single file or a single check is NOT an
exception at this level: it is converted into an Offense and the run goes on.
"""

from __future__ import annotations


class ThemeCheckUserError(Exception):
    """
    Base class for all user-facing errors in themecheck.

    These errors indicate problems that the user can fix:
    configuration issues, a missing theme root, etc.
    """
    pass


class ThemeRootNotFoundError(ThemeCheckUserError):
    """The theme root does not exist or is not a directory."""

    def __init__(self, root: str):
        self.root = root
        super().__init__(f"Theme root not found: {root}")


class RunCancelledError(Exception):
    """Raised at a file boundary when the active run has been cancelled."""

    def __init__(self, stage: str = ""):
        self.stage = stage
        super().__init__(f"Run cancelled{f' during {stage}' if stage else ''}")


__all__ = ["ThemeCheckUserError", "ThemeRootNotFoundError", "RunCancelledError"]

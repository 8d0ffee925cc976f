"""
Static analysis of Liquid themes.

Two entry points:
  • check_theme(): runs the registered checks over every Liquid file and
    returns the offenses;
  • build_theme_graph(): builds the dependency graph of the theme's
    templates, sections, snippets, layouts, blocks and assets.
"""

from __future__ import annotations

from .cancellation import CancellationToken
from .checks import CheckDefinition, CheckDocs, CheckRegistry, Context, default_registry
from .errors import RunCancelledError, ThemeCheckUserError, ThemeRootNotFoundError
from .fs import AbstractFileSystem, LocalFileSystem, MemoryFileSystem
from .graph import ThemeGraph, ThemeModule, build_theme_graph, serialize_theme_graph
from .offenses import OffenseCollector
from .runner import CheckResult, check_source, check_theme
from .types import Offense, Position, Severity
from .version import tool_version

__all__ = [
    "check_theme",
    "check_source",
    "CheckResult",
    "build_theme_graph",
    "serialize_theme_graph",
    "ThemeGraph",
    "ThemeModule",
    "CheckDefinition",
    "CheckDocs",
    "CheckRegistry",
    "Context",
    "default_registry",
    "OffenseCollector",
    "Offense",
    "Position",
    "Severity",
    "AbstractFileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "CancellationToken",
    "RunCancelledError",
    "ThemeCheckUserError",
    "ThemeRootNotFoundError",
    "tool_version",
]

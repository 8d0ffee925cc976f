from __future__ import annotations

# Public API of checks package:
#  • CheckDefinition / Context: writing a check
#  • CheckRegistry / default_registry: the set of checks a run may activate
from .base import ON_CODE_PATH_END, ON_CODE_PATH_START, CheckDefinition, CheckDocs, HandlerMap
from .block_id_usage import BlockIdUsage
from .context import Context, SourceFile
from .missing_template import MissingTemplate, MissingTemplateOptions
from .registry import CheckRegistry, DuplicateCheckError, default_registry, register

__all__ = [
    "CheckDefinition",
    "CheckDocs",
    "HandlerMap",
    "Context",
    "SourceFile",
    "CheckRegistry",
    "DuplicateCheckError",
    "default_registry",
    "register",
    "ON_CODE_PATH_START",
    "ON_CODE_PATH_END",
    "BlockIdUsage",
    "MissingTemplate",
    "MissingTemplateOptions",
]

# ---- Built-in checks --------------------------------------------------------
# Registration order is the tie-break order of offenses at the same position.
register(BlockIdUsage)
register(MissingTemplate)

from __future__ import annotations

from .provider import (
    AbstractFileSystem,
    LocalFileSystem,
    MemoryFileSystem,
    FileType,
    FileStat,
    DirEntry,
)
from .walk import build_ignore_spec, ensure_theme_root, walk_files

__all__ = [
    "AbstractFileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "FileType",
    "FileStat",
    "DirEntry",
    "build_ignore_spec",
    "ensure_theme_root",
    "walk_files",
]

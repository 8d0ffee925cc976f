"""
POSIX path helpers.

All paths crossing the FileSystem boundary are POSIX strings, whatever the
host OS; module keys in the theme graph are root-relative POSIX paths.
"""

from __future__ import annotations

import posixpath


def normalize(path: str) -> str:
    """Collapse '.', '..' and duplicate separators; drop a leading './'."""
    path = path.replace("\\", "/")
    if not path:
        return ""
    norm = posixpath.normpath(path)
    return "" if norm == "." else norm


def join(root: str, rel: str) -> str:
    return normalize(posixpath.join(root, rel))


def relative(root: str, path: str) -> str:
    """Root-relative form of *path*. A path not of the same kind (absolute/relative) as *root* is only normalized."""
    path = normalize(path)
    root = normalize(root)
    if not root or posixpath.isabs(path) != posixpath.isabs(root):
        return path
    return normalize(posixpath.relpath(path, root))


__all__ = ["normalize", "join", "relative"]

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Optional

import pathspec

from . import paths
from .provider import AbstractFileSystem, FileType
from ..errors import ThemeRootNotFoundError


def build_ignore_spec(patterns: Iterable[str]) -> Optional[pathspec.PathSpec]:
    """
    Build PathSpec from gitignore-style patterns. Return None if there are none.
    """
    lines = []
    for ln in patterns:
        ln = ln.strip()
        if ln and not ln.startswith("#"):
            lines.append(ln)
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


async def ensure_theme_root(fs: AbstractFileSystem, root: str) -> None:
    """
    Raises:
        ThemeRootNotFoundError: If *root* is missing or not a directory
    """
    try:
        stat = await fs.stat(root)
    except FileNotFoundError:
        raise ThemeRootNotFoundError(root) from None
    if stat.type is not FileType.DIRECTORY:
        raise ThemeRootNotFoundError(root)


async def walk_files(
    fs: AbstractFileSystem,
    root: str,
    *,
    suffixes: Optional[Iterable[str]] = None,
    ignore: Optional[pathspec.PathSpec] = None,
) -> List[str]:
    """
    Recursive file listing through the FileSystem provider.

    Returns full paths in sorted order (all files when *suffixes* is None).
    Does not enter .git or node_modules; directories and files matching
    *ignore* (root-relative) are pruned early.
    """
    wanted = tuple(s.lower() for s in suffixes) if suffixes is not None else None
    root = paths.normalize(root)
    found: List[str] = []
    pending = deque([root])
    while pending:
        current = pending.popleft()
        for entry, kind in await fs.read_directory(current):
            name = entry.rsplit("/", 1)[-1]
            rel = paths.relative(root, entry)
            if kind is FileType.DIRECTORY:
                if name in (".git", "node_modules"):
                    continue
                # An ignored directory is pruned whole
                if ignore and ignore.match_file(rel + "/"):
                    continue
                pending.append(entry)
                continue
            if wanted is not None and not name.lower().endswith(wanted):
                continue
            if ignore and ignore.match_file(rel):
                continue
            found.append(entry)
    return sorted(found)


__all__ = ["build_ignore_spec", "ensure_theme_root", "walk_files"]

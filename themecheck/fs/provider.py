"""
File system access used by the check pass and the graph builder.

Nothing in themecheck touches the OS directly: every read goes through an
AbstractFileSystem, so the same analysis runs over a local checkout, a
remote source or a set of unsaved editor buffers.
"""

from __future__ import annotations

import asyncio
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from . import paths


class FileType(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class FileStat:
    type: FileType
    size: int


DirEntry = Tuple[str, FileType]


class AbstractFileSystem(ABC):
    """
    Minimal async file system contract.

    Missing paths raise FileNotFoundError from every method.
    """

    @abstractmethod
    async def read_file(self, path: str) -> str:
        ...

    @abstractmethod
    async def read_directory(self, path: str) -> List[DirEntry]:
        """Entries of *path* as (full path, type), sorted by path."""
        ...

    @abstractmethod
    async def stat(self, path: str) -> FileStat:
        ...

    async def exists(self, path: str) -> bool:
        try:
            await self.stat(path)
        except FileNotFoundError:
            return False
        return True


class LocalFileSystem(AbstractFileSystem):
    """Disk-backed provider. Blocking calls run in the default executor."""

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(self._read_text, Path(path))

    async def read_directory(self, path: str) -> List[DirEntry]:
        return await asyncio.to_thread(self._list_dir, Path(path))

    async def stat(self, path: str) -> FileStat:
        return await asyncio.to_thread(self._stat, Path(path))

    @staticmethod
    def _read_text(path: Path) -> str:
        # One U+FFFD per broken byte, later offsets still line up
        with path.open(encoding="utf-8", errors="replace") as f:
            return f.read()

    @staticmethod
    def _list_dir(path: Path) -> List[DirEntry]:
        entries: List[DirEntry] = []
        for child in path.iterdir():
            kind = FileType.DIRECTORY if child.is_dir() else FileType.FILE
            entries.append((child.as_posix(), kind))
        return sorted(entries)

    @staticmethod
    def _stat(path: Path) -> FileStat:
        st = path.stat()
        kind = FileType.DIRECTORY if path.is_dir() else FileType.FILE
        return FileStat(type=kind, size=st.st_size)


class MemoryFileSystem(AbstractFileSystem):
    """
    Dict-backed virtual tree.

    Args:
        files: Root-relative POSIX path → file text
        root: Absolute POSIX root the relative paths hang from
    """

    def __init__(self, files: Mapping[str, str], root: str = "/theme"):
        self.root = paths.normalize(root)
        self._files: Dict[str, str] = {
            paths.join(self.root, rel): text for rel, text in files.items()
        }
        self._dirs = {self.root}
        for file_path in self._files:
            parent = paths.normalize(file_path.rsplit("/", 1)[0]) or "/"
            while parent not in self._dirs:
                self._dirs.add(parent)
                if parent in ("/", self.root):
                    break
                parent = paths.normalize(parent.rsplit("/", 1)[0]) or "/"

    async def read_file(self, path: str) -> str:
        key = paths.normalize(path)
        if key not in self._files:
            raise FileNotFoundError(path)
        return self._files[key]

    async def read_directory(self, path: str) -> List[DirEntry]:
        base = paths.normalize(path)
        if base not in self._dirs:
            raise FileNotFoundError(path)
        prefix = base.rstrip("/") + "/"
        entries: Dict[str, FileType] = {}
        for candidate in list(self._files) + list(self._dirs):
            if not candidate.startswith(prefix) or candidate == base:
                continue
            head = candidate[len(prefix):].split("/", 1)[0]
            full = prefix + head
            entries[full] = FileType.DIRECTORY if full in self._dirs else FileType.FILE
        return sorted(entries.items())

    async def stat(self, path: str) -> FileStat:
        key = paths.normalize(path)
        if key in self._files:
            return FileStat(type=FileType.FILE, size=len(self._files[key].encode("utf-8")))
        if key in self._dirs:
            return FileStat(type=FileType.DIRECTORY, size=0)
        raise FileNotFoundError(path)


__all__ = [
    "AbstractFileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "FileType",
    "FileStat",
    "DirEntry",
]

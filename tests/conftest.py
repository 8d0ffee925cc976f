from pathlib import Path
from typing import Callable, Mapping

import pytest

from themecheck.fs import LocalFileSystem, MemoryFileSystem

from tests.infrastructure.file_utils import write_theme


@pytest.fixture
def memory_theme() -> Callable[[Mapping[str, str]], MemoryFileSystem]:
    """Factory: root-relative path → text becomes a MemoryFileSystem rooted at /theme."""
    def make(files: Mapping[str, str]) -> MemoryFileSystem:
        return MemoryFileSystem(files, root="/theme")
    return make


@pytest.fixture
def disk_theme(tmp_path: Path):
    """Factory: writes the files under tmp_path/theme and returns (root, LocalFileSystem)."""
    def make(files: Mapping[str, str]):
        root = write_theme(tmp_path / "theme", files)
        return root.as_posix(), LocalFileSystem()
    return make

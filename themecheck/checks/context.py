"""
Reporting context handed to a check for one file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from ..fs import AbstractFileSystem, paths
from ..types import Offense, Position, Severity

C = TypeVar("C")

#: Receives every offense reported through a context, with the check's registration order
OffenseSink = Callable[[Offense, int], None]


@dataclass(frozen=True)
class SourceFile:
    """One theme file as seen by the checks."""
    uri: str
    text: str
    #: Root-relative POSIX path ("snippets/price.liquid")
    relative_path: str


class Context(Generic[C]):
    """
    Per (check, file) context.

    Gives the check read-only access to the file, its validated options and
    the file system of the theme, and turns report() calls into Offenses.
    """

    def __init__(
        self,
        *,
        check_code: str,
        severity: Severity,
        order: int,
        file: SourceFile,
        options: Optional[C],
        fs: Optional[AbstractFileSystem],
        root: str,
        sink: OffenseSink,
    ):
        self.check_code = check_code
        self.severity = severity
        self.order = order
        self.file = file
        self._options = options
        self._fs = fs
        self.root = root
        self._sink = sink

    @property
    def options(self) -> C:
        if self._options is None:
            raise AttributeError(f"{self.check_code} takes no options")
        return self._options

    def report(
        self,
        message: str,
        start_index: int,
        end_index: int,
        suggest: Optional[str] = None,
    ) -> Offense:
        """
        Report an offense over ``[start_index, end_index)`` of the file text.

        Raises:
            ValueError: If the range is not within the file
        """
        if not 0 <= start_index <= end_index <= len(self.file.text):
            raise ValueError(
                f"{self.check_code}: range [{start_index}, {end_index}) is outside "
                f"{self.file.uri} (length {len(self.file.text)})"
            )
        offense = Offense(
            check_code=self.check_code,
            severity=self.severity,
            message=message,
            uri=self.file.uri,
            position=Position(start_index, end_index),
            suggestion=suggest,
        )
        self._sink(offense, self.order)
        return offense

    @property
    def has_file_system(self) -> bool:
        """False when the file is checked alone (no theme around it)."""
        return self._fs is not None

    def to_uri(self, relative_path: str) -> str:
        return paths.join(self.root, relative_path)

    async def file_exists(self, relative_path: str) -> bool:
        """True if the root-relative path exists in the theme."""
        if self._fs is None:
            return False
        return await self._fs.exists(self.to_uri(relative_path))

    async def read_file(self, relative_path: str) -> str:
        """
        Text of another theme file.

        Raises:
            FileNotFoundError: If there is no such file (or no file system)
        """
        if self._fs is None:
            raise FileNotFoundError(relative_path)
        return await self._fs.read_file(self.to_uri(relative_path))


__all__ = ["Context", "SourceFile", "OffenseSink"]

"""
Core value types shared by the check engine and the theme graph.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class Severity(enum.IntEnum):
    """Offense severity. Lower value means more severe (matches editor conventions)."""
    ERROR = 0
    WARNING = 1
    INFO = 2

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """
        Accepts an enum member, its name in any case ("error", "Warning")
        or its numeric value (0/1/2).

        Raises:
            ValueError: If the value does not name a severity
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        allowed = ", ".join(m.name.lower() for m in cls)
        raise ValueError(f"expected one of {allowed} (or 0-2), got {value!r}")


@dataclass(frozen=True, order=True)
class Position:
    """Half-open [start, end) character range into a file's raw text."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid position range [{self.start}, {self.end})")

    def slice(self, text: str) -> str:
        return text[self.start:self.end]

    def within(self, text: str) -> bool:
        return self.end <= len(text)


@dataclass(frozen=True)
class Offense:
    """
    One reported diagnostic.

    Offenses are immutable; the collector owns ordering and deduplication.
    """
    check_code: str
    severity: Severity
    message: str
    uri: str
    position: Position
    suggestion: Optional[str] = None

    def dedup_key(self) -> tuple[str, str, Position, str]:
        return self.check_code, self.uri, self.position, self.message

    def to_dict(self) -> dict:
        data = {
            "check": self.check_code,
            "severity": self.severity.name.lower(),
            "message": self.message,
            "uri": self.uri,
            "start": self.position.start,
            "end": self.position.end,
        }
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


__all__ = ["Severity", "Position", "Offense"]

"""
Offense collection for one run.
"""

from __future__ import annotations

from typing import Dict, List, Set, Tuple

from .types import Offense, Position, Severity

#: Codes of offenses produced by the engine itself rather than by a check
INTERNAL_ERROR = "InternalError"
CONFIG_ERROR = "ConfigError"
LIQUID_SYNTAX_ERROR = "LiquidSyntaxError"

#: Sort order of offenses not owned by a registered check (before all checks)
ENGINE_ORDER = -1


class OffenseCollector:
    """
    Accumulates offenses of one run.

    Duplicates (same check, file, position and message) are dropped on add.
    offenses() returns them grouped per file (files by uri), each file
    ordered by start offset, then by the reporting check's registration
    order, then by arrival.
    """

    def __init__(self) -> None:
        self._entries: List[Tuple[Offense, int, int]] = []
        self._seen: Set[tuple] = set()

    def add(self, offense: Offense, order: int) -> bool:
        """
        Args:
            offense: Reported offense
            order: Registration order of the reporting check (ENGINE_ORDER for the engine)

        Returns:
            False if an identical offense was already collected
        """
        key = offense.dedup_key()
        if key in self._seen:
            return False
        self._seen.add(key)
        self._entries.append((offense, order, len(self._entries)))
        return True

    def offenses(self) -> List[Offense]:
        entries = sorted(
            self._entries,
            key=lambda e: (e[0].uri, e[0].position.start, e[1], e[2]),
        )
        return [offense for offense, _, _ in entries]

    def by_file(self) -> Dict[str, List[Offense]]:
        grouped: Dict[str, List[Offense]] = {}
        for offense in self.offenses():
            grouped.setdefault(offense.uri, []).append(offense)
        return grouped

    def __len__(self) -> int:
        return len(self._entries)


def internal_error(check_code: str, uri: str, position: Position, error: BaseException) -> Offense:
    return Offense(
        check_code=INTERNAL_ERROR,
        severity=Severity.ERROR,
        message=f"{check_code} failed: {type(error).__name__}: {error}",
        uri=uri,
        position=position,
    )


def config_error(uri: str, message: str) -> Offense:
    return Offense(
        check_code=CONFIG_ERROR,
        severity=Severity.ERROR,
        message=message,
        uri=uri,
        position=Position(0, 0),
    )


def syntax_error(uri: str, message: str, offset: int) -> Offense:
    return Offense(
        check_code=LIQUID_SYNTAX_ERROR,
        severity=Severity.ERROR,
        message=message,
        uri=uri,
        position=Position(offset, offset),
    )


__all__ = [
    "OffenseCollector",
    "INTERNAL_ERROR",
    "CONFIG_ERROR",
    "LIQUID_SYNTAX_ERROR",
    "ENGINE_ORDER",
    "internal_error",
    "config_error",
    "syntax_error",
]

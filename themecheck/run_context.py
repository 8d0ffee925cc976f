from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Type

from .cancellation import CancellationToken
from .checks.base import CheckDefinition
from .config import CheckSettings, ThemeCheckConfig
from .fs import AbstractFileSystem
from .offenses import OffenseCollector


@dataclass(frozen=True)
class ActiveCheck:
    """A registered check enabled for this run, with its validated settings."""
    definition: Type[CheckDefinition]
    settings: CheckSettings
    order: int

    @property
    def code(self) -> str:
        return self.definition.code


@dataclass(frozen=True)
class RunContext:
    """
    State of one check run.

    Created when the run starts and dropped when it ends; every component
    that needs run state receives it explicitly.
    """
    root: str
    fs: Optional[AbstractFileSystem]
    config: ThemeCheckConfig
    collector: OffenseCollector = field(default_factory=OffenseCollector)
    checks: List[ActiveCheck] = field(default_factory=list)
    cancellation: Optional[CancellationToken] = None

    def check_cancelled(self, stage: str) -> None:
        if self.cancellation is not None:
            self.cancellation.raise_if_cancelled(stage)


__all__ = ["RunContext", "ActiveCheck"]

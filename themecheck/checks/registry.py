from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Type

from .base import CheckDefinition

__all__ = ["CheckRegistry", "DuplicateCheckError", "default_registry", "register"]

logger = logging.getLogger(__name__)


class DuplicateCheckError(ValueError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Check '{code}' is already registered")


class CheckRegistry:
    """
    Ordered set of check definitions keyed by code.

    Registration order is the tie-breaker for offenses at the same position,
    so it is kept as given. Definitions are never replaced or removed.
    """

    def __init__(self) -> None:
        self._by_code: Dict[str, Type[CheckDefinition]] = {}

    def register(self, check: Type[CheckDefinition]) -> Type[CheckDefinition]:
        """
        Add a check class. Usable as a class decorator.

        Raises:
            ValueError: If the class has no code
            DuplicateCheckError: If the code is taken
        """
        if not check.code:
            raise ValueError(f"{check.__name__} has no check code")
        if check.code in self._by_code:
            raise DuplicateCheckError(check.code)
        self._by_code[check.code] = check
        logger.debug("Registered check %s (#%d)", check.code, len(self._by_code) - 1)
        return check

    def get(self, code: str) -> Type[CheckDefinition]:
        try:
            return self._by_code[code]
        except KeyError:
            raise KeyError(f"Unknown check '{code}'") from None

    def order(self, code: str) -> int:
        """Registration index of *code*."""
        return list(self._by_code).index(code)

    def codes(self) -> List[str]:
        return list(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __iter__(self) -> Iterator[Type[CheckDefinition]]:
        return iter(list(self._by_code.values()))

    def __len__(self) -> int:
        return len(self._by_code)


#: Process-wide registry of the built-in checks
default_registry = CheckRegistry()
register = default_registry.register

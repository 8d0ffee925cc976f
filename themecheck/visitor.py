"""
Visitor dispatch engine.

Walks one file's syntax tree in document pre-order and awaits, at every
node, all handlers registered for the node's kind before descending into
its children. Handlers of one node run concurrently but each one is its own
error boundary: a failing handler is reported through ``on_error`` and the
traversal goes on.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Tuple

from .checks.base import ON_CODE_PATH_END, ON_CODE_PATH_START
from .liquid.nodes import LiquidNode, NodeKind, iter_children

logger = logging.getLogger(__name__)

Ancestors = Tuple[LiquidNode, ...]


@dataclass(frozen=True)
class BoundHandler:
    """A handler together with the check that contributed it."""
    check_code: str
    order: int
    fn: Callable[..., Any]


#: Called with the failing handler, the node it ran on and the exception
ErrorCallback = Callable[[BoundHandler, LiquidNode, BaseException], None]


@dataclass
class DispatchTable:
    """
    Node kind → handlers, in the order the checks were added.

    Built once per file from the handler maps returned by the active checks.
    """
    handlers: Dict[NodeKind, List[BoundHandler]] = field(default_factory=dict)
    start_hooks: List[BoundHandler] = field(default_factory=list)
    end_hooks: List[BoundHandler] = field(default_factory=list)

    def add(self, check_code: str, order: int, handler_map: Mapping[Any, Callable[..., Any]]) -> None:
        """
        Merge the handler map of one check.

        Keys are NodeKind members, node kind names ("VariableLookup") or
        one of the file hook names.

        Raises:
            ValueError: On a key that is neither a node kind nor a hook
        """
        resolved = []
        for key, fn in handler_map.items():
            target = key if key in (ON_CODE_PATH_START, ON_CODE_PATH_END) else NodeKind.parse(key)
            resolved.append((target, BoundHandler(check_code=check_code, order=order, fn=fn)))

        # Validate everything before registering anything
        for target, bound in resolved:
            if target == ON_CODE_PATH_START:
                self.start_hooks.append(bound)
            elif target == ON_CODE_PATH_END:
                self.end_hooks.append(bound)
            else:
                self.handlers.setdefault(target, []).append(bound)

    def __bool__(self) -> bool:
        return bool(self.handlers or self.start_hooks or self.end_hooks)


class Visitor:
    def __init__(self, table: DispatchTable, on_error: ErrorCallback):
        self.table = table
        self.on_error = on_error

    async def visit(self, root: LiquidNode) -> None:
        """
        Traverse *root*. The ancestor chain handed to handlers is a tuple
        snapshot, outermost first; it never includes the node itself.
        """
        await self._run(self.table.start_hooks, root)

        if self.table.handlers:
            ancestors: List[LiquidNode] = []
            # (node, leaving) pairs; a leaving marker pops the node off the ancestor chain
            work: List[Tuple[LiquidNode, bool]] = [(root, False)]
            while work:
                node, leaving = work.pop()
                if leaving:
                    ancestors.pop()
                    continue
                handlers = self.table.handlers.get(node.kind)
                if handlers:
                    await self._run(handlers, node, tuple(ancestors))
                children = list(iter_children(node))
                if children:
                    ancestors.append(node)
                    work.append((node, True))
                    work.extend((child, False) for child in reversed(children))

        await self._run(self.table.end_hooks, root)

    async def _run(self, handlers: List[BoundHandler], node: LiquidNode, *args: Any) -> None:
        if not handlers:
            return
        results = await asyncio.gather(
            *(_call(h.fn, node, *args) for h in handlers),
            return_exceptions=True,
        )
        for handler, result in zip(handlers, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.debug("Handler of %s failed on %s: %r", handler.check_code, node.kind.value, result)
                self.on_error(handler, node, result)


async def _call(fn: Callable[..., Any], *args: Any) -> None:
    result = fn(*args)
    if inspect.isawaitable(result):
        await result


__all__ = ["Visitor", "DispatchTable", "BoundHandler", "Ancestors"]

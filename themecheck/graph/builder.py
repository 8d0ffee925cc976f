"""
Theme graph builder.

Discovers theme modules through the file system provider, parses each one
and binds its static references. Work is a breadth-first worklist seeded
with the entry points (templates, layouts); when it drains, the next module
nobody reached yet is seeded, until every module file has been visited.

Files are parsed in waves of up to ``concurrency`` at a time; the results
of a wave are applied to the graph one by one, in worklist order, by this
coroutine alone. The graph therefore comes out the same for any
concurrency value.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set

from .model import (
    ENTRY_POINT_KINDS,
    BrokenReference,
    ParseStatus,
    ThemeGraph,
    ThemeModule,
    UnresolvedReference,
    bind,
    is_source_module,
    module_kind,
)
from .references import ModuleReference, extract_json_references, extract_references
from ..cancellation import CancellationToken
from ..fs import AbstractFileSystem, ensure_theme_root, paths, walk_files
from ..liquid import LiquidParseError, parse_liquid

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8


@dataclass
class _ParseResult:
    references: List[ModuleReference] = field(default_factory=list)
    error: Optional[str] = None


class ThemeGraphBuilder:
    """
    One graph build. Not reusable: create a new builder per run.

    Args:
        root: Theme root as understood by *fs*
        fs: File system provider
        concurrency: Max number of files parsed at the same time
        cancellation: Checked before every file read and every applied
            result; a cancelled build raises RunCancelledError and returns nothing
    """

    def __init__(
        self,
        root: str,
        fs: AbstractFileSystem,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        cancellation: Optional[CancellationToken] = None,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.root = paths.normalize(root)
        self.fs = fs
        self.concurrency = concurrency
        self.cancellation = cancellation
        self.graph = ThemeGraph(root=self.root)
        self._existing: Set[str] = set()
        self._visited: Set[str] = set()
        self._queued: Set[str] = set()
        self._pending: Deque[str] = deque()

    async def build(self) -> ThemeGraph:
        self._check_cancelled()
        await ensure_theme_root(self.fs, self.root)
        files = [paths.relative(self.root, f) for f in await walk_files(self.fs, self.root)]
        self._existing = set(files)
        modules = [f for f in files if self._is_source_file(f)]
        logger.debug("Graph build: %d files, %d module files under %s", len(files), len(modules), self.root)

        for path in modules:
            if module_kind(path) in ENTRY_POINT_KINDS:
                self.graph.add_entry_point(self.graph.get_or_create(path))
                self._enqueue(path)
        orphans: Deque[str] = deque(p for p in modules if module_kind(p) not in ENTRY_POINT_KINDS)

        while self._pending or orphans:
            if not self._pending:
                seed = orphans.popleft()
                if seed in self._queued:
                    continue
                self.graph.get_or_create(seed)
                self._enqueue(seed)

            self._check_cancelled()
            wave = [self._pending.popleft() for _ in range(min(self.concurrency, len(self._pending)))]
            results = await asyncio.gather(*(self._parse(path) for path in wave))
            for path, result in zip(wave, results):
                self._check_cancelled()
                self._apply(path, result)

        logger.debug(
            "Graph built: %d modules, %d entry points, %d unresolved, %d broken",
            len(self.graph.modules),
            len(self.graph.entry_points),
            len(self.graph.unresolved_references),
            len(self.graph.broken_references),
        )
        return self.graph

    # --- worklist ----------------------------------------------------------

    def _enqueue(self, path: str) -> None:
        if path in self._queued:
            return
        self._queued.add(path)
        self._pending.append(path)

    def _is_source_file(self, path: str) -> bool:
        kind = module_kind(path)
        return kind is not None and is_source_module(kind)

    def _check_cancelled(self) -> None:
        if self.cancellation is not None:
            self.cancellation.raise_if_cancelled("theme graph build")

    # --- parsing (concurrent, no graph access) -----------------------------

    async def _parse(self, path: str) -> _ParseResult:
        self._check_cancelled()
        try:
            text = await self.fs.read_file(paths.join(self.root, path))
        except FileNotFoundError:
            return _ParseResult(error="file disappeared during the build")
        try:
            if path.endswith(".json"):
                return _ParseResult(references=extract_json_references(text))
            document = await asyncio.to_thread(parse_liquid, text)
        except (LiquidParseError, ValueError) as e:
            return _ParseResult(error=str(e))
        return _ParseResult(references=extract_references(document))

    # --- graph mutation (single writer) ------------------------------------

    def _apply(self, path: str, result: _ParseResult) -> None:
        self._visited.add(path)
        source = self.graph.modules[path]
        if result.error is not None:
            logger.debug("Unparsable module %s: %s", path, result.error)
            source.parse_status = ParseStatus.UNPARSABLE
            return
        for ref in result.references:
            self._apply_reference(source, ref)

    def _apply_reference(self, source: ThemeModule, ref: ModuleReference) -> None:
        if ref.target is None:
            self.graph.unresolved_references.append(
                UnresolvedReference(source=source.path, position=ref.position, tag=ref.tag)
            )
            return

        target_path = paths.normalize(ref.target)
        kind = module_kind(target_path)
        if kind is None:
            # e.g. render 'a/b' resolves outside the flat snippets directory
            self.graph.unresolved_references.append(
                UnresolvedReference(source=source.path, position=ref.position, tag=ref.tag)
            )
            return

        target = self.graph.get_or_create(target_path, kind)
        if target_path not in self._existing:
            target.exists = False
            self.graph.broken_references.append(
                BrokenReference(source=source.path, target=target_path, position=ref.position, tag=ref.tag)
            )
        elif is_source_module(kind) and target_path not in self._visited:
            self._enqueue(target_path)

        if bind(source, target):
            logger.debug("bind %s -> %s", source.path, target_path)


async def build_theme_graph(
    root: str,
    fs: AbstractFileSystem,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    cancellation: Optional[CancellationToken] = None,
) -> ThemeGraph:
    """
    Build the dependency graph of the theme at *root*.

    Raises:
        ThemeRootNotFoundError: If *root* is not a directory
        RunCancelledError: If *cancellation* fires during the build
    """
    builder = ThemeGraphBuilder(root, fs, concurrency=concurrency, cancellation=cancellation)
    return await builder.build()


__all__ = ["ThemeGraphBuilder", "build_theme_graph", "DEFAULT_CONCURRENCY"]

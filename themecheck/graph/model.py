"""
Theme dependency graph model.

A ThemeGraph holds one ThemeModule per theme file, keyed by the file's
root-relative POSIX path. Edges are kept on both ends: ``a.dependencies``
and ``b.dependents`` always change together, through bind() only.
"""

from __future__ import annotations

import enum
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..fs import paths
from ..types import Position


class LiquidModuleKind(str, enum.Enum):
    TEMPLATE = "template"
    SECTION = "section"
    SNIPPET = "snippet"
    LAYOUT = "layout"
    BLOCK = "block"
    ASSET = "asset"


class ParseStatus(str, enum.Enum):
    OK = "ok"
    UNPARSABLE = "unparsable"


#: Top-level directory → module kind
_KIND_BY_DIR: Dict[str, LiquidModuleKind] = {
    "templates": LiquidModuleKind.TEMPLATE,
    "sections": LiquidModuleKind.SECTION,
    "snippets": LiquidModuleKind.SNIPPET,
    "layout": LiquidModuleKind.LAYOUT,
    "blocks": LiquidModuleKind.BLOCK,
    "assets": LiquidModuleKind.ASSET,
}

#: Extensions of files that are parsed for references
_SOURCE_SUFFIXES: Dict[LiquidModuleKind, tuple[str, ...]] = {
    LiquidModuleKind.TEMPLATE: (".liquid", ".json"),
    LiquidModuleKind.SECTION: (".liquid", ".json"),
    LiquidModuleKind.SNIPPET: (".liquid",),
    LiquidModuleKind.LAYOUT: (".liquid",),
    LiquidModuleKind.BLOCK: (".liquid",),
}

ENTRY_POINT_KINDS = frozenset({LiquidModuleKind.TEMPLATE, LiquidModuleKind.LAYOUT})


def module_kind(path: str) -> Optional[LiquidModuleKind]:
    """
    Kind of the module at root-relative *path* by directory convention,
    or None if the file is not a theme module.
    """
    path = paths.normalize(path)
    top, _, rest = path.partition("/")
    kind = _KIND_BY_DIR.get(top)
    if kind is None or not rest:
        return None
    if kind is LiquidModuleKind.ASSET:
        return kind
    # templates/customers/*.json is allowed; other kinds are flat directories
    if "/" in rest and kind is not LiquidModuleKind.TEMPLATE:
        return None
    if not rest.endswith(_SOURCE_SUFFIXES[kind]):
        return None
    return kind


def is_source_module(kind: LiquidModuleKind) -> bool:
    """True for kinds whose files are parsed for references (everything but assets)."""
    return kind in _SOURCE_SUFFIXES


@dataclass(eq=False)
class ThemeModule:
    """
    One node of the graph.

    ``dependencies``/``dependents`` map path → module in bind order.
    ``exists`` is False for targets referenced but missing on disk.
    """
    path: str
    kind: LiquidModuleKind
    dependencies: Dict[str, "ThemeModule"] = field(default_factory=dict)
    dependents: Dict[str, "ThemeModule"] = field(default_factory=dict)
    parse_status: ParseStatus = ParseStatus.OK
    exists: bool = True

    def __repr__(self) -> str:
        return f"ThemeModule({self.path!r}, {self.kind.value})"


@dataclass(frozen=True)
class UnresolvedReference:
    """A reference whose target is not a static string."""
    source: str
    position: Position
    tag: str


@dataclass(frozen=True)
class BrokenReference:
    """A static reference to a file that does not exist."""
    source: str
    target: str
    position: Position
    tag: str


@dataclass
class ThemeGraph:
    root: str
    modules: Dict[str, ThemeModule] = field(default_factory=dict)
    entry_points: List[ThemeModule] = field(default_factory=list)
    unresolved_references: List[UnresolvedReference] = field(default_factory=list)
    broken_references: List[BrokenReference] = field(default_factory=list)

    def get_or_create(self, path: str, kind: Optional[LiquidModuleKind] = None) -> ThemeModule:
        """
        Module at *path*, created and inserted if absent.

        Raises:
            ValueError: If the kind can be neither given nor inferred
        """
        path = paths.normalize(path)
        module = self.modules.get(path)
        if module is not None:
            return module
        kind = kind or module_kind(path)
        if kind is None:
            raise ValueError(f"Not a theme module path: {path!r}")
        module = ThemeModule(path=path, kind=kind)
        self.modules[path] = module
        return module

    def add_entry_point(self, module: ThemeModule) -> None:
        if module.kind not in ENTRY_POINT_KINDS:
            raise ValueError(f"{module.path} ({module.kind.value}) cannot be an entry point")
        if module not in self.entry_points:
            self.entry_points.append(module)


def bind(source: ThemeModule, target: ThemeModule) -> bool:
    """
    Add the edge source → target. Idempotent.

    Returns:
        True if the edge is new
    """
    if target.path in source.dependencies:
        return False
    source.dependencies[target.path] = target
    target.dependents[source.path] = source
    return True


# --- module factories ------------------------------------------------------

def template_module(graph: ThemeGraph, path: str) -> ThemeModule:
    """``templates/index.liquid`` / ``templates/product.json``"""
    return graph.get_or_create(path, LiquidModuleKind.TEMPLATE)


def section_module(graph: ThemeGraph, name: str, suffix: str = ".liquid") -> ThemeModule:
    """``section_module(graph, 'header')`` → ``sections/header.liquid``"""
    return graph.get_or_create(posixpath.join("sections", name + suffix), LiquidModuleKind.SECTION)


def snippet_module(graph: ThemeGraph, name: str) -> ThemeModule:
    return graph.get_or_create(posixpath.join("snippets", name + ".liquid"), LiquidModuleKind.SNIPPET)


def layout_module(graph: ThemeGraph, name: str) -> ThemeModule:
    return graph.get_or_create(posixpath.join("layout", name + ".liquid"), LiquidModuleKind.LAYOUT)


def block_module(graph: ThemeGraph, name: str) -> ThemeModule:
    return graph.get_or_create(posixpath.join("blocks", name + ".liquid"), LiquidModuleKind.BLOCK)


def asset_module(graph: ThemeGraph, name: str) -> ThemeModule:
    return graph.get_or_create(posixpath.join("assets", name), LiquidModuleKind.ASSET)


__all__ = [
    "LiquidModuleKind",
    "ParseStatus",
    "ThemeModule",
    "ThemeGraph",
    "UnresolvedReference",
    "BrokenReference",
    "ENTRY_POINT_KINDS",
    "bind",
    "module_kind",
    "is_source_module",
    "template_module",
    "section_module",
    "snippet_module",
    "layout_module",
    "block_module",
    "asset_module",
]

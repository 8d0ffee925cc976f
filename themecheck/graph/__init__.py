"""
Theme dependency graph: model, reference extraction, builder and serializer.
"""

from __future__ import annotations

from .builder import ThemeGraphBuilder, build_theme_graph
from .model import (
    BrokenReference,
    LiquidModuleKind,
    ParseStatus,
    ThemeGraph,
    ThemeModule,
    UnresolvedReference,
    asset_module,
    bind,
    block_module,
    layout_module,
    module_kind,
    section_module,
    snippet_module,
    template_module,
)
from .references import ModuleReference, extract_json_references, extract_references
from .serialize import SerializedEdge, SerializedGraph, SerializedNode, serialize_theme_graph

__all__ = [
    "ThemeGraph",
    "ThemeModule",
    "LiquidModuleKind",
    "ParseStatus",
    "UnresolvedReference",
    "BrokenReference",
    "ModuleReference",
    "bind",
    "module_kind",
    "template_module",
    "section_module",
    "snippet_module",
    "layout_module",
    "block_module",
    "asset_module",
    "extract_references",
    "extract_json_references",
    "ThemeGraphBuilder",
    "build_theme_graph",
    "serialize_theme_graph",
    "SerializedGraph",
    "SerializedNode",
    "SerializedEdge",
]

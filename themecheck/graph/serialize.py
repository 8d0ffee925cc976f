"""
Flat, transport-friendly form of a ThemeGraph.

Nodes come in insertion order of ``graph.modules`` (entry points first, then
discovery order). Edges come module by module in that same order, each
module's dependencies in bind order. For a graph produced by the builder
this is exactly the order in which bind() created the edges; nothing is
re-sorted.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict

from .model import LiquidModuleKind, ThemeGraph


class SerializedNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: LiquidModuleKind
    exists: bool = True


class SerializedEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str


class SerializedGraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: str
    nodes: List[SerializedNode]
    edges: List[SerializedEdge]


def serialize_theme_graph(graph: ThemeGraph) -> SerializedGraph:
    nodes = [
        SerializedNode(id=module.path, kind=module.kind, exists=module.exists)
        for module in graph.modules.values()
    ]
    edges = [
        SerializedEdge(source=module.path, target=target)
        for module in graph.modules.values()
        for target in module.dependencies
    ]
    return SerializedGraph(root=graph.root, nodes=nodes, edges=edges)


__all__ = ["SerializedGraph", "SerializedNode", "SerializedEdge", "serialize_theme_graph"]

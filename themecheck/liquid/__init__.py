"""
Liquid syntax: document lexer, markup parser and syntax tree nodes.
"""

from __future__ import annotations

from .nodes import (
    AssignMarkup,
    Comparison,
    ContentForMarkup,
    Document,
    LiquidBranch,
    LiquidFilter,
    LiquidLiteral,
    LiquidNode,
    LiquidRawTag,
    LiquidTag,
    LiquidVariable,
    LiquidVariableOutput,
    LogicalExpression,
    Markup,
    NamedArgument,
    NodeKind,
    Number,
    Range,
    RenderMarkup,
    RenderVariableExpression,
    String,
    TextNode,
    VariableLookup,
    iter_children,
    walk,
)
from .parser import LiquidParseError, parse_liquid

__all__ = [
    "parse_liquid",
    "LiquidParseError",
    "NodeKind",
    "LiquidNode",
    "Markup",
    "Document",
    "TextNode",
    "LiquidTag",
    "LiquidBranch",
    "LiquidRawTag",
    "LiquidVariableOutput",
    "LiquidVariable",
    "LiquidFilter",
    "NamedArgument",
    "String",
    "Number",
    "LiquidLiteral",
    "Range",
    "VariableLookup",
    "Comparison",
    "LogicalExpression",
    "RenderMarkup",
    "RenderVariableExpression",
    "ContentForMarkup",
    "AssignMarkup",
    "iter_children",
    "walk",
]

"""
Liquid syntax tree nodes.

Every node carries a NodeKind tag and a half-open Position into the raw
file text. The set of kinds is closed: checks register handlers by NodeKind
and the visitor walks children through the per-class ``child_fields``
declaration, so no reflection over arbitrary attributes is needed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator, List, Optional, Tuple, Union

from ..types import Position


class NodeKind(str, enum.Enum):
    """Closed set of node kinds handlers can subscribe to."""
    DOCUMENT = "Document"
    TEXT = "TextNode"
    LIQUID_TAG = "LiquidTag"
    LIQUID_BRANCH = "LiquidBranch"
    LIQUID_RAW_TAG = "LiquidRawTag"
    LIQUID_VARIABLE_OUTPUT = "LiquidVariableOutput"
    LIQUID_VARIABLE = "LiquidVariable"
    LIQUID_FILTER = "LiquidFilter"
    NAMED_ARGUMENT = "NamedArgument"
    STRING = "String"
    NUMBER = "Number"
    LIQUID_LITERAL = "LiquidLiteral"
    RANGE = "Range"
    VARIABLE_LOOKUP = "VariableLookup"
    COMPARISON = "Comparison"
    LOGICAL_EXPRESSION = "LogicalExpression"
    RENDER_MARKUP = "RenderMarkup"
    RENDER_VARIABLE_EXPRESSION = "RenderVariableExpression"
    CONTENT_FOR_MARKUP = "ContentForMarkup"
    ASSIGN_MARKUP = "AssignMarkup"

    @classmethod
    def parse(cls, value: Union[str, "NodeKind"]) -> "NodeKind":
        """Accepts a member, its value ("VariableLookup") or its name ("VARIABLE_LOOKUP")."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            try:
                return cls[value]
            except KeyError:
                raise ValueError(f"Unknown node kind: {value!r}") from None


@dataclass(frozen=True)
class LiquidNode:
    """Base class for all syntax tree nodes."""
    kind: ClassVar[NodeKind]
    #: Attribute names holding child nodes, in document order
    child_fields: ClassVar[Tuple[str, ...]] = ()

    position: Position


# --- expressions ---------------------------------------------------------

@dataclass(frozen=True)
class String(LiquidNode):
    kind = NodeKind.STRING
    value: str
    single_quote: bool = True


@dataclass(frozen=True)
class Number(LiquidNode):
    kind = NodeKind.NUMBER
    value: str


@dataclass(frozen=True)
class LiquidLiteral(LiquidNode):
    """true / false / nil / empty / blank"""
    kind = NodeKind.LIQUID_LITERAL
    keyword: str
    value: Any = None


@dataclass(frozen=True)
class Range(LiquidNode):
    kind = NodeKind.RANGE
    child_fields = ("start", "end")
    start: LiquidNode
    end: LiquidNode


@dataclass(frozen=True)
class VariableLookup(LiquidNode):
    """
    ``name.a['b'][c]``

    Dotted lookups are stored as String nodes; bracketed lookups keep the
    parsed expression. ``name`` is None for a lookup starting with brackets.
    """
    kind = NodeKind.VARIABLE_LOOKUP
    child_fields = ("lookups",)
    name: Optional[str]
    lookups: List[LiquidNode] = field(default_factory=list)


@dataclass(frozen=True)
class Comparison(LiquidNode):
    kind = NodeKind.COMPARISON
    child_fields = ("left", "right")
    comparator: str
    left: LiquidNode
    right: LiquidNode


@dataclass(frozen=True)
class LogicalExpression(LiquidNode):
    kind = NodeKind.LOGICAL_EXPRESSION
    child_fields = ("left", "right")
    relation: str  # "and" | "or"
    left: LiquidNode
    right: LiquidNode


@dataclass(frozen=True)
class NamedArgument(LiquidNode):
    kind = NodeKind.NAMED_ARGUMENT
    child_fields = ("value",)
    name: str
    value: LiquidNode


@dataclass(frozen=True)
class LiquidFilter(LiquidNode):
    kind = NodeKind.LIQUID_FILTER
    child_fields = ("args",)
    name: str
    args: List[LiquidNode] = field(default_factory=list)


@dataclass(frozen=True)
class LiquidVariable(LiquidNode):
    """An expression followed by zero or more filters."""
    kind = NodeKind.LIQUID_VARIABLE
    child_fields = ("expression", "filters")
    expression: LiquidNode
    filters: List[LiquidFilter] = field(default_factory=list)


# --- tag markup ----------------------------------------------------------

@dataclass(frozen=True)
class RenderVariableExpression(LiquidNode):
    """``for products`` / ``with product`` part of a render tag."""
    kind = NodeKind.RENDER_VARIABLE_EXPRESSION
    child_fields = ("name",)
    keyword: str
    name: LiquidNode


@dataclass(frozen=True)
class RenderMarkup(LiquidNode):
    kind = NodeKind.RENDER_MARKUP
    child_fields = ("snippet", "variable", "args")
    snippet: LiquidNode  # String or VariableLookup
    variable: Optional[RenderVariableExpression] = None
    alias: Optional[str] = None
    args: List[NamedArgument] = field(default_factory=list)


@dataclass(frozen=True)
class ContentForMarkup(LiquidNode):
    kind = NodeKind.CONTENT_FOR_MARKUP
    child_fields = ("content_for_type", "args")
    content_for_type: LiquidNode
    args: List[NamedArgument] = field(default_factory=list)


@dataclass(frozen=True)
class AssignMarkup(LiquidNode):
    kind = NodeKind.ASSIGN_MARKUP
    child_fields = ("value",)
    name: str
    value: LiquidVariable


# --- document structure --------------------------------------------------

#: Parsed tag markup: a node, a list of nodes (``when 'a', 'b'``) or raw text
Markup = Union[LiquidNode, List[LiquidNode], str]


@dataclass(frozen=True)
class TextNode(LiquidNode):
    kind = NodeKind.TEXT
    value: str


@dataclass(frozen=True)
class LiquidBranch(LiquidNode):
    """
    One branch of a branching tag (if/unless/case/for).

    ``name`` is None for the implicit first branch that holds the body
    between the opening tag and the first elsif/else/when.
    """
    kind = NodeKind.LIQUID_BRANCH
    child_fields = ("markup", "children")
    name: Optional[str]
    markup: Markup = ""
    children: List[LiquidNode] = field(default_factory=list)


@dataclass(frozen=True)
class LiquidTag(LiquidNode):
    """
    ``{% name markup %}`` with an optional body.

    For block tags ``children`` holds the body (LiquidBranch nodes for
    branching tags, the statements of a ``liquid`` tag); it is None for
    inline tags.
    """
    kind = NodeKind.LIQUID_TAG
    child_fields = ("markup", "children")
    name: str
    markup: Markup = ""
    children: Optional[List[LiquidNode]] = None
    block_start_position: Optional[Position] = None
    block_end_position: Optional[Position] = None


@dataclass(frozen=True)
class LiquidRawTag(LiquidNode):
    """Tags whose body is not Liquid: raw, comment, schema, javascript, stylesheet, doc."""
    kind = NodeKind.LIQUID_RAW_TAG
    name: str
    markup: str
    body: str
    body_position: Position


@dataclass(frozen=True)
class LiquidVariableOutput(LiquidNode):
    """``{{ markup }}``"""
    kind = NodeKind.LIQUID_VARIABLE_OUTPUT
    child_fields = ("markup",)
    markup: Union[LiquidVariable, str]


@dataclass(frozen=True)
class Document(LiquidNode):
    kind = NodeKind.DOCUMENT
    child_fields = ("children",)
    children: List[LiquidNode] = field(default_factory=list)


def iter_children(node: LiquidNode) -> Iterator[LiquidNode]:
    """Child nodes of *node* in document order. Raw string markup is skipped."""
    for name in node.child_fields:
        value = getattr(node, name)
        if isinstance(value, LiquidNode):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, LiquidNode):
                    yield item


def walk(node: LiquidNode) -> Iterator[LiquidNode]:
    """Pre-order iteration over *node* and its descendants (no recursion)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_children(current))))


__all__ = [
    "NodeKind",
    "LiquidNode",
    "Markup",
    "String",
    "Number",
    "LiquidLiteral",
    "Range",
    "VariableLookup",
    "Comparison",
    "LogicalExpression",
    "NamedArgument",
    "LiquidFilter",
    "LiquidVariable",
    "RenderVariableExpression",
    "RenderMarkup",
    "ContentForMarkup",
    "AssignMarkup",
    "TextNode",
    "LiquidBranch",
    "LiquidTag",
    "LiquidRawTag",
    "LiquidVariableOutput",
    "Document",
    "iter_children",
    "walk",
]

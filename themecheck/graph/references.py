"""
Cross-file reference extraction.

Finds the constructs through which one theme file pulls in another:

- ``{% render 'x' %}`` / ``{% include 'x' %}``  → snippets/x.liquid
- ``{% section 'x' %}``                          → sections/x.liquid
- ``{% sections 'x' %}``                         → sections/x.json
- ``{% layout 'x' %}``                           → layout/x.liquid (``layout none`` is no reference)
- ``{% content_for 'block', type: 'x' %}``       → blocks/x.liquid
- ``{{ 'x.css' | asset_url }}``                  → assets/x.css
- JSON templates and section groups: ``sections.*.type`` → sections/<type>.liquid

A reference whose argument is not a string literal is dynamic: it has no
target and is reported as unresolved by the graph builder.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from ..liquid.nodes import (
    ContentForMarkup,
    Document,
    LiquidNode,
    LiquidTag,
    LiquidVariable,
    NamedArgument,
    RenderMarkup,
    String,
    VariableLookup,
    walk,
)
from ..types import Position


@dataclass(frozen=True)
class ModuleReference:
    """
    One reference found in a file.

    ``target`` is the root-relative path of the referenced file, or None for
    a dynamic reference. ``position`` covers the argument naming the target.
    """
    tag: str
    target: Optional[str]
    position: Position

    @property
    def is_dynamic(self) -> bool:
        return self.target is None


def extract_references(document: Document) -> List[ModuleReference]:
    """All references of a Liquid document in document order."""
    refs: List[ModuleReference] = []
    for node in walk(document):
        ref = reference_from_node(node)
        if ref is not None:
            refs.append(ref)
    return refs


def reference_from_node(node: LiquidNode) -> Optional[ModuleReference]:
    """Reference made by *node* itself, if any."""
    if isinstance(node, LiquidTag):
        return _tag_reference(node)
    if isinstance(node, LiquidVariable):
        return _asset_reference(node)
    return None


def _tag_reference(tag: LiquidTag) -> Optional[ModuleReference]:
    name = tag.name
    markup = tag.markup

    if name in ("render", "include"):
        if isinstance(markup, RenderMarkup):
            return _static_or_dynamic(name, markup.snippet, "snippets/{}.liquid")
        return _unparsed(tag)

    if name in ("section", "sections"):
        pattern = "sections/{}.liquid" if name == "section" else "sections/{}.json"
        if isinstance(markup, LiquidNode):
            return _static_or_dynamic(name, markup, pattern)
        return _unparsed(tag)

    if name == "layout":
        if isinstance(markup, VariableLookup) and markup.name == "none" and not markup.lookups:
            return None
        if isinstance(markup, LiquidNode):
            return _static_or_dynamic(name, markup, "layout/{}.liquid")
        return _unparsed(tag)

    if name == "content_for":
        if not isinstance(markup, ContentForMarkup):
            return None
        kind = markup.content_for_type
        if not (isinstance(kind, String) and kind.value == "block"):
            return None
        type_arg = _named_argument(markup.args, "type")
        if type_arg is None:
            return ModuleReference(tag=name, target=None, position=markup.position)
        return _static_or_dynamic(name, type_arg.value, "blocks/{}.liquid")

    return None


def _asset_reference(variable: LiquidVariable) -> Optional[ModuleReference]:
    if not variable.filters or variable.filters[0].name != "asset_url":
        return None
    return _static_or_dynamic("asset_url", variable.expression, "assets/{}")


def _static_or_dynamic(tag: str, argument: LiquidNode, pattern: str) -> ModuleReference:
    if isinstance(argument, String) and argument.value.strip():
        return ModuleReference(tag=tag, target=pattern.format(argument.value), position=argument.position)
    return ModuleReference(tag=tag, target=None, position=argument.position)


def _unparsed(tag: LiquidTag) -> Optional[ModuleReference]:
    # Markup that did not parse can not name a static target
    if not tag.markup:
        return None
    return ModuleReference(tag=tag.name, target=None, position=tag.position)


def _named_argument(args: List[NamedArgument], name: str) -> Optional[NamedArgument]:
    for arg in args:
        if arg.name == name:
            return arg
    return None


# --- JSON templates / section groups ---------------------------------------

def extract_json_references(text: str) -> List[ModuleReference]:
    """
    Section references of a JSON template or section group.

    Positions cover the whole file: JSON offsets of individual values are
    not tracked.

    Raises:
        ValueError: If the text is not a JSON object
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("JSON template must be an object")
    whole = Position(0, len(text))
    return [
        ModuleReference(tag="json", target=f"sections/{section_type}.liquid", position=whole)
        for section_type in _section_types(data.get("sections"))
    ]


def _section_types(sections: Any) -> Iterator[str]:
    if not isinstance(sections, dict):
        return
    for section in sections.values():
        if isinstance(section, dict) and isinstance(section.get("type"), str) and section["type"]:
            yield section["type"]


__all__ = [
    "ModuleReference",
    "extract_references",
    "extract_json_references",
    "reference_from_node",
]

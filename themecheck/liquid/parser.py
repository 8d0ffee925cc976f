"""
Liquid document parser.

Turns the flat token sequence of the document lexer into a syntax tree:
block tags get their bodies as children, branching tags (if/unless/case/for/tablerow)
get one LiquidBranch per branch, and tag markup is parsed into expression
nodes where a grammar for the tag is known.

The statements of a ``{% liquid %}`` tag are parsed like delimited tags
and become its children.

Markup that does not parse is kept as a raw string on the tag (the tag
itself is still valid structure). Structural problems (unclosed blocks,
stray end tags, unterminated delimiters) raise LiquidParseError.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from .lexer import LexerError, LiquidLexer, Token, TokenType, line_column, split_liquid_markup
from .markup_lexer import MarkupLexerError
from .markup_parser import MarkupParseError, MarkupParser
from .nodes import (
    Document,
    LiquidBranch,
    LiquidNode,
    LiquidRawTag,
    LiquidTag,
    LiquidVariableOutput,
    Markup,
    TextNode,
)
from ..types import Position

logger = logging.getLogger(__name__)

#: Tags with a body closed by end<name>
BLOCK_TAGS: FrozenSet[str] = frozenset({
    "if", "unless", "case", "for", "tablerow", "capture", "form", "paginate", "style",
})

#: Branch tags allowed inside each branching block
BRANCHES: Dict[str, FrozenSet[str]] = {
    "if": frozenset({"elsif", "else"}),
    "unless": frozenset({"elsif", "else"}),
    "case": frozenset({"when", "else"}),
    "for": frozenset({"else"}),
    "tablerow": frozenset({"else"}),
}

_ALL_BRANCH_NAMES = frozenset().union(*BRANCHES.values())

_MarkupRule = Callable[[MarkupParser], Markup]

#: How the markup of each known tag is parsed
_MARKUP_RULES: Dict[str, _MarkupRule] = {
    "if": MarkupParser.parse_condition,
    "elsif": MarkupParser.parse_condition,
    "unless": MarkupParser.parse_condition,
    "case": MarkupParser.parse_expression,
    "when": MarkupParser.parse_when,
    "render": MarkupParser.parse_render,
    "include": MarkupParser.parse_render,
    "section": MarkupParser.parse_expression,
    "sections": MarkupParser.parse_expression,
    "layout": MarkupParser.parse_expression,
    "content_for": MarkupParser.parse_content_for,
    "assign": MarkupParser.parse_assign,
    "echo": MarkupParser.parse_variable,
}


class LiquidParseError(Exception):
    """Structural syntax error. ``position`` is an absolute offset into the source."""

    def __init__(self, message: str, position: int, text: str = ""):
        line, column = line_column(text, position)
        super().__init__(f"{message} at {line}:{column}")
        self.message = message
        self.position = position
        self.line = line
        self.column = column


class LiquidParser:
    """
    Recursive parser for Liquid documents.

    Processes the token sequence and builds the tree, handling nested
    blocks and branches.
    """

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.position = 0

    def parse(self) -> Document:
        """
        Parse the whole token sequence.

        Raises:
            LiquidParseError: On a structural syntax error
        """
        children, _ = self._parse_body(frozenset())
        return Document(position=Position(0, len(self.text)), children=children)

    def _parse_body(self, stop_names: FrozenSet[str]) -> Tuple[List[LiquidNode], Optional[Token]]:
        """
        Parse nodes until a tag named in *stop_names* (consumed and returned)
        or the end of input (returns None as the stopper).
        """
        nodes: List[LiquidNode] = []
        while not self._is_at_end():
            token = self._advance()
            if token.type is TokenType.TAG and token.name in stop_names:
                return nodes, token
            nodes.append(self._parse_token(token))
        return nodes, None

    def _parse_token(self, token: Token) -> LiquidNode:
        if token.type is TokenType.TEXT:
            return TextNode(
                position=Position(token.start, token.end),
                value=self.text[token.start:token.end],
            )
        if token.type is TokenType.OUTPUT:
            return LiquidVariableOutput(
                position=Position(token.start, token.end),
                markup=self._parse_markup("echo", token),
            )
        if token.type is TokenType.RAW_TAG:
            return LiquidRawTag(
                position=Position(token.start, token.end),
                name=token.name,
                markup=token.markup,
                body=self.text[token.body_start:token.body_end],
                body_position=Position(token.body_start, token.body_end),
            )
        return self._parse_tag(token)

    def _parse_tag(self, token: Token) -> LiquidNode:
        name = token.name
        if name.startswith("end") or name in _ALL_BRANCH_NAMES:
            raise self._error(f"Unexpected tag '{name}'", token)

        if name == "liquid":
            return self._parse_liquid_tag(token)

        markup = self._parse_markup(name, token)
        if name not in BLOCK_TAGS:
            return LiquidTag(
                position=Position(token.start, token.end),
                name=name,
                markup=markup,
                block_start_position=Position(token.start, token.end),
            )

        if name in BRANCHES:
            children, end_token = self._parse_branches(token)
        else:
            children, end_token = self._parse_body(frozenset({f"end{name}"}))
            if end_token is None:
                raise self._error(f"Unclosed tag '{name}', expected {{% end{name} %}}", token)

        return LiquidTag(
            position=Position(token.start, end_token.end),
            name=name,
            markup=markup,
            children=children,
            block_start_position=Position(token.start, token.end),
            block_end_position=Position(end_token.start, end_token.end),
        )

    def _parse_branches(self, token: Token) -> Tuple[List[LiquidNode], Token]:
        """
        Parse the body of a branching tag into LiquidBranch nodes.

        The first branch is unnamed and holds the body up to the first
        branch tag; each branch ends where the next one starts.
        """
        end_name = f"end{token.name}"
        stop_names = BRANCHES[token.name] | {end_name}
        branches: List[LiquidNode] = []

        branch_name: Optional[str] = None
        branch_markup: Markup = ""
        branch_start = token.end
        while True:
            body, stopper = self._parse_body(stop_names)
            if stopper is None:
                raise self._error(f"Unclosed tag '{token.name}', expected {{% {end_name} %}}", token)
            branches.append(LiquidBranch(
                position=Position(branch_start, stopper.start),
                name=branch_name,
                markup=branch_markup,
                children=body,
            ))
            if stopper.name == end_name:
                return branches, stopper
            branch_name = stopper.name
            branch_markup = self._parse_markup(stopper.name, stopper)
            branch_start = stopper.start

    def _parse_liquid_tag(self, token: Token) -> LiquidTag:
        """
        ``{% liquid %}``: the markup stays raw, each statement line becomes
        a child parsed with the same tag rules as a delimited tag.
        """
        try:
            statements = split_liquid_markup(token.markup, token.markup_start, self.text)
        except LexerError as e:
            raise LiquidParseError(e.message, e.position, self.text) from e

        inner = LiquidParser(self.text, statements)
        children, _ = inner._parse_body(frozenset())
        return LiquidTag(
            position=Position(token.start, token.end),
            name="liquid",
            markup=token.markup,
            children=children,
            block_start_position=Position(token.start, token.end),
        )

    def _parse_markup(self, name: str, token: Token) -> Markup:
        rule = _MARKUP_RULES.get(name)
        if rule is None or not token.markup:
            return token.markup
        try:
            return rule(MarkupParser(token.markup, token.markup_start))
        except (MarkupParseError, MarkupLexerError) as e:
            # Keep the tag, lose the structure of its markup
            logger.debug(f"Markup of '{name}' kept as raw text at {token.markup_start}: {e}")
            return token.markup

    # Helper methods

    def _advance(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def _is_at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def _error(self, message: str, token: Token) -> LiquidParseError:
        return LiquidParseError(message, token.start, self.text)


def parse_liquid(text: str) -> Document:
    """
    Parse Liquid source text into a Document.

    Args:
        text: Source text

    Returns:
        Root Document node

    Raises:
        LiquidParseError: On a lexical or structural syntax error
    """
    try:
        tokens = LiquidLexer(text).tokenize()
    except LexerError as e:
        raise LiquidParseError(e.message, e.position, text) from e
    return LiquidParser(text, tokens).parse()


__all__ = ["LiquidParser", "LiquidParseError", "parse_liquid", "BLOCK_TAGS", "BRANCHES"]

"""
Recursive descent parser for Liquid markup.

Builds expression nodes from the markup of a tag or an output, with
positions shifted to absolute file offsets.

Grammar:
condition      → comparison (("and" | "or") condition)?
comparison     → expression ((COMPARATOR | "contains") expression)?
expression     → STRING | NUMBER | literal | range | lookup
range          → "(" expression ".." expression ")"
lookup         → (IDENTIFIER | "[" expression "]") ("." IDENTIFIER | "[" expression "]")*
variable       → expression ("|" filter)*
filter         → IDENTIFIER (":" argument ("," argument)*)?
argument       → IDENTIFIER ":" expression | expression

render         → (STRING | lookup) (("for" | "with") expression)? ("as" IDENTIFIER)? (","? argument)*
content_for    → STRING ("," argument)*
assign         → IDENTIFIER "=" variable
when           → expression (("," | "or") expression)*

``and``/``or`` are right-associative: Liquid evaluates them right to left.
"""

from __future__ import annotations

from typing import List, Optional

from .markup_lexer import MarkupLexer, Token
from .nodes import (
    AssignMarkup,
    Comparison,
    ContentForMarkup,
    LiquidFilter,
    LiquidLiteral,
    LiquidNode,
    LiquidVariable,
    LogicalExpression,
    NamedArgument,
    Number,
    Range,
    RenderMarkup,
    RenderVariableExpression,
    String,
    VariableLookup,
)
from ..types import Position

_LITERALS = {
    "true": True,
    "false": False,
    "nil": None,
    "null": None,
    "empty": "",
    "blank": "",
}


class MarkupParseError(ValueError):
    """Markup syntax error. ``position`` is an absolute file offset."""

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"Parse error at position {position}: {message}")


class MarkupParser:
    """
    Parser for one markup string.

    Args:
        text: Markup string
        offset: Absolute file offset of the first markup character
    """

    def __init__(self, text: str, offset: int = 0):
        self.text = text
        self.offset = offset
        self._tokens: List[Token] = MarkupLexer().tokenize(text)
        self._position = 0

    # --- entry points ----------------------------------------------------

    def parse_condition(self) -> LiquidNode:
        node = self._parse_condition()
        self._expect_end()
        return node

    def parse_expression(self) -> LiquidNode:
        node = self._parse_expression()
        self._expect_end()
        return node

    def parse_variable(self) -> LiquidVariable:
        node = self._parse_variable()
        self._expect_end()
        return node

    def parse_when(self) -> List[LiquidNode]:
        values = [self._parse_expression()]
        while self._match_symbol(",") or self._match_word("or"):
            values.append(self._parse_expression())
        self._expect_end()
        return values

    def parse_render(self) -> RenderMarkup:
        start = self._current_token()
        if start.type == 'STRING':
            snippet = self._parse_string()
        else:
            snippet = self._parse_lookup()

        variable: Optional[RenderVariableExpression] = None
        keyword = self._current_token()
        if keyword.type == 'IDENTIFIER' and keyword.value in ("for", "with"):
            self._advance()
            name = self._parse_expression()
            variable = RenderVariableExpression(
                position=self._span(keyword.position, name.position.end - self.offset),
                keyword=keyword.value,
                name=name,
            )

        alias: Optional[str] = None
        if self._match_word("as"):
            alias = self._consume('IDENTIFIER', "Expected alias name after 'as'").value

        args = self._parse_named_arguments(leading_comma_optional=True)
        self._expect_end()
        return RenderMarkup(
            position=self._span(start.position, self._last_end()),
            snippet=snippet,
            variable=variable,
            alias=alias,
            args=args,
        )

    def parse_content_for(self) -> ContentForMarkup:
        start = self._current_token()
        content_type = self._parse_string()
        args: List[NamedArgument] = []
        if self._match_symbol(","):
            args = self._parse_named_arguments(leading_comma_optional=True)
        self._expect_end()
        return ContentForMarkup(
            position=self._span(start.position, self._last_end()),
            content_for_type=content_type,
            args=args,
        )

    def parse_assign(self) -> AssignMarkup:
        start = self._current_token()
        name = self._consume('IDENTIFIER', "Expected variable name").value
        if not self._match_symbol("="):
            raise self._error("Expected '=' in assign")
        value = self._parse_variable()
        self._expect_end()
        return AssignMarkup(
            position=self._span(start.position, value.position.end - self.offset),
            name=name,
            value=value,
        )

    # --- grammar ---------------------------------------------------------

    def _parse_condition(self) -> LiquidNode:
        left = self._parse_comparison()
        relation = self._current_token()
        if relation.type == 'IDENTIFIER' and relation.value in ("and", "or"):
            self._advance()
            right = self._parse_condition()  # Right associativity
            return LogicalExpression(
                position=Position(left.position.start, right.position.end),
                relation=relation.value,
                left=left,
                right=right,
            )
        return left

    def _parse_comparison(self) -> LiquidNode:
        left = self._parse_expression()
        current = self._current_token()
        if current.type == 'COMPARATOR' or (current.type == 'IDENTIFIER' and current.value == "contains"):
            self._advance()
            right = self._parse_expression()
            return Comparison(
                position=Position(left.position.start, right.position.end),
                comparator=current.value,
                left=left,
                right=right,
            )
        return left

    def _parse_expression(self) -> LiquidNode:
        current = self._current_token()
        if current.type == 'STRING':
            return self._parse_string()
        if current.type == 'NUMBER':
            self._advance()
            return Number(position=self._span(current.position, current.end), value=current.value)
        if current.type == 'SYMBOL' and current.value == "(":
            return self._parse_range()
        if current.type == 'IDENTIFIER' and current.value in _LITERALS and not self._lookup_follows():
            self._advance()
            return LiquidLiteral(
                position=self._span(current.position, current.end),
                keyword=current.value,
                value=_LITERALS[current.value],
            )
        if current.type == 'IDENTIFIER' or (current.type == 'SYMBOL' and current.value == "["):
            return self._parse_lookup()
        raise self._error(f"Unexpected token '{current.value}'" if current.value else "Unexpected end of markup")

    def _parse_string(self) -> String:
        token = self._consume('STRING', "Expected string")
        return String(
            position=self._span(token.position, token.end),
            value=token.value[1:-1],
            single_quote=token.value.startswith("'"),
        )

    def _parse_range(self) -> Range:
        open_paren = self._current_token()
        self._advance()
        start = self._parse_expression()
        if not self._match_symbol(".."):
            raise self._error("Expected '..' in range")
        end = self._parse_expression()
        close = self._current_token()
        if not self._match_symbol(")"):
            raise self._error("Expected ')' to close range")
        return Range(position=self._span(open_paren.position, close.end), start=start, end=end)

    def _parse_lookup(self) -> VariableLookup:
        first = self._current_token()
        name: Optional[str] = None
        lookups: List[LiquidNode] = []
        end = first.end

        if first.type == 'IDENTIFIER':
            self._advance()
            name = first.value
        elif not (first.type == 'SYMBOL' and first.value == "["):
            raise self._error("Expected variable name")

        while True:
            current = self._current_token()
            if current.type == 'SYMBOL' and current.value == ".":
                self._advance()
                prop = self._consume('IDENTIFIER', "Expected property name after '.'")
                lookups.append(String(position=self._span(prop.position, prop.end), value=prop.value))
                end = prop.end
            elif current.type == 'SYMBOL' and current.value == "[":
                self._advance()
                lookups.append(self._parse_expression())
                close = self._current_token()
                if not self._match_symbol("]"):
                    raise self._error("Expected ']'")
                end = close.end
            else:
                break

        return VariableLookup(position=self._span(first.position, end), name=name, lookups=lookups)

    def _parse_variable(self) -> LiquidVariable:
        expression = self._parse_expression()
        filters: List[LiquidFilter] = []
        while self._match_symbol("|"):
            filters.append(self._parse_filter())
        end = filters[-1].position.end if filters else expression.position.end
        return LiquidVariable(
            position=Position(expression.position.start, end),
            expression=expression,
            filters=filters,
        )

    def _parse_filter(self) -> LiquidFilter:
        name = self._consume('IDENTIFIER', "Expected filter name after '|'")
        args: List[LiquidNode] = []
        if self._match_symbol(":"):
            args.append(self._parse_argument())
            while self._match_symbol(","):
                args.append(self._parse_argument())
        return LiquidFilter(
            position=self._span(name.position, self._last_end()),
            name=name.value,
            args=args,
        )

    def _parse_argument(self) -> LiquidNode:
        current = self._current_token()
        following = self._peek(1)
        if current.type == 'IDENTIFIER' and following.type == 'SYMBOL' and following.value == ":":
            self._advance()
            self._advance()
            value = self._parse_expression()
            return NamedArgument(
                position=self._span(current.position, value.position.end - self.offset),
                name=current.value,
                value=value,
            )
        return self._parse_expression()

    def _parse_named_arguments(self, leading_comma_optional: bool) -> List[NamedArgument]:
        args: List[NamedArgument] = []
        while not self._is_at_end():
            if not self._match_symbol(",") and not leading_comma_optional:
                raise self._error("Expected ','")
            argument = self._parse_argument()
            if not isinstance(argument, NamedArgument):
                raise MarkupParseError("Expected named argument", argument.position.start)
            args.append(argument)
        return args

    # --- helpers ---------------------------------------------------------

    def _span(self, start: int, end: int) -> Position:
        """Absolute position from markup-relative offsets."""
        return Position(self.offset + start, self.offset + end)

    def _current_token(self) -> Token:
        return self._tokens[self._position]

    def _peek(self, distance: int) -> Token:
        index = min(self._position + distance, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._position]
        if not self._is_at_end():
            self._position += 1
        return token

    def _last_end(self) -> int:
        return self._tokens[self._position - 1].end if self._position else 0

    def _is_at_end(self) -> bool:
        return self._current_token().type == 'EOF'

    def _lookup_follows(self) -> bool:
        following = self._peek(1)
        return following.type == 'SYMBOL' and following.value in (".", "[")

    def _consume(self, token_type: str, message: str) -> Token:
        current = self._current_token()
        if current.type != token_type:
            raise self._error(message)
        return self._advance()

    def _match_symbol(self, symbol: str) -> bool:
        current = self._current_token()
        if current.type == 'SYMBOL' and current.value == symbol:
            self._advance()
            return True
        return False

    def _match_word(self, word: str) -> bool:
        current = self._current_token()
        if current.type == 'IDENTIFIER' and current.value == word:
            self._advance()
            return True
        return False

    def _expect_end(self) -> None:
        if not self._is_at_end():
            current = self._current_token()
            raise self._error(f"Unexpected token '{current.value}'")

    def _error(self, message: str) -> MarkupParseError:
        return MarkupParseError(message, self.offset + self._current_token().position)


__all__ = ["MarkupParser", "MarkupParseError"]

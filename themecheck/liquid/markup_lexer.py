"""
Lexer for Liquid tag markup and output expressions.

Splits the markup of ``{% ... %}`` / ``{{ ... }}`` into meaningful tokens:
- Strings ('...' or "...")
- Numbers (integers and floats, optionally negative)
- Comparators (==, !=, <>, <=, >=, <, >)
- Symbols (parentheses, brackets, dot, range, comma, colon, pipe, =)
- Identifiers (variable names, keywords, filter names)
- Whitespace (ignored)

Token positions are relative to the markup string; the parser shifts them
to absolute file offsets.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List


@dataclass
class Token:
    """
    Markup token.

    Attributes:
        type: Token type (STRING, NUMBER, COMPARATOR, SYMBOL, IDENTIFIER, EOF)
        value: Token text (for STRING, the text including quotes)
        position: Offset in the markup string
    """
    type: str
    value: str
    position: int

    @property
    def end(self) -> int:
        return self.position + len(self.value)

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


class MarkupLexerError(ValueError):
    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


class MarkupLexer:
    """
    Lexer splitting tag markup into tokens.

    Supported tokens:
    - STRING, NUMBER, COMPARATOR, SYMBOL, IDENTIFIER
    - EOF: end of markup
    """

    # Token specification: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        # Whitespace, including newlines inside multi-line tags (ignored)
        (r'\s+', 'WHITESPACE', True),

        (r"'[^']*'", 'STRING', False),
        (r'"[^"]*"', 'STRING', False),

        # Range operator must win over number and dot
        (r'\.\.', 'SYMBOL', False),
        (r'-?\d+(?:\.\d+)?(?!\w)', 'NUMBER', False),

        (r'==|!=|<>|<=|>=|<|>', 'COMPARATOR', False),
        (r'[()\[\].,:|=]', 'SYMBOL', False),

        # Identifiers may contain dashes and end with '?'
        (r'[A-Za-z_][\w-]*\??', 'IDENTIFIER', False),

        # Unknown character (error)
        (r'.', 'UNKNOWN', False),
    ]

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Split markup into tokens.

        Args:
            text: Markup string

        Returns:
            List of tokens, EOF included

        Raises:
            MarkupLexerError: On an unknown character or an unterminated string
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue
                value = match.group(0)
                if not ignore:
                    if token_type == 'UNKNOWN':
                        if value in ("'", '"'):
                            raise MarkupLexerError("Unterminated string", position)
                        raise MarkupLexerError(f"Unexpected character '{value}'", position)
                    tokens.append(Token(type=token_type, value=value, position=position))
                position = match.end()
                break

        tokens.append(Token(type='EOF', value='', position=position))
        return tokens


__all__ = ["Token", "MarkupLexer", "MarkupLexerError"]

"""
Document lexer for Liquid templates.

Splits raw file text into a flat sequence of tokens:
- plain text between Liquid constructs
- tags ``{% name markup %}``
- outputs ``{{ markup }}``
- raw tags: tags whose body is not Liquid (``raw``, ``comment``, ``schema``...)
  are consumed together with their body and end tag

Whitespace-control dashes (``{%-``, ``-%}``, ``{{-``, ``-}}``) are accepted.
All offsets are absolute character offsets into the source text.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import List

#: Tags whose body is kept verbatim
RAW_TAGS = frozenset({"raw", "comment", "schema", "javascript", "stylesheet", "doc"})

_TAG_NAME = re.compile(r'\s*(#|[A-Za-z_]\w*)')


class TokenType(enum.Enum):
    TEXT = "TEXT"
    TAG = "TAG"
    OUTPUT = "OUTPUT"
    RAW_TAG = "RAW_TAG"


@dataclass(frozen=True)
class Token:
    """
    Document token with position information.

    ``markup_start`` is the absolute offset of the first markup character;
    for RAW_TAG tokens ``body_start``/``body_end`` delimit the verbatim body.
    """
    type: TokenType
    start: int
    end: int
    name: str = ""
    markup: str = ""
    markup_start: int = 0
    body_start: int = 0
    body_end: int = 0

    def __repr__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"Token({self.type.name}{label}, [{self.start}, {self.end}))"


class LexerError(Exception):
    """Lexical analysis error."""

    def __init__(self, message: str, position: int, text: str = ""):
        line, column = line_column(text, position)
        super().__init__(f"{message} at {line}:{column}")
        self.message = message
        self.position = position
        self.line = line
        self.column = column


def line_column(text: str, position: int) -> tuple[int, int]:
    """1-based line and column of *position* in *text*."""
    line = text.count("\n", 0, position) + 1
    column = position - (text.rfind("\n", 0, position) + 1) + 1
    return line, column


class LiquidLexer:
    """
    Liquid document lexer.

    Text is read up to the next ``{%`` or ``{{``; a tag or output runs to
    its closing delimiter.
    """

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.length = len(text)

    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole source text.

        Raises:
            LexerError: On an unterminated tag, output or raw tag
        """
        tokens: List[Token] = []
        while self.position < self.length:
            tokens.append(self.next_token())
        return tokens

    def next_token(self) -> Token:
        start = self.position
        if self.text.startswith("{%", start):
            return self._read_tag()
        if self.text.startswith("{{", start):
            return self._read_output()

        text_end = self._find_next_special_sequence()
        self.position = text_end
        return Token(TokenType.TEXT, start, text_end)

    def _find_next_special_sequence(self) -> int:
        """Position of the next ``{%`` or ``{{`` or the end of text."""
        candidates = [
            pos for pos in (self.text.find("{%", self.position), self.text.find("{{", self.position))
            if pos >= 0
        ]
        return min(candidates) if candidates else self.length

    def _read_tag(self) -> Token:
        start = self.position
        close = self.text.find("%}", start + 2)
        if close < 0:
            raise LexerError("Unterminated tag, expected '%}'", start, self.text)
        end = close + 2

        inner_start = start + 2
        if self.text.startswith("-", inner_start):
            inner_start += 1
        inner_end = close
        if inner_end > inner_start and self.text[inner_end - 1] == "-":
            inner_end -= 1

        match = _TAG_NAME.match(self.text, inner_start, inner_end)
        if not match:
            raise LexerError("Expected tag name", inner_start, self.text)
        name = match.group(1)

        markup_start = match.end()
        markup = self.text[markup_start:inner_end]
        stripped = markup.lstrip()
        markup_start += len(markup) - len(stripped)
        markup = stripped.rstrip()

        self.position = end
        if name in RAW_TAGS:
            return self._read_raw_body(name, start, end, markup, markup_start)
        return Token(TokenType.TAG, start, end, name=name, markup=markup, markup_start=markup_start)

    def _read_raw_body(self, name: str, start: int, open_end: int, markup: str, markup_start: int) -> Token:
        end_tag = re.compile(r'\{%-?\s*end' + name + r'\s*-?%\}')
        match = end_tag.search(self.text, open_end)
        if not match:
            raise LexerError(f"Unclosed raw tag '{name}', expected {{% end{name} %}}", start, self.text)
        self.position = match.end()
        return Token(
            TokenType.RAW_TAG,
            start,
            match.end(),
            name=name,
            markup=markup,
            markup_start=markup_start,
            body_start=open_end,
            body_end=match.start(),
        )

    def _read_output(self) -> Token:
        start = self.position
        close = self.text.find("}}", start + 2)
        if close < 0:
            raise LexerError("Unterminated output, expected '}}'", start, self.text)
        end = close + 2

        inner_start = start + 2
        if self.text.startswith("-", inner_start):
            inner_start += 1
        inner_end = close
        if inner_end > inner_start and self.text[inner_end - 1] == "-":
            inner_end -= 1

        markup = self.text[inner_start:inner_end]
        stripped = markup.lstrip()
        markup_start = inner_start + len(markup) - len(stripped)

        self.position = end
        return Token(TokenType.OUTPUT, start, end, markup=stripped.rstrip(), markup_start=markup_start)


def split_liquid_markup(markup: str, markup_start: int, text: str = "") -> List[Token]:
    """
    Split the markup of a ``{% liquid %}`` tag into one TAG token per statement.

    Each non-blank line is a tag without delimiters; ``#`` lines are
    comments and ``comment``/``raw``/``doc`` blocks are skipped up to their
    end tag. Offsets stay absolute.

    Raises:
        LexerError: If a line does not start with a tag name, or a skipped block is not closed
    """
    tokens: List[Token] = []
    skipping = None
    skip_start = 0
    for line in re.finditer(r'[^\n]+', markup):
        statement = line.group().strip()
        if not statement:
            continue
        start = markup_start + line.start() + len(line.group()) - len(line.group().lstrip())
        end = start + len(statement)

        match = _TAG_NAME.match(statement)
        if not match:
            raise LexerError("Expected tag name", start, text)
        name = match.group(1)

        if skipping is not None:
            if name == f"end{skipping}":
                skipping = None
            continue
        if name == "#":
            continue
        if name in RAW_TAGS:
            skipping, skip_start = name, start
            continue

        body = statement[match.end():]
        stripped = body.lstrip()
        tokens.append(Token(
            TokenType.TAG,
            start,
            end,
            name=name,
            markup=stripped,
            markup_start=start + match.end() + len(body) - len(stripped),
        ))

    if skipping is not None:
        raise LexerError(f"Unclosed tag '{skipping}', expected end{skipping}", skip_start, text)
    return tokens


def tokenize_liquid(text: str) -> List[Token]:
    """
    Convenience function for tokenizing a document.

    Args:
        text: Source text

    Returns:
        List of tokens

    Raises:
        LexerError: On a lexical error
    """
    return LiquidLexer(text).tokenize()


__all__ = [
    "TokenType",
    "Token",
    "LexerError",
    "LiquidLexer",
    "RAW_TAGS",
    "line_column",
    "split_liquid_markup",
    "tokenize_liquid",
]

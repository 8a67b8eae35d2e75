"""Tokenizer for BibTeX source text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..exceptions import UnexpectedCharacterError, UnexpectedEndOfInputError

DEFAULT_MAX_DEPTH = 64

WHITESPACE = " \t\n\r\f\v"
IDENTIFIER_PUNCTUATION = "-:_"


class TokenKind(Enum):
    """Kinds of tokens produced by :func:`tokenize`."""

    AT = "@"
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    EQUALS = "="
    HASH = "#"
    QUOTE = '"'
    IDENT = "identifier"
    TEXT = "text"
    CHAR = "character"
    EOF = "end of input"


_PUNCTUATION: dict[str, TokenKind] = {
    "@": TokenKind.AT,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    "=": TokenKind.EQUALS,
    "#": TokenKind.HASH,
    '"': TokenKind.QUOTE,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single token with its 1-based source position."""

    kind: TokenKind
    text: str
    line: int
    col: int


def is_identifier_char(char: str) -> bool:
    """Return ``True`` for ASCII alphanumerics and ``-``, ``:``, ``_``."""
    return char.isascii() and (char.isalnum() or char in IDENTIFIER_PUNCTUATION)


class Lexer:
    """Single-use scanner over one source string.

    Field values are lexed in a separate mode: right after an ``=`` token a
    braced or quoted value is emitted as opening delimiter, one ``TEXT`` token
    holding the verbatim content, and closing delimiter. Comments are not
    recognised inside values.
    """

    def __init__(self, source: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._source = source
        self._max_depth = max_depth
        self._pos = 0
        self._line = 1
        self._col = 1

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []

        while True:
            self._skip_trivia()
            char = self._peek()
            line, col = self._line, self._col

            if char is None:
                tokens.append(Token(TokenKind.EOF, "", line, col))
                return tokens

            if is_identifier_char(char):
                tokens.append(Token(TokenKind.IDENT, self._read_identifier(), line, col))
                continue

            kind = _PUNCTUATION.get(char, TokenKind.CHAR)
            self._advance()
            tokens.append(Token(kind, char, line, col))

            if kind is TokenKind.EQUALS:
                tokens.extend(self._read_value())

    def _peek(self) -> str | None:
        if self._pos < len(self._source):
            return self._source[self._pos]
        return None

    def _advance(self) -> None:
        if self._source[self._pos] == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        self._pos += 1

    def _skip_trivia(self) -> None:
        while (char := self._peek()) is not None:
            if char in WHITESPACE:
                self._advance()
            elif char == "%" and not self._escaped():
                while (char := self._peek()) is not None and char != "\n":
                    self._advance()
            else:
                return

    def _escaped(self) -> bool:
        return self._pos > 0 and self._source[self._pos - 1] == "\\"

    def _read_identifier(self) -> str:
        start = self._pos
        while (char := self._peek()) is not None and is_identifier_char(char):
            self._advance()
        return self._source[start : self._pos]

    def _read_value(self) -> list[Token]:
        self._skip_trivia()
        char = self._peek()
        if char == "{":
            return self._read_braced()
        if char == '"':
            return self._read_quoted()
        # Numeric literals and errors are left to the parser
        return []

    def _read_braced(self) -> list[Token]:
        opening = Token(TokenKind.LBRACE, "{", self._line, self._col)
        self._advance()
        text_line, text_col = self._line, self._col
        start = self._pos
        depth = 1

        while True:
            char = self._peek()
            if char is None:
                raise UnexpectedEndOfInputError(
                    line=opening.line, col=opening.col, detail="braced value is never closed"
                )
            if char == "{":
                depth += 1
                if depth > self._max_depth:
                    raise UnexpectedCharacterError(
                        f"at most {self._max_depth} levels of brace nesting",
                        "{",
                        line=self._line,
                        col=self._col,
                    )
            elif char == "}":
                depth -= 1
                if depth == 0:
                    break
            self._advance()

        text = Token(TokenKind.TEXT, self._source[start : self._pos], text_line, text_col)
        closing = Token(TokenKind.RBRACE, "}", self._line, self._col)
        self._advance()
        return [opening, text, closing]

    def _read_quoted(self) -> list[Token]:
        opening = Token(TokenKind.QUOTE, '"', self._line, self._col)
        self._advance()
        text_line, text_col = self._line, self._col
        start = self._pos

        while (char := self._peek()) is not None and char != '"':
            self._advance()

        if char is None:
            raise UnexpectedEndOfInputError(
                line=opening.line, col=opening.col, detail="quoted value is never closed"
            )

        text = Token(TokenKind.TEXT, self._source[start : self._pos], text_line, text_col)
        closing = Token(TokenKind.QUOTE, '"', self._line, self._col)
        self._advance()
        return [opening, text, closing]


def tokenize(source: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Token]:
    """Convert BibTeX source into a flat token list.

    Args:
        source: Complete BibTeX source text
        max_depth: Maximum brace nesting allowed inside a braced value,
            counting the value's own braces

    Returns:
        Tokens in source order, always terminated by one ``EOF`` token

    Raises:
        UnexpectedEndOfInputError: If a braced or quoted value is not closed
        UnexpectedCharacterError: If a braced value nests deeper than ``max_depth``
    """
    return Lexer(source, max_depth=max_depth).tokenize()

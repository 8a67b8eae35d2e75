"""Recursive-descent parser turning tokens into raw, untyped entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import (
    EmptyBibliographyError,
    ParseError,
    UnexpectedCharacterError,
    UnexpectedEndOfInputError,
)
from .lexer import Token, TokenKind

logger = logging.getLogger(__name__)

_CLOSERS = {TokenKind.LBRACE: TokenKind.RBRACE, TokenKind.LPAREN: TokenKind.RPAREN}


@dataclass(frozen=True, slots=True)
class RawField:
    """A field's name and undecoded value.

    ``line``/``col`` locate the start of the value and are ``None`` for fields
    that did not come from source text.
    """

    key: str
    value: str
    line: int | None = None
    col: int | None = None


@dataclass(frozen=True, slots=True)
class RawEntry:
    """An entry as written: kind text, citekey and ordered raw fields."""

    kind: str
    citekey: str
    fields: tuple[RawField, ...] = ()
    line: int | None = None
    col: int | None = None


class Parser:
    """Consumes a token list produced by :func:`~litshelf.bibtex.lexer.tokenize`."""

    def __init__(self, tokens: list[Token]) -> None:
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            raise ValueError("token list must end with an EOF token")
        self._tokens = tokens
        self._index = 0

    def parse(self) -> list[RawEntry]:
        if self._peek().kind is TokenKind.EOF:
            raise EmptyBibliographyError()

        entries: list[RawEntry] = []
        while self._peek().kind is not TokenKind.EOF:
            entries.append(self._parse_entry())
        return entries

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind is not TokenKind.EOF:
            self._index += 1
        return token

    def _expect(self, kind: TokenKind, expected: str) -> Token:
        token = self._peek()
        if token.kind is not kind:
            raise _unexpected(token, expected)
        return self._advance()

    def _parse_entry(self) -> RawEntry:
        at = self._expect(TokenKind.AT, "'@'")
        kind = self._expect(TokenKind.IDENT, "an entry type")

        opener = self._peek()
        if opener.kind not in _CLOSERS:
            raise _unexpected(opener, "'{'")
        self._advance()
        closer = _CLOSERS[opener.kind]

        citekey = self._expect(TokenKind.IDENT, "a citekey")
        self._expect(TokenKind.COMMA, "','")

        fields: list[RawField] = []
        while self._peek().kind is not closer:
            fields.append(self._parse_field())

            token = self._peek()
            if token.kind is TokenKind.COMMA:
                self._advance()
            elif token.kind is not closer:
                raise _unexpected(token, f"'{closer.value}'")

        self._advance()
        logger.debug("Parsed entry %s with %d fields", citekey.text, len(fields))
        return RawEntry(kind.text, citekey.text, tuple(fields), at.line, at.col)

    def _parse_field(self) -> RawField:
        key = self._expect(TokenKind.IDENT, "a field name")
        self._expect(TokenKind.EQUALS, "'='")
        value = self._parse_value()
        return RawField(key.text, value.text, value.line, value.col)

    def _parse_value(self) -> Token:
        token = self._peek()

        if token.kind is TokenKind.LBRACE:
            self._advance()
            text = self._expect(TokenKind.TEXT, "a braced value")
            self._expect(TokenKind.RBRACE, "'}'")
            return text

        if token.kind is TokenKind.QUOTE:
            self._advance()
            text = self._expect(TokenKind.TEXT, "a quoted value")
            self._expect(TokenKind.QUOTE, "'\"'")
            return text

        if token.kind is TokenKind.IDENT:
            for offset, char in enumerate(token.text):
                if not ("0" <= char <= "9"):
                    raise UnexpectedCharacterError(
                        "a digit", char, line=token.line, col=token.col + offset
                    )
            return self._advance()

        raise _unexpected(token, "'{', '\"' or a number")


def _unexpected(token: Token, expected: str) -> ParseError:
    if token.kind is TokenKind.EOF:
        return UnexpectedEndOfInputError(line=token.line, col=token.col)
    return UnexpectedCharacterError(expected, token.text[:1], line=token.line, col=token.col)


def parse_tokens(tokens: list[Token]) -> list[RawEntry]:
    """Recognise the entry/field grammar over ``tokens``.

    Raises:
        EmptyBibliographyError: If the tokens hold no entries
        UnexpectedCharacterError: If a token does not fit the grammar
        UnexpectedEndOfInputError: If the tokens end inside an entry
    """
    return Parser(tokens).parse()

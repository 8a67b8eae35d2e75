"""Top-level BibTeX parsing: source text to typed entries."""

from __future__ import annotations

import logging
from pathlib import Path

from ..exceptions import InvalidFieldValueError, ParseError
from .entry import BibEntry, UnknownEntryType, lookup_entry_kind
from .fields import BibField, decode_field
from .lexer import DEFAULT_MAX_DEPTH, tokenize
from .parser import RawEntry, parse_tokens

logger = logging.getLogger(__name__)


def build_entry(raw: RawEntry) -> BibEntry:
    """Resolve the kind of ``raw`` and decode each of its fields in order.

    Raises:
        ParseError: If the citekey is empty
        InvalidFieldValueError: If a field fails validation, located at the
            field's value when the position is known
    """
    if not raw.citekey:
        raise ParseError("entry has an empty citekey", line=raw.line, col=raw.col)

    fields: list[BibField] = []
    for raw_field in raw.fields:
        try:
            fields.append(decode_field(raw_field.key, raw_field.value))
        except InvalidFieldValueError as e:
            if raw_field.line is None or raw_field.col is None:
                raise
            raise e.at(raw_field.line, raw_field.col) from e

    return BibEntry(kind=lookup_entry_kind(raw.kind), citekey=raw.citekey, fields=tuple(fields))


def parse(source: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[BibEntry]:
    """Parse BibTeX source into typed entries.

    The whole input is rejected on the first error; no partial result is
    returned. Unrecognised entry types are kept as :class:`UnknownEntryType`.
    A leading byte-order mark is ignored.

    Args:
        source: BibTeX source text
        max_depth: Maximum brace nesting inside a field value

    Returns:
        Entries in source order

    Raises:
        ParseError: On any structural or field-level error
    """
    source = source.removeprefix("\ufeff")
    tokens = tokenize(source, max_depth=max_depth)
    logger.debug("Tokenized %d characters into %d tokens", len(source), len(tokens))

    entries = [build_entry(raw) for raw in parse_tokens(tokens)]

    for entry in entries:
        if isinstance(entry.kind, UnknownEntryType):
            logger.info("Entry %s has unrecognised type '%s'", entry.citekey, entry.kind.name)

    logger.debug("Parsed %d entries", len(entries))
    return entries


def parse_file(bib_path: Path) -> list[BibEntry]:
    """Parse a UTF-8 encoded .bib file.

    Raises:
        FileNotFoundError: If ``bib_path`` doesn't exist
        ParseError: If the file contents fail to parse
    """
    if not bib_path.exists():
        raise FileNotFoundError(f"Bibliography file not found: {bib_path}")

    logger.debug(f"Parsing .bib file: {bib_path}")
    return parse(bib_path.read_text(encoding="utf-8"))

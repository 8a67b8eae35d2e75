"""Typed decoding of BibTeX field values."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import partial
from typing import Union

from ..exceptions import InvalidFieldValueError

_DIGITS = re.compile(r"[0-9]+")
_PAGE_RANGE = re.compile(r"([0-9]+)(?:\s*--?\s*([0-9]+))?")


class StandardField(Enum):
    """Field names with a known meaning, keyed by their canonical BibTeX spelling."""

    ADDRESS = "address"
    ANNOTE = "annote"
    AUTHOR = "author"
    BOOKTITLE = "booktitle"
    CHAPTER = "chapter"
    CROSSREF = "crossref"
    DOI = "doi"
    EDITION = "edition"
    EDITOR = "editor"
    EMAIL = "email"
    HOWPUBLISHED = "howpublished"
    INSTITUTION = "institution"
    JOURNAL = "journal"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"
    NOTE = "note"
    NUMBER = "number"
    ORGANIZATION = "organization"
    PAGES = "pages"
    PUBLISHER = "publisher"
    SCHOOL = "school"
    SERIES = "series"
    TITLE = "title"
    TYPE = "type"
    VOLUME = "volume"


_FIELD_ALIASES = {
    "annotation": StandardField.ANNOTE,
    "book-title": StandardField.BOOKTITLE,
    "cross-reference": StandardField.CROSSREF,
    "how-published": StandardField.HOWPUBLISHED,
}


class Month(IntEnum):
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12


class Weekday(Enum):
    """Day of the week.

    Not an ``IntEnum``: a weekday must never compare equal to a day-of-month.
    """

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


_MONTH_NAMES = {month.name.lower(): month for month in Month}
_MONTH_NAMES.update({month.name.lower()[:3]: month for month in Month})
_MONTH_NAMES["sept"] = Month.SEPTEMBER

_WEEKDAY_NAMES = {day.name.lower(): day for day in Weekday}
_WEEKDAY_NAMES.update({day.name.lower()[:3]: day for day in Weekday})


@dataclass(frozen=True, slots=True)
class Author:
    """One person from an ``author`` or ``editor`` list."""

    forename: str
    surname: str
    suffix: str | None = None
    prefix: str | None = None

    def __str__(self) -> str:
        name = " ".join(part for part in (self.forename, self.prefix, self.surname) if part)
        if self.suffix:
            return f"{name}, {self.suffix}"
        return name


@dataclass(frozen=True, slots=True)
class PageRange:
    """A single page (``end is None``) or an inclusive page range."""

    start: int
    end: int | None = None

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}--{self.end}"


FieldValue = Union[str, int, Month, Weekday, tuple[Author, ...], tuple[PageRange, ...]]


@dataclass(frozen=True, slots=True)
class BibField:
    """A decoded field.

    ``name`` is ``None`` for non-standard fields, whose ``value`` is the raw
    text. ``key`` keeps the spelling used in the source.
    """

    key: str
    raw: str
    value: FieldValue
    name: StandardField | None = None

    @property
    def is_standard(self) -> bool:
        return self.name is not None


def lookup_field_name(key: str) -> StandardField | None:
    """Return the standard field for ``key`` (case-insensitive), or ``None``."""
    folded = key.lower()
    try:
        return StandardField(folded)
    except ValueError:
        return _FIELD_ALIASES.get(folded)


def _split_top_level(text: str, is_separator: Callable[[str], bool]) -> list[str]:
    """Split ``text`` on separator characters outside of braces."""
    parts: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif depth == 0 and is_separator(char):
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return parts


def _words(text: str) -> list[str]:
    return [word for word in _split_top_level(text, str.isspace) if word]


def _is_particle(word: str) -> bool:
    return word[:1].islower()


def parse_name(text: str) -> Author:
    """Parse one name in ``Last, First[, Suffix]`` or ``First [von] Last`` form."""
    parts = [part.strip() for part in _split_top_level(text, lambda char: char == ",")]

    if len(parts) > 1:
        surname_words = _words(parts[0])
        if not surname_words:
            raise ValueError(f"missing surname in {text.strip()!r}")
        prefix_count = 0
        while prefix_count < len(surname_words) - 1 and _is_particle(surname_words[prefix_count]):
            prefix_count += 1
        suffix = ", ".join(part for part in parts[2:] if part)
        return Author(
            forename=" ".join(_words(parts[1])),
            surname=" ".join(surname_words[prefix_count:]),
            suffix=suffix or None,
            prefix=" ".join(surname_words[:prefix_count]) or None,
        )

    words = _words(text)
    surname, rest = words[-1], words[:-1]
    split = len(rest)
    # The first word always stays in the forename
    while split > 1 and _is_particle(rest[split - 1]):
        split -= 1
    return Author(
        forename=" ".join(rest[:split]),
        surname=surname,
        prefix=" ".join(rest[split:]) or None,
    )


def parse_authors(raw: str) -> tuple[Author, ...]:
    """Split a name list on ``and`` and parse each name, keeping source order."""
    words = _words(raw)
    if not words:
        return ()

    segments: list[list[str]] = [[]]
    for word in words:
        if word.lower() == "and":
            segments.append([])
        else:
            segments[-1].append(word)

    authors: list[Author] = []
    for position, segment in enumerate(segments, start=1):
        if not segment:
            raise ValueError(f"name {position} in the list is empty")
        authors.append(parse_name(" ".join(segment)))
    return tuple(authors)


def parse_pages(raw: str) -> tuple[PageRange, ...]:
    ranges: list[PageRange] = []
    for part in raw.split(","):
        match = _PAGE_RANGE.fullmatch(part.strip())
        if match is None:
            raise ValueError(f"{part.strip()!r} is not a page number or page range")
        start, end = match.groups()
        ranges.append(PageRange(int(start), int(end) if end is not None else None))
    return tuple(ranges)


def parse_unsigned(raw: str, bits: int) -> int:
    """Parse an unsigned integer that must fit in ``bits`` bits."""
    text = raw.strip()
    if not _DIGITS.fullmatch(text):
        raise ValueError("expected an unsigned integer")
    value = int(text)
    limit = 2**bits - 1
    if value > limit:
        raise ValueError(f"{value} exceeds the maximum of {limit}")
    return value


def parse_month(raw: str) -> Month:
    text = raw.strip().lower()
    if _DIGITS.fullmatch(text):
        number = int(text)
        if not 1 <= number <= 12:
            raise ValueError("month number must be between 1 and 12")
        return Month(number)
    try:
        return _MONTH_NAMES[text]
    except KeyError:
        raise ValueError("not an English month name or number") from None


def parse_day(raw: str) -> int | Weekday:
    """Parse a day of the month (``1``-``31``) or a weekday name."""
    text = raw.strip().lower()
    if _DIGITS.fullmatch(text):
        number = int(text)
        if not 1 <= number <= 31:
            raise ValueError("day number must be between 1 and 31")
        return number
    try:
        return _WEEKDAY_NAMES[text]
    except KeyError:
        raise ValueError("not a day number or English weekday name") from None


_DECODERS: dict[StandardField, Callable[[str], FieldValue]] = {
    StandardField.AUTHOR: parse_authors,
    StandardField.EDITOR: parse_authors,
    StandardField.PAGES: parse_pages,
    StandardField.MONTH: parse_month,
    StandardField.DAY: parse_day,
    StandardField.YEAR: partial(parse_unsigned, bits=16),
    StandardField.EDITION: partial(parse_unsigned, bits=16),
    StandardField.NUMBER: partial(parse_unsigned, bits=16),
    StandardField.VOLUME: partial(parse_unsigned, bits=8),
    StandardField.CHAPTER: partial(parse_unsigned, bits=8),
}


def decode_field(key: str, raw: str) -> BibField:
    """Decode one raw field into a typed :class:`BibField`.

    Args:
        key: Field name as written in the source
        raw: Undecoded field text

    Returns:
        The decoded field; unknown names become non-standard fields

    Raises:
        InvalidFieldValueError: If ``raw`` does not fit the field's grammar
    """
    name = lookup_field_name(key)
    if name is None:
        return BibField(key=key, raw=raw, value=raw)

    decoder = _DECODERS.get(name)
    if decoder is None:
        return BibField(key=key, raw=raw, value=raw, name=name)

    try:
        value = decoder(raw)
    except ValueError as e:
        raise InvalidFieldValueError(key, raw, str(e)) from e
    return BibField(key=key, raw=raw, value=value, name=name)

"""Entry kinds and the typed BibTeX entry model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union, cast

from .fields import Author, BibField, FieldValue, Month, PageRange, StandardField, Weekday


class EntryType(Enum):
    """The standard BibTeX entry types."""

    ARTICLE = "article"
    BOOK = "book"
    BOOKLET = "booklet"
    INBOOK = "inbook"
    INCOLLECTION = "incollection"
    INPROCEEDINGS = "inproceedings"
    MANUAL = "manual"
    MASTERSTHESIS = "mastersthesis"
    MISC = "misc"
    PHDTHESIS = "phdthesis"
    PROCEEDINGS = "proceedings"
    TECHREPORT = "techreport"
    UNPUBLISHED = "unpublished"


_ENTRY_TYPE_SYNONYMS = {"conference": EntryType.INPROCEEDINGS}


@dataclass(frozen=True, slots=True)
class UnknownEntryType:
    """An entry type outside :class:`EntryType`, kept as written."""

    name: str


BibEntryKind = Union[EntryType, UnknownEntryType]


def lookup_entry_kind(text: str) -> BibEntryKind:
    """Resolve an entry type case-insensitively, falling back to :class:`UnknownEntryType`."""
    folded = text.lower()
    try:
        return EntryType(folded)
    except ValueError:
        pass
    synonym = _ENTRY_TYPE_SYNONYMS.get(folded)
    if synonym is not None:
        return synonym
    return UnknownEntryType(text)


def entry_kind_name(kind: BibEntryKind) -> str:
    """Return the text form of ``kind``: the canonical type or the original unknown text."""
    if isinstance(kind, UnknownEntryType):
        return kind.name
    return kind.value


@dataclass(frozen=True)
class BibEntry:
    """A parsed entry.

    ``fields`` keeps source order and may hold repeated keys; the typed
    accessors return the first field of the requested name.
    """

    kind: BibEntryKind
    citekey: str
    fields: tuple[BibField, ...] = ()

    @property
    def kind_name(self) -> str:
        return entry_kind_name(self.kind)

    def get(self, name: StandardField) -> FieldValue | None:
        """Return the decoded value of the first ``name`` field, or ``None``."""
        for field in self.fields:
            if field.name is name:
                return field.value
        return None

    def non_standard_field(self, key: str) -> str | None:
        """Look up a non-standard field by key (case-insensitive) and return its raw text."""
        folded = key.lower()
        for field in self.fields:
            if field.name is None and field.key.lower() == folded:
                return field.raw
        return None

    def _text(self, name: StandardField) -> str | None:
        return cast(Union[str, None], self.get(name))

    def _number(self, name: StandardField) -> int | None:
        return cast(Union[int, None], self.get(name))

    def authors(self) -> tuple[Author, ...] | None:
        return cast(Union[tuple[Author, ...], None], self.get(StandardField.AUTHOR))

    def editors(self) -> tuple[Author, ...] | None:
        return cast(Union[tuple[Author, ...], None], self.get(StandardField.EDITOR))

    def lead_author(self) -> Author | None:
        """Return the first listed author, if any."""
        authors = self.authors()
        return authors[0] if authors else None

    def pages(self) -> tuple[PageRange, ...] | None:
        return cast(Union[tuple[PageRange, ...], None], self.get(StandardField.PAGES))

    def month(self) -> Month | None:
        return cast(Union[Month, None], self.get(StandardField.MONTH))

    def day(self) -> int | Weekday | None:
        return cast(Union[int, Weekday, None], self.get(StandardField.DAY))

    def year(self) -> int | None:
        return self._number(StandardField.YEAR)

    def edition(self) -> int | None:
        return self._number(StandardField.EDITION)

    def number(self) -> int | None:
        return self._number(StandardField.NUMBER)

    def volume(self) -> int | None:
        return self._number(StandardField.VOLUME)

    def chapter(self) -> int | None:
        return self._number(StandardField.CHAPTER)

    def address(self) -> str | None:
        return self._text(StandardField.ADDRESS)

    def annote(self) -> str | None:
        return self._text(StandardField.ANNOTE)

    def booktitle(self) -> str | None:
        return self._text(StandardField.BOOKTITLE)

    def crossref(self) -> str | None:
        return self._text(StandardField.CROSSREF)

    def doi(self) -> str | None:
        return self._text(StandardField.DOI)

    def email(self) -> str | None:
        return self._text(StandardField.EMAIL)

    def howpublished(self) -> str | None:
        return self._text(StandardField.HOWPUBLISHED)

    def institution(self) -> str | None:
        return self._text(StandardField.INSTITUTION)

    def journal(self) -> str | None:
        return self._text(StandardField.JOURNAL)

    def note(self) -> str | None:
        return self._text(StandardField.NOTE)

    def organization(self) -> str | None:
        return self._text(StandardField.ORGANIZATION)

    def publisher(self) -> str | None:
        return self._text(StandardField.PUBLISHER)

    def school(self) -> str | None:
        return self._text(StandardField.SCHOOL)

    def series(self) -> str | None:
        return self._text(StandardField.SERIES)

    def title(self) -> str | None:
        return self._text(StandardField.TITLE)

    def type_field(self) -> str | None:
        """Return the ``type`` field (e.g. the kind of a thesis or report)."""
        return self._text(StandardField.TYPE)

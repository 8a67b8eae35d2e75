"""Tests for end-to-end parsing of BibTeX documents."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import bibtexparser
import pytest

from litshelf.bibtex.document import parse, parse_file
from litshelf.bibtex.entry import EntryType, UnknownEntryType
from litshelf.bibtex.fields import Author, Month, PageRange, StandardField
from litshelf.exceptions import (
    EmptyBibliographyError,
    InvalidFieldValueError,
    ParseError,
    UnexpectedEndOfInputError,
)

SAMPLE = """
% Sample library
@article{knuth1984,
  author = {Knuth, Donald E.},
  title = {Literate Programming},
  journal = {The Computer Journal},
  year = 1984,
  month = may,
}
"""


def test_parse_article():
    """A full article decodes into typed fields."""
    entries = parse(
        """
        @Article{doe2020,
          author  = {Doe, Jane and John Smith},
          title   = "Parsing {BibTeX} Robustly",
          journal = {Journal of Tests},
          year    = 2020,
          month   = {Mar},
          volume  = {12},
          pages   = {101--118},
          doi     = {10.1000/xyz123},
          keywords = {parsing},
        }
        """
    )

    assert len(entries) == 1
    entry = entries[0]
    assert entry.kind is EntryType.ARTICLE
    assert entry.citekey == "doe2020"
    assert entry.authors() == (
        Author(forename="Jane", surname="Doe"),
        Author(forename="John", surname="Smith"),
    )
    assert entry.title() == "Parsing {BibTeX} Robustly"
    assert entry.journal() == "Journal of Tests"
    assert entry.year() == 2020
    assert entry.month() is Month.MARCH
    assert entry.volume() == 12
    assert entry.pages() == (PageRange(101, 118),)
    assert entry.doi() == "10.1000/xyz123"
    assert entry.non_standard_field("KEYWORDS") == "parsing"
    assert [field.key for field in entry.fields] == [
        "author",
        "title",
        "journal",
        "year",
        "month",
        "volume",
        "pages",
        "doi",
        "keywords",
    ]


def test_entry_with_no_fields():
    """An entry without fields keeps its kind and citekey."""
    entries = parse("@book{empty,}")

    assert len(entries) == 1
    assert entries[0].kind is EntryType.BOOK
    assert entries[0].citekey == "empty"
    assert entries[0].fields == ()


def test_nested_braces_survive_decoding():
    """Inner braces of a title are kept, outer ones stripped."""
    entries = parse("@misc{k, title = {A Title with {Nested Braces} is Cool}}")

    assert entries[0].title() == "A Title with {Nested Braces} is Cool"


def test_quoted_value():
    entries = parse('@misc{k, title = "A Test Title"}')

    assert entries[0].title() == "A Test Title"


def test_unterminated_quoted_value():
    """An unclosed quote is an end-of-input error."""
    with pytest.raises(UnexpectedEndOfInputError):
        parse('@misc{k, title = "abc')


def test_comment_lines_have_no_effect():
    """Removing a comment line leaves the result unchanged."""
    with_comment = """@misc{k,
  title = {T},
  % note = {ignored},
  year = 2001
}"""
    without_comment = """@misc{k,
  title = {T},
  year = 2001
}"""

    assert parse(with_comment) == parse(without_comment)


def test_unknown_entry_kind():
    """Unrecognised entry types degrade instead of failing."""
    entries = parse("@foo{k, title={x}}")

    assert entries[0].kind == UnknownEntryType("foo")
    assert entries[0].kind_name == "foo"
    assert entries[0].title() == "x"


def test_conference_is_inproceedings():
    """'conference' is a synonym and kinds are matched case-insensitively."""
    entries = parse("@CONFERENCE{a,}\n@InProceedings{b,}")

    assert [entry.kind for entry in entries] == [EntryType.INPROCEEDINGS] * 2


@pytest.mark.parametrize("source", ["", "   \n\t", "% only a comment\n% and another"])
def test_empty_input(source):
    """Input without entries is an error, never an empty list."""
    with pytest.raises(EmptyBibliographyError):
        parse(source)


def test_lead_author_follows_source_order():
    """The first written author is the lead author."""
    forward = parse("@misc{k, author = {A, B and C, D}}")[0]
    reverse = parse("@misc{k, author = {C, D and A, B}}")[0]

    assert [str(author) for author in forward.authors()] == ["B A", "D C"]
    assert str(forward.lead_author()) == "B A"
    assert str(reverse.lead_author()) == "D C"


def test_field_order_does_not_change_accessors():
    """Reordered fields give different sequences but the same accessor results."""
    first = parse("@misc{k, year = 1999, title = {T}, note = {N}}")[0]
    second = parse("@misc{k, note = {N}, title = {T}, year = 1999}")[0]

    assert first.fields != second.fields
    for name in StandardField:
        assert first.get(name) == second.get(name)


def test_invalid_field_value_is_located():
    """A field that fails validation reports the position of its value."""
    with pytest.raises(InvalidFieldValueError) as exc_info:
        parse("@misc{ok, year = 2000}\n@misc{bad,\n  month = {Smarch}\n}")

    error = exc_info.value
    assert error.field == "month"
    assert error.raw == "Smarch"
    assert (error.line, error.col) == (3, 12)
    assert str(error).startswith("line 3, column 12: ")


def test_bare_month_macro_is_rejected():
    """String macros are out of scope, so a bare month name fails."""
    with pytest.raises(ParseError):
        parse(SAMPLE)


def test_parse_file(tmp_path: Path) -> None:
    """Files are read as UTF-8."""
    bib_path = tmp_path / "library.bib"
    bib_path.write_text("@book{goedel,\n  author = {Gödel, Kurt},\n}\n", encoding="utf-8")

    entries = parse_file(bib_path)

    assert entries[0].lead_author() == Author(forename="Kurt", surname="Gödel")


def test_parse_file_with_byte_order_mark(tmp_path: Path) -> None:
    """A UTF-8 byte-order mark at the start of the file is skipped."""
    bib_path = tmp_path / "exported.bib"
    bib_path.write_text("@misc{k, title={T}}", encoding="utf-8-sig")

    entries = parse_file(bib_path)

    assert entries[0].citekey == "k"
    assert entries[0].title() == "T"


def test_parse_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        parse_file(tmp_path / "missing.bib")


def test_concurrent_parses_match_sequential():
    """Parsing from many threads gives the same results as parsing in sequence."""
    sources = [
        f"@article{{key{index}, author = {{Author{index}, First}}, year = {1900 + index},"
        f" title = {{Title {{{index}}}}}}}"
        for index in range(32)
    ]

    sequential = [parse(source) for source in sources]
    with ThreadPoolExecutor(max_workers=8) as executor:
        concurrent = list(executor.map(parse, sources * 4))

    assert concurrent == sequential * 4


def test_agrees_with_bibtexparser():
    """Citekeys, types and plain titles match bibtexparser's reading of the same source."""
    source = """
    @article{alpha, title = {First Title}, year = 2001}
    @book{beta, title = "Second Title", author = {Doe, Jane}}
    @misc{gamma, title = {Third Title}}
    """

    ours = parse(source)
    library = bibtexparser.parse_string(source)

    assert [entry.citekey for entry in ours] == [entry.key for entry in library.entries]
    assert [entry.kind_name for entry in ours] == [
        entry.entry_type.lower() for entry in library.entries
    ]
    assert [entry.title() for entry in ours] == [
        entry.fields_dict["title"].value for entry in library.entries
    ]

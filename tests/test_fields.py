"""Tests for typed field decoding."""

import pytest

from litshelf.bibtex.fields import (
    Author,
    BibField,
    Month,
    PageRange,
    StandardField,
    Weekday,
    decode_field,
    lookup_field_name,
    parse_authors,
    parse_name,
)
from litshelf.exceptions import InvalidFieldValueError


def test_lookup_field_name_is_case_insensitive():
    """Standard names match regardless of case; aliases map to the same field."""
    assert lookup_field_name("TITLE") is StandardField.TITLE
    assert lookup_field_name("BookTitle") is StandardField.BOOKTITLE
    assert lookup_field_name("book-title") is StandardField.BOOKTITLE
    assert lookup_field_name("annotation") is StandardField.ANNOTE
    assert lookup_field_name("keywords") is None


def test_surname_first_authors_keep_order():
    """'Last, First' names are split on 'and' and keep their order."""
    authors = parse_authors("A, B and C, D")

    assert authors == (Author(forename="B", surname="A"), Author(forename="D", surname="C"))
    assert [str(author) for author in authors] == ["B A", "D C"]
    assert authors[0] != parse_authors("C, D and A, B")[0]


def test_forename_first_author():
    """Without a comma, the last word is the surname."""
    assert parse_name("Donald Ervin Knuth") == Author(forename="Donald Ervin", surname="Knuth")


def test_particles_become_prefix():
    """Lowercase words before the surname are the name's prefix."""
    assert parse_name("Ludwig van Beethoven") == Author(
        forename="Ludwig", surname="Beethoven", prefix="van"
    )
    assert parse_name("van der Berg, Anna") == Author(
        forename="Anna", surname="Berg", prefix="van der"
    )


def test_suffix_follows_second_comma():
    """Comma-separated parts after the forename form the suffix."""
    author = parse_name("King, Martin Luther, Jr.")

    assert author == Author(forename="Martin Luther", surname="King", suffix="Jr.")
    assert str(author) == "Martin Luther King, Jr."


def test_single_word_name():
    """A lone word is a surname with an empty forename."""
    assert parse_name("Plato") == Author(forename="", surname="Plato")


def test_and_inside_braces_does_not_split():
    """Braced groups such as corporate names are kept whole."""
    authors = parse_authors("{Barnes and Noble} and Smith, John")

    assert authors == (
        Author(forename="", surname="{Barnes and Noble}"),
        Author(forename="John", surname="Smith"),
    )


def test_and_is_case_insensitive_and_whitespace_delimited():
    """'AND' separates names, 'Anderson' does not."""
    authors = parse_authors("Anderson, Ann AND\n  Brandt, Bo")

    assert [author.surname for author in authors] == ["Anderson", "Brandt"]


def test_empty_author_list():
    """An empty author value is an empty list, not an error."""
    field = decode_field("author", "   ")

    assert field.value == ()


def test_empty_name_in_list_is_invalid():
    """A dangling 'and' leaves an empty name."""
    with pytest.raises(InvalidFieldValueError) as exc_info:
        decode_field("author", "Smith, John and")

    assert exc_info.value.field == "author"
    assert exc_info.value.raw == "Smith, John and"


def test_editor_uses_author_grammar():
    """Editors decode like authors."""
    field = decode_field("editor", "Jane Doe")

    assert field.name is StandardField.EDITOR
    assert field.value == (Author(forename="Jane", surname="Doe"),)


def test_pages():
    """Page lists hold single pages and ranges in written order."""
    field = decode_field("pages", "12--15, 7, 20-21")

    assert field.value == (PageRange(12, 15), PageRange(7), PageRange(20, 21))
    assert [str(page) for page in field.value] == ["12--15", "7", "20--21"]


@pytest.mark.parametrize("raw", ["xii", "12---15", "1-", "", "3,,4"])
def test_invalid_pages(raw):
    """Anything other than numbers and dash ranges is rejected."""
    with pytest.raises(InvalidFieldValueError):
        decode_field("pages", raw)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("January", Month.JANUARY),
        ("feb", Month.FEBRUARY),
        ("Sept", Month.SEPTEMBER),
        ("12", Month.DECEMBER),
    ],
)
def test_month(raw, expected):
    """Months accept English names, abbreviations and numbers."""
    assert decode_field("month", raw).value is expected


@pytest.mark.parametrize("raw", ["0", "13", "Smarch", "-1"])
def test_invalid_month(raw):
    with pytest.raises(InvalidFieldValueError):
        decode_field("month", raw)


def test_day_number_and_weekday():
    """Days are a day-of-month number or a weekday name, never both."""
    assert decode_field("day", "31").value == 31
    assert decode_field("day", "Tuesday").value is Weekday.TUESDAY
    assert decode_field("day", "sun").value is Weekday.SUNDAY
    assert Weekday.MONDAY != 1


@pytest.mark.parametrize("raw", ["0", "32", "someday"])
def test_invalid_day(raw):
    with pytest.raises(InvalidFieldValueError):
        decode_field("day", raw)


def test_integer_widths():
    """Numeric fields are bounded by their bit width."""
    assert decode_field("year", "65535").value == 65535
    assert decode_field("volume", " 255 ").value == 255
    assert decode_field("chapter", "7").value == 7
    assert decode_field("edition", "2").value == 2
    assert decode_field("number", "1024").value == 1024

    with pytest.raises(InvalidFieldValueError) as exc_info:
        decode_field("volume", "256")
    assert "255" in exc_info.value.reason

    with pytest.raises(InvalidFieldValueError):
        decode_field("year", "65536")


@pytest.mark.parametrize("raw", ["20x5", "-3", "", "1.5"])
def test_invalid_integers(raw):
    with pytest.raises(InvalidFieldValueError):
        decode_field("year", raw)


def test_text_fields_are_kept_verbatim():
    """Plain standard fields are not validated or altered."""
    field = decode_field("Title", "  {TeX} and   friends ")

    assert field == BibField(
        key="Title",
        raw="  {TeX} and   friends ",
        value="  {TeX} and   friends ",
        name=StandardField.TITLE,
    )
    assert field.is_standard


def test_non_standard_field():
    """Unknown names are kept with their raw text and no standard name."""
    field = decode_field("keywords", "parsing, bibtex")

    assert field.name is None
    assert field.value == "parsing, bibtex"
    assert not field.is_standard

"""
Tests for the Field Normalizer.

Requires Python 3.11+.
"""

from datetime import timedelta, timezone

import pytest

from normalizer.fields import CanonicalField, bind_headers, bound_fields
from normalizer.normalize import (
    normalize_date,
    normalize_field,
    normalize_row,
    normalize_text,
)

COMBINING_ACUTE = chr(0x301)
E_ACUTE = chr(0xE9)
NBSP = chr(0xA0)
IDEOGRAPHIC_SPACE = chr(0x3000)


class TestNormalizeText:
    """Test cases for text normalization."""

    def test_trim_and_collapse(self):
        """Test trimming and whitespace collapsing."""
        assert normalize_text("  hello \t  world \n") == "hello world"

    def test_unicode_whitespace(self):
        """Test non-ASCII whitespace is trimmed and collapsed too."""
        value = f"{IDEOGRAPHIC_SPACE}a{NBSP}{NBSP}b{NBSP}"
        assert normalize_text(value) == "a b"

    def test_nfc_composition(self):
        """Test decomposed characters are composed."""
        assert normalize_text(f"Cafe{COMBINING_ACUTE}") == f"Caf{E_ACUTE}"

    def test_empty_values(self):
        """Test None, empty and blank input."""
        assert normalize_text(None) == ""
        assert normalize_text("") == ""
        assert normalize_text(" \t\r\n ") == ""

    @pytest.mark.parametrize(
        "value",
        [
            "plain",
            "  spaced   out  ",
            f"e{COMBINING_ACUTE} {NBSP} x",
            "tab\tand\nnewline",
            "",
        ],
    )
    def test_idempotent(self, value: str):
        """Test normalizing twice changes nothing."""
        once = normalize_text(value)
        assert normalize_text(once) == once


class TestNormalizeDate:
    """Test cases for timestamp normalization."""

    def test_utc_timestamp(self):
        """Test a UTC timestamp is kept at second precision."""
        assert normalize_date("2024-01-15T10:30:00Z") == "2024-01-15T10:30:00Z"

    def test_offset_converted_to_utc(self):
        """Test an offset timestamp is converted to UTC."""
        assert normalize_date("2023-12-01 08:00:00+01:00") == "2023-12-01T07:00:00Z"
        assert normalize_date("2023-12-01T20:15-05:30") == "2023-12-02T01:45:00Z"

    def test_zero_milliseconds_stripped(self):
        """Test a literal .000 is dropped."""
        assert normalize_date("2024-01-15T10:30:00.000Z") == "2024-01-15T10:30:00Z"

    def test_nonzero_milliseconds_kept(self):
        """Test nonzero milliseconds survive, padded to three digits."""
        assert normalize_date("2024-01-15T10:30:00.5Z") == "2024-01-15T10:30:00.500Z"
        assert normalize_date("2024-03-02T00:00:00.250Z") == "2024-03-02T00:00:00.250Z"

    def test_unzoned_uses_local_zone(self):
        """Test timestamps without an offset are read in the local zone."""
        minus_five = timezone(timedelta(hours=-5))

        assert normalize_date("2024-01-15 10:30", minus_five) == "2024-01-15T15:30:00Z"
        assert normalize_date("2024-01-15", timezone.utc) == "2024-01-15T00:00:00Z"

    def test_cosmetic_variants_agree(self):
        """Test differently formatted equal instants normalize the same."""
        variants = [
            "2024-01-15T10:30:00Z",
            " 2024-01-15 10:30:00Z ",
            "2024-01-15T11:30:00+01:00",
            "2024-01-15T10:30:00.000z",
        ]
        assert {normalize_date(v) for v in variants} == {"2024-01-15T10:30:00Z"}

    def test_free_form_fallback(self):
        """Test non-ISO layouts go through the free-form parser."""
        assert normalize_date("15 Jan 2024 10:30:00 +0000") == "2024-01-15T10:30:00Z"
        plus_one = timezone(timedelta(hours=1))
        assert normalize_date("Jan 15 2024 10:30", plus_one) == "2024-01-15T09:30:00Z"

    def test_stated_year_without_day(self):
        """Test a month and year is enough for the free-form parser."""
        assert normalize_date("March 2024", timezone.utc) == "2024-03-01T00:00:00Z"

    @pytest.mark.parametrize(
        "value", ["", "   ", None, "not a date", "now", "today", "10:30", "March 5"]
    )
    def test_unparseable_is_empty(self, value):
        """Test unparseable, relative and yearless values degrade to empty."""
        assert normalize_date(value, timezone.utc) == ""

    def test_impossible_calendar_date(self):
        """Test an ISO-shaped but impossible date is empty."""
        assert normalize_date("2024-02-30T00:00:00Z") == ""


class TestFieldBinding:
    """Test cases for header binding."""

    def test_bind_case_and_whitespace_insensitive(self):
        """Test headers match regardless of case and padding."""
        bindings = bind_headers([" TITLE ", "User", "username", "last MODIFIED"])
        by_field = {b.canonical: b for b in bindings}

        assert by_field[CanonicalField.TITLE].header_name == " TITLE "
        assert by_field[CanonicalField.USERNAME].header_name == "username"
        assert by_field[CanonicalField.PASSWORD].header_name is None
        assert by_field[CanonicalField.LAST_MODIFIED].header_name == "last MODIFIED"

    def test_unbound_fields_marked_missing(self):
        """Test fields absent from the file are reported but not selectable."""
        bindings = bind_headers(["Title"])
        password = next(b for b in bindings if b.canonical is CanonicalField.PASSWORD)

        assert not password.is_bound
        assert password.display_label == "Password (missing)"
        assert bound_fields(bindings, ["password", "title"]) == [bindings[0]]

    def test_bound_fields_config_order(self):
        """Test selection is returned in configuration order."""
        bindings = bind_headers(["Password", "Title", "Username"])
        selected = bound_fields(bindings, ["password", "username", "title"])

        assert [b.canonical for b in selected] == [
            CanonicalField.TITLE,
            CanonicalField.USERNAME,
            CanonicalField.PASSWORD,
        ]

    def test_parse_field_names(self):
        """Test field names resolve by value or member name."""
        assert CanonicalField.parse("Last Modified") is CanonicalField.LAST_MODIFIED
        assert CanonicalField.parse("last_modified") is CanonicalField.LAST_MODIFIED
        with pytest.raises(ValueError):
            CanonicalField.parse("notes")


class TestNormalizeRow:
    """Test cases for row normalization."""

    def test_field_dispatch(self):
        """Test text and date fields use their own normalization."""
        assert normalize_field("title", "  A   B ") == "A B"
        assert normalize_field(CanonicalField.LAST_MODIFIED, "2024-01-15T10:30:00Z") == (
            "2024-01-15T10:30:00Z"
        )

    def test_row_only_selected_fields(self):
        """Test only the given bindings are normalized."""
        bindings = bind_headers(["Title", "Password", "Last Modified"])
        selection = bound_fields(bindings, ["title", "last modified"])
        row = {
            "Title": " Git  Hub ",
            "Password": "secret",
            "Last Modified": "garbage",
        }

        assert normalize_row(row, selection) == {
            CanonicalField.TITLE: "Git Hub",
            CanonicalField.LAST_MODIFIED: "",
        }

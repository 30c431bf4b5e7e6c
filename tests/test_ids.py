"""Tests for bulk id parsing."""

import pytest

from eventtasks.core.errors import DuplicateIds, ParseError
from eventtasks.core.ids import format_ids, parse_ids


class TestParseIds:
    def test_csv(self):
        assert parse_ids("1,2,4,5") == [1, 2, 4, 5]

    def test_whitespace(self):
        assert parse_ids(" 1, 2 ") == [1, 2]

    def test_empty(self):
        assert parse_ids("") == []
        assert parse_ids([]) == []

    def test_list_of_ints_and_strings(self):
        assert parse_ids([3, "4"]) == [3, 4]

    def test_non_numeric(self):
        with pytest.raises(ParseError, match="abc"):
            parse_ids("1,abc")

    @pytest.mark.parametrize("token", ["²", "٣", "-1", "1.5"])
    def test_only_ascii_digits_are_ids(self, token):
        with pytest.raises(ParseError):
            parse_ids(f"1,{token}")

    def test_trailing_comma(self):
        with pytest.raises(ParseError):
            parse_ids("1,2,")

    def test_duplicates(self):
        with pytest.raises(DuplicateIds) as exc:
            parse_ids("1,1,2")
        assert exc.value.details["ids"] == [1]

    def test_format_round_trip(self):
        assert format_ids(parse_ids("4,1,2")) == "4,1,2"
        assert format_ids([]) == ""

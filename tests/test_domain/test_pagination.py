"""Tests for keyset pagination parameter parsing"""
from datetime import date

import pytest

from taskboard.domain.pagination import DEFAULT_LIMIT, Pagination, parse_limit, parse_pagination
from taskboard.errors import FailedToParseQueryParams, InvalidCursor


class TestParseLimit:
    def test_missing_uses_default(self):
        assert parse_limit(None) == DEFAULT_LIMIT
        assert parse_limit("") == DEFAULT_LIMIT

    def test_numeric(self):
        assert parse_limit("5") == 5

    def test_zero_is_kept(self):
        assert parse_limit("0") == 0

    def test_non_numeric_falls_back(self):
        assert parse_limit("abc") == DEFAULT_LIMIT

    def test_negative_falls_back(self):
        assert parse_limit("-3") == DEFAULT_LIMIT


class TestParsePagination:
    def test_defaults(self):
        assert parse_pagination() == Pagination(limit=30, after_id=None, after_date=None)

    def test_after_id_is_trimmed(self):
        assert parse_pagination(after_id="  abc ").after_id == "abc"

    def test_blank_after_id_is_none(self):
        assert parse_pagination(after_id="   ").after_id is None

    def test_after_date(self):
        assert parse_pagination(after_date="2024-01-10").after_date == date(2024, 1, 10)

    def test_bad_after_date_raises(self):
        with pytest.raises(InvalidCursor):
            parse_pagination(after_date="10.01.2024")

    def test_invalid_cursor_is_a_query_param_error(self):
        with pytest.raises(FailedToParseQueryParams):
            parse_pagination(after_date="2024-13-01")

"""
Tests for Filters and Pagination
================================

Tests for:
- Filter validation and sort derivation
- Offset/limit
- Metadata calculation
- Query-string readers
"""

import pytest

from footballer_api.config import settings

from footballer_api.filters import (
    Filters, Metadata, calculate_metadata, read_csv, read_int, read_string, spell_count,
    validate_filters
)
from footballer_api.models import FOOTBALLER_SORT_SAFELIST
from footballer_api.validator import Validator


def make_filters(**overrides) -> Filters:
    values = {"page": 1, "page_size": 20, "sort": "id", "sort_safelist": FOOTBALLER_SORT_SAFELIST}
    values.update(overrides)
    return Filters(**values)


def validate(filters: Filters) -> Validator:
    v = Validator()
    validate_filters(v, filters)
    return v


def test_default_filters_are_valid():
    assert validate(make_filters()).valid()


@pytest.mark.parametrize("page,message", [
    (0, "must be greater than zero"),
    (-3, "must be greater than zero"),
    (10_000_001, "must be a maximum of 10 million"),
])
def test_page_bounds(page, message):
    v = validate(make_filters(page=page))
    assert v.errors == {"page": message}


@pytest.mark.parametrize("page_size,message", [
    (0, "must be greater than zero"),
    (101, "must be a maximum of 100"),
])
def test_page_size_bounds(page_size, message):
    v = validate(make_filters(page_size=page_size))
    assert v.errors == {"page_size": message}


def test_page_upper_bounds_are_inclusive():
    assert validate(make_filters(page=10_000_000, page_size=100)).valid()


def test_sort_must_be_in_safelist():
    v = validate(make_filters(sort="club"))
    assert v.errors == {"sort": "invalid sort value"}


def test_all_filter_errors_reported_together():
    v = validate(make_filters(page=0, page_size=500, sort="names DESC"))
    assert set(v.errors) == {"page", "page_size", "sort"}


@pytest.mark.parametrize("sort,column,direction", [
    ("id", "id", "ASC"),
    ("-id", "id", "DESC"),
    ("startedplayyear", "startedplayyear", "ASC"),
    ("-goals", "goals", "DESC"),
])
def test_sort_column_and_direction(sort, column, direction):
    filters = make_filters(sort=sort)
    assert filters.sort_column() == column
    assert filters.sort_direction() == direction


def test_sort_column_rejects_unsafe_value():
    filters = make_filters(sort="-club")
    with pytest.raises(ValueError, match="unsafe sort parameter"):
        filters.sort_column()


def test_limit_and_offset():
    filters = make_filters(page=3, page_size=25)
    assert filters.limit() == 25
    assert filters.offset() == 50
    assert make_filters(page=1).offset() == 0


def test_metadata_empty_when_no_records():
    assert calculate_metadata(0, 4, 20) == Metadata()


@pytest.mark.parametrize("total,page_size,last_page", [
    (1, 20, 1),
    (20, 20, 1),
    (21, 20, 2),
    (101, 10, 11),
])
def test_metadata_last_page_rounds_up(total, page_size, last_page):
    metadata = calculate_metadata(total, 1, page_size)
    assert metadata.last_page == last_page
    assert metadata.first_page == 1
    assert metadata.total_records == total
    assert metadata.page_size == page_size
    assert metadata.current_page == 1


def test_read_string():
    qs = {"names": "messi", "club": ""}
    assert read_string(qs, "names", "") == "messi"
    assert read_string(qs, "club", "any") == "any"
    assert read_string(qs, "missing", "default") == "default"


def test_read_csv_splits_and_drops_empty_items():
    qs = {"positions": "ST, LW,,RW"}
    assert read_csv(qs, "positions", []) == ["ST", "LW", "RW"]
    assert read_csv({}, "positions", []) == []


def test_read_int_records_parse_error():
    v = Validator()
    assert read_int({"page": "2"}, "page", 1, v) == 2
    assert read_int({}, "page", 1, v) == 1
    assert v.valid()

    assert read_int({"page_size": "ten"}, "page_size", 20, v) == 20
    assert v.errors == {"page_size": "must be an integer value"}


@pytest.mark.parametrize("raw", ["1_000", " 5 ", "5 ", "٣", "1.0", "+", "0x10"])
def test_read_int_rejects_non_decimal_text(raw):
    v = Validator()
    assert read_int({"page": raw}, "page", 1, v) == 1
    assert v.errors == {"page": "must be an integer value"}


@pytest.mark.parametrize("raw,expected", [("7", 7), ("+7", 7), ("-7", -7), ("007", 7)])
def test_read_int_accepts_signed_digits(raw, expected):
    v = Validator()
    assert read_int({"page": raw}, "page", 1, v) == expected
    assert v.valid()


@pytest.mark.parametrize("n,text", [
    (10_000_000, "10 million"),
    (2_000_000, "2 million"),
    (2_500_000, "2,500,000"),
    (5_000, "5,000"),
])
def test_spell_count(n, text):
    assert spell_count(n) == text


def test_page_limit_message_follows_setting(monkeypatch):
    monkeypatch.setattr(settings, "max_page", 5_000)

    v = validate(make_filters(page=5_001))
    assert v.errors == {"page": "must be a maximum of 5,000"}

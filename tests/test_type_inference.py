"""Tests for column type inference and scalar coercion."""

from __future__ import annotations

import pytest

from core.inference import describe_columns, infer_column_type, sample_values
from core.values import ScalarKind, classify_scalar, coerce_number, display_string, parse_date

pytestmark = pytest.mark.unit


def test_numeric_strings_are_numbers() -> None:
    """Classify a column of numeric strings as number."""

    assert infer_column_type(["1", "2.5", "-3", "4e2"]) == "number"


def test_numeric_threshold_is_strictly_greater_than_80_percent() -> None:
    """Nine numbers out of ten pass; eight out of ten do not."""

    nine = [str(i) for i in range(9)] + ["apple"]
    eight = [str(i) for i in range(8)] + ["apple", "pear"]
    assert infer_column_type(nine) == "number"
    assert infer_column_type(eight) == "text"


def test_date_strings_are_dates() -> None:
    """Classify ISO-like date strings as date."""

    assert infer_column_type(["2024-01-01", "2024-02-15", "2024/03/01", "2024-04-30"]) == "date"


def test_dates_with_one_outlier_still_dates() -> None:
    """Nine parseable dates out of ten exceed the threshold."""

    values = [f"2024-01-{day:02d}" for day in range(1, 10)] + ["garbage"]
    assert infer_column_type(values) == "date"


def test_date_threshold_is_strictly_greater_than_80_percent() -> None:
    """Eight dates out of ten stay text."""

    values = [f"2024-01-{day:02d}" for day in range(1, 9)] + ["garbage", "rubbish"]
    assert infer_column_type(values) == "text"


@pytest.mark.parametrize("values", [["today", "now"], ["1st", "2nd", "3rd", "4th"], ["yesterday", "tomorrow"]])
def test_relative_and_ordinal_words_are_not_dates(values) -> None:
    """Words a date parser would read as relative days or ordinals stay text."""

    assert all(parse_date(v) is None for v in values)
    assert infer_column_type(values) == "text"


def test_numbers_win_over_dates() -> None:
    """Digit strings that also parse as dates are still numbers."""

    values = ["20240101", "20240102", "20240103"]
    assert parse_date(values[0]) is not None
    assert infer_column_type(values) == "number"


def test_text_column() -> None:
    """Plain words are text."""

    assert infer_column_type(["apple", "banana", "cherry"]) == "text"


@pytest.mark.parametrize("values", [[], [None, ""], [None, None, ""]])
def test_no_qualifying_values_is_text(values) -> None:
    """Empty or all-blank columns are text."""

    assert infer_column_type(values) == "text"


def test_only_first_ten_non_blank_values_are_sampled() -> None:
    """Values after the first ten non-blank ones never affect the result."""

    values = [None, ""] + [str(i) for i in range(10)] + ["word"] * 50
    assert sample_values(values) == [str(i) for i in range(10)]
    assert infer_column_type(values) == "number"


def test_native_spreadsheet_numbers_are_numbers() -> None:
    """Ints, floats and bools from spreadsheets count as numeric."""

    assert infer_column_type([1, 2.5, True, 4]) == "number"


def test_describe_columns_uses_first_row_keys_and_data_types() -> None:
    """Column order follows the first row and data types map 1:1 from types."""

    rows = [
        {"a": "1", "b": "x", "c": "2024-01-01"},
        {"a": "2", "b": "y", "c": "2024-01-02"},
    ]
    cols = [c.to_dict() for c in describe_columns(rows)]
    assert cols == [
        {"name": "a", "type": "number", "dataType": "numeric"},
        {"name": "b", "type": "text", "dataType": "string"},
        {"name": "c", "type": "date", "dataType": "datetime"},
    ]


def test_coerce_number_edge_cases() -> None:
    """Only finite numbers survive coercion."""

    assert coerce_number(" 12 ") == 12.0
    assert coerce_number(True) == 1.0
    assert coerce_number("") is None
    assert coerce_number("   ") is None
    assert coerce_number("inf") is None
    assert coerce_number("nan") is None
    assert coerce_number("1_000") is None
    assert coerce_number(None) is None
    assert coerce_number(float("nan")) is None


def test_classify_scalar() -> None:
    """Scalars are tagged by kind."""

    assert classify_scalar(None) is ScalarKind.NULL
    assert classify_scalar(3) is ScalarKind.NUMBER
    assert classify_scalar(False) is ScalarKind.BOOLEAN
    assert classify_scalar("2024-05-01") is ScalarKind.DATE_STRING
    assert classify_scalar("hello") is ScalarKind.STRING


def test_display_string() -> None:
    """Display strings drop trailing .0 and render null as empty."""

    assert display_string(None) == ""
    assert display_string(3.0) == "3"
    assert display_string(2.5) == "2.5"
    assert display_string("A") == "A"

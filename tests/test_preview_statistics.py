"""Tests for data preview filtering/sorting and summary statistics."""

from __future__ import annotations

import pytest

from core.errors import ValidationError
from core.models import ColumnInfo
from core.preview import preview_rows
from core.statistics import compute_statistics

pytestmark = pytest.mark.unit

COLUMNS = [
    ColumnInfo.of("region", "text"),
    ColumnInfo.of("month", "date"),
    ColumnInfo.of("revenue", "number"),
    ColumnInfo.of("units", "number"),
]


def test_filter_is_case_insensitive_across_all_values(sales_rows) -> None:
    """Any cell containing the query keeps the row."""

    preview = preview_rows(sales_rows, COLUMNS, query="NORTH")
    assert [r["month"] for r in preview.rows] == ["2024-01-01", "2024-03-01"]
    assert preview.total == 2


def test_number_columns_sort_numerically_with_non_numbers_last(sales_rows) -> None:
    """Raw numeric strings compare as numbers; unparseable values trail."""

    preview = preview_rows(sales_rows, COLUMNS, sort_column="revenue", direction="desc")
    assert [r["revenue"] for r in preview.rows] == ["200", "120", "80", "n/a"]

    preview = preview_rows(sales_rows, COLUMNS, sort_column="revenue", direction="asc")
    assert [r["revenue"] for r in preview.rows] == ["80", "120", "200", "n/a"]


def test_text_sort_puts_nulls_last() -> None:
    """Null values go last in both directions."""

    rows = [{"name": None}, {"name": "b"}, {"name": "a"}]
    cols = [ColumnInfo.of("name", "text")]

    assert [r["name"] for r in preview_rows(rows, cols, sort_column="name").rows] == ["a", "b", None]
    assert [r["name"] for r in preview_rows(rows, cols, sort_column="name", direction="desc").rows] == ["b", "a", None]


def test_preview_limit_truncates(sales_rows) -> None:
    """Only ``limit`` rows are returned but the total is reported."""

    preview = preview_rows(sales_rows, COLUMNS, limit=3)
    assert len(preview.rows) == 3
    assert preview.to_dict()["total"] == 4
    assert preview.truncated is True


def test_preview_rejects_unknown_sort(sales_rows) -> None:
    """Sorting needs a known column and direction."""

    with pytest.raises(ValidationError):
        preview_rows(sales_rows, COLUMNS, sort_column="profit")
    with pytest.raises(ValidationError):
        preview_rows(sales_rows, COLUMNS, sort_column="region", direction="sideways")


def test_statistics_for_numeric_columns(sales_rows) -> None:
    """Mean/sum/min/max ignore values that are not numbers."""

    stats = compute_statistics(sales_rows, COLUMNS)

    assert (stats["totalRows"], stats["totalColumns"], stats["numericColumns"], stats["totalCells"]) == (4, 4, 2, 16)
    revenue, units = stats["calculations"]
    assert revenue == {"column": "revenue", "avg": pytest.approx(400 / 3), "sum": 400.0, "min": 80.0, "max": 200.0}
    assert units["sum"] == 13.0
    assert units["min"] == 2.0


def test_statistics_without_numeric_values_are_zero() -> None:
    """A number column with nothing numeric reports zeros."""

    stats = compute_statistics([{"v": "x"}], [ColumnInfo.of("v", "number")])
    assert stats["calculations"] == [{"column": "v", "avg": 0.0, "sum": 0.0, "min": 0.0, "max": 0.0}]

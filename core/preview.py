from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.errors import ValidationError
from core.models import ColumnInfo
from core.values import coerce_number, display_string, is_missing

PREVIEW_LIMIT = 100
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class Preview:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"rows": self.rows, "total": self.total, "truncated": self.truncated}


def filter_rows(rows: Sequence[Mapping[str, Any]], query: str) -> List[Mapping[str, Any]]:
    """Rows where any value's display text contains ``query`` (case-insensitive)."""
    q = (query or "").strip().lower()
    if not q:
        return list(rows)
    return [r for r in rows if any(q in display_string(v).lower() for v in r.values())]


def _sort_key(value: Any):
    number = coerce_number(value) if not isinstance(value, str) else None
    if number is not None:
        return (0, number, "")
    return (1, 0.0, display_string(value))


def sort_rows(rows: Sequence[Mapping[str, Any]], column: str, direction: str) -> List[Mapping[str, Any]]:
    # Nulls go last in both directions.
    present = [r for r in rows if not is_missing(r.get(column))]
    missing = [r for r in rows if is_missing(r.get(column))]
    present.sort(key=lambda r: _sort_key(r.get(column)), reverse=direction == "desc")
    return present + missing


def preview_rows(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[ColumnInfo],
    *,
    query: str = "",
    sort_column: Optional[str] = None,
    direction: Optional[str] = None,
    limit: int = PREVIEW_LIMIT,
) -> Preview:
    if sort_column:
        if sort_column not in {c.name for c in columns}:
            raise ValidationError(f"Unknown sort column: {sort_column}", details=[{"field": "sort"}])
        direction = direction or "asc"
        if direction not in SORT_DIRECTIONS:
            raise ValidationError(f"Invalid sort direction: {direction}", details=[{"field": "direction"}])

    result = filter_rows(rows, query)
    if sort_column:
        # Number columns hold raw strings from CSV; compare them numerically.
        numeric = any(c.name == sort_column and c.type == "number" for c in columns)
        if numeric:
            present = [r for r in result if coerce_number(r.get(sort_column)) is not None]
            rest = [r for r in result if coerce_number(r.get(sort_column)) is None]
            present.sort(key=lambda r: coerce_number(r.get(sort_column)), reverse=direction == "desc")
            result = present + sort_rows(rest, sort_column, direction)
        else:
            result = sort_rows(result, sort_column, direction)

    limit = max(0, int(limit))
    return Preview(rows=[dict(r) for r in result[:limit]], total=len(result), truncated=len(result) > limit)

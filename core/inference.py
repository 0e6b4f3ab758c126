from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from core.models import ColumnInfo, ColumnType
from core.values import coerce_number, is_blank, parse_date

SAMPLE_SIZE = 10
TYPE_THRESHOLD = 0.8


def sample_values(values: Iterable[object], size: int = SAMPLE_SIZE) -> List[object]:
    """First ``size`` non-null, non-empty values in row order."""
    out: List[object] = []
    for v in values:
        if is_blank(v):
            continue
        out.append(v)
        if len(out) >= size:
            break
    return out


def infer_column_type(values: Iterable[object]) -> ColumnType:
    """Classify a column as number, date or text from its leading values.

    Numbers are checked before dates, so a column of numeric strings is never a
    date column even when those strings would also parse as dates.
    """
    sample = sample_values(values)
    if not sample:
        return "text"

    numeric = sum(1 for v in sample if coerce_number(v) is not None)
    if numeric / len(sample) > TYPE_THRESHOLD:
        return "number"

    dates = sum(1 for v in sample if parse_date(v) is not None)
    if dates / len(sample) > TYPE_THRESHOLD:
        return "date"

    return "text"


def column_names(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    # Heterogeneous keys in later rows are not reconciled.
    if not rows:
        return []
    return [str(k) for k in rows[0].keys()]


def describe_columns(rows: Sequence[Dict[str, Any]]) -> List[ColumnInfo]:
    return [ColumnInfo.of(name, infer_column_type(row.get(name) for row in rows)) for name in column_names(rows)]

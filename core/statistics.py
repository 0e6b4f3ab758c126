from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from core.models import ColumnInfo
from core.values import coerce_number


def column_summary(rows: Sequence[Mapping[str, Any]], column: str) -> Dict[str, Any]:
    values = pd.Series([coerce_number(r.get(column)) for r in rows], dtype="float64").dropna()
    if values.empty:
        return {"column": column, "avg": 0.0, "sum": 0.0, "min": 0.0, "max": 0.0}
    return {
        "column": column,
        "avg": float(values.mean()),
        "sum": float(values.sum()),
        "min": float(values.min()),
        "max": float(values.max()),
    }


def compute_statistics(rows: Sequence[Mapping[str, Any]], columns: Sequence[ColumnInfo]) -> Dict[str, Any]:
    numeric: List[ColumnInfo] = [c for c in columns if c.type == "number"]
    return {
        "totalRows": len(rows),
        "totalColumns": len(columns),
        "numericColumns": len(numeric),
        "totalCells": len(rows) * len(columns),
        "calculations": [column_summary(rows, c.name) for c in numeric],
    }

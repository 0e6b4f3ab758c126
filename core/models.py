from __future__ import annotations

from dataclasses import dataclass, field
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

ColumnType = Literal["number", "date", "text"]
ChartType = Literal["bar", "line", "area", "scatter", "pie"]

CHART_TYPES = ("bar", "line", "area", "scatter", "pie")
GRID_COLUMNS = 12

DATA_TYPE_BY_COLUMN_TYPE: Dict[str, str] = {
    "number": "numeric",
    "date": "datetime",
    "text": "string",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    type: ColumnType
    data_type: str

    @classmethod
    def of(cls, name: str, column_type: ColumnType) -> "ColumnInfo":
        return cls(name=name, type=column_type, data_type=DATA_TYPE_BY_COLUMN_TYPE[column_type])

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "dataType": self.data_type}


@dataclass(frozen=True)
class Dataset:
    id: str
    name: str
    file_name: str
    rows: List[Dict[str, Any]]
    columns: List[ColumnInfo]
    row_count: int
    uploaded_at: Optional[datetime] = None

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "fileName": self.file_name,
            "data": self.rows,
            "columns": [c.to_dict() for c in self.columns],
            # Wire format carries the count as a decimal string.
            "rowCount": str(self.row_count),
            "uploadedAt": _iso(self.uploaded_at),
        }


@dataclass(frozen=True)
class ChartConfig:
    x_axis: str
    y_axis: List[str]
    colors: List[str]
    show_legend: bool = True
    show_grid: bool = True

    def color_for(self, index: int) -> str:
        return self.colors[index % len(self.colors)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "xAxis": self.x_axis,
            "yAxis": list(self.y_axis),
            "colors": list(self.colors),
            "showLegend": self.show_legend,
            "showGrid": self.show_grid,
        }


@dataclass(frozen=True)
class Chart:
    id: str
    dataset_id: str
    name: str
    type: ChartType
    config: ChartConfig
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "datasetId": self.dataset_id,
            "name": self.name,
            "type": self.type,
            "config": self.config.to_dict(),
            "createdAt": _iso(self.created_at),
        }


@dataclass(frozen=True)
class WidgetLayout:
    i: str
    x: int
    y: int
    w: int
    h: int

    def to_dict(self) -> Dict[str, Any]:
        return {"i": self.i, "x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class Dashboard:
    id: str
    name: str
    layout: List[WidgetLayout] = field(default_factory=list)
    chart_ids: List[str] = field(default_factory=list)
    dataset_ids: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "layout": [w.to_dict() for w in self.layout],
            "chartIds": list(self.chart_ids),
            "datasetIds": list(self.dataset_ids),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.models import ColumnInfo, WidgetLayout


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ColumnInfoModel(CamelModel):
    name: str = Field(min_length=1)
    type: Literal["number", "date", "text"]
    data_type: Optional[str] = None

    def to_column(self) -> ColumnInfo:
        return ColumnInfo.of(self.name, self.type)


class DatasetCreateModel(CamelModel):
    name: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    data: List[Dict[str, Any]] = Field(min_length=1)
    columns: List[ColumnInfoModel] = Field(default_factory=list)
    row_count: Optional[str] = None


class ChartConfigModel(CamelModel):
    x_axis: str = Field(min_length=1)
    y_axis: List[str] = Field(min_length=1)
    colors: List[str] = Field(default_factory=list)
    show_legend: bool = True
    show_grid: bool = True


class ChartCreateModel(CamelModel):
    dataset_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: Literal["bar", "line", "area", "scatter", "pie"]
    config: ChartConfigModel


class ChartUpdateModel(CamelModel):
    dataset_id: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[Literal["bar", "line", "area", "scatter", "pie"]] = None
    config: Optional[ChartConfigModel] = None


class WidgetLayoutModel(BaseModel):
    # Grid libraries send extra keys (moved, static, ...); only the rectangle is kept.
    model_config = ConfigDict(extra="ignore")

    i: str = Field(min_length=1)
    x: int = Field(ge=0, lt=12)
    y: int = Field(ge=0)
    w: int = Field(gt=0, le=12)
    h: int = Field(gt=0)

    def to_widget(self) -> WidgetLayout:
        return WidgetLayout(i=self.i, x=self.x, y=self.y, w=self.w, h=self.h)


class DashboardCreateModel(CamelModel):
    name: str = Field(min_length=1)
    layout: List[WidgetLayoutModel] = Field(default_factory=list)
    chart_ids: List[str] = Field(default_factory=list)
    dataset_ids: List[str] = Field(default_factory=list)


class DashboardUpdateModel(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    layout: Optional[List[WidgetLayoutModel]] = None
    chart_ids: Optional[List[str]] = None
    dataset_ids: Optional[List[str]] = None

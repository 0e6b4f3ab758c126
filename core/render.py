"""Projection of (rows, chart config) into plot-ready series, per chart type.

Rendering never fails on data: a column missing from a row simply yields a null
value in the output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from core.chart_config import palette_colors
from core.errors import ValidationError
from core.models import CHART_TYPES, ChartConfig
from core.values import coerce_number, display_string

RENDER_ROW_LIMIT = 50
PIE_SLICE_LIMIT = 10

Row = Mapping[str, Any]


@dataclass(frozen=True)
class SeriesSpec:
    key: str
    color: Optional[str]


@dataclass(frozen=True)
class RenderedChart:
    chart_type: str
    x_key: str
    series: List[SeriesSpec] = field(default_factory=list)
    data: List[Dict[str, Any]] = field(default_factory=list)
    show_legend: bool = True
    show_grid: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.chart_type,
            "xKey": self.x_key,
            "series": [{"key": s.key, "color": s.color} for s in self.series],
            "data": self.data,
            "showLegend": self.show_legend,
            "showGrid": self.show_grid,
        }


def _color(config: ChartConfig, index: int) -> Optional[str]:
    return config.color_for(index) if config.colors else None


def _first_y(config: ChartConfig) -> Optional[str]:
    return config.y_axis[0] if config.y_axis else None


def _cartesian(chart_type: str, rows: Sequence[Row], config: ChartConfig) -> RenderedChart:
    return RenderedChart(
        chart_type=chart_type,
        x_key=config.x_axis,
        series=[SeriesSpec(key=y, color=_color(config, i)) for i, y in enumerate(config.y_axis)],
        data=[dict(r) for r in rows],
        show_legend=config.show_legend,
        show_grid=config.show_grid,
    )


def _scatter(chart_type: str, rows: Sequence[Row], config: ChartConfig) -> RenderedChart:
    y = _first_y(config)
    series = [SeriesSpec(key=y, color=_color(config, 0))] if y is not None else []
    return RenderedChart(
        chart_type=chart_type,
        x_key=config.x_axis,
        series=series,
        data=[{"x": r.get(config.x_axis), "y": r.get(y) if y is not None else None} for r in rows],
        show_legend=config.show_legend,
        show_grid=config.show_grid,
    )


def _pie(chart_type: str, rows: Sequence[Row], config: ChartConfig) -> RenderedChart:
    y = _first_y(config)
    picked = rows[:PIE_SLICE_LIMIT]
    colors = palette_colors(len(picked))
    slices = []
    # One slice per row; duplicate category labels are not merged.
    # Slices take palette colors by position, whatever the series count.
    for i, r in enumerate(picked):
        value = coerce_number(r.get(y)) if y is not None else None
        slices.append(
            {
                "name": display_string(r.get(config.x_axis)),
                "value": value if value is not None else 0.0,
                "color": colors[i],
            }
        )
    return RenderedChart(
        chart_type=chart_type,
        x_key=config.x_axis,
        series=[SeriesSpec(key=y, color=None)] if y is not None else [],
        data=slices,
        show_legend=config.show_legend,
        show_grid=config.show_grid,
    )


_MAPPERS: Dict[str, Callable[[str, Sequence[Row], ChartConfig], RenderedChart]] = {
    "bar": _cartesian,
    "line": _cartesian,
    "area": _cartesian,
    "scatter": _scatter,
    "pie": _pie,
}


def to_series(chart_type: str, rows: Sequence[Row], config: ChartConfig) -> RenderedChart:
    if chart_type not in _MAPPERS:
        raise ValidationError(f"Unknown chart type: {chart_type}", details=[{"field": "type", "allowed": list(CHART_TYPES)}])
    return _MAPPERS[chart_type](chart_type, list(rows[:RENDER_ROW_LIMIT]), config)

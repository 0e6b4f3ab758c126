from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from core.errors import ValidationError
from core.models import ChartConfig

CHART_PALETTE = (
    "hsl(var(--chart-1))",
    "hsl(var(--chart-2))",
    "hsl(var(--chart-3))",
    "hsl(var(--chart-4))",
    "hsl(var(--chart-5))",
)


def palette_colors(series_count: int, palette: Sequence[str] = CHART_PALETTE) -> List[str]:
    """Series ``i`` gets ``palette[i mod len(palette)]``."""
    return [palette[i % len(palette)] for i in range(max(0, series_count))]


def _clean_names(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    return [str(v) for v in values if v is not None and str(v).strip()]


def build_chart_config(
    x_axis: Optional[str],
    y_axis: Optional[Iterable[object]],
    *,
    columns: Optional[Sequence[str]] = None,
    colors: Optional[Iterable[object]] = None,
    show_legend: bool = True,
    show_grid: bool = True,
) -> ChartConfig:
    """Validate axis selections and derive the chart's colors and display flags.

    ``columns`` is the dataset's column list when it is known; selections must
    then name existing columns. Everything else is an echo of the selections.
    """
    x = x_axis if x_axis and x_axis.strip() else ""
    ys = _clean_names(y_axis)

    details = []
    if not x:
        details.append({"field": "xAxis", "message": "x-axis column is required"})
    if not ys:
        details.append({"field": "yAxis", "message": "at least one y-axis column is required"})
    if columns is not None:
        known = set(columns)
        if x and x not in known:
            details.append({"field": "xAxis", "message": f"unknown column: {x}"})
        for y in ys:
            if y not in known:
                details.append({"field": "yAxis", "message": f"unknown column: {y}"})
    if details:
        raise ValidationError("Invalid chart configuration", details=details)

    chosen = _clean_names(colors)
    if chosen:
        chosen = palette_colors(len(ys), chosen) if len(chosen) < len(ys) else chosen
    else:
        chosen = palette_colors(len(ys))

    return ChartConfig(
        x_axis=x,
        y_axis=ys,
        colors=chosen,
        show_legend=bool(show_legend),
        show_grid=bool(show_grid),
    )

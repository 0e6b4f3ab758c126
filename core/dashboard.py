from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.errors import ValidationError
from core.models import GRID_COLUMNS, Chart, Dashboard, WidgetLayout
from core.render import RenderedChart, to_series
from core.store import MemoryStore

logger = logging.getLogger(__name__)

WIDGETS_PER_ROW = 3
WIDGET_WIDTH = 4
WIDGET_HEIGHT = 6


def default_layout(chart_ids: Sequence[str]) -> List[WidgetLayout]:
    """Reading-order grid: three 4x6 widgets per row."""
    return [
        WidgetLayout(
            i=chart_id,
            x=(idx % WIDGETS_PER_ROW) * WIDGET_WIDTH,
            y=(idx // WIDGETS_PER_ROW) * WIDGET_HEIGHT,
            w=WIDGET_WIDTH,
            h=WIDGET_HEIGHT,
        )
        for idx, chart_id in enumerate(chart_ids)
    ]


def resolve_layout(saved: Optional[Sequence[WidgetLayout]], chart_ids: Sequence[str]) -> List[WidgetLayout]:
    # A saved layout replaces the default entirely, even if it omits charts.
    if saved:
        return list(saved)
    return default_layout(chart_ids)


def validate_layout(layout: Iterable[WidgetLayout]) -> List[WidgetLayout]:
    out = list(layout)
    details = []
    for idx, w in enumerate(out):
        if not w.i:
            details.append({"field": f"layout[{idx}].i", "message": "chart id is required"})
        if not 0 <= w.x < GRID_COLUMNS:
            details.append({"field": f"layout[{idx}].x", "message": f"x must be in [0, {GRID_COLUMNS})"})
        if w.y < 0:
            details.append({"field": f"layout[{idx}].y", "message": "y must be >= 0"})
        if not 0 < w.w <= GRID_COLUMNS:
            details.append({"field": f"layout[{idx}].w", "message": f"w must be in (0, {GRID_COLUMNS}]"})
        if w.h <= 0:
            details.append({"field": f"layout[{idx}].h", "message": "h must be > 0"})
    if details:
        raise ValidationError("Invalid dashboard layout", details=details)
    return out


def referenced_dataset_ids(charts: Iterable[Chart]) -> List[str]:
    seen: Dict[str, None] = {}
    for c in charts:
        seen.setdefault(c.dataset_id, None)
    return list(seen)


def render_chart(chart: Chart, store: MemoryStore) -> Optional[RenderedChart]:
    """Render a stored chart against its dataset; None when the dataset is gone."""
    dataset = store.get_dataset(chart.dataset_id)
    if dataset is None:
        logger.debug("chart %s references missing dataset %s", chart.id, chart.dataset_id)
        return None
    return to_series(chart.type, dataset.rows, chart.config)


@dataclass(frozen=True)
class DashboardView:
    dashboard: Dashboard
    widgets: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"dashboard": self.dashboard.to_dict(), "widgets": self.widgets, "skipped": self.skipped}


def render_dashboard(dashboard: Dashboard, store: MemoryStore) -> DashboardView:
    """Render every widget whose chart and dataset still exist; skip the rest."""
    widgets: List[Dict[str, Any]] = []
    skipped: List[str] = []
    for entry in resolve_layout(dashboard.layout, dashboard.chart_ids):
        chart = store.get_chart(entry.i)
        rendered = render_chart(chart, store) if chart is not None else None
        if chart is None or rendered is None:
            skipped.append(entry.i)
            continue
        widgets.append({"layout": entry.to_dict(), "chart": chart.to_dict(), "render": rendered.to_dict()})
    return DashboardView(dashboard=dashboard, widgets=widgets, skipped=skipped)

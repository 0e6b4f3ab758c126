"""Process-lifetime keyed store for datasets, charts and dashboards.

The three collections are independent: ids held in one collection are not
checked against the others, so every cross-collection lookup can come back
empty and callers treat ``None`` as a normal outcome.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from core.models import (
    Chart,
    ChartConfig,
    ChartType,
    Dashboard,
    Dataset,
    WidgetLayout,
    new_id,
    utcnow,
)


class MemoryStore:
    def __init__(self) -> None:
        # FastAPI runs sync handlers on a thread pool.
        self._lock = threading.Lock()
        self._datasets: Dict[str, Dataset] = {}
        self._charts: Dict[str, Chart] = {}
        self._dashboards: Dict[str, Dashboard] = {}

    # Datasets

    def add_dataset(self, dataset: Dataset) -> Dataset:
        with self._lock:
            self._datasets[dataset.id] = dataset
        return dataset

    def get_dataset(self, dataset_id: str) -> Optional[Dataset]:
        with self._lock:
            return self._datasets.get(dataset_id)

    def list_datasets(self) -> List[Dataset]:
        with self._lock:
            return list(self._datasets.values())

    def delete_dataset(self, dataset_id: str) -> bool:
        with self._lock:
            return self._datasets.pop(dataset_id, None) is not None

    # Charts

    def create_chart(self, *, dataset_id: str, name: str, chart_type: ChartType, config: ChartConfig) -> Chart:
        chart = Chart(
            id=new_id(),
            dataset_id=dataset_id,
            name=name,
            type=chart_type,
            config=config,
            created_at=utcnow(),
        )
        with self._lock:
            self._charts[chart.id] = chart
        return chart

    def get_chart(self, chart_id: str) -> Optional[Chart]:
        with self._lock:
            return self._charts.get(chart_id)

    def list_charts(self, dataset_id: Optional[str] = None) -> List[Chart]:
        with self._lock:
            charts = list(self._charts.values())
        if dataset_id:
            charts = [c for c in charts if c.dataset_id == dataset_id]
        return charts

    def update_chart(self, chart_id: str, **changes: Any) -> Optional[Chart]:
        """Apply a partial patch (``dataset_id``, ``name``, ``type``, ``config``)."""
        with self._lock:
            chart = self._charts.get(chart_id)
            if chart is None:
                return None
            updated = replace(chart, **changes)
            self._charts[chart_id] = updated
            return updated

    def delete_chart(self, chart_id: str) -> bool:
        with self._lock:
            return self._charts.pop(chart_id, None) is not None

    # Dashboards

    def create_dashboard(
        self,
        *,
        name: str,
        layout: Sequence[WidgetLayout],
        chart_ids: Sequence[str],
        dataset_ids: Sequence[str],
    ) -> Dashboard:
        now = utcnow()
        dashboard = Dashboard(
            id=new_id(),
            name=name,
            layout=list(layout),
            chart_ids=list(chart_ids),
            dataset_ids=list(dataset_ids),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._dashboards[dashboard.id] = dashboard
        return dashboard

    def get_dashboard(self, dashboard_id: str) -> Optional[Dashboard]:
        with self._lock:
            return self._dashboards.get(dashboard_id)

    def list_dashboards(self) -> List[Dashboard]:
        with self._lock:
            return list(self._dashboards.values())

    def update_dashboard(self, dashboard_id: str, **changes: Any) -> Optional[Dashboard]:
        """Replace whole fields (``name``, ``layout``, ``chart_ids``, ``dataset_ids``)."""
        with self._lock:
            dashboard = self._dashboards.get(dashboard_id)
            if dashboard is None:
                return None
            updated = replace(dashboard, **changes, updated_at=utcnow())
            self._dashboards[dashboard_id] = updated
            return updated

    def delete_dashboard(self, dashboard_id: str) -> bool:
        with self._lock:
            return self._dashboards.pop(dashboard_id, None) is not None

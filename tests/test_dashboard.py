"""Tests for dashboard layout assembly and dangling-reference tolerance."""

from __future__ import annotations

import pytest

from core.chart_config import build_chart_config
from core.dashboard import (
    default_layout,
    referenced_dataset_ids,
    render_chart,
    render_dashboard,
    resolve_layout,
    validate_layout,
)
from core.errors import ValidationError
from core.ingest import ingest
from core.models import WidgetLayout

pytestmark = pytest.mark.unit


def test_default_layout_is_three_per_row() -> None:
    """Four charts fill one row of three and start a second row."""

    layout = default_layout(["c0", "c1", "c2", "c3"])

    assert [(w.x, w.y) for w in layout] == [(0, 0), (4, 0), (8, 0), (0, 6)]
    assert layout[3] == WidgetLayout(i="c3", x=0, y=6, w=4, h=6)


def test_saved_layout_supersedes_default() -> None:
    """A non-empty saved layout is used verbatim."""

    saved = [WidgetLayout(i="c1", x=6, y=2, w=6, h=3)]
    assert resolve_layout(saved, ["c0", "c1"]) == saved
    assert resolve_layout([], ["c0"]) == default_layout(["c0"])


@pytest.mark.parametrize(
    "widget",
    [
        WidgetLayout(i="c", x=12, y=0, w=4, h=6),
        WidgetLayout(i="c", x=-1, y=0, w=4, h=6),
        WidgetLayout(i="c", x=0, y=0, w=0, h=6),
        WidgetLayout(i="c", x=0, y=0, w=4, h=0),
        WidgetLayout(i="", x=0, y=0, w=4, h=6),
    ],
)
def test_invalid_widgets_are_rejected(widget: WidgetLayout) -> None:
    """Widgets must sit inside the 12-column grid with a positive size."""

    with pytest.raises(ValidationError):
        validate_layout([widget])


def test_referenced_dataset_ids_are_unique_in_chart_order(store) -> None:
    """Dataset ids are derived from charts without duplicates."""

    config = build_chart_config("a", ["b"])
    charts = [
        store.create_chart(dataset_id="d2", name="one", chart_type="bar", config=config),
        store.create_chart(dataset_id="d1", name="two", chart_type="bar", config=config),
        store.create_chart(dataset_id="d2", name="three", chart_type="pie", config=config),
    ]
    assert referenced_dataset_ids(charts) == ["d2", "d1"]


def test_deleting_dataset_keeps_chart_and_render_reports_no_data(store) -> None:
    """Charts outlive their dataset; rendering them yields no data."""

    dataset = store.add_dataset(ingest("d.csv", b"a,b\n1,2\n"))
    chart = store.create_chart(dataset_id=dataset.id, name="c", chart_type="bar", config=build_chart_config("a", ["b"]))

    assert render_chart(chart, store) is not None
    assert store.delete_dataset(dataset.id) is True
    assert store.get_chart(chart.id) == chart
    assert render_chart(chart, store) is None


def test_render_dashboard_skips_missing_charts_and_datasets(store) -> None:
    """Widgets whose chart or dataset is gone are skipped and reported."""

    kept = store.add_dataset(ingest("kept.csv", b"a,b\n1,2\n"))
    gone = store.add_dataset(ingest("gone.csv", b"a,b\n1,2\n"))
    config = build_chart_config("a", ["b"])
    c1 = store.create_chart(dataset_id=kept.id, name="ok", chart_type="line", config=config)
    c2 = store.create_chart(dataset_id=gone.id, name="orphan", chart_type="bar", config=config)
    dashboard = store.create_dashboard(
        name="Main",
        layout=[],
        chart_ids=[c1.id, c2.id, "deleted-chart"],
        dataset_ids=[kept.id, gone.id],
    )
    store.delete_dataset(gone.id)

    view = render_dashboard(dashboard, store)

    assert [w["chart"]["id"] for w in view.widgets] == [c1.id]
    assert view.widgets[0]["layout"] == {"i": c1.id, "x": 0, "y": 0, "w": 4, "h": 6}
    assert view.skipped == [c2.id, "deleted-chart"]

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from core.chart_config import CHART_PALETTE
from core.render import RenderedChart
from core.values import coerce_number

alt.data_transformers.disable_max_rows()

# Palette tokens are CSS variables for the web client; Vega needs real colors.
PALETTE_FALLBACK = dict(zip(CHART_PALETTE, ["#2563eb", "#16a34a", "#f59e0b", "#dc2626", "#7c3aed"]))


def resolve_color(token: Optional[str], index: int = 0) -> str:
    if not token:
        return PALETTE_FALLBACK[CHART_PALETTE[index % len(CHART_PALETTE)]]
    return PALETTE_FALLBACK.get(token, token)


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _legend(rendered: RenderedChart, title: Optional[str] = None) -> Optional[alt.Legend]:
    return alt.Legend(title=title) if rendered.show_legend else None


def _long_form(rendered: RenderedChart) -> pd.DataFrame:
    records: List[Dict[str, Any]] = []
    for order, row in enumerate(rendered.data):
        for s in rendered.series:
            records.append(
                {
                    "order": order,
                    "x": row.get(rendered.x_key),
                    "series": s.key,
                    "value": coerce_number(row.get(s.key)),
                }
            )
    return pd.DataFrame(records, columns=["order", "x", "series", "value"])


def _cartesian_chart(rendered: RenderedChart) -> alt.Chart:
    df = _long_form(rendered)
    keys = [s.key for s in rendered.series]
    base = alt.Chart(df)
    if rendered.chart_type == "bar":
        base = base.mark_bar()
    elif rendered.chart_type == "line":
        base = base.mark_line(point={"filled": True}, strokeWidth=2)
    else:
        base = base.mark_area(opacity=0.6, line=True)

    encoding = dict(
        x=alt.X("x:N", title=rendered.x_key, sort=None, axis=alt.Axis(grid=rendered.show_grid)),
        y=alt.Y("value:Q", title=", ".join(keys), stack=None, axis=alt.Axis(grid=rendered.show_grid)),
        color=alt.Color(
            "series:N",
            scale=alt.Scale(domain=keys, range=[resolve_color(s.color, i) for i, s in enumerate(rendered.series)]),
            legend=_legend(rendered),
        ),
        tooltip=[alt.Tooltip("x:N", title=rendered.x_key), alt.Tooltip("series:N"), alt.Tooltip("value:Q")],
    )
    if rendered.chart_type == "bar":
        encoding["xOffset"] = alt.XOffset("series:N", sort=keys)
    return base.encode(**encoding)


def _scatter_chart(rendered: RenderedChart) -> alt.Chart:
    y_key = rendered.series[0].key if rendered.series else "y"
    color = resolve_color(rendered.series[0].color if rendered.series else None)
    df = pd.DataFrame(
        [{"x": p["x"], "y": coerce_number(p["y"])} for p in rendered.data],
        columns=["x", "y"],
    )
    numeric_x = all(coerce_number(v) is not None for v in df["x"]) and not df.empty
    if numeric_x:
        df["x"] = [coerce_number(v) for v in df["x"]]
    return (
        alt.Chart(df)
        .mark_point(filled=True, color=color)
        .encode(
            x=alt.X("x:Q" if numeric_x else "x:N", title=rendered.x_key, axis=alt.Axis(grid=rendered.show_grid)),
            y=alt.Y("y:Q", title=y_key, axis=alt.Axis(grid=rendered.show_grid)),
            tooltip=[alt.Tooltip("x", title=rendered.x_key), alt.Tooltip("y:Q", title=y_key)],
        )
    )


def _pie_chart(rendered: RenderedChart) -> alt.Chart:
    df = pd.DataFrame(
        [{"slice": i, "name": s["name"], "value": s["value"]} for i, s in enumerate(rendered.data)],
        columns=["slice", "name", "value"],
    )
    slices = list(range(len(rendered.data)))
    colors = [resolve_color(s.get("color"), i) for i, s in enumerate(rendered.data)]
    # Legend entries are slice positions; label them with the category instead.
    labels = f"{json.dumps(df['name'].tolist())}[datum.value]"
    legend = alt.Legend(title=rendered.x_key, labelExpr=labels) if rendered.show_legend else None
    # Color keys on the slice position so repeated labels still get distinct colors.
    return (
        alt.Chart(df)
        .mark_arc(outerRadius=80)
        .encode(
            theta=alt.Theta("value:Q", stack=True),
            color=alt.Color(
                "slice:N",
                scale=alt.Scale(domain=slices, range=colors) if colors else alt.Undefined,
                legend=legend,
            ),
            order=alt.Order("slice:Q"),
            tooltip=[alt.Tooltip("name:N", title=rendered.x_key), alt.Tooltip("value:Q")],
        )
    )


def build_altair_chart(rendered: RenderedChart) -> alt.Chart:
    if rendered.chart_type == "scatter":
        return _scatter_chart(rendered)
    if rendered.chart_type == "pie":
        return _pie_chart(rendered)
    return _cartesian_chart(rendered)


def rendered_to_vega(rendered: RenderedChart) -> Dict[str, Any]:
    return to_vega_spec(build_altair_chart(rendered))

import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Dict, List, Optional

from core.chart_config import build_chart_config
from core.charts import build_altair_chart
from core.dashboard import referenced_dataset_ids, render_chart, resolve_layout
from core.errors import DataDashError
from core.ingest import ingest
from core.models import CHART_TYPES, Chart, Dataset, WidgetLayout
from core.preview import preview_rows
from core.render import to_series
from core.statistics import compute_statistics
from core.store import MemoryStore

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, dataset: Optional[Dataset]):
    inject_base_styles()
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )
    if dataset is not None:
        chips = [f"Dataset: {dataset.name}", f"{dataset.row_count:,} rows", f"{len(dataset.columns)} columns"]
        st.markdown("".join(f"<span class='chip'>{c}</span> " for c in chips), unsafe_allow_html=True)


def get_store() -> MemoryStore:
    if "store" not in st.session_state:
        st.session_state["store"] = MemoryStore()
    return st.session_state["store"]


def current_dataset(store: MemoryStore) -> Optional[Dataset]:
    dataset_id = st.session_state.get("dataset_id")
    return store.get_dataset(dataset_id) if dataset_id else None


def chart_for(chart: Chart, store: MemoryStore) -> Optional[alt.Chart]:
    rendered = render_chart(chart, store)
    return build_altair_chart(rendered) if rendered is not None else None


# ---------- Pages ----------
def render_data_page(store: MemoryStore):
    dataset = current_dataset(store)
    render_page_header("Data", "Home / Data", dataset)
    if dataset is None:
        st.info("Upload a CSV or Excel file from the sidebar to get started.")
        return

    stats = compute_statistics(dataset.rows, dataset.columns)
    cols = st.columns(4)
    cols[0].metric("Rows", f"{stats['totalRows']:,}")
    cols[1].metric("Columns", stats["totalColumns"])
    cols[2].metric("Numeric columns", stats["numericColumns"])
    cols[3].metric("Cells", f"{stats['totalCells']:,}")
    if stats["calculations"]:
        with card("Numeric summary"):
            st.dataframe(pd.DataFrame(stats["calculations"]), hide_index=True, use_container_width=True)

    with card("Preview"):
        c1, c2, c3 = st.columns([4, 2, 1])
        query = c1.text_input("Filter data", "", placeholder="Filter data...")
        sort_column = c2.selectbox("Sort by", ["(none)"] + dataset.column_names)
        direction = c3.radio("Order", ["asc", "desc"], horizontal=True)
        preview = preview_rows(
            dataset.rows,
            dataset.columns,
            query=query,
            sort_column=None if sort_column == "(none)" else sort_column,
            direction=direction,
        )
        st.caption(" · ".join(f"{c.name} ({c.type})" for c in dataset.columns))
        st.dataframe(pd.DataFrame(preview.rows, columns=dataset.column_names), hide_index=True, use_container_width=True)
        if preview.truncated:
            st.caption(f"Showing first {len(preview.rows)} rows of {preview.total}")


def render_chart_builder_page(store: MemoryStore):
    dataset = current_dataset(store)
    render_page_header("Chart Builder", "Home / Charts", dataset)
    if dataset is None:
        st.info("Upload a dataset before building charts.")
        return

    left, right = st.columns([1, 2])
    with left:
        chart_type = st.selectbox("Chart type", list(CHART_TYPES))
        x_axis = st.selectbox("X axis", dataset.column_names)
        y_axis = st.multiselect("Y axis", dataset.column_names, key="builder_y")
        name = st.text_input("Chart name", "")

    config = build_chart_config(x_axis, y_axis, columns=dataset.column_names) if x_axis and y_axis else None

    with right:
        if config is None:
            st.info("Select an x-axis column and at least one y-axis column.")
        else:
            if chart_type in ("scatter", "pie") and len(config.y_axis) > 1:
                st.caption(f"{chart_type.title()} charts use only the first y-axis column ({config.y_axis[0]}).")
            st.altair_chart(build_altair_chart(to_series(chart_type, dataset.rows, config)), use_container_width=True)

    if left.button("Save chart", disabled=config is None or not name.strip()):
        chart = store.create_chart(dataset_id=dataset.id, name=name.strip(), chart_type=chart_type, config=config)
        st.success(f"Saved chart {chart.name}")

    charts = store.list_charts(dataset.id)
    if charts:
        with card("Saved charts"):
            for chart in charts:
                c1, c2 = st.columns([5, 1])
                c1.write(f"**{chart.name}** · {chart.type} · x={chart.config.x_axis}, y={', '.join(chart.config.y_axis)}")
                if c2.button("Delete", key=f"delete_{chart.id}"):
                    store.delete_chart(chart.id)
                    st.rerun()


def render_grid(layout: List[WidgetLayout], charts: Dict[str, Chart], store: MemoryStore):
    rows: Dict[int, List[WidgetLayout]] = {}
    for widget in layout:
        rows.setdefault(widget.y, []).append(widget)
    for y in sorted(rows):
        widgets = sorted(rows[y], key=lambda w: w.x)
        cols = st.columns([w.w for w in widgets])
        for col, widget in zip(cols, widgets):
            chart = charts.get(widget.i)
            plot = chart_for(chart, store) if chart is not None else None
            # Charts or datasets deleted since the layout was saved are skipped.
            if plot is None:
                continue
            with col:
                st.markdown(f"**{chart.name}**")
                st.altair_chart(plot.properties(height=widget.h * 40), use_container_width=True)


def render_dashboard_page(store: MemoryStore):
    render_page_header("Dashboard", "Home / Dashboard", current_dataset(store))
    charts = {c.id: c for c in store.list_charts()}
    if not charts:
        st.info("Save a chart to add it to the dashboard.")
        return

    saved_layout = st.session_state.get("dashboard_layout") or []
    layout = resolve_layout(saved_layout, list(charts))
    render_grid(layout, charts, store)

    st.markdown("---")
    c1, c2 = st.columns(2)
    with c1:
        dashboard_name = st.text_input("Dashboard name", "")
        if st.button("Save dashboard", disabled=not dashboard_name.strip()):
            dashboard = store.create_dashboard(
                name=dashboard_name.strip(),
                layout=layout,
                chart_ids=list(charts),
                dataset_ids=referenced_dataset_ids(charts.values()),
            )
            st.success(f"Saved dashboard {dashboard.name}")
    with c2:
        dashboards = store.list_dashboards()
        if dashboards:
            options = {d.name: d for d in dashboards}
            chosen = st.selectbox("Load dashboard", list(options))
            if st.button("Load"):
                dashboard = options[chosen]
                st.session_state["dashboard_layout"] = dashboard.layout
                for dataset_id in dashboard.dataset_ids:
                    if store.get_dataset(dataset_id) is not None:
                        st.session_state["dataset_id"] = dataset_id
                        break
                st.rerun()


# ---------- UI setup ----------
st.set_page_config(page_title="DataDash", layout="wide")
inject_base_styles()
st.title("DataDash")
st.caption("Upload a table, explore it, build charts and arrange them on a dashboard.")

store = get_store()

with st.sidebar:
    st.markdown("### Upload")
    uploaded = st.file_uploader("CSV or Excel file", type=["csv", "xlsx", "xls"])
    if uploaded is not None and st.session_state.get("_last_upload") != uploaded.file_id:
        st.session_state["_last_upload"] = uploaded.file_id
        try:
            dataset = store.add_dataset(ingest(uploaded.name, uploaded.getvalue()))
            st.session_state["dataset_id"] = dataset.id
            st.success(f"{dataset.name}: {dataset.row_count:,} rows")
        except DataDashError as exc:
            st.error(exc.message)

    datasets = store.list_datasets()
    if datasets:
        st.markdown("### Datasets")
        ids = [d.id for d in datasets]
        current = st.session_state.get("dataset_id")
        index = ids.index(current) if current in ids else 0
        chosen = st.selectbox("Active dataset", ids, index=index, format_func=lambda i: store.get_dataset(i).name)
        st.session_state["dataset_id"] = chosen

    st.markdown("---")
    nav_choice = st.radio("Navigate", ["Data", "Chart Builder", "Dashboard"], index=0)

if nav_choice == "Data":
    render_data_page(store)
elif nav_choice == "Chart Builder":
    render_chart_builder_page(store)
else:
    render_dashboard_page(store)

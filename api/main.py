from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import (
    ChartConfigModel,
    ChartCreateModel,
    ChartUpdateModel,
    DashboardCreateModel,
    DashboardUpdateModel,
    DatasetCreateModel,
    WidgetLayoutModel,
)
from core.chart_config import build_chart_config
from core.charts import rendered_to_vega
from core.config import Settings, load_settings
from core.dashboard import (
    referenced_dataset_ids,
    render_chart,
    render_dashboard,
    resolve_layout,
    validate_layout,
)
from core.errors import DataDashError, NotFound, PayloadTooLarge, ValidationError
from core.inference import describe_columns
from core.ingest import ingest
from core.models import ChartConfig, Dataset, WidgetLayout, new_id, utcnow
from core.preview import preview_rows
from core.statistics import compute_statistics
from core.store import MemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(status_code: int, message: str, details: Optional[List[Dict[str, Any]]] = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def _typed_error(exc: DataDashError) -> JSONResponse:
    details = exc.details if isinstance(exc, ValidationError) else None
    return _error(exc.status_code, exc.message, details)


def get_store(request: Request) -> MemoryStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _config_from_model(model: ChartConfigModel, dataset: Optional[Dataset]) -> ChartConfig:
    # Selections are checked against the dataset's columns only when it still exists.
    return build_chart_config(
        model.x_axis,
        model.y_axis,
        columns=dataset.column_names if dataset is not None else None,
        colors=model.colors,
        show_legend=model.show_legend,
        show_grid=model.show_grid,
    )


def _layout_from_models(models: List[WidgetLayoutModel]) -> List[WidgetLayout]:
    return validate_layout(m.to_widget() for m in models)


def _dataset_ids_for(store: MemoryStore, chart_ids: List[str]) -> List[str]:
    charts = [c for c in (store.get_chart(cid) for cid in chart_ids) if c is not None]
    return referenced_dataset_ids(charts)


# Datasets


@router.post("/upload")
def upload(
    file: Optional[UploadFile] = File(default=None),
    store: MemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if file is None or not file.filename:
        return _error(400, "No file uploaded")
    try:
        content = file.file.read()
        if len(content) > settings.max_upload_bytes:
            raise PayloadTooLarge(f"File exceeds {settings.max_upload_mb} MB")
        dataset = ingest(file.filename, content)
        store.add_dataset(dataset)
        return _json(dataset.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("upload failed")
        return _error(500, "Failed to process file")


@router.post("/datasets")
def create_dataset(payload: DatasetCreateModel, store: MemoryStore = Depends(get_store)):
    try:
        columns = [c.to_column() for c in payload.columns] or describe_columns(payload.data)
        dataset = Dataset(
            id=new_id(),
            name=payload.name,
            file_name=payload.file_name,
            rows=payload.data,
            columns=columns,
            row_count=len(payload.data),
            uploaded_at=utcnow(),
        )
        store.add_dataset(dataset)
        return _json(dataset.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("create_dataset failed")
        return _error(500, "Failed to create dataset")


@router.get("/datasets")
def list_datasets(store: MemoryStore = Depends(get_store)):
    try:
        return _json([d.to_dict() for d in store.list_datasets()])
    except Exception:
        logger.exception("list_datasets failed")
        return _error(500, "Failed to fetch datasets")


@router.get("/datasets/{dataset_id}")
def get_dataset(dataset_id: str, store: MemoryStore = Depends(get_store)):
    try:
        dataset = store.get_dataset(dataset_id)
        if dataset is None:
            raise NotFound("Dataset not found")
        return _json(dataset.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("get_dataset failed")
        return _error(500, "Failed to fetch dataset")


@router.delete("/datasets/{dataset_id}")
def delete_dataset(dataset_id: str, store: MemoryStore = Depends(get_store)):
    try:
        if not store.delete_dataset(dataset_id):
            raise NotFound("Dataset not found")
        return _json({"success": True})
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("delete_dataset failed")
        return _error(500, "Failed to delete dataset")


@router.get("/datasets/{dataset_id}/preview")
def dataset_preview(
    dataset_id: str,
    q: str = Query(default=""),
    sort: Optional[str] = Query(default=None),
    direction: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=10_000),
    store: MemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    try:
        dataset = store.get_dataset(dataset_id)
        if dataset is None:
            raise NotFound("Dataset not found")
        preview = preview_rows(
            dataset.rows,
            dataset.columns,
            query=q,
            sort_column=sort or None,
            direction=direction or None,
            limit=limit or settings.preview_limit,
        )
        return _json({"columns": [c.to_dict() for c in dataset.columns], **preview.to_dict()})
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("dataset_preview failed")
        return _error(500, "Failed to build preview")


@router.get("/datasets/{dataset_id}/statistics")
def dataset_statistics(dataset_id: str, store: MemoryStore = Depends(get_store)):
    try:
        dataset = store.get_dataset(dataset_id)
        if dataset is None:
            raise NotFound("Dataset not found")
        return _json(compute_statistics(dataset.rows, dataset.columns))
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("dataset_statistics failed")
        return _error(500, "Failed to compute statistics")


# Charts


@router.post("/charts")
def create_chart(payload: ChartCreateModel, store: MemoryStore = Depends(get_store)):
    try:
        config = _config_from_model(payload.config, store.get_dataset(payload.dataset_id))
        chart = store.create_chart(
            dataset_id=payload.dataset_id,
            name=payload.name,
            chart_type=payload.type,
            config=config,
        )
        return _json(chart.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("create_chart failed")
        return _error(500, "Failed to create chart")


@router.get("/charts")
def list_charts(dataset_id: Optional[str] = Query(default=None, alias="datasetId"), store: MemoryStore = Depends(get_store)):
    try:
        return _json([c.to_dict() for c in store.list_charts(dataset_id)])
    except Exception:
        logger.exception("list_charts failed")
        return _error(500, "Failed to fetch charts")


@router.get("/charts/{chart_id}")
def get_chart(chart_id: str, store: MemoryStore = Depends(get_store)):
    try:
        chart = store.get_chart(chart_id)
        if chart is None:
            raise NotFound("Chart not found")
        return _json(chart.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("get_chart failed")
        return _error(500, "Failed to fetch chart")


@router.put("/charts/{chart_id}")
def update_chart(chart_id: str, payload: ChartUpdateModel, store: MemoryStore = Depends(get_store)):
    try:
        chart = store.get_chart(chart_id)
        if chart is None:
            raise NotFound("Chart not found")
        changes: Dict[str, Any] = {}
        if payload.dataset_id is not None:
            changes["dataset_id"] = payload.dataset_id
        if payload.name is not None:
            changes["name"] = payload.name
        if payload.type is not None:
            changes["type"] = payload.type
        if payload.config is not None:
            dataset = store.get_dataset(changes.get("dataset_id", chart.dataset_id))
            changes["config"] = _config_from_model(payload.config, dataset)
        updated = store.update_chart(chart_id, **changes)
        if updated is None:
            raise NotFound("Chart not found")
        return _json(updated.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("update_chart failed")
        return _error(500, "Failed to update chart")


@router.delete("/charts/{chart_id}")
def delete_chart(chart_id: str, store: MemoryStore = Depends(get_store)):
    try:
        if not store.delete_chart(chart_id):
            raise NotFound("Chart not found")
        return _json({"success": True})
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("delete_chart failed")
        return _error(500, "Failed to delete chart")


@router.get("/charts/{chart_id}/render")
def chart_render(chart_id: str, store: MemoryStore = Depends(get_store)):
    try:
        chart = store.get_chart(chart_id)
        if chart is None:
            raise NotFound("Chart not found")
        rendered = render_chart(chart, store)
        if rendered is None:
            return _json({"chartId": chart.id, "hasData": False, "render": None, "vega": None})
        return _json({"chartId": chart.id, "hasData": True, "render": rendered.to_dict(), "vega": rendered_to_vega(rendered)})
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("chart_render failed")
        return _error(500, "Failed to render chart")


# Dashboards


@router.post("/dashboards")
def create_dashboard(payload: DashboardCreateModel, store: MemoryStore = Depends(get_store)):
    try:
        layout = _layout_from_models(payload.layout)
        chart_ids = payload.chart_ids or [w.i for w in layout]
        dashboard = store.create_dashboard(
            name=payload.name,
            layout=resolve_layout(layout, chart_ids),
            chart_ids=chart_ids,
            dataset_ids=payload.dataset_ids or _dataset_ids_for(store, chart_ids),
        )
        return _json(dashboard.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("create_dashboard failed")
        return _error(500, "Failed to create dashboard")


@router.get("/dashboards")
def list_dashboards(store: MemoryStore = Depends(get_store)):
    try:
        return _json([d.to_dict() for d in store.list_dashboards()])
    except Exception:
        logger.exception("list_dashboards failed")
        return _error(500, "Failed to fetch dashboards")


@router.get("/dashboards/{dashboard_id}")
def get_dashboard(dashboard_id: str, store: MemoryStore = Depends(get_store)):
    try:
        dashboard = store.get_dashboard(dashboard_id)
        if dashboard is None:
            raise NotFound("Dashboard not found")
        return _json(dashboard.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("get_dashboard failed")
        return _error(500, "Failed to fetch dashboard")


@router.put("/dashboards/{dashboard_id}")
def update_dashboard(dashboard_id: str, payload: DashboardUpdateModel, store: MemoryStore = Depends(get_store)):
    try:
        changes: Dict[str, Any] = {}
        if payload.name is not None:
            changes["name"] = payload.name
        chart_ids = payload.chart_ids
        if payload.layout is not None:
            changes["layout"] = _layout_from_models(payload.layout)
            if chart_ids is None and changes["layout"]:
                chart_ids = [w.i for w in changes["layout"]]
        if chart_ids is not None:
            changes["chart_ids"] = chart_ids
            if payload.dataset_ids is None:
                changes["dataset_ids"] = _dataset_ids_for(store, chart_ids)
        if payload.dataset_ids is not None:
            changes["dataset_ids"] = payload.dataset_ids
        dashboard = store.update_dashboard(dashboard_id, **changes)
        if dashboard is None:
            raise NotFound("Dashboard not found")
        return _json(dashboard.to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("update_dashboard failed")
        return _error(500, "Failed to update dashboard")


@router.delete("/dashboards/{dashboard_id}")
def delete_dashboard(dashboard_id: str, store: MemoryStore = Depends(get_store)):
    try:
        if not store.delete_dashboard(dashboard_id):
            raise NotFound("Dashboard not found")
        return _json({"success": True})
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("delete_dashboard failed")
        return _error(500, "Failed to delete dashboard")


@router.get("/dashboards/{dashboard_id}/render")
def dashboard_render(dashboard_id: str, store: MemoryStore = Depends(get_store)):
    try:
        dashboard = store.get_dashboard(dashboard_id)
        if dashboard is None:
            raise NotFound("Dashboard not found")
        return _json(render_dashboard(dashboard, store).to_dict())
    except DataDashError as exc:
        return _typed_error(exc)
    except Exception:
        logger.exception("dashboard_render failed")
        return _error(500, "Failed to render dashboard")


def create_app(store: Optional[MemoryStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="DataDash API", version="0.1.0")
    app.state.store = store if store is not None else MemoryStore()
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
        return _error(400, "Invalid request data", details)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    settings = load_settings()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

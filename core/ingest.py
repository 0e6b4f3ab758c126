from __future__ import annotations

import io
import logging
import re
from typing import Any, Dict, List, Optional

import pandas as pd

from core.errors import EmptyData, ProcessingFailed, UnsupportedFormat
from core.inference import describe_columns
from core.models import Dataset, new_id, utcnow
from core.values import is_missing, to_json_scalar

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {"csv"}
SPREADSHEET_EXTENSIONS = {"xlsx", "xls"}
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS | SPREADSHEET_EXTENSIONS


def file_extension(file_name: str) -> Optional[str]:
    if "." not in file_name:
        return None
    return file_name.rsplit(".", 1)[1].lower()


def dataset_name(file_name: str) -> str:
    """File name with its last extension stripped (``sales.2024.csv`` -> ``sales.2024``)."""
    return re.sub(r"\.[^/.]+$", "", file_name)


def _keep_row(fields: List[str]) -> List[str]:
    # Rows wider than the header keep their leading cells; pandas drops the rest.
    return fields


def read_csv_rows(content: bytes) -> List[Dict[str, Any]]:
    """Header-row CSV parse; every value stays the raw string from the file."""
    try:
        df = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
            engine="python",
            on_bad_lines=_keep_row,
        )
    except pd.errors.EmptyDataError:
        return []
    df.columns = [str(c) for c in df.columns]
    # Cells missing from short rows come back as NaN; keep the key with a null.
    return [{k: to_json_scalar(v) for k, v in rec.items()} for rec in df.to_dict(orient="records")]


def _spreadsheet_cell(value: Any) -> Any:
    out = to_json_scalar(value)
    if isinstance(out, float) and out.is_integer():
        return int(out)
    return out


def read_spreadsheet_rows(content: bytes) -> List[Dict[str, Any]]:
    """First sheet only, with native cell typing; blank cells are left out of the row."""
    df = pd.read_excel(io.BytesIO(content), sheet_name=0)
    df = df.dropna(how="all")
    df.columns = [str(c) for c in df.columns]
    rows: List[Dict[str, Any]] = []
    for rec in df.to_dict(orient="records"):
        rows.append({k: _spreadsheet_cell(v) for k, v in rec.items() if not is_missing(v)})
    return rows


def parse_rows(file_name: str, content: bytes) -> List[Dict[str, Any]]:
    ext = file_extension(file_name)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormat()
    try:
        if ext in CSV_EXTENSIONS:
            return read_csv_rows(content)
        return read_spreadsheet_rows(content)
    except Exception as exc:
        logger.warning("could not parse %s: %s", file_name, exc)
        raise ProcessingFailed() from exc


def ingest(file_name: str, content: bytes) -> Dataset:
    """Parse an uploaded file into a Dataset with inferred column types.

    The returned Dataset is not stored; callers insert it only after this
    returns, so a failed upload never leaves a partial record behind.
    """
    rows = parse_rows(file_name, content)
    if not rows:
        raise EmptyData()

    columns = describe_columns(rows)
    logger.info(
        "ingested %s: %d rows, columns=%s",
        file_name,
        len(rows),
        [f"{c.name}:{c.type}" for c in columns],
    )
    return Dataset(
        id=new_id(),
        name=dataset_name(file_name),
        file_name=file_name,
        rows=rows,
        columns=columns,
        row_count=len(rows),
        uploaded_at=utcnow(),
    )

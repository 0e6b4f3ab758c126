"""Pytest fixtures shared across core and API tests."""

from __future__ import annotations

import io
from typing import Any, Dict, List

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Settings
from core.store import MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    """Return an empty in-memory store."""

    return MemoryStore()


@pytest.fixture
def client(store: MemoryStore) -> TestClient:
    """Return a test client for an app bound to the ``store`` fixture."""

    return TestClient(create_app(store=store, settings=Settings(max_upload_mb=1)))


@pytest.fixture
def sales_rows() -> List[Dict[str, Any]]:
    """Return a small CSV-shaped table (values as raw strings)."""

    return [
        {"region": "North", "month": "2024-01-01", "revenue": "120", "units": "4"},
        {"region": "South", "month": "2024-02-01", "revenue": "80", "units": "2"},
        {"region": "North", "month": "2024-03-01", "revenue": "n/a", "units": "7"},
        {"region": "East", "month": "2024-04-01", "revenue": "200", "units": ""},
    ]


@pytest.fixture
def make_xlsx():
    """Return a helper that writes DataFrames as sheets of an in-memory workbook."""

    return _workbook_bytes


def _workbook_bytes(frames: Dict[str, pd.DataFrame]) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet, df in frames.items():
            df.to_excel(writer, sheet_name=sheet, index=False)
    return buf.getvalue()

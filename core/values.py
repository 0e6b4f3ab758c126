"""Scalar helpers for loosely-typed row values.

Rows arrive from CSV parsing as strings and from spreadsheets as native
numbers/bools/strings, with ``None`` for missing cells. Everything that needs a
number, a date or a label goes through the coercions below instead of relying on
implicit conversion.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

import numpy as np
import pandas as pd


class ScalarKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATE_STRING = "date_string"
    STRING = "string"


def is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT or value is pd.NA


def is_blank(value: object) -> bool:
    """True for values the type inferencer never samples (null or empty string)."""
    return is_missing(value) or (isinstance(value, str) and value == "")


def coerce_number(value: object) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if is_missing(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return float(bool(value))
    if isinstance(value, str):
        s = value.strip()
        # float() accepts digit separators; "1_000" is text here.
        if not s or "_" in s:
            return None
        value = s
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


_DIGIT_RUN = re.compile(r"\d+")


def _looks_like_date(text: str) -> bool:
    # A year-length run or two digit groups; "today" and "1st" have neither.
    runs = _DIGIT_RUN.findall(text)
    return len(runs) >= 2 or any(len(r) >= 4 for r in runs)


def parse_date(value: object) -> Optional[pd.Timestamp]:
    """Parse ``value`` as a calendar date; None when it is not a valid instant."""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, str) and not _looks_like_date(value):
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts


def display_string(value: object) -> str:
    if is_missing(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def classify_scalar(value: object) -> ScalarKind:
    if is_missing(value):
        return ScalarKind.NULL
    if isinstance(value, (bool, np.bool_)):
        return ScalarKind.BOOLEAN
    if isinstance(value, (int, float, np.integer, np.floating)):
        return ScalarKind.NUMBER
    if isinstance(value, str) and parse_date(value) is not None and coerce_number(value) is None:
        return ScalarKind.DATE_STRING
    return ScalarKind.STRING


def to_json_scalar(value: Any) -> Any:
    """Normalize a parsed cell (pandas/numpy/datetime) to a JSON-friendly scalar."""
    if is_missing(value):
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    return value

from __future__ import annotations

from typing import Any, Dict, List, Optional


class DataDashError(Exception):
    """Base class for typed outcomes raised by core functions.

    The API layer maps these to responses using ``status_code`` and ``message``;
    nothing else about the exception is sent to clients.
    """

    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DataDashError):
    status_code = 400
    default_message = "Invalid request data"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.details = details or []


class NotFound(DataDashError):
    status_code = 404
    default_message = "Not found"


class UnsupportedFormat(DataDashError):
    status_code = 400
    default_message = "Unsupported file format"


class EmptyData(DataDashError):
    status_code = 400
    default_message = "No data found in file"


class ProcessingFailed(DataDashError):
    status_code = 500
    default_message = "Failed to process file"


class PayloadTooLarge(DataDashError):
    status_code = 413
    default_message = "File too large"

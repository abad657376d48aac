"""
api/envelope.py -- The one wire shape every response uses.

Success:
    {"status": 200, "message": "...", "data": ..., "pagination": {...}}
    data and pagination are omitted when there is nothing to send.

Failure:
    {"status": 400, "errors": [{"field": "price", "message": "..."}]}  field errors attached
    {"status": 404, "error": "Car not found"}                           otherwise

status always repeats the HTTP status code so clients that only see the
body (logs, queues) can still tell outcomes apart.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.errors import AppError, FieldError


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def success(
    status_code: int,
    message: str,
    data: Any = None,
    pagination: Optional[BaseModel] = None,
) -> JSONResponse:
    content: dict[str, Any] = {"status": status_code, "message": message}
    if data is not None:
        content["data"] = _dump(data)
    if pagination is not None:
        content["pagination"] = _dump(pagination)
    return JSONResponse(status_code=status_code, content=content)


def error(status_code: int, message: str, errors: Optional[list[FieldError]] = None) -> JSONResponse:
    """Build a failure envelope. A non-empty errors list replaces message."""
    content: dict[str, Any] = {"status": status_code}
    if errors:
        content["errors"] = [{"field": e.field, "message": e.message} for e in errors]
    else:
        content["error"] = message
    return JSONResponse(status_code=status_code, content=content)


def failure(exc: AppError) -> JSONResponse:
    return error(exc.status_code, exc.message, exc.errors)

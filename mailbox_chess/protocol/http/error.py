from __future__ import annotations

import logging
from typing import Any, Dict, cast

from fastapi import Request
from fastapi import HTTPException as FastAPIHTTPException
from fastapi.responses import JSONResponse
from starlette import status
from fastapi.exceptions import RequestValidationError

from ...engine.errors import (
    EmptyHistory,
    HistoryOverflow,
    IllegalMove,
    MissingKing,
    ParseError,
    UnsupportedMove,
)


logger = logging.getLogger(__name__)


# Engine exception -> (HTTP status, envelope code)
ENGINE_ERROR_STATUS = (
    (ParseError, status.HTTP_400_BAD_REQUEST, "bad_request"),
    (IllegalMove, status.HTTP_400_BAD_REQUEST, "illegal_move"),
    (EmptyHistory, status.HTTP_400_BAD_REQUEST, "bad_request"),
    (MissingKing, status.HTTP_409_CONFLICT, "missing_king"),
    (HistoryOverflow, status.HTTP_409_CONFLICT, "history_full"),
    (UnsupportedMove, status.HTTP_501_NOT_IMPLEMENTED, "not_implemented"),
)


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: list[dict[str, str]] | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _render_http_exception(request_id: str, exc: FastAPIHTTPException) -> JSONResponse:
    status_code = exc.status_code
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        err_type=_status_to_type(status_code),
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    if isinstance(exc, FastAPIHTTPException):
        return _render_http_exception(request_id, exc)
    return await exception_handler(request, exc)


async def engine_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render engine errors that escaped an endpoint with their mapped status."""
    request_id = getattr(request.state, "request_id", "")
    for exc_type, status_code, code in ENGINE_ERROR_STATUS:
        if isinstance(exc, exc_type):
            logger.info(
                "engine error",
                extra={"request_id": request_id, "code": code, "detail": str(exc)},
            )
            payload = error_envelope(
                code=code,
                message=str(exc),
                err_type=_status_to_type(status_code),
                request_id=request_id,
            )
            return JSONResponse(status_code=status_code, content=payload)
    return await exception_handler(request, exc)


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    if isinstance(exc, FastAPIHTTPException):
        return _render_http_exception(request_id, exc)
    # Otherwise, treat as internal error and log it
    logger.exception("Unhandled exception", extra={"request_id": request_id})
    payload = error_envelope(
        code="internal_error",
        message="Internal Server Error",
        err_type="server_error",
        request_id=request_id,
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        msg = e.get("msg", "invalid value")
        typ = e.get("type", "value_error")
        errors.append({"field": loc, "code": typ, "message": msg})
    payload = error_envelope(
        code="unprocessable_entity",
        message="Validation error",
        err_type="client_error",
        request_id=request_id,
        field_errors=errors or None,
    )
    return JSONResponse(status_code=422, content=payload)


def _status_to_type(status_code: int) -> str:
    return "client_error" if 400 <= status_code < 500 else "server_error"


def _status_to_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "bad_request"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if status_code == 422:
        return "unprocessable_entity"
    if status_code == status.HTTP_501_NOT_IMPLEMENTED:
        return "not_implemented"
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vision_metadata.api.schemas_skill import ErrorBody, ErrorResponse


logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> Optional[str]:
    """
    RequestIdMiddleware sets request.state.request_id; fall back to the inbound header.
    """
    rid = getattr(getattr(request, "state", None), "request_id", None)
    if rid:
        return rid
    return request.headers.get("X-Request-Id")


def _error_response(status_code: int, code: str, message: str, request_id: Optional[str]) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, request_id=request_id))
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers={"X-Request-Id": request_id} if request_id else None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Normalize HTTP exceptions into the global error schema.
    detail may be {"code": ..., "message": ...} (route style) or a plain string.
    """
    code = "http_error"
    message = "Request failed"

    if isinstance(exc.detail, dict):
        code = str(exc.detail.get("code", code))
        message = str(exc.detail.get("message", message))
    elif isinstance(exc.detail, str):
        message = exc.detail

    if exc.status_code >= 500:
        logger.warning("request_failed status=%d code=%s message=%s", exc.status_code, code, message)

    return _error_response(exc.status_code, code, message, _get_request_id(request))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    422 with a short "loc: msg; loc: msg" summary.
    """
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", []) if x != "body")
        msg = err.get("msg", "Invalid value")
        parts.append(f"{loc}: {msg}" if loc else str(msg))

    message = "; ".join(parts) if parts else "Validation error"
    return _error_response(422, "validation_error", message, _get_request_id(request))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    return _error_response(500, "internal_error", "Internal server error", _get_request_id(request))

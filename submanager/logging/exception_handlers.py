# submanager/logging/exception_handlers.py
"""Map exceptions to ``{"error": ...}`` JSON responses.

Domain errors carry their own status and client-safe message. Anything
unexpected becomes a generic 500; its traceback goes to the server log and
the request log, never to the client.
"""

import json
import logging
import platform
import socket
import traceback
from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from submanager.core.config import settings
from submanager.core.exceptions import AppError, StorageError, Unauthorized
from submanager.logging.service import get_session_factory, write_request_log

logger = logging.getLogger(__name__)

HOSTNAME = socket.gethostname() or platform.node() or "unknown_host"
INTERNAL_ERROR = "Internal server error"


def _field_name(loc) -> str:
    """Dotted field path without the leading location (body, query, path)."""
    parts = [str(part) for part in loc]
    if parts and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(parts) or "body"


def validation_fields(errors) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for error in errors:
        fields.setdefault(_field_name(error.get("loc", ())), str(error.get("msg", "Invalid value")))
    return fields


def _record_failure(request: Request, status_code: int, details: Dict[str, Any]) -> None:
    write_request_log(
        get_session_factory(request.app),
        method=request.method,
        path=str(request.url.path),
        status_code=status_code,
        client_ip=request.client.host if request.client else None,
        response_body=json.dumps(details, default=str),
        user_agent=request.headers.get("user-agent"),
        hostname=HOSTNAME,
        application_id=settings.APPLICATION_ID,
    )


async def app_error_handler(request: Request, exc: AppError):
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, StorageError):
        logger.error("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with per-field messages."""
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "fields": validation_fields(exc.errors())},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Framework errors (unknown route, wrong method) in the same error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    logger.error("Response validation failed on %s %s: %s", request.method, request.url.path, exc.errors())
    _record_failure(request, 500, {"error": "Response validation failed", "details": exc.errors()})
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and log them to database"""
    error_traceback = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error("Unhandled %s on %s %s\n%s", type(exc).__name__, request.method, request.url.path, error_traceback)
    _record_failure(
        request,
        500,
        {"error": str(exc), "type": type(exc).__name__, "traceback": error_traceback},
    )
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})

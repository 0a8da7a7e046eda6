"""
Exception handlers for the FastAPI application.

Domain errors render into the standard error envelope; anything else is
logged with its traceback and answered with a generic 500.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import GuestWatchError

logger = logging.getLogger(__name__)


def _generate_request_id() -> str:
    """Generate a unique request ID for error tracking."""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"req_{timestamp}_{uuid4().hex[:8]}"


def error_body(
    message: str,
    error_code: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details or {},
        "request_id": request_id,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


async def guestwatch_exception_handler(request: Request, exc: GuestWatchError) -> JSONResponse:
    request_id = _generate_request_id()

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"API Exception [{request_id}]: {exc.error_code} - {exc.message} ({request.method} {request.url.path})")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, request_id, exc.details),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _generate_request_id()

    logger.error(
        f"Unhandled exception [{request_id}] on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", "INTERNAL_SERVER_ERROR", request_id),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GuestWatchError, guestwatch_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

"""
Error envelope untuk PIN Gate API.
Semua error keluar sebagai {"error": {...}} dengan Cache-Control: no-store.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.config import settings
from app.core.exceptions import PinGateException

logger = logging.getLogger("pingate.error")

NO_STORE = {"Cache-Control": "no-store"}


def build_error_body(
    request: Request,
    message: str,
    error_type: str,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Susun error envelope.

    request_id diambil dari request.state (diisi LoggingMiddleware) dan
    hanya ditambahkan jika ada, begitu juga details.
    """
    error: Dict[str, Any] = {
        "message": message,
        "type": error_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        error["request_id"] = request_id
    if details:
        error["details"] = details
    return {"error": error}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Menangkap exception yang lolos dari route handlers.

    Pesan exception non-PinGate hanya ditampilkan di debug mode.
    """

    def __init__(self, app: ASGIApp, debug: Optional[bool] = None):
        super().__init__(app)
        self.debug = settings.DEBUG if debug is None else debug

    def log_error(self, request: Request, error: Exception, status_code: int) -> None:
        summary = (
            f"{request.method} {request.url.path} -> {status_code} "
            f"{type(error).__name__}: {error} "
            f"(request_id={getattr(request.state, 'request_id', 'unknown')})"
        )
        if status_code >= 500:
            logger.error(summary, exc_info=error)
        else:
            logger.warning(summary)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return self.handle_exception(request, exc)

    def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        if isinstance(exc, PinGateException):
            status_code = exc.status_code
            body = build_error_body(request, exc.message, type(exc).__name__, exc.details)
        else:
            status_code = 500
            message = str(exc) if self.debug else "An internal server error occurred"
            body = build_error_body(request, message, "InternalServerError")

        self.log_error(request, exc, status_code)

        if self.debug:
            body["error"]["stack_trace"] = traceback.format_exception(
                type(exc), exc, exc.__traceback__
            )

        return JSONResponse(status_code=status_code, content=body, headers=NO_STORE)

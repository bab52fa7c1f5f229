"""
Access log middleware untuk PIN Gate API.
Satu baris JSON per request, dengan X-Request-ID di response.
"""

import json
import logging
import time
import uuid
from typing import Any, Callable, Dict, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger("pingate.access")

SENSITIVE_FIELDS = ("pin", "enrollment_digest", "authorization")
REDACTED = "[REDACTED]"


def redact_sensitive_data(data: Any, sensitive_fields: Iterable[str] = SENSITIVE_FIELDS) -> Any:
    """
    Ganti nilai PIN dan enrollment digest dengan placeholder.

    Key dicocokkan case-insensitive dan secara substring, jadi "new_pin"
    juga ikut disamarkan. Nested dict dan list ditelusuri.
    """
    if isinstance(data, dict):
        redacted = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if any(field in lowered for field in sensitive_fields):
                redacted[key] = REDACTED
            else:
                redacted[key] = redact_sensitive_data(value, sensitive_fields)
        return redacted
    if isinstance(data, list):
        return [redact_sensitive_data(item, sensitive_fields) for item in data]
    return data


def _level_for(response: Optional[Response]) -> int:
    if response is None or response.status_code >= 500:
        return logging.ERROR
    if response.status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log per request.

    Path yang diawali salah satu exclude_paths (default: health probes)
    dilewati tanpa request ID. Body hanya dicatat jika log_request_body aktif.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        exclude_paths: Optional[list] = None,
        max_body_size: int = 1024
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.exclude_paths = tuple(exclude_paths or ["/health"])
        self.max_body_size = max_body_size

    def is_excluded(self, path: str) -> bool:
        return path.startswith(self.exclude_paths)

    def describe_body(self, body: bytes) -> Optional[str]:
        """Body JSON yang sudah di-redact, atau placeholder."""
        if not body:
            return None
        if len(body) > self.max_body_size:
            return f"[Body too large: {len(body)} bytes]"
        try:
            parsed = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "[Non-JSON body]"
        return json.dumps(redact_sensitive_data(parsed))

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self.is_excluded(request.url.path):
            return await call_next(request)

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        entry: Dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        if self.log_request_body and request.method in ("POST", "PUT", "PATCH"):
            body = self.describe_body(await request.body())
            if body:
                entry["request_body"] = body

        response = None
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            entry["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            if response is not None:
                entry["status_code"] = response.status_code
            logger.log(_level_for(response), json.dumps(entry))

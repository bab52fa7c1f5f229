"""
Middleware package untuk PIN Gate API.
Berisi middleware untuk logging dan error handling.
"""

from app.middleware.logging import LoggingMiddleware, redact_sensitive_data
from app.middleware.error_handler import ErrorHandlerMiddleware, build_error_body

__all__ = [
    "LoggingMiddleware",
    "redact_sensitive_data",
    "ErrorHandlerMiddleware",
    "build_error_body"
]

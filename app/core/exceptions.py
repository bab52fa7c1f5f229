"""
Custom exceptions untuk PIN Gate API.
Semua custom exceptions harus inherit dari base exceptions ini.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from app.core.constants import MessageKey


class PinGateException(Exception):
    """Base exception untuk semua custom exceptions di PIN Gate API."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidCredentialFormatError(PinGateException):
    """Exception untuk PIN dengan format yang salah (ditolak sebelum verifikasi)."""

    def __init__(self, message: str = "Invalid credential format", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


class VerificationBackendFailure(PinGateException):
    """
    Exception untuk kegagalan storage/IO saat verifikasi.
    Tidak dihitung sebagai percobaan PIN yang salah.
    """

    def __init__(self, message: str = "Credential verification is temporarily unavailable", details: Optional[Dict[str, Any]] = None):
        details = {"message": MessageKey.VERIFICATION_BACKEND_ERROR, **(details or {})}
        super().__init__(message, status_code=503, details=details)


class StateStoreError(VerificationBackendFailure):
    """Exception untuk state store yang tidak bisa dibaca atau dikunci."""

    def __init__(self, message: str = "Authentication state store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class PolicyMisconfigurationError(PinGateException):
    """Exception untuk tabel threshold lockout yang tidak valid."""

    def __init__(self, message: str = "Invalid lockout policy configuration", errors: Optional[list] = None):
        details = {"policy_errors": errors} if errors else None
        super().__init__(message, status_code=500, details=details)


class LockedOutError(PinGateException):
    """Exception untuk operasi yang ditolak selama lockout aktif."""

    def __init__(self, message: str = "Too many incorrect attempts", locked_until: Optional[datetime] = None):
        details = {"message": MessageKey.LOCKED_OUT}
        if locked_until:
            details["locked_until"] = locked_until.isoformat()
        super().__init__(message, status_code=423, details=details)


class BiometryDisabledError(PinGateException):
    """Exception untuk biometric unlock yang tidak diaktifkan."""

    def __init__(self, message: str = "Biometric unlock is not enabled"):
        super().__init__(message, status_code=409, details={"biometry_enabled": False})


class BiometricAuthenticationError(PinGateException):
    """Exception untuk biometric unlock yang ditolak oleh platform."""

    def __init__(self, message: str = "Biometric authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class InvalidPINException(PinGateException):
    """Exception untuk PIN yang salah pada konfirmasi perubahan setting."""

    def __init__(self, message: str = "Incorrect PIN"):
        super().__init__(message, status_code=401)

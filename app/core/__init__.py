"""
Core module untuk PIN Gate API.
Berisi komponen inti aplikasi seperti konfigurasi, keamanan, exceptions, dan konstanta.
"""

from app.core.config import settings
from app.core.exceptions import (
    PinGateException,
    InvalidCredentialFormatError,
    VerificationBackendFailure,
    StateStoreError,
    PolicyMisconfigurationError,
    LockedOutError,
    BiometryDisabledError,
    BiometricAuthenticationError,
    InvalidPINException
)

__all__ = [
    "settings",
    "PinGateException",
    "InvalidCredentialFormatError",
    "VerificationBackendFailure",
    "StateStoreError",
    "PolicyMisconfigurationError",
    "LockedOutError",
    "BiometryDisabledError",
    "BiometricAuthenticationError",
    "InvalidPINException"
]

"""
Schemas module untuk PIN Gate API.
Berisi Pydantic schemas untuk request/response validation dan state documents.
"""

from app.schemas.auth import (
    PINRequest,
    BiometricRequest,
    BiometricEnableRequest,
    SuccessOutcome,
    FailureOutcome,
    LockedOutOutcome,
    VerificationOutcome,
    PINConfirmResponse,
    BiometryCheck,
    AuthStatus
)
from app.schemas.state import (
    AttemptState,
    LockoutState,
    AuthPolicyState,
    BiometryPreference
)
from app.schemas.response import (
    ErrorResponse,
    HealthCheckResponse,
    VerificationAttemptResponse
)

__all__ = [
    # Auth schemas
    "PINRequest",
    "BiometricRequest",
    "BiometricEnableRequest",
    "SuccessOutcome",
    "FailureOutcome",
    "LockedOutOutcome",
    "VerificationOutcome",
    "PINConfirmResponse",
    "BiometryCheck",
    "AuthStatus",

    # State schemas
    "AttemptState",
    "LockoutState",
    "AuthPolicyState",
    "BiometryPreference",

    # Response schemas
    "ErrorResponse",
    "HealthCheckResponse",
    "VerificationAttemptResponse"
]

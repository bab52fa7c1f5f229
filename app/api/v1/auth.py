"""
Authentication endpoints untuk API v1.
Menangani verifikasi PIN, biometric unlock, dan status lockout.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import AuthComponents, get_auth_components, get_auth_service
from app.api.dependencies.database import get_db
from app.core.constants import VerificationMethod
from app.core.exceptions import InvalidCredentialFormatError, InvalidPINException
from app.schemas.auth import (
    AuthStatus,
    BiometricEnableRequest,
    BiometricRequest,
    BiometryCheck,
    PINConfirmResponse,
    PINRequest,
    VerificationOutcome
)
from app.schemas.response import ErrorResponse, VerificationAttemptResponse
from app.services.audit import AuditService
from app.services.auth import AttemptResult, AuthService
from app.utils.validators import is_valid_enrollment_digest, validate_pin_format

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    code: {"model": ErrorResponse, "description": description}
    for code, description in (
        (401, "PIN atau biometrics ditolak"),
        (409, "Biometric unlock tidak aktif"),
        (422, "Format PIN atau enrollment digest salah"),
        (423, "Lockout masih berjalan"),
        (503, "State store atau verifier tidak tersedia"),
    )
}

router = APIRouter(prefix="/auth", tags=["authentication"], responses=ERROR_RESPONSES)


def _client_info(request: Request):
    client_ip = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent", "unknown")
    return client_ip, user_agent


def _require_enrollment_digest(digest: str) -> str:
    if not is_valid_enrollment_digest(digest):
        raise InvalidCredentialFormatError(
            message="Invalid enrollment digest",
            details={"enrollment_digest": "Must be 16-128 base64/hex characters"}
        )
    return digest


async def _record_audit(
    db: AsyncSession,
    request: Request,
    method: VerificationMethod,
    result: AttemptResult
) -> None:
    """
    Simpan audit record untuk satu percobaan.

    Attempt state sudah di-commit saat ini, jadi kegagalan audit database
    hanya di-log dan tidak mengganti outcome yang dikirim ke client.
    """
    client_ip, user_agent = _client_info(request)
    try:
        await AuditService(db).record_outcome(
            method=method,
            outcome=result.outcome,
            consecutive_failures=result.consecutive_failures,
            ip_address=client_ip,
            user_agent=user_agent
        )
    except Exception:
        logger.exception(
            f"Audit record for {method.value} {result.outcome.kind.value} was not saved"
        )
        await db.rollback()


@router.post("/pin/verify", response_model=VerificationOutcome)
async def verify_pin(
    request: Request,
    pin_request: PINRequest,
    auth_service: AuthService = Depends(get_auth_service),
    db: AsyncSession = Depends(get_db)
) -> VerificationOutcome:
    """
    Verifikasi PIN yang dimasukkan user.

    Proses:
    1. Validasi format PIN (tidak dihitung sebagai percobaan)
    2. Verifikasi dan evaluasi lockout policy
    3. Log audit (best effort)

    Returns:
        SuccessOutcome, FailureOutcome, atau LockedOutOutcome

    Raises:
        InvalidCredentialFormatError: Format PIN salah
        VerificationBackendFailure: Storage/IO error
    """
    pin = validate_pin_format(pin_request.pin)
    result = await auth_service.attempt_pin(pin)
    await _record_audit(db, request, VerificationMethod.PIN, result)
    return result.outcome


@router.post("/pin/confirm", response_model=PINConfirmResponse)
async def confirm_pin(
    pin_request: PINRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> PINConfirmResponse:
    """
    Konfirmasi PIN sebelum perubahan setting.
    Tidak mempengaruhi attempt counter.
    """
    pin = validate_pin_format(pin_request.pin)
    return PINConfirmResponse(verified=await auth_service.confirm_pin(pin))


@router.post("/pin/entry", response_model=AuthStatus)
async def begin_pin_entry(
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthStatus:
    """
    User mulai mengetik PIN; peringatan lockout sebelumnya dibersihkan.
    """
    return await auth_service.begin_entry()


@router.post("/biometrics/verify", response_model=VerificationOutcome)
async def verify_biometrics(
    request: Request,
    biometric_request: BiometricRequest,
    components: AuthComponents = Depends(get_auth_components),
    db: AsyncSession = Depends(get_db)
) -> VerificationOutcome:
    """
    Unlock dengan biometrics.

    Raises:
        BiometryDisabledError: Biometric unlock tidak aktif
        BiometricAuthenticationError: Platform menolak biometrics
    """
    digest = _require_enrollment_digest(biometric_request.enrollment_digest)
    auth_service = components.auth_service(current_enrollment=digest)
    result = await auth_service.attempt_biometrics()
    await _record_audit(db, request, VerificationMethod.BIOMETRICS, result)
    return result.outcome


@router.post("/biometrics/reconcile", response_model=BiometryCheck)
async def reconcile_biometrics(
    biometric_request: BiometricRequest,
    components: AuthComponents = Depends(get_auth_components)
) -> BiometryCheck:
    """
    Check enrolled biometrics saat layar autentikasi aktif.
    Biometric unlock dicabut jika enrolled biometrics berubah.
    """
    digest = _require_enrollment_digest(biometric_request.enrollment_digest)
    return await components.enrollment_guard(current_enrollment=digest).check_and_reconcile()


@router.post("/biometrics/enable", response_model=AuthStatus)
async def enable_biometrics(
    enable_request: BiometricEnableRequest,
    components: AuthComponents = Depends(get_auth_components)
) -> AuthStatus:
    """
    Aktifkan biometric unlock setelah konfirmasi PIN.

    Raises:
        InvalidPINException: PIN konfirmasi salah
        LockedOutError: Lockout masih berjalan
    """
    pin = validate_pin_format(enable_request.pin)
    digest = _require_enrollment_digest(enable_request.enrollment_digest)

    auth_service = components.auth_service(current_enrollment=digest)
    if not await auth_service.confirm_pin(pin):
        raise InvalidPINException()

    await components.enrollment_guard(current_enrollment=digest).enable(digest)
    return await auth_service.status()


@router.post("/lockout/notify", response_model=AuthStatus)
async def notify_relock(
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthStatus:
    """
    Layar autentikasi ditampilkan ulang (misal setelah auto-lock).
    """
    return await auth_service.notify_relock()


@router.get("/status", response_model=AuthStatus)
async def get_status(
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthStatus:
    """
    Get status autentikasi saat ini.
    """
    return await auth_service.status()


@router.get("/attempts", response_model=List[VerificationAttemptResponse])
async def list_attempts(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
) -> List[VerificationAttemptResponse]:
    """
    Get audit trail verifikasi terbaru.
    """
    attempts = await AuditService(db).recent_attempts(limit=limit)
    return [VerificationAttemptResponse.model_validate(attempt) for attempt in attempts]

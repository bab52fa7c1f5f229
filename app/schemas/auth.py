"""
Authentication schemas untuk PIN Gate API.
Menangani request PIN/biometrics dan VerificationOutcome untuk presentation layer.
"""

from datetime import datetime
from typing import Optional, Union, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import OutcomeKind, LockoutStatus


class PINRequest(BaseModel):
    """
    PIN yang dimasukkan user.
    Format (digit saja, panjang) divalidasi di endpoint sebelum masuk ke AuthService.
    """
    pin: str = Field(
        ...,
        max_length=64,
        description="PIN yang dimasukkan user"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"pin": "123456"}}
    )


class BiometricRequest(BaseModel):
    """Enrollment digest dari enrolled biometrics di device."""
    enrollment_digest: str = Field(
        ...,
        max_length=1024,
        description="Digest dari enrolled biometric set di device (format dicek di endpoint)"
    )


class BiometricEnableRequest(PINRequest):
    """Aktifkan biometric unlock; memerlukan konfirmasi PIN."""
    enrollment_digest: str = Field(
        ...,
        max_length=1024,
        description="Digest dari enrolled biometric set di device (format dicek di endpoint)"
    )


class SuccessOutcome(BaseModel):
    """Verifikasi berhasil."""
    kind: Literal[OutcomeKind.SUCCESS] = OutcomeKind.SUCCESS


class FailureOutcome(BaseModel):
    """PIN salah, user boleh mencoba lagi."""
    kind: Literal[OutcomeKind.FAILURE] = OutcomeKind.FAILURE
    message: str = Field(..., description="Message key untuk dilokalisasi")
    attempts_remaining: int = Field(..., ge=1, description="Sisa percobaan dalam siklus ini")
    lockout_warning: bool = Field(
        False,
        description="Satu percobaan gagal lagi akan memicu lockout"
    )


class LockedOutOutcome(BaseModel):
    """Terlalu banyak percobaan gagal; tampilkan layar lockout."""
    kind: Literal[OutcomeKind.LOCKED_OUT] = OutcomeKind.LOCKED_OUT
    until: datetime = Field(..., description="Waktu lockout berakhir")


VerificationOutcome = Annotated[
    Union[SuccessOutcome, FailureOutcome, LockedOutOutcome],
    Field(discriminator="kind")
]


class PINConfirmResponse(BaseModel):
    """Hasil konfirmasi PIN sebelum perubahan setting."""
    verified: bool


class BiometryCheck(BaseModel):
    """Hasil reconciliation biometric enrollment."""
    biometry_revoked: bool = False
    message: Optional[str] = Field(None, description="Message key jika biometry dicabut")


class AuthStatus(BaseModel):
    """
    Snapshot state autentikasi untuk presentation layer.
    """
    status: LockoutStatus
    locked_until: Optional[datetime] = None
    consecutive_failures: int = 0
    attempts_remaining: int
    lockout_warning: bool = False
    display_notification: bool = False
    notification_params: Optional[dict] = None
    biometry_enabled: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "LOCKED",
                "locked_until": "2024-01-15T10:05:00Z",
                "consecutive_failures": 5,
                "attempts_remaining": 5,
                "lockout_warning": False,
                "display_notification": False,
                "notification_params": None,
                "biometry_enabled": True
            }
        }
    )

"""
State schemas untuk PIN Gate API.
Dokumen yang disimpan di state store (Redis atau memory) sebagai JSON.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AttemptState(BaseModel):
    """
    Attempt counter: jumlah percobaan gagal berturut-turut sejak sukses terakhir.

    Perubahan disimpan ketika transaction state store yang memegang
    instance ini di-commit.
    """
    consecutive_failures: int = Field(
        0,
        ge=0,
        description="Consecutive failed verification attempts"
    )
    served_penalty: bool = Field(
        False,
        description="Lockout terakhir sudah selesai dijalani"
    )

    @property
    def current_count(self) -> int:
        """Return current failure count."""
        return self.consecutive_failures

    def increment(self) -> int:
        """
        Increment failed attempts counter.

        Returns:
            New failed attempts count
        """
        self.consecutive_failures += 1
        return self.consecutive_failures

    def reset(self) -> None:
        """Reset counter setelah verifikasi sukses."""
        self.consecutive_failures = 0
        self.served_penalty = False


class LockoutState(BaseModel):
    """Lockout yang sedang berjalan dan notifikasi yang belum ditampilkan."""
    active: bool = False
    until: Optional[datetime] = None
    display_notification: bool = False


class AuthPolicyState(BaseModel):
    """State yang dimiliki oleh AuthService."""
    attempts: AttemptState = Field(default_factory=AttemptState)
    lockout: LockoutState = Field(default_factory=LockoutState)


class BiometryPreference(BaseModel):
    """
    Preference biometric unlock.
    Disimpan terpisah dari AuthPolicyState supaya reconciliation biometrics
    tidak pernah menyentuh attempt/lockout state.
    """
    enabled: bool = False
    enrollment_digest: Optional[str] = Field(
        None,
        description="Digest dari enrolled biometrics saat biometry diaktifkan"
    )
    enabled_at: Optional[datetime] = None

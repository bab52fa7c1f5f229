"""
Verification attempt model untuk PIN Gate API.
Melacak semua percobaan verifikasi PIN/biometrics untuk security monitoring.
"""

from datetime import datetime, timezone
from typing import Optional
import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String, Uuid

from app.core.constants import OutcomeKind, VerificationMethod
from app.db.base import Base


class VerificationAttempt(Base):
    """
    Audit record untuk satu percobaan verifikasi.

    Attributes:
        va_id: Attempt ID (UUID)
        va_method: PIN atau BIOMETRICS
        va_outcome: SUCCESS, FAILURE, atau LOCKED_OUT
        va_consecutive_failures: Jumlah percobaan gagal setelah attempt ini
        va_locked_until: Lockout expiry jika attempt ini terkunci
        va_ip_address: Client IP
        va_user_agent: User agent string
        va_attempted_at: Timestamp of attempt
    """

    va_id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    va_method = Column(String(32), nullable=False)
    va_outcome = Column(String(32), nullable=False, index=True)
    va_consecutive_failures = Column(Integer, nullable=False, default=0)
    va_locked_until = Column(DateTime(timezone=True), nullable=True)
    va_ip_address = Column(String(45), nullable=True)
    va_user_agent = Column(String, nullable=True)
    va_attempted_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    __table_args__ = (
        Index('idx_verification_attempts_attempted_at', 'va_attempted_at'),
    )

    @property
    def is_successful(self) -> bool:
        """Check if verification was successful."""
        return self.va_outcome == OutcomeKind.SUCCESS.value

    @property
    def is_locked_out(self) -> bool:
        """Check if attempt ended in lockout."""
        return self.va_outcome == OutcomeKind.LOCKED_OUT.value

    @classmethod
    def create(
        cls,
        method: VerificationMethod,
        outcome: OutcomeKind,
        consecutive_failures: int,
        locked_until: Optional[datetime] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> "VerificationAttempt":
        """
        Create verification attempt record.

        Args:
            method: Metode verifikasi
            outcome: Hasil verifikasi
            consecutive_failures: Counter setelah attempt
            locked_until: Lockout expiry
            ip_address: Client IP
            user_agent: User agent string

        Returns:
            New VerificationAttempt instance
        """
        return cls(
            va_method=method.value,
            va_outcome=outcome.value,
            va_consecutive_failures=consecutive_failures,
            va_locked_until=locked_until,
            va_ip_address=ip_address,
            va_user_agent=user_agent
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<VerificationAttempt(id={self.va_id}, method={self.va_method}, "
            f"outcome={self.va_outcome}, attempted_at={self.va_attempted_at})>"
        )

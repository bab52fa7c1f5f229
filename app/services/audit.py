"""
Audit service untuk PIN Gate API.
Mencatat setiap hasil verifikasi untuk security monitoring.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import VerificationMethod
from app.models.verification_attempt import VerificationAttempt
from app.schemas.auth import LockedOutOutcome, VerificationOutcome

logger = logging.getLogger(__name__)


class AuditService:
    """
    Service class untuk audit trail verifikasi.
    Dipanggil oleh API layer setelah AuthService mengembalikan outcome.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize audit service.

        Args:
            db: Database session
        """
        self.db = db

    async def record_outcome(
        self,
        method: VerificationMethod,
        outcome: VerificationOutcome,
        consecutive_failures: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> VerificationAttempt:
        """
        Record hasil verifikasi.

        Args:
            method: PIN atau BIOMETRICS
            outcome: Outcome dari AuthService
            consecutive_failures: Counter setelah verifikasi
            ip_address: Client IP
            user_agent: User agent

        Returns:
            Created audit record
        """
        locked_until = outcome.until if isinstance(outcome, LockedOutOutcome) else None

        attempt = VerificationAttempt.create(
            method=method,
            outcome=outcome.kind,
            consecutive_failures=consecutive_failures,
            locked_until=locked_until,
            ip_address=ip_address,
            user_agent=user_agent
        )
        self.db.add(attempt)

        # Audit record di-commit langsung
        await self.db.commit()

        logger.debug(f"Recorded {method.value} verification outcome {outcome.kind.value}")
        return attempt

    async def recent_attempts(self, limit: int = 20) -> List[VerificationAttempt]:
        """
        Get verification attempts terbaru.

        Args:
            limit: Maximum records

        Returns:
            List of attempts, terbaru dulu
        """
        result = await self.db.execute(
            select(VerificationAttempt)
            .order_by(VerificationAttempt.va_attempted_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

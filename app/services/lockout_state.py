"""
Lockout state machine untuk PIN Gate API.

States: UNLOCKED, PENDING_NOTIFICATION, LOCKED(until).
Expiry bersifat lazy: dicek di awal setiap verifikasi, bukan oleh timer.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from app.core.constants import LockoutStatus
from app.schemas.state import AuthPolicyState

logger = logging.getLogger(__name__)


class LockoutStateMachine:
    """
    Transisi lockout di atas AuthPolicyState milik AuthService.
    Tidak melakukan I/O; persistence dilakukan oleh state store.
    """

    def __init__(self, state: AuthPolicyState):
        self.state = state

    @property
    def locked_until(self) -> Optional[datetime]:
        lockout = self.state.lockout
        return lockout.until if lockout.active else None

    def is_locked(self, now: datetime) -> bool:
        """Check apakah lockout masih berjalan pada waktu now."""
        until = self.locked_until
        return until is not None and now < until

    def status(self, now: datetime) -> LockoutStatus:
        """Return state saat ini tanpa mengubah apapun."""
        if self.is_locked(now):
            return LockoutStatus.LOCKED
        if self.state.lockout.display_notification:
            return LockoutStatus.PENDING_NOTIFICATION
        return LockoutStatus.UNLOCKED

    def lock(self, duration_seconds: int, now: datetime) -> datetime:
        """
        UNLOCKED -> LOCKED(now + duration).

        Returns:
            Lockout expiry
        """
        until = now + timedelta(seconds=duration_seconds)
        lockout = self.state.lockout
        lockout.active = True
        lockout.until = until
        self.state.attempts.served_penalty = False
        logger.warning(
            f"Lockout applied after {self.state.attempts.consecutive_failures} "
            f"failed attempts, until {until.isoformat()}"
        )
        return until

    def expire_if_due(self, now: datetime) -> bool:
        """
        LOCKED -> UNLOCKED jika now >= until. Menandai penalty sebagai served.

        Returns:
            True jika lockout baru saja berakhir
        """
        lockout = self.state.lockout
        if not lockout.active or lockout.until is None or now < lockout.until:
            return False

        lockout.active = False
        lockout.until = None
        self.state.attempts.served_penalty = True
        logger.info("Lockout expired, penalty served")
        return True

    def mark_notification_pending(self) -> None:
        """Layar autentikasi ditampilkan ulang setelah lockout."""
        self.state.lockout.display_notification = True

    def begin_entry(self) -> bool:
        """
        User mulai memasukkan PIN setelah lockout selesai.

        Returns:
            True jika served penalty di-unmark
        """
        if not self.state.attempts.served_penalty:
            return False
        self.state.attempts.served_penalty = False
        self.state.lockout.display_notification = False
        return True

    def clear(self) -> None:
        """Verifikasi sukses: paksa UNLOCKED."""
        lockout = self.state.lockout
        lockout.active = False
        lockout.until = None
        lockout.display_notification = False
        self.state.attempts.served_penalty = False

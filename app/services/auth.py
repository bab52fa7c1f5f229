"""
Authentication service untuk PIN Gate API.
Menggabungkan verifier, attempt counter, lockout policy, dan lockout state machine
menjadi satu VerificationOutcome per percobaan.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, NamedTuple, Optional

from app.core.constants import MessageKey, PenaltyKind
from app.core.exceptions import (
    BiometricAuthenticationError,
    BiometryDisabledError,
    LockedOutError
)
from app.schemas.auth import (
    AuthStatus,
    FailureOutcome,
    LockedOutOutcome,
    SuccessOutcome,
    VerificationOutcome
)
from app.schemas.state import AuthPolicyState, BiometryPreference
from app.services.lockout_policy import LockoutPolicy
from app.services.lockout_state import LockoutStateMachine
from app.services.state_store import StateStore
from app.services.verifier import CredentialVerifier

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class AttemptResult(NamedTuple):
    """Outcome plus counter yang tercatat di transaction yang sama."""

    outcome: VerificationOutcome
    consecutive_failures: int


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    """
    Service class untuk verifikasi PIN dan biometrics.

    Satu instance mewakili satu authentication session. Panggilan verify
    yang bersamaan diantrikan; read-modify-write ke state store dijaga oleh
    transaction store, dan kegagalan backend membatalkan semua perubahan.
    """

    def __init__(
        self,
        state_store: StateStore[AuthPolicyState],
        biometry_store: StateStore[BiometryPreference],
        verifier: CredentialVerifier,
        policy: LockoutPolicy,
        clock: Clock = utc_now,
        auto_lock_minutes: Optional[int] = None,
        session_lock: Optional[asyncio.Lock] = None
    ):
        """
        Initialize authentication service.

        Args:
            state_store: Store untuk attempt dan lockout state
            biometry_store: Store untuk biometry preference (read only di sini)
            verifier: Credential verifier
            policy: Lockout policy
            clock: Sumber waktu (UTC)
            auto_lock_minutes: Auto-lock time untuk parameter notifikasi
            session_lock: Lock bersama antar instance untuk session yang sama
        """
        self.state_store = state_store
        self.biometry_store = biometry_store
        self.verifier = verifier
        self.policy = policy
        self.clock = clock
        self.auto_lock_minutes = auto_lock_minutes
        self._session_lock = session_lock or asyncio.Lock()

    async def verify(self, candidate: str) -> VerificationOutcome:
        """Verify PIN dan terapkan lockout policy. Lihat attempt_pin."""
        return (await self.attempt_pin(candidate)).outcome

    async def attempt_pin(self, candidate: str) -> AttemptResult:
        """
        Verify PIN dan terapkan lockout policy.

        Proses:
        1. Short-circuit jika lockout masih berjalan (verifier tidak dipanggil)
        2. Unmark served penalty
        3. Verifikasi PIN
        4. Reset counter jika sukses, atau increment dan evaluasi policy

        Args:
            candidate: PIN yang sudah lolos validasi format

        Returns:
            AttemptResult dengan SuccessOutcome, FailureOutcome, atau
            LockedOutOutcome dan counter setelah percobaan ini

        Raises:
            VerificationBackendFailure: Storage/IO error; state tidak berubah
        """
        async with self._session_lock:
            async with self.state_store.transaction() as state:
                now = self.clock()
                machine = LockoutStateMachine(state)

                machine.expire_if_due(now)
                if machine.is_locked(now):
                    outcome = LockedOutOutcome(until=machine.locked_until)
                else:
                    machine.begin_entry()
                    if await self.verifier.verify_pin(candidate):
                        outcome = self._record_success(state, machine)
                    else:
                        outcome = self._record_failure(state, machine, now)

                return AttemptResult(outcome, state.attempts.current_count)

    async def verify_biometrics(self) -> VerificationOutcome:
        """Unlock dengan biometrics. Lihat attempt_biometrics."""
        return (await self.attempt_biometrics()).outcome

    async def attempt_biometrics(self) -> AttemptResult:
        """
        Unlock dengan biometrics.
        Penolakan dari platform tidak dihitung sebagai percobaan PIN gagal.

        Raises:
            BiometryDisabledError: Jika biometric unlock tidak aktif
            BiometricAuthenticationError: Jika platform menolak biometrics
        """
        preference = await self.biometry_store.load()
        if not preference.enabled:
            raise BiometryDisabledError()

        async with self._session_lock:
            async with self.state_store.transaction() as state:
                now = self.clock()
                machine = LockoutStateMachine(state)

                machine.expire_if_due(now)
                if machine.is_locked(now):
                    return AttemptResult(
                        LockedOutOutcome(until=machine.locked_until),
                        state.attempts.current_count
                    )

                machine.begin_entry()

                if not await self.verifier.unlock_with_biometrics():
                    raise BiometricAuthenticationError(
                        details={"message": MessageKey.BIOMETRICS_ERROR}
                    )

                return AttemptResult(self._record_success(state, machine), 0)

    async def confirm_pin(self, candidate: str) -> bool:
        """
        Konfirmasi PIN sebelum perubahan setting (misal mengaktifkan biometrics).
        Tidak menghitung percobaan gagal.

        Raises:
            LockedOutError: Jika lockout masih berjalan
        """
        state = await self.state_store.load()
        machine = LockoutStateMachine(state)
        if machine.is_locked(self.clock()):
            raise LockedOutError(locked_until=machine.locked_until)
        return await self.verifier.verify_pin(candidate)

    async def begin_entry(self) -> AuthStatus:
        """User mulai mengetik PIN."""
        async with self.state_store.transaction() as state:
            now = self.clock()
            machine = LockoutStateMachine(state)
            machine.expire_if_due(now)
            machine.begin_entry()
        return await self.status()

    async def notify_relock(self) -> AuthStatus:
        """Layar autentikasi ditampilkan ulang; tampilkan penjelasan ke user."""
        async with self.state_store.transaction() as state:
            LockoutStateMachine(state).mark_notification_pending()
        return await self.status()

    async def status(self) -> AuthStatus:
        """
        Snapshot state autentikasi.

        Returns:
            AuthStatus
        """
        state = await self.state_store.load()
        preference = await self.biometry_store.load()
        now = self.clock()
        machine = LockoutStateMachine(state)
        count = state.attempts.current_count

        notification_params = None
        if state.lockout.display_notification and self.auto_lock_minutes is not None:
            notification_params = {"time": self.auto_lock_minutes}

        return AuthStatus(
            status=machine.status(now),
            locked_until=machine.locked_until if machine.is_locked(now) else None,
            consecutive_failures=count,
            attempts_remaining=self.policy.attempts_remaining(count),
            lockout_warning=self.policy.next_attempt_locks(count),
            display_notification=state.lockout.display_notification,
            notification_params=notification_params,
            biometry_enabled=preference.enabled
        )

    def _record_success(
        self,
        state: AuthPolicyState,
        machine: LockoutStateMachine
    ) -> VerificationOutcome:
        previous = state.attempts.current_count
        state.attempts.reset()
        machine.clear()
        logger.info(f"Verification succeeded after {previous} failed attempts")
        return SuccessOutcome()

    def _record_failure(
        self,
        state: AuthPolicyState,
        machine: LockoutStateMachine,
        now: datetime
    ) -> VerificationOutcome:
        count = state.attempts.increment()
        decision = self.policy.evaluate(count)

        if decision.kind == PenaltyKind.LOCK:
            until = machine.lock(decision.duration_seconds, now)
            return LockedOutOutcome(until=until)

        if decision.kind == PenaltyKind.WARN_ONE_MORE_ATTEMPT:
            message = MessageKey.LAST_TRY_BEFORE_TIMEOUT
        else:
            message = MessageKey.INCORRECT_PIN_TRIES

        logger.info(
            f"Incorrect PIN, attempt {count}, "
            f"{decision.attempts_remaining} remaining in cycle"
        )
        return FailureOutcome(
            message=message,
            attempts_remaining=decision.attempts_remaining,
            lockout_warning=self.policy.next_attempt_locks(count)
        )

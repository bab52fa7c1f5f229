"""
Credential verifier untuk PIN Gate API.
Black-box predicate untuk PIN dan status biometric unlock.
"""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from app.core.exceptions import StateStoreError, VerificationBackendFailure
from app.core.security import security
from app.schemas.state import BiometryPreference
from app.services.state_store import StateStore

logger = logging.getLogger(__name__)

PinHashLoader = Callable[[], Awaitable[Optional[str]]]


class CredentialVerifier(ABC):
    """
    Kontrak verifier yang dipakai AuthService dan BiometricEnrollmentGuard.

    Kegagalan storage/IO harus di-raise sebagai VerificationBackendFailure,
    bukan dikembalikan sebagai False.
    """

    @abstractmethod
    async def verify_pin(self, candidate: str) -> bool:
        """True jika candidate cocok dengan PIN yang tersimpan."""

    @abstractmethod
    async def is_biometrics_active(self) -> bool:
        """True jika enrolled biometrics masih sama dengan saat biometry diaktifkan."""

    @abstractmethod
    async def disable_biometrics(self) -> None:
        """Invalidate biometric credential di device."""

    @abstractmethod
    async def unlock_with_biometrics(self) -> bool:
        """True jika biometric unlock berhasil."""


class LocalCredentialVerifier(CredentialVerifier):
    """
    Verifier dengan Argon2 PIN hash dan enrollment digest.

    Platform biometric prompt berjalan di device; device mengirim digest dari
    enrolled biometrics saat ini, dan digest itu dibandingkan dengan digest
    yang direkam ketika biometry diaktifkan.
    """

    def __init__(
        self,
        pin_hash_loader: PinHashLoader,
        biometry_store: StateStore[BiometryPreference],
        current_enrollment: Optional[str] = None
    ):
        """
        Initialize verifier.

        Args:
            pin_hash_loader: Async callable yang mengembalikan PIN hash
            biometry_store: Store untuk biometry preference
            current_enrollment: Enrollment digest yang dilaporkan device
        """
        self.pin_hash_loader = pin_hash_loader
        self.biometry_store = biometry_store
        self.current_enrollment = current_enrollment

    async def verify_pin(self, candidate: str) -> bool:
        try:
            pin_hash = await self.pin_hash_loader()
        except (OSError, StateStoreError) as exc:
            raise VerificationBackendFailure("Stored PIN could not be read") from exc

        if not pin_hash:
            raise VerificationBackendFailure("No PIN has been set up on this device")

        try:
            return security.verify_pin(candidate, pin_hash)
        except ValueError as exc:
            # passlib raise ValueError untuk hash yang rusak
            raise VerificationBackendFailure("Stored PIN hash is malformed") from exc

    async def is_biometrics_active(self) -> bool:
        preference = await self.biometry_store.load()
        if not preference.enabled or not preference.enrollment_digest:
            return False
        if not self.current_enrollment:
            return False
        return security.constant_time_compare(
            preference.enrollment_digest,
            self.current_enrollment
        )

    async def disable_biometrics(self) -> None:
        async with self.biometry_store.transaction() as preference:
            preference.enrollment_digest = None
        logger.info("Biometric credential invalidated")

    async def unlock_with_biometrics(self) -> bool:
        return await self.is_biometrics_active()


def settings_pin_hash_loader(pin_hash: Optional[str]) -> PinHashLoader:
    """
    Build loader untuk PIN hash dari konfigurasi.

    Args:
        pin_hash: Argon2 hash dari settings

    Returns:
        Async loader
    """
    async def _load() -> Optional[str]:
        return pin_hash

    return _load

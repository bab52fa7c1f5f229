"""
Biometric enrollment guard untuk PIN Gate API.
Mencabut biometric unlock jika enrolled biometrics di device berubah.
"""

import logging
from datetime import datetime, timezone

from app.core.constants import MessageKey
from app.schemas.auth import BiometryCheck
from app.schemas.state import BiometryPreference
from app.services.state_store import StateStore
from app.services.verifier import CredentialVerifier

logger = logging.getLogger(__name__)


class BiometricEnrollmentGuard:
    """
    Reconciliation antara biometry preference dan enrolled biometrics.

    Hanya menyentuh BiometryPreference; attempt counter dan lockout state
    tidak pernah diubah di sini.
    """

    def __init__(
        self,
        verifier: CredentialVerifier,
        biometry_store: StateStore[BiometryPreference]
    ):
        self.verifier = verifier
        self.biometry_store = biometry_store

    async def check_and_reconcile(self) -> BiometryCheck:
        """
        Check apakah biometric unlock masih bisa dipakai.

        Dipanggil sekali saat layar autentikasi aktif. Error dari platform
        diperlakukan sebagai "tidak bisa dipakai" dan hanya di-log.

        Returns:
            BiometryCheck dengan biometry_revoked=True jika biometry dicabut
        """
        preference = await self.biometry_store.load()
        if not preference.enabled:
            return BiometryCheck(biometry_revoked=False)

        try:
            active = await self.verifier.is_biometrics_active()
        except Exception:
            logger.exception("Biometric availability check failed, treating biometrics as unusable")
            active = False

        if active:
            return BiometryCheck(biometry_revoked=False)

        async with self.biometry_store.transaction() as preference:
            preference.enabled = False
            preference.enabled_at = None

        try:
            await self.verifier.disable_biometrics()
        except Exception:
            logger.exception("Failed to invalidate biometric credential")

        logger.warning("Biometric enrollment changed, biometric unlock disabled")
        return BiometryCheck(
            biometry_revoked=True,
            message=MessageKey.BIOMETRICS_CHANGED
        )

    async def enable(self, enrollment_digest: str) -> BiometryPreference:
        """
        Aktifkan biometric unlock dan rekam enrolled biometrics saat ini.
        Caller wajib mengonfirmasi PIN terlebih dahulu.

        Args:
            enrollment_digest: Digest dari enrolled biometrics di device

        Returns:
            Updated preference
        """
        async with self.biometry_store.transaction() as preference:
            preference.enabled = True
            preference.enrollment_digest = enrollment_digest
            preference.enabled_at = datetime.now(timezone.utc)

        logger.info("Biometric unlock enabled")
        return preference

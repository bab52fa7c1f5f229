"""
Authentication dependencies untuk FastAPI.
Merakit state stores, verifier, lockout policy, dan AuthService per request.
"""

import asyncio
from functools import lru_cache
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends

from app.api.dependencies.database import get_redis
from app.core.config import settings
from app.core.constants import CacheKey
from app.schemas.state import AuthPolicyState, BiometryPreference
from app.services.auth import AuthService
from app.services.biometry import BiometricEnrollmentGuard
from app.services.lockout_policy import LockoutPolicy, ThresholdRule
from app.services.state_store import InMemoryStateStore, RedisStateStore, StateStore
from app.services.verifier import (
    LocalCredentialVerifier,
    PinHashLoader,
    settings_pin_hash_loader
)


# Satu authentication session per proses (per event loop)
_session_lock: Optional[asyncio.Lock] = None
_session_loop: Optional[asyncio.AbstractEventLoop] = None

# In-memory stores (singleton) untuk STATE_BACKEND=memory
_memory_policy_store: Optional[InMemoryStateStore] = None
_memory_biometry_store: Optional[InMemoryStateStore] = None


@lru_cache()
def get_threshold_rule() -> ThresholdRule:
    """
    Build threshold rule dari settings (sekali per proses).

    Raises:
        PolicyMisconfigurationError: Jika tabel threshold tidak valid
    """
    return ThresholdRule.build(settings.LOCKOUT_INCREMENT, settings.LOCKOUT_THRESHOLDS)


def get_session_lock() -> asyncio.Lock:
    """Lock bersama untuk semua AuthService di proses ini."""
    global _session_lock, _session_loop

    loop = asyncio.get_running_loop()
    if _session_lock is None or _session_loop is not loop:
        _session_lock = asyncio.Lock()
        _session_loop = loop

    return _session_lock


def get_lockout_policy() -> LockoutPolicy:
    """Dependency untuk lockout policy."""
    return LockoutPolicy(get_threshold_rule())


def _redis_store(redis_client: redis.Redis, key_template: str, model) -> RedisStateStore:
    return RedisStateStore(
        redis_client,
        key=key_template.format(prefix=settings.STATE_KEY_PREFIX),
        model=model,
        lock_timeout=settings.STATE_LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.STATE_LOCK_BLOCKING_TIMEOUT_SECONDS
    )


async def get_policy_store(
    redis_client: redis.Redis = Depends(get_redis)
) -> StateStore[AuthPolicyState]:
    """
    Dependency untuk attempt/lockout state store.
    """
    global _memory_policy_store

    if settings.STATE_BACKEND == "memory":
        if _memory_policy_store is None:
            _memory_policy_store = InMemoryStateStore(AuthPolicyState)
        return _memory_policy_store

    return _redis_store(redis_client, CacheKey.AUTH_POLICY_STATE, AuthPolicyState)


async def get_biometry_store(
    redis_client: redis.Redis = Depends(get_redis)
) -> StateStore[BiometryPreference]:
    """
    Dependency untuk biometry preference store.
    """
    global _memory_biometry_store

    if settings.STATE_BACKEND == "memory":
        if _memory_biometry_store is None:
            _memory_biometry_store = InMemoryStateStore(BiometryPreference)
        return _memory_biometry_store

    return _redis_store(redis_client, CacheKey.BIOMETRY_PREFERENCE, BiometryPreference)


def get_pin_hash_loader() -> PinHashLoader:
    """Dependency untuk loader PIN hash."""
    return settings_pin_hash_loader(settings.PIN_HASH)


class AuthComponents:
    """
    Kumpulan komponen autentikasi untuk satu request.
    Verifier dibuat dengan enrollment digest yang dilaporkan device (jika ada).
    """

    def __init__(
        self,
        policy_store: StateStore[AuthPolicyState],
        biometry_store: StateStore[BiometryPreference],
        policy: LockoutPolicy,
        pin_hash_loader: PinHashLoader
    ):
        self.policy_store = policy_store
        self.biometry_store = biometry_store
        self.policy = policy
        self.pin_hash_loader = pin_hash_loader

    def verifier(self, current_enrollment: Optional[str] = None) -> LocalCredentialVerifier:
        return LocalCredentialVerifier(
            pin_hash_loader=self.pin_hash_loader,
            biometry_store=self.biometry_store,
            current_enrollment=current_enrollment
        )

    def auth_service(self, current_enrollment: Optional[str] = None) -> AuthService:
        return AuthService(
            state_store=self.policy_store,
            biometry_store=self.biometry_store,
            verifier=self.verifier(current_enrollment),
            policy=self.policy,
            auto_lock_minutes=settings.AUTO_LOCK_MINUTES,
            session_lock=get_session_lock()
        )

    def enrollment_guard(self, current_enrollment: Optional[str] = None) -> BiometricEnrollmentGuard:
        return BiometricEnrollmentGuard(
            verifier=self.verifier(current_enrollment),
            biometry_store=self.biometry_store
        )


async def get_auth_components(
    policy_store: StateStore[AuthPolicyState] = Depends(get_policy_store),
    biometry_store: StateStore[BiometryPreference] = Depends(get_biometry_store),
    policy: LockoutPolicy = Depends(get_lockout_policy),
    pin_hash_loader: PinHashLoader = Depends(get_pin_hash_loader)
) -> AuthComponents:
    """
    Dependency untuk komponen autentikasi.

    Returns:
        AuthComponents
    """
    return AuthComponents(policy_store, biometry_store, policy, pin_hash_loader)


async def get_auth_service(
    components: AuthComponents = Depends(get_auth_components)
) -> AuthService:
    """
    Dependency untuk AuthService tanpa biometric enrollment info.
    """
    return components.auth_service()

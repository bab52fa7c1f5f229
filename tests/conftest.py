"""
Shared fixtures: frozen clock, fake verifier, in-memory stores, dan API client.
"""

import os

# Test settings harus di-set sebelum app diimport
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STATE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
import fakeredis.aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.core.security import security
from app.models.verification_attempt import VerificationAttempt  # noqa: F401
from app.schemas.state import AuthPolicyState, BiometryPreference
from app.services.auth import AuthService
from app.services.biometry import BiometricEnrollmentGuard
from app.services.lockout_policy import LockoutPolicy, ThresholdRule
from app.services.state_store import InMemoryStateStore
from app.services.verifier import CredentialVerifier
from app.api.dependencies.auth import (
    get_biometry_store,
    get_pin_hash_loader,
    get_policy_store
)
from app.api.dependencies.database import get_db, get_redis


TEST_PIN = "135790"

START_TIME = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock yang bisa dimajukan secara manual."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeVerifier(CredentialVerifier):
    """
    Verifier dengan PIN tetap dan biometrics yang bisa diatur.
    Mencatat jumlah panggilan verify_pin.
    """

    def __init__(self, pin: str = TEST_PIN):
        self.pin = pin
        self.verify_calls = 0
        self.biometrics_active = True
        self.biometrics_error: Optional[Exception] = None
        self.backend_error: Optional[Exception] = None
        self.disabled = False

    async def verify_pin(self, candidate: str) -> bool:
        self.verify_calls += 1
        if self.backend_error is not None:
            raise self.backend_error
        return candidate == self.pin

    async def is_biometrics_active(self) -> bool:
        if self.biometrics_error is not None:
            raise self.biometrics_error
        return self.biometrics_active

    async def disable_biometrics(self) -> None:
        self.disabled = True

    async def unlock_with_biometrics(self) -> bool:
        return self.biometrics_active


@pytest.fixture
def threshold_rule() -> ThresholdRule:
    """Default lockout table: 5 -> 30s, 10 -> 120s, 15 -> 600s."""
    return ThresholdRule.build(5, [(5, 30), (10, 120), (15, 600)])


@pytest.fixture
def policy(threshold_rule: ThresholdRule) -> LockoutPolicy:
    return LockoutPolicy(threshold_rule)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def policy_store() -> InMemoryStateStore:
    return InMemoryStateStore(AuthPolicyState)


@pytest.fixture
def biometry_store() -> InMemoryStateStore:
    return InMemoryStateStore(BiometryPreference)


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def auth_service(policy_store, biometry_store, verifier, policy, clock) -> AuthService:
    """AuthService dengan fake verifier dan frozen clock."""
    return AuthService(
        state_store=policy_store,
        biometry_store=biometry_store,
        verifier=verifier,
        policy=policy,
        clock=clock,
        auto_lock_minutes=5
    )


@pytest.fixture
def enrollment_guard(verifier, biometry_store) -> BiometricEnrollmentGuard:
    return BiometricEnrollmentGuard(verifier=verifier, biometry_store=biometry_store)


@pytest_asyncio.fixture
async def engine():
    """Audit tables di SQLite in-memory, satu koneksi bersama (StaticPool)."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield test_engine
    finally:
        await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def redis_client():
    """fakeredis pengganti Redis; mendukung Lua untuk redis.lock."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture(scope="session")
def pin_hash() -> str:
    return security.hash_pin(TEST_PIN)


@pytest.fixture
def override_dependencies(db_session, redis_client, policy_store, biometry_store, pin_hash):
    """Arahkan app ke fixtures: session test, fakeredis, memory stores, PIN hash test."""
    async def use_db_session():
        yield db_session

    async def use_redis_client():
        yield redis_client

    async def load_pin_hash():
        return pin_hash

    app.dependency_overrides[get_db] = use_db_session
    app.dependency_overrides[get_redis] = use_redis_client
    app.dependency_overrides[get_policy_store] = lambda: policy_store
    app.dependency_overrides[get_biometry_store] = lambda: biometry_store
    app.dependency_overrides[get_pin_hash_loader] = lambda: load_pin_hash

    yield

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """httpx client yang memanggil app langsung lewat ASGI."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

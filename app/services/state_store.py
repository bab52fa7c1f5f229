"""
State store untuk PIN Gate API.
Menyimpan AuthPolicyState dan BiometryPreference sebagai dokumen JSON
dengan read-modify-write sebagai critical section.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Generic, Optional, Type, TypeVar, Union

import redis.asyncio as redis
from pydantic import BaseModel, ValidationError
from redis.exceptions import LockError, RedisError

from app.core.constants import CacheKey
from app.core.exceptions import StateStoreError

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)


class StateStore(ABC, Generic[StateT]):
    """
    Persistence collaborator untuk satu dokumen state.

    `transaction()` memberikan salinan state yang bisa diubah; perubahan
    disimpan saat blok selesai normal dan dibuang jika blok raise exception.
    Dua transaction tidak pernah berjalan bersamaan.
    """

    def __init__(self, model: Type[StateT]):
        self.model = model

    def _decode(self, raw: Optional[Union[str, bytes]]) -> StateT:
        if raw is None:
            return self.model()
        try:
            return self.model.model_validate_json(raw)
        except ValidationError as exc:
            raise StateStoreError(
                f"Stored {self.model.__name__} is corrupt",
                details={"errors": exc.error_count()}
            ) from exc

    @abstractmethod
    async def load(self) -> StateT:
        """Read current state tanpa lock."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[StateT]:
        """Async context manager untuk atomic read-modify-write."""


class InMemoryStateStore(StateStore[StateT]):
    """State store di memory proses, untuk single-process dan testing."""

    def __init__(self, model: Type[StateT], initial: Optional[StateT] = None):
        super().__init__(model)
        self._raw: Optional[str] = initial.model_dump_json() if initial is not None else None
        self._lock = asyncio.Lock()

    async def load(self) -> StateT:
        return self._decode(self._raw)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StateT]:
        async with self._lock:
            state = self._decode(self._raw)
            yield state
            self._raw = state.model_dump_json()


class RedisStateStore(StateStore[StateT]):
    """
    State store di Redis.

    Critical section dijaga oleh Redis lock supaya beberapa proses
    tidak saling menimpa state yang sama.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key: str,
        model: Type[StateT],
        lock_timeout: float = 30.0,
        blocking_timeout: float = 10.0
    ):
        """
        Initialize Redis state store.

        Args:
            redis_client: Redis client
            key: Redis key untuk dokumen state
            model: Pydantic model dari dokumen
            lock_timeout: Masa berlaku lock (detik)
            blocking_timeout: Lama menunggu lock (detik)
        """
        super().__init__(model)
        self.redis = redis_client
        self.key = key
        self.lock_timeout = lock_timeout
        self.blocking_timeout = blocking_timeout

    async def load(self) -> StateT:
        try:
            raw = await self.redis.get(self.key)
        except RedisError as exc:
            raise StateStoreError(f"Failed to read {self.key}") from exc
        return self._decode(raw)

    async def _save(self, state: StateT) -> None:
        try:
            await self.redis.set(self.key, state.model_dump_json())
        except RedisError as exc:
            raise StateStoreError(f"Failed to write {self.key}") from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StateT]:
        lock = self.redis.lock(
            self.key + CacheKey.LOCK_SUFFIX,
            timeout=self.lock_timeout,
            blocking_timeout=self.blocking_timeout
        )
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            raise StateStoreError(f"Failed to lock {self.key}") from exc
        if not acquired:
            raise StateStoreError(f"Timed out waiting for lock on {self.key}")

        try:
            state = await self.load()
            yield state
            await self._save(state)
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning(f"Lock on {self.key} expired before release")

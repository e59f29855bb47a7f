"""Per-company mutual exclusion for collection runs."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, Protocol, cast

from redis.asyncio import Redis

from ..errors import CollectionInProgressError

LOGGER = logging.getLogger(__name__)


class CollectionLock(Protocol):
    """Protocol for per-company collection locks."""

    async def acquire(self, company_id: int) -> str | None:
        """Try to take the lock. Returns an owner token, or None if it is held."""

    async def release(self, company_id: int, token: str) -> None:
        """Release the lock if `token` still owns it."""

    async def close(self) -> None:
        """Release resources held by the lock backend."""


class InMemoryCollectionLock(CollectionLock):
    """Process-local lock, sufficient for a single API worker and for tests."""

    def __init__(self) -> None:
        self._owners: dict[int, str] = {}
        self._guard = asyncio.Lock()

    async def acquire(self, company_id: int) -> str | None:
        async with self._guard:
            if company_id in self._owners:
                return None
            token = uuid.uuid4().hex
            self._owners[company_id] = token
            return token

    async def release(self, company_id: int, token: str) -> None:
        async with self._guard:
            if self._owners.get(company_id) == token:
                del self._owners[company_id]

    async def is_held(self, company_id: int) -> bool:
        async with self._guard:
            return company_id in self._owners

    async def close(self) -> None:
        self._owners.clear()


class RedisCollectionLock(CollectionLock):
    """Lock shared by every API worker, backed by Redis keys with an expiry.

    The expiry frees the lock if a worker dies mid-collection.
    """

    _RELEASE_SCRIPT = """
    if redis.call('get', KEYS[1]) == ARGV[1] then
        return redis.call('del', KEYS[1])
    else
        return 0
    end
    """

    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "tunely:collect",
        timeout_seconds: int = 600,
    ) -> None:
        self._redis = redis
        self._key_prefix = key_prefix
        self._timeout_seconds = timeout_seconds

    def _key(self, company_id: int) -> str:
        return f"{self._key_prefix}:{company_id}"

    async def acquire(self, company_id: int) -> str | None:
        token = uuid.uuid4().hex
        acquired = await self._redis.set(
            self._key(company_id), token, nx=True, ex=self._timeout_seconds
        )
        return token if acquired else None

    async def release(self, company_id: int, token: str) -> None:
        released = await cast(
            Coroutine[Any, Any, int],
            self._redis.eval(self._RELEASE_SCRIPT, 1, self._key(company_id), token),
        )
        if not released:
            LOGGER.warning(
                "Collection lock expired before release",
                extra={"company_id": company_id},
            )

    async def close(self) -> None:
        await self._redis.aclose()


@asynccontextmanager
async def hold_collection_lock(lock: CollectionLock, company_id: int) -> AsyncIterator[None]:
    """Hold the collection lock for `company_id` or raise CollectionInProgressError."""
    token = await lock.acquire(company_id)
    if token is None:
        raise CollectionInProgressError(company_id)
    try:
        yield
    finally:
        await lock.release(company_id, token)


def build_collection_lock(redis_url: str | None, *, timeout_seconds: int = 600) -> CollectionLock:
    if redis_url:
        return RedisCollectionLock(
            Redis.from_url(redis_url, decode_responses=True),
            timeout_seconds=timeout_seconds,
        )
    return InMemoryCollectionLock()

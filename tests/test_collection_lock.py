from __future__ import annotations

import pytest

from tunely.collection import (
    InMemoryCollectionLock,
    RedisCollectionLock,
    build_collection_lock,
    hold_collection_lock,
)
from tunely.errors import CollectionInProgressError


class _FakeRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.expiries: dict[str, int] = {}
        self.closed = False

    async def set(self, key: str, value: str, *, nx: bool = False, ex: int | None = None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        if ex is not None:
            self.expiries[key] = ex
        return True

    async def eval(self, _script: str, _numkeys: int, key: str, token: str) -> int:
        if self.values.get(key) == token:
            del self.values[key]
            return 1
        return 0

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_in_memory_lock_is_exclusive_per_company() -> None:
    lock = InMemoryCollectionLock()

    token = await lock.acquire(1)
    assert token is not None
    assert await lock.acquire(1) is None
    assert await lock.acquire(2) is not None

    # A stale token cannot release the current owner
    await lock.release(1, "someone-else")
    assert await lock.is_held(1) is True

    await lock.release(1, token)
    assert await lock.is_held(1) is False
    await lock.close()


@pytest.mark.asyncio
async def test_hold_collection_lock_raises_when_held() -> None:
    lock = InMemoryCollectionLock()

    async with hold_collection_lock(lock, 7):
        with pytest.raises(CollectionInProgressError) as excinfo:
            async with hold_collection_lock(lock, 7):
                pass
        assert excinfo.value.company_id == 7

    assert await lock.is_held(7) is False


@pytest.mark.asyncio
async def test_hold_collection_lock_releases_on_error() -> None:
    lock = InMemoryCollectionLock()

    with pytest.raises(RuntimeError):
        async with hold_collection_lock(lock, 3):
            raise RuntimeError("boom")

    assert await lock.is_held(3) is False


@pytest.mark.asyncio
async def test_redis_lock_uses_prefixed_key_with_expiry() -> None:
    redis = _FakeRedis()
    lock = RedisCollectionLock(
        redis, key_prefix="test:collect", timeout_seconds=30  # type: ignore[arg-type]
    )

    token = await lock.acquire(5)
    assert token is not None
    assert redis.values["test:collect:5"] == token
    assert redis.expiries["test:collect:5"] == 30
    assert await lock.acquire(5) is None

    await lock.release(5, token)
    assert "test:collect:5" not in redis.values

    await lock.close()
    assert redis.closed is True


@pytest.mark.asyncio
async def test_redis_lock_release_ignores_foreign_token() -> None:
    redis = _FakeRedis()
    lock = RedisCollectionLock(redis)  # type: ignore[arg-type]

    token = await lock.acquire(9)
    await lock.release(9, "expired-owner")

    assert redis.values["tunely:collect:9"] == token


def test_build_collection_lock_without_redis_url_is_in_memory() -> None:
    assert isinstance(build_collection_lock(None), InMemoryCollectionLock)
    assert isinstance(build_collection_lock("redis://localhost:6379/0"), RedisCollectionLock)

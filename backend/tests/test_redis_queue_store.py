"""
Tests for the Redis queue store adapter against a mocked client.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from waiting_room.core.exceptions import QueueStoreUnavailableError
from waiting_room.services.redis_queue_store import RedisQueueStore, ENTER_QUEUE_SCRIPT


@pytest.fixture
def redis_mock() -> MagicMock:
    client = MagicMock()
    client.zadd = AsyncMock(return_value=1)
    client.zremrangebyscore = AsyncMock(return_value=2)
    client.zrem = AsyncMock(return_value=1)
    client.zcard = AsyncMock(return_value=3)
    client.zrank = AsyncMock(return_value=0)
    client.ping = AsyncMock(return_value=True)
    client.register_script.return_value = AsyncMock(return_value=[1, 4])
    return client


@pytest.fixture
def redis_store(redis_mock: MagicMock) -> RedisQueueStore:
    return RedisQueueStore(redis_client=redis_mock)


def test_registers_enter_script(redis_store, redis_mock):
    redis_mock.register_script.assert_called_once_with(ENTER_QUEUE_SCRIPT)
    assert "ZREMRANGEBYSCORE" in ENTER_QUEUE_SCRIPT


@pytest.mark.asyncio
async def test_add_or_update(redis_store, redis_mock):
    await redis_store.add_or_update("queue:checkout", "A", 1800)
    redis_mock.zadd.assert_awaited_once_with("queue:checkout", {"A": 1800})


@pytest.mark.asyncio
async def test_remove_range_uses_redis_infinity(redis_store, redis_mock):
    removed = await redis_store.remove_range_by_score("queue:checkout", float("-inf"), 100)

    assert removed == 2
    redis_mock.zremrangebyscore.assert_awaited_once_with("queue:checkout", "-inf", 100)


@pytest.mark.asyncio
async def test_remove(redis_store, redis_mock):
    await redis_store.remove("queue:checkout", "A")
    redis_mock.zrem.assert_awaited_once_with("queue:checkout", "A")


@pytest.mark.asyncio
async def test_cardinality_and_rank(redis_store, redis_mock):
    assert await redis_store.cardinality("queue:checkout") == 3
    assert await redis_store.rank("queue:checkout", "A") == 0

    redis_mock.zrank.return_value = None
    assert await redis_store.rank("queue:checkout", "missing") is None


@pytest.mark.asyncio
async def test_enter_atomically_runs_script(redis_store, redis_mock):
    script = redis_mock.register_script.return_value

    purged, length = await redis_store.enter_atomically("queue:checkout", "A", now=100, expire_at=1900)

    assert (purged, length) == (1, 4)
    script.assert_awaited_once_with(keys=["queue:checkout"], args=[100, 1900, "A"])


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [RedisConnectionError("down"), RedisTimeoutError("slow")])
async def test_transport_errors_become_unavailable(redis_store, redis_mock, error):
    redis_mock.zcard.side_effect = error

    with pytest.raises(QueueStoreUnavailableError) as exc_info:
        await redis_store.cardinality("queue:checkout")

    assert exc_info.value.status_code == 503
    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_ping_failure_returns_false(redis_store, redis_mock):
    redis_mock.ping.side_effect = RedisConnectionError("down")
    assert await redis_store.ping() is False

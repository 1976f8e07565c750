"""
Redis-backed queue store.
Implements AdmissionQueueStore using one sorted set per queue.

Each primitive maps to a single native command (ZADD, ZREMRANGEBYSCORE,
ZREM, ZCARD, ZRANK), so each one is atomic on the server. The atomic enter
runs as a Lua script, loaded once and invoked by SHA.

Failure policy:
  Transport errors are not retried here. They are logged, counted, and
  re-raised as QueueStoreUnavailableError so the caller decides what to do.
  This differs from a fail-open cache: a queue that silently admits
  everyone during an outage defeats its purpose.
"""

import os
import time
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from waiting_room.services.interfaces.queue_store import AdmissionQueueStore
from waiting_room.infrastructure.redis_client import get_redis
from waiting_room.core.exceptions import QueueStoreUnavailableError
from waiting_room.core.metrics import record_store_error, store_operation_latency
from waiting_room.core.logging import get_logger

logger = get_logger(__name__)

# Load Lua script
SCRIPT_PATH = os.path.join(os.path.dirname(__file__), '../infrastructure/enter_queue.lua')
with open(SCRIPT_PATH, 'r') as f:
    ENTER_QUEUE_SCRIPT = f.read()


def _score_bound(value: float) -> str | float:
    # Redis spells infinite bounds as "-inf" / "+inf"
    if value == float("-inf"):
        return "-inf"
    if value == float("inf"):
        return "+inf"
    return value


class RedisQueueStore(AdmissionQueueStore):
    """
    Sorted-set queue store shared by every API worker.

    Use when:
    - More than one process serves the waiting room
    - Queue state must survive an API restart
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self.redis = redis_client if redis_client is not None else get_redis()
        self.enter_script = self.redis.register_script(ENTER_QUEUE_SCRIPT)

    @asynccontextmanager
    async def _command(self, operation: str, key: str):
        start = time.perf_counter()
        try:
            yield
        except RedisError as e:
            record_store_error(operation)
            logger.error("queue_store_error", operation=operation, key=key, error=str(e))
            raise QueueStoreUnavailableError() from e
        finally:
            store_operation_latency.labels(operation=operation).observe(time.perf_counter() - start)

    async def add_or_update(self, key: str, member: str, score: float) -> None:
        async with self._command("zadd", key):
            await self.redis.zadd(key, {member: score})

    async def remove_range_by_score(self, key: str, min_score: float, max_score: float) -> int:
        async with self._command("zremrangebyscore", key):
            removed = await self.redis.zremrangebyscore(key, _score_bound(min_score), _score_bound(max_score))
        return int(removed)

    async def remove(self, key: str, member: str) -> None:
        async with self._command("zrem", key):
            await self.redis.zrem(key, member)

    async def cardinality(self, key: str) -> int:
        async with self._command("zcard", key):
            count = await self.redis.zcard(key)
        return int(count)

    async def rank(self, key: str, member: str) -> Optional[int]:
        async with self._command("zrank", key):
            rank = await self.redis.zrank(key, member)
        return None if rank is None else int(rank)

    async def enter_atomically(self, key: str, member: str, now: float, expire_at: float) -> tuple[int, int]:
        async with self._command("enter_script", key):
            purged, length = await self.enter_script(keys=[key], args=[now, expire_at, member])
        return int(purged), int(length)

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.warning("queue_store_ping_failed", error=str(e))
            return False

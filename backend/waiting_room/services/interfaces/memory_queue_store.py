"""
In-memory queue store - single process only.
Mirrors Redis sorted-set ordering so behaviour matches RedisQueueStore.
"""

import asyncio
import bisect
from typing import Optional

from waiting_room.services.interfaces.queue_store import AdmissionQueueStore


class InMemoryQueueStore(AdmissionQueueStore):
    """
    Dict-of-sorted-lists store.

    Use when:
    - Running tests or a local demo without Redis
    - A single worker process serves all traffic

    Not shared between processes: with several uvicorn workers each one
    would see its own queues.
    """

    def __init__(self):
        # key -> sorted list of (score, member); key -> {member: score}
        self._entries: dict[str, list[tuple[float, str]]] = {}
        self._scores: dict[str, dict[str, float]] = {}
        self._lock = asyncio.Lock()

    def _discard(self, key: str, member: str) -> bool:
        scores = self._scores.get(key)
        if not scores or member not in scores:
            return False
        entries = self._entries[key]
        entries.pop(bisect.bisect_left(entries, (scores.pop(member), member)))
        if not entries:
            del self._entries[key]
            del self._scores[key]
        return True

    def _add(self, key: str, member: str, score: float) -> None:
        self._discard(key, member)
        bisect.insort(self._entries.setdefault(key, []), (score, member))
        self._scores.setdefault(key, {})[member] = score

    def _purge(self, key: str, min_score: float, max_score: float) -> int:
        entries = self._entries.get(key, [])
        stale = [member for score, member in entries if min_score <= score <= max_score]
        for member in stale:
            self._discard(key, member)
        return len(stale)

    async def add_or_update(self, key: str, member: str, score: float) -> None:
        async with self._lock:
            self._add(key, member, score)

    async def remove_range_by_score(self, key: str, min_score: float, max_score: float) -> int:
        async with self._lock:
            return self._purge(key, min_score, max_score)

    async def remove(self, key: str, member: str) -> None:
        async with self._lock:
            self._discard(key, member)

    async def cardinality(self, key: str) -> int:
        async with self._lock:
            return len(self._entries.get(key, []))

    async def rank(self, key: str, member: str) -> Optional[int]:
        async with self._lock:
            score = self._scores.get(key, {}).get(member)
            if score is None:
                return None
            return bisect.bisect_left(self._entries[key], (score, member))

    async def enter_atomically(self, key: str, member: str, now: float, expire_at: float) -> tuple[int, int]:
        async with self._lock:
            purged = self._purge(key, float("-inf"), now)
            self._add(key, member, expire_at)
            return purged, len(self._entries[key])

    async def ping(self) -> bool:
        return True

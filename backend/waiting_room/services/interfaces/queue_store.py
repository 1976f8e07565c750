"""
Queue store interface.
Allows swapping the ordered-set backend without changing admission logic.
"""

from abc import ABC, abstractmethod
from typing import Optional


class AdmissionQueueStore(ABC):
    """
    Ordered collection of members with numeric scores, one per key.

    Implementations:
    - RedisQueueStore: Redis sorted sets, shared across processes
    - InMemoryQueueStore: single-process dict, for development and tests

    Each method must be atomic with respect to other callers on the same key.
    Members with equal scores are ordered lexicographically.
    """

    @abstractmethod
    async def add_or_update(self, key: str, member: str, score: float) -> None:
        """Insert member, or overwrite its score if already present."""
        pass

    @abstractmethod
    async def remove_range_by_score(self, key: str, min_score: float, max_score: float) -> int:
        """
        Remove members whose score lies in [min_score, max_score].

        Returns:
            Number of members removed
        """
        pass

    @abstractmethod
    async def remove(self, key: str, member: str) -> None:
        """Remove member. No-op if absent."""
        pass

    @abstractmethod
    async def cardinality(self, key: str) -> int:
        pass

    @abstractmethod
    async def rank(self, key: str, member: str) -> Optional[int]:
        """
        Zero-based position of member by ascending score.

        Returns:
            Rank, or None if member is not stored under key
        """
        pass

    @abstractmethod
    async def enter_atomically(self, key: str, member: str, now: float, expire_at: float) -> tuple[int, int]:
        """
        Purge members scored <= now, add member with expire_at, and count,
        as a single atomic step.

        Returns:
            (purged, length) where length includes the new member
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Health probe. True if the store answers."""
        pass

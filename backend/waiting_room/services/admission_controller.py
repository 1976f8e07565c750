"""
Admission controller for named waiting-room queues.

QUEUE MODEL
===========

Each queue is one ordered set in the store, key "queue:{name}".
Members are caller-generated request ids; the score is the entry's
expiry time (enqueue time + 30 minutes, in unix seconds).

  - Because the TTL is constant, ordering by expiry is ordering by arrival.
    Entries created in the same second tie and fall back to member order.
  - Re-entering with the same request id overwrites its score and so
    moves it to the back of the queue.
  - There is no background reaper. Every read first sweeps members with
    score <= now, so stale entries are invisible to the caller.

ADMISSION
=========

Two predicates, on purpose kept separate:

  try_enter:    admitted = queue length (after insert) <= max_concurrent
  check_status: can_start = 0 < position <= max_concurrent

The first answers "may I start right now" at entry time; the second is
what a waiting client polls until its turn comes.

CONSISTENCY
===========

By default every operation is several independent store calls. Two clients
entering at once can both see length <= limit and both be admitted, which
overshoots the limit until a dequeue or expiry. The reverse also happens:
if every insert lands before any count, nobody is admitted at entry and
waiters rely on check_status to start. STRICT_ADMISSION routes
try_enter through the store's atomic enter to close that window.
"""

from dataclasses import dataclass

from waiting_room.core.clock import Clock, SystemClock
from waiting_room.core.logging import get_logger
from waiting_room.core.metrics import record_admission, record_expired, record_operation
from waiting_room.services.interfaces.queue_store import AdmissionQueueStore
from waiting_room.services.queue_limits import QueueLimits

logger = get_logger(__name__)

ENTRY_TTL_SECONDS = 30 * 60
NOT_IN_QUEUE = -1


@dataclass(frozen=True)
class QueueStatus:
    position: int
    current_length: int
    max_concurrent: int
    can_start: bool


class AdmissionController:
    """
    Stateless queue logic. All shared state lives in the store, so one
    instance can serve every request and every queue.
    """

    def __init__(
        self,
        store: AdmissionQueueStore,
        limits: QueueLimits,
        clock: Clock | None = None,
        key_prefix: str = "queue:",
        entry_ttl: int = ENTRY_TTL_SECONDS,
        strict: bool = False,
    ):
        self.store = store
        self.limits = limits
        self.clock = clock or SystemClock()
        self.key_prefix = key_prefix
        self.entry_ttl = entry_ttl
        self.strict = strict

    def queue_key(self, queue_name: str) -> str:
        return f"{self.key_prefix}{queue_name}"

    async def _sweep(self, queue_name: str, now: int) -> None:
        removed = await self.store.remove_range_by_score(self.queue_key(queue_name), float("-inf"), now)
        if removed > 0:
            record_expired(removed)
            logger.info("queue_expired_purged", queue=queue_name, count=removed)

    async def try_enter(self, queue_name: str, request_id: str) -> bool:
        """
        Add request_id to the queue and decide whether it may start now.

        Returns:
            True if the queue, including this entry, is within its limit
        """
        record_operation("enter")
        key = self.queue_key(queue_name)
        now = self.clock.now()
        expire_at = now + self.entry_ttl

        if self.strict:
            removed, length = await self.store.enter_atomically(key, request_id, now, expire_at)
            if removed > 0:
                record_expired(removed)
                logger.info("queue_expired_purged", queue=queue_name, count=removed)
        else:
            await self._sweep(queue_name, now)
            await self.store.add_or_update(key, request_id, expire_at)
            length = await self.store.cardinality(key)

        max_concurrent = self.max_concurrent(queue_name)
        admitted = length <= max_concurrent
        record_admission(admitted)

        logger.info(
            "queue_entered",
            queue=queue_name,
            request_id=request_id,
            expire_at=expire_at,
            length=length,
            max_concurrent=max_concurrent,
            admitted=admitted,
        )
        return admitted

    async def position(self, queue_name: str, request_id: str) -> int:
        """1-based rank of request_id, or -1 if expired, dequeued or never entered."""
        record_operation("position")
        await self._sweep(queue_name, self.clock.now())
        rank = await self.store.rank(self.queue_key(queue_name), request_id)
        position = NOT_IN_QUEUE if rank is None else rank + 1
        logger.debug("queue_position_checked", queue=queue_name, request_id=request_id, position=position)
        return position

    async def length(self, queue_name: str) -> int:
        record_operation("length")
        await self._sweep(queue_name, self.clock.now())
        return await self.store.cardinality(self.queue_key(queue_name))

    def max_concurrent(self, queue_name: str) -> int:
        return self.limits.max_concurrent(queue_name)

    async def dequeue(self, queue_name: str, request_id: str) -> None:
        """Release request_id's slot. Removing an absent entry is not an error."""
        record_operation("dequeue")
        await self.store.remove(self.queue_key(queue_name), request_id)
        logger.info("queue_dequeued", queue=queue_name, request_id=request_id)

    async def check_status(self, queue_name: str, request_id: str) -> QueueStatus:
        """Poll view for a waiting client: rank-based start decision plus queue stats."""
        record_operation("status")
        key = self.queue_key(queue_name)
        await self._sweep(queue_name, self.clock.now())
        rank = await self.store.rank(key, request_id)
        position = NOT_IN_QUEUE if rank is None else rank + 1
        current_length = await self.store.cardinality(key)
        max_concurrent = self.max_concurrent(queue_name)
        return QueueStatus(
            position=position,
            current_length=current_length,
            max_concurrent=max_concurrent,
            can_start=0 < position <= max_concurrent,
        )

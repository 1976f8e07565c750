"""
Queue store and admission controller factory.
Configures which store backend the controller runs on.
"""

from waiting_room.core.config import get_settings
from waiting_room.services.admission_controller import AdmissionController
from waiting_room.services.interfaces.queue_store import AdmissionQueueStore
from waiting_room.services.interfaces.memory_queue_store import InMemoryQueueStore
from waiting_room.services.queue_limits import QueueLimits
from waiting_room.services.redis_queue_store import RedisQueueStore


def get_queue_store_backend() -> AdmissionQueueStore:
    """
    Build the configured queue store.

    - redis (default): RedisQueueStore, shared across workers
    - memory: InMemoryQueueStore, single process only
    """
    backend = get_settings().QUEUE_STORE_BACKEND

    if backend == 'memory':
        return InMemoryQueueStore()
    elif backend == 'redis':
        return RedisQueueStore()
    raise ValueError(f"Unknown QUEUE_STORE_BACKEND: {backend!r}")


# Singleton instances
_store: AdmissionQueueStore | None = None
_controller: AdmissionController | None = None


def get_queue_store() -> AdmissionQueueStore:
    """Get queue store singleton."""
    global _store
    if _store is None:
        _store = get_queue_store_backend()
    return _store


def get_admission_controller() -> AdmissionController:
    """Get admission controller singleton, wired from settings."""
    global _controller
    if _controller is None:
        settings = get_settings()
        _controller = AdmissionController(
            store=get_queue_store(),
            limits=QueueLimits(settings.QUEUE_MANAGEMENT, default=settings.DEFAULT_MAX_CONCURRENT),
            key_prefix=settings.QUEUE_KEY_PREFIX,
            entry_ttl=settings.QUEUE_ENTRY_TTL_SECONDS,
            strict=settings.STRICT_ADMISSION,
        )
    return _controller


def reset_admission_controller() -> None:
    """Drop cached instances (on shutdown, or after settings change in tests)."""
    global _store, _controller
    _store = None
    _controller = None

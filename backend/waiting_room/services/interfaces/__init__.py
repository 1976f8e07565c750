"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .queue_store import AdmissionQueueStore
from .memory_queue_store import InMemoryQueueStore

__all__ = ['AdmissionQueueStore', 'InMemoryQueueStore']

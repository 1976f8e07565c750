"""
Per-queue concurrency limits.
Read-only view over the QUEUE_MANAGEMENT setting.
"""

from typing import Mapping, Optional


class QueueLimits:
    def __init__(self, limits: Mapping[str, int], default: int = 1):
        self._limits = dict(limits)
        self.default = default

    def lookup(self, queue_name: str) -> Optional[int]:
        """Configured limit for queue_name, or None if unconfigured."""
        return self._limits.get(queue_name)

    def max_concurrent(self, queue_name: str) -> int:
        limit = self.lookup(queue_name)
        return self.default if limit is None else limit

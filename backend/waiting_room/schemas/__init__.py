from waiting_room.schemas.queue import (
    QueueEntryResponse,
    QueuePositionResponse,
    QueueStatusResponse,
    QueueInfoResponse,
    QueueDequeueResponse,
)

__all__ = [
    "QueueEntryResponse", "QueuePositionResponse", "QueueStatusResponse",
    "QueueInfoResponse", "QueueDequeueResponse",
]

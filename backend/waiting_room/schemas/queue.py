"""
Pydantic schemas for waiting-room responses.
"""

from pydantic import BaseModel, Field


class QueueEntryResponse(BaseModel):
    queue_name: str
    request_id: str
    admitted: bool
    position: int = Field(..., description="1-based rank, -1 if not in queue")


class QueuePositionResponse(BaseModel):
    queue_name: str
    request_id: str
    position: int


class QueueStatusResponse(BaseModel):
    position: int
    current_length: int
    max_concurrent: int
    can_start: bool

    model_config = {"from_attributes": True}


class QueueInfoResponse(BaseModel):
    queue_name: str
    length: int
    max_concurrent: int


class QueueDequeueResponse(BaseModel):
    message: str
    queue_name: str
    request_id: str

"""
Waiting-room endpoints: enter, poll, and leave a named queue.

Flow for a client:
  1. POST /queues/{name}/entries            -> request_id, admitted?
  2. if not admitted, poll .../{request_id}/status until can_start
  3. DELETE .../{request_id} when finished (or abandoning)

Clients that stop polling are dropped after the entry TTL.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from waiting_room.schemas.queue import (
    QueueEntryResponse,
    QueuePositionResponse,
    QueueStatusResponse,
    QueueInfoResponse,
    QueueDequeueResponse,
)
from waiting_room.services.admission_controller import AdmissionController
from waiting_room.services.store_factory import get_admission_controller

router = APIRouter(prefix="/queues", tags=["Queues"])

QueueName = Annotated[str, Path(min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_.\-]+$")]
RequestId = Annotated[str, Path(min_length=1, max_length=64)]


@router.post("/{queue_name}/entries", response_model=QueueEntryResponse, status_code=status.HTTP_201_CREATED)
async def enter_queue(
    queue_name: QueueName,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """
    Join a queue with a freshly generated request id.

    `admitted` is true when the queue, counting this entry, is within its
    concurrency limit; otherwise the client should wait and poll.
    """
    request_id = str(uuid.uuid4())
    admitted = await controller.try_enter(queue_name, request_id)
    position = await controller.position(queue_name, request_id)
    return QueueEntryResponse(
        queue_name=queue_name,
        request_id=request_id,
        admitted=admitted,
        position=position,
    )


@router.get("/{queue_name}", response_model=QueueInfoResponse)
async def get_queue_info(
    queue_name: QueueName,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Live entry count and configured limit. Unknown queues report length 0."""
    length = await controller.length(queue_name)
    return QueueInfoResponse(
        queue_name=queue_name,
        length=length,
        max_concurrent=controller.max_concurrent(queue_name),
    )


@router.get("/{queue_name}/entries/{request_id}", response_model=QueuePositionResponse)
async def get_position(
    queue_name: QueueName,
    request_id: RequestId,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Current 1-based position, or -1 if the entry expired, left, or never existed."""
    position = await controller.position(queue_name, request_id)
    return QueuePositionResponse(queue_name=queue_name, request_id=request_id, position=position)


@router.get("/{queue_name}/entries/{request_id}/status", response_model=QueueStatusResponse)
async def check_status(
    queue_name: QueueName,
    request_id: RequestId,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Polling endpoint. `can_start` turns true once position is within the limit."""
    queue_status = await controller.check_status(queue_name, request_id)
    return QueueStatusResponse.model_validate(queue_status)


@router.delete("/{queue_name}/entries/{request_id}", response_model=QueueDequeueResponse)
async def dequeue(
    queue_name: QueueName,
    request_id: RequestId,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Leave the queue and free the slot. Safe to call more than once."""
    await controller.dequeue(queue_name, request_id)
    return QueueDequeueResponse(
        message="Left queue",
        queue_name=queue_name,
        request_id=request_id,
    )

"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from waiting_room.api.routes import queues

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(queues.router)

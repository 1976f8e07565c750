"""
Waiting Room API - Main Application Entry Point

A virtual waiting room in front of a bottlenecked resource:
- Named queues with a per-queue concurrency limit
- Arrival-ordered positions that clients poll until their turn
- Entries that expire on their own when clients walk away
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from waiting_room.core.config import get_settings
from waiting_room.core.exceptions import WaitingRoomError
from waiting_room.core.logging import setup_logging, get_logger
from waiting_room.core.metrics import metrics_endpoint
from waiting_room.api.router import api_router
from waiting_room.api.middleware import RequestLoggingMiddleware
from waiting_room.infrastructure.redis_client import close_redis
from waiting_room.services.interfaces.queue_store import AdmissionQueueStore
from waiting_room.services.store_factory import get_queue_store, reset_admission_controller

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        queue_store=settings.QUEUE_STORE_BACKEND,
        strict_admission=settings.STRICT_ADMISSION,
    )

    if await get_queue_store().ping():
        logger.info("queue_store_ready")
    else:
        # Requests will fail with 503 until the store comes back
        logger.warning("queue_store_unavailable", backend=settings.QUEUE_STORE_BACKEND)

    yield

    if settings.QUEUE_STORE_BACKEND == "redis":
        await close_redis()
    reset_admission_controller()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Virtual waiting room with per-queue concurrency limits",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.exception_handler(WaitingRoomError)
async def waiting_room_error_handler(request: Request, exc: WaitingRoomError):
    headers = {"Retry-After": "1"} if exc.status_code == 503 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.get("/health", tags=["Health"])
async def health_check(store: AdmissionQueueStore = Depends(get_queue_store)):
    """Health check endpoint for Docker and load balancers."""
    store_ok = await store.ping()
    return JSONResponse(
        status_code=200 if store_ok else 503,
        content={
            "status": "healthy" if store_ok else "degraded",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "queue_store": {
                "backend": settings.QUEUE_STORE_BACKEND,
                "status": "connected" if store_ok else "unreachable",
            },
        },
    )


@app.get("/metrics", tags=["Health"])
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }

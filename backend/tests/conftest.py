"""
Pytest fixtures for the admission controller and HTTP client.

Tests run against the in-memory queue store and a manual clock, so no
Redis server is needed and expiry can be driven deterministically.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from waiting_room.main import app
from waiting_room.core.clock import ManualClock
from waiting_room.services.admission_controller import AdmissionController
from waiting_room.services.interfaces.memory_queue_store import InMemoryQueueStore
from waiting_room.services.queue_limits import QueueLimits
from waiting_room.services.store_factory import get_admission_controller, get_queue_store


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def store() -> InMemoryQueueStore:
    return InMemoryQueueStore()


@pytest.fixture
def limits() -> QueueLimits:
    """checkout allows 2 at once, reports 5; anything else defaults to 1."""
    return QueueLimits({"checkout": 2, "reports": 5})


@pytest.fixture
def controller(store: InMemoryQueueStore, limits: QueueLimits, clock: ManualClock) -> AdmissionController:
    return AdmissionController(store=store, limits=limits, clock=clock)


@pytest.fixture
def strict_controller(store: InMemoryQueueStore, limits: QueueLimits, clock: ManualClock) -> AdmissionController:
    return AdmissionController(store=store, limits=limits, clock=clock, strict=True)


@pytest_asyncio.fixture(scope="function")
async def client(controller: AdmissionController, store: InMemoryQueueStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the test controller and store."""
    app.dependency_overrides[get_admission_controller] = lambda: controller
    app.dependency_overrides[get_queue_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

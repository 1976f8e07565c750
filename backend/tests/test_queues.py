"""
Tests for the waiting-room HTTP endpoints.
"""

import pytest
from httpx import AsyncClient

from waiting_room.core.exceptions import QueueStoreUnavailableError
from waiting_room.main import app
from waiting_room.services.admission_controller import AdmissionController
from waiting_room.services.interfaces.memory_queue_store import InMemoryQueueStore
from waiting_room.services.queue_limits import QueueLimits
from waiting_room.services.store_factory import get_admission_controller, get_queue_store


class UnreachableStore(InMemoryQueueStore):
    """Store whose every round-trip fails like a dropped Redis connection."""

    async def remove_range_by_score(self, key, min_score, max_score):
        raise QueueStoreUnavailableError()

    async def remove(self, key, member):
        raise QueueStoreUnavailableError()

    async def ping(self):
        return False


async def enter(client: AsyncClient, queue_name: str) -> dict:
    response = await client.post(f"/api/v1/queues/{queue_name}/entries")
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_enter_queue(client: AsyncClient):
    data = await enter(client, "checkout")

    assert data["queue_name"] == "checkout"
    assert data["admitted"] is True
    assert data["position"] == 1
    assert len(data["request_id"]) == 36  # uuid4


@pytest.mark.asyncio
async def test_enter_generates_unique_ids(client: AsyncClient):
    first = await enter(client, "checkout")
    second = await enter(client, "checkout")
    assert first["request_id"] != second["request_id"]


@pytest.mark.asyncio
async def test_enter_over_limit_waits(client: AsyncClient, clock):
    await enter(client, "checkout")
    clock.advance(1)
    await enter(client, "checkout")
    clock.advance(1)
    third = await enter(client, "checkout")

    assert third["admitted"] is False
    assert third["position"] == 3


@pytest.mark.asyncio
async def test_get_position(client: AsyncClient):
    entry = await enter(client, "checkout")

    response = await client.get(f"/api/v1/queues/checkout/entries/{entry['request_id']}")

    assert response.status_code == 200
    assert response.json() == {
        "queue_name": "checkout",
        "request_id": entry["request_id"],
        "position": 1,
    }


@pytest.mark.asyncio
async def test_get_position_unknown_request(client: AsyncClient):
    response = await client.get("/api/v1/queues/checkout/entries/not-a-real-id")
    assert response.status_code == 200
    assert response.json()["position"] == -1


@pytest.mark.asyncio
async def test_status_polling_until_turn(client: AsyncClient, clock):
    """The waiter's can_start flips once someone ahead leaves."""
    first = await enter(client, "checkout")
    clock.advance(1)
    await enter(client, "checkout")
    clock.advance(1)
    waiter = await enter(client, "checkout")
    status_url = f"/api/v1/queues/checkout/entries/{waiter['request_id']}/status"

    response = await client.get(status_url)
    assert response.status_code == 200
    assert response.json() == {
        "position": 3,
        "current_length": 3,
        "max_concurrent": 2,
        "can_start": False,
    }

    await client.delete(f"/api/v1/queues/checkout/entries/{first['request_id']}")

    data = (await client.get(status_url)).json()
    assert data["position"] == 2
    assert data["current_length"] == 2
    assert data["can_start"] is True


@pytest.mark.asyncio
async def test_dequeue_twice(client: AsyncClient):
    entry = await enter(client, "checkout")
    url = f"/api/v1/queues/checkout/entries/{entry['request_id']}"

    first = await client.delete(url)
    second = await client.delete(url)

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["message"] == "Left queue"
    assert (await client.get(url)).json()["position"] == -1


@pytest.mark.asyncio
async def test_queue_info(client: AsyncClient):
    await enter(client, "reports")
    await enter(client, "reports")

    response = await client.get("/api/v1/queues/reports")

    assert response.status_code == 200
    assert response.json() == {"queue_name": "reports", "length": 2, "max_concurrent": 5}


@pytest.mark.asyncio
async def test_queue_info_unknown_queue(client: AsyncClient):
    response = await client.get("/api/v1/queues/nobody-here")
    assert response.json() == {"queue_name": "nobody-here", "length": 0, "max_concurrent": 1}


@pytest.mark.asyncio
async def test_invalid_queue_name(client: AsyncClient):
    response = await client.post("/api/v1/queues/bad name!/entries")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_store_unavailable_returns_503(client: AsyncClient, clock):
    controller = AdmissionController(store=UnreachableStore(), limits=QueueLimits({}), clock=clock)
    app.dependency_overrides[get_admission_controller] = lambda: controller

    response = await client.post("/api/v1/queues/checkout/entries")

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert "try again" in response.json()["detail"]

    response = await client.delete("/api/v1/queues/checkout/entries/abc")
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["queue_store"]["status"] == "connected"


@pytest.mark.asyncio
async def test_health_degraded(client: AsyncClient):
    app.dependency_overrides[get_queue_store] = lambda: UnreachableStore()

    response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient):
    await enter(client, "checkout")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "admission_decisions_total" in response.text


@pytest.mark.asyncio
async def test_correlation_id_header(client: AsyncClient):
    response = await client.get("/", headers={"X-Correlation-ID": "abc123"})

    assert response.headers["X-Correlation-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")

"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags waiting   # Enter, poll, leave
  locust -f locustfile.py --tags burst     # Flash crowd on one queue
  locust -f locustfile.py --tags edge      # Test bad input
  locust -f locustfile.py                  # All tests

Start the API with a small limit so queues actually form:
  QUEUE_MANAGEMENT='{"checkout": 5, "flash-sale": 10}'
"""

import random
import time
from locust import HttpUser, task, between, tag, events

QUEUES = ["checkout", "flash-sale"]
POLL_INTERVAL = 1.0
MAX_WAIT_SECONDS = 60


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "="*60)
    print(f"Waiting room load test against queues: {', '.join(QUEUES)}")
    print("="*60)


class WaitingUser(HttpUser):
    """
    TEST 1: Full waiting-room round trip

    Run: locust -f locustfile.py --tags waiting -u 100 -r 20 --run-time 60s

    Each user enters a queue, polls status until can_start, holds the slot
    briefly, then leaves. Watch queue_expired_entries_purged_total stay at 0:
    every user dequeues explicitly.
    """
    wait_time = between(0.5, 2)

    @tag("waiting")
    @task
    def wait_for_turn(self):
        queue_name = random.choice(QUEUES)
        resp = self.client.post(f"/api/v1/queues/{queue_name}/entries",
            name="/api/v1/queues/{queue}/entries")
        if resp.status_code != 201:
            return

        entry = resp.json()
        request_id = entry["request_id"]
        can_start = entry["admitted"]
        deadline = time.time() + MAX_WAIT_SECONDS

        while not can_start and time.time() < deadline:
            time.sleep(POLL_INTERVAL)
            with self.client.get(f"/api/v1/queues/{queue_name}/entries/{request_id}/status",
                name="/api/v1/queues/{queue}/entries/{id}/status",
                catch_response=True
            ) as status_resp:
                if status_resp.status_code != 200:
                    status_resp.failure(f"Unexpected: {status_resp.status_code}")
                    break
                data = status_resp.json()
                if data["position"] == -1:
                    status_resp.failure("Entry vanished while waiting")
                    break
                can_start = data["can_start"]

        # Simulate using the protected resource
        if can_start:
            time.sleep(random.uniform(0.5, 2))

        self.client.delete(f"/api/v1/queues/{queue_name}/entries/{request_id}",
            name="/api/v1/queues/{queue}/entries/{id}")


class BurstUser(HttpUser):
    """
    TEST 2: Flash crowd - many enters on one queue, nobody leaves

    Run: locust -f locustfile.py --tags burst -u 500 -r 100 --run-time 30s

    Afterwards GET /api/v1/queues/flash-sale. Entries admitted should be
    close to the limit; with STRICT_ADMISSION=false a small overshoot under
    heavy concurrency is expected.
    """
    wait_time = between(0, 0.1)

    @tag("burst")
    @task
    def enter_flash_sale(self):
        with self.client.post("/api/v1/queues/flash-sale/entries",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 503:
                resp.failure("Queue store unavailable")
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("burst")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper status codes.
    """
    wait_time = between(0.5, 1.5)

    @tag("edge")
    @task
    def unknown_request_id(self):
        """Position of a never-seen id is -1, not an error."""
        with self.client.get("/api/v1/queues/checkout/entries/does-not-exist",
            catch_response=True
        ) as resp:
            if resp.status_code == 200 and resp.json()["position"] == -1:
                resp.success()
            else:
                resp.failure(f"Expected position -1, got {resp.status_code}")

    @tag("edge")
    @task
    def double_dequeue(self):
        """Leaving twice is allowed."""
        for _ in range(2):
            with self.client.delete("/api/v1/queues/checkout/entries/already-gone",
                catch_response=True
            ) as resp:
                if resp.status_code == 200:
                    resp.success()
                else:
                    resp.failure(f"Expected 200, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_queue_name(self):
        with self.client.post("/api/v1/queues/not a queue!/entries",
            catch_response=True
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def overlong_queue_name(self):
        with self.client.get("/api/v1/queues/" + "q" * 500,
            catch_response=True
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

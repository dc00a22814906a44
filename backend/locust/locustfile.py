"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
from datetime import datetime, timedelta, timezone

from locust import HttpUser, between, events, tag, task

# Shared state
SPACE_IDS = []
CONTESTED_SPACE_ID = None


def random_email():
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"load_{suffix}@test.com"


def future_day(days_ahead=30):
    return (datetime.now(timezone.utc) + timedelta(days=days_ahead)).date()


def slot(day, hour, hours=1):
    start = datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)
    return {
        "reservation_date": day.isoformat(),
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=hours)).isoformat(),
    }


def sign_up(client):
    """Register a throwaway user and return auth headers (empty on failure)."""
    email = random_email()
    client.post("/api/v1/auth/register", json={
        "email": email,
        "name": "Load Tester",
        "password": "test123",
    })
    resp = client.post("/api/v1/auth/login", json={
        "email": email,
        "password": "test123",
    })
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: contested space is created by the first concurrency user")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many users, one space, the same eight hourly slots

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify no two reservations of the space overlap:
      SELECT a.id, b.id FROM reservations a JOIN reservations b
        ON a.space_id = b.space_id AND a.id < b.id
       AND a.start_time < b.end_time AND b.start_time < a.end_time
       WHERE a.space_id = X;
    Should return no rows.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = sign_up(self.client)
        if self.headers and not CONTESTED_SPACE_ID:
            resp = self.client.post(
                "/api/v1/spaces/",
                json={"name": "Contested Room", "location": "Load", "capacity": 10},
                headers=self.headers,
            )
            if resp.status_code == 201:
                globals()["CONTESTED_SPACE_ID"] = resp.json()["id"]
                print(f"\n✓ Created space {CONTESTED_SPACE_ID}\n")

    @tag("concurrency")
    @task
    def reserve_contested_slot(self):
        """All users fight for the same slots."""
        if not CONTESTED_SPACE_ID or not self.headers:
            return

        hour = random.randint(9, 16)
        with self.client.post(
            "/api/v1/reservations/",
            json={"space_id": CONTESTED_SPACE_ID, **slot(future_day(), hour)},
            headers=self.headers,
            name="/api/v1/reservations/ [contested]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: slot taken or weekly quota reached
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: Stop Redis, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = sign_up(self.client)

    @tag("throughput", "read")
    @task(10)
    def list_spaces_cached(self):
        page = random.randint(1, 5)
        self.client.get(
            f"/api/v1/spaces/?page={page}&page_size=20",
            headers=self.headers,
            name="/api/v1/spaces/ [cached]",
        )

    @tag("throughput", "read")
    @task(3)
    def get_space_detail(self):
        if SPACE_IDS:
            self.client.get(
                f"/api/v1/spaces/{random.choice(SPACE_IDS)}",
                headers=self.headers,
                name="/api/v1/spaces/{id}",
            )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = sign_up(self.client)

    def expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_space(self):
        with self.client.post(
            "/api/v1/reservations/",
            json={"space_id": 999999, **slot(future_day(), 10)},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [404])

    @tag("edge")
    @task
    def past_date(self):
        with self.client.post(
            "/api/v1/reservations/",
            json={"space_id": 1, **slot(future_day(-2), 10)},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [400, 404])

    @tag("edge")
    @task
    def inverted_range(self):
        day = future_day()
        body = {"space_id": 1, **slot(day, 12)}
        body["start_time"], body["end_time"] = body["end_time"], body["start_time"]
        with self.client.post(
            "/api/v1/reservations/",
            json=body,
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/reservations/",
            data="not json at all",
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [400, 422])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(
            "/api/v1/reservations/",
            json={"space_id": 1, **slot(future_day(), 10)},
            catch_response=True,
        ) as resp:
            self.expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some reservations and cancellations
      - Rare space creation
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = sign_up(self.client)
        self.reservation_ids = []

    @task(50)
    def browse_spaces(self):
        resp = self.client.get("/api/v1/spaces/?page=1&page_size=20", headers=self.headers)
        if resp.status_code == 200:
            for space in resp.json().get("spaces", []):
                if space["id"] not in SPACE_IDS:
                    SPACE_IDS.append(space["id"])

    @task(10)
    def my_reservations(self):
        self.client.get("/api/v1/reservations/?mine=true", headers=self.headers)

    @task(10)
    def reserve(self):
        if SPACE_IDS and self.headers:
            day = future_day(random.randint(1, 60))
            resp = self.client.post(
                "/api/v1/reservations/",
                json={"space_id": random.choice(SPACE_IDS), **slot(day, random.randint(8, 18))},
                headers=self.headers,
            )
            if resp.status_code == 201:
                self.reservation_ids.append(resp.json()["id"])

    @task(3)
    def cancel(self):
        if self.reservation_ids:
            reservation_id = self.reservation_ids.pop()
            self.client.delete(
                f"/api/v1/reservations/{reservation_id}",
                headers=self.headers,
                name="/api/v1/reservations/{id}",
            )

    @task(2)
    def create_space(self):
        if self.headers:
            resp = self.client.post(
                "/api/v1/spaces/",
                json={
                    "name": f"Room {random.randint(1, 10000)}",
                    "location": "Load",
                    "capacity": random.randint(2, 40),
                },
                headers=self.headers,
            )
            if resp.status_code == 201:
                SPACE_IDS.append(resp.json()["id"])

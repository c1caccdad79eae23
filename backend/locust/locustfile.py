"""
Locust Load Test Suite

Bookings and users belong to other services, so seed them first and point the
run at them:

  LOAD_EVENT_ID=12 LOAD_TRAVELER_IDS=40,41,42 LOAD_ORGANIZER_ID=3 \
  SECRET_KEY=... locust -f locustfile.py

Run scenarios:
  locust -f locustfile.py --tags duplicate    # Race duplicate submissions
  locust -f locustfile.py --tags throughput   # Organizer rating reads (cache)
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
from locust import HttpUser, task, between, tag, events

from event_reviews.core.security import create_access_token

EVENT_ID = int(os.environ.get("LOAD_EVENT_ID", "1"))
ORGANIZER_ID = int(os.environ.get("LOAD_ORGANIZER_ID", "1"))
TRAVELER_IDS = [int(t) for t in os.environ.get("LOAD_TRAVELER_IDS", "1").split(",") if t]

CREATED = []


def headers_for(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(user_id)})}"}


def comment() -> str:
    return random.choice([
        "Fantastic trip, the guide was brilliant",
        "Good value and well organised overall",
        "Decent, though it started a bit late",
    ])


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Reviews created during run: {len(CREATED)} (expected <= {len(TRAVELER_IDS)})")
    print("Verify: SELECT event_id, reviewer_id, COUNT(*) FROM reviews GROUP BY 1, 2 HAVING COUNT(*) > 1;")
    print("=" * 60)


class DuplicateSubmitUser(HttpUser):
    """
    TEST 1: Every user submits for the same few (event, traveler) pairs.

    Run: locust -f locustfile.py --tags duplicate -u 100 -r 50 --run-time 30s

    Exactly one 201 per traveler; everything else must be 409 ALREADY_REVIEWED.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.traveler_id = random.choice(TRAVELER_IDS)
        self.headers = headers_for(self.traveler_id)

    @tag("duplicate")
    @task
    def submit_same_review(self):
        with self.client.post(
            f"/api/v1/events/{EVENT_ID}/reviews",
            json={"rating": random.randint(1, 5), "comment": comment()},
            headers=self.headers,
            name="/api/v1/events/{id}/reviews",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                CREATED.append(resp.json()["id"])
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: lost the race
            else:
                resp.failure(f"Unexpected: {resp.status_code} {resp.text}")


class RatingReader(HttpUser):
    """
    TEST 2: Organizer rating reads.

    Run with and without Redis and compare P95 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def organizer_rating(self):
        self.client.get(f"/api/v1/organizers/{ORGANIZER_ID}/rating", name="/api/v1/organizers/{id}/rating")

    @tag("throughput", "read")
    @task(3)
    def organizer_reviews(self):
        self.client.get(f"/api/v1/organizers/{ORGANIZER_ID}/reviews?limit=20", name="/api/v1/organizers/{id}/reviews")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Bad input must come back as typed errors, never 500.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = headers_for(random.choice(TRAVELER_IDS))

    def _expect(self, payload, expected, kind=None, headers=None, event_id=EVENT_ID):
        with self.client.post(
            f"/api/v1/events/{event_id}/reviews",
            json=payload,
            headers=self.headers if headers is None else headers,
            name="/api/v1/events/{id}/reviews [edge]",
            catch_response=True,
        ) as resp:
            if resp.status_code != expected:
                resp.failure(f"Expected {expected}, got {resp.status_code}")
            elif kind and resp.json()["error"]["kind"] != kind:
                resp.failure(f"Expected {kind}, got {resp.json()['error']['kind']}")
            else:
                resp.success()

    @tag("edge")
    @task
    def rating_out_of_range(self):
        self._expect({"rating": 6, "comment": comment()}, 422, "INVALID_RATING")

    @tag("edge")
    @task
    def fractional_rating(self):
        self._expect({"rating": 4.5, "comment": comment()}, 422, "INVALID_RATING")

    @tag("edge")
    @task
    def short_comment(self):
        self._expect({"rating": 4, "comment": "   meh   "}, 422, "INVALID_COMMENT")

    @tag("edge")
    @task
    def unknown_event(self):
        self._expect({"rating": 4, "comment": comment()}, 404, "EVENT_NOT_FOUND", event_id=999999)

    @tag("edge")
    @task
    def missing_auth(self):
        self._expect({"rating": 4, "comment": comment()}, 401, headers={})

"""
In-memory ReviewStore for unit tests.

Each coroutine yields to the event loop before touching state, so concurrent
callers interleave the way they would against a real database. The
insert-if-absent itself has no await between check and write, which makes it
atomic within one event loop.
"""

import asyncio
import itertools
from datetime import datetime, timezone
from typing import Optional

from event_reviews.domain.errors import ReviewConstraintViolation, StoreUnavailableError
from event_reviews.domain.models import BookingRecord, BookingStatus, EventRecord, ReviewRecord
from event_reviews.services.interfaces.review_store import ReviewStore


class InMemoryReviewStore(ReviewStore):
    def __init__(self) -> None:
        self.events: dict[int, EventRecord] = {}
        self.bookings: list[BookingRecord] = []
        self.reviews: dict[tuple[int, int], ReviewRecord] = {}
        self.unavailable = False
        self._ids = itertools.count(1)
        self.calls: list[str] = []

    # Seeding helpers
    def add_event(self, event_id: int, organizer_id: int, end_time: datetime) -> EventRecord:
        event = EventRecord(id=event_id, organizer_id=organizer_id, end_time=end_time)
        self.events[event_id] = event
        return event

    def add_booking(self, event_id: int, traveler_id: int, status: BookingStatus = BookingStatus.CONFIRMED) -> None:
        self.bookings.append(
            BookingRecord(id=next(self._ids), event_id=event_id, traveler_id=traveler_id, status=status)
        )

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        await asyncio.sleep(0)
        if self.unavailable:
            raise StoreUnavailableError(operation, "simulated outage")

    async def get_event(self, event_id: int) -> Optional[EventRecord]:
        await self._enter("get_event")
        return self.events.get(event_id)

    async def find_confirmed_bookings(self, event_id: int, user_id: int) -> list[BookingRecord]:
        await self._enter("find_confirmed_bookings")
        return [
            b for b in self.bookings
            if b.event_id == event_id and b.traveler_id == user_id and b.status is BookingStatus.CONFIRMED
        ]

    async def find_review(self, event_id: int, user_id: int) -> Optional[ReviewRecord]:
        await self._enter("find_review")
        return self.reviews.get((event_id, user_id))

    async def insert_review_if_absent(self, event_id: int, user_id: int, rating: int, comment: str) -> ReviewRecord:
        await self._enter("insert_review_if_absent")
        key = (event_id, user_id)
        if key in self.reviews:
            raise ReviewConstraintViolation(event_id, user_id)
        review = ReviewRecord(
            id=next(self._ids),
            event_id=event_id,
            reviewer_id=user_id,
            rating=rating,
            comment=comment,
            created_at=datetime.now(timezone.utc),
        )
        self.reviews[key] = review
        return review

    async def rating_totals_for_organizer(self, organizer_id: int) -> tuple[int, int]:
        await self._enter("rating_totals_for_organizer")
        ratings = [
            r.rating for r in self.reviews.values()
            if self.events[r.event_id].organizer_id == organizer_id
        ]
        return len(ratings), sum(ratings)

    async def list_reviews_for_organizer(self, organizer_id: int, limit: int = 20, offset: int = 0) -> list[ReviewRecord]:
        await self._enter("list_reviews_for_organizer")
        reviews = [r for r in self.reviews.values() if self.events[r.event_id].organizer_id == organizer_id]
        reviews.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return reviews[offset:offset + limit]

    async def count_reviews_by_reviewer(self, reviewer_id: int) -> int:
        await self._enter("count_reviews_by_reviewer")
        return sum(1 for r in self.reviews.values() if r.reviewer_id == reviewer_id)

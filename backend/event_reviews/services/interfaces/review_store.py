"""
Review store interface.
Lets the eligibility and write paths run against any transactional datastore.
"""

from abc import ABC, abstractmethod
from typing import Optional

from event_reviews.domain.models import BookingRecord, EventRecord, ReviewRecord


class ReviewStore(ABC):
    """
    Persistence operations consumed by the review engine.

    Every method raises StoreUnavailableError on timeouts or lost
    connectivity. Writes are committed before the method returns.
    """

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[EventRecord]:
        """Return the event, or None if it does not exist."""

    @abstractmethod
    async def find_confirmed_bookings(self, event_id: int, user_id: int) -> list[BookingRecord]:
        """Return confirmed bookings for (event, traveler). Normally zero or one."""

    @abstractmethod
    async def find_review(self, event_id: int, user_id: int) -> Optional[ReviewRecord]:
        """Return the review written by user for event, if any."""

    @abstractmethod
    async def insert_review_if_absent(
        self,
        event_id: int,
        user_id: int,
        rating: int,
        comment: str,
    ) -> ReviewRecord:
        """
        Atomically insert a review.

        Raises:
            ReviewConstraintViolation: a review for (event_id, user_id) exists.
        """

    @abstractmethod
    async def rating_totals_for_organizer(self, organizer_id: int) -> tuple[int, int]:
        """Return (count, sum of ratings) over committed reviews of the organizer's events."""

    @abstractmethod
    async def list_reviews_for_organizer(
        self,
        organizer_id: int,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ReviewRecord]:
        """Return reviews of the organizer's events, newest first."""

    @abstractmethod
    async def count_reviews_by_reviewer(self, reviewer_id: int) -> int:
        """Return how many reviews the user has written."""

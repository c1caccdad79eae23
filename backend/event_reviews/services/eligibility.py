"""
Review eligibility.

A user may review an event when, checked in this order:
  1. the event exists (and has ended, unless the timing check is waived)
  2. the user holds a confirmed booking for it
  3. the user has not reviewed it yet

The first failing check is the reported reason. The result is advisory: a
review can still be created between this check and a later insert. ReviewWriter
enforces one review per pair through the store insert, not through this check.
"""

from datetime import datetime, timezone
from typing import Callable

from event_reviews.core.logging import get_logger
from event_reviews.core.metrics import booking_anomalies, record_eligibility
from event_reviews.domain.errors import ErrorKind
from event_reviews.domain.models import Eligibility
from event_reviews.services.interfaces.review_store import ReviewStore

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EligibilityEvaluator:
    """Decides whether a user may review an event. Reads only."""

    def __init__(
        self,
        store: ReviewStore,
        require_event_ended: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._require_event_ended = require_event_ended
        self._clock = clock

    async def can_review(self, event_id: int, user_id: int) -> Eligibility:
        result = await self._evaluate(event_id, user_id)
        record_eligibility("eligible" if result.eligible else result.reason.value.lower())
        return result

    async def _evaluate(self, event_id: int, user_id: int) -> Eligibility:
        event = await self._store.get_event(event_id)
        if event is None:
            logger.info("review_ineligible", event_id=event_id, user_id=user_id, reason="event_not_found")
            return Eligibility.rejected(ErrorKind.EVENT_NOT_FOUND)

        if self._require_event_ended:
            now = self._clock()
            if event.end_time >= now:
                logger.info(
                    "review_ineligible",
                    event_id=event_id,
                    user_id=user_id,
                    reason="event_not_ended",
                    end_time=event.end_time.isoformat(),
                )
                return Eligibility.rejected(ErrorKind.EVENT_NOT_ENDED)
        else:
            logger.debug("event_end_check_waived", event_id=event_id)

        bookings = await self._store.find_confirmed_bookings(event_id, user_id)
        if not bookings:
            logger.info("review_ineligible", event_id=event_id, user_id=user_id, reason="not_confirmed_attendee")
            return Eligibility.rejected(ErrorKind.NOT_CONFIRMED_ATTENDEE)
        if len(bookings) > 1:
            # Attendance holds; duplicate rows are reported for the booking side to clean up
            booking_anomalies.inc()
            logger.warning(
                "duplicate_confirmed_booking",
                event_id=event_id,
                user_id=user_id,
                booking_ids=[b.id for b in bookings],
            )

        existing = await self._store.find_review(event_id, user_id)
        if existing is not None:
            logger.info(
                "review_ineligible",
                event_id=event_id,
                user_id=user_id,
                reason="already_reviewed",
                review_id=existing.id,
            )
            return Eligibility.rejected(ErrorKind.ALREADY_REVIEWED)

        return Eligibility.ok()

    async def has_user_reviewed(self, event_id: int, user_id: int) -> bool:
        return await self._store.find_review(event_id, user_id) is not None

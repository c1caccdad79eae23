"""
Tests for review submission: input validation, rejection reasons, the
one-review-per-attendee rule under concurrency, and retry behavior.
"""

import asyncio
from datetime import datetime, timezone, timedelta

import pytest

from event_reviews.domain.errors import (
    AlreadyReviewedError,
    ErrorKind,
    EventNotEndedError,
    EventNotFoundError,
    InvalidCommentError,
    InvalidRatingError,
    NotConfirmedAttendeeError,
    ReviewError,
    StoreUnavailableError,
)
from event_reviews.domain.models import RatingAggregate
from event_reviews.services.eligibility import EligibilityEvaluator
from event_reviews.services.rating_cache import RatingCache
from event_reviews.services.review_writer import ReviewWriter

from tests.fakes import InMemoryReviewStore

EVENT_ID = 3
ORGANIZER_ID = 1
USER_ID = 42
COMMENT = "Great guide, would book again"


def writer_for(store, cache=None, require_event_ended=True):
    evaluator = EligibilityEvaluator(store, require_event_ended=require_event_ended)
    return ReviewWriter(store, evaluator, cache or RatingCache(None))


@pytest.fixture
def store(memory_store: InMemoryReviewStore) -> InMemoryReviewStore:
    memory_store.add_event(EVENT_ID, ORGANIZER_ID, end_time=datetime.now(timezone.utc) - timedelta(days=1))
    memory_store.add_booking(EVENT_ID, USER_ID)
    return memory_store


@pytest.mark.asyncio
async def test_submit_creates_review(store):
    review = await writer_for(store).submit(EVENT_ID, USER_ID, 5, COMMENT)

    assert review.event_id == EVENT_ID
    assert review.reviewer_id == USER_ID
    assert review.rating == 5
    assert review.comment == COMMENT
    assert len(store.reviews) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6, -1, 4.5, 5.0, "5", None, True])
async def test_invalid_rating(store, rating):
    with pytest.raises(InvalidRatingError) as exc_info:
        await writer_for(store).submit(EVENT_ID, USER_ID, rating, COMMENT)

    assert exc_info.value.kind is ErrorKind.INVALID_RATING
    assert exc_info.value.retryable is False
    # Validation happens before any store access
    assert store.calls == []


@pytest.mark.asyncio
async def test_comment_of_nine_characters_rejected(store):
    with pytest.raises(InvalidCommentError):
        await writer_for(store).submit(EVENT_ID, USER_ID, 4, "123456789")


@pytest.mark.asyncio
async def test_comment_padding_does_not_count(store):
    with pytest.raises(InvalidCommentError):
        await writer_for(store).submit(EVENT_ID, USER_ID, 4, "   123456789   ")


@pytest.mark.asyncio
async def test_comment_of_ten_characters_after_trim_accepted(store):
    review = await writer_for(store).submit(EVENT_ID, USER_ID, 4, "  1234567890\n")

    assert review.comment == "1234567890"


@pytest.mark.asyncio
async def test_comment_length_upper_bound(store):
    writer = writer_for(store)
    with pytest.raises(InvalidCommentError):
        await writer.submit(EVENT_ID, USER_ID, 4, "x" * 501)

    review = await writer.submit(EVENT_ID, USER_ID, 4, "x" * 500)
    assert len(review.comment) == 500


@pytest.mark.asyncio
async def test_non_string_comment_rejected(store):
    with pytest.raises(InvalidCommentError):
        await writer_for(store).submit(EVENT_ID, USER_ID, 4, None)


@pytest.mark.asyncio
async def test_rejection_reasons_map_to_errors(store):
    writer = writer_for(store)

    with pytest.raises(EventNotFoundError):
        await writer.submit(999, USER_ID, 4, COMMENT)

    with pytest.raises(NotConfirmedAttendeeError):
        await writer.submit(EVENT_ID, USER_ID + 1, 4, COMMENT)

    await writer.submit(EVENT_ID, USER_ID, 4, COMMENT)
    with pytest.raises(AlreadyReviewedError):
        await writer.submit(EVENT_ID, USER_ID, 4, COMMENT)

    assert len(store.reviews) == 1


@pytest.mark.asyncio
async def test_event_not_ended_rejected(memory_store):
    memory_store.add_event(EVENT_ID, ORGANIZER_ID, end_time=datetime.now(timezone.utc) + timedelta(days=1))
    memory_store.add_booking(EVENT_ID, USER_ID)

    with pytest.raises(EventNotEndedError):
        await writer_for(memory_store).submit(EVENT_ID, USER_ID, 4, COMMENT)

    review = await writer_for(memory_store, require_event_ended=False).submit(EVENT_ID, USER_ID, 4, COMMENT)
    assert review.id is not None


@pytest.mark.asyncio
async def test_concurrent_submissions_create_exactly_one_review(store):
    """All submissions pass the pre-check together; the constraint picks one winner."""
    writer = writer_for(store)

    results = await asyncio.gather(
        *[writer.submit(EVENT_ID, USER_ID, 4, COMMENT) for _ in range(10)],
        return_exceptions=True,
    )

    created = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, Exception)]
    assert len(created) == 1
    assert len(rejected) == 9
    assert all(isinstance(e, AlreadyReviewedError) for e in rejected)
    assert len(store.reviews) == 1


class LostResponseStore(InMemoryReviewStore):
    """Commits the first insert, then fails as if the response never arrived."""

    def __init__(self) -> None:
        super().__init__()
        self.drop_next_insert_response = True

    async def insert_review_if_absent(self, event_id, user_id, rating, comment):
        review = await super().insert_review_if_absent(event_id, user_id, rating, comment)
        if self.drop_next_insert_response:
            self.drop_next_insert_response = False
            raise StoreUnavailableError("insert_review_if_absent", "connection reset")
        return review


@pytest.mark.asyncio
async def test_retry_after_lost_response_reports_already_reviewed():
    store = LostResponseStore()
    store.add_event(EVENT_ID, ORGANIZER_ID, end_time=datetime.now(timezone.utc) - timedelta(days=1))
    store.add_booking(EVENT_ID, USER_ID)
    writer = writer_for(store)

    with pytest.raises(StoreUnavailableError) as first:
        await writer.submit(EVENT_ID, USER_ID, 5, COMMENT)
    assert first.value.retryable is True

    with pytest.raises(AlreadyReviewedError):
        await writer.submit(EVENT_ID, USER_ID, 5, COMMENT)

    assert len(store.reviews) == 1


@pytest.mark.asyncio
async def test_submit_invalidates_cached_rating_after_commit(store, fake_redis):
    cache = RatingCache(fake_redis, ttl=60)
    await cache.set(ORGANIZER_ID, RatingAggregate(avg_rating=3.0, total_reviews=1), await cache.version(ORGANIZER_ID))

    await writer_for(store, cache=cache).submit(EVENT_ID, USER_ID, 5, COMMENT)

    assert await cache.get(ORGANIZER_ID) is None


@pytest.mark.asyncio
async def test_rejected_submit_keeps_cached_rating(store, fake_redis):
    cache = RatingCache(fake_redis, ttl=60)
    cached = RatingAggregate(avg_rating=3.0, total_reviews=1)
    await cache.set(ORGANIZER_ID, cached, await cache.version(ORGANIZER_ID))

    with pytest.raises(ReviewError):
        await writer_for(store, cache=cache).submit(EVENT_ID, USER_ID + 1, 5, COMMENT)

    assert await cache.get(ORGANIZER_ID) == cached

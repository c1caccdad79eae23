"""
Review submission with a storage-enforced one-review-per-attendee rule.

CONCURRENCY STRATEGY
====================

Problem:
  Check-then-insert is racy. Two requests for the same (event, reviewer)
  both pass the "not reviewed yet" check and both insert.

Solution:
  1. Validate input (no I/O).
  2. Run the eligibility check. This rejects the common cases early with a
     precise reason, but it is not the enforcement point.
  3. Insert through the store's atomic insert-if-absent. The unique
     constraint on (event_id, reviewer_id) decides; a conflict is reported
     as ALREADY_REVIEWED whatever step 2 concluded.
  4. Only after the insert has committed, drop the organizer's cached
     rating so the next read recomputes it.

Retrying a submission whose response was lost is safe: the retry hits the
constraint and fails with ALREADY_REVIEWED instead of writing a duplicate.
"""

from event_reviews.core.logging import get_logger, review_context
from event_reviews.core.metrics import record_submission, review_submission_latency
from event_reviews.domain.errors import (
    AlreadyReviewedError,
    InvalidCommentError,
    InvalidRatingError,
    ReviewConstraintViolation,
    ReviewError,
    StoreUnavailableError,
    eligibility_error,
)
from event_reviews.domain.models import ReviewRecord
from event_reviews.services.eligibility import EligibilityEvaluator
from event_reviews.services.interfaces.review_store import ReviewStore
from event_reviews.services.rating_cache import RatingCache

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 500


def validate_rating(rating: object) -> int:
    # bool is an int subclass; True must not pass as a 1-star rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingError(rating)
    return rating


def validate_comment(comment: object) -> str:
    """Return the trimmed comment, or raise InvalidCommentError."""
    if not isinstance(comment, str):
        raise InvalidCommentError()
    trimmed = comment.strip()
    if not MIN_COMMENT_LENGTH <= len(trimmed) <= MAX_COMMENT_LENGTH:
        raise InvalidCommentError(len(trimmed))
    return trimmed


class ReviewWriter:
    def __init__(
        self,
        store: ReviewStore,
        evaluator: EligibilityEvaluator,
        cache: RatingCache,
    ) -> None:
        self._store = store
        self._evaluator = evaluator
        self._cache = cache

    async def submit(self, event_id: int, reviewer_id: int, rating: object, comment: object) -> ReviewRecord:
        """
        Create the review for (event_id, reviewer_id).

        Raises:
            InvalidRatingError, InvalidCommentError: malformed input.
            EventNotFoundError, EventNotEndedError, NotConfirmedAttendeeError,
            AlreadyReviewedError: the user may not review this event.
            StoreUnavailableError: transient store fault; the call may be retried.
        """
        with review_context(event_id, reviewer_id), review_submission_latency.time():
            try:
                review = await self._submit(event_id, reviewer_id, rating, comment)
            except ReviewError as e:
                record_submission(e.kind.value.lower())
                raise
        record_submission("created")
        return review

    async def _submit(self, event_id: int, reviewer_id: int, rating: object, comment: object) -> ReviewRecord:
        try:
            rating = validate_rating(rating)
            comment = validate_comment(comment)
        except ReviewError as e:
            logger.info("review_rejected", reason=e.kind.value)
            raise

        eligibility = await self._evaluator.can_review(event_id, reviewer_id)
        if not eligibility.eligible:
            logger.info("review_rejected", reason=eligibility.reason.value)
            raise eligibility_error(eligibility.reason, event_id, reviewer_id)

        try:
            review = await self._store.insert_review_if_absent(event_id, reviewer_id, rating, comment)
        except ReviewConstraintViolation as e:
            # Lost the race against a concurrent submission (or a retried one)
            logger.info(
                "review_rejected",
                reason="ALREADY_REVIEWED",
                detected_by="unique_constraint",
            )
            raise AlreadyReviewedError(event_id, reviewer_id) from e

        logger.info("review_submitted", review_id=review.id, rating=rating)

        await self._invalidate_organizer_rating(event_id)
        return review

    async def _invalidate_organizer_rating(self, event_id: int) -> None:
        if not self._cache.enabled:
            return
        # The review is already committed; a failed lookup here must not fail the
        # submission. The cache TTL bounds the staleness instead.
        try:
            event = await self._store.get_event(event_id)
        except StoreUnavailableError as e:
            logger.warning("rating_cache_invalidation_skipped", event_id=event_id, error=e.detail)
            return
        if event is not None:
            await self._cache.invalidate(event.organizer_id)

"""
Organizer rating aggregates.

avg_rating is the mean over every committed review of the organizer's events,
rounded half-up to one decimal (4.25 -> 4.3). Totals come from a server-side
COUNT/SUM, so the result always matches a full recomputation over the
committed rows. An organizer without reviews has (0.0, 0).
"""

from decimal import Decimal, ROUND_HALF_UP

from event_reviews.core.logging import get_logger
from event_reviews.domain.models import RatingAggregate, ReviewRecord
from event_reviews.services.interfaces.review_store import ReviewStore
from event_reviews.services.rating_cache import RatingCache

logger = get_logger(__name__)

ONE_DECIMAL = Decimal("0.1")


def compute_aggregate(count: int, total: int) -> RatingAggregate:
    if count == 0:
        return RatingAggregate.empty()
    mean = (Decimal(total) / Decimal(count)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return RatingAggregate(avg_rating=float(mean), total_reviews=count)


class RatingService:
    def __init__(self, store: ReviewStore, cache: RatingCache) -> None:
        self._store = store
        self._cache = cache

    async def get_aggregate(self, organizer_id: int) -> RatingAggregate:
        cached = await self._cache.get(organizer_id)
        if cached is not None:
            return cached

        # Version first: an invalidation after this point refuses the write-back
        version = await self._cache.version(organizer_id)
        count, total = await self._store.rating_totals_for_organizer(organizer_id)
        aggregate = compute_aggregate(count, total)
        if version is not None:
            await self._cache.set(organizer_id, aggregate, version)

        logger.debug(
            "organizer_rating_computed",
            organizer_id=organizer_id,
            avg_rating=aggregate.avg_rating,
            total_reviews=aggregate.total_reviews,
        )
        return aggregate

    async def list_organizer_reviews(
        self,
        organizer_id: int,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ReviewRecord]:
        return await self._store.list_reviews_for_organizer(organizer_id, limit=limit, offset=offset)

    async def count_reviews_by_reviewer(self, reviewer_id: int) -> int:
        return await self._store.count_reviews_by_reviewer(reviewer_id)

"""
Request-scoped wiring of the review engine.

Nothing here is process-global: the session comes from get_db and the Redis
client from app.state, both created in the application lifespan.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from event_reviews.core.config import get_settings
from event_reviews.db.session import get_db
from event_reviews.infrastructure.sql_store import SqlAlchemyReviewStore
from event_reviews.services.eligibility import EligibilityEvaluator
from event_reviews.services.interfaces.review_store import ReviewStore
from event_reviews.services.rating_cache import RatingCache
from event_reviews.services.rating_service import RatingService
from event_reviews.services.review_writer import ReviewWriter


def get_store(db: AsyncSession = Depends(get_db)) -> ReviewStore:
    return SqlAlchemyReviewStore(db)


def get_rating_cache(request: Request) -> RatingCache:
    settings = get_settings()
    return RatingCache(getattr(request.app.state, "redis", None), ttl=settings.RATING_CACHE_TTL)


def get_evaluator(store: ReviewStore = Depends(get_store)) -> EligibilityEvaluator:
    settings = get_settings()
    return EligibilityEvaluator(store, require_event_ended=settings.REVIEW_REQUIRE_EVENT_ENDED)


def get_review_writer(
    store: ReviewStore = Depends(get_store),
    evaluator: EligibilityEvaluator = Depends(get_evaluator),
    cache: RatingCache = Depends(get_rating_cache),
) -> ReviewWriter:
    return ReviewWriter(store, evaluator, cache)


def get_rating_service(
    store: ReviewStore = Depends(get_store),
    cache: RatingCache = Depends(get_rating_cache),
) -> RatingService:
    return RatingService(store, cache)

"""
SQLAlchemy implementation of the ReviewStore.

CONCURRENCY STRATEGY: Insert-if-absent on a unique constraint
=============================================================

Problem:
  Two submissions for the same (event, reviewer) race. Both read "no review
  yet", both insert. Result: duplicate reviews and a skewed organizer rating.

Solution:
  The reviews table carries UNIQUE (event_id, reviewer_id). The insert is a
  single statement:

    INSERT INTO reviews (...) VALUES (...)
    ON CONFLICT (event_id, reviewer_id) DO NOTHING
    RETURNING id, ..., created_at

  If RETURNING yields no row, the pair already had a committed review and
  the caller gets ReviewConstraintViolation. The database serializes
  conflicting inserts itself, so this holds across any number of replicas.

  Dialects without ON CONFLICT fall back to a plain INSERT and map the
  IntegrityError for uq_review_event_reviewer to the same violation.

Transient faults (lost connection, pool/statement timeouts, SQLite writer
lock timeouts) are raised as StoreUnavailableError.
"""

import asyncio
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

from sqlalchemy import func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from event_reviews.core.logging import get_logger
from event_reviews.core.metrics import record_store_unavailable
from event_reviews.domain.errors import ReviewConstraintViolation, StoreUnavailableError
from event_reviews.domain.models import BookingRecord, BookingStatus, EventRecord, ReviewRecord
from event_reviews.models.booking import Booking
from event_reviews.models.event import Event
from event_reviews.models.review import Review
from event_reviews.models.user import User
from event_reviews.services.interfaces.review_store import ReviewStore

logger = get_logger(__name__)

UNIQUE_CONSTRAINT_NAME = "uq_review_event_reviewer"

_TRANSIENT_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, asyncio.TimeoutError)

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

_REVIEW_COLUMNS = (
    Review.id,
    Review.event_id,
    Review.reviewer_id,
    Review.rating,
    Review.comment,
    Review.created_at,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_review(row, **listing) -> ReviewRecord:
    return ReviewRecord(
        id=row.id,
        event_id=row.event_id,
        reviewer_id=row.reviewer_id,
        rating=row.rating,
        comment=row.comment,
        created_at=_as_utc(row.created_at),
        **listing,
    )


def _is_review_uniqueness(error: IntegrityError) -> bool:
    text = str(error.orig)
    return UNIQUE_CONSTRAINT_NAME in text or "reviews.event_id, reviews.reviewer_id" in text


def _transient(operation: str):
    """Translate connectivity faults raised inside a store method."""

    def decorator(method):
        @wraps(method)
        async def wrapper(self, *args, **kwargs):
            try:
                return await method(self, *args, **kwargs)
            except _TRANSIENT_ERRORS as e:
                record_store_unavailable(operation)
                logger.error("review_store_unavailable", operation=operation, error=str(e))
                await self._safe_rollback()
                raise StoreUnavailableError(operation, str(e)) from e

        return wrapper

    return decorator


class SqlAlchemyReviewStore(ReviewStore):
    """Review store over an AsyncSession (PostgreSQL in production, SQLite in tests)."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _safe_rollback(self) -> None:
        try:
            await self._db.rollback()
        except SQLAlchemyError as e:
            logger.warning("review_store_rollback_failed", error=str(e))

    @_transient("get_event")
    async def get_event(self, event_id: int) -> Optional[EventRecord]:
        result = await self._db.execute(
            select(Event.id, Event.organizer_id, Event.end_time).where(Event.id == event_id)
        )
        row = result.first()
        if row is None:
            return None
        return EventRecord(id=row.id, organizer_id=row.organizer_id, end_time=_as_utc(row.end_time))

    @_transient("find_confirmed_bookings")
    async def find_confirmed_bookings(self, event_id: int, user_id: int) -> list[BookingRecord]:
        result = await self._db.execute(
            select(Booking.id, Booking.event_id, Booking.traveler_id, Booking.status).where(
                Booking.event_id == event_id,
                Booking.traveler_id == user_id,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
        )
        return [
            BookingRecord(
                id=row.id,
                event_id=row.event_id,
                traveler_id=row.traveler_id,
                status=BookingStatus(row.status),
            )
            for row in result.all()
        ]

    @_transient("find_review")
    async def find_review(self, event_id: int, user_id: int) -> Optional[ReviewRecord]:
        result = await self._db.execute(
            select(*_REVIEW_COLUMNS).where(
                Review.event_id == event_id,
                Review.reviewer_id == user_id,
            )
        )
        row = result.first()
        return _to_review(row) if row is not None else None

    @_transient("insert_review_if_absent")
    async def insert_review_if_absent(
        self,
        event_id: int,
        user_id: int,
        rating: int,
        comment: str,
    ) -> ReviewRecord:
        values = {
            "event_id": event_id,
            "reviewer_id": user_id,
            "rating": rating,
            "comment": comment,
        }
        dialect = self._db.get_bind().dialect.name
        upsert = _UPSERT_INSERTS.get(dialect)

        if upsert is not None:
            stmt = (
                upsert(Review)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["event_id", "reviewer_id"])
                .returning(*_REVIEW_COLUMNS)
            )
            row = (await self._db.execute(stmt)).first()
            if row is None:
                await self._db.rollback()
                raise ReviewConstraintViolation(event_id, user_id)
        else:
            try:
                result = await self._db.execute(insert(Review).values(**values).returning(*_REVIEW_COLUMNS))
                row = result.first()
            except IntegrityError as e:
                await self._db.rollback()
                if _is_review_uniqueness(e):
                    raise ReviewConstraintViolation(event_id, user_id) from e
                raise

        await self._db.commit()
        return _to_review(row)

    @_transient("rating_totals_for_organizer")
    async def rating_totals_for_organizer(self, organizer_id: int) -> tuple[int, int]:
        result = await self._db.execute(
            select(func.count(Review.id), func.coalesce(func.sum(Review.rating), 0))
            .join(Event, Review.event_id == Event.id)
            .where(Event.organizer_id == organizer_id)
        )
        count, total = result.one()
        return int(count), int(total)

    @_transient("list_reviews_for_organizer")
    async def list_reviews_for_organizer(
        self,
        organizer_id: int,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ReviewRecord]:
        result = await self._db.execute(
            select(*_REVIEW_COLUMNS, Event.title, Event.start_time, User.full_name, User.profile_image_url)
            .join(Event, Review.event_id == Event.id)
            .join(User, Review.reviewer_id == User.id)
            .where(Event.organizer_id == organizer_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [
            _to_review(
                row,
                event_title=row.title,
                event_start_time=_as_utc(row.start_time),
                reviewer_name=row.full_name,
                reviewer_image_url=row.profile_image_url,
            )
            for row in result.all()
        ]

    @_transient("count_reviews_by_reviewer")
    async def count_reviews_by_reviewer(self, reviewer_id: int) -> int:
        result = await self._db.execute(
            select(func.count(Review.id)).where(Review.reviewer_id == reviewer_id)
        )
        return int(result.scalar_one())

"""Domain records crossing the store boundary.

These are plain immutable values. SQLAlchemy ORM models live in
event_reviews/models (persistence layer) and are mapped into these by the store.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from event_reviews.domain.errors import ErrorKind


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    WAITLISTED = "waitlisted"


class UserRole(str, Enum):
    TRAVELER = "traveler"
    ORGANIZER = "organizer"


@dataclass(frozen=True)
class EventRecord:
    id: int
    organizer_id: int
    end_time: datetime


@dataclass(frozen=True)
class BookingRecord:
    id: int
    event_id: int
    traveler_id: int
    status: BookingStatus


@dataclass(frozen=True)
class ReviewRecord:
    id: int
    event_id: int
    reviewer_id: int
    rating: int
    comment: str
    created_at: datetime
    # Populated by listing queries only
    event_title: Optional[str] = None
    event_start_time: Optional[datetime] = None
    reviewer_name: Optional[str] = None
    reviewer_image_url: Optional[str] = None


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    reason: Optional[ErrorKind] = None

    @classmethod
    def ok(cls) -> "Eligibility":
        return cls(eligible=True)

    @classmethod
    def rejected(cls, reason: ErrorKind) -> "Eligibility":
        return cls(eligible=False, reason=reason)


@dataclass(frozen=True)
class RatingAggregate:
    avg_rating: float
    total_reviews: int

    @classmethod
    def empty(cls) -> "RatingAggregate":
        return cls(avg_rating=0.0, total_reviews=0)

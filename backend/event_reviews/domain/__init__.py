from event_reviews.domain.errors import ErrorKind, ReviewError
from event_reviews.domain.models import (
    BookingRecord,
    BookingStatus,
    Eligibility,
    EventRecord,
    RatingAggregate,
    ReviewRecord,
    UserRole,
)

__all__ = [
    "ErrorKind",
    "ReviewError",
    "BookingRecord",
    "BookingStatus",
    "Eligibility",
    "EventRecord",
    "RatingAggregate",
    "ReviewRecord",
    "UserRole",
]

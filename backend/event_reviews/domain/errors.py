"""Domain error kinds for review submission and eligibility."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Rejection reasons reported to callers."""

    INVALID_RATING = "INVALID_RATING"
    INVALID_COMMENT = "INVALID_COMMENT"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_NOT_ENDED = "EVENT_NOT_ENDED"
    NOT_CONFIRMED_ATTENDEE = "NOT_CONFIRMED_ATTENDEE"
    ALREADY_REVIEWED = "ALREADY_REVIEWED"
    UNAVAILABLE = "UNAVAILABLE"


MESSAGES = {
    ErrorKind.INVALID_RATING: "Rating must be a whole number from 1 to 5",
    ErrorKind.INVALID_COMMENT: "Comment must be between 10 and 500 characters",
    ErrorKind.EVENT_NOT_FOUND: "Event not found",
    ErrorKind.EVENT_NOT_ENDED: "Event has not ended yet",
    ErrorKind.NOT_CONFIRMED_ATTENDEE: "Only confirmed attendees can review this event",
    ErrorKind.ALREADY_REVIEWED: "You have already reviewed this event",
    ErrorKind.UNAVAILABLE: "Review service is temporarily unavailable",
}


class ReviewError(Exception):
    """Base domain error with kind and user-safe message."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None) -> None:
        self.kind = kind
        self.message = message or MESSAGES[kind]
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.UNAVAILABLE

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class InvalidRatingError(ReviewError):
    def __init__(self, rating: object) -> None:
        super().__init__(ErrorKind.INVALID_RATING)
        self.rating = rating


class InvalidCommentError(ReviewError):
    def __init__(self, length: Optional[int] = None) -> None:
        super().__init__(ErrorKind.INVALID_COMMENT)
        self.length = length


class EventNotFoundError(ReviewError):
    def __init__(self, event_id: int) -> None:
        super().__init__(ErrorKind.EVENT_NOT_FOUND)
        self.event_id = event_id


class EventNotEndedError(ReviewError):
    def __init__(self, event_id: int) -> None:
        super().__init__(ErrorKind.EVENT_NOT_ENDED)
        self.event_id = event_id


class NotConfirmedAttendeeError(ReviewError):
    def __init__(self, event_id: int, user_id: int) -> None:
        super().__init__(ErrorKind.NOT_CONFIRMED_ATTENDEE)
        self.event_id = event_id
        self.user_id = user_id


class AlreadyReviewedError(ReviewError):
    def __init__(self, event_id: int, user_id: int) -> None:
        super().__init__(ErrorKind.ALREADY_REVIEWED)
        self.event_id = event_id
        self.user_id = user_id


class StoreUnavailableError(ReviewError):
    """Transient store fault (timeout, lost connection). Safe to retry."""

    def __init__(self, operation: str, detail: str = "") -> None:
        super().__init__(ErrorKind.UNAVAILABLE)
        self.operation = operation
        self.detail = detail


class ReviewConstraintViolation(Exception):
    """Raised by a store when (event_id, reviewer_id) already has a review."""

    def __init__(self, event_id: int, reviewer_id: int) -> None:
        super().__init__(f"review exists for event={event_id} reviewer={reviewer_id}")
        self.event_id = event_id
        self.reviewer_id = reviewer_id


_ERRORS_BY_KIND = {
    ErrorKind.EVENT_NOT_FOUND: lambda event_id, user_id: EventNotFoundError(event_id),
    ErrorKind.EVENT_NOT_ENDED: lambda event_id, user_id: EventNotEndedError(event_id),
    ErrorKind.NOT_CONFIRMED_ATTENDEE: NotConfirmedAttendeeError,
    ErrorKind.ALREADY_REVIEWED: AlreadyReviewedError,
}


def eligibility_error(kind: ErrorKind, event_id: int, user_id: int) -> ReviewError:
    """Build the exception matching an eligibility rejection reason."""
    return _ERRORS_BY_KIND[kind](event_id, user_id)

from event_reviews.models.user import User
from event_reviews.models.event import Event
from event_reviews.models.booking import Booking
from event_reviews.models.review import Review

__all__ = ["User", "Event", "Booking", "Review"]

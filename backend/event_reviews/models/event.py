"""
Event model. Owned by the booking subsystem; reviews only read
`organizer_id` and `end_time`.

Key design decisions:
- Index on `organizer_id` so organizer rating aggregation joins stay cheap
- `end_time` is timezone-aware; the "has ended" check compares against UTC now
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from event_reviews.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Relationships
    organizer = relationship("User", back_populates="events")
    bookings = relationship("Booking", back_populates="event")
    reviews = relationship("Review", back_populates="event")

    __table_args__ = (
        CheckConstraint("end_time >= start_time", name="check_event_end_after_start"),
        Index("ix_events_organizer_id", "organizer_id"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, organizer={self.organizer_id})>"

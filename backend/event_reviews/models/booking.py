"""
Booking model representing a traveler's reservation for an event.

Written by the booking subsystem. Reviews only read it to confirm attendance,
so no uniqueness is imposed on (traveler_id, event_id) here; duplicates are
reported as a data anomaly by the eligibility check.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from event_reviews.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    traveler_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    status = Column(String(20), nullable=False, default="pending")

    # Relationships
    event = relationship("Event", back_populates="bookings")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'waitlisted')",
            name="check_booking_status",
        ),
        # Covers the attendance lookup: event + traveler + status
        Index("ix_bookings_event_traveler_status", "event_id", "traveler_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, traveler={self.traveler_id}, event={self.event_id}, status={self.status})>"

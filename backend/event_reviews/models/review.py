"""
Review model. Create-once, read-many.

Key design decisions:
- Unique constraint on (event_id, reviewer_id) is the enforcement point for
  one review per attendee; application checks are only a pre-check
- CHECK constraint keeps ratings in 1..5 even for writes that bypass the API
- created_at is server-assigned at insert
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint, UniqueConstraint, func
from sqlalchemy.orm import relationship

from event_reviews.db.base import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    event = relationship("Event", back_populates="reviews")
    reviewer = relationship("User", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("event_id", "reviewer_id", name="uq_review_event_reviewer"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="check_review_rating_range"),
        Index("ix_reviews_reviewer_id", "reviewer_id"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, event={self.event_id}, reviewer={self.reviewer_id}, rating={self.rating})>"

"""
User profile model. Accounts are managed by the auth service; this table only
carries what reviews need: identity, display name, avatar and role.
"""

from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship

from event_reviews.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    profile_image_url = Column(String(500), nullable=True)
    role = Column(String(20), nullable=False, default="traveler")  # traveler, organizer

    # Relationships
    events = relationship("Event", back_populates="organizer")
    reviews = relationship("Review", back_populates="reviewer")

    __table_args__ = (
        CheckConstraint("role IN ('traveler', 'organizer')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

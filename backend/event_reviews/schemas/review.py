"""
Pydantic schemas for review request/response validation.

Rating and comment bounds are checked by the review writer, not here, so
callers get INVALID_RATING / INVALID_COMMENT rather than a generic 422.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel


class ReviewCreate(BaseModel):
    # Raw JSON values, missing ones included, reach the writer as-is
    rating: Any = None
    comment: Any = None


class ReviewResponse(BaseModel):
    id: int
    event_id: int
    reviewer_id: int
    rating: int
    comment: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrganizerReviewResponse(ReviewResponse):
    event_title: Optional[str] = None
    event_start_time: Optional[datetime] = None
    reviewer_name: Optional[str] = None
    reviewer_image_url: Optional[str] = None


class EligibilityResponse(BaseModel):
    event_id: int
    user_id: int
    eligible: bool
    reason: Optional[str] = None


class OrganizerRatingResponse(BaseModel):
    organizer_id: int
    avg_rating: float
    total_reviews: int


class ReviewCountResponse(BaseModel):
    user_id: int
    reviews_written: int


class ErrorDetail(BaseModel):
    kind: str
    message: str
    retryable: bool


class ErrorResponse(BaseModel):
    error: ErrorDetail

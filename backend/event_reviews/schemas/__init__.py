from event_reviews.schemas.review import (
    ReviewCreate,
    ReviewResponse,
    OrganizerReviewResponse,
    EligibilityResponse,
    OrganizerRatingResponse,
    ReviewCountResponse,
    ErrorResponse,
)

__all__ = [
    "ReviewCreate", "ReviewResponse", "OrganizerReviewResponse",
    "EligibilityResponse", "OrganizerRatingResponse", "ReviewCountResponse",
    "ErrorResponse",
]

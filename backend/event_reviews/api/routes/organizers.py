"""
Organizer rating and review listing endpoints.
"""

from fastapi import APIRouter, Depends, Query

from event_reviews.api.dependencies import get_rating_service
from event_reviews.schemas.review import OrganizerRatingResponse, OrganizerReviewResponse, ReviewCountResponse
from event_reviews.services.rating_service import RatingService

router = APIRouter(tags=["Ratings"])


@router.get("/organizers/{organizer_id}/rating", response_model=OrganizerRatingResponse)
async def organizer_rating(
    organizer_id: int,
    ratings: RatingService = Depends(get_rating_service),
):
    """Average rating and review count across all of the organizer's events."""
    aggregate = await ratings.get_aggregate(organizer_id)
    return OrganizerRatingResponse(
        organizer_id=organizer_id,
        avg_rating=aggregate.avg_rating,
        total_reviews=aggregate.total_reviews,
    )


@router.get("/organizers/{organizer_id}/reviews", response_model=list[OrganizerReviewResponse])
async def organizer_reviews(
    organizer_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    ratings: RatingService = Depends(get_rating_service),
):
    """Reviews of the organizer's events, newest first."""
    reviews = await ratings.list_organizer_reviews(organizer_id, limit=limit, offset=offset)
    return [OrganizerReviewResponse.model_validate(r) for r in reviews]


@router.get("/users/{user_id}/reviews/count", response_model=ReviewCountResponse)
async def reviews_written(
    user_id: int,
    ratings: RatingService = Depends(get_rating_service),
):
    count = await ratings.count_reviews_by_reviewer(user_id)
    return ReviewCountResponse(user_id=user_id, reviews_written=count)

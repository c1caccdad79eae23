"""
Review endpoints: eligibility pre-check and submission.
"""

from fastapi import APIRouter, Depends, status

from event_reviews.api.dependencies import get_evaluator, get_review_writer
from event_reviews.core.security import get_current_user_id
from event_reviews.schemas.review import EligibilityResponse, ErrorResponse, ReviewCreate, ReviewResponse
from event_reviews.services.eligibility import EligibilityEvaluator
from event_reviews.services.review_writer import ReviewWriter

router = APIRouter(prefix="/events", tags=["Reviews"])


@router.get("/{event_id}/review-eligibility", response_model=EligibilityResponse)
async def review_eligibility(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    evaluator: EligibilityEvaluator = Depends(get_evaluator),
):
    """
    Whether the caller may review this event right now.
    Advisory only: submission re-checks and the database has the final say.
    """
    result = await evaluator.can_review(event_id, user_id)
    return EligibilityResponse(
        event_id=event_id,
        user_id=user_id,
        eligible=result.eligible,
        reason=result.reason.value if result.reason else None,
    )


@router.post(
    "/{event_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def submit_review(
    event_id: int,
    review_data: ReviewCreate,
    user_id: int = Depends(get_current_user_id),
    writer: ReviewWriter = Depends(get_review_writer),
):
    """
    Submit the caller's review for an event they attended.

    At most one review per user and event; concurrent or retried submissions
    for the same pair return 409 ALREADY_REVIEWED.
    """
    review = await writer.submit(event_id, user_id, review_data.rating, review_data.comment)
    return ReviewResponse.model_validate(review)

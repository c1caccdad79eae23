"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from event_reviews.api.routes import reviews, organizers

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(reviews.router)
api_router.include_router(organizers.router)

"""
Event Reviews API - Main Application Entry Point

Review eligibility and organizer ratings for the event booking platform:
- One review per attendee and event, enforced by a unique constraint
- Atomic insert-if-absent so concurrent or retried submissions cannot duplicate
- Organizer rating aggregates with Redis read-through caching
- Structured logging with request correlation
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from event_reviews.core.config import get_settings
from event_reviews.core.logging import setup_logging, get_logger
from event_reviews.core.metrics import metrics_endpoint
from event_reviews.api.router import api_router
from event_reviews.api.middleware import RequestLoggingMiddleware
from event_reviews.db.session import create_engine, create_session_factory
from event_reviews.domain.errors import ErrorKind, ReviewError
from event_reviews.infrastructure.redis_client import create_redis, close_redis

settings = get_settings()
logger = get_logger(__name__)

ERROR_STATUS = {
    ErrorKind.INVALID_RATING: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_COMMENT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.EVENT_NOT_ENDED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_CONFIRMED_ATTENDEE: status.HTTP_403_FORBIDDEN,
    ErrorKind.ALREADY_REVIEWED: status.HTTP_409_CONFLICT,
    ErrorKind.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        require_event_ended=settings.REVIEW_REQUIRE_EVENT_ENDED,
    )
    if not settings.REVIEW_REQUIRE_EVENT_ENDED:
        logger.warning("event_end_check_disabled", message="Reviews accepted before events end")

    engine = create_engine(settings)
    app.state.session_factory = create_session_factory(engine)

    app.state.redis = await create_redis(settings)
    if app.state.redis:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Organizer ratings computed without cache")

    yield

    # Cleanup
    await close_redis(app.state.redis)
    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Review eligibility, one-review-per-attendee submission and organizer ratings",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.exception_handler(ReviewError)
async def review_error_handler(request: Request, exc: ReviewError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS[exc.kind],
        content={
            "error": {
                "kind": exc.kind.value,
                "message": exc.message,
                "retryable": exc.retryable,
            }
        },
    )


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": "enabled" if getattr(request.app.state, "redis", None) else "disabled",
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()

"""
Redis client factory for the organizer rating cache.
Separated from business logic for clean architecture.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from event_reviews.core.config import Settings
from event_reviews.core.logging import get_logger

logger = get_logger(__name__)


async def create_redis(settings: Settings) -> Optional[redis.Redis]:
    """
    Create and ping a Redis client. Returns None if Redis is disabled or
    unreachable; ratings are then always computed from the database.
    """
    if not settings.REDIS_ENABLED:
        return None

    client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
    )
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.error("redis_connection_failed", error=str(e))
        await client.aclose()
        return None

    logger.info("redis_connected", url=settings.REDIS_URL)
    return client


async def close_redis(client: Optional[redis.Redis]) -> None:
    """Close Redis connection on shutdown."""
    if client is not None:
        await client.aclose()

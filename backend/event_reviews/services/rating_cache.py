"""
Redis cache for organizer rating aggregates.

CACHING STRATEGY
================

What we cache:
  - One aggregate per organizer: {"avg_rating": 4.3, "total_reviews": 4}
  - Key pattern: "ratings:organizer:{organizer_id}"
  - A version counter per organizer: "ratings:organizer:{organizer_id}:version"

Read path (see RatingService.get_aggregate):
  1. GET the aggregate; a hit is returned as-is.
  2. On a miss, read the version, then the totals from the database.
  3. Write the aggregate back only if the version is still the one read in
     step 2 (rating_cache_store.lua). A review committed after step 2 has
     bumped the version, so totals that predate it are never cached.

Invalidation strategy:
  - After a review for one of the organizer's events has been committed,
    INCR the version and DEL the aggregate in one script
    (rating_cache_invalidate.lua). Never before the commit.
  - TTL-based expiry as safety net (5 minutes by default)

Failure handling:
  Redis is advisory. Every error is logged and treated as a miss, so the
  database stays authoritative and a Redis outage never fails a request.
  A failed version read disables the write-back for that request.
"""

import json
import os
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from event_reviews.core.logging import get_logger
from event_reviews.core.metrics import record_cache_operation
from event_reviews.domain.models import RatingAggregate

logger = get_logger(__name__)

SCRIPT_DIR = os.path.join(os.path.dirname(__file__), "../infrastructure")
with open(os.path.join(SCRIPT_DIR, "rating_cache_store.lua"), "r") as f:
    STORE_IF_CURRENT_SCRIPT = f.read()
with open(os.path.join(SCRIPT_DIR, "rating_cache_invalidate.lua"), "r") as f:
    INVALIDATE_SCRIPT = f.read()

INITIAL_VERSION = "0"


def _make_rating_key(organizer_id: int) -> str:
    return f"ratings:organizer:{organizer_id}"


def _make_version_key(organizer_id: int) -> str:
    return f"ratings:organizer:{organizer_id}:version"


class RatingCache:
    """Read-through cache for organizer rating aggregates. A None client disables it."""

    def __init__(self, client: Optional[redis.Redis], ttl: int = 300) -> None:
        self._client = client
        self._ttl = ttl
        if client is not None:
            self._store_if_current = client.register_script(STORE_IF_CURRENT_SCRIPT)
            self._invalidate = client.register_script(INVALIDATE_SCRIPT)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def get(self, organizer_id: int) -> Optional[RatingAggregate]:
        if not self._client:
            return None

        key = _make_rating_key(organizer_id)
        try:
            data = await self._client.get(key)
        except RedisError as e:
            record_cache_operation("get", "error")
            logger.error("rating_cache_error", operation="get", key=key, error=str(e))
            return None

        if data is None:
            record_cache_operation("get", "miss")
            logger.debug("cache_miss", key=key)
            return None

        record_cache_operation("get", "hit")
        logger.debug("cache_hit", key=key)
        payload = json.loads(data)
        return RatingAggregate(
            avg_rating=float(payload["avg_rating"]),
            total_reviews=int(payload["total_reviews"]),
        )

    async def version(self, organizer_id: int) -> Optional[str]:
        """
        Current invalidation version for the organizer. Read it before the
        totals and pass it to set(). None means the write-back must be skipped.
        """
        if not self._client:
            return None

        key = _make_version_key(organizer_id)
        try:
            value = await self._client.get(key)
        except RedisError as e:
            record_cache_operation("version", "error")
            logger.error("rating_cache_error", operation="version", key=key, error=str(e))
            return None
        if value is None:
            return INITIAL_VERSION
        return value.decode() if isinstance(value, bytes) else str(value)

    async def set(self, organizer_id: int, aggregate: RatingAggregate, version: str) -> bool:
        """Store the aggregate unless the organizer was invalidated after `version` was read."""
        if not self._client:
            return False

        key = _make_rating_key(organizer_id)
        payload = {"avg_rating": aggregate.avg_rating, "total_reviews": aggregate.total_reviews}
        try:
            stored = await self._store_if_current(
                keys=[key, _make_version_key(organizer_id)],
                args=[version, self._ttl, json.dumps(payload)],
            )
        except RedisError as e:
            record_cache_operation("set", "error")
            logger.error("rating_cache_error", operation="set", key=key, error=str(e))
            return False

        if not stored:
            record_cache_operation("set", "stale")
            logger.info("rating_cache_write_skipped", key=key, version=version)
            return False

        record_cache_operation("set", "ok")
        logger.debug("cache_set", key=key, ttl=self._ttl)
        return True

    async def invalidate(self, organizer_id: int) -> None:
        """Drop the organizer's aggregate. Call only after the review is committed."""
        if not self._client:
            return

        key = _make_rating_key(organizer_id)
        try:
            deleted = await self._invalidate(keys=[key, _make_version_key(organizer_id)])
            record_cache_operation("invalidate", "ok")
            logger.info("rating_cache_invalidated", key=key, keys_deleted=deleted)
        except RedisError as e:
            record_cache_operation("invalidate", "error")
            logger.error("rating_cache_error", operation="invalidate", key=key, error=str(e))

"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .redis_client import create_redis, close_redis
from .sql_store import SqlAlchemyReviewStore

__all__ = ['create_redis', 'close_redis', 'SqlAlchemyReviewStore']

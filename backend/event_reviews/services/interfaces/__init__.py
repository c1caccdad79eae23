"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .review_store import ReviewStore

__all__ = ['ReviewStore']

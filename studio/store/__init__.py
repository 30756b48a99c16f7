"""Store boundary and its SQL implementation."""

from studio.store.base import ReviewStore, TransitionResult
from studio.store.sql import SQLReviewStore

__all__ = ["ReviewStore", "TransitionResult", "SQLReviewStore"]

"""Collection of disclosure and market data for registered companies."""

from .lock import (
    CollectionLock,
    InMemoryCollectionLock,
    RedisCollectionLock,
    build_collection_lock,
    hold_collection_lock,
)
from .service import CollectionResult, CollectionService, extract_statement_amounts

__all__ = [
    "CollectionLock",
    "CollectionResult",
    "CollectionService",
    "InMemoryCollectionLock",
    "RedisCollectionLock",
    "build_collection_lock",
    "extract_statement_amounts",
    "hold_collection_lock",
]

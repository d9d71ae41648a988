"""
Entry stores for bgcdb.

Available Entry Stores:
    - MemoryEntryStore: In-memory records (development, tests, small catalogs)
    - SQLEntryStore: Parameterized SQL over a DB-API connection (SQLite by default)

Example:
    >>> from bgcdb.storage import create_store
    >>>
    >>> store = create_store("sqlite", "./mibig.db")
    >>> store.lookup("genus", "streptomyces")
    [1, 23]
"""

from typing import Optional

from .base import EntryStore, StoreStats
from .memory import LikePattern, MemoryEntryStore, default_extractors, like_pattern
from .sql import (
    SQLEntryStore,
    SCHEMA,
    DEFAULT_LOOKUP_STATEMENTS,
    DEFAULT_EXISTS_STATEMENTS,
    DEFAULT_AVAILABLE_STATEMENTS,
    get_connection,
)
from .serialization import (
    serialize_query,
    deserialize_query,
    serialize_term,
    deserialize_term,
)

__all__ = [
    # Base
    "EntryStore",
    "StoreStats",
    # Implementations
    "MemoryEntryStore",
    "SQLEntryStore",
    "default_extractors",
    "like_pattern",
    "LikePattern",
    "SCHEMA",
    "DEFAULT_LOOKUP_STATEMENTS",
    "DEFAULT_EXISTS_STATEMENTS",
    "DEFAULT_AVAILABLE_STATEMENTS",
    "get_connection",
    # Serialization
    "serialize_query",
    "deserialize_query",
    "serialize_term",
    "deserialize_term",
    # Factory
    "create_store",
]


def create_store(
    backend: str,
    path: Optional[str] = None,
    **kwargs
) -> EntryStore:
    """
    Factory function to create an entry store.

    Args:
        backend: "memory" or "sqlite"
        path: Catalog file for memory stores (optional), database file for
            SQLite stores
        **kwargs: Store-specific options

    Returns:
        Entry store instance
    """
    backend = backend.lower()

    if backend == "memory":
        if path is None:
            return MemoryEntryStore(**kwargs)
        return MemoryEntryStore.from_file(path, **kwargs)
    elif backend == "sqlite":
        if path is None:
            raise ValueError("path required for sqlite store")
        return SQLEntryStore.connect(path, **kwargs)
    else:
        raise ValueError(f"Unknown store backend: {backend}")

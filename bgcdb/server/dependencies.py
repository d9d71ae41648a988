"""
FastAPI dependencies for the bgcdb server.
"""

from __future__ import annotations

from fastapi import Depends
from typing import Optional
import time

from config import Settings, load_config

from .config import get_config
from ..query.evaluator import QueryEvaluator
from ..query.parser import QueryParser
from ..query.resolver import CategoryResolver
from ..storage import EntryStore, create_store
from ..utils.logging import get_logger


logger = get_logger(__name__)


# =============================================================================
# STORE SINGLETON
# =============================================================================

class StoreManager:
    """
    Manages the entry store and settings of the application.

    A store handed in through ``set_store`` belongs to the caller and is
    not closed on shutdown.
    """

    _instance: Optional[EntryStore] = None
    _owned: bool = False
    _settings: Optional[Settings] = None
    _start_time: float = 0

    @classmethod
    def get_settings(cls) -> Settings:
        """Get or load the query and store settings."""
        if cls._settings is None:
            cls._settings = load_config(get_config().config_path)
        return cls._settings

    @classmethod
    def set_settings(cls, settings: Optional[Settings]) -> None:
        cls._settings = settings

    @classmethod
    def get_store(cls) -> EntryStore:
        """Get or create the store instance."""
        if cls._instance is None:
            config = get_config()
            settings = cls.get_settings()
            backend = config.store_backend or settings.store.backend
            path = config.database_path or settings.store.database_path

            cls._instance = create_store(backend, path)
            cls._owned = True
            cls._start_time = time.time()
            logger.info(f"Created {backend} store with {cls._instance.count()} entries")
        return cls._instance

    @classmethod
    def set_store(cls, store: EntryStore) -> None:
        """Serve an existing store."""
        cls._instance = store
        cls._owned = False
        cls._start_time = time.time()

    @classmethod
    def get_uptime(cls) -> float:
        """Get server uptime in seconds."""
        if cls._start_time == 0:
            return 0
        return time.time() - cls._start_time

    @classmethod
    def shutdown(cls) -> None:
        """Release the store."""
        if cls._instance is not None and cls._owned:
            cls._instance.close()
        cls._instance = None
        cls._owned = False
        cls._start_time = 0


def get_store() -> EntryStore:
    """Dependency to get the store instance."""
    return StoreManager.get_store()


def get_settings() -> Settings:
    """Dependency to get the settings."""
    return StoreManager.get_settings()


def get_uptime() -> float:
    """Dependency to get server uptime."""
    return StoreManager.get_uptime()


# =============================================================================
# QUERY PIPELINE
# =============================================================================

def get_parser(settings: Settings = Depends(get_settings)) -> QueryParser:
    """Dependency to get a query parser."""
    return QueryParser(max_depth=settings.query.max_depth)


def get_resolver(
    store: EntryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CategoryResolver:
    """Dependency to get a category resolver, fresh per request."""
    return CategoryResolver(
        store,
        candidates=settings.query.candidate_categories,
        strict=settings.query.strict_category_resolution,
    )


def get_evaluator(
    store: EntryStore = Depends(get_store),
    resolver: CategoryResolver = Depends(get_resolver),
) -> QueryEvaluator:
    """Dependency to get a query evaluator sharing the request's resolver."""
    return QueryEvaluator(store, resolver=resolver)

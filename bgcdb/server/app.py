"""
FastAPI application for bgcdb.

``create_app`` wires configuration, the store and the routes together. The
module level ``app`` is what ``python -m bgcdb.server`` hands to uvicorn.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings

from .config import ServerConfig, get_config, set_config
from .dependencies import StoreManager
from .middleware import RequestLoggingMiddleware
from .routes import create_api_router
from .. import __version__
from ..core.exceptions import QueryError, StorageError
from ..storage import EntryStore
from ..utils.logging import get_logger, set_level

logger = get_logger(__name__)

API_DESCRIPTION = """
Boolean search over a biosynthetic gene cluster repository.

- `[category]term` searches one category, e.g. `[genus]Streptomyces`
- bare terms are matched against type, acc, compound, genus and species, first hit wins
- `AND`, `OR` and `EXCEPT` combine terms left to right; adjacent terms are ANDed
- parentheses group terms
"""


def error_body(message: str) -> dict:
    return {"message": message, "error": True}


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = StoreManager.get_store()
    logger.info(f"Serving {store.backend} store with {store.count()} entries")
    try:
        yield
    finally:
        StoreManager.shutdown()
        logger.info("Store released")


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Map query errors to 400 and everything else to 500."""

    @app.exception_handler(QueryError)
    async def query_error(request: Request, exc: QueryError):
        logger.info(f"Rejected query on {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content=error_body(str(exc)))

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error(f"Store failure on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content=error_body("Internal server error"))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}", exc_info=True)
        message = str(exc) if debug else "Internal server error"
        return JSONResponse(status_code=500, content=error_body(message))


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[EntryStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Server configuration; the global one is used if None
        store: Store to serve; created from the settings on startup if None
        settings: Query and store settings; loaded from YAML if None

    Returns:
        FastAPI application instance
    """
    if config is not None:
        set_config(config)
    config = get_config()
    set_level(config.log_level)

    StoreManager.set_settings(settings)
    if store is not None:
        StoreManager.set_store(store)

    docs = config.docs_enabled
    app = FastAPI(
        title="bgcdb API",
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app, debug=config.log_level.upper() == "DEBUG")
    app.include_router(create_api_router(), prefix=config.api_prefix)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": "bgcdb",
            "version": __version__,
            "docs": "/docs" if docs else None,
            "api": config.api_prefix,
        }

    return app


app = create_app()

"""
API routes for the bgcdb server.
"""

from fastapi import APIRouter
from .search import router as search_router
from .admin import router as admin_router
from .catalog import router as catalog_router


def create_api_router() -> APIRouter:
    """Create the main API router with all sub-routers."""
    api_router = APIRouter()

    api_router.include_router(
        search_router,
        tags=["Search"],
    )
    api_router.include_router(
        catalog_router,
        tags=["Catalog"],
    )
    api_router.include_router(
        admin_router,
        tags=["Admin"],
    )

    return api_router

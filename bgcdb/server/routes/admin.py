"""
Version and health endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..models import HealthResponse, VersionResponse
from ..dependencies import get_store, get_uptime
from ..config import API_VERSION, get_config
from ...storage import EntryStore
from ... import __version__

router = APIRouter()


@router.get(
    "/version",
    response_model=VersionResponse,
    summary="API version",
    description="Get the API version and build information.",
)
async def version():
    """Version endpoint."""
    config = get_config()
    return VersionResponse(
        api=API_VERSION,
        build_time=config.build_time,
        git_version=config.git_version,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the server is healthy and its store is reachable.",
)
def health_check(
    store: EntryStore = Depends(get_store),
    uptime: float = Depends(get_uptime),
):
    """Health check endpoint."""
    usage = store.stats()
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=uptime,
        backend=store.backend,
        entry_count=usage.entry_count,
        lookups=usage.lookups,
        existence_checks=usage.existence_checks,
    )

"""
bgcdb REST API server.

Example:
    >>> from bgcdb.server import create_app, run_server
    >>> from bgcdb.storage import create_store
    >>>
    >>> app = create_app(store=create_store("sqlite", "mibig.db"))
    >>> run_server(app, port=8000)

From the command line:
    $ python -m bgcdb.server --store sqlite --database mibig.db
"""

from .app import create_app, app
from .config import API_VERSION, ServerConfig, get_config, set_config
from .models import (
    SearchRequest,
    SearchResponse,
    RepositoryEntryModel,
    ProductTagModel,
    AvailableTermModel,
    QueryErrorResponse,
    VersionResponse,
    HealthResponse,
    CatalogStatsResponse,
    ResultStatsModel,
)

__all__ = [
    "create_app",
    "app",
    "run_server",
    "API_VERSION",
    "ServerConfig",
    "get_config",
    "set_config",
    "SearchRequest",
    "SearchResponse",
    "RepositoryEntryModel",
    "ProductTagModel",
    "AvailableTermModel",
    "QueryErrorResponse",
    "VersionResponse",
    "HealthResponse",
    "CatalogStatsResponse",
    "ResultStatsModel",
]


def run_server(app=None, host: str = "127.0.0.1", port: int = 8000, log_level: str = "info"):
    """Serve ``app`` (a fresh default app if None) in this process."""
    import uvicorn

    uvicorn.run(app or create_app(), host=host, port=port, log_level=log_level)

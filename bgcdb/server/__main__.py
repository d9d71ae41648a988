"""
Command-line entry point for the bgcdb server.

Usage:
    python -m bgcdb.server [--store sqlite --database mibig.db] [OPTIONS]

Flags override the ``BGCDB_*`` environment variables, which in turn
override the YAML settings file.
"""

import argparse
from typing import List, Optional

import uvicorn

from .config import ServerConfig, set_config
from ..utils.logging import get_logger, setup_logger

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m bgcdb.server",
        description="Serve boolean searches over a BGC repository",
    )

    network = parser.add_argument_group("network")
    network.add_argument("--host", help="Interface to bind to")
    network.add_argument("--port", type=int, help="Port to listen on")
    network.add_argument("--workers", type=int, help="Number of worker processes")
    network.add_argument("--reload", action="store_true",
                         help="Restart on code changes (development only)")

    store = parser.add_argument_group("store")
    store.add_argument("--config", dest="config_path", help="Settings file (YAML)")
    store.add_argument("--store", dest="store_backend", choices=["memory", "sqlite"],
                       help="Store backend")
    store.add_argument("--database", dest="database_path",
                       help="Catalog file (memory) or database file (sqlite)")

    logs = parser.add_argument_group("logging")
    logs.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS)
    logs.add_argument("--log-file", help="Also write the server log to this file")

    return parser


def config_from_args(
    args: argparse.Namespace,
    base: Optional[ServerConfig] = None,
) -> ServerConfig:
    """Apply the flags that were given on top of ``base``."""
    config = base or ServerConfig.from_env()
    for name in ("host", "port", "workers", "config_path", "store_backend",
                 "database_path", "log_level"):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)
    if args.reload:
        config.reload = True
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    set_config(config)
    config.to_env()
    setup_logger(config.log_level, log_file=args.log_file)

    logger.info(
        f"Listening on {config.host}:{config.port} "
        f"(store: {config.store_backend or 'from settings'}, "
        f"database: {config.database_path or 'from settings'})"
    )

    uvicorn.run(
        "bgcdb.server.app:app",
        host=config.host,
        port=config.port,
        reload=config.reload,
        workers=config.workers,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()

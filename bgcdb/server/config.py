"""
Server configuration.

Values come from ``BGCDB_*`` environment variables. ``to_env`` writes them
back so worker processes started by uvicorn see the same configuration.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional
import os


# Reported by /version; changes only when the HTTP interface does
API_VERSION = "3.0"

ENV_PREFIX = "BGCDB_"

# Field name -> environment variable suffix
ENV_FIELDS: Dict[str, str] = {
    "host": "HOST",
    "port": "PORT",
    "workers": "WORKERS",
    "config_path": "CONFIG",
    "store_backend": "STORE",
    "database_path": "DATABASE",
    "build_time": "BUILD_TIME",
    "git_version": "GIT_VERSION",
    "log_level": "LOG_LEVEL",
}


@dataclass
class ServerConfig:
    """Configuration for the bgcdb server."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False

    api_prefix: str = "/api/v1"
    docs_enabled: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Unset values fall back to the YAML settings file
    config_path: Optional[str] = None
    store_backend: Optional[str] = None
    database_path: Optional[str] = None

    # Reported by /version
    build_time: str = ""
    git_version: str = ""

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        types = {f.name: f.type for f in fields(cls)}
        values = {}
        for name, suffix in ENV_FIELDS.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw is None:
                continue
            try:
                values[name] = int(raw) if types[name] in (int, "int") else raw
            except ValueError:
                raise ValueError(f"{ENV_PREFIX + suffix} must be an integer, got {raw!r}") from None
        return cls(**values)

    def to_env(self) -> None:
        """Export the configuration to the process environment."""
        for name, suffix in ENV_FIELDS.items():
            value = getattr(self, name)
            if value is None:
                os.environ.pop(ENV_PREFIX + suffix, None)
            else:
                os.environ[ENV_PREFIX + suffix] = str(value)


_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get server configuration, loading it from the environment on first use."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: ServerConfig) -> None:
    global _config
    _config = config

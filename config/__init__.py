"""
bgcdb settings.

Example:
    >>> from config import load_config
    >>> settings = load_config("bgcdb.yaml")
    >>> settings.store.backend
    'sqlite'
"""

from .settings import (
    Settings,
    QuerySettings,
    StoreSettings,
    CONFIG_ENV_VAR,
    STORE_BACKENDS,
    load_config,
    get_default_config_path,
)

__all__ = [
    "Settings",
    "QuerySettings",
    "StoreSettings",
    "CONFIG_ENV_VAR",
    "STORE_BACKENDS",
    "load_config",
    "get_default_config_path",
]

"""
Settings for bgcdb.

Query and store settings live in a YAML file; see ``default_config.yaml``
for the recognized keys.
"""

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Literal, Optional
import yaml


CONFIG_ENV_VAR = "BGCDB_CONFIG"

STORE_BACKENDS = ("memory", "sqlite")


@dataclass
class QuerySettings:
    """Query parsing and evaluation settings."""
    max_depth: int = 200
    candidate_categories: List[str] = field(
        default_factory=lambda: ["type", "acc", "compound", "genus", "species"]
    )
    strict_category_resolution: bool = True


@dataclass
class StoreSettings:
    """Entry store configuration."""
    backend: Literal["memory", "sqlite"] = "memory"
    database_path: Optional[str] = None


@dataclass
class Settings:
    """
    Main settings container for bgcdb.

    Attributes:
        query: Query parsing and evaluation settings
        store: Entry store settings
        log_level: Logging level
    """
    query: QuerySettings = field(default_factory=QuerySettings)
    store: StoreSettings = field(default_factory=StoreSettings)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Create Settings from dictionary."""
        data = dict(data)
        query_data = data.pop("query", None) or {}
        store_data = data.pop("store", None) or {}

        return cls(
            query=QuerySettings(**query_data),
            store=StoreSettings(**store_data),
            **data
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def validate(self) -> None:
        """
        Check values a YAML file can get wrong without a TypeError.

        Raises:
            ValueError: On the first invalid value
        """
        if self.query.max_depth < 1:
            raise ValueError(f"query.max_depth must be positive, got {self.query.max_depth}")
        if not self.query.candidate_categories:
            raise ValueError("query.candidate_categories cannot be empty")
        if self.store.backend not in STORE_BACKENDS:
            raise ValueError(
                f"store.backend must be one of {', '.join(STORE_BACKENDS)}, "
                f"got {self.store.backend!r}"
            )


def get_default_config_path() -> Path:
    """
    Locate the settings file.

    ``$BGCDB_CONFIG`` wins, then ``./config/default_config.yaml``, then the
    file shipped with this package.
    """
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        return Path(env_config)

    local_config = Path("./config/default_config.yaml")
    if local_config.exists():
        return local_config

    return Path(__file__).parent / "default_config.yaml"


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from a YAML file.

    A missing or empty file yields the defaults.

    Args:
        config_path: Settings file; located with ``get_default_config_path`` if None

    Raises:
        ValueError: If the file holds unknown or invalid settings

    Example:
        >>> settings = load_config("./bgcdb.yaml")
        >>> settings.query.candidate_categories
        ['type', 'acc', 'compound', 'genus', 'species']
    """
    path = get_default_config_path() if config_path is None else Path(config_path)
    if not path.exists():
        return Settings()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        settings = Settings.from_dict(data)
    except TypeError as e:
        raise ValueError(f"Invalid configuration in {path}: {e}") from e
    settings.validate()
    return settings

import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("ledgerview.config.yaml")
DATABASE_URL_ENV = "DATABASE_URL"

# Async drivers used for each URL scheme we accept
_DRIVER_REWRITES = (
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("sqlite:///", "sqlite+aiosqlite:///"),
)


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load dashboard configuration from YAML.

    Args:
        path: Optional explicit config path. Defaults to ledgerview.config.yaml
            in the working directory.

    Returns:
        Configuration dictionary (empty if the default file is absent)

    Raises:
        FileNotFoundError: If an explicit path was given and does not exist
        ValueError: If the file does not contain a mapping
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        if path is not None:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    database = config.get("database")
    if database is not None and not isinstance(database, dict):
        raise ValueError("Config 'database' must be a dictionary if provided")
    return config


def normalize_database_url(url: str) -> str:
    """Rewrite plain postgres/sqlite URLs to their async driver form."""
    url = url.strip()
    for prefix, replacement in _DRIVER_REWRITES:
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def resolve_database_url(config: Dict[str, Any] | None = None) -> str:
    """DATABASE_URL from the environment wins over database.url in config."""
    url = os.environ.get(DATABASE_URL_ENV, "").strip()
    if not url:
        url = str(((config or {}).get("database") or {}).get("url") or "").strip()
    if not url:
        raise ValueError(f"{DATABASE_URL_ENV} is not set and config has no database.url")
    return normalize_database_url(url)


def resolve_engine_options(config: Dict[str, Any] | None = None) -> Dict[str, Any]:
    database = (config or {}).get("database") or {}
    return {
        "pool_pre_ping": bool(database.get("pool_pre_ping", True)),
        "echo": bool(database.get("echo", False)),
    }

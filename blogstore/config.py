"""
Centralized configuration management.

Configuration is loaded from:
1. Environment variables
2. .env file (if present)
3. Default values

Usage:
    from blogstore.config import get_config
    config = get_config()
    print(config.storage.backend)  # "local" unless STORAGE_BACKEND=remote
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError


# Load .env on module import (existing environment variables win)
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)


BACKEND_LOCAL = "local"
BACKEND_REMOTE = "remote"
BACKENDS = (BACKEND_LOCAL, BACKEND_REMOTE)


def _get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class DBConfig:
    """Remote document database configuration (PostgreSQL JSONB)."""
    host: str = field(default_factory=lambda: os.getenv("DB_HOST", ""))
    port: int = field(default_factory=lambda: _get_int_env("DB_PORT", 5432))
    name: str = field(default_factory=lambda: os.getenv("DB_NAME", ""))
    user: str = field(default_factory=lambda: os.getenv("DB_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("DB_PASSWORD", ""))
    schema: str = field(default_factory=lambda: os.getenv("DB_SCHEMA", "public"))
    table: str = field(default_factory=lambda: os.getenv("DB_TABLE", "documents"))
    ssl_mode: str = field(default_factory=lambda: os.getenv("DB_SSL_MODE", "prefer"))

    # Bounded waits for the remote path only
    connect_timeout: int = field(default_factory=lambda: _get_int_env("DB_CONNECT_TIMEOUT", 5))
    statement_timeout_ms: int = field(
        default_factory=lambda: _get_int_env("DB_STATEMENT_TIMEOUT_MS", 5000)
    )

    @property
    def is_configured(self) -> bool:
        """Check if minimal DB config is present."""
        return bool(self.host and self.name and self.user)


@dataclass
class StorageConfig:
    """Which backend serves the collections, and where local files live."""
    backend: str = field(
        default_factory=lambda: os.getenv("STORAGE_BACKEND", BACKEND_LOCAL).strip().lower()
    )
    data_dir: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["DATA_DIR"]) if os.getenv("DATA_DIR") else None
    )
    # Serve reads from local files when the remote read fails
    read_fallback: bool = field(default_factory=lambda: _get_bool_env("STORAGE_READ_FALLBACK", True))

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend '{self.backend}' (expected one of {', '.join(BACKENDS)})",
                config_key="STORAGE_BACKEND",
            )


@dataclass
class Config:
    """
    Main application configuration.

    All settings are loaded from environment variables with sensible defaults.
    Set DEBUG=1 in environment to enable debug logging.
    """

    # Base directory (project root)
    base_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    logs_dir: Path = field(default=None)

    debug: bool = field(default_factory=lambda: _get_bool_env("DEBUG", False))
    log_to_file: bool = field(default_factory=lambda: _get_bool_env("LOG_TO_FILE", False))

    # Public site, used for sitemap URLs
    site_url: str = field(
        default_factory=lambda: os.getenv("SITE_URL", "https://amajworlds.vercel.app").rstrip("/")
    )
    posts_per_page: int = field(default_factory=lambda: _get_int_env("POSTS_PER_PAGE", 10))

    # Sub-configurations
    storage: StorageConfig = field(default_factory=StorageConfig)
    db: DBConfig = field(default_factory=DBConfig)

    def __post_init__(self):
        """Resolve paths after initialization."""
        if self.logs_dir is None:
            self.logs_dir = self.base_dir / os.getenv("LOG_DIR", "logs")
        if self.storage.data_dir is None:
            self.storage.data_dir = self.base_dir / "data"
        if self.posts_per_page <= 0:
            raise ConfigurationError("POSTS_PER_PAGE must be positive", config_key="POSTS_PER_PAGE")

    @property
    def data_dir(self) -> Path:
        return self.storage.data_dir


# Global config instance (lazily initialized)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None

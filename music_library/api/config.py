"""
Runtime configuration for the music library service.

All settings come from environment variables. `load_settings()` reads them once
and returns an immutable `Settings`; the application factory takes that object
explicitly, so tests can build an app against temporary directories without
touching the process environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

from music_library.api.errors import ConfigError

# Relative directories are anchored to the project root, not the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_PACKAGE_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_PORT = "8080"
DEFAULT_HOST = "localhost"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_DATABASE_PATH = "database.db"
DEFAULT_UPLOAD_DIR = "files"
DEFAULT_IMAGE_DIR = "images"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024  # 100MB

DEFAULT_ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
DEFAULT_ALLOWED_HEADERS = (
    "Accept",
    "Authorization",
    "Content-Type",
    "X-CSRF-Token",
    "HX-Request",
    "HX-Trigger",
    "HX-Target",
)

VALID_LOG_LEVELS = ("debug", "info", "warn", "error")
VALID_LOG_FORMATS = ("json", "console")


def _env(key: str, default: str) -> str:
    value = os.getenv(key, "").strip()
    return value or default


def _bool_env(key: str, default: bool) -> bool:
    value = os.getenv(key, "").strip().lower()
    if value in ("1", "t", "true", "yes", "on"):
        return True
    if value in ("0", "f", "false", "no", "off"):
        return False
    return default


def _int_env(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _list_env(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(key, "")
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


def _resolve_dir(configured: str) -> Path:
    """Resolve a configured directory; relative values live under the project root."""
    raw = Path(configured)
    if raw.is_absolute():
        return raw.resolve()
    return (_PROJECT_ROOT / raw).resolve()


def _normalize_database_url(database_url: str) -> str:
    """SQLAlchemy expects 'postgresql://' not 'postgres://'."""
    if database_url.startswith("postgres://"):
        return "postgresql://" + database_url[len("postgres://") :]
    return database_url


def _postgres_url_from_env() -> Optional[str]:
    """
    Build a postgres URL from POSTGRES_* variables.

    POSTGRES_URL may be either a full URL (postgresql://host:port/db) or just a
    host, optionally with a port. Returns None when POSTGRES_URL is unset.

    Raises:
        ConfigError: if POSTGRES_URL is set but credentials or db name are missing.
    """
    postgres_url = os.getenv("POSTGRES_URL")
    if not postgres_url:
        return None

    user = os.getenv("POSTGRES_USER")
    password = os.getenv("POSTGRES_PASSWORD")
    db = os.getenv("POSTGRES_DB")
    port = os.getenv("POSTGRES_PORT")

    if postgres_url.startswith(("postgresql://", "postgres://")):
        parsed = urlparse(_normalize_database_url(postgres_url))
        host = parsed.hostname or "localhost"
        final_port = int(port) if (port and port.isdigit()) else (parsed.port or 5432)
        final_db = (db or parsed.path.lstrip("/")).strip()
        final_user = (user or parsed.username or "").strip()
        final_password = (password or parsed.password or "").strip()
        if not (final_user and final_password and final_db):
            raise ConfigError(
                "Database configuration incomplete. POSTGRES_URL must include db name "
                "or provide POSTGRES_DB, and provide POSTGRES_USER/POSTGRES_PASSWORD."
            )
        return f"postgresql+psycopg2://{final_user}:{final_password}@{host}:{final_port}/{final_db}"

    host = postgres_url.strip()
    port_from_host: Optional[int] = None
    if ":" in host and host.rsplit(":", 1)[-1].isdigit():
        host, port_str = host.rsplit(":", 1)
        port_from_host = int(port_str)
    final_port = int(port) if (port and port.isdigit()) else (port_from_host or 5432)

    if not (user and password and db):
        raise ConfigError(
            "Database configuration incomplete. When POSTGRES_URL is a host, you must provide "
            "POSTGRES_USER, POSTGRES_PASSWORD, and POSTGRES_DB (and optionally POSTGRES_PORT)."
        )
    return f"postgresql+psycopg2://{user}:{password}@{host}:{final_port}/{db}"


@dataclass(frozen=True)
class Settings:
    """Immutable service configuration."""

    host: str = DEFAULT_HOST
    port: str = DEFAULT_PORT
    environment: str = DEFAULT_ENVIRONMENT
    debug: bool = False

    database_url: str = ""
    upload_dir: Path = _PROJECT_ROOT / DEFAULT_UPLOAD_DIR
    image_dir: Path = _PROJECT_ROOT / DEFAULT_IMAGE_DIR
    static_dir: Path = _PACKAGE_ROOT / "static"
    templates_dir: Path = _PACKAGE_ROOT / "templates"

    allowed_origins: Tuple[str, ...] = ("*",)
    allowed_methods: Tuple[str, ...] = DEFAULT_ALLOWED_METHODS
    allowed_headers: Tuple[str, ...] = DEFAULT_ALLOWED_HEADERS

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def validate(self) -> None:
        """
        Check the settings for values the service cannot start with.

        Raises:
            ConfigError: on the first invalid value found.
        """
        if not self.port:
            raise ConfigError("port cannot be empty")
        if not self.host:
            raise ConfigError("host cannot be empty")
        if not self.environment:
            raise ConfigError("environment cannot be empty")
        if not self.database_url:
            raise ConfigError("database url cannot be empty")
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"invalid log level: {self.log_level} (valid: {', '.join(VALID_LOG_LEVELS)})"
            )
        if self.log_format not in VALID_LOG_FORMATS:
            raise ConfigError(f"invalid log format: {self.log_format} (valid: json, console)")
        if self.max_upload_bytes <= 0:
            raise ConfigError("max upload bytes must be positive")


# PUBLIC_INTERFACE
def load_settings() -> Settings:
    """
    Build `Settings` from environment variables.

    Database resolution order: DATABASE_URL, then POSTGRES_*, then a SQLite file
    at DATABASE_PATH.
    """
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        database_url = _normalize_database_url(database_url)
    else:
        database_url = _postgres_url_from_env()
    if not database_url:
        database_path = Path(_env("DATABASE_PATH", DEFAULT_DATABASE_PATH))
        if not database_path.is_absolute():
            database_path = _PROJECT_ROOT / database_path
        database_url = f"sqlite:///{database_path}"

    origins = _list_env("CORS_ALLOW_ORIGINS", ()) or _list_env("ALLOWED_ORIGINS", ("*",))
    static_dir = os.getenv("STATIC_DIR", "").strip()

    return Settings(
        host=_env("HOST", DEFAULT_HOST),
        port=_env("PORT", DEFAULT_PORT),
        environment=_env("ENVIRONMENT", DEFAULT_ENVIRONMENT),
        debug=_bool_env("DEBUG", False),
        database_url=database_url,
        upload_dir=_resolve_dir(_env("UPLOAD_DIR", DEFAULT_UPLOAD_DIR)),
        image_dir=_resolve_dir(_env("IMAGE_DIR", DEFAULT_IMAGE_DIR)),
        static_dir=_resolve_dir(static_dir) if static_dir else _PACKAGE_ROOT / "static",
        allowed_origins=origins,
        allowed_methods=_list_env("ALLOWED_METHODS", DEFAULT_ALLOWED_METHODS),
        allowed_headers=_list_env("ALLOWED_HEADERS", DEFAULT_ALLOWED_HEADERS),
        max_upload_bytes=_int_env("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        log_level=_env("LOG_LEVEL", DEFAULT_LOG_LEVEL).lower(),
        log_format=_env("LOG_FORMAT", DEFAULT_LOG_FORMAT).lower(),
    )

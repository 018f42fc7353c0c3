"""
Engine configuration.

Uses ``pydantic_settings.BaseSettings`` for environment variable
binding (prefix ``PRIVACY_GUARD_``), type coercion, and validation.
A ``.env`` file in the working directory is honoured.
"""

from __future__ import annotations

import functools
import pathlib

import pydantic
import pydantic_settings

from privacy_guard.data import loader


class Settings(pydantic_settings.BaseSettings):
    """Runtime settings for the tracking engine and its HTTP surface.

    Attributes:
        catalog_path: Filter list read at startup and on reload.
        catalog_url: Optional remote filter list; takes precedence
            over ``catalog_path`` when set.
        catalog_timeout: Seconds allowed for fetching ``catalog_url``.
        recent_request_limit: Size of the per-session request log.
        cookie_sync_history: Cookie-sync events retained per session.
        min_id_value_length: Shortest parameter or cookie value
            considered a potential identifier.
        write_to_file: Mirror log output to ``.logs/``.
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        environment: ``development`` or ``production``.
    """

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="PRIVACY_GUARD_",
        env_file=".env",
        extra="ignore",
    )

    catalog_path: pathlib.Path = loader.DEFAULT_CATALOG_PATH
    catalog_url: str = ""
    catalog_timeout: float = pydantic.Field(default=10.0, gt=0)
    recent_request_limit: int = pydantic.Field(default=50, ge=1)
    cookie_sync_history: int = pydantic.Field(default=50, ge=1)
    min_id_value_length: int = pydantic.Field(default=8, ge=1)
    write_to_file: bool = False
    host: str = "127.0.0.1"
    port: int = 3002
    environment: str = "development"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (read once, cached)."""
    return Settings()

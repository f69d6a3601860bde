"""Service configuration loaded from HATCHERY_* environment variables."""

from __future__ import annotations

import secrets
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HatcherySettings(BaseSettings):
    """Worker-model catalog settings.

    All fields are read from environment variables with the ``HATCHERY_``
    prefix.  For example, ``HATCHERY_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="HATCHERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """PostgreSQL connection string (``postgresql+psycopg://``).  Required."""

    db_pool_size: int = 5
    db_max_overflow: int = 10

    redis_url: str | None = None
    """Redis connection string.  When unset, list caching is disabled."""

    # -- Catalog ---------------------------------------------------------------
    shared_infra_group: str = "shared.infra"
    """Name of the group whose worker models every caller can see."""

    cache_namespace: str = "hatchery:workermodels"
    cache_ttl: int = Field(default=300, ge=1)
    """Seconds a cached list result lives before expiring on its own."""

    # -- Auth ------------------------------------------------------------------
    auth_token: str | None = None
    """Service token the authenticating gateway presents.  Auto-generated at startup if empty."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000

    # -- Helpers ---------------------------------------------------------------

    def resolve_auth_token(self) -> str:
        """Return the configured token or generate a random one."""
        if self.auth_token:
            return self.auth_token
        return secrets.token_urlsafe(32)


@lru_cache(maxsize=1)
def get_settings() -> HatcherySettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return HatcherySettings()

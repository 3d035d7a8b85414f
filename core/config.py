"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for AssetLedger happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. database_url -> DATABASE_URL). Type coercion and validation are
      built in. List fields are read as JSON (ALLOWED_HOSTS='["a","b"]').

  @model_validator(mode="after"): Cross-field validation once every field is
      resolved. Rejects limits that would make the API unusable.

Layer rule: core/ is the kernel. This module may not import from api/ or
inventory/.
"""

import logging
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("assetledger.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    # Empty string means "use the SQLite file next to inventory/store.py".
    database_url: str = ""

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True

    # ------------------------------------------------------------------
    # Listing and reports
    # ------------------------------------------------------------------

    default_page_size: int = 10
    max_page_size: int = 100
    max_forecast_months: int = 120

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject non-positive limits and a default page larger than the maximum."""
        if self.max_page_size < 1 or self.default_page_size < 1:
            raise ValueError("DEFAULT_PAGE_SIZE and MAX_PAGE_SIZE must be at least 1.")
        if self.default_page_size > self.max_page_size:
            raise ValueError("DEFAULT_PAGE_SIZE may not exceed MAX_PAGE_SIZE.")
        if self.max_forecast_months < 1:
            raise ValueError("MAX_FORECAST_MONTHS must be at least 1.")
        if self.debug:
            logger.warning("DEBUG is enabled. Do not run with DEBUG=true in production.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings() directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()

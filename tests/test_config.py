"""
tests/test_config.py -- Unit tests for core/config.py.

Settings are constructed directly (not through get_settings()) so each test
sees only the environment it sets with monkeypatch.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


def test_defaults(monkeypatch) -> None:
    for var in ("DATABASE_URL", "MAX_FORECAST_MONTHS", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE"):
        monkeypatch.delenv(var, raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_url == ""
    assert settings.default_page_size == 10
    assert settings.max_page_size == 100
    assert settings.max_forecast_months == 120


def test_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("MAX_FORECAST_MONTHS", "24")
    monkeypatch.setenv("ALLOWED_HOSTS", '["assets.example.com"]')
    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite:///elsewhere.db"
    assert settings.max_forecast_months == 24
    assert settings.allowed_hosts == ["assets.example.com"]


@pytest.mark.parametrize(
    "env",
    [
        {"MAX_PAGE_SIZE": "0"},
        {"DEFAULT_PAGE_SIZE": "50", "MAX_PAGE_SIZE": "20"},
        {"MAX_FORECAST_MONTHS": "0"},
    ],
)
def test_rejects_unusable_limits(monkeypatch, env: dict[str, str]) -> None:
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()

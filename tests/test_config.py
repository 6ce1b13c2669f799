from __future__ import annotations

import pytest
from pydantic import ValidationError

from timed_quiz.core.config import Settings

SETTINGS_ENV = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "DATABASE_URL",
    "DB_ECHO",
    "SESSION_CREATE_MAX_ATTEMPTS",
)


@pytest.fixture()
def clean_env(monkeypatch) -> None:
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults(clean_env) -> None:
    settings = Settings(_env_file=None)

    assert settings.app_env == "dev"
    assert settings.log_level == "INFO"
    assert settings.log_json is True
    assert settings.database_url.startswith("postgresql+asyncpg://")
    assert settings.db_echo is False
    assert settings.session_create_max_attempts == 3


def test_settings_read_environment(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///quiz.db")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("SESSION_CREATE_MAX_ATTEMPTS", "5")

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite+aiosqlite:///quiz.db"
    assert settings.log_json is False
    assert settings.session_create_max_attempts == 5


def test_settings_reject_zero_create_attempts(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("SESSION_CREATE_MAX_ATTEMPTS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)

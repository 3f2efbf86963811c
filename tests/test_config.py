import logging

import pytest

from authsession.config import (
    SessionSettings,
    is_truthy,
    load_env,
    setup_logging,
    validate_settings,
)
from authsession.constants import LOGGER

ENV_KEYS = (
    "AUTHSESSION_BASE_URL",
    "AUTHSESSION_LOGIN_PATH",
    "AUTHSESSION_REFRESH_PATH",
    "AUTHSESSION_REFRESH_FIELD",
    "AUTHSESSION_ACCESS_FIELD",
    "AUTHSESSION_ROTATED_REFRESH_FIELD",
    "AUTHSESSION_TIMEOUT",
    "AUTHSESSION_RENEWAL_TIMEOUT",
    "AUTHSESSION_TOKEN_STORE_PATH",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    clean_env.setenv("AUTHSESSION_BASE_URL", "https://api.example.com")

    settings = SessionSettings.from_env()

    assert settings == SessionSettings(base_url="https://api.example.com")
    assert settings.refresh_path == "/refresh"
    assert settings.refresh_request_field == "refreshToken"
    assert settings.access_response_field == "token"
    assert settings.renewal_timeout is None
    assert settings.token_store_path is None


def test_overrides(clean_env) -> None:
    clean_env.setenv("AUTHSESSION_BASE_URL", "https://api.example.com")
    clean_env.setenv("AUTHSESSION_REFRESH_PATH", "/auth/refresh")
    clean_env.setenv("AUTHSESSION_TIMEOUT", "5")
    clean_env.setenv("AUTHSESSION_RENEWAL_TIMEOUT", "2.5")
    clean_env.setenv("AUTHSESSION_TOKEN_STORE_PATH", "/tmp/creds.json")

    settings = SessionSettings.from_env()

    assert settings.refresh_path == "/auth/refresh"
    assert settings.timeout == 5.0
    assert settings.renewal_timeout == 2.5
    assert settings.token_store_path == "/tmp/creds.json"


def test_non_numeric_timeout(clean_env) -> None:
    clean_env.setenv("AUTHSESSION_TIMEOUT", "soon")

    with pytest.raises(RuntimeError, match="AUTHSESSION_TIMEOUT must be a numeric value"):
        SessionSettings.from_env()


@pytest.mark.parametrize(
    ("settings", "message"),
    [
        (SessionSettings(base_url=""), "Missing required setting"),
        (SessionSettings(base_url="not a url"), "valid HTTP"),
        (SessionSettings(base_url="ftp://files.example.com"), "valid HTTP"),
        (SessionSettings(base_url="https://api.example.com", refresh_path="refresh"), "refresh_path"),
        (SessionSettings(base_url="https://api.example.com", timeout=0), "timeout"),
        (SessionSettings(base_url="https://api.example.com", renewal_timeout=-1), "renewal_timeout"),
    ],
)
def test_validate_settings_rejects(settings, message) -> None:
    with pytest.raises(RuntimeError, match=message):
        validate_settings(settings)


def test_validate_settings_accepts_defaults() -> None:
    validate_settings(SessionSettings(base_url="http://localhost:8000"))


def test_load_env_file(clean_env, tmp_path) -> None:
    clean_env.setenv("AUTHSESSION_BASE_URL", "https://placeholder.example.com")
    env_path = tmp_path / ".env"
    env_path.write_text("AUTHSESSION_BASE_URL=https://from-dotenv.example.com\n", encoding="utf-8")

    load_env(env_path)

    assert SessionSettings.from_env().base_url == "https://from-dotenv.example.com"


def test_load_env_missing_file(clean_env, tmp_path) -> None:
    load_env(tmp_path / ".env")

    assert SessionSettings.from_env().base_url == ""


@pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
def test_is_truthy(value) -> None:
    assert is_truthy(value) is True


def test_is_truthy_false() -> None:
    assert is_truthy(None) is False
    assert is_truthy("0") is False


def test_setup_logging(monkeypatch) -> None:
    monkeypatch.setenv("AUTHSESSION_DEBUG", "1")
    previous = LOGGER.level

    try:
        assert setup_logging() is True
        assert LOGGER.level == logging.INFO
    finally:
        LOGGER.setLevel(previous)

    monkeypatch.setenv("AUTHSESSION_DEBUG", "0")
    assert setup_logging() is False

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, ValidationError

from .constants import (
    DEFAULT_ACCESS_RESPONSE_FIELD,
    DEFAULT_LOGIN_PATH,
    DEFAULT_REFRESH_PATH,
    DEFAULT_REFRESH_REQUEST_FIELD,
    DEFAULT_REFRESH_RESPONSE_FIELD,
    DEFAULT_TIMEOUT,
    LOGGER,
)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float | None) -> float | None:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a numeric value.")


def _get_env_str(key: str, default: str) -> str:
    return os.getenv(key, "").strip() or default


@dataclass
class SessionSettings:
    """Where the session endpoints live and how their payloads are shaped.

    ``refresh_response_field`` names the optional rotated refresh credential in
    the renewal response; when the server leaves it out the stored refresh
    credential is kept. ``renewal_timeout`` bounds one renewal exchange and is
    unbounded by default.
    """

    base_url: str
    login_path: str = DEFAULT_LOGIN_PATH
    refresh_path: str = DEFAULT_REFRESH_PATH
    refresh_request_field: str = DEFAULT_REFRESH_REQUEST_FIELD
    access_response_field: str = DEFAULT_ACCESS_RESPONSE_FIELD
    refresh_response_field: str = DEFAULT_REFRESH_RESPONSE_FIELD
    timeout: float = DEFAULT_TIMEOUT
    renewal_timeout: float | None = None
    token_store_path: str | None = None

    @classmethod
    def from_env(cls) -> "SessionSettings":
        return cls(
            base_url=os.getenv("AUTHSESSION_BASE_URL", "").strip(),
            login_path=_get_env_str("AUTHSESSION_LOGIN_PATH", DEFAULT_LOGIN_PATH),
            refresh_path=_get_env_str("AUTHSESSION_REFRESH_PATH", DEFAULT_REFRESH_PATH),
            refresh_request_field=_get_env_str(
                "AUTHSESSION_REFRESH_FIELD", DEFAULT_REFRESH_REQUEST_FIELD
            ),
            access_response_field=_get_env_str(
                "AUTHSESSION_ACCESS_FIELD", DEFAULT_ACCESS_RESPONSE_FIELD
            ),
            refresh_response_field=_get_env_str(
                "AUTHSESSION_ROTATED_REFRESH_FIELD", DEFAULT_REFRESH_RESPONSE_FIELD
            ),
            timeout=_get_env_float("AUTHSESSION_TIMEOUT", DEFAULT_TIMEOUT),
            renewal_timeout=_get_env_float("AUTHSESSION_RENEWAL_TIMEOUT", None),
            token_store_path=os.getenv("AUTHSESSION_TOKEN_STORE_PATH", "").strip() or None,
        )


def load_env(env_path: str | Path | None = None) -> None:
    path = Path(env_path) if env_path is not None else Path.cwd() / ".env"
    if not path.exists():
        return
    load_dotenv(path, override=True)


def validate_settings(settings: SessionSettings) -> None:
    if not settings.base_url:
        raise RuntimeError("Missing required setting AUTHSESSION_BASE_URL.")

    try:
        AnyHttpUrl(settings.base_url)
    except ValidationError as error:
        raise RuntimeError(
            f"AUTHSESSION_BASE_URL must be a valid HTTP(S) URL, got {settings.base_url!r}."
        ) from error

    for name in ("login_path", "refresh_path"):
        value = getattr(settings, name)
        if not value.startswith("/"):
            raise RuntimeError(f"{name} must start with '/', got {value!r}.")

    if settings.timeout <= 0:
        raise RuntimeError("timeout must be a positive number of seconds.")
    if settings.renewal_timeout is not None and settings.renewal_timeout <= 0:
        raise RuntimeError("renewal_timeout must be a positive number of seconds.")

    if settings.renewal_timeout is None:
        LOGGER.debug("No renewal timeout configured; a stuck renewal exchange blocks its window.")


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("AUTHSESSION_DEBUG", "0"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled

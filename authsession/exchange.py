from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from .authenticator import mark_renewal, mark_unauthenticated
from .config import SessionSettings
from .errors import LoginFailedError, RenewalExchangeError


def _required_token(payload: dict, field: str, source: str, error_cls=RenewalExchangeError) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value:
        raise error_cls(f"{source} response missing {field}.")
    return value


@dataclass
class RenewedCredentials:
    access_token: str
    refresh_token: str | None = None

    @property
    def rotated(self) -> bool:
        return self.refresh_token is not None

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        access_field: str,
        refresh_field: str,
    ) -> "RenewedCredentials":
        if not isinstance(payload, dict):
            raise RenewalExchangeError("Renewal response must be a JSON object.")

        access_token = _required_token(payload, access_field, "Renewal")
        refresh_token = payload.get(refresh_field)
        if refresh_token is not None and (not isinstance(refresh_token, str) or not refresh_token):
            raise RenewalExchangeError(f"Renewal response {refresh_field} must be a non-empty string.")

        return cls(access_token=access_token, refresh_token=refresh_token)


@dataclass
class LoginResult:
    user: Any
    access_token: str
    refresh_token: str

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        access_field: str,
        refresh_field: str,
    ) -> "LoginResult":
        if not isinstance(payload, dict) or not isinstance(payload.get("token"), dict):
            raise LoginFailedError("Login response missing token object.")

        token = payload["token"]
        return cls(
            user=payload.get("user"),
            access_token=_required_token(token, access_field, "Login", LoginFailedError),
            refresh_token=_required_token(token, refresh_field, "Login", LoginFailedError),
        )


async def request_renewal(
    client: httpx.AsyncClient,
    refresh_token: str,
    *,
    settings: SessionSettings,
) -> RenewedCredentials:
    request = client.build_request(
        "POST",
        settings.refresh_path,
        json={settings.refresh_request_field: refresh_token},
    )
    response = await client.send(mark_renewal(request))

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        raise RenewalExchangeError(
            f"Renewal request failed with status {error.response.status_code}.",
            status_code=error.response.status_code,
        ) from error

    try:
        payload = response.json()
    except ValueError as error:
        raise RenewalExchangeError("Renewal response is not valid JSON.") from error

    return RenewedCredentials.from_payload(
        payload,
        access_field=settings.access_response_field,
        refresh_field=settings.refresh_response_field,
    )


async def request_login(
    client: httpx.AsyncClient,
    credentials: dict,
    *,
    settings: SessionSettings,
) -> LoginResult:
    request = client.build_request("POST", settings.login_path, json=credentials)
    response = await client.send(mark_unauthenticated(request))

    if not response.is_success:
        raise LoginFailedError(
            f"Login failed with status {response.status_code}.",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as error:
        raise LoginFailedError("Login response is not valid JSON.") from error

    return LoginResult.from_payload(
        payload,
        access_field=settings.access_response_field,
        refresh_field=settings.refresh_response_field,
    )

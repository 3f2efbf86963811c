from __future__ import annotations

import httpx

from .constants import (
    ACCESS_TOKEN_KEY,
    AUTHORIZATION_HEADER,
    RENEWAL_EXTENSION,
    SKIP_AUTH_EXTENSION,
)
from .credential_store import CredentialStore


def mark_unauthenticated(request: httpx.Request) -> httpx.Request:
    request.extensions[SKIP_AUTH_EXTENSION] = True
    return request


def mark_renewal(request: httpx.Request) -> httpx.Request:
    request.extensions[RENEWAL_EXTENSION] = True
    return request


def is_renewal_request(request: httpx.Request) -> bool:
    return bool(request.extensions.get(RENEWAL_EXTENSION))


def skips_auth(request: httpx.Request) -> bool:
    return is_renewal_request(request) or bool(request.extensions.get(SKIP_AUTH_EXTENSION))


def extract_bearer_token(authorization_header: str | None) -> str | None:
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def with_bearer(request: httpx.Request, access_token: str) -> httpx.Request:
    headers = httpx.Headers(request.headers)
    headers[AUTHORIZATION_HEADER] = f"Bearer {access_token}"
    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=headers,
        content=request.content,
        extensions=dict(request.extensions),
    )


class RequestAuthenticator:
    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    async def decorate(self, request: httpx.Request) -> httpx.Request:
        """Return ``request`` carrying the current access credential, if there is one.

        Login and renewal requests pass through untouched, as does everything
        else while no access credential is stored.
        """
        if skips_auth(request):
            return request

        access_token = await self._store.get(ACCESS_TOKEN_KEY)
        if not access_token:
            return request
        return with_bearer(request, access_token)

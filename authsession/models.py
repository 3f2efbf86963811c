from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from .constants import AUTHORIZATION_HEADER


@dataclass(frozen=True)
class CredentialPair:
    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token) and bool(self.refresh_token)


@dataclass(eq=False)
class PendingRequest:
    """A request parked behind a renewal window, captured before decoration."""

    method: str
    url: httpx.URL
    headers: httpx.Headers
    content: bytes
    extensions: dict = field(default_factory=dict)

    @classmethod
    def capture(cls, request: httpx.Request) -> "PendingRequest":
        headers = httpx.Headers(request.headers)
        headers.pop(AUTHORIZATION_HEADER, None)
        return cls(
            method=request.method,
            url=request.url,
            headers=headers,
            content=request.content,
            extensions=dict(request.extensions),
        )

    def build(self, access_token: str) -> httpx.Request:
        headers = httpx.Headers(self.headers)
        headers[AUTHORIZATION_HEADER] = f"Bearer {access_token}"
        return httpx.Request(
            method=self.method,
            url=self.url,
            headers=headers,
            content=self.content,
            extensions=dict(self.extensions),
        )

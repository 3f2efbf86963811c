import httpx
import pytest

from authsession.authenticator import (
    RequestAuthenticator,
    extract_bearer_token,
    is_renewal_request,
    mark_renewal,
    mark_unauthenticated,
    skips_auth,
)
from authsession.credential_store import MemoryCredentialStore
from authsession.models import CredentialPair, PendingRequest


@pytest.mark.asyncio
async def test_bearer_token_attached() -> None:
    authenticator = RequestAuthenticator(MemoryCredentialStore(CredentialPair("A1", "RF1")))
    request = httpx.Request("GET", "https://api.example.com/me")

    decorated = await authenticator.decorate(request)

    assert decorated.headers["Authorization"] == "Bearer A1"
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
async def test_request_without_token_passes_through() -> None:
    authenticator = RequestAuthenticator(MemoryCredentialStore())
    request = httpx.Request("GET", "https://api.example.com/public")

    assert await authenticator.decorate(request) is request


@pytest.mark.asyncio
async def test_login_request_not_decorated() -> None:
    authenticator = RequestAuthenticator(MemoryCredentialStore(CredentialPair("A1", "RF1")))
    request = mark_unauthenticated(httpx.Request("POST", "https://api.example.com/login"))

    decorated = await authenticator.decorate(request)

    assert decorated is request
    assert "Authorization" not in decorated.headers


@pytest.mark.asyncio
async def test_renewal_request_not_decorated() -> None:
    authenticator = RequestAuthenticator(MemoryCredentialStore(CredentialPair("A1", "RF1")))
    request = mark_renewal(httpx.Request("POST", "https://api.example.com/refresh"))

    decorated = await authenticator.decorate(request)

    assert "Authorization" not in decorated.headers


def test_markers() -> None:
    plain = httpx.Request("GET", "https://api.example.com/me")
    login = mark_unauthenticated(httpx.Request("POST", "https://api.example.com/login"))
    renewal = mark_renewal(httpx.Request("POST", "https://api.example.com/refresh"))

    assert not skips_auth(plain)
    assert skips_auth(login) and not is_renewal_request(login)
    assert skips_auth(renewal) and is_renewal_request(renewal)


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer  abc ", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_extract_bearer_token(header, expected) -> None:
    assert extract_bearer_token(header) == expected


def test_pending_request_drops_stale_authorization() -> None:
    request = httpx.Request(
        "PUT",
        "https://api.example.com/items/1",
        headers={"Authorization": "Bearer A1", "X-Trace": "t-1"},
        content=b"payload",
    )

    replay = PendingRequest.capture(request).build("A2")

    assert replay.method == "PUT"
    assert replay.url == request.url
    assert replay.content == b"payload"
    assert replay.headers["X-Trace"] == "t-1"
    assert replay.headers.get_list("Authorization") == ["Bearer A2"]

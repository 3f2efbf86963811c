from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from .authenticator import (
    RequestAuthenticator,
    extract_bearer_token,
    is_renewal_request,
    skips_auth,
)
from .config import SessionSettings, load_env, setup_logging, validate_settings
from .constants import AUTHORIZATION_HEADER, LOGGER, USER_AGENT
from .credential_store import CredentialStore, FileCredentialStore, MemoryCredentialStore
from .errors import UnauthenticatedError
from .exchange import LoginResult, RenewedCredentials, request_login, request_renewal
from .http import build_event_hooks, friendly_error_message
from .models import PendingRequest
from .renewal import RenewalCoordinator

ErrorSink = Callable[[str], None]


class SessionClient:
    """Sends requests with the stored bearer credential and renews it on 401.

    Callers see either the server's response or one of the session errors;
    a successful renewal is invisible to them.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
        settings: SessionSettings,
        *,
        error_sink: ErrorSink | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._http = http_client
        self._store = store
        self._settings = settings
        self._error_sink = error_sink
        self._logger = logger or LOGGER
        self._authenticator = RequestAuthenticator(store)
        self._coordinator = RenewalCoordinator(
            store,
            self._exchange_refresh_token,
            timeout=settings.renewal_timeout,
            on_expired=self._report,
            logger=self._logger,
        )

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def is_renewing(self) -> bool:
        return self._coordinator.is_renewing

    @property
    def pending_count(self) -> int:
        return self._coordinator.pending_count

    async def send(self, request: httpx.Request, *, require_auth: bool = False) -> httpx.Response:
        try:
            return await self._send(request, require_auth=require_auth)
        except httpx.TransportError as error:
            self._report(error)
            raise

    async def _send(self, request: httpx.Request, *, require_auth: bool) -> httpx.Response:
        if is_renewal_request(request):
            return await self._http.send(request)

        await request.aread()
        decorated = await self._authenticator.decorate(request)
        bearer = extract_bearer_token(decorated.headers.get(AUTHORIZATION_HEADER))
        if require_auth and bearer is None:
            raise UnauthenticatedError(
                f"{request.method} {request.url} requires a signed-in session."
            )

        response = await self._http.send(decorated)
        if response.status_code != 401 or skips_auth(request):
            return response

        await response.aclose()
        pending = PendingRequest.capture(request)
        access_token = await self._coordinator.recover(pending)
        return await self._http.send(pending.build(access_token))

    async def request(self, method: str, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        require_auth = kwargs.pop("require_auth", False)
        request = self._http.build_request(method, url, **kwargs)
        return await self.send(request, require_auth=require_auth)

    async def get(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def login(self, credentials: dict) -> LoginResult:
        try:
            result = await request_login(self._http, credentials, settings=self._settings)
        except httpx.TransportError as error:
            self._report(error)
            raise
        await self._store.save(result.access_token, result.refresh_token)
        self._logger.info("Signed in; credentials stored")
        return result

    async def logout(self) -> None:
        await self._store.clear_all()
        self._logger.info("Signed out; credentials cleared")

    async def is_authenticated(self) -> bool:
        pair = await self._store.load()
        return pair.is_authenticated

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _exchange_refresh_token(self, refresh_token: str) -> RenewedCredentials:
        return await request_renewal(self._http, refresh_token, settings=self._settings)

    def _report(self, error: BaseException) -> None:
        if self._error_sink is None:
            return
        self._error_sink(friendly_error_message(error))


def create_session_client(
    settings: SessionSettings | None = None,
    *,
    store: CredentialStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    error_sink: ErrorSink | None = None,
) -> SessionClient:
    load_env()
    debug_enabled = setup_logging()
    settings = settings or SessionSettings.from_env()
    validate_settings(settings)

    if store is None:
        if settings.token_store_path:
            store = FileCredentialStore(settings.token_store_path)
        else:
            store = MemoryCredentialStore()

    http_client = httpx.AsyncClient(
        base_url=settings.base_url,
        headers={"User-Agent": USER_AGENT},
        timeout=settings.timeout,
        transport=transport,
        event_hooks=build_event_hooks(debug_enabled),
    )
    return SessionClient(http_client, store, settings, error_sink=error_sink)

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .constants import LOGGER, REFRESH_TOKEN_KEY
from .credential_store import CredentialStore
from .errors import SessionExpiredError
from .exchange import RenewedCredentials
from .models import PendingRequest

RenewalExchange = Callable[[str], Awaitable[RenewedCredentials]]


class RenewalCoordinator:
    """Single-flight credential renewal for one client.

    The coordinator is either idle or renewing. While renewing it holds one
    task that performs the renewal exchange; every request that fails with a
    401 during that window waits on the same task and gets the same outcome:
    the new access credential, or one shared ``SessionExpiredError``.
    """

    def __init__(
        self,
        store: CredentialStore,
        exchange: RenewalExchange,
        *,
        timeout: float | None = None,
        on_expired: Callable[[SessionExpiredError], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._exchange = exchange
        self._timeout = timeout
        self._on_expired = on_expired
        self._logger = logger or LOGGER
        self._renewal: asyncio.Task[str] | None = None
        self._pending: set[PendingRequest] = set()

    @property
    def is_renewing(self) -> bool:
        return self._renewal is not None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def recover(self, pending: PendingRequest) -> str:
        """Wait for the current renewal window, opening one if idle.

        Returns the renewed access credential. Cancelling the caller only
        drops ``pending`` from the window; the exchange itself keeps running.
        """
        # No await between the idle check and installing the task.
        if self._renewal is None:
            self._renewal = asyncio.ensure_future(self._renew())
            self._renewal.add_done_callback(self._log_outcome)
            self._logger.info("Opened renewal window (%s %s)", pending.method, pending.url)
        else:
            self._logger.debug(
                "Queued behind renewal window (%s %s)", pending.method, pending.url
            )

        renewal = self._renewal
        self._pending.add(pending)
        try:
            return await asyncio.shield(renewal)
        finally:
            self._pending.discard(pending)

    async def _renew(self) -> str:
        try:
            try:
                return await self._exchange_and_store()
            except SessionExpiredError:
                raise
            except Exception as error:
                reason = str(error) or type(error).__name__
                raise SessionExpiredError(f"Credential renewal failed: {reason}") from error
        except SessionExpiredError as error:
            try:
                await self._store.clear_all()
            except Exception:
                self._logger.exception("Could not clear credentials after failed renewal")
            if self._on_expired is not None:
                self._on_expired(error)
            raise
        finally:
            self._renewal = None

    async def _exchange_and_store(self) -> str:
        refresh_token = await self._store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise SessionExpiredError("No refresh credential is stored; sign in again.")

        renewed = await asyncio.wait_for(self._exchange(refresh_token), self._timeout)
        await self._store.save(renewed.access_token, renewed.refresh_token)
        self._logger.info(
            "Renewed access credential (refresh credential %s)",
            "rotated" if renewed.rotated else "kept",
        )
        return renewed.access_token

    def _log_outcome(self, task: asyncio.Task[str]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._logger.warning("Renewal window failed: %s", error)

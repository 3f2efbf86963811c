from __future__ import annotations

import httpx

from .authenticator import is_renewal_request
from .constants import LOGGER
from .errors import LoginFailedError, SessionExpiredError, UnauthenticatedError

MAX_LOGGED_BODY = 1000


def friendly_status_message(status_code: int) -> str:
    if status_code == 401:
        return "Authentication failed. Please sign in again."
    if status_code == 403:
        return "You don't have permission to perform this action."
    if status_code == 404:
        return "The requested resource was not found."
    if status_code == 429:
        return "Too many requests. Please wait a moment and try again."
    if status_code >= 500:
        return "The server is experiencing issues. Please try again later."
    return f"Request failed with status {status_code}."


def friendly_error_message(error: BaseException) -> str:
    if isinstance(error, SessionExpiredError):
        return "Your session has expired. Please sign in again."
    if isinstance(error, UnauthenticatedError):
        return "You need to sign in to continue."
    if isinstance(error, LoginFailedError):
        if error.status_code in (400, 401, 403):
            return "Sign-in failed. Check your credentials and try again."
        if error.status_code is not None:
            return friendly_status_message(error.status_code)
        return "Sign-in failed. Please try again."
    if isinstance(error, httpx.TimeoutException):
        return "The server took too long to respond. Please try again."
    if isinstance(error, httpx.TransportError):
        return "Unable to reach the server. Check your connection and try again."
    return "Something went wrong. Please try again."


def build_event_hooks(debug_enabled: bool) -> dict[str, list]:
    async def log_request(request: httpx.Request) -> None:
        if not debug_enabled:
            return
        kind = "renewal" if is_renewal_request(request) else "request"
        LOGGER.info("HTTP %s %s %s", kind, request.method, request.url)

    async def log_response(response: httpx.Response) -> None:
        if not debug_enabled:
            return
        LOGGER.info(
            "HTTP response %s %s -> %s",
            response.request.method,
            response.request.url,
            response.status_code,
        )
        if response.status_code >= 400 and not is_renewal_request(response.request):
            body = await response.aread()
            text = body.decode("utf-8", errors="replace")
            if len(text) > MAX_LOGGED_BODY:
                text = text[:MAX_LOGGED_BODY] + "...<truncated>"
            LOGGER.warning("HTTP error body: %s", text)

    return {"request": [log_request], "response": [log_response]}

from __future__ import annotations


class SessionError(RuntimeError):
    status_code: int | None = None


class UnauthenticatedError(SessionError):
    def __init__(self, message: str = "No access credential is stored.") -> None:
        super().__init__(message)
        self.status_code = 401


class SessionExpiredError(UnauthenticatedError):
    """Renewal failed or was impossible; stored credentials have been cleared.

    One instance is shared by every request that waited on the same renewal
    window, so callers can tell which failures belong together.
    """

    def __init__(self, message: str = "Session expired; sign in again.") -> None:
        super().__init__(message)


class LoginFailedError(SessionError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RenewalExchangeError(SessionError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

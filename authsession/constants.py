from __future__ import annotations

import logging

LOGGER = logging.getLogger("authsession")
APP_VERSION = "0.1.0"
USER_AGENT = f"authsession/{APP_VERSION}"

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
CREDENTIAL_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY)

AUTHORIZATION_HEADER = "Authorization"

# httpx request extensions used to mark requests the session layer must not touch.
SKIP_AUTH_EXTENSION = "authsession.skip_auth"
RENEWAL_EXTENSION = "authsession.renewal"

DEFAULT_LOGIN_PATH = "/login"
DEFAULT_REFRESH_PATH = "/refresh"
DEFAULT_REFRESH_REQUEST_FIELD = "refreshToken"
DEFAULT_ACCESS_RESPONSE_FIELD = "token"
DEFAULT_REFRESH_RESPONSE_FIELD = "refreshToken"
DEFAULT_TIMEOUT = 30.0

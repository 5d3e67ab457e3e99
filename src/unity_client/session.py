"""Session token storage and the login exchange."""

from __future__ import annotations

import logging
import threading

from requests.auth import _basic_auth_str

from .config import REST_CLIENT_HEADER, TOKEN_HEADER, ConnectConfig
from .exceptions import UnexpectedResponseError
from .http import Transport

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/types/loginSessionInfo/instances"

_ALWAYS = object()


class SessionState:
    """Lock-guarded token and connection settings owned by one client."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self._token: str | None = None
        self._connect: ConnectConfig | None = None

    def get_token(self) -> str | None:
        with self.lock:
            return self._token

    def set_token(self, token: str | None) -> None:
        with self.lock:
            self._token = token

    def get_connect_config(self) -> ConnectConfig:
        with self.lock:
            return self._connect or ConnectConfig()

    def clear(self) -> None:
        with self.lock:
            self._token = None
            self._connect = None

    # Callers must hold `lock`.
    def _replace(self, token: str, connect: ConnectConfig) -> None:
        self._token = token
        self._connect = connect


class Authenticator:
    """Run the login exchange and store the issued token."""

    def __init__(self, transport: Transport, state: SessionState) -> None:
        self._transport = transport
        self._state = state

    def authenticate(self, connect: ConnectConfig | None, *, stale_token: object = _ALWAYS) -> None:
        """Log in and replace the session token.

        The session lock is held for the whole exchange, so at most one login
        runs per client. When ``stale_token`` is given the login is skipped if
        the stored token no longer equals it: another caller already logged in
        while this one was waiting on the lock.
        """

        connect = connect or ConnectConfig()
        with self._state.lock:
            if stale_token is not _ALWAYS and self._state._token != stale_token:
                logger.info("Unity session already refreshed by a concurrent caller")
                return
            token = self._login(connect)
            self._state._replace(token, connect)

    def _login(self, connect: ConnectConfig) -> str:
        headers = {
            "Authorization": _basic_auth_str(connect.username, connect.password),
            REST_CLIENT_HEADER: "true",
        }
        logger.info(
            "Unity login %s (user=%s)",
            self._transport.resolve_url(LOGIN_PATH),
            connect.username or "unspecified",
        )
        self._transport.clear_cookies()
        response = self._transport.do_and_get_response_body("GET", LOGIN_PATH, headers)
        if not 200 <= response.status_code < 300:
            raise self._transport.parse_json_error(response)
        token = response.headers.get(TOKEN_HEADER)
        if not token:
            raise UnexpectedResponseError(
                f"Login response did not include the {TOKEN_HEADER} header",
                status_code=response.status_code,
            )
        return token

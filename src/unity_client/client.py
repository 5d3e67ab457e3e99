"""High-level Unity REST client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .config import TOKEN_HEADER, ClientConfig, ConnectConfig
from .exceptions import ConfigurationError
from .http import Transport
from .models import SystemInfo
from .resources import FilesystemsResource, SnapshotsResource, SystemResource, VolumesResource
from .retry import RetryExecutor
from .session import Authenticator, SessionState

logger = logging.getLogger(__name__)


class UnityClient:
    """Wrap Unity REST endpoints behind one authenticated session.

    Each client owns its session token. Requests that find the session expired
    log in again with the stored credentials and are retried once.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        insecure: bool = False,
        timeout: float = 30.0,
        default_headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
        transport: Transport | None = None,
    ) -> None:
        endpoint = (endpoint or "").strip()
        if not endpoint:
            raise ConfigurationError("Unity endpoint is required")
        self.config = ClientConfig(
            base_url=endpoint.rstrip("/"),
            verify_ssl=not insecure,
            timeout=timeout,
            default_headers=default_headers,
        )
        self._suppress_insecure_warning_if_needed()
        self.transport = transport or Transport(self.config, session=session)
        self._state = SessionState()
        self._authenticator = Authenticator(self.transport, self._state)
        self._executor = RetryExecutor(
            get_token=self._state.get_token,
            reauthenticate=self._reauthenticate,
        )
        self.snapshots = SnapshotsResource(self)
        self.volumes = VolumesResource(self)
        self.filesystems = FilesystemsResource(self)
        self.system = SystemResource(self)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> UnityClient:
        """Build a client from ``UNITY_ENDPOINT`` and ``UNITY_INSECURE``."""

        connect = ConnectConfig.from_env(environ)
        return cls(connect.endpoint, insecure=connect.insecure, **kwargs)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> UnityClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
    def authenticate(self, connect: ConnectConfig | None = None) -> None:
        """Log in and remember ``connect`` for later re-authentication."""

        self._authenticator.authenticate(connect)

    def set_token(self, token: str | None) -> None:
        self._state.set_token(token)

    def get_token(self) -> str | None:
        return self._state.get_token()

    def basic_system_info(self, connect: ConnectConfig | None = None) -> SystemInfo:
        """Return array identity details.

        ``connect`` is accepted for symmetry with `authenticate` and is not
        used: the array serves this endpoint without a login.
        """

        return self.system.basic_system_info()

    def execute_with_retry_authenticate(
        self,
        method: str,
        uri: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send one request, re-authenticating and retrying once on session expiry.

        Returns:
            The decoded JSON body, or None when the array sent no content.
        """

        def attempt(token: str | None) -> Any:
            self._log_request(method, uri)
            merged: dict[str, str] = dict(headers or {})
            if token:
                merged[TOKEN_HEADER] = token
            return self.transport.do_with_headers(method, uri, merged, body).data

        return self._executor.execute(attempt, label=f"{method.upper()} {uri}")

    def close(self) -> None:
        self._state.clear()
        self.transport.close()

    # Internal helpers -------------------------------------------------------
    def _reauthenticate(self, stale_token: str | None) -> None:
        self._authenticator.authenticate(self._state.get_connect_config(), stale_token=stale_token)

    def _log_request(self, method: str, uri: str) -> None:
        logger.info(
            "Unity request %s %s (endpoint=%s)",
            method.upper(),
            uri,
            self.config.base_url,
        )

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)

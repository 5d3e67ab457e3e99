"""HTTP transport for Unity REST API access."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin, urlparse

import requests
from requests import Response, Session

from .config import ClientConfig
from .exceptions import (
    RequestError,
    ServerError,
    UnexpectedResponseError,
    error_class_for_status,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any
    headers: Mapping[str, str]


def parse_json(response: Response) -> Any:
    """Parse JSON with helpful error context."""

    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedResponseError(
            "Response did not contain valid JSON",
            status_code=response.status_code,
            details=response.text[:200],
        ) from exc


def _error_messages(payload: Any) -> tuple[str | None, int | None]:
    """Pull the localized messages and error code out of a Unity error body."""

    if not isinstance(payload, Mapping):
        return None, None
    error = payload.get("error")
    if not isinstance(error, Mapping):
        return None, None
    texts: list[str] = []
    for entry in error.get("messages") or []:
        if isinstance(entry, Mapping):
            texts.extend(str(value) for value in entry.values() if value)
        elif entry:
            texts.append(str(entry))
    error_code = error.get("errorCode")
    if not isinstance(error_code, int):
        error_code = None
    return ("; ".join(texts) or None), error_code


class Transport:
    """Perform single request/response exchanges against one array endpoint.

    The transport knows nothing about sessions: callers supply any token
    headers they need. Non-2xx responses become `RequestError` subclasses and
    `requests` failures become `ServerError`.
    """

    def __init__(self, config: ClientConfig, *, session: Session | None = None) -> None:
        self.config = config
        self._session = session or requests.Session()

    def get(self, path: str, headers: Mapping[str, str] | None = None) -> HttpResponse:
        return self.do_with_headers("GET", path, headers)

    def post(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        return self.do_with_headers("POST", path, headers, body)

    def put(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        return self.do_with_headers("PUT", path, headers, body)

    def delete(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        return self.do_with_headers("DELETE", path, headers, body)

    def do_with_headers(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        """Make a request and return a parsed response envelope."""

        response = self.do_and_get_response_body(method, path, headers, body)
        if not 200 <= response.status_code < 300:
            raise self.parse_json_error(response)

        data: Any = None
        if response.content:
            data = parse_json(response)
        return HttpResponse(status_code=response.status_code, data=data, headers=response.headers)

    def do_and_get_response_body(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> Response:
        """Return the raw response without inspecting its status."""

        url = self.resolve_url(path)
        try:
            return self._session.request(
                method=method.upper(),
                url=url,
                headers=self._prepare_headers(headers),
                json=body,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise ServerError(
                f"Failed to communicate with Unity API: {reason}", details=reason
            ) from exc

    def parse_json_error(self, response: Response) -> RequestError:
        """Build (but do not raise) the error matching a failed response."""

        status = response.status_code
        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None
        text, error_code = _error_messages(payload)
        summary = text or response.text[:200] or response.reason or "no response body"
        error_cls = error_class_for_status(status)
        logger.debug("Unity API error %s classified as %s", status, error_cls.__name__)
        return error_cls(
            f"Unity API error {status}: {summary}",
            status_code=status,
            details=response.text,
            error_code=error_code,
        )

    def resolve_url(self, path: str) -> str:
        parsed = urlparse(path)
        if parsed.scheme and parsed.netloc:
            return path
        return urljoin(f"{self.config.base_url}/", path.lstrip("/"))

    def clear_cookies(self) -> None:
        self._session.cookies.clear()

    def close(self) -> None:
        self._session.close()

    def _prepare_headers(self, headers: Mapping[str, str] | None) -> MutableMapping[str, str]:
        merged: MutableMapping[str, str] = self.config.resolved_headers()
        if headers:
            merged.update(headers)
        return merged

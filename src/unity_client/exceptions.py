"""Custom exception hierarchy for the Unity client."""
from __future__ import annotations

from typing import Any


class UnityError(RuntimeError):
    """Base error for Unity failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
        error_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details
        self.error_code = error_code


class ValidationError(UnityError, ValueError):
    """Raised when caller input is rejected before any request is sent."""


class ConfigurationError(ValidationError):
    """Raised when the client cannot be built from the supplied settings."""


class RequestError(UnityError):
    """Raised when an HTTP request cannot be fulfilled."""


class AuthenticationError(RequestError):
    """Raised when credentials fail or the session token has expired."""


class ClientError(RequestError):
    """Raised for 4xx responses other than an expired session."""


class ServerError(RequestError):
    """Raised for 5xx responses and transport failures."""


class UnexpectedResponseError(UnityError):
    """Raised when the API returns an unexpected payload structure."""


class LicenseError(UnityError):
    """Raised when the array lacks a license required by the request."""


def error_class_for_status(status_code: int) -> type[RequestError]:
    """Map an HTTP status code onto the request error taxonomy."""

    if status_code == 401:
        return AuthenticationError
    if 400 <= status_code < 500:
        return ClientError
    return ServerError

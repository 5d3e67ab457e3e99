"""Configuration helpers for the Unity client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_ENDPOINT = "UNITY_ENDPOINT"
ENV_INSECURE = "UNITY_INSECURE"
ENV_USERNAME = "UNITY_USERNAME"
ENV_PASSWORD = "UNITY_PASSWORD"

REST_CLIENT_HEADER = "X-EMC-REST-CLIENT"
TOKEN_HEADER = "EMC-CSRF-TOKEN"

_FALSEY = {"0", "false", "no", "off", ""}


def parse_bool(value: str | None, *, default: bool = False) -> bool:
    """Interpret common truthy/falsey spellings (1/0, true/false, yes/no, on/off)."""

    if value is None:
        return default
    return value.strip().lower() not in _FALSEY


@dataclass(slots=True)
class ConnectConfig:
    """Endpoint and credentials used for the login exchange.

    The zero value is legal: logging in with it still contacts the client's
    endpoint and fails with a classified error.
    """

    endpoint: str = ""
    username: str = ""
    password: str = ""
    insecure: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConnectConfig:
        env = os.environ if environ is None else environ
        return cls(
            endpoint=env.get(ENV_ENDPOINT, "").strip(),
            username=env.get(ENV_USERNAME, ""),
            password=env.get(ENV_PASSWORD, ""),
            insecure=parse_bool(env.get(ENV_INSECURE)),
        )


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `UnityClient`."""

    base_url: str
    verify_ssl: bool | str = True
    timeout: float = 30.0
    default_headers: Mapping[str, str] | None = None

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            REST_CLIENT_HEADER: "true",
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers

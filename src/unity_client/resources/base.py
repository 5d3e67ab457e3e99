"""Common helpers for resource wrappers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from ..client import UnityClient

API_ROOT = "/api"


def instance_path(resource_type: str, instance_id: str, *, action: str | None = None) -> str:
    path = f"{API_ROOT}/instances/{resource_type}/{quote(instance_id, safe='')}"
    if action:
        path += f"/action/{action}"
    return path


def name_path(resource_type: str, name: str) -> str:
    return f"{API_ROOT}/instances/{resource_type}/name:{quote(name, safe='')}"


def type_path(resource_type: str, *, action: str | None = None) -> str:
    if action:
        return f"{API_ROOT}/types/{resource_type}/action/{action}"
    return f"{API_ROOT}/types/{resource_type}/instances"


def page_params(start_token: int, max_entries: int) -> dict[str, str]:
    """Pass paging through to the array; ``start_token`` is a 1-based page number."""

    if max_entries <= 0:
        return {}
    params = {"per_page": str(max_entries)}
    if start_token > 0:
        params["page"] = str(start_token)
    return params


def next_page_token(start_token: int, max_entries: int, returned: int) -> int:
    if max_entries <= 0 or returned < max_entries:
        return 0
    return max(start_token, 1) + 1


class ResourceBase:
    """Provide shared helpers for resource modules."""

    def __init__(self, client: UnityClient) -> None:
        self._client = client

    def _get(self, path: str, *, params: Mapping[str, str] | None = None) -> Any:
        return self._client.execute_with_retry_authenticate("GET", self._with_query(path, params))

    def _post(self, path: str, payload: Mapping[str, Any]) -> Any:
        return self._client.execute_with_retry_authenticate("POST", path, body=payload)

    def _delete(self, path: str) -> Any:
        return self._client.execute_with_retry_authenticate("DELETE", path)

    @staticmethod
    def _with_query(path: str, params: Mapping[str, str] | None) -> str:
        if not params:
            return path
        separator = "&" if "?" in path else "?"
        return f"{path}{separator}{urlencode(params, quote_via=quote)}"

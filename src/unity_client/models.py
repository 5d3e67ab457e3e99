"""Typed views over Unity REST payloads."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import UnexpectedResponseError

SNAPSHOT_FIELDS = (
    "id,name,description,storageResource,lun,creationTime,expirationTime,"
    "isAutoDelete,isReadOnly,state,size,accessType,parentSnap"
)
VOLUME_FIELDS = (
    "id,name,description,type,wwn,sizeTotal,sizeAllocated,isThinEnabled,"
    "isDataReductionEnabled,pool,storageResource,health"
)
FILESYSTEM_FIELDS = (
    "id,name,description,type,sizeTotal,sizeAllocated,isThinEnabled,"
    "isDataReductionEnabled,pool,nasServer,storageResource,supportedProtocols,"
    "hostIOSize,health"
)
SYSTEM_INFO_FIELDS = "id,model,name,softwareVersion,apiVersion,earliestApiVersion"
LICENSE_FIELDS = "id,name,isInstalled,isValid,version"

FILESYSTEM_DELETION_MARKER = "csi-marked-filesystem-for-deletion(do not remove this from description)"


class SnapshotAccessType(enum.IntEnum):
    """How a filesystem snapshot is exposed to hosts."""

    CHECKPOINT = 1
    PROTOCOL = 2


def unwrap_content(payload: Any) -> Mapping[str, Any]:
    """Return the ``content`` object of an instance response."""

    if isinstance(payload, Mapping):
        content = payload.get("content")
        if isinstance(content, Mapping):
            return content
    raise UnexpectedResponseError("Response did not contain an instance 'content' object")


def unwrap_entries(payload: Any) -> list[Mapping[str, Any]]:
    """Return the ``content`` objects of a collection response."""

    if not isinstance(payload, Mapping) or not isinstance(payload.get("entries", []), list):
        raise UnexpectedResponseError("Response did not contain an 'entries' collection")
    return [unwrap_content(entry) for entry in payload.get("entries", [])]


def _ref(content: Mapping[str, Any], key: str) -> str | None:
    value = content.get(key)
    if isinstance(value, Mapping):
        ref = value.get("id")
        return str(ref) if ref is not None else None
    return None


def require_content_id(content: Mapping[str, Any], kind: str) -> str:
    value = content.get("id")
    if value is None or value == "":
        raise UnexpectedResponseError(f"{kind} payload is missing its 'id'")
    return str(value)


def require_ref_id(content: Mapping[str, Any], key: str) -> str:
    """Return ``content[key]["id"]`` as returned by the array's create actions."""

    ref = _ref(content, key)
    if not ref:
        raise UnexpectedResponseError(f"Response did not include a '{key}' reference")
    return ref


def _int(content: Mapping[str, Any], key: str, kind: str) -> int:
    try:
        return int(content.get(key) or 0)
    except (TypeError, ValueError) as exc:
        raise UnexpectedResponseError(
            f"{kind} field '{key}' is not an integer: {content.get(key)!r}"
        ) from exc


def _health(content: Mapping[str, Any]) -> int | None:
    health = content.get("health")
    if isinstance(health, Mapping) and isinstance(health.get("value"), int):
        return health["value"]
    return None


@dataclass(slots=True)
class Snapshot:
    id: str
    name: str = ""
    description: str = ""
    storage_resource_id: str | None = None
    lun_id: str | None = None
    parent_snapshot_id: str | None = None
    creation_time: str | None = None
    expiration_time: str | None = None
    is_auto_delete: bool = False
    is_read_only: bool = False
    state: int | None = None
    size: int = 0
    access_type: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_content(cls, content: Mapping[str, Any]) -> Snapshot:
        return cls(
            id=require_content_id(content, "Snapshot"),
            name=content.get("name") or "",
            description=content.get("description") or "",
            storage_resource_id=_ref(content, "storageResource"),
            lun_id=_ref(content, "lun"),
            parent_snapshot_id=_ref(content, "parentSnap"),
            creation_time=content.get("creationTime"),
            expiration_time=content.get("expirationTime"),
            is_auto_delete=bool(content.get("isAutoDelete", False)),
            is_read_only=bool(content.get("isReadOnly", False)),
            state=content.get("state"),
            size=_int(content, "size", "Snapshot"),
            access_type=content.get("accessType"),
            raw=dict(content),
        )


@dataclass(slots=True)
class Volume:
    id: str
    name: str = ""
    description: str = ""
    type: int | None = None
    wwn: str | None = None
    size_total: int = 0
    size_allocated: int = 0
    is_thin_enabled: bool = False
    is_data_reduction_enabled: bool = False
    pool_id: str | None = None
    storage_resource_id: str | None = None
    health: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_content(cls, content: Mapping[str, Any]) -> Volume:
        return cls(
            id=require_content_id(content, "Volume"),
            name=content.get("name") or "",
            description=content.get("description") or "",
            type=content.get("type"),
            wwn=content.get("wwn"),
            size_total=_int(content, "sizeTotal", "Volume"),
            size_allocated=_int(content, "sizeAllocated", "Volume"),
            is_thin_enabled=bool(content.get("isThinEnabled", False)),
            is_data_reduction_enabled=bool(content.get("isDataReductionEnabled", False)),
            pool_id=_ref(content, "pool"),
            storage_resource_id=_ref(content, "storageResource"),
            health=_health(content),
            raw=dict(content),
        )


@dataclass(slots=True)
class Filesystem:
    id: str
    name: str = ""
    description: str = ""
    type: int | None = None
    size_total: int = 0
    size_allocated: int = 0
    is_thin_enabled: bool = False
    is_data_reduction_enabled: bool = False
    pool_id: str | None = None
    nas_server_id: str | None = None
    storage_resource_id: str | None = None
    supported_protocols: int | None = None
    host_io_size: int | None = None
    health: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_marked_for_deletion(self) -> bool:
        return FILESYSTEM_DELETION_MARKER in self.description

    @classmethod
    def from_content(cls, content: Mapping[str, Any]) -> Filesystem:
        return cls(
            id=require_content_id(content, "Filesystem"),
            name=content.get("name") or "",
            description=content.get("description") or "",
            type=content.get("type"),
            size_total=_int(content, "sizeTotal", "Filesystem"),
            size_allocated=_int(content, "sizeAllocated", "Filesystem"),
            is_thin_enabled=bool(content.get("isThinEnabled", False)),
            is_data_reduction_enabled=bool(content.get("isDataReductionEnabled", False)),
            pool_id=_ref(content, "pool"),
            nas_server_id=_ref(content, "nasServer"),
            storage_resource_id=_ref(content, "storageResource"),
            supported_protocols=content.get("supportedProtocols"),
            host_io_size=content.get("hostIOSize"),
            health=_health(content),
            raw=dict(content),
        )


@dataclass(slots=True)
class SystemInfo:
    id: str | None = None
    model: str | None = None
    name: str | None = None
    software_version: str | None = None
    api_version: str | None = None
    earliest_api_version: str | None = None

    @classmethod
    def from_content(cls, content: Mapping[str, Any]) -> SystemInfo:
        return cls(
            id=content.get("id"),
            model=content.get("model"),
            name=content.get("name"),
            software_version=content.get("softwareVersion"),
            api_version=content.get("apiVersion"),
            earliest_api_version=content.get("earliestApiVersion"),
        )


@dataclass(slots=True)
class LicenseInfo:
    id: str
    name: str | None = None
    is_installed: bool = False
    is_valid: bool = False
    version: str | None = None

    @property
    def is_usable(self) -> bool:
        return self.is_installed and self.is_valid

    @classmethod
    def from_content(cls, content: Mapping[str, Any]) -> LicenseInfo:
        return cls(
            id=require_content_id(content, "License"),
            name=content.get("name"),
            is_installed=bool(content.get("isInstalled", False)),
            is_valid=bool(content.get("isValid", False)),
            version=content.get("version"),
        )

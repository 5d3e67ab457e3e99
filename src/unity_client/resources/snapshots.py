"""Snapshot operations."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import UnexpectedResponseError, ValidationError
from ..models import (
    SNAPSHOT_FIELDS,
    Filesystem,
    Snapshot,
    SnapshotAccessType,
    require_content_id,
    unwrap_content,
    unwrap_entries,
)
from ..validation import parse_retention_duration, require_id, validate_name
from .base import (
    ResourceBase,
    instance_path,
    name_path,
    next_page_token,
    page_params,
    type_path,
)

logger = logging.getLogger(__name__)

SNAPSHOT_TYPE = "snap"


def _filter_value(value: str) -> str:
    cleaned = (value or "").strip()
    if '"' in cleaned:
        raise ValidationError(f"identifier {cleaned!r} must not contain double quotes")
    return cleaned


class SnapshotsResource(ResourceBase):
    """Create, inspect and remove snapshots of volumes and filesystems."""

    def create(
        self,
        storage_resource_id: str,
        name: str,
        description: str = "",
        retention_duration: str = "",
    ) -> Snapshot:
        """Snapshot a storage resource.

        Args:
            storage_resource_id: The storage resource (volume or filesystem) to snapshot.
            name: Snapshot name, at most 63 characters.
            description: Optional free-form description.
            retention_duration: Optional ``days:hours:minutes:seconds`` retention window.
        """
        return self._create(storage_resource_id, name, description, retention_duration, None)

    def create_with_fs_access_type(
        self,
        storage_resource_id: str,
        name: str,
        description: str,
        retention_duration: str,
        access_type: SnapshotAccessType,
    ) -> Snapshot:
        """Snapshot a filesystem, choosing how hosts reach the snapshot."""
        return self._create(storage_resource_id, name, description, retention_duration, access_type)

    def find_by_name(self, name: str) -> Snapshot:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("name empty error")
        payload = self._get(name_path(SNAPSHOT_TYPE, cleaned), params={"fields": SNAPSHOT_FIELDS})
        return Snapshot.from_content(unwrap_content(payload))

    def find_by_id(self, snapshot_id: str) -> Snapshot:
        snapshot_id = require_id(snapshot_id, "snapshot ID cannot be empty")
        payload = self._get(instance_path(SNAPSHOT_TYPE, snapshot_id), params={"fields": SNAPSHOT_FIELDS})
        return Snapshot.from_content(unwrap_content(payload))

    def list(
        self,
        start_token: int = 0,
        max_entries: int = 0,
        source_id: str = "",
        snapshot_id: str = "",
    ) -> tuple[list[Snapshot], int]:
        """List snapshots, optionally scoped to a source resource or one snapshot.

        Returns:
            The snapshots on this page and the token of the next page (0 when done).
        """
        filters: list[str] = []
        source_id = _filter_value(source_id)
        snapshot_id = _filter_value(snapshot_id)
        if source_id:
            filters.append(f'storageResource.id eq "{source_id}"')
        if snapshot_id:
            filters.append(f'id eq "{snapshot_id}"')
        params: dict[str, str] = {"fields": SNAPSHOT_FIELDS}
        if filters:
            params["filter"] = " and ".join(filters)
        params.update(page_params(start_token, max_entries))

        payload = self._get(type_path(SNAPSHOT_TYPE), params=params)
        snapshots = [Snapshot.from_content(content) for content in unwrap_entries(payload)]
        return snapshots, next_page_token(start_token, max_entries, len(snapshots))

    def modify(self, snapshot_id: str, description: str, retention_duration: str = "") -> None:
        snapshot_id = require_id(snapshot_id, "snapshot ID cannot be empty")
        payload: dict[str, Any] = {"description": description}
        if retention_duration:
            payload["retentionDuration"] = parse_retention_duration(retention_duration)
        self._post(instance_path(SNAPSHOT_TYPE, snapshot_id, action="modify"), payload)

    def modify_auto_delete(self, snapshot_id: str) -> None:
        """Stop the array from deleting the snapshot automatically."""
        snapshot_id = require_id(snapshot_id, "snapshot ID cannot be empty")
        self._post(
            instance_path(SNAPSHOT_TYPE, snapshot_id, action="modify"),
            {"isAutoDelete": False},
        )

    def copy(self, source_snapshot_id: str, copy_name: str) -> Snapshot:
        source_snapshot_id = require_id(source_snapshot_id, "Source Snapshot ID cannot be empty")
        if not (copy_name or "").strip():
            raise ValidationError("Snapshot Name cannot be empty")
        copy_name = self._validated_name(copy_name)

        payload = self._post(
            instance_path(SNAPSHOT_TYPE, source_snapshot_id, action="copy"),
            {"copyName": copy_name},
        )
        content = unwrap_content(payload)
        copies = content.get("copies")
        if not isinstance(copies, list) or not copies or not isinstance(copies[0], dict):
            raise UnexpectedResponseError("Snapshot copy response did not list the new copy")
        return self.find_by_id(require_content_id(copies[0], "Snapshot copy"))

    def delete(self, snapshot_id: str) -> None:
        snapshot_id = require_id(snapshot_id, "snapshot ID cannot be empty")
        self._delete(instance_path(SNAPSHOT_TYPE, snapshot_id))

    def delete_filesystem_as_snapshot(self, snapshot_id: str, source_filesystem: Filesystem) -> None:
        """Delete a snapshot that stands in for a filesystem.

        If the source filesystem was only kept alive for its snapshots (it
        carries the deletion marker) it is removed once no snapshots remain.
        """
        snapshot_id = require_id(snapshot_id, "snapshot ID cannot be empty")
        marked = source_filesystem.is_marked_for_deletion
        if marked:
            require_id(source_filesystem.id, "filesystem ID cannot be empty")
        self.delete(snapshot_id)
        if marked:
            logger.info(
                "Source filesystem %s is marked for deletion; attempting removal",
                source_filesystem.id,
            )
            self._client.filesystems.delete(source_filesystem.id)

    def _create(
        self,
        storage_resource_id: str,
        name: str,
        description: str,
        retention_duration: str,
        access_type: SnapshotAccessType | None,
    ) -> Snapshot:
        storage_resource_id = require_id(storage_resource_id, "storage Resource ID cannot be empty")
        name = self._validated_name(name)
        payload: dict[str, Any] = {
            "storageResource": {"id": storage_resource_id},
            "name": name,
            "description": description,
        }
        if retention_duration:
            payload["retentionDuration"] = parse_retention_duration(retention_duration)
        if access_type is not None:
            payload["filesystemAccessType"] = int(access_type)

        created = unwrap_content(self._post(type_path(SNAPSHOT_TYPE), payload))
        return self.find_by_id(require_content_id(created, "Snapshot"))

    @staticmethod
    def _validated_name(name: str) -> str:
        try:
            return validate_name(name)
        except ValidationError as exc:
            raise ValidationError(f"invalid snapshot name Error:{exc}") from exc

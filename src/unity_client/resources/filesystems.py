"""Filesystem operations."""

from __future__ import annotations

import logging

from ..exceptions import ValidationError
from ..models import (
    FILESYSTEM_DELETION_MARKER,
    FILESYSTEM_FIELDS,
    Filesystem,
    unwrap_content,
    unwrap_entries,
)
from ..validation import require_id, validate_name
from .base import (
    ResourceBase,
    instance_path,
    name_path,
    next_page_token,
    page_params,
    type_path,
)
from .system import DATA_REDUCTION_LICENSE, THIN_PROVISIONING_LICENSE

logger = logging.getLogger(__name__)

FILESYSTEM_TYPE = "filesystem"
STORAGE_RESOURCE_TYPE = "storageResource"


class FilesystemsResource(ResourceBase):
    """Interact with Unity filesystems."""

    def create(
        self,
        name: str,
        pool_id: str,
        nas_server_id: str,
        size: int,
        description: str = "",
        supported_protocols: int = 0,
        is_thin: bool = True,
        is_data_reduction: bool = False,
        host_io_size: int = 8192,
    ) -> Filesystem:
        """Create a filesystem on a NAS server.

        Args:
            name: Filesystem name, at most 63 characters.
            pool_id: The pool backing the filesystem.
            nas_server_id: The NAS server that exports it.
            size: Capacity in bytes.
            description: Optional free-form description.
            supported_protocols: 0 for NFS, 1 for CIFS, 2 for both.
            is_thin: Thin-provision the filesystem.
            is_data_reduction: Enable data reduction.
            host_io_size: Expected host I/O size in bytes.
        """
        try:
            name = validate_name(name)
        except ValidationError as exc:
            raise ValidationError(f"invalid filesystem name Error:{exc}") from exc
        pool_id = require_id(pool_id, "pool ID cannot be empty")
        nas_server_id = require_id(nas_server_id, "NAS server ID cannot be empty")
        if size <= 0:
            raise ValidationError("filesystem size must be greater than zero")
        if is_thin:
            self._client.system.require_license(THIN_PROVISIONING_LICENSE)
        if is_data_reduction:
            self._client.system.require_license(DATA_REDUCTION_LICENSE)

        payload = {
            "name": name,
            "description": description,
            "fsParameters": {
                "pool": {"id": pool_id},
                "nasServer": {"id": nas_server_id},
                "size": size,
                "supportedProtocols": supported_protocols,
                "isThinEnabled": is_thin,
                "isDataReductionEnabled": is_data_reduction,
                "hostIOSize": host_io_size,
            },
        }
        self._post(type_path(STORAGE_RESOURCE_TYPE, action="createFilesystem"), payload)
        # The create action returns the storage resource, not the filesystem.
        return self.find_by_name(name)

    def find_by_name(self, name: str) -> Filesystem:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("filesystem name cannot be empty")
        payload = self._get(name_path(FILESYSTEM_TYPE, cleaned), params={"fields": FILESYSTEM_FIELDS})
        return Filesystem.from_content(unwrap_content(payload))

    def find_by_id(self, filesystem_id: str) -> Filesystem:
        filesystem_id = require_id(filesystem_id, "filesystem ID cannot be empty")
        payload = self._get(
            instance_path(FILESYSTEM_TYPE, filesystem_id), params={"fields": FILESYSTEM_FIELDS}
        )
        return Filesystem.from_content(unwrap_content(payload))

    def list(self, start_token: int = 0, max_entries: int = 0) -> tuple[list[Filesystem], int]:
        params = {"fields": FILESYSTEM_FIELDS, **page_params(start_token, max_entries)}
        payload = self._get(type_path(FILESYSTEM_TYPE), params=params)
        filesystems = [Filesystem.from_content(content) for content in unwrap_entries(payload)]
        return filesystems, next_page_token(start_token, max_entries, len(filesystems))

    def expand(self, filesystem_id: str, new_size: int) -> None:
        filesystem = self.find_by_id(filesystem_id)
        if new_size == filesystem.size_total:
            logger.info("Filesystem %s already has size %d; nothing to expand", filesystem.id, new_size)
            return
        if new_size < filesystem.size_total:
            raise ValidationError(
                f"requested new capacity {new_size} is smaller than current size {filesystem.size_total}"
            )
        self._modify(filesystem, {"fsParameters": {"size": new_size}})

    def mark_for_deletion(self, filesystem: Filesystem) -> None:
        """Tag a filesystem so it is removed once its last snapshot goes."""
        self._modify(filesystem, {"description": FILESYSTEM_DELETION_MARKER})

    def delete(self, filesystem_id: str) -> bool:
        """Delete a filesystem, or mark it for deletion while snapshots remain.

        Returns:
            True when the filesystem was deleted, False when it was only marked.
        """
        filesystem = self.find_by_id(filesystem_id)
        snapshots, _ = self._client.snapshots.list(source_id=self._storage_resource_id(filesystem))
        if snapshots:
            logger.info(
                "Filesystem %s still has %d snapshot(s); marking for deletion",
                filesystem.id,
                len(snapshots),
            )
            self.mark_for_deletion(filesystem)
            return False
        self._delete(instance_path(STORAGE_RESOURCE_TYPE, self._storage_resource_id(filesystem)))
        return True

    def _modify(self, filesystem: Filesystem, payload: dict) -> None:
        self._post(
            instance_path(
                STORAGE_RESOURCE_TYPE, self._storage_resource_id(filesystem), action="modifyFilesystem"
            ),
            payload,
        )

    @staticmethod
    def _storage_resource_id(filesystem: Filesystem) -> str:
        return require_id(
            filesystem.storage_resource_id,
            f"filesystem {filesystem.id} has no storage resource ID",
        )

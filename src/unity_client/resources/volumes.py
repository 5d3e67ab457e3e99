"""Volume (LUN) operations."""

from __future__ import annotations

import logging

from ..exceptions import ValidationError
from ..models import VOLUME_FIELDS, Volume, require_ref_id, unwrap_content, unwrap_entries
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

LUN_TYPE = "lun"
STORAGE_RESOURCE_TYPE = "storageResource"


class VolumesResource(ResourceBase):
    """Interact with Unity block volumes."""

    def create(
        self,
        name: str,
        pool_id: str,
        size: int,
        description: str = "",
        is_thin: bool = True,
        is_data_reduction: bool = False,
    ) -> Volume:
        """Create a LUN in a pool.

        Args:
            name: Volume name, at most 63 characters.
            pool_id: The pool to carve the volume from.
            size: Capacity in bytes.
            description: Optional free-form description.
            is_thin: Thin-provision the volume (requires the thin provisioning license).
            is_data_reduction: Enable data reduction (requires its license).
        """
        name = self._validated_name(name)
        pool_id = require_id(pool_id, "pool ID cannot be empty")
        if size <= 0:
            raise ValidationError("volume size must be greater than zero")
        if is_thin:
            self._client.system.require_license(THIN_PROVISIONING_LICENSE)
        if is_data_reduction:
            self._client.system.require_license(DATA_REDUCTION_LICENSE)

        payload = {
            "name": name,
            "description": description,
            "lunParameters": {
                "pool": {"id": pool_id},
                "size": size,
                "isThinEnabled": is_thin,
                "isDataReductionEnabled": is_data_reduction,
            },
        }
        created = unwrap_content(self._post(type_path(STORAGE_RESOURCE_TYPE, action="createLun"), payload))
        return self.find_by_id(require_ref_id(created, "storageResource"))

    def find_by_name(self, name: str) -> Volume:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("volume name cannot be empty")
        payload = self._get(name_path(LUN_TYPE, cleaned), params={"fields": VOLUME_FIELDS})
        return Volume.from_content(unwrap_content(payload))

    def find_by_id(self, volume_id: str) -> Volume:
        volume_id = require_id(volume_id, "volume ID cannot be empty")
        payload = self._get(instance_path(LUN_TYPE, volume_id), params={"fields": VOLUME_FIELDS})
        return Volume.from_content(unwrap_content(payload))

    def list(self, start_token: int = 0, max_entries: int = 0) -> tuple[list[Volume], int]:
        params = {"fields": VOLUME_FIELDS, **page_params(start_token, max_entries)}
        payload = self._get(type_path(LUN_TYPE), params=params)
        volumes = [Volume.from_content(content) for content in unwrap_entries(payload)]
        return volumes, next_page_token(start_token, max_entries, len(volumes))

    def expand(self, volume_id: str, new_size: int) -> None:
        """Grow a volume to ``new_size`` bytes; equal sizes are a no-op."""
        volume = self.find_by_id(volume_id)
        if new_size == volume.size_total:
            logger.info("Volume %s already has size %d; nothing to expand", volume.id, new_size)
            return
        if new_size < volume.size_total:
            raise ValidationError(
                f"requested new capacity {new_size} is smaller than current size {volume.size_total}"
            )
        self._post(
            instance_path(STORAGE_RESOURCE_TYPE, volume.id, action="modifyLun"),
            {"lunParameters": {"size": new_size}},
        )

    def modify(self, volume_id: str, description: str) -> None:
        volume_id = require_id(volume_id, "volume ID cannot be empty")
        self._post(
            instance_path(STORAGE_RESOURCE_TYPE, volume_id, action="modifyLun"),
            {"description": description},
        )

    def delete(self, volume_id: str) -> None:
        volume_id = require_id(volume_id, "volume ID cannot be empty")
        self._delete(instance_path(STORAGE_RESOURCE_TYPE, volume_id))

    def create_thin_clone(self, name: str, snapshot_id: str, volume_id: str) -> Volume:
        """Create a thin clone of ``volume_id`` from one of its snapshots."""
        name = self._validated_name(name)
        snapshot_id = require_id(snapshot_id, "snapshot ID cannot be empty")
        volume_id = require_id(volume_id, "volume ID cannot be empty")
        payload = {"name": name, "snap": {"id": snapshot_id}}
        created = unwrap_content(
            self._post(instance_path(STORAGE_RESOURCE_TYPE, volume_id, action="createLunThinClone"), payload)
        )
        return self.find_by_id(require_ref_id(created, "storageResource"))

    @staticmethod
    def _validated_name(name: str) -> str:
        try:
            return validate_name(name)
        except ValidationError as exc:
            raise ValidationError(f"invalid volume name Error:{exc}") from exc

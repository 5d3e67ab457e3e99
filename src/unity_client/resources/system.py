"""System metadata and license helpers."""
from __future__ import annotations

from ..exceptions import LicenseError, UnexpectedResponseError
from ..models import LICENSE_FIELDS, SYSTEM_INFO_FIELDS, LicenseInfo, SystemInfo, unwrap_content, unwrap_entries
from ..validation import require_id
from .base import ResourceBase, instance_path, type_path

THIN_PROVISIONING_LICENSE = "THIN_PROVISIONING"
DATA_REDUCTION_LICENSE = "INLINE_COMPRESSION"


class SystemResource(ResourceBase):
    """Expose array identity and feature licensing."""

    def basic_system_info(self) -> SystemInfo:
        """Return model and software details; the array serves these without a login."""

        path = self._with_query(type_path("basicSystemInfo"), {"fields": SYSTEM_INFO_FIELDS})
        response = self._client.transport.get(path)
        entries = unwrap_entries(response.data)
        if not entries:
            raise UnexpectedResponseError("basicSystemInfo returned no entries")
        return SystemInfo.from_content(entries[0])

    def license_info(self, feature: str) -> LicenseInfo:
        feature = require_id(feature, "license ID cannot be empty")
        payload = self._get(instance_path("license", feature), params={"fields": LICENSE_FIELDS})
        return LicenseInfo.from_content(unwrap_content(payload))

    def is_feature_licensed(self, feature: str) -> bool:
        return self.license_info(feature).is_usable

    def require_license(self, feature: str) -> None:
        if not self.is_feature_licensed(feature):
            raise LicenseError(f"{feature} license is not installed or not valid on this array")


__all__ = ["SystemResource", "THIN_PROVISIONING_LICENSE", "DATA_REDUCTION_LICENSE"]

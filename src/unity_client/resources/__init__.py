"""Resource-specific convenience wrappers."""
from .filesystems import FilesystemsResource
from .snapshots import SnapshotsResource
from .system import SystemResource
from .volumes import VolumesResource

__all__ = [
    "SnapshotsResource",
    "VolumesResource",
    "FilesystemsResource",
    "SystemResource",
]

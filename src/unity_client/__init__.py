"""High-level Unity client entrypoints."""
from .client import UnityClient
from .config import ClientConfig, ConnectConfig
from .exceptions import UnityError

__all__ = ["UnityClient", "ClientConfig", "ConnectConfig", "UnityError"]

"""Remote configuration store (feature flags served to the client)."""

from ats_gateway.remote_config.models import ConfigUpdateResult, RemoteConfig
from ats_gateway.remote_config.store import (
    PERSISTENCE_WARNING,
    ConfigStore,
    UnauthorizedError,
)

__all__ = [
    "ConfigStore",
    "ConfigUpdateResult",
    "RemoteConfig",
    "UnauthorizedError",
    "PERSISTENCE_WARNING",
]

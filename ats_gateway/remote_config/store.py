"""Process-wide remote configuration store.

Holds the one authoritative in-memory copy of the configuration. The disk
file is only a mirror: it seeds the cache on first read and receives a copy
after every update, but a failed write never changes what readers see.
"""

from __future__ import annotations

import hmac
import json
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ats_gateway.config.settings import Settings
from ats_gateway.remote_config.models import ConfigUpdateResult, RemoteConfig

logger = logging.getLogger(__name__)

PERSISTENCE_WARNING = (
    "Configuration updated in memory but could not be saved to disk; "
    "the change will be lost when the process restarts"
)


class UnauthorizedError(Exception):
    """Raised when the admin secret does not match."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)
        self.message = message


class ConfigStore:
    """Lazily loaded, lock-guarded configuration cache with a disk mirror."""

    def __init__(self, path: str | Path, admin_password: str) -> None:
        self.path = Path(path)
        self._admin_password = admin_password
        self._lock = threading.Lock()
        self._config: RemoteConfig | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ConfigStore:
        return cls(settings.remote_config_path, settings.admin_password)

    def verify_password(self, password: Any) -> bool:
        """Compare a candidate secret against the admin password."""
        if not isinstance(password, str) or not self._admin_password:
            return False
        return hmac.compare_digest(
            password.encode("utf-8"), self._admin_password.encode("utf-8")
        )

    def get(self) -> RemoteConfig:
        """Return the current configuration snapshot.

        Never fails: falls back to the documented defaults when the disk
        copy is absent or unreadable.
        """
        config = self._config
        if config is not None:
            return config

        with self._lock:
            if self._config is None:
                self._config = self._load()
            return self._config

    def update(self, password: Any, partial: Mapping[str, Any]) -> ConfigUpdateResult:
        """Apply a partial update after checking the admin secret.

        The merged config replaces the cached one before the disk write is
        attempted, so the change is visible even if persistence fails.

        Raises:
            UnauthorizedError: If the secret does not match (nothing changes).
            pydantic.ValidationError: If the merged config is invalid
                (nothing changes).
        """
        if not self.verify_password(password):
            logger.warning("Rejected config update with an invalid admin password")
            raise UnauthorizedError()

        with self._lock:
            current = self._config if self._config is not None else self._load()
            updated = current.merged(partial)
            self._config = updated
            persisted = self._persist(updated)

        logger.info(
            "Config updated (keys=%s, persisted=%s)", sorted(partial.keys()), persisted
        )
        return ConfigUpdateResult(
            config=updated,
            persisted=persisted,
            warning=None if persisted else PERSISTENCE_WARNING,
        )

    def _load(self) -> RemoteConfig:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No config file at %s; using defaults", self.path)
            return RemoteConfig()
        except OSError as e:
            logger.warning("Failed to read config from %s (%s); using defaults", self.path, e)
            return RemoteConfig()

        try:
            raw = json.loads(text)
            if not isinstance(raw, dict):
                raise ValueError("config file does not contain a JSON object")
            return RemoteConfig().merged(raw)
        except ValueError as e:
            logger.warning("Failed to load config from %s (%s); using defaults", self.path, e)
            return RemoteConfig()

    def _persist(self, config: RemoteConfig) -> bool:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(config.to_payload(), indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning("Could not persist config to %s: %s", self.path, e)
            return False
        return True

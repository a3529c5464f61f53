"""Data models for the remote configuration store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_FLAT_TYPES = (bool, int, float, str, type(None))


class RemoteConfig(BaseModel):
    """Operational flags served to the client.

    Field names use the camelCase keys of the wire format. Unknown keys are
    kept as long as their values are flat (bool, number, string or null).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    maintenanceMode: bool = False
    hiringEnabled: bool = True
    serviceFee: int = Field(default=69, ge=0)
    updateFee: int = Field(default=30, ge=0)
    occupiedMode: bool = False
    announcement: str = ""
    alertMessage: str = " "

    @model_validator(mode="after")
    def check_extra_values_are_flat(self) -> RemoteConfig:
        for key, value in (self.model_extra or {}).items():
            if not isinstance(value, _FLAT_TYPES):
                raise ValueError(
                    f"Config value for '{key}' must be a boolean, number or string"
                )
        return self

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-serializable mapping served over HTTP."""
        return self.model_dump(mode="json")

    def merged(self, partial: Mapping[str, Any]) -> RemoteConfig:
        """Return a new config with ``partial`` applied on top of this one."""
        return RemoteConfig.model_validate({**self.to_payload(), **dict(partial)})


@dataclass(frozen=True)
class ConfigUpdateResult:
    """Outcome of an authenticated config update."""

    config: RemoteConfig
    persisted: bool
    warning: str | None = None

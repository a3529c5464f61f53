"""Data models for the submission sink."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserData(BaseModel):
    """Contact details sent with an optimization request.

    Unknown fields are kept and archived with the record.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, description="Customer name")
    email: str | None = Field(default=None, description="Customer email address")
    project: str | None = Field(default=None, description="Project or target role")
    details: str | None = Field(default=None, description="Free-form notes")


class SubmissionRequest(BaseModel):
    """Body of ``POST /api/submit-optimization``."""

    model_config = ConfigDict(populate_by_name=True)

    user_data: UserData | None = Field(default=None, alias="userData")
    report: Any = Field(default=None, description="Analysis report as shown to the user")
    optimized_text: str | None = Field(default=None, alias="optimizedText")


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of archiving a submission."""

    message: str
    id: str | None
    persisted: bool
    warning: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": self.message,
            "id": self.id,
            "persisted": self.persisted,
        }
        if self.warning:
            payload["warning"] = self.warning
        return payload

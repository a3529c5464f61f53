"""Data models for the client workflow."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkflowState(str, Enum):
    """State of the most recent request made by a workflow."""

    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AnalysisReport(BaseModel):
    """Structured ATS analysis returned by the provider."""

    model_config = ConfigDict(populate_by_name=True)

    overall_score: float = Field(
        ..., alias="overallScore", description="Share of the JD covered by the resume (0-100)"
    )
    parseability_score: float = Field(
        ..., alias="parseabilityScore", description="How cleanly the resume parses (0-100)"
    )
    summary: str = Field(..., description="Short summary of the findings")
    strengths: list[str] = Field(
        default_factory=list, description="Direct keyword/concept matches"
    )
    weaknesses: list[str] = Field(
        default_factory=list, description="Missing keywords or experience"
    )

    def to_payload(self) -> dict[str, Any]:
        """Return the report in its wire (camelCase) form."""
        return self.model_dump(mode="json", by_alias=True)

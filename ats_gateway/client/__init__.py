"""Client side of the gateway: analysis workflow, fallback and report export."""

from ats_gateway.client.errors import (
    BothPathsFailedError,
    InvalidResultError,
    QuotaExceededError,
    StaleInputsError,
    TransportError,
    WorkflowError,
)
from ats_gateway.client.fallback import (
    FallbackAction,
    FallbackDecision,
    decide_fallback,
    is_quota_failure,
)
from ats_gateway.client.models import AnalysisReport, WorkflowState
from ats_gateway.client.report import build_report_html
from ats_gateway.client.transport import GenerationOutcome, GenerationTransport
from ats_gateway.client.workflow import MatchWorkflow

__all__ = [
    "MatchWorkflow",
    "GenerationTransport",
    "GenerationOutcome",
    "AnalysisReport",
    "WorkflowState",
    "FallbackAction",
    "FallbackDecision",
    "decide_fallback",
    "is_quota_failure",
    "build_report_html",
    "WorkflowError",
    "QuotaExceededError",
    "BothPathsFailedError",
    "InvalidResultError",
    "StaleInputsError",
    "TransportError",
]

"""Analyze-then-optimize workflow with gateway/direct fallback.

Results always belong to the inputs they were computed from: changing the
job description or the resume clears them, and an answer that arrives after
the inputs changed is discarded.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ats_gateway.client.errors import (
    BothPathsFailedError,
    InvalidResultError,
    QuotaExceededError,
    StaleInputsError,
    WorkflowError,
)
from ats_gateway.client.fallback import FallbackAction, decide_fallback
from ats_gateway.client.models import AnalysisReport, WorkflowState
from ats_gateway.client.prompts import build_analysis_payload, build_optimization_payload
from ats_gateway.client.transport import GenerationOutcome, GenerationTransport
from ats_gateway.gateway.provider import extract_candidate_text

logger = logging.getLogger(__name__)

QUOTA_MESSAGES = {
    "Analysis": "Analysis failed: Key limit reached. Please check your Gemini API quota.",
    "Optimization": "Optimization failed: Key limit reached.",
}


class MatchWorkflow:
    """Drives analysis and optimization of one resume against one JD."""

    def __init__(
        self,
        transport: GenerationTransport,
        *,
        user_key: str | None = None,
        use_proxy: bool = True,
    ):
        """Initialize the workflow.

        Args:
            transport: Transport used for every provider call.
            user_key: Caller's own provider key, if any.
            use_proxy: Route requests through the gateway first. When False,
                every request goes straight to the provider with ``user_key``.
        """
        self.transport = transport
        self.user_key = user_key.strip() if user_key and user_key.strip() else None
        self.use_proxy = use_proxy
        self.state = WorkflowState.IDLE
        self.job_description = ""
        self.resume = ""
        self.analysis: AnalysisReport | None = None
        self.optimized_text: str | None = None
        self._revision = 0

    def set_inputs(self, job_description: str, resume: str) -> None:
        """Replace the inputs, clearing results if either text changed."""
        if job_description == self.job_description and resume == self.resume:
            return
        self.job_description = job_description
        self.resume = resume
        self.analysis = None
        self.optimized_text = None
        self.state = WorkflowState.IDLE
        self._revision += 1

    async def analyze(self) -> AnalysisReport:
        """Score the resume against the job description.

        Raises:
            WorkflowError: On missing inputs or a failed request. Subclasses
                distinguish quota, fallback and malformed-result failures.
        """
        if not self.job_description.strip() or not self.resume.strip():
            raise WorkflowError("Please provide both Job Description and Resume.")

        payload = build_analysis_payload(self.job_description, self.resume)
        revision = self._revision
        body = await self._run("Analysis", payload)
        self._check_current(revision)

        text = extract_candidate_text(body)
        if not text:
            self.state = WorkflowState.FAILED
            raise InvalidResultError("Analysis failed: the provider returned no result text")
        try:
            report = AnalysisReport.model_validate_json(text)
        except ValidationError as e:
            self.state = WorkflowState.FAILED
            raise InvalidResultError(f"Analysis failed: malformed report ({e})", e) from e

        self.analysis = report
        self.optimized_text = None
        self.state = WorkflowState.SUCCEEDED
        return report

    async def optimize(self) -> str:
        """Rewrite the resume to cover the gaps found by the last analysis."""
        if self.analysis is None:
            raise WorkflowError("Run an analysis before optimizing the resume.")

        payload = build_optimization_payload(
            self.job_description, self.resume, self.analysis.weaknesses
        )
        revision = self._revision
        body = await self._run("Optimization", payload)
        self._check_current(revision)

        text = extract_candidate_text(body)
        if not text:
            self.state = WorkflowState.FAILED
            raise InvalidResultError(
                "Optimization failed: the provider returned no result text"
            )

        self.optimized_text = text
        self.state = WorkflowState.SUCCEEDED
        return text

    def _check_current(self, revision: int) -> None:
        if revision != self._revision:
            logger.info("Inputs changed during the request; discarding the result")
            raise StaleInputsError("Inputs changed while the request was running")

    async def _run(self, operation: str, payload: dict[str, Any]) -> Any:
        if not self.use_proxy and not self.user_key:
            raise WorkflowError(
                f"{operation} failed: an API key is required when the proxy is disabled"
            )

        self.state = WorkflowState.REQUESTING
        try:
            return await self._generate_with_fallback(operation, payload)
        except WorkflowError:
            self.state = WorkflowState.FAILED
            raise

    async def _generate_with_fallback(self, operation: str, payload: dict[str, Any]) -> Any:
        if self.use_proxy:
            outcome = await self.transport.via_gateway(payload)
        else:
            outcome = await self.transport.direct(payload, self.user_key or "")

        decision = decide_fallback(
            outcome, used_proxy=self.use_proxy, has_user_key=self.user_key is not None
        )
        logger.debug("%s primary outcome: %s (%s)", operation, decision.action.value, decision.reason)

        if decision.action is FallbackAction.ACCEPT:
            return outcome.body

        if decision.action is FallbackAction.RETRY_DIRECT:
            logger.warning("%s: %s", operation, decision.reason)
            retry = await self.transport.direct(payload, self.user_key or "")
            if retry.ok:
                return retry.body
            raise BothPathsFailedError(
                f"{operation} failed: both paths failed "
                f"(gateway: {_describe(outcome)}; direct: {_describe(retry)})",
                primary_error=_describe(outcome),
                secondary_error=_describe(retry),
            )

        if decision.action is FallbackAction.FAIL_QUOTA:
            raise QuotaExceededError(QUOTA_MESSAGES[operation])

        raise WorkflowError(f"{operation} failed: {_describe(outcome)}")


def _describe(outcome: GenerationOutcome) -> str:
    message = outcome.error_message or "unknown error"
    if outcome.status_code is not None:
        return f"HTTP {outcome.status_code}: {message}"
    return message

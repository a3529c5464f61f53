"""Unit tests for the analyze/optimize workflow."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

import httpx
import pytest
from respx import MockRouter

from ats_gateway.client.errors import (
    BothPathsFailedError,
    InvalidResultError,
    QuotaExceededError,
    StaleInputsError,
    WorkflowError,
)
from ats_gateway.client.models import WorkflowState
from ats_gateway.client.transport import GenerationTransport
from ats_gateway.client.workflow import MatchWorkflow

GATEWAY = "http://gateway.test"
GENERATE_URL = f"{GATEWAY}/api/generate"
PROVIDER_BASE = "https://provider.test/v1beta"
DIRECT_URL = f"{PROVIDER_BASE}/models/test-model:generateContent"


def candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
async def transport() -> AsyncIterator[GenerationTransport]:
    async with httpx.AsyncClient() as client:
        yield GenerationTransport(
            GATEWAY,
            provider_base_url=PROVIDER_BASE,
            provider_model="test-model",
            client=client,
        )


@pytest.fixture
def workflow_factory(transport, sample_job_description, sample_resume):
    def factory(**kwargs) -> MatchWorkflow:
        workflow = MatchWorkflow(transport, **kwargs)
        workflow.set_inputs(sample_job_description, sample_resume)
        return workflow

    return factory


@pytest.mark.asyncio
async def test_analyze_via_gateway(
    workflow_factory, respx_mock: MockRouter, sample_report_payload
) -> None:
    route = respx_mock.post(GENERATE_URL).mock(
        return_value=httpx.Response(200, json=candidate(json.dumps(sample_report_payload)))
    )
    workflow = workflow_factory()

    report = await workflow.analyze()

    assert report.overall_score == 72
    assert report.weaknesses == ["PostgreSQL", "Docker"]
    assert workflow.state is WorkflowState.SUCCEEDED

    sent = json.loads(route.calls.last.request.content)
    assert "key" not in sent
    assert sent["generationConfig"]["responseMimeType"] == "application/json"
    assert sent["contents"][0]["parts"][0]["text"].startswith("JD:\n")


@pytest.mark.asyncio
async def test_quota_via_gateway_with_user_key_retries_direct_once(
    workflow_factory, respx_mock: MockRouter, sample_report_payload
) -> None:
    gateway = respx_mock.post(GENERATE_URL).mock(
        return_value=httpx.Response(
            502,
            json={
                "error": "Proxy request failed",
                "details": {"error": {"code": 429, "message": "Quota exceeded"}},
            },
        )
    )
    direct = respx_mock.post(DIRECT_URL).mock(
        return_value=httpx.Response(200, json=candidate(json.dumps(sample_report_payload)))
    )
    workflow = workflow_factory(user_key="user-key")

    report = await workflow.analyze()

    assert report.summary.startswith("Strong Python")
    assert gateway.call_count == 1
    assert direct.call_count == 1
    assert direct.calls.last.request.url.params["key"] == "user-key"


@pytest.mark.asyncio
async def test_quota_on_both_paths_raises_both_paths_failed(
    workflow_factory, respx_mock: MockRouter
) -> None:
    respx_mock.post(GENERATE_URL).mock(return_value=httpx.Response(429, json={}))
    direct = respx_mock.post(DIRECT_URL).mock(
        return_value=httpx.Response(429, json={"error": {"message": "Quota exceeded"}})
    )
    workflow = workflow_factory(user_key="user-key")

    with pytest.raises(BothPathsFailedError, match="both paths failed"):
        await workflow.analyze()

    assert direct.call_count == 1
    assert workflow.state is WorkflowState.FAILED
    assert workflow.analysis is None


@pytest.mark.asyncio
async def test_quota_via_gateway_without_user_key_is_terminal(
    workflow_factory, respx_mock: MockRouter
) -> None:
    respx_mock.post(GENERATE_URL).mock(return_value=httpx.Response(429, json={}))
    workflow = workflow_factory()

    with pytest.raises(QuotaExceededError, match="Key limit reached"):
        await workflow.analyze()

    assert len(respx_mock.calls) == 1


@pytest.mark.asyncio
async def test_quota_in_direct_mode_is_terminal(
    workflow_factory, respx_mock: MockRouter
) -> None:
    direct = respx_mock.post(DIRECT_URL).mock(
        return_value=httpx.Response(429, json={"error": {"message": "quota"}})
    )
    workflow = workflow_factory(user_key="user-key", use_proxy=False)

    with pytest.raises(QuotaExceededError):
        await workflow.analyze()

    assert direct.call_count == 1


@pytest.mark.asyncio
async def test_non_quota_failure_is_not_retried(
    workflow_factory, respx_mock: MockRouter
) -> None:
    gateway = respx_mock.post(GENERATE_URL).mock(
        return_value=httpx.Response(500, json={"error": "Server missing GEMINI_API_KEY"})
    )
    workflow = workflow_factory(user_key="user-key")

    with pytest.raises(WorkflowError, match="Analysis failed"):
        await workflow.analyze()

    assert gateway.call_count == 1
    assert len(respx_mock.calls) == 1


@pytest.mark.asyncio
async def test_direct_mode_without_key_fails_before_any_call(
    workflow_factory, respx_mock: MockRouter
) -> None:
    workflow = workflow_factory(use_proxy=False)

    with pytest.raises(WorkflowError):
        await workflow.analyze()

    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_missing_result_text_is_a_failure(
    workflow_factory, respx_mock: MockRouter
) -> None:
    respx_mock.post(GENERATE_URL).mock(return_value=httpx.Response(200, json={"candidates": []}))
    workflow = workflow_factory()

    with pytest.raises(InvalidResultError):
        await workflow.analyze()

    assert workflow.state is WorkflowState.FAILED


@pytest.mark.asyncio
async def test_malformed_report_is_a_failure(
    workflow_factory, respx_mock: MockRouter
) -> None:
    respx_mock.post(GENERATE_URL).mock(
        return_value=httpx.Response(200, json=candidate('{"summary": "no scores"}'))
    )
    workflow = workflow_factory()

    with pytest.raises(InvalidResultError):
        await workflow.analyze()


@pytest.mark.asyncio
async def test_optimize_requires_analysis(workflow_factory) -> None:
    workflow = workflow_factory()

    with pytest.raises(WorkflowError, match="analysis"):
        await workflow.optimize()


@pytest.mark.asyncio
async def test_optimize_sends_gaps_and_stores_text(
    workflow_factory, respx_mock: MockRouter, sample_report_payload
) -> None:
    route = respx_mock.post(GENERATE_URL).mock(
        side_effect=[
            httpx.Response(200, json=candidate(json.dumps(sample_report_payload))),
            httpx.Response(200, json=candidate("Rewritten resume")),
        ]
    )
    workflow = workflow_factory()
    await workflow.analyze()

    text = await workflow.optimize()

    assert text == "Rewritten resume"
    assert workflow.optimized_text == "Rewritten resume"
    sent = json.loads(route.calls.last.request.content)
    assert "Gaps: PostgreSQL, Docker." in sent["contents"][0]["parts"][0]["text"]
    assert sent["generationConfig"] == {"responseMimeType": "text/plain"}


@pytest.mark.asyncio
async def test_changing_inputs_clears_results(
    workflow_factory, respx_mock: MockRouter, sample_report_payload
) -> None:
    respx_mock.post(GENERATE_URL).mock(
        return_value=httpx.Response(200, json=candidate(json.dumps(sample_report_payload)))
    )
    workflow = workflow_factory()
    await workflow.analyze()

    workflow.set_inputs(workflow.job_description, workflow.resume)
    assert workflow.analysis is not None

    workflow.set_inputs("A different job", workflow.resume)
    assert workflow.analysis is None
    assert workflow.optimized_text is None
    assert workflow.state is WorkflowState.IDLE


@pytest.mark.asyncio
async def test_result_for_changed_inputs_is_discarded(
    workflow_factory, respx_mock: MockRouter, sample_report_payload
) -> None:
    workflow = workflow_factory()

    def respond(request: httpx.Request) -> httpx.Response:
        workflow.set_inputs("Edited while waiting", workflow.resume)
        return httpx.Response(200, json=candidate(json.dumps(sample_report_payload)))

    respx_mock.post(GENERATE_URL).mock(side_effect=respond)

    with pytest.raises(StaleInputsError):
        await workflow.analyze()

    assert workflow.analysis is None


@pytest.mark.asyncio
async def test_analyze_requires_both_inputs(transport) -> None:
    workflow = MatchWorkflow(transport)
    workflow.set_inputs("", "resume")

    with pytest.raises(WorkflowError, match="both"):
        await workflow.analyze()

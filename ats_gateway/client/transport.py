"""HTTP transport for the client workflow.

Two ways to reach the provider: through the gateway (the server credential is
used) or directly with the caller's own key. Both produce a
``GenerationOutcome`` so the fallback policy can judge them the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ats_gateway.client.errors import TransportError
from ats_gateway.gateway.provider import build_generate_url

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_PROVIDER_MODEL = "gemini-2.5-flash-preview-09-2025"


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of one generation attempt on one path."""

    ok: bool
    status_code: int | None = None
    body: Any = None
    error_message: str | None = None


def _error_message(body: Any, fallback: str) -> str:
    """Find the most specific error text in a provider or gateway body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]

        details = body.get("details")
        if isinstance(details, dict):
            nested = details.get("error")
            if isinstance(nested, dict) and isinstance(nested.get("message"), str):
                return nested["message"]
            if isinstance(details.get("message"), str):
                return details["message"]
        if isinstance(details, str) and details:
            return details

        if isinstance(error, str) and error:
            return error
    if isinstance(body, str) and body:
        return body
    return fallback


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class GenerationTransport:
    """Client for the gateway endpoints and the provider itself."""

    def __init__(
        self,
        gateway_url: str,
        *,
        provider_base_url: str = DEFAULT_PROVIDER_BASE_URL,
        provider_model: str = DEFAULT_PROVIDER_MODEL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the transport.

        Args:
            gateway_url: Root URL of the gateway (without ``/api``).
            provider_base_url: Provider root used for direct calls.
            provider_model: Model ID used for direct calls.
            timeout: Timeout in seconds for every request.
            client: Optional httpx client; a private one is created otherwise.
        """
        self.gateway_url = gateway_url.rstrip("/")
        self.provider_url = build_generate_url(provider_base_url, provider_model)
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def via_gateway(self, payload: dict[str, Any]) -> GenerationOutcome:
        """Send a generation request through the gateway's server credential."""
        return await self._generate(f"{self.gateway_url}/api/generate", payload)

    async def direct(self, payload: dict[str, Any], key: str) -> GenerationOutcome:
        """Send a generation request straight to the provider with ``key``."""
        return await self._generate(self.provider_url, payload, params={"key": key})

    async def _generate(
        self,
        url: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
    ) -> GenerationOutcome:
        try:
            response = await self._client.post(
                url, json=payload, params=params, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning("Generation request to %s failed: %s", url.split("?")[0], e)
            return GenerationOutcome(ok=False, error_message=str(e) or type(e).__name__)

        body = _decode_body(response)
        if response.is_success:
            return GenerationOutcome(ok=True, status_code=response.status_code, body=body)

        return GenerationOutcome(
            ok=False,
            status_code=response.status_code,
            body=body,
            error_message=_error_message(body, f"HTTP {response.status_code}"),
        )

    async def render_pdf(self, html: str) -> bytes:
        """Render HTML to PDF through the gateway.

        Raises:
            TransportError: If the gateway cannot be reached or answers non-2xx.
        """
        response = await self._request("POST", "/api/render-pdf", json={"html": html})
        return response.content

    async def fetch_config(self) -> dict[str, Any]:
        """Fetch the remote configuration snapshot."""
        response = await self._request("GET", "/api/config")
        return response.json()

    async def submit_optimization(
        self,
        user_data: dict[str, Any],
        report: Any,
        optimized_text: str | None,
    ) -> dict[str, Any]:
        """Send an optimization request to the gateway archive."""
        response = await self._request(
            "POST",
            "/api/submit-optimization",
            json={
                "userData": user_data,
                "report": report,
                "optimizedText": optimized_text,
            },
        )
        return response.json()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(
                method, f"{self.gateway_url}{path}", timeout=self.timeout, **kwargs
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Gateway request failed: {e}", original_error=e) from e

        if not response.is_success:
            message = _error_message(_decode_body(response), f"HTTP {response.status_code}")
            raise TransportError(
                f"Gateway request failed: {message}", status_code=response.status_code
            )
        return response

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

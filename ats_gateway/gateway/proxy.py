"""Transparent proxy to the generation provider.

Resolves which credential to use for a request, forwards the payload to the
provider and relays the provider response unchanged. Failures are turned into
a gateway-level error so callers can tell a gateway problem apart from a
provider answer.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ats_gateway.config.settings import Settings, get_settings
from ats_gateway.gateway.provider import build_generate_url

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_MESSAGE = (
    "Server missing GEMINI_API_KEY environment variable and no user key provided"
)
PROXY_FAILURE_MESSAGE = "Proxy request failed"

GATEWAY_FAILURE_STATUS = 502
GATEWAY_FALLBACK_STATUS = 500


class GatewayError(Exception):
    """Base exception for gateway failures."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class MissingCredentialError(GatewayError):
    """Raised when neither the caller nor the server has a credential."""

    def __init__(self) -> None:
        super().__init__(MISSING_CREDENTIAL_MESSAGE)


class UpstreamError(GatewayError):
    """Raised when the provider call fails or answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        details: Any,
        upstream_status: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error)
        self.details = details
        self.upstream_status = upstream_status

    @property
    def gateway_status(self) -> int:
        """Status the gateway answers with; never equal to the upstream's own."""
        if self.upstream_status == GATEWAY_FAILURE_STATUS:
            return GATEWAY_FALLBACK_STATUS
        return GATEWAY_FAILURE_STATUS


@dataclass(frozen=True)
class ProxyResponse:
    """Provider response relayed to the caller as-is."""

    status_code: int
    content: bytes
    media_type: str


def split_payload(body: dict[str, Any]) -> tuple[dict[str, Any], str | None]:
    """Separate the caller credential from the provider payload.

    The ``key`` field is always removed so it is never forwarded upstream.
    """
    payload = dict(body)
    raw_key = payload.pop("key", None)
    if isinstance(raw_key, str) and raw_key.strip():
        return payload, raw_key.strip()
    return payload, None


def _error_details(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        text = response.text
        return text if text else {"message": f"HTTP {response.status_code}"}


class GenerationProxy:
    """Forwards generation requests to the provider."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the proxy.

        Args:
            settings: Optional Settings. Uses global settings if not provided.
            client: Optional httpx client. A private client is created (and
                closed by ``aclose``) when not provided.
        """
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    def resolve_credential(self, caller_key: str | None) -> str:
        """Pick the credential for an upstream call.

        The caller's key takes precedence over the server-held key.

        Raises:
            MissingCredentialError: If no credential is available at all.
        """
        if caller_key:
            return caller_key
        if self.settings.gemini_api_key:
            return self.settings.gemini_api_key
        raise MissingCredentialError()

    @property
    def upstream_url(self) -> str:
        return build_generate_url(
            self.settings.provider_base_url, self.settings.provider_model
        )

    async def forward(self, body: dict[str, Any]) -> ProxyResponse:
        """Forward a generation request and return the provider response.

        Args:
            body: Request body: provider payload plus an optional ``key``.

        Returns:
            The upstream status code, body bytes and content type.

        Raises:
            MissingCredentialError: Before any network call when no key exists.
            UpstreamError: On transport errors, timeouts or non-2xx answers.
        """
        payload, caller_key = split_payload(body)
        api_key = self.resolve_credential(caller_key)
        timeout = self.settings.provider_timeout

        # httpx timeouts are per phase; wait_for bounds the whole exchange.
        try:
            response = await asyncio.wait_for(
                self._client.post(
                    self.upstream_url,
                    params={"key": api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            details = {"message": f"Upstream request timed out after {timeout:g}s"}
            logger.error("Proxy error: %s", json.dumps(details))
            raise UpstreamError(PROXY_FAILURE_MESSAGE, details, original_error=e) from e
        except httpx.HTTPError as e:
            details = {"message": str(e) or type(e).__name__}
            logger.error("Proxy error: %s", json.dumps(details))
            raise UpstreamError(PROXY_FAILURE_MESSAGE, details, original_error=e) from e

        if not response.is_success:
            details = _error_details(response)
            logger.error(
                "Proxy error (upstream status %s): %s",
                response.status_code,
                json.dumps(details) if not isinstance(details, str) else details,
            )
            raise UpstreamError(
                PROXY_FAILURE_MESSAGE,
                details,
                upstream_status=response.status_code,
            )

        logger.debug(
            "Relaying upstream response (status %s, %d bytes, caller_key=%s)",
            response.status_code,
            len(response.content),
            caller_key is not None,
        )
        return ProxyResponse(
            status_code=response.status_code,
            content=response.content,
            media_type=response.headers.get("content-type", "application/json"),
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this proxy created it."""
        if self._owns_client:
            await self._client.aclose()

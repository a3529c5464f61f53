"""AI gateway proxy.

Forwards generation requests to the provider with either the caller's
credential or the server-held one, relaying the provider answer verbatim.
"""

from ats_gateway.gateway.provider import build_generate_url, extract_candidate_text
from ats_gateway.gateway.proxy import (
    MISSING_CREDENTIAL_MESSAGE,
    PROXY_FAILURE_MESSAGE,
    GatewayError,
    GenerationProxy,
    MissingCredentialError,
    ProxyResponse,
    UpstreamError,
    split_payload,
)

__all__ = [
    "GenerationProxy",
    "ProxyResponse",
    "split_payload",
    "GatewayError",
    "MissingCredentialError",
    "UpstreamError",
    "MISSING_CREDENTIAL_MESSAGE",
    "PROXY_FAILURE_MESSAGE",
    "build_generate_url",
    "extract_candidate_text",
]

"""Fallback policy between the gateway path and the direct path."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum

from ats_gateway.client.transport import GenerationOutcome

QUOTA_MARKERS = ("quota", "resource_exhausted")


class FallbackAction(str, Enum):
    """What to do with the outcome of a primary attempt."""

    ACCEPT = "accept"
    RETRY_DIRECT = "retry_direct"
    FAIL_QUOTA = "fail_quota"
    FAIL = "fail"


@dataclass(frozen=True)
class FallbackDecision:
    action: FallbackAction
    reason: str


def is_quota_failure(outcome: GenerationOutcome) -> bool:
    """Whether a failed outcome is a quota or rate-limit failure."""
    if outcome.ok:
        return False
    if outcome.status_code == 429:
        return True

    haystack = (outcome.error_message or "").lower()
    if outcome.body is not None:
        body = outcome.body if isinstance(outcome.body, str) else json.dumps(outcome.body)
        haystack = f"{haystack} {body.lower()}"
    return any(marker in haystack for marker in QUOTA_MARKERS)


def decide_fallback(
    outcome: GenerationOutcome,
    *,
    used_proxy: bool,
    has_user_key: bool,
) -> FallbackDecision:
    """Decide how to continue after the primary attempt.

    Only a quota failure on the gateway path, with a caller key at hand,
    earns a single retry on the direct path.
    """
    if outcome.ok:
        return FallbackDecision(FallbackAction.ACCEPT, "primary path succeeded")

    if not is_quota_failure(outcome):
        return FallbackDecision(FallbackAction.FAIL, "primary path failed")

    if used_proxy and has_user_key:
        return FallbackDecision(
            FallbackAction.RETRY_DIRECT,
            "gateway quota exhausted; retrying with the caller key",
        )
    return FallbackDecision(FallbackAction.FAIL_QUOTA, "quota exhausted with no other path")

"""Helpers for the Gemini generateContent wire format."""

from __future__ import annotations

from typing import Any


def build_generate_url(base_url: str, model: str) -> str:
    """Build the generateContent endpoint URL for a model.

    The credential is not part of the URL; callers pass it as the
    ``key`` query parameter so it never ends up in log lines built from
    this string.
    """
    return f"{base_url.rstrip('/')}/models/{model}:generateContent"


def extract_candidate_text(body: Any) -> str | None:
    """Return the text of the first candidate part, if present."""
    if not isinstance(body, dict):
        return None
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, dict):
        return None
    content = first.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts:
        return None
    part = parts[0]
    if not isinstance(part, dict):
        return None
    text = part.get("text")
    return text if isinstance(text, str) else None

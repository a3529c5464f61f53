"""Request helpers and component accessors for route handlers."""

from __future__ import annotations

import json
from typing import Any

from starlette.requests import Request

from ats_gateway.api.errors import ApiError
from ats_gateway.config.settings import Settings
from ats_gateway.gateway.proxy import GenerationProxy
from ats_gateway.remote_config.store import ConfigStore
from ats_gateway.rendering.renderer import PDFRenderer
from ats_gateway.submissions.sink import SubmissionSink

BODY_TOO_LARGE_MESSAGE = "Request body too large"
INVALID_JSON_MESSAGE = "Request body must be a JSON object"


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object, enforcing the size limit.

    Raises:
        ApiError: 413 when the body exceeds MAX_BODY_BYTES, 400 when it is
            not a JSON object.
    """
    limit = get_app_settings(request).max_body_bytes

    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise ApiError(413, BODY_TOO_LARGE_MESSAGE)

    raw = bytearray()
    async for chunk in request.stream():
        raw.extend(chunk)
        if len(raw) > limit:
            raise ApiError(413, BODY_TOO_LARGE_MESSAGE)

    try:
        body = json.loads(raw) if raw else None
    except ValueError as e:
        raise ApiError(400, INVALID_JSON_MESSAGE, str(e)) from e

    if not isinstance(body, dict):
        raise ApiError(400, INVALID_JSON_MESSAGE)
    return body


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


def get_proxy(request: Request) -> GenerationProxy:
    return request.app.state.proxy


def get_renderer(request: Request) -> PDFRenderer:
    return request.app.state.renderer


def get_sink(request: Request) -> SubmissionSink:
    return request.app.state.sink

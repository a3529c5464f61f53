"""Gateway HTTP routes."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from ats_gateway.api.dependencies import (
    get_config_store,
    get_proxy,
    get_renderer,
    get_sink,
    read_json_object,
)
from ats_gateway.api.errors import ApiError
from ats_gateway.gateway.proxy import (
    PROXY_FAILURE_MESSAGE,
    GenerationProxy,
    MissingCredentialError,
    UpstreamError,
)
from ats_gateway.remote_config.store import ConfigStore, UnauthorizedError
from ats_gateway.rendering.renderer import PDFRenderer
from ats_gateway.submissions.models import SubmissionRequest
from ats_gateway.submissions.sink import (
    MISSING_IDENTITY_MESSAGE,
    MissingIdentityError,
    SubmissionSink,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

HEALTH_MESSAGE = "Gemini proxy running"
CONFIG_UPDATED_MESSAGE = "Config updated successfully"
RENDER_FAILURE_MESSAGE = "Failed to render PDF"
PDF_FILENAME = "improved_resume.pdf"

ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
ProxyDep = Annotated[GenerationProxy, Depends(get_proxy)]
RendererDep = Annotated[PDFRenderer, Depends(get_renderer)]
SinkDep = Annotated[SubmissionSink, Depends(get_sink)]


def _validation_messages(error: ValidationError) -> list[str]:
    return [str(err.get("msg", "invalid value")) for err in error.errors()]


@router.post("/generate")
async def generate(request: Request, proxy: ProxyDep) -> Response:
    """Forward a generation request to the provider."""
    body = await read_json_object(request)
    try:
        upstream = await proxy.forward(body)
    except MissingCredentialError as e:
        raise ApiError(500, e.message) from e
    except UpstreamError as e:
        raise ApiError(e.gateway_status, PROXY_FAILURE_MESSAGE, e.details) from e

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.media_type,
    )


@router.get("/health", response_class=PlainTextResponse)
async def health() -> PlainTextResponse:
    return PlainTextResponse(HEALTH_MESSAGE)


@router.get("/config")
async def get_config(store: ConfigStoreDep) -> JSONResponse:
    config = await run_in_threadpool(store.get)
    return JSONResponse(config.to_payload())


@router.post("/config/update")
async def update_config(request: Request, store: ConfigStoreDep) -> JSONResponse:
    """Apply a partial configuration update (admin secret required)."""
    body = await read_json_object(request)
    password = body.get("password")
    if "config" in body:
        partial = body["config"]
    else:
        partial = {k: v for k, v in body.items() if k != "password"}

    if not isinstance(partial, dict):
        raise ApiError(400, "Invalid configuration", ["config must be a JSON object"])

    try:
        result = await run_in_threadpool(store.update, password, partial)
    except UnauthorizedError as e:
        raise ApiError(401, e.message) from e
    except ValidationError as e:
        raise ApiError(400, "Invalid configuration", _validation_messages(e)) from e

    payload: dict[str, Any] = {
        "message": CONFIG_UPDATED_MESSAGE,
        "config": result.config.to_payload(),
        "persisted": result.persisted,
    }
    if result.warning:
        payload["warning"] = result.warning
    return JSONResponse(payload)


@router.post("/auth")
async def authenticate(request: Request, store: ConfigStoreDep) -> JSONResponse:
    body = await read_json_object(request)
    if not store.verify_password(body.get("password")):
        raise ApiError(401, UnauthorizedError().message)
    return JSONResponse({"authenticated": True})


@router.post("/render-pdf")
async def render_pdf(request: Request, renderer: RendererDep) -> Response:
    """Render the submitted HTML to an A4 PDF attachment."""
    body = await read_json_object(request)
    html = body.get("html")
    if not isinstance(html, str) or not html.strip():
        raise ApiError(400, "Missing html in request body")

    result = await renderer.render(html)
    if not result.success or result.pdf is None:
        raise ApiError(500, RENDER_FAILURE_MESSAGE, result.error or "unknown error")

    return Response(
        content=result.pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'},
    )


@router.get("/pdf-diagnostics")
async def pdf_diagnostics(renderer: RendererDep) -> JSONResponse:
    diagnostics = await renderer.diagnostics()
    return JSONResponse(diagnostics.model_dump(mode="json"))


@router.post("/submit-optimization")
async def submit_optimization(request: Request, sink: SinkDep) -> JSONResponse:
    """Archive an optimization request; storage problems come back as a warning."""
    body = await read_json_object(request)
    try:
        submission = SubmissionRequest.model_validate(body)
    except ValidationError as e:
        raise ApiError(400, MISSING_IDENTITY_MESSAGE, _validation_messages(e)) from e

    try:
        outcome = await run_in_threadpool(sink.submit, submission)
    except MissingIdentityError as e:
        raise ApiError(400, e.message) from e

    return JSONResponse(outcome.to_payload())

"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ats_gateway import __version__
from ats_gateway.api.errors import register_error_handlers
from ats_gateway.api.routes import router
from ats_gateway.config.settings import Settings, get_settings
from ats_gateway.environment import ExecutionEnvironment, detect_environment
from ats_gateway.gateway.proxy import GenerationProxy
from ats_gateway.remote_config.store import ConfigStore
from ats_gateway.rendering.renderer import PDFRenderer
from ats_gateway.submissions.sink import SubmissionSink

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    environment: ExecutionEnvironment | None = None,
    config_store: ConfigStore | None = None,
    proxy: GenerationProxy | None = None,
    renderer: PDFRenderer | None = None,
    sink: SubmissionSink | None = None,
) -> FastAPI:
    """Build the gateway application.

    The execution environment is resolved once here and every component that
    depends on it is built from it. Any component can be injected instead.
    """
    settings = settings or get_settings()
    environment = environment or detect_environment(settings)

    config_store = config_store or ConfigStore.from_settings(settings)
    proxy = proxy or GenerationProxy(settings)
    renderer = renderer or PDFRenderer(settings, environment)
    sink = sink or SubmissionSink.from_settings(settings, environment)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Gateway starting (environment=%s, config=%s, submissions=%s)",
            environment.value,
            config_store.path,
            sink.directory,
        )
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY is not set; callers must supply their own key")
        try:
            yield
        finally:
            await proxy.aclose()
            logger.info("Gateway stopped")

    app = FastAPI(
        title="ATS Gateway",
        version=__version__,
        description="Provider proxy, remote config, PDF rendering and submission archive",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.environment = environment
    app.state.config_store = config_store
    app.state.proxy = proxy
    app.state.renderer = renderer
    app.state.sink = sink

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app

"""PDF renderer using a headless Chromium driven by Playwright.

Every render launches its own browser process and always closes it, whether
the render succeeds or fails at any stage.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ats_gateway.config.settings import Settings, get_settings
from ats_gateway.environment import ExecutionEnvironment, detect_environment
from ats_gateway.rendering.diagnostics import RenderDiagnostics, build_diagnostics
from ats_gateway.rendering.errors import (
    ExecutableNotFoundError,
    RenderError,
    RenderStage,
)
from ats_gateway.rendering.launch import LaunchOptions, build_launch_options
from ats_gateway.rendering.resolvers import ExecutableResolver, build_executable_resolver

logger = logging.getLogger(__name__)

PDF_OPTIONS: dict[str, Any] = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "12mm", "right": "10mm", "bottom": "12mm", "left": "10mm"},
}


@dataclass
class RenderResult:
    """Result of a PDF rendering operation."""

    success: bool
    pdf: bytes | None = None
    error: str | None = None
    stage: RenderStage | None = None
    diagnostics: RenderDiagnostics | None = None
    rendered_at: datetime = field(default_factory=datetime.now)


class PDFRenderer:
    """Converts HTML documents to PDF bytes.

    The executable resolver is chosen once from the execution environment
    and can be injected for tests, as can the Playwright entry point.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        environment: ExecutionEnvironment | None = None,
        resolver: ExecutableResolver | None = None,
        playwright_factory: Callable[[], Any] | None = None,
    ):
        """Initialize the PDF renderer.

        Args:
            settings: Optional Settings. Uses global settings if not provided.
            environment: Execution environment; detected when not provided.
            resolver: Executable resolver; built for the environment when not provided.
            playwright_factory: Callable returning an object with an async
                ``start()`` that yields a Playwright instance.
        """
        self.settings = settings or get_settings()
        self.environment = environment or detect_environment(self.settings)
        self.resolver = resolver or build_executable_resolver(
            self.environment, self.settings
        )
        self._playwright_factory = playwright_factory or async_playwright

    async def render(self, html: str) -> RenderResult:
        """Render an HTML document to PDF.

        Args:
            html: Complete HTML document (or fragment) to print.

        Returns:
            RenderResult with the PDF bytes, or the failing stage and
            environment diagnostics.
        """
        executable_path: str | None = None
        launch_options: LaunchOptions | None = None

        try:
            executable_path = await self.resolver.resolve()
            launch_options = build_launch_options(
                self.environment, executable_path, self.settings
            )
            logger.info("Launching browser for render: %s", launch_options.describe())

            async with self._browser_session(launch_options) as browser:
                pdf = await self._render_page(browser, html, launch_options)

            logger.info("Rendered PDF (%d bytes)", len(pdf))
            return RenderResult(success=True, pdf=pdf)

        except RenderError as e:
            diagnostics = build_diagnostics(
                self.environment,
                executable_path=executable_path,
                resolution_error=str(e) if isinstance(e, ExecutableNotFoundError) else None,
                launch_options=launch_options,
            )
            logger.error(
                "PDF render failed at stage %s: %s | diagnostics=%s",
                e.stage.value,
                e,
                diagnostics.model_dump_json(),
            )
            return RenderResult(
                success=False,
                error=str(e),
                stage=e.stage,
                diagnostics=diagnostics,
            )

    async def diagnostics(self) -> RenderDiagnostics:
        """Report the render environment without rendering anything."""
        try:
            executable_path = await self.resolver.resolve()
        except ExecutableNotFoundError as e:
            return build_diagnostics(self.environment, resolution_error=str(e))

        return build_diagnostics(
            self.environment,
            launch_options=build_launch_options(
                self.environment, executable_path, self.settings
            ),
        )

    @asynccontextmanager
    async def _browser_session(self, options: LaunchOptions) -> AsyncIterator[Any]:
        """Start the driver and browser; always close both on exit."""
        try:
            playwright = await self._playwright_factory().start()
        except Exception as e:
            raise RenderError(
                f"Could not start the browser driver: {e}", RenderStage.LAUNCH, e
            ) from e

        try:
            try:
                browser = await playwright.chromium.launch(**options.launch_kwargs())
            except Exception as e:
                raise RenderError(
                    f"Browser launch failed: {e}", RenderStage.LAUNCH, e
                ) from e

            try:
                yield browser
            finally:
                try:
                    await browser.close()
                except Exception as e:
                    logger.warning("Failed to close browser cleanly: %s", e)
        finally:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning("Failed to stop browser driver cleanly: %s", e)

    async def _render_page(
        self, browser: Any, html: str, options: LaunchOptions
    ) -> bytes:
        try:
            if options.viewport is not None:
                page = await browser.new_page(viewport=options.viewport)
            else:
                page = await browser.new_page()
        except Exception as e:
            raise RenderError(f"Could not open a page: {e}", RenderStage.NEW_PAGE, e) from e

        try:
            await page.set_content(
                html,
                wait_until="domcontentloaded",
                timeout=self.settings.render_content_timeout * 1000,
            )
        except Exception as e:
            raise RenderError(
                f"Failed to load HTML content: {e}", RenderStage.SET_CONTENT, e
            ) from e

        await self._wait_for_network_idle(page)

        timeout = self.settings.render_pdf_timeout
        try:
            return await asyncio.wait_for(page.pdf(**PDF_OPTIONS), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RenderError(
                f"PDF generation timed out after {timeout:g}s", RenderStage.PDF, e
            ) from e
        except Exception as e:
            raise RenderError(f"PDF generation failed: {e}", RenderStage.PDF, e) from e

    async def _wait_for_network_idle(self, page: Any) -> None:
        # Fonts and images may never finish loading in a sandbox; print anyway.
        timeout = self.settings.render_network_idle_timeout
        if timeout <= 0:
            return
        try:
            await page.wait_for_load_state("networkidle", timeout=timeout * 1000)
        except PlaywrightError as e:
            logger.info(
                "Network did not settle within %gs (%s); rendering with what has loaded",
                timeout,
                e,
            )

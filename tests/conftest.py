"""Pytest configuration and shared fixtures."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from ats_gateway.config.settings import Settings, reset_settings
from ats_gateway.utils.logging import reset_logging


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Keep the settings singleton and logger state test-local."""
    reset_settings()
    reset_logging()
    yield
    reset_settings()
    reset_logging()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the process environment and .env files."""
    return Settings(
        _env_file=None,
        gemini_api_key=None,
        admin_password="admin123",
        remote_config_path=tmp_path / "data" / "config.json",
        submissions_dir=tmp_path / "submissions",
        deployment_mode="local",
        provider_base_url="https://provider.test/v1beta",
        provider_model="test-model",
        provider_timeout=5,
    )


@pytest.fixture
def provider_url() -> str:
    """generateContent URL matching the ``settings`` fixture."""
    return "https://provider.test/v1beta/models/test-model:generateContent"


@pytest.fixture
def sample_job_description() -> str:
    return "Senior Python developer. Requires FastAPI, PostgreSQL and Docker."


@pytest.fixture
def sample_resume() -> str:
    return "Jane Doe\nPython developer, 6 years. Built FastAPI services used by 20k users."


@pytest.fixture
def sample_report_payload() -> dict:
    return {
        "overallScore": 72,
        "parseabilityScore": 100,
        "summary": "Strong Python background; container experience missing.",
        "strengths": ["Python", "FastAPI"],
        "weaknesses": ["PostgreSQL", "Docker"],
    }


class FakePage:
    def __init__(
        self,
        *,
        pdf_bytes: bytes = b"%PDF-1.4 fake",
        content_error: Exception | None = None,
        idle_error: Exception | None = None,
        pdf_error: Exception | None = None,
        pdf_delay: float = 0,
    ) -> None:
        self.pdf_bytes = pdf_bytes
        self.content_error = content_error
        self.idle_error = idle_error
        self.pdf_error = pdf_error
        self.pdf_delay = pdf_delay
        self.content: str | None = None
        self.set_content_kwargs: dict[str, Any] = {}
        self.pdf_kwargs: dict[str, Any] = {}

    async def set_content(self, html: str, **kwargs: Any) -> None:
        if self.content_error is not None:
            raise self.content_error
        self.content = html
        self.set_content_kwargs = kwargs

    async def wait_for_load_state(self, state: str, **kwargs: Any) -> None:
        if self.idle_error is not None:
            raise self.idle_error

    async def pdf(self, **kwargs: Any) -> bytes:
        if self.pdf_delay:
            await asyncio.sleep(self.pdf_delay)
        if self.pdf_error is not None:
            raise self.pdf_error
        self.pdf_kwargs = kwargs
        return self.pdf_bytes


class FakeBrowser:
    def __init__(self, page: FakePage, close_error: Exception | None = None) -> None:
        self.page = page
        self.close_error = close_error
        self.closed = False
        self.new_page_kwargs: dict[str, Any] = {}

    async def new_page(self, **kwargs: Any) -> FakePage:
        self.new_page_kwargs = kwargs
        return self.page

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeChromium:
    def __init__(
        self,
        browser: FakeBrowser,
        launch_error: Exception | None = None,
        executable_path: str = "/opt/chromium/chrome",
    ) -> None:
        self.browser = browser
        self.launch_error = launch_error
        self.executable_path = executable_path
        self.launch_kwargs: dict[str, Any] = {}

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_kwargs = kwargs
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium: FakeChromium, stop_error: Exception | None = None) -> None:
        self.chromium = chromium
        self.stop_error = stop_error
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True
        if self.stop_error is not None:
            raise self.stop_error


class FakePlaywrightContext:
    """Stands in for the object returned by ``async_playwright()``."""

    def __init__(self, playwright: FakePlaywright) -> None:
        self.playwright = playwright
        self.started = 0

    async def start(self) -> FakePlaywright:
        self.started += 1
        return self.playwright


class StaticResolver:
    def __init__(self, path: str = "/usr/bin/google-chrome") -> None:
        self.path = path

    async def resolve(self) -> str:
        return self.path


@dataclass
class PlaywrightStack:
    """A fake Playwright driver wired page -> browser -> chromium -> driver."""

    page: FakePage
    browser: FakeBrowser
    chromium: FakeChromium
    playwright: FakePlaywright
    context: FakePlaywrightContext

    def factory(self) -> FakePlaywrightContext:
        return self.context


@pytest.fixture
def playwright_stack():
    """Build a fake Playwright stack; page options go to the fake page."""

    def build(
        *,
        launch_error: Exception | None = None,
        close_error: Exception | None = None,
        stop_error: Exception | None = None,
        executable_path: str = "/opt/chromium/chrome",
        **page_options: Any,
    ) -> PlaywrightStack:
        page = FakePage(**page_options)
        browser = FakeBrowser(page, close_error=close_error)
        chromium = FakeChromium(
            browser, launch_error=launch_error, executable_path=executable_path
        )
        playwright = FakePlaywright(chromium, stop_error=stop_error)
        return PlaywrightStack(
            page, browser, chromium, playwright, FakePlaywrightContext(playwright)
        )

    return build


@pytest.fixture
def static_resolver() -> StaticResolver:
    """Resolver that always answers with a local Chrome path."""
    return StaticResolver()

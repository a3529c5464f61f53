"""Browser executable resolution strategies.

Constrained deployments ship a browser matched to the runtime and must use
it; developer machines use whatever Chrome/Chromium is installed locally.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from playwright.async_api import async_playwright

from ats_gateway.config.settings import Settings
from ats_gateway.environment import ExecutionEnvironment
from ats_gateway.rendering.errors import ExecutableNotFoundError

logger = logging.getLogger(__name__)

LOCAL_CHROME_CANDIDATES: dict[str, list[str]] = {
    "linux": [
        "/usr/bin/google-chrome-stable",
        "/usr/bin/google-chrome",
        "/usr/bin/chromium-browser",
        "/usr/bin/chromium",
        "/snap/bin/chromium",
    ],
    "darwin": [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
    ],
    "win32": [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    ],
}

PLATFORM_DEFAULT_GUESS: dict[str, str] = {
    "linux": "/usr/bin/google-chrome",
    "darwin": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "win32": r"C:\Program Files\Google\Chrome\Application\chrome.exe",
}


def _platform_key(platform: str) -> str:
    if platform.startswith("linux"):
        return "linux"
    if platform.startswith("win") or platform == "cygwin":
        return "win32"
    return platform


class ExecutableResolver(Protocol):
    """Strategy that yields the browser binary to launch."""

    async def resolve(self) -> str: ...


class LocalChromeResolver:
    """Probe well-known local install paths, operator override first."""

    def __init__(
        self,
        override: str | Path | None = None,
        platform: str | None = None,
        exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        self.override = str(override) if override else None
        self.platform = _platform_key(platform or sys.platform)
        self._exists = exists

    def candidates(self) -> list[str]:
        """Candidate paths in probe order."""
        paths = list(LOCAL_CHROME_CANDIDATES.get(self.platform, []))
        if self.override:
            paths.insert(0, self.override)
        return paths

    async def resolve(self) -> str:
        for candidate in self.candidates():
            if self._exists(candidate):
                return candidate

        guess = PLATFORM_DEFAULT_GUESS.get(self.platform, PLATFORM_DEFAULT_GUESS["linux"])
        logger.warning(
            "No local Chrome found in %d known locations; guessing %s",
            len(self.candidates()),
            guess,
        )
        return guess


class BundledChromiumResolver:
    """Use the Chromium build that ships with the Playwright installation."""

    def __init__(
        self,
        explicit_path: str | Path | None = None,
        playwright_factory: Callable[[], Any] = async_playwright,
        exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        self.explicit_path = str(explicit_path) if explicit_path else None
        self._playwright_factory = playwright_factory
        self._exists = exists
        self._resolved: str | None = None

    async def resolve(self) -> str:
        if self._resolved is not None:
            return self._resolved

        path = self.explicit_path or await self._bundled_path()
        if not self._exists(path):
            raise ExecutableNotFoundError(f"Bundled Chromium not found at {path}")

        self._resolved = path
        return path

    async def _bundled_path(self) -> str:
        try:
            playwright = await self._playwright_factory().start()
        except Exception as e:
            raise ExecutableNotFoundError(
                f"Could not start the browser driver to locate Chromium: {e}", e
            ) from e
        try:
            return playwright.chromium.executable_path
        finally:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning("Failed to stop browser driver cleanly: %s", e)


def build_executable_resolver(
    environment: ExecutionEnvironment,
    settings: Settings,
) -> ExecutableResolver:
    """Select the resolver strategy for an environment."""
    if environment.is_constrained:
        return BundledChromiumResolver(settings.bundled_chromium_path)
    return LocalChromeResolver(settings.chrome_executable_path)

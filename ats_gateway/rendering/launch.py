"""Browser launch parameters per execution environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ats_gateway.config.settings import Settings
from ats_gateway.environment import ExecutionEnvironment

# Serverless runtimes have no user namespaces, a tiny /dev/shm and no GPU.
CONSTRAINED_LAUNCH_ARGS = [
    "--allow-pre-commit-input",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-component-update",
    "--disable-default-apps",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-gpu",
    "--disable-hang-monitor",
    "--disable-ipc-flooding-protection",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--disable-renderer-backgrounding",
    "--disable-sync",
    "--font-render-hinting=none",
    "--hide-scrollbars",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-first-run",
    "--no-sandbox",
    "--no-zygote",
    "--single-process",
]

LOCAL_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

CONSTRAINED_VIEWPORT = {"width": 1920, "height": 1080}


@dataclass(frozen=True)
class LaunchOptions:
    """Everything needed to launch one browser process."""

    executable_path: str
    args: list[str] = field(default_factory=list)
    headless: bool = True
    viewport: dict[str, int] | None = None
    timeout_ms: float = 30_000

    def launch_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``BrowserType.launch``."""
        return {
            "executable_path": self.executable_path,
            "args": list(self.args),
            "headless": self.headless,
            "timeout": self.timeout_ms,
        }

    def describe(self) -> dict[str, Any]:
        """Loggable summary of the launch parameters."""
        return {
            "executable_path": self.executable_path,
            "args": list(self.args),
            "headless": self.headless,
            "viewport": self.viewport,
            "timeout_ms": self.timeout_ms,
        }


def launch_args_for(environment: ExecutionEnvironment) -> list[str]:
    if environment.is_constrained:
        return list(CONSTRAINED_LAUNCH_ARGS)
    return list(LOCAL_LAUNCH_ARGS)


def build_launch_options(
    environment: ExecutionEnvironment,
    executable_path: str,
    settings: Settings,
) -> LaunchOptions:
    """Build launch options for the given environment."""
    return LaunchOptions(
        executable_path=executable_path,
        args=launch_args_for(environment),
        headless=True,
        viewport=dict(CONSTRAINED_VIEWPORT) if environment.is_constrained else None,
        timeout_ms=settings.render_launch_timeout * 1000,
    )

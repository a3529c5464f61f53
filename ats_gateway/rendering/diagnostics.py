"""Environment facts for troubleshooting the render pipeline."""

from __future__ import annotations

import os
import platform as platform_info
import sys

from pydantic import BaseModel, Field

from ats_gateway.environment import ExecutionEnvironment
from ats_gateway.rendering.launch import CONSTRAINED_VIEWPORT, LaunchOptions, launch_args_for


class RenderDiagnostics(BaseModel):
    """Snapshot of the facts that decide whether a render can work."""

    environment: ExecutionEnvironment
    executable_path: str | None = None
    executable_exists: bool = False
    resolution_error: str | None = None
    launch_args: list[str] = Field(default_factory=list)
    headless: bool = True
    viewport: dict[str, int] | None = None
    platform: str = Field(default_factory=lambda: sys.platform)
    platform_release: str = Field(default_factory=platform_info.release)
    machine: str = Field(default_factory=platform_info.machine)
    python_version: str = Field(default_factory=platform_info.python_version)
    pid: int = Field(default_factory=os.getpid)


def build_diagnostics(
    environment: ExecutionEnvironment,
    *,
    executable_path: str | None = None,
    resolution_error: str | None = None,
    launch_options: LaunchOptions | None = None,
) -> RenderDiagnostics:
    """Assemble diagnostics from whatever the pipeline knows so far."""
    if launch_options is not None:
        executable_path = launch_options.executable_path
        launch_args = list(launch_options.args)
        headless = launch_options.headless
        viewport = launch_options.viewport
    else:
        launch_args = launch_args_for(environment)
        headless = True
        viewport = dict(CONSTRAINED_VIEWPORT) if environment.is_constrained else None

    return RenderDiagnostics(
        environment=environment,
        executable_path=executable_path,
        executable_exists=bool(executable_path) and os.path.exists(executable_path),
        resolution_error=resolution_error,
        launch_args=launch_args,
        headless=headless,
        viewport=viewport,
    )

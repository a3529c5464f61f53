"""Execution environment detection.

The gateway runs either on a conventional host (developer workstation, VM,
container with a writable disk) or in a constrained serverless runtime where
only the system temp directory is writable and no browser is installed.
The environment is resolved once at startup and handed to the components
whose behavior depends on it.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from ats_gateway.config.settings import DeploymentMode, Settings

# Variables set by serverless platforms we deploy to.
SERVERLESS_ENV_MARKERS = ("VERCEL", "AWS_LAMBDA_FUNCTION_NAME", "NETLIFY")


class ExecutionEnvironment(str, Enum):
    """Resolved execution environment."""

    LOCAL = "local"
    CONSTRAINED = "constrained"

    @property
    def is_constrained(self) -> bool:
        return self is ExecutionEnvironment.CONSTRAINED


def detect_environment(
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> ExecutionEnvironment:
    """Resolve the execution environment from settings and process env.

    An explicit DEPLOYMENT_MODE wins; in auto mode any serverless marker
    variable with a non-empty value selects the constrained environment.
    """
    if settings.deployment_mode == DeploymentMode.LOCAL:
        return ExecutionEnvironment.LOCAL
    if settings.deployment_mode == DeploymentMode.CONSTRAINED:
        return ExecutionEnvironment.CONSTRAINED

    env = os.environ if environ is None else environ
    if any(env.get(marker) for marker in SERVERLESS_ENV_MARKERS):
        return ExecutionEnvironment.CONSTRAINED
    return ExecutionEnvironment.LOCAL


def resolve_submissions_dir(
    environment: ExecutionEnvironment,
    settings: Settings,
) -> Path:
    """Pick the directory where submissions are archived."""
    if environment.is_constrained:
        return Path(tempfile.gettempdir()) / "submissions"
    return settings.submissions_dir

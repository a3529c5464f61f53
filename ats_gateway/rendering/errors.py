"""Render pipeline errors."""

from __future__ import annotations

from enum import Enum


class RenderStage(str, Enum):
    """Stage of a render at which a failure happened."""

    RESOLVE_EXECUTABLE = "resolve_executable"
    LAUNCH = "launch"
    NEW_PAGE = "new_page"
    SET_CONTENT = "set_content"
    PDF = "pdf"


class RenderError(Exception):
    """Exception raised when a render stage fails."""

    def __init__(
        self,
        message: str,
        stage: RenderStage,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.original_error = original_error


class ExecutableNotFoundError(RenderError):
    """Raised when no usable browser binary can be resolved."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message, RenderStage.RESOLVE_EXECUTABLE, original_error)

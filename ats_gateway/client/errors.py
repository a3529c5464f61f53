"""Client workflow errors."""

from __future__ import annotations


class WorkflowError(Exception):
    """Exception raised when a workflow operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class QuotaExceededError(WorkflowError):
    """The only available path hit the provider quota."""


class BothPathsFailedError(WorkflowError):
    """The gateway path failed on quota and the direct retry failed too."""

    def __init__(self, message: str, primary_error: str, secondary_error: str):
        super().__init__(message)
        self.primary_error = primary_error
        self.secondary_error = secondary_error


class InvalidResultError(WorkflowError):
    """The provider answered but the result text is missing or malformed."""


class StaleInputsError(WorkflowError):
    """The inputs changed while the request was in flight."""


class TransportError(WorkflowError):
    """A gateway helper call (render, config, submission) failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code

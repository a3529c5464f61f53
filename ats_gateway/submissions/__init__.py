"""Archive of optimization requests."""

from ats_gateway.submissions.models import SubmissionOutcome, SubmissionRequest, UserData
from ats_gateway.submissions.sink import (
    MISSING_IDENTITY_MESSAGE,
    MissingIdentityError,
    SubmissionSink,
    sanitize_name,
)

__all__ = [
    "SubmissionSink",
    "SubmissionRequest",
    "SubmissionOutcome",
    "UserData",
    "MissingIdentityError",
    "MISSING_IDENTITY_MESSAGE",
    "sanitize_name",
]

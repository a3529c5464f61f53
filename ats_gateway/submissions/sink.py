"""Best-effort archive of optimization requests.

Each accepted request is written to its own JSON file. Storage problems are
reported back to the caller as a warning rather than an error because the
request itself has been received.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ats_gateway.config.settings import Settings
from ats_gateway.environment import ExecutionEnvironment, resolve_submissions_dir
from ats_gateway.submissions.models import SubmissionOutcome, SubmissionRequest

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Optimization request submitted successfully"
UNSAVED_MESSAGE = "Optimization request received but could not be saved"
UNSAVED_WARNING = "Submission storage is unavailable; the request was not archived"
MISSING_IDENTITY_MESSAGE = "User data and email are required"

MAX_NAME_FRAGMENT = 64
_MAX_COLLISION_SUFFIX = 1000


class MissingIdentityError(ValueError):
    """Raised when a submission carries no user email."""

    def __init__(self, message: str = MISSING_IDENTITY_MESSAGE):
        super().__init__(message)
        self.message = message


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sanitize_name(name: str | None) -> str:
    """Reduce a customer name to a safe file name fragment.

    The fragment is capped so the file name stays well under the usual
    255-byte limit; the full name is kept inside the record.
    """
    collapsed = re.sub(r"\s+", "_", (name or "").strip())
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "", collapsed)[:MAX_NAME_FRAGMENT]
    return cleaned or "anonymous"


def _format_timestamp(moment: datetime) -> tuple[str, str]:
    """Return the ISO-8601 timestamp and its file-name-safe form."""
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso, re.sub(r"[:.]", "-", iso)


class SubmissionSink:
    """Writes submission records into a directory."""

    def __init__(
        self,
        directory: str | Path,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.directory = Path(directory)
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, environment: ExecutionEnvironment
    ) -> SubmissionSink:
        return cls(resolve_submissions_dir(environment, settings))

    def submit(self, request: SubmissionRequest) -> SubmissionOutcome:
        """Archive a submission.

        Raises:
            MissingIdentityError: If no user email was provided. Nothing is
                written in that case.
        """
        user = request.user_data
        if user is None or not (user.email or "").strip():
            raise MissingIdentityError()

        submitted_at, file_stamp = _format_timestamp(self._clock())
        record: dict[str, Any] = {
            "submittedAt": submitted_at,
            "user": user.model_dump(mode="json"),
            "analysisReport": request.report,
            "optimizedResume": request.optimized_text,
        }
        base_name = f"order_{file_stamp}_{sanitize_name(user.name)}"

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create submissions directory %s: %s", self.directory, e)

        try:
            file_name = self._write_exclusive(base_name, record)
        except OSError as e:
            logger.error("Failed to save submission for %s: %s", user.email, e)
            return SubmissionOutcome(
                message=UNSAVED_MESSAGE,
                id=None,
                persisted=False,
                warning=UNSAVED_WARNING,
            )

        logger.info("Saved submission %s", file_name)
        return SubmissionOutcome(message=SUCCESS_MESSAGE, id=file_name, persisted=True)

    def _write_exclusive(self, base_name: str, record: dict[str, Any]) -> str:
        content = json.dumps(record, indent=2)
        for attempt in range(_MAX_COLLISION_SUFFIX):
            file_name = f"{base_name}.json" if attempt == 0 else f"{base_name}_{attempt}.json"
            try:
                with open(self.directory / file_name, "x", encoding="utf-8") as f:
                    f.write(content)
            except FileExistsError:
                continue
            return file_name
        raise FileExistsError(f"No free file name for {base_name} in {self.directory}")

"""Unit tests for the submission sink."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ats_gateway.environment import ExecutionEnvironment
from ats_gateway.submissions.models import SubmissionRequest
from ats_gateway.submissions.sink import (
    MAX_NAME_FRAGMENT,
    MissingIdentityError,
    SubmissionSink,
    sanitize_name,
)

FIXED_TIME = datetime(2025, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc)


def make_request(**user) -> SubmissionRequest:
    return SubmissionRequest.model_validate(
        {
            "userData": {"name": "Jane Doe", "email": "jane@example.com", **user},
            "report": {"overallScore": 72},
            "optimizedText": "Improved resume",
        }
    )


@pytest.fixture
def sink(tmp_path: Path) -> SubmissionSink:
    return SubmissionSink(tmp_path / "submissions", clock=lambda: FIXED_TIME)


def test_submit_writes_record(sink: SubmissionSink) -> None:
    outcome = sink.submit(make_request(project="Backend role", referrer="friend"))

    assert outcome.persisted is True
    assert outcome.id == "order_2025-03-04T05-06-07-890Z_Jane_Doe.json"
    assert outcome.message == "Optimization request submitted successfully"

    record = json.loads((sink.directory / outcome.id).read_text())
    assert record["submittedAt"] == "2025-03-04T05:06:07.890Z"
    assert record["user"]["email"] == "jane@example.com"
    assert record["user"]["referrer"] == "friend"
    assert record["analysisReport"] == {"overallScore": 72}
    assert record["optimizedResume"] == "Improved resume"


def test_collisions_get_numeric_suffix(sink: SubmissionSink) -> None:
    first = sink.submit(make_request())
    second = sink.submit(make_request())

    assert first.id != second.id
    assert second.id == "order_2025-03-04T05-06-07-890Z_Jane_Doe_1.json"
    assert (sink.directory / first.id).exists()
    assert (sink.directory / second.id).exists()


def test_long_name_is_still_archived(sink: SubmissionSink) -> None:
    long_name = "A" * 300

    outcome = sink.submit(make_request(name=long_name))

    assert outcome.persisted is True
    assert outcome.id == f"order_2025-03-04T05-06-07-890Z_{'A' * MAX_NAME_FRAGMENT}.json"
    record = json.loads((sink.directory / outcome.id).read_text())
    assert record["user"]["name"] == long_name


@pytest.mark.parametrize("user", [{"email": ""}, {"email": "   "}, {"email": None}])
def test_missing_email_rejected_without_writing(sink: SubmissionSink, user) -> None:
    with pytest.raises(MissingIdentityError):
        sink.submit(make_request(**user))

    assert not sink.directory.exists()


def test_missing_user_data_rejected(sink: SubmissionSink) -> None:
    with pytest.raises(MissingIdentityError):
        sink.submit(SubmissionRequest.model_validate({"report": {}}))


def test_unwritable_storage_is_a_soft_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")
    sink = SubmissionSink(blocker / "submissions", clock=lambda: FIXED_TIME)

    outcome = sink.submit(make_request())

    assert outcome.persisted is False
    assert outcome.id is None
    assert outcome.warning
    assert "warning" in outcome.to_payload()


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Jane  Doe", "Jane_Doe"),
        ("../../etc/passwd", "etcpasswd"),
        ("Zoë O'Brien", "Zo_OBrien"),
        ("", "anonymous"),
        (None, "anonymous"),
        ("///", "anonymous"),
        ("x" * 100, "x" * 64),
    ],
)
def test_sanitize_name(name, expected) -> None:
    assert sanitize_name(name) == expected


def test_from_settings_uses_temp_dir_when_constrained(settings) -> None:
    local = SubmissionSink.from_settings(settings, ExecutionEnvironment.LOCAL)
    constrained = SubmissionSink.from_settings(settings, ExecutionEnvironment.CONSTRAINED)

    assert local.directory == settings.submissions_dir
    assert constrained.directory.name == "submissions"
    assert constrained.directory != settings.submissions_dir

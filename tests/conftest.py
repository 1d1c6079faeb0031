from __future__ import annotations

import json
import os
from pathlib import Path

os.environ.setdefault("REPORT_DATABASE_URL", "sqlite://")

import pytest
import requests

from encounter_reports.delivery import DeliveryResult
from encounter_reports.domain import Artifact
from encounter_reports.errors import TransportError
from encounter_reports.schemas import JobStatus, ReportJobStatus


def status(value: str, error: str | None = None) -> ReportJobStatus:
    return ReportJobStatus(status=JobStatus(value), error=error)


class ScriptedJobClient:
    """In-memory stand-in for JobClient that replays a list of status readings.

    Readings may be status strings, ReportJobStatus objects or exceptions to
    raise. Once the script runs out every further poll reads PENDING.
    """

    def __init__(
        self,
        statuses=(),
        *,
        job_id: str = "j1",
        artifact: Artifact | None = None,
        submit_error: Exception | None = None,
        fetch_error: Exception | None = None,
    ) -> None:
        self.job_id = job_id
        self.artifact = artifact or Artifact(content=b"%PDF-1.4 test", suggested_name="X.pdf")
        self.submit_error = submit_error
        self.fetch_error = fetch_error
        self.script = list(statuses)
        self.calls: list[tuple] = []

    def submit(self, ids):
        self.calls.append(("submit", tuple(ids)))
        if self.submit_error is not None:
            raise self.submit_error
        return self.job_id

    def poll_status(self, job_id):
        self.calls.append(("poll", job_id))
        item = self.script.pop(0) if self.script else "PENDING"
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return status(item)
        return item

    def fetch_artifact(self, job_id):
        self.calls.append(("fetch", job_id))
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.artifact

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def close(self) -> None:
        self.calls.append(("close",))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class RecordingSink:
    def __init__(self) -> None:
        self.notifications = []

    def notify(self, notification) -> None:
        self.notifications.append(notification)

    @property
    def kinds(self) -> list[str]:
        return [n.kind.value for n in self.notifications]


class MemoryDelivery:
    def __init__(self, error: Exception | None = None) -> None:
        self.delivered: list[Artifact] = []
        self.error = error

    def deliver(self, artifact: Artifact) -> DeliveryResult:
        if self.error is not None:
            raise self.error
        self.delivered.append(artifact)
        return DeliveryResult(path=Path(artifact.suggested_name), size=artifact.size)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def delivery() -> MemoryDelivery:
    return MemoryDelivery()


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("Failed to initiate PDF generation.", status_code=500, body="boom")


def make_response(status_code: int, *, json_body=None, content: bytes = b"", headers=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(json_body).encode("utf-8") if json_body is not None else content
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    return response

"""HTTP client for the report-jobs service."""

from __future__ import annotations

import logging
import re
from typing import Any, Sequence
from urllib.parse import quote, unquote

import requests
from pydantic import ValidationError

from . import config
from .domain import Artifact
from .errors import TransportError
from .schemas import JobStatus, ReportJobCreated, ReportJobStatus


logger = logging.getLogger(__name__)

_BODY_PREVIEW = 500

_EXTENDED_FILENAME = re.compile(r"filename\*\s*=\s*[\w!#$%&+^`{}~-]*'[^']*'([^;]+)", re.IGNORECASE)
_PLAIN_FILENAME = re.compile(r'filename\s*=\s*"?([^";]*)"?', re.IGNORECASE)


def filename_from_disposition(header: str | None, default: str = config.DEFAULT_ARTIFACT_NAME) -> str:
    """Pull the suggested file name out of a Content-Disposition header.

    Falls back to ``default`` when the header is missing, has no filename
    token, or the token is empty.
    """
    if not header:
        return default

    name = ""
    match = _EXTENDED_FILENAME.search(header)
    if match:
        name = unquote(match.group(1))
    else:
        match = _PLAIN_FILENAME.search(header)
        if match:
            name = match.group(1)

    name = name.strip().strip("'\"").strip()
    return name or default


def _is_success(response: Any) -> bool:
    return 200 <= response.status_code < 300


def _body_preview(response: Any) -> str:
    try:
        return response.text[:_BODY_PREVIEW]
    except (UnicodeDecodeError, ValueError):
        return ""


class JobClient:
    """Submit, poll and download report jobs.

    ``session`` is anything with requests-style ``get``/``post`` methods.
    When omitted the client creates and owns a ``requests.Session``.
    """

    def __init__(
        self,
        base_url: str = config.REPORT_API_BASE,
        *,
        session: Any | None = None,
        timeout: float = config.REPORT_HTTP_TIMEOUT,
        jobs_path: str = config.REPORT_JOBS_PATH,
    ) -> None:
        if not jobs_path.startswith("/"):
            jobs_path = f"/{jobs_path}"
        self._jobs_url = f"{base_url.rstrip('/')}{jobs_path.rstrip('/')}"
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._owns_session = session is None

    def submit(self, ids: Sequence[str]) -> str:
        if not ids:
            raise ValueError("submit() needs at least one encounter id")

        try:
            response = self._session.post(self._jobs_url, json=list(ids), timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Failed to initiate PDF generation: {exc}") from exc

        if not _is_success(response):
            raise TransportError(
                "Failed to initiate PDF generation.",
                status_code=response.status_code,
                body=_body_preview(response),
            )

        try:
            created = ReportJobCreated.model_validate(response.json())
        except ValueError as exc:
            raise TransportError(
                "Report service returned an unreadable job reference.",
                status_code=response.status_code,
                body=_body_preview(response),
            ) from exc

        logger.info(f"Submitted report job {created.id} for {len(ids)} encounter(s)")
        return created.id

    def poll_status(self, job_id: str) -> ReportJobStatus:
        """Read the job status once.

        HTTP errors and unreadable bodies come back as PENDING so the caller's
        attempt budget absorbs them. Connection-level failures still raise.
        """
        url = f"{self._jobs_url}/status/{quote(job_id, safe='')}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Could not reach report service while polling job {job_id}: {exc}") from exc

        if not _is_success(response):
            logger.warning(f"Status poll for job {job_id} returned HTTP {response.status_code}; treating as pending")
            return ReportJobStatus(status=JobStatus.PENDING)

        try:
            return ReportJobStatus.model_validate(response.json())
        except (ValidationError, ValueError):
            logger.warning(f"Unreadable status payload for job {job_id}; treating as pending")
            return ReportJobStatus(status=JobStatus.PENDING)

    def fetch_artifact(self, job_id: str) -> Artifact:
        url = f"{self._jobs_url}/download/{quote(job_id, safe='')}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Failed to download the generated PDF: {exc}") from exc

        if not _is_success(response):
            raise TransportError(
                "Failed to download the generated PDF.",
                status_code=response.status_code,
                body=_body_preview(response),
            )

        name = filename_from_disposition(response.headers.get("Content-Disposition"))
        return Artifact(content=response.content, suggested_name=name)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "JobClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["JobClient", "filename_from_disposition"]

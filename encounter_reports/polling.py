"""Bounded polling of a report job until it finishes, fails or runs out of budget."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from . import config
from .domain import Job
from .schemas import JobStatus, ReportJobStatus


logger = logging.getLogger(__name__)

AttemptCallback = Callable[[int, int], None]


class CancellationToken:
    """Cooperative cancellation signal, safe to trigger from any thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; returns True if cancelled meanwhile."""
        return self._event.wait(timeout)


class StatusSource(Protocol):
    def poll_status(self, job_id: str) -> ReportJobStatus: ...


class PollState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PollResult:
    state: PollState
    attempts: int
    error_detail: str | None = None


class PollLoop:
    def __init__(
        self,
        client: StatusSource,
        *,
        interval: float = config.REPORT_POLL_INTERVAL,
        max_attempts: int = config.REPORT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.client = client
        self.interval = interval
        self.max_attempts = max_attempts

    @property
    def budget_seconds(self) -> float:
        return self.interval * self.max_attempts

    def poll(
        self,
        job: Job,
        cancellation: CancellationToken | None = None,
        on_attempt: AttemptCallback | None = None,
    ) -> PollResult:
        """Poll ``job`` until it reaches a terminal state.

        Each attempt waits ``interval`` seconds, then reads the status once.
        ``job.status`` and ``job.error_detail`` follow every reading. A
        TransportError from the status source propagates unchanged.
        """
        token = cancellation or CancellationToken()
        attempts = 0

        while True:
            if token.cancelled or token.wait(self.interval):
                logger.info(f"Polling of job {job.id} cancelled after {attempts} attempt(s)")
                return PollResult(PollState.CANCELLED, attempts)

            reading = self.client.poll_status(job.id)
            job.status = reading.status
            job.error_detail = reading.error

            attempts += 1
            if on_attempt is not None:
                on_attempt(attempts, self.max_attempts)

            if reading.status is JobStatus.COMPLETED:
                return PollResult(PollState.COMPLETED, attempts)
            if reading.status is JobStatus.FAILED:
                return PollResult(PollState.FAILED, attempts, reading.error)

            if attempts >= self.max_attempts:
                logger.warning(f"Job {job.id} still pending after {attempts} attempts; giving up")
                return PollResult(PollState.TIMED_OUT, attempts)


__all__ = ["CancellationToken", "PollLoop", "PollResult", "PollState"]

"""Public entry point for exporting encounters as a PDF report.

A run submits a report job, polls it within a fixed attempt budget, then
downloads and delivers the artifact. Every failure ends up as one error
notification and a FAILED ``ReportResult``; nothing raised by the transport
or delivery layers, nor by the progress callback, escapes ``run``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from . import notifications
from .client import JobClient
from .delivery import ArtifactDelivery, DeliveryResult, FileSystemDelivery
from .domain import Job, Phase, ReportRequest, RunState
from .errors import JobFailedError, JobTimeoutError, ReportError
from .notifications import LoggingNotificationSink, Notification, NotificationSink
from .polling import CancellationToken, PollLoop, PollState


logger = logging.getLogger(__name__)


class ReportOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ReportResult:
    outcome: ReportOutcome
    job_id: str | None = None
    attempts: int = 0
    error: ReportError | None = None
    delivery: DeliveryResult | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is ReportOutcome.SUCCEEDED


@dataclass(frozen=True)
class ReportProgress:
    phase: Phase
    attempts: int
    max_attempts: int
    job_id: str | None = None


ProgressCallback = Callable[[ReportProgress], None]


class _Cancelled(Exception):
    pass


class ReportOrchestrator:
    def __init__(
        self,
        client: JobClient,
        *,
        poll_loop: PollLoop | None = None,
        delivery: ArtifactDelivery | None = None,
        notifier: NotificationSink | None = None,
    ) -> None:
        self.client = client
        self.poll_loop = poll_loop or PollLoop(client)
        self.delivery = delivery or FileSystemDelivery()
        self.notifier = notifier or LoggingNotificationSink()

    def run(
        self,
        ids: Iterable[str],
        on_progress: ProgressCallback | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ReportResult:
        ids = list(ids or [])
        if not ids:
            return ReportResult(outcome=ReportOutcome.SKIPPED)

        state = RunState(request=ReportRequest.from_ids(ids))
        token = cancellation or CancellationToken()

        def enter(phase: Phase) -> None:
            state.advance(phase)
            self._report_progress(state, on_progress)

        try:
            self._checkpoint(token)
            enter(Phase.SUBMITTING)
            job = Job(id=self.client.submit(state.request.encounter_ids))
            state.attach_job(job)
            self._notify(notifications.started())

            enter(Phase.POLLING)

            def on_attempt(attempts: int, max_attempts: int) -> None:
                state.record_attempt()
                self._report_progress(state, on_progress)

            polled = self.poll_loop.poll(job, token, on_attempt)
            if polled.state is PollState.CANCELLED:
                raise _Cancelled()
            if polled.state is PollState.FAILED:
                raise JobFailedError(polled.error_detail)
            if polled.state is PollState.TIMED_OUT:
                raise JobTimeoutError(polled.attempts, self.poll_loop.interval)

            self._checkpoint(token)
            enter(Phase.FETCHING)
            artifact = self.client.fetch_artifact(job.id)

            self._checkpoint(token)
            enter(Phase.DELIVERING)
            delivered = self.delivery.deliver(artifact)
        except _Cancelled:
            enter(Phase.CANCELLED)
            logger.info(f"Report run cancelled during {self._job_label(state)}")
            return self._result(state, ReportOutcome.CANCELLED)
        except ReportError as exc:
            logger.error(f"Report run for {self._job_label(state)} failed: {exc}")
            enter(Phase.FAILED)
            self._notify(notifications.failed(exc.user_message))
            return self._result(state, ReportOutcome.FAILED, error=exc)

        enter(Phase.SUCCEEDED)
        self._notify(notifications.succeeded())
        logger.info(f"Report {self._job_label(state)} delivered after {state.attempts} poll attempt(s)")
        return self._result(state, ReportOutcome.SUCCEEDED, delivery=delivered)

    @staticmethod
    def _checkpoint(token: CancellationToken) -> None:
        if token.cancelled:
            raise _Cancelled()

    @staticmethod
    def _job_label(state: RunState) -> str:
        return f"job {state.job.id}" if state.job else f"{len(state.request)} encounter(s)"

    @staticmethod
    def _result(state: RunState, outcome: ReportOutcome, **extra) -> ReportResult:
        return ReportResult(
            outcome=outcome,
            job_id=state.job.id if state.job else None,
            attempts=state.attempts,
            **extra,
        )

    def _report_progress(self, state: RunState, on_progress: ProgressCallback | None) -> None:
        if on_progress is None:
            return
        progress = ReportProgress(
            phase=state.phase,
            attempts=state.attempts,
            max_attempts=self.poll_loop.max_attempts,
            job_id=state.job.id if state.job else None,
        )
        try:
            on_progress(progress)
        except Exception:  # noqa: BLE001 - progress is advisory
            logger.exception(f"Progress callback failed during {progress.phase.value}")

    def _notify(self, notification: Notification) -> None:
        try:
            self.notifier.notify(notification)
        except Exception:  # noqa: BLE001 - notifications are fire-and-forget
            logger.exception(f"Notification sink rejected {notification.kind.value} notification")


__all__ = ["ReportOrchestrator", "ReportOutcome", "ReportProgress", "ReportResult"]

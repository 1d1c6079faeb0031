"""Failure taxonomy for encounter report exports."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for every failure that ends a report run."""

    user_message = "Failed to generate PDF. Please check server logs."


class TransportError(ReportError):
    """Network or HTTP failure talking to the report-jobs service.

    Carries the raw status and (truncated) body for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return str(self)


class JobFailedError(ReportError):
    """The server reported the job as FAILED."""

    default_detail = "Server failed to generate the report."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return self.detail


class JobTimeoutError(ReportError):
    """The attempt budget ran out while the job was still pending."""

    user_message = "Report generation timed out. Please try again or select fewer encounters."

    def __init__(self, attempts: int, interval: float) -> None:
        super().__init__(f"job still pending after {attempts} attempts ({attempts * interval:.1f}s budget)")
        self.attempts = attempts
        self.interval = interval


class DeliveryError(ReportError):
    """The local environment refused to save the artifact."""

    user_message = "The generated PDF could not be saved."

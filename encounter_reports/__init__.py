"""Asynchronous PDF export of patient encounters."""

from .client import JobClient
from .delivery import FileSystemDelivery
from .errors import DeliveryError, JobFailedError, JobTimeoutError, ReportError, TransportError
from .orchestrator import ReportOrchestrator, ReportOutcome, ReportResult
from .polling import CancellationToken, PollLoop, PollState

__all__ = [
    "CancellationToken",
    "DeliveryError",
    "FileSystemDelivery",
    "JobClient",
    "JobFailedError",
    "JobTimeoutError",
    "PollLoop",
    "PollState",
    "ReportError",
    "ReportOrchestrator",
    "ReportOutcome",
    "ReportResult",
    "TransportError",
]

"""Transient user notifications (snackbars) emitted by report runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class NotificationKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    subtitle: str
    low_contrast: bool = True


class NotificationSink(Protocol):
    def notify(self, notification: Notification) -> None: ...


def started() -> Notification:
    return Notification(
        kind=NotificationKind.INFO,
        title="Generating PDF...",
        subtitle="Your document is being generated and will download automatically.",
    )


def succeeded() -> Notification:
    return Notification(
        kind=NotificationKind.SUCCESS,
        title="Print successful",
        subtitle="PDF has been downloaded successfully",
    )


def failed(message: str) -> Notification:
    return Notification(kind=NotificationKind.ERROR, title="Error", subtitle=message, low_contrast=False)


_LEVELS = {
    NotificationKind.INFO: logging.INFO,
    NotificationKind.SUCCESS: logging.INFO,
    NotificationKind.ERROR: logging.ERROR,
}


class LoggingNotificationSink:
    """Default sink for headless use: notifications go to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("encounter_reports.notifications")

    def notify(self, notification: Notification) -> None:
        self.logger.log(_LEVELS[notification.kind], f"{notification.title} {notification.subtitle}")

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .schemas import JobStatus


@dataclass(frozen=True)
class ReportRequest:
    encounter_ids: tuple[str, ...]

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "ReportRequest":
        """Build an ordered set of encounter ids, keeping first-seen order."""
        seen: dict[str, None] = {}
        for value in ids:
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Encounter ids must be non-blank strings, got {value!r}")
            seen.setdefault(value, None)
        if not seen:
            raise ValueError("A report needs at least one encounter id")
        return cls(encounter_ids=tuple(seen))

    def __len__(self) -> int:
        return len(self.encounter_ids)


@dataclass
class Job:
    id: str
    status: JobStatus = JobStatus.PENDING
    error_detail: str | None = None


@dataclass(frozen=True)
class Artifact:
    content: bytes
    suggested_name: str

    @property
    def size(self) -> int:
        return len(self.content)


class Phase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    FETCHING = "fetching"
    DELIVERING = "delivering"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_PHASES


_PHASE_ORDER = [Phase.IDLE, Phase.SUBMITTING, Phase.POLLING, Phase.FETCHING, Phase.DELIVERING]
_TERMINAL_PHASES = frozenset({Phase.SUCCEEDED, Phase.FAILED, Phase.CANCELLED})


@dataclass
class RunState:
    """Per-run bookkeeping owned by a single ReportOrchestrator.run call."""

    request: ReportRequest
    job: Job | None = None
    attempts: int = 0
    phase: Phase = Phase.IDLE

    def advance(self, phase: Phase) -> None:
        if self.phase.is_terminal:
            raise RuntimeError(f"Run already finished as {self.phase.value}")
        if phase.is_terminal:
            self.phase = phase
            return
        if _PHASE_ORDER.index(phase) <= _PHASE_ORDER.index(self.phase):
            raise RuntimeError(f"Cannot move from {self.phase.value} back to {phase.value}")
        self.phase = phase

    def attach_job(self, job: Job) -> None:
        if self.job is not None:
            raise RuntimeError(f"Run already bound to job {self.job.id}")
        self.job = job

    def record_attempt(self) -> None:
        if self.phase is not Phase.POLLING:
            raise RuntimeError(f"Attempts only count while polling, not while {self.phase.value}")
        self.attempts += 1

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field


class JobStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ReportJobCreated(BaseModel):
    # Older backends answer with "uuid" instead of "id"
    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "uuid"))


class ReportJobStatus(BaseModel):
    status: JobStatus
    error: str | None = None

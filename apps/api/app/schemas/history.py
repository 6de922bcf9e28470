"""Status history schemas."""

from datetime import datetime

from pydantic import BaseModel

from app.schemas.job import JobStatus


class StatusHistoryEntry(BaseModel):
    id: str
    job_id: str
    status: JobStatus
    changed_by: str
    changed_at: datetime


class JobHistory(BaseModel):
    job_id: str
    entries: list[StatusHistoryEntry]
    timeline_consistent: bool
    drifted_statuses: list[JobStatus] = []

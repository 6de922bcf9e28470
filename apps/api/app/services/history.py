"""Status history read service."""

from app.domain.job_fsm import timeline_drift
from app.domain.permissions import can_view_job
from app.errors import not_found_error
from app.repositories.memory import InMemoryStore
from app.schemas.auth import Actor
from app.schemas.history import JobHistory, StatusHistoryEntry


class HistoryService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def get_history(self, *, actor: Actor, job_id: str) -> JobHistory:
        record = self._store.get_job(job_id)
        if record is None or not can_view_job(actor, technician_id=record.technician_id):
            raise not_found_error()

        entries = [
            StatusHistoryEntry(
                id=entry.id,
                job_id=entry.job_id,
                status=entry.status,
                changed_by=entry.changed_by,
                changed_at=entry.changed_at,
            )
            for entry in self._store.list_status_history(job_id)
        ]
        drifted = timeline_drift(record.timeline, (entry.status for entry in entries))
        return JobHistory(
            job_id=record.id,
            entries=entries,
            timeline_consistent=not drifted,
            drifted_statuses=drifted,
        )

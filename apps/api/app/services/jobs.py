"""Job service layer."""

import logging

from app.core.logging_safety import safe_log_identifier
from app.domain.financials import compute_financials
from app.domain.permissions import JOB_CREATOR_ROLES, can_view_job, ensure_role
from app.errors import not_found_error
from app.repositories.memory import InMemoryStore, JobRecord
from app.schemas.auth import Actor, Role
from app.schemas.job import CreateJobRequest, Job, JobStatus

logger = logging.getLogger(__name__)

_INTAKE_FIELDS = frozenset(
    {
        "customer_name",
        "customer_phone",
        "customer_alt_phone",
        "customer_address",
        "customer_location",
        "device_type",
        "device_issue",
        "notes",
        "time_slot",
    }
)


class JobService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_job(self, *, actor: Actor, payload: CreateJobRequest) -> Job:
        ensure_role(actor, JOB_CREATOR_ROLES, "Only admins can create jobs")

        fields = payload.model_dump(include=_INTAKE_FIELDS)
        financials = compute_financials(service_charge=payload.service_charge, parts_cost=payload.parts_cost)
        record = self._store.create_job(created_by=actor.user_id, fields=fields, financials=financials)

        logger.info(
            "job.created job_id=%s actor_id=%s status=%s total=%s",
            safe_log_identifier(record.id, prefix="jid"),
            safe_log_identifier(actor.user_id, prefix="pid"),
            record.status,
            record.financials.total,
        )
        return to_job(record)

    def get_job(self, *, actor: Actor, job_id: str) -> Job:
        record = self._store.get_job(job_id)
        if record is None or not can_view_job(actor, technician_id=record.technician_id):
            raise not_found_error()

        return to_job(record)

    def list_jobs(
        self,
        *,
        actor: Actor,
        status: JobStatus | None = None,
        technician_id: str | None = None,
    ) -> list[Job]:
        # Technicians only ever see their own jobs, whatever filter they send.
        if actor.role is Role.TECHNICIAN:
            if technician_id not in (None, actor.user_id):
                return []
            technician_id = actor.user_id

        return [to_job(record) for record in self._store.list_jobs(status=status, technician_id=technician_id)]


def to_job(record: JobRecord) -> Job:
    return Job(
        id=record.id,
        customer_name=record.customer_name,
        customer_phone=record.customer_phone,
        customer_alt_phone=record.customer_alt_phone,
        customer_address=record.customer_address,
        customer_location=record.customer_location,
        device_type=record.device_type,
        device_issue=record.device_issue,
        notes=record.notes,
        time_slot=record.time_slot,
        status=record.status,
        technician_id=record.technician_id,
        assigned_by=record.assigned_by,
        timeline=record.timeline,
        qc_before=record.qc_before,
        qc_after=record.qc_after,
        financials=record.financials,
        payment_method=record.payment_method,
        created_by=record.created_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )

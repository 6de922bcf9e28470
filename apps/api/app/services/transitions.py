"""Status transition engine.

This is the only code path that writes a job's ``status``. A request is
checked in a fixed order:

1. the job exists (404, no leak),
2. the caller's role may transition anything at all (viewers never can),
3. the requested status is the single successor of the current one,
4. the caller may act on a job in the current status (role and ownership),
5. the attachments match what the target status requires.

Only then is the change handed to the store as one conditional write keyed on
the status validated in step 3.
"""

from dataclasses import dataclass
import logging
from typing import Any

from app.core.logging_safety import safe_log_identifier
from app.domain.financials import compute_financials
from app.domain.job_fsm import ensure_transition, invalid_transition_error
from app.domain.permissions import ensure_may_transition, ensure_may_transition_any
from app.errors import ApiError, not_found_error, storage_failure_error
from app.repositories.memory import InMemoryStore, StatusConflictError
from app.schemas.auth import Actor, Role
from app.schemas.job import FinancialsInput, Job, JobStatus, PaymentMethod, QCReport
from app.services.jobs import to_job

logger = logging.getLogger(__name__)

_QC_STATUSES: frozenset[JobStatus] = frozenset({JobStatus.QC_BEFORE, JobStatus.QC_AFTER})
_FINANCIALS_STATUS = JobStatus.QC_AFTER
_PAYMENT_STATUS = JobStatus.COMPLETED
_ASSIGNMENT_STATUS = JobStatus.ASSIGNED


@dataclass(slots=True)
class TransitionAttachments:
    qc_data: QCReport | None = None
    payment_method: PaymentMethod | None = None
    financials: FinancialsInput | None = None
    technician_id: str | None = None


def _validation_error(message: str, **details: Any) -> ApiError:
    return ApiError(status_code=400, code="VALIDATION_ERROR", message=message, details=details or None)


class TransitionService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def apply_transition(
        self,
        *,
        job_id: str,
        requested_status: JobStatus,
        actor: Actor,
        attachments: TransitionAttachments | None = None,
        correlation_id: str | None = None,
    ) -> Job:
        safe_job_id = safe_log_identifier(job_id, prefix="jid")
        safe_actor_id = safe_log_identifier(actor.user_id, prefix="pid")
        safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")

        record = self._store.get_job(job_id)
        if record is None:
            logger.warning(
                "transition.rejected correlation_id=%s job_id=%s actor_id=%s code=RESOURCE_NOT_FOUND",
                safe_correlation_id,
                safe_job_id,
                safe_actor_id,
            )
            raise not_found_error()

        previous_status = record.status
        try:
            ensure_may_transition_any(actor)
            ensure_transition(previous_status, requested_status)
            ensure_may_transition(actor, current_status=previous_status, technician_id=record.technician_id)
            changes = self._build_changes(
                requested_status=requested_status,
                actor=actor,
                attachments=attachments or TransitionAttachments(),
            )
        except ApiError as exc:
            logger.warning(
                "transition.rejected correlation_id=%s job_id=%s actor_id=%s role=%s code=%s "
                "current_status=%s attempted_status=%s",
                safe_correlation_id,
                safe_job_id,
                safe_actor_id,
                actor.role,
                exc.payload.code,
                previous_status,
                requested_status,
            )
            raise

        try:
            updated = self._store.apply_transition(
                job_id=record.id,
                expected_status=previous_status,
                new_status=requested_status,
                changed_by=actor.user_id,
                changes=changes,
            )
        except StatusConflictError as exc:
            # Another request advanced the job after it was read.
            logger.warning(
                "transition.conflict correlation_id=%s job_id=%s actor_id=%s expected_status=%s "
                "actual_status=%s attempted_status=%s",
                safe_correlation_id,
                safe_job_id,
                safe_actor_id,
                exc.expected_status,
                exc.actual_status,
                requested_status,
            )
            raise invalid_transition_error(exc.actual_status, requested_status) from exc
        except RuntimeError as exc:
            logger.warning(
                "transition.storage_failed correlation_id=%s job_id=%s code=STORAGE_FAILURE reason=%s",
                safe_correlation_id,
                safe_job_id,
                type(exc).__name__,
            )
            raise storage_failure_error() from exc

        logger.info(
            "transition.applied correlation_id=%s job_id=%s actor_id=%s role=%s prev_status=%s new_status=%s",
            safe_correlation_id,
            safe_job_id,
            safe_actor_id,
            actor.role,
            previous_status,
            updated.status,
        )
        return to_job(updated)

    def _build_changes(
        self,
        *,
        requested_status: JobStatus,
        actor: Actor,
        attachments: TransitionAttachments,
    ) -> dict[str, Any]:
        changes: dict[str, Any] = {}

        if requested_status in _QC_STATUSES:
            if attachments.qc_data is None:
                raise _validation_error(
                    f"qcData is required to move to {requested_status.value}",
                    attempted_status=requested_status.value,
                )
            changes[requested_status.value] = attachments.qc_data.model_copy(deep=True)
        elif attachments.qc_data is not None:
            raise _validation_error(
                "qcData is only accepted on the qc_before and qc_after transitions",
                attempted_status=requested_status.value,
            )

        if requested_status is _PAYMENT_STATUS:
            if attachments.payment_method is None:
                raise _validation_error("paymentMethod is required to complete a job")
            changes["payment_method"] = attachments.payment_method
        elif attachments.payment_method is not None:
            raise _validation_error(
                "paymentMethod is only accepted on the transition to completed",
                attempted_status=requested_status.value,
            )

        if attachments.financials is not None:
            if requested_status is not _FINANCIALS_STATUS:
                raise _validation_error(
                    "financials are only accepted on the qc_after transition",
                    attempted_status=requested_status.value,
                )
            changes["financials"] = compute_financials(
                service_charge=attachments.financials.service_charge,
                parts_cost=attachments.financials.parts_cost,
            )

        if requested_status is _ASSIGNMENT_STATUS:
            if not attachments.technician_id:
                raise _validation_error("technicianId is required to assign a job")
            self._ensure_technician(attachments.technician_id)
            changes["technician_id"] = attachments.technician_id
            changes["assigned_by"] = actor.user_id
        elif attachments.technician_id is not None:
            raise _validation_error(
                "technicianId is only accepted on the assignment transition",
                attempted_status=requested_status.value,
            )

        return changes

    def _ensure_technician(self, technician_id: str) -> None:
        user = self._store.get_user(technician_id)
        if user is None:
            raise not_found_error()
        if user.role is not Role.TECHNICIAN:
            raise ApiError(
                status_code=400,
                code="NOT_A_TECHNICIAN",
                message="Selected user is not a technician",
                details={"technician_id": technician_id},
            )

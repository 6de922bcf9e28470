"""Assignment service: the unassigned -> assigned edge."""

import logging

from app.core.logging_safety import safe_log_identifier
from app.domain.permissions import ASSIGNER_ROLES, ensure_role
from app.schemas.auth import Actor
from app.schemas.job import Job, JobStatus
from app.services.transitions import TransitionAttachments, TransitionService

logger = logging.getLogger(__name__)


class AssignmentService:
    """Binds a technician to an unassigned job.

    The binding rides on the ``unassigned -> assigned`` transition, so it can
    succeed at most once per job: the status it requires is consumed by the
    first success.
    """

    def __init__(self, transitions: TransitionService) -> None:
        self._transitions = transitions

    def assign(
        self,
        *,
        job_id: str,
        technician_id: str,
        actor: Actor,
        correlation_id: str | None = None,
    ) -> Job:
        ensure_role(actor, ASSIGNER_ROLES, "Only admins and semiadmins can assign jobs")

        job = self._transitions.apply_transition(
            job_id=job_id,
            requested_status=JobStatus.ASSIGNED,
            actor=actor,
            attachments=TransitionAttachments(technician_id=technician_id),
            correlation_id=correlation_id,
        )
        logger.info(
            "assign.applied correlation_id=%s job_id=%s technician_id=%s assigned_by=%s",
            safe_log_identifier(correlation_id, prefix="cid"),
            safe_log_identifier(job.id, prefix="jid"),
            safe_log_identifier(technician_id, prefix="pid"),
            safe_log_identifier(actor.user_id, prefix="pid"),
        )
        return job

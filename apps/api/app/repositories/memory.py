"""In-memory repositories used by the API scaffold and tests."""

from __future__ import annotations

from collections.abc import Callable
import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
import logging
import secrets
import threading
from typing import Any
from typing import Literal
from uuid import uuid4

from app.schemas.auth import Role
from app.schemas.job import Financials, JobStatus, JobTimeline, PaymentMethod, QCReport

logger = logging.getLogger(__name__)

_MUTABLE_JOB_FIELDS = frozenset(
    {"technician_id", "assigned_by", "qc_before", "qc_after", "financials", "payment_method"}
)
_MUTATION_FAILPOINT_STAGES = (
    "after_status",
    "after_attachments",
    "after_history",
)

MutationFailpointStage = Literal["after_status", "after_attachments", "after_history"]
ChangeEventType = Literal["INSERT", "UPDATE"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StatusConflictError(Exception):
    """Raised when a conditional status write finds a different stored status."""

    def __init__(self, *, job_id: str, expected_status: JobStatus, actual_status: JobStatus) -> None:
        self.job_id = job_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(f"Job {job_id} is {actual_status.value}, expected {expected_status.value}")


class ActiveInviteExistsError(Exception):
    """Raised when an email already has an unused, unexpired invite."""

    def __init__(self, *, email: str, expires_at: datetime) -> None:
        self.email = email
        self.expires_at = expires_at
        super().__init__(f"Active invite already exists until {expires_at.isoformat()}")


@dataclass(slots=True)
class UserRecord:
    id: str
    role: Role
    created_at: datetime
    name: str | None = None
    email: str | None = None


@dataclass(slots=True)
class JobRecord:
    id: str
    customer_name: str
    customer_phone: str
    customer_address: str
    device_type: str
    device_issue: str
    status: JobStatus
    timeline: JobTimeline
    financials: Financials
    created_by: str
    created_at: datetime
    updated_at: datetime | None = None
    customer_alt_phone: str | None = None
    customer_location: str | None = None
    notes: str | None = None
    time_slot: str | None = None
    technician_id: str | None = None
    assigned_by: str | None = None
    qc_before: QCReport | None = None
    qc_after: QCReport | None = None
    payment_method: PaymentMethod | None = None


@dataclass(slots=True)
class StatusHistoryRecord:
    id: str
    job_id: str
    status: JobStatus
    changed_by: str
    changed_at: datetime


@dataclass(slots=True)
class InviteRecord:
    id: str
    email: str
    role: Role
    token: str
    created_by: str
    created_at: datetime
    expires_at: datetime
    used: bool = False

    def is_active(self, now: datetime) -> bool:
        return not self.used and now < self.expires_at


@dataclass(slots=True, frozen=True)
class JobChangeEvent:
    event_type: ChangeEventType
    job_id: str
    status: JobStatus
    technician_id: str | None
    occurred_at: datetime


JobChangeListener = Callable[[JobChangeEvent], None]


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for scaffolding and tests.

    Mutations are serialised through one lock. Status writes are conditional on
    the caller's expected current status, and every job mutation is applied
    together with its history entry or not at all.
    """

    users: dict[str, UserRecord] = field(default_factory=dict)
    jobs: dict[str, JobRecord] = field(default_factory=dict)
    status_history: list[StatusHistoryRecord] = field(default_factory=list)
    invites: dict[str, InviteRecord] = field(default_factory=dict)
    clock: Callable[[], datetime] = _utcnow
    job_write_count: int = 0
    history_write_count: int = 0
    invite_write_count: int = 0
    mutation_failpoint_job_id: str | None = None
    mutation_failpoint_stage: MutationFailpointStage | None = None
    mutation_failpoint_message: str = "Injected job persistence failure"
    _listeners: list[JobChangeListener] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # Users and roles

    def grant_role(
        self,
        user_id: str,
        role: Role,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> UserRecord:
        with self._lock:
            return self._put_user(user_id=user_id, role=role, name=name, email=email)

    def get_user(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def list_users_by_role(self, role: Role) -> list[UserRecord]:
        users = [record for record in self.users.values() if record.role is role]
        users.sort(key=lambda record: ((record.name or "").lower(), record.id))
        return users

    def _put_user(self, *, user_id: str, role: Role, name: str | None, email: str | None) -> UserRecord:
        existing = self.users.get(user_id)
        user = UserRecord(
            id=user_id,
            role=role,
            created_at=existing.created_at if existing is not None else self.clock(),
            name=name if name is not None else (existing.name if existing else None),
            email=email.lower() if email else (existing.email if existing else None),
        )
        self.users[user_id] = user
        return user

    # Jobs

    def create_job(self, *, created_by: str, fields: dict[str, Any], financials: Financials) -> JobRecord:
        """Insert a job in the initial status together with its first history entry."""
        with self._lock:
            now = self.clock()
            job = JobRecord(
                id=str(uuid4()),
                status=JobStatus.UNASSIGNED,
                timeline=JobTimeline(unassigned=now),
                financials=financials,
                created_by=created_by,
                created_at=now,
                updated_at=now,
                **fields,
            )
            self.jobs[job.id] = job
            self.job_write_count += 1
            self._append_history(job_id=job.id, status=job.status, changed_by=created_by, changed_at=now)
            snapshot = copy.deepcopy(job)

        self._publish(
            JobChangeEvent(
                event_type="INSERT",
                job_id=snapshot.id,
                status=snapshot.status,
                technician_id=snapshot.technician_id,
                occurred_at=now,
            )
        )
        return snapshot

    def get_job(self, job_id: str) -> JobRecord | None:
        """Return a detached snapshot; callers never hold the stored record."""
        with self._lock:
            job = self.jobs.get(job_id)
            return copy.deepcopy(job) if job is not None else None

    def list_jobs(
        self,
        *,
        status: JobStatus | None = None,
        technician_id: str | None = None,
    ) -> list[JobRecord]:
        with self._lock:
            jobs = [
                copy.deepcopy(record)
                for record in self.jobs.values()
                if (status is None or record.status is status)
                and (technician_id is None or record.technician_id == technician_id)
            ]
        jobs.sort(key=lambda record: record.created_at, reverse=True)
        return jobs

    def apply_transition(
        self,
        *,
        job_id: str,
        expected_status: JobStatus,
        new_status: JobStatus,
        changed_by: str,
        changes: dict[str, Any] | None = None,
    ) -> JobRecord:
        """Compare-and-swap the job status and apply side effects atomically.

        The write only happens if the stored status is still ``expected_status``;
        otherwise ``StatusConflictError`` is raised and nothing changes. Any
        failure after the first write restores the job and the history log.
        """
        unknown = set(changes or {}) - _MUTABLE_JOB_FIELDS
        if unknown:
            raise ValueError(f"Unsupported job fields: {sorted(unknown)}")

        with self._lock:
            job = self.jobs.get(job_id)
            if job is None:
                raise KeyError(job_id)
            if job.status is not expected_status:
                raise StatusConflictError(
                    job_id=job_id,
                    expected_status=expected_status,
                    actual_status=job.status,
                )

            previous_job = copy.deepcopy(job)
            previous_job_write_count = self.job_write_count
            previous_history_count = len(self.status_history)
            previous_history_write_count = self.history_write_count
            changed_at = self._next_timestamp(job)

            try:
                job.status = new_status
                job.timeline = job.timeline.model_copy(update={new_status.value: changed_at})
                job.updated_at = changed_at
                self.job_write_count += 1
                self._maybe_raise_mutation_failpoint(job_id=job_id, stage="after_status")

                for key, value in (changes or {}).items():
                    setattr(job, key, value)
                self._maybe_raise_mutation_failpoint(job_id=job_id, stage="after_attachments")

                self._append_history(job_id=job_id, status=new_status, changed_by=changed_by, changed_at=changed_at)
                self._maybe_raise_mutation_failpoint(job_id=job_id, stage="after_history")
            except Exception:
                self.jobs[job_id] = previous_job
                self.job_write_count = previous_job_write_count
                if len(self.status_history) > previous_history_count:
                    del self.status_history[previous_history_count:]
                self.history_write_count = previous_history_write_count
                raise

            snapshot = copy.deepcopy(job)

        self._publish(
            JobChangeEvent(
                event_type="UPDATE",
                job_id=snapshot.id,
                status=snapshot.status,
                technician_id=snapshot.technician_id,
                occurred_at=changed_at,
            )
        )
        return snapshot

    def _next_timestamp(self, job: JobRecord) -> datetime:
        """Clock reading clamped so the timeline never goes backwards."""
        now = self.clock()
        entered = [value for value in job.timeline.model_dump().values() if value is not None]
        latest = max(entered) if entered else None
        if latest is not None and now < latest:
            return latest
        return now

    def _maybe_raise_mutation_failpoint(self, *, job_id: str, stage: MutationFailpointStage) -> None:
        if stage not in _MUTATION_FAILPOINT_STAGES:
            return
        if self.mutation_failpoint_job_id not in (None, job_id):
            return
        if self.mutation_failpoint_stage != stage:
            return

        self.mutation_failpoint_job_id = None
        self.mutation_failpoint_stage = None
        raise RuntimeError(self.mutation_failpoint_message)

    # Status history

    def _append_history(self, *, job_id: str, status: JobStatus, changed_by: str, changed_at: datetime) -> None:
        self.status_history.append(
            StatusHistoryRecord(
                id=str(uuid4()),
                job_id=job_id,
                status=status,
                changed_by=changed_by,
                changed_at=changed_at,
            )
        )
        self.history_write_count += 1

    def list_status_history(self, job_id: str) -> list[StatusHistoryRecord]:
        with self._lock:
            entries = [copy.copy(record) for record in self.status_history if record.job_id == job_id]
        # sort() is stable, so insertion order breaks timestamp ties.
        entries.sort(key=lambda record: record.changed_at)
        return entries

    # Invites

    def _active_invite_for(self, email: str, now: datetime) -> InviteRecord | None:
        for invite in self.invites.values():
            if invite.email == email and invite.is_active(now):
                return invite
        return None

    def create_invite(self, *, email: str, role: Role, created_by: str, ttl: timedelta) -> InviteRecord:
        """Issue an invite, unless ``email`` already holds an active one.

        The duplicate check and the insert happen under the same lock, so two
        concurrent requests for one email cannot both succeed.
        """
        normalized = email.lower()
        with self._lock:
            now = self.clock()
            existing = self._active_invite_for(normalized, now)
            if existing is not None:
                raise ActiveInviteExistsError(email=normalized, expires_at=existing.expires_at)
            invite = InviteRecord(
                id=str(uuid4()),
                email=normalized,
                role=role,
                token=secrets.token_urlsafe(32),
                created_by=created_by,
                created_at=now,
                expires_at=now + ttl,
            )
            self.invites[invite.id] = invite
            self.invite_write_count += 1
            return copy.copy(invite)

    def get_invite_by_token(self, token: str) -> InviteRecord | None:
        candidate = token.encode("utf-8")
        with self._lock:
            for invite in self.invites.values():
                if secrets.compare_digest(invite.token.encode("utf-8"), candidate):
                    return copy.copy(invite)
        return None

    def redeem_invite(
        self,
        *,
        invite_id: str,
        user_id: str,
        name: str | None,
        email: str | None,
    ) -> UserRecord | None:
        """Bind the invite's role to ``user_id`` and mark the invite used.

        Returns ``None`` without writing when the invite is no longer active or
        the user already holds a role.
        """
        with self._lock:
            invite = self.invites.get(invite_id)
            if invite is None or not invite.is_active(self.clock()) or user_id in self.users:
                return None
            invite.used = True
            self.invite_write_count += 1
            return self._put_user(user_id=user_id, role=invite.role, name=name, email=email or invite.email)

    # Change notifications

    def subscribe(self, listener: JobChangeListener) -> Callable[[], None]:
        """Register a listener for committed job changes; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: JobChangeEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "store.listener_failed event_type=%s status=%s",
                    event.event_type,
                    event.status,
                )

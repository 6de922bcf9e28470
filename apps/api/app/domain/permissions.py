"""Role permission matrix for job mutations."""

from app.errors import ApiError
from app.schemas.auth import Actor, Role
from app.schemas.job import JobStatus

JOB_CREATOR_ROLES: frozenset[Role] = frozenset({Role.ADMIN})
ASSIGNER_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.SEMIADMIN})
DIRECTORY_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.SEMIADMIN})
INVITER_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.SEMIADMIN})

# Roles each inviter may hand out.
_INVITABLE_ROLES: dict[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset(Role),
    Role.SEMIADMIN: frozenset({Role.TECHNICIAN, Role.VIEWER}),
}


def forbidden(message: str, **details: object) -> ApiError:
    return ApiError(status_code=403, code="FORBIDDEN", message=message, details=details or None)


def ensure_role(actor: Actor, allowed: frozenset[Role], message: str) -> None:
    if actor.role not in allowed:
        raise forbidden(message, role=actor.role.value)


def ensure_may_transition_any(actor: Actor) -> None:
    """State-independent gate evaluated before the sequence check."""
    if actor.role is Role.VIEWER:
        raise forbidden("Viewers cannot update jobs", role=actor.role.value)


def ensure_may_transition(actor: Actor, *, current_status: JobStatus, technician_id: str | None) -> None:
    """Check whether ``actor`` may advance a job sitting in ``current_status``."""
    ensure_may_transition_any(actor)

    if actor.role is Role.ADMIN:
        return
    if actor.role is Role.SEMIADMIN:
        if current_status is not JobStatus.UNASSIGNED:
            raise forbidden("Semiadmins can only assign unassigned jobs", current_status=current_status.value)
        return
    if actor.role is Role.TECHNICIAN:
        if technician_id is None or technician_id != actor.user_id:
            raise forbidden("Technicians can only update their own jobs")
        if current_status is JobStatus.UNASSIGNED:
            raise forbidden("Technicians cannot assign jobs")
        return

    raise forbidden("Role is not permitted to update jobs", role=actor.role.value)


def can_view_job(actor: Actor, *, technician_id: str | None) -> bool:
    if actor.role is Role.TECHNICIAN:
        return technician_id is not None and technician_id == actor.user_id
    return True


def ensure_may_invite(actor: Actor, role: Role) -> None:
    allowed = _INVITABLE_ROLES.get(actor.role)
    if allowed is None:
        raise forbidden("Only admins and semiadmins can create invites", role=actor.role.value)
    if role not in allowed:
        raise forbidden(
            "Semiadmins can only invite technicians and viewers",
            role=actor.role.value,
            invited_role=role.value,
        )

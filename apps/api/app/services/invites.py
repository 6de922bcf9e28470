"""Invite service layer.

Invites are the only way an identity other than a bootstrap admin obtains a
role. Delivery of the invite link is left to the caller.
"""

from datetime import timedelta
import logging

from app.core.logging_safety import safe_log_email, safe_log_identifier
from app.domain.permissions import ensure_may_invite
from app.errors import ApiError, not_found_error
from app.repositories.memory import ActiveInviteExistsError, InMemoryStore, InviteRecord
from app.schemas.auth import Actor, AuthPrincipal, Role, UserProfile
from app.schemas.invite import CreateInviteResponse, Invite
from app.services.users import to_profile

logger = logging.getLogger(__name__)

_INVITE_ACCEPT_PATH = "/invite"


class InviteService:
    def __init__(self, store: InMemoryStore, *, ttl: timedelta) -> None:
        self._store = store
        self._ttl = ttl

    def create_invite(self, *, actor: Actor, email: str, role: Role) -> CreateInviteResponse:
        ensure_may_invite(actor, role)

        normalized_email = email.strip().lower()
        try:
            record = self._store.create_invite(
                email=normalized_email,
                role=role,
                created_by=actor.user_id,
                ttl=self._ttl,
            )
        except ActiveInviteExistsError as exc:
            logger.warning(
                "invite.rejected email=%s code=INVITE_ALREADY_ACTIVE",
                safe_log_email(normalized_email),
            )
            raise ApiError(
                status_code=409,
                code="INVITE_ALREADY_ACTIVE",
                message="Active invite already exists for this email",
                details={"expires_at": exc.expires_at.isoformat()},
            ) from exc

        logger.info(
            "invite.created invite_id=%s email=%s role=%s created_by=%s",
            safe_log_identifier(record.id, prefix="iid"),
            safe_log_email(normalized_email),
            role.value,
            safe_log_identifier(actor.user_id, prefix="pid"),
        )
        return CreateInviteResponse(
            invite=_to_invite(record),
            token=record.token,
            invite_path=f"{_INVITE_ACCEPT_PATH}?token={record.token}",
        )

    def accept_invite(self, *, principal: AuthPrincipal, token: str, name: str | None = None) -> UserProfile:
        safe_principal_id = safe_log_identifier(principal.user_id, prefix="pid")
        invite = self._store.get_invite_by_token(token)
        if invite is None:
            logger.warning("invite.accept_rejected principal_id=%s code=RESOURCE_NOT_FOUND", safe_principal_id)
            raise not_found_error()

        if not invite.is_active(self._store.clock()):
            self._raise_not_active(invite, safe_principal_id)

        if self._store.get_user(principal.user_id) is not None:
            self._raise_role_already_assigned(safe_principal_id)

        if principal.email and principal.email.strip().lower() != invite.email:
            logger.warning("invite.accept_rejected principal_id=%s code=FORBIDDEN reason=email_mismatch", safe_principal_id)
            raise ApiError(status_code=403, code="FORBIDDEN", message="Invite was issued to a different email")

        user = self._store.redeem_invite(
            invite_id=invite.id,
            user_id=principal.user_id,
            name=name or principal.name,
            email=principal.email,
        )
        if user is None:
            # Lost a race with another redemption of the same invite or identity.
            if self._store.get_user(principal.user_id) is not None:
                self._raise_role_already_assigned(safe_principal_id)
            self._raise_not_active(invite, safe_principal_id)

        logger.info(
            "invite.accepted invite_id=%s principal_id=%s role=%s",
            safe_log_identifier(invite.id, prefix="iid"),
            safe_principal_id,
            user.role.value,
        )
        return to_profile(user)

    @staticmethod
    def _raise_not_active(invite: InviteRecord, safe_principal_id: str) -> None:
        logger.warning(
            "invite.accept_rejected principal_id=%s code=INVITE_NOT_ACTIVE used=%s",
            safe_principal_id,
            invite.used,
        )
        raise ApiError(
            status_code=409,
            code="INVITE_NOT_ACTIVE",
            message="Invite has already been used or has expired",
            details={"used": invite.used, "expires_at": invite.expires_at.isoformat()},
        )

    @staticmethod
    def _raise_role_already_assigned(safe_principal_id: str) -> None:
        logger.warning("invite.accept_rejected principal_id=%s code=ROLE_ALREADY_ASSIGNED", safe_principal_id)
        raise ApiError(
            status_code=409,
            code="ROLE_ALREADY_ASSIGNED",
            message="This identity already has a role",
        )


def _to_invite(record: InviteRecord) -> Invite:
    return Invite(
        id=record.id,
        email=record.email,
        role=record.role,
        created_by=record.created_by,
        created_at=record.created_at,
        expires_at=record.expires_at,
        used=record.used,
    )

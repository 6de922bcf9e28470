"""Role authority: the only source of a caller's role."""

from collections.abc import Iterable
import logging

from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import Actor, AuthPrincipal, Role

logger = logging.getLogger(__name__)


class RoleAuthority:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def role_of(self, identity_id: str) -> Role:
        """Look up the role bound to ``identity_id``.

        Identities without a binding fail closed with 401, exactly like a
        missing token.
        """
        user = self._store.get_user(identity_id)
        if user is None:
            raise ApiError(status_code=401, code="UNAUTHORIZED", message="No role is assigned to this identity")
        return user.role

    def resolve_actor(self, principal: AuthPrincipal) -> Actor:
        role = self.role_of(principal.user_id)
        if principal.claimed_role and principal.claimed_role != role.value:
            logger.info(
                "role.claim_ignored principal_id=%s claimed_role=%s role=%s",
                safe_log_identifier(principal.user_id, prefix="pid"),
                principal.claimed_role,
                role.value,
            )
        return Actor(user_id=principal.user_id, role=role)

    def bootstrap_admins(self, identity_ids: Iterable[str]) -> None:
        """Bind configured identities to admin unless they already hold a role."""
        for identity_id in identity_ids:
            identity_id = identity_id.strip()
            if not identity_id or self._store.get_user(identity_id) is not None:
                continue
            self._store.grant_role(identity_id, Role.ADMIN)
            logger.info("role.bootstrapped principal_id=%s role=admin", safe_log_identifier(identity_id, prefix="pid"))

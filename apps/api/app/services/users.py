"""User directory service layer."""

from app.domain.permissions import DIRECTORY_ROLES, ensure_role
from app.errors import ApiError
from app.repositories.memory import InMemoryStore, UserRecord
from app.schemas.auth import Actor, Role, UserProfile


class UserDirectoryService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_technicians(self, *, actor: Actor) -> list[UserProfile]:
        ensure_role(actor, DIRECTORY_ROLES, "Only admins and semiadmins can list technicians")
        return [to_profile(record) for record in self._store.list_users_by_role(Role.TECHNICIAN)]

    def get_profile(self, *, actor: Actor) -> UserProfile:
        record = self._store.get_user(actor.user_id)
        if record is None:
            raise ApiError(status_code=401, code="UNAUTHORIZED", message="No role is assigned to this identity")
        return to_profile(record)


def to_profile(record: UserRecord) -> UserProfile:
    return UserProfile(id=record.id, role=record.role, name=record.name, email=record.email)

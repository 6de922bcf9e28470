"""Authentication and role schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "admin"
    SEMIADMIN = "semiadmin"
    TECHNICIAN = "technician"
    VIEWER = "viewer"


class AuthPrincipal(BaseModel):
    """Identity verified by the token provider.

    ``claimed_role`` is whatever the token carried. It is kept for diagnostics
    only; permission checks always resolve the role through ``RoleAuthority``.
    """

    user_id: str = Field(min_length=1)
    email: str | None = None
    name: str | None = None
    claimed_role: str | None = None


class Actor(BaseModel):
    """Authenticated principal with its server-side role."""

    user_id: str = Field(min_length=1)
    role: Role


class UserProfile(BaseModel):
    id: str
    role: Role
    name: str | None = None
    email: str | None = None

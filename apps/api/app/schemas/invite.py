"""Invite API schemas."""

from datetime import datetime

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.auth import Role


class CreateInviteRequest(BaseModel):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role


class AcceptInviteRequest(BaseModel):
    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
    )

    token: str = Field(min_length=1)
    name: str | None = None


class Invite(BaseModel):
    id: str
    email: str
    role: Role
    created_by: str
    created_at: datetime
    expires_at: datetime
    used: bool


class CreateInviteResponse(BaseModel):
    invite: Invite
    token: str
    invite_path: str

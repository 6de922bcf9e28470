"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel

from app.schemas.job import JobStatus


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class TransitionErrorDetails(BaseModel):
    current_status: JobStatus
    attempted_status: JobStatus
    expected_status: JobStatus | None = None


class InvalidTransitionError(BaseModel):
    code: Literal["INVALID_TRANSITION"]
    message: str
    details: TransitionErrorDetails


class ForbiddenError(BaseModel):
    code: Literal["FORBIDDEN"]
    message: str
    details: dict[str, Any] | None = None


class NotATechnicianError(BaseModel):
    code: Literal["NOT_A_TECHNICIAN"]
    message: str
    details: dict[str, Any] | None = None


class NoLeakNotFoundError(BaseModel):
    code: Literal["RESOURCE_NOT_FOUND"]
    message: str


class StorageFailureError(BaseModel):
    code: Literal["STORAGE_FAILURE"]
    message: str


class InviteConflictError(BaseModel):
    code: Literal["INVITE_ALREADY_ACTIVE", "INVITE_NOT_ACTIVE", "ROLE_ALREADY_ASSIGNED"]
    message: str
    details: dict[str, Any] | None = None

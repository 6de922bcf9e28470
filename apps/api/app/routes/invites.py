"""Invite routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.routes.dependencies import get_authenticated_principal, get_current_actor, get_invite_service
from app.schemas.auth import Actor, AuthPrincipal, UserProfile
from app.schemas.error import ErrorResponse, ForbiddenError, InviteConflictError, NoLeakNotFoundError
from app.schemas.invite import AcceptInviteRequest, CreateInviteRequest, CreateInviteResponse
from app.services.invites import InviteService

router = APIRouter(prefix="/invites", tags=["Invites"])


@router.post(
    "",
    response_model=CreateInviteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        409: {"model": InviteConflictError},
    },
)
async def create_invite(
    payload: CreateInviteRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[InviteService, Depends(get_invite_service)],
) -> CreateInviteResponse:
    return service.create_invite(actor=actor, email=payload.email, role=payload.role)


@router.post(
    "/accept",
    response_model=UserProfile,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        404: {"model": NoLeakNotFoundError},
        409: {"model": InviteConflictError},
    },
)
async def accept_invite(
    payload: AcceptInviteRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[InviteService, Depends(get_invite_service)],
) -> UserProfile:
    # Accepting is how a role-less identity gets its role, so no actor here.
    return service.accept_invite(principal=principal, token=payload.token, name=payload.name)

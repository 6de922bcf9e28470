"""User directory routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.routes.dependencies import get_current_actor, get_user_directory_service
from app.schemas.auth import Actor, UserProfile
from app.schemas.error import ErrorResponse, ForbiddenError
from app.services.users import UserDirectoryService

router = APIRouter(tags=["Users"])


@router.get(
    "/technicians",
    response_model=list[UserProfile],
    responses={401: {"model": ErrorResponse}, 403: {"model": ForbiddenError}},
)
async def list_technicians(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[UserDirectoryService, Depends(get_user_directory_service)],
) -> list[UserProfile]:
    return service.list_technicians(actor=actor)


@router.get(
    "/me",
    response_model=UserProfile,
    responses={401: {"model": ErrorResponse}},
)
async def get_me(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[UserDirectoryService, Depends(get_user_directory_service)],
) -> UserProfile:
    return service.get_profile(actor=actor)

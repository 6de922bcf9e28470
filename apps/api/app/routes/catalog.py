"""Catalog routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.domain.catalog import DEVICE_TYPES, ISSUE_TYPES, TIME_SLOTS
from app.domain.job_fsm import STATUS_ORDER
from app.routes.dependencies import get_current_actor
from app.schemas.auth import Actor
from app.schemas.catalog import Catalog
from app.schemas.error import ErrorResponse
from app.schemas.job import PaymentMethod

router = APIRouter(tags=["Catalog"])


@router.get("/catalog", response_model=Catalog, responses={401: {"model": ErrorResponse}})
async def get_catalog(_: Annotated[Actor, Depends(get_current_actor)]) -> Catalog:
    return Catalog(
        device_types=list(DEVICE_TYPES),
        issue_types=list(ISSUE_TYPES),
        time_slots=list(TIME_SLOTS),
        payment_methods=list(PaymentMethod),
        statuses=list(STATUS_ORDER),
    )

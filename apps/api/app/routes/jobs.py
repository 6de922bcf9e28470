"""Job routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from app.routes.dependencies import (
    get_assignment_service,
    get_current_actor,
    get_history_service,
    get_job_service,
    get_request_correlation_id,
    get_transition_service,
)
from app.schemas.auth import Actor
from app.schemas.error import (
    ErrorResponse,
    ForbiddenError,
    InvalidTransitionError,
    NoLeakNotFoundError,
    NotATechnicianError,
    StorageFailureError,
)
from app.schemas.history import JobHistory
from app.schemas.job import AssignJobRequest, CreateJobRequest, Job, JobStatus, TransitionRequest
from app.services.assignments import AssignmentService
from app.services.history import HistoryService
from app.services.jobs import JobService
from app.services.transitions import TransitionAttachments, TransitionService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post(
    "",
    response_model=Job,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
    },
)
async def create_job(
    payload: CreateJobRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[JobService, Depends(get_job_service)],
) -> Job:
    return service.create_job(actor=actor, payload=payload)


@router.get(
    "",
    response_model=list[Job],
    responses={401: {"model": ErrorResponse}},
)
async def list_jobs(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[JobService, Depends(get_job_service)],
    job_status: Annotated[JobStatus | None, Query(alias="status")] = None,
    technician_id: Annotated[str | None, Query(alias="technicianId")] = None,
) -> list[Job]:
    return service.list_jobs(actor=actor, status=job_status, technician_id=technician_id)


@router.get(
    "/{jobId}",
    response_model=Job,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def get_job(
    job_id: Annotated[str, Path(alias="jobId")],
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[JobService, Depends(get_job_service)],
) -> Job:
    return service.get_job(actor=actor, job_id=job_id)


@router.post(
    "/{jobId}/status",
    response_model=Job,
    responses={
        400: {"model": InvalidTransitionError | NotATechnicianError | ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        404: {"model": NoLeakNotFoundError},
        500: {"model": StorageFailureError},
    },
)
async def transition_job(
    job_id: Annotated[str, Path(alias="jobId")],
    payload: TransitionRequest,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[TransitionService, Depends(get_transition_service)],
) -> Job:
    return service.apply_transition(
        job_id=job_id,
        requested_status=payload.status,
        actor=actor,
        attachments=TransitionAttachments(
            qc_data=payload.qc_data,
            payment_method=payload.payment_method,
            financials=payload.financials,
            technician_id=payload.technician_id,
        ),
        correlation_id=correlation_id,
    )


@router.post(
    "/{jobId}/assign",
    response_model=Job,
    responses={
        400: {"model": InvalidTransitionError | NotATechnicianError},
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        404: {"model": NoLeakNotFoundError},
        500: {"model": StorageFailureError},
    },
)
async def assign_job(
    job_id: Annotated[str, Path(alias="jobId")],
    payload: AssignJobRequest,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> Job:
    return service.assign(
        job_id=job_id,
        technician_id=payload.technician_id,
        actor=actor,
        correlation_id=correlation_id,
    )


@router.get(
    "/{jobId}/history",
    response_model=JobHistory,
    responses={401: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def get_job_history(
    job_id: Annotated[str, Path(alias="jobId")],
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[HistoryService, Depends(get_history_service)],
) -> JobHistory:
    return service.get_history(actor=actor, job_id=job_id)

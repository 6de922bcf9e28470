"""Dependency wiring for routes."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import Actor, AuthPrincipal
from app.services.assignments import AssignmentService
from app.services.history import HistoryService
from app.services.invites import InviteService
from app.services.jobs import JobService
from app.services.roles import RoleAuthority
from app.services.transitions import TransitionService
from app.services.users import UserDirectoryService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_request_correlation_id(request: Request) -> str:
    return _request_correlation_id(request)


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_role_authority(store: Annotated[InMemoryStore, Depends(get_store)]) -> RoleAuthority:
    return RoleAuthority(store)


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthPrincipal:
    """Validate bearer token and attach normalized principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error("Invalid or missing bearer token")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error(str(exc) or "Invalid bearer token") from exc

    request.state.auth_principal = principal
    return principal


async def get_current_actor(
    request: Request,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    authority: Annotated[RoleAuthority, Depends(get_role_authority)],
) -> Actor:
    """Resolve the caller's role server-side; token role claims are never used."""
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    safe_principal_id = safe_log_identifier(principal.user_id, prefix="pid")
    try:
        actor = authority.resolve_actor(principal)
    except ApiError:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s principal_id=%s reason=no_role",
            safe_correlation_id,
            request.method,
            request.url.path,
            safe_principal_id,
        )
        raise

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s role=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_principal_id,
        actor.role,
    )
    request.state.actor = actor
    return actor


def get_job_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> JobService:
    return JobService(store)


def get_transition_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> TransitionService:
    return TransitionService(store)


def get_assignment_service(
    transitions: Annotated[TransitionService, Depends(get_transition_service)],
) -> AssignmentService:
    return AssignmentService(transitions)


def get_history_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> HistoryService:
    return HistoryService(store)


def get_user_directory_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> UserDirectoryService:
    return UserDirectoryService(store)


def get_invite_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> InviteService:
    return InviteService(store, ttl=timedelta(hours=settings.invite_ttl_hours))

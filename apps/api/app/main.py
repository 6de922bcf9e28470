"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.routes import catalog_router, invites_router, jobs_router, users_router
from app.schemas.error import ErrorResponse
from app.services.roles import RoleAuthority


_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/v1/jobs": {"post": {"201", "400", "401", "403"}, "get": {"200", "400", "401"}},
    "/api/v1/jobs/{jobId}": {"get": {"200", "401", "404"}},
    "/api/v1/jobs/{jobId}/status": {"post": {"200", "400", "401", "403", "404", "500"}},
    "/api/v1/jobs/{jobId}/assign": {"post": {"200", "400", "401", "403", "404", "500"}},
    "/api/v1/jobs/{jobId}/history": {"get": {"200", "401", "404"}},
    "/api/v1/technicians": {"get": {"200", "401", "403"}},
    "/api/v1/me": {"get": {"200", "401"}},
    "/api/v1/invites": {"post": {"201", "400", "401", "403", "409"}},
    "/api/v1/invites/accept": {"post": {"200", "400", "401", "403", "404", "409"}},
    "/api/v1/catalog": {"get": {"200", "401"}},
}


def _apply_contract_response_codes(schema: dict) -> None:
    """Document exactly the response codes each endpoint can produce."""
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                responses.setdefault(status_code, {"description": "See API contract"})
            if "400" in allowed_codes and "content" not in responses["400"]:
                responses["400"]["content"] = {
                    "application/json": {"schema": {"$ref": "#/components/schemas/ErrorResponse"}}
                }


def create_app(store: InMemoryStore | None = None) -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="RepairFlow API", version="1.0.0")
    app.state.store = store if store is not None else InMemoryStore()
    RoleAuthority(app.state.store).bootstrap_admins(settings.bootstrap_admin_ids)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorResponse(
            code="VALIDATION_ERROR",
            message="Invalid request payload",
            details={
                "errors": [
                    {
                        "loc": [str(part) for part in error.get("loc", ())],
                        "msg": error.get("msg", ""),
                        "type": error.get("type", ""),
                    }
                    for error in exc.errors()
                ]
            },
        )
        return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))

    api_prefix = "/api/v1"
    app.include_router(jobs_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(invites_router, prefix=api_prefix)
    app.include_router(catalog_router, prefix=api_prefix)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        schema.setdefault("components", {}).setdefault("schemas", {}).setdefault(
            "ErrorResponse", ErrorResponse.model_json_schema()
        )
        _apply_contract_response_codes(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()

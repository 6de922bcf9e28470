"""Application exception types."""

from app.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


def not_found_error() -> ApiError:
    """No-leak 404 shared by missing and out-of-scope resources."""
    return ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")


def storage_failure_error() -> ApiError:
    return ApiError(status_code=500, code="STORAGE_FAILURE", message="Failed to persist job changes")


__all__ = ["ApiError", "not_found_error", "storage_failure_error"]

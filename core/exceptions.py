"""
Typed errors raised by the load building services.

Each error is an HTTPException so routers can let them propagate and FastAPI
renders the status code and detail without extra handlers.
"""
from fastapi import HTTPException


class LoadBuilderError(HTTPException):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)

    def __str__(self) -> str:
        return str(self.detail)


class ValidationError(LoadBuilderError):
    """Malformed or out-of-range numeric input, or a missing required string."""
    status_code = 422


class InvalidDimension(ValidationError):
    pass


class NotFound(LoadBuilderError):
    status_code = 404


class ProjectMismatch(LoadBuilderError):
    status_code = 409


class InvalidState(LoadBuilderError):
    """The load's status (or inventory flag) forbids the operation."""
    status_code = 409


class ConcurrentUpdate(LoadBuilderError):
    status_code = 409


class DependencyUnavailable(LoadBuilderError):
    status_code = 503


__all__ = [
    "LoadBuilderError",
    "ValidationError",
    "InvalidDimension",
    "NotFound",
    "ProjectMismatch",
    "InvalidState",
    "ConcurrentUpdate",
    "DependencyUnavailable",
]

"""
Structured exceptions and error responses for Cadence.

Provides consistent error handling across the engine and API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, Hashable, Optional, List, Sequence, Tuple
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cadence.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "cyclic_dependency")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class CadenceException(Exception):
    """Base exception for all Cadence errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(CadenceException):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class CyclicDependencyError(CadenceException):
    """The dependency graph of a project contains a cycle."""

    def __init__(self, cycle: Sequence[Tuple[Hashable, Hashable]]):
        path = " -> ".join(str(edge[0]) for edge in cycle)
        if cycle:
            path = f"{path} -> {cycle[-1][1]}"
        super().__init__(
            message=f"Cyclic dependency detected: {path}",
            error_code="cyclic_dependency",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[
                {
                    "loc": ["dependencies"],
                    "msg": f"Dependency {predecessor} -> {successor} is part of a cycle",
                    "type": "cycle_error",
                }
                for predecessor, successor, *_ in cycle
            ],
        )
        self.cycle = list(cycle)


# =============================================================================
# Exception Handlers
# =============================================================================

async def cadence_exception_handler(request: Request, exc: CadenceException) -> JSONResponse:
    """Handle CadenceException and return structured response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": None,
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(CadenceException, cadence_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

"""Structured error responses shared by the v1 routers.

Every handled failure is returned as
{"error": str, "code": str, "request_id": str}.
"""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"


def get_request_id(request: Request) -> str:
    """Get request_id from request state (set by RequestLoggingMiddleware)."""
    return getattr(request.state, "request_id", "unknown")


def error_response(
    status_code: int, code: str, error: Exception | str, request_id: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": str(error), "code": code, "request_id": request_id},
    )


def not_found(error: Exception, request_id: str) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, NOT_FOUND, error, request_id)


def validation_error(error: Exception, request_id: str) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR, error, request_id
    )


def _example(description: str, error: str, code: str) -> dict[str, Any]:
    return {
        "description": description,
        "content": {
            "application/json": {
                "example": {"error": error, "code": code, "request_id": "<uuid>"}
            }
        },
    }


def not_found_doc(entity: str) -> dict[str, Any]:
    """OpenAPI entry for a 404 response."""
    return _example(
        f"{entity} not found", f"{entity} not found: <id>", NOT_FOUND
    )


def validation_doc(example: str) -> dict[str, Any]:
    """OpenAPI entry for a 400 response."""
    return _example("Validation error", example, VALIDATION_ERROR)

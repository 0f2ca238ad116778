from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class SchedulingError(Exception):
    """Base class for failures detected by the scheduling core.

    Every subclass carries a human-readable ``reason`` and the HTTP status
    the presentation layer should answer with.
    """

    kind = "error"
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFoundError(SchedulingError):
    kind = "not_found"
    status_code = 404


class InvalidInputError(SchedulingError):
    kind = "invalid_input"
    status_code = 400


class ConflictError(SchedulingError):
    kind = "conflict"
    status_code = 409


class InvalidStateError(SchedulingError):
    kind = "invalid_state"
    status_code = 409


def create_error_response(error_message: str, kind: str = "error") -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message,
        "kind": kind,
    }

def create_success_response(data) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }

async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.reason, exc.kind)
    )

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail))
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as invalid input."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=InvalidInputError.status_code,
        content=create_error_response(problems or "Invalid request", InvalidInputError.kind)
    )

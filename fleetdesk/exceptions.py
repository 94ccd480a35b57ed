"""
Erreurs metier et handlers / Domain errors and exception handlers.

Chaque erreur porte un statut HTTP, un code stable et des details.
Every error carries an HTTP status, a stable error code and details.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Erreur applicative de base / Base application error."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "ERR_INTERNAL"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthenticationRequired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "ERR_AUTH"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "ERR_FORBIDDEN"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ERR_VALIDATION"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "ERR_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        super().__init__(message, {"resource": resource, "id": resource_id})


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ERR_CONFLICT"


class InsufficientStock(ConflictError):
    """Sortie superieure au stock / OUT movement larger than stock on hand."""

    error_code = "ERR_INSUFFICIENT_STOCK"

    def __init__(self, available: int, unit: str):
        super().__init__(
            f"Insufficient stock, available: {available} {unit}",
            {"available": available, "unit": unit},
        )


def _error_body(error_code: str, message: str, details: dict | None = None) -> dict:
    return {"error_code": error_code, "message": message, "details": details or {}}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error_code, exc.message, exc.details),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Format uniforme pour HTTPException / Uniform body for HTTPException."""
    error_code_map = {
        400: "ERR_VALIDATION",
        401: "ERR_AUTH",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        429: "ERR_RATE_LIMIT",
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error_code_map.get(exc.status_code, "ERR_HTTP"), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Corps invalide -> 400 / Invalid request body -> 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("ERR_VALIDATION", "Invalid request", {"errors": jsonable_errors(exc)}),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx peut contenir des exceptions non serialisables / ctx may hold non-serializable exceptions
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("ERR_INTERNAL", "Internal server error"),
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Brancher les handlers sur l'application / Register handlers on the app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

"""Domain error taxonomy and its HTTP rendering.

Services raise the exceptions below; the handlers registered by
:func:`register_exception_handlers` turn them into a stable JSON envelope::

    {"error": "<kind>", "message": "<human readable>", "details": ...}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class CampusShareError(Exception):
    """Base class for errors that map onto an API response."""

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFoundError(CampusShareError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidArgumentError(CampusShareError):
    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid argument"


class UnauthenticatedError(CampusShareError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access denied. No token provided."


class InvalidTokenError(UnauthenticatedError):
    kind = "invalid_token"
    default_message = "Invalid token."


class TokenExpiredError(UnauthenticatedError):
    kind = "token_expired"
    default_message = "Token expired."


class ForbiddenError(CampusShareError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied."


class ConflictError(CampusShareError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(CampusShareError):
    kind = "internal"
    default_message = "Internal server error"


def error_payload(kind: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the JSON body shared by every error response."""
    payload: dict[str, Any] = {"error": kind, "message": message}
    if details is not None:
        payload["details"] = details
    return payload


async def _handle_domain_error(request: Request, exc: CampusShareError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_payload(exc.kind, exc.message, exc.details)),
        headers=headers,
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(
            error_payload(InvalidArgumentError.kind, "Validation failed", exc.errors())
        ),
    )


async def _handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(InternalError.kind, InternalError.default_message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handlers to a FastAPI application."""
    app.add_exception_handler(CampusShareError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _handle_database_error)  # type: ignore[arg-type]

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import (
    BusinessValidationError,
    FieldError,
    FieldValidationError,
    NotFoundError,
    ReferentialIntegrityError,
)

logger = logging.getLogger("brewlog.errors")


def _field_from_loc(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts)


def request_validation_errors(exc: RequestValidationError) -> list[FieldError]:
    errors = []
    for error in exc.errors():
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(FieldError(field=_field_from_loc(error.get("loc", ())), message=message))
    return errors


def error_response(exc: Exception) -> JSONResponse:
    """Translate any exception raised while serving a request into the API error shape."""
    details: list[FieldError] = []
    headers = None

    if isinstance(exc, RequestValidationError):
        status_code, code, message = 400, "VALIDATION_ERROR", "One or more validation errors occurred"
        details = request_validation_errors(exc)
    elif isinstance(exc, FieldValidationError):
        status_code, code, message = 400, "VALIDATION_ERROR", str(exc)
        details = exc.errors
    elif isinstance(exc, BusinessValidationError):
        status_code, code, message = 400, "BUSINESS_VALIDATION_ERROR", str(exc)
    elif isinstance(exc, NotFoundError):
        status_code, code, message = 404, "NOT_FOUND", str(exc)
    elif isinstance(exc, ReferentialIntegrityError):
        status_code, code, message = 409, "REFERENTIAL_INTEGRITY_ERROR", str(exc)
    elif isinstance(exc, StarletteHTTPException):
        status_code, message, headers = exc.status_code, str(exc.detail), exc.headers
        code = HTTPStatus(exc.status_code).name
    else:
        status_code, code, message = 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred"

    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": [{"field": item.field, "message": item.message} for item in details],
            }
        },
    )


async def _handle_known_error(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return error_response(exc)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class in (
        RequestValidationError,
        FieldValidationError,
        BusinessValidationError,
        NotFoundError,
        ReferentialIntegrityError,
        StarletteHTTPException,
    ):
        app.add_exception_handler(exc_class, _handle_known_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)

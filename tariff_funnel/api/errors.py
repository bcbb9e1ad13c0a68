"""Translate exceptions into the failure envelope."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tariff_funnel.errors import FunnelError
from tariff_funnel.models.common import ErrorResponse, FieldError
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


def _field_name(location: tuple) -> str:
    parts = [str(part) for part in location if part not in ("body", "query", "path")]
    return ".".join(parts) or "anfrage"


def _message(error: dict) -> str:
    message = error.get("msg", "")
    # pydantic prefixes messages raised from validators
    return message.removeprefix("Value error, ")


async def funnel_error_handler(request: Request, exc: FunnelError) -> JSONResponse:
    logger.info(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error_code=exc.code,
    )
    body = ErrorResponse(nachricht=exc.message, fehlerCode=exc.code, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(feld=_field_name(tuple(error.get("loc", ()))), nachricht=_message(error))
        for error in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, errors=len(errors))
    body = ErrorResponse(
        nachricht="Validierungsfehler",
        fehlerCode="VALIDATION_ERROR",
        fehler=errors,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("request_crashed", path=request.url.path, error=str(exc), exc_info=exc)
    body = ErrorResponse(nachricht="Interner Serverfehler", fehlerCode="INTERNAL_ERROR")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump(mode="json")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FunnelError, funnel_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

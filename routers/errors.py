"""Translate errors into JSON error responses of the form ``{"error": message}``."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services import GatewaySyncError
from utils import get_logger, log_exception

logger = get_logger(__name__)

_REQUEST_PARTS = ("body", "query", "path", "header")


async def gateway_sync_error_handler(request: Request, exc: GatewaySyncError) -> JSONResponse:
    logger.info(
        "Request failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=exc.message,
        status_code=exc.http_status,
    )
    return JSONResponse(status_code=exc.http_status, content={"error": exc.message})


def format_validation_errors(exc: RequestValidationError) -> str:
    """Flatten pydantic errors to ``field: message`` pairs, e.g. ``token: Field required``."""
    parts = []
    for error in exc.errors():
        loc = [str(item) for item in error.get("loc", ()) if item not in _REQUEST_PARTS]
        message = error.get("msg", "Invalid value")
        parts.append(f"{'.'.join(loc)}: {message}" if loc else message)
    return "; ".join(parts) or "Invalid request"


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc)
    logger.info("Rejected invalid request", path=request.url.path, error=message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log_exception(logger, exc, "Unhandled error while serving request", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewaySyncError, gateway_sync_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

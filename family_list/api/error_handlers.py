"""Global exception handlers.

Domain errors become ``{"error": {"kind", "message"}}`` with their own status,
request validation failures become a 400 ``ValidationError`` with field
details, and anything else is a 500 that never leaks internals.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import FamilyListError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    @app.exception_handler(FamilyListError)
    async def domain_error_handler(request: Request, exc: FamilyListError):
        logger.info(
            f"{exc.kind}: {exc.message}",
            extra={"error_kind": exc.kind, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"kind": "InternalError", "message": "An unexpected error occurred"}},
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "kind": "ValidationError",
            "message": "Invalid request data",
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }

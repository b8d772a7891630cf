"""
Error envelope for the HTTP API.

Every failure is returned as ``{"error": {"code", "message", "details?"}}``:
domain errors keep their own code and status, malformed requests become
422 VALIDATION_ERROR with one entry per offending field, and anything
unexpected is a 500 INTERNAL_ERROR.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ErrorCode, TrainingLoadError

logger = logging.getLogger(__name__)

REQUEST_VALIDATION_STATUS = 422


def create_error_response(
    status_code: int,
    code: Union[ErrorCode, str],
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Build the error envelope; ``details`` is omitted when empty."""
    error: Dict[str, Any] = {
        "code": code.value if isinstance(code, ErrorCode) else code,
        "message": message,
    }
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic error dicts to ``field``/``message``/``type`` entries.

    ``field`` is the dotted location, e.g. ``query.days`` or
    ``body.session.durationSeconds``.
    """
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in errors
    ]


async def training_load_error_handler(request: Request, exc: TrainingLoadError) -> JSONResponse:
    """Domain errors carry their own status and code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected: {exc.code.value} {exc.message}")
    return create_error_response(exc.status_code, exc.code, exc.message, exc.details)


async def request_validation_error_handler(
    request: Request,
    exc: Union[RequestValidationError, PydanticValidationError],
) -> JSONResponse:
    """Query, path or body values that fail schema validation."""
    errors = field_errors(exc.errors())
    logger.debug(
        f"{request.method} {request.url.path} failed validation on "
        f"{', '.join(e['field'] for e in errors)}"
    )
    return create_error_response(
        REQUEST_VALIDATION_STATUS,
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        {"errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return create_error_response(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope handlers on ``app``."""
    app.add_exception_handler(TrainingLoadError, training_load_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(PydanticValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

"""Response envelope and exception handlers shared by every router.

Every response, success or failure, has the same shape::

    {"status": 200, "message": "...", "data": {...}}

Failures add ``kind`` (the error taxonomy) and, where the failure carries
them, ``details``; ``data`` is always empty on failure.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from pydantic import BaseModel, Field

from shared.errors import HTTP_STATUS, DomainError, ErrorKind, classify

logger = structlog.get_logger(__name__)


class Envelope(BaseModel):
    status: int = 200
    message: str
    data: Any = Field(default_factory=dict)


def ok(message: str, data: Any = None, status: int = 200) -> JSONResponse:
    body = Envelope(status=status, message=message, data=data if data is not None else {})
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


def error_response(exc: Exception) -> JSONResponse:
    kind, message, details = classify(exc)
    status = HTTP_STATUS[kind]

    if kind == ErrorKind.INTERNAL:
        logger.error("Request failed", kind=kind.value, error=message, exc_info=exc)
    else:
        logger.warning("Request rejected", kind=kind.value, error=message)

    content = {"status": status, "kind": kind.value, "message": message, "data": {}}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


def _request_validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return ", ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain and framework exceptions as error envelopes."""

    async def _handle(request: Request, exc: Exception) -> JSONResponse:  # noqa: ARG001
        return error_response(exc)

    async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
        logger.warning("Request rejected", kind=ErrorKind.INVALID_INPUT.value, path=request.url.path)
        return JSONResponse(
            status_code=400,
            content={
                "status": 400,
                "kind": ErrorKind.INVALID_INPUT.value,
                "message": _request_validation_message(exc),
                "data": {},
            },
        )

    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    for exc_cls in (DomainError, ValidationError, ObjectNotFoundError, ExpectedVersionError):
        app.add_exception_handler(exc_cls, _handle)
    app.add_exception_handler(Exception, _handle)

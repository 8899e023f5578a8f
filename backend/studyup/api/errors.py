from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studyup.core.errors import StudyUpError
from studyup.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = get_logger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


def error_response(
    message: str,
    status_code: int,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the `{error: ...}` body every failure shares."""
    content: dict[str, str] = {"error": message}
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def handle_studyup_error(request: Request, exc: StudyUpError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "%s on %s: %s",
        type(exc).__name__,
        request.url.path,
        exc.detail,
        extra={"status_code": exc.status_code},
    )
    return error_response(exc.public_message, exc.status_code, _request_id(request))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Invalid request body on %s: %s", request.url.path, exc.errors())
    return error_response("Invalid request body", status.HTTP_400_BAD_REQUEST, _request_id(request))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        str(exc.detail),
        exc.status_code,
        _request_id(request),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudyUpError, handle_studyup_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)

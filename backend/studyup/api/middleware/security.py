from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from studyup.api.errors import UNEXPECTED_ERROR, error_response
from studyup.utils.logging import get_logger, request_id_var

if TYPE_CHECKING:
    from fastapi import Request
    from starlette.types import ASGIApp

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class SecurityMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and add essential security headers.

    The id is echoed in `X-Request-ID` and in error bodies so a user-facing
    failure can be matched with the server log line carrying the detail.
    Exceptions no handler claimed become a generic JSON 500 here, so CORS
    headers still get applied by the outer middleware.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming[:64] if incoming else uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error on %s %s", request.method, request.url.path)
                response = error_response(UNEXPECTED_ERROR, 500, request_id)

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            if request.url.scheme == "https":
                response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"

            logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
            return response
        finally:
            request_id_var.reset(token)

from __future__ import annotations

from fastapi import status


class StudyUpError(Exception):
    """Base class for failures surfaced to API callers.

    `public_message` is what the caller sees; `args[0]` may carry more
    detail and is only logged.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        *,
        public_message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail or public_message or self.public_message)
        if public_message is not None:
            self.public_message = public_message
        if status_code is not None:
            self.status_code = status_code

    @property
    def detail(self) -> str:
        return str(self.args[0]) if self.args else self.public_message


class InvalidRequest(StudyUpError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request"

    def __init__(self, message: str) -> None:
        super().__init__(message, public_message=message)


class ConfigurationError(StudyUpError):
    public_message = "Service is not configured"


class UpstreamError(StudyUpError):
    """Non-2xx answer from the generation API; keeps the upstream status."""

    public_message = "Failed to generate response from Gemini"

    def __init__(self, upstream_status: int, body: str = "") -> None:
        super().__init__(
            f"Gemini API returned {upstream_status}: {body[:500]}",
            status_code=upstream_status,
        )
        self.upstream_status = upstream_status
        self.body = body


class GenerationBlocked(StudyUpError):
    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or "unknown reason"
        super().__init__(
            public_message=(
                "No response generated. This might be due to safety settings. "
                f"Reason: {self.reason}"
            ),
        )


class StoreError(StudyUpError):
    public_message = "Failed to read from the database"


class NotFound(StudyUpError):
    def __init__(self, what: str) -> None:
        super().__init__(public_message=f"{what} not found")


class SchemaError(StudyUpError):
    public_message = "The AI model returned a malformed response"


class InternalError(StudyUpError):
    pass

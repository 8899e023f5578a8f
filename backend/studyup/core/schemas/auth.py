from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from studyup.core.models.base import AppBaseModel


class AuthUser(AppBaseModel):
    """Signed-in student resolved from a Supabase JWT."""

    id: UUID
    email: str
    role: str | None = None

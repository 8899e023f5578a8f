from __future__ import annotations

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class AppBaseModel(PydanticBaseModel):
    """Base model for all domain models."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
    )


class ExternalModel(PydanticBaseModel):
    """Base model for payloads produced by third parties.

    Unknown keys are dropped so upstream additions never break parsing.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

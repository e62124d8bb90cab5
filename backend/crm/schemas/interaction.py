"""Interaction schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.schemas.common import require_text


class InteractionPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: str
    interaction_type: str
    description: str
    status: str
    comments: str = ""

    @field_validator("date", "interaction_type", "description", "status")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value)


class Interaction(InteractionPayload):
    id: str = Field(..., min_length=1)

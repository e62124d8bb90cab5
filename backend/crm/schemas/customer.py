"""Customer schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.schemas.common import require_text
from crm.schemas.interaction import Interaction
from crm.schemas.purchase import Purchase


class CustomerPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    company: str
    email: str
    phone: str

    @field_validator("name", "company", "email", "phone")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value)


class Customer(CustomerPayload):
    """Customer record with embedded copies of its interactions and purchases."""

    id: str = Field(..., min_length=1)
    interactions: list[Interaction] = Field(default_factory=list)
    purchases: list[Purchase] = Field(default_factory=list)

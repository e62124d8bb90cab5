"""Purchase schemas.

Quantity and price travel as text in requests but are stored as
non-negative integers (price in the smallest currency unit).
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.schemas.common import require_text

_AMOUNT_RE = re.compile(r"[0-9]+")


class PurchasePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: str
    product: str
    quantity: int = Field(..., ge=0)
    price: int = Field(..., ge=0)

    @field_validator("date", "product")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return require_text(value)

    @field_validator("quantity", "price", mode="before")
    @classmethod
    def _parse_amount(cls, value):
        # bool is an int subclass; "true" is not an amount
        if isinstance(value, bool):
            raise ValueError("must be a non-negative integer")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and _AMOUNT_RE.fullmatch(value.strip()):
            return int(value.strip())
        raise ValueError("must be a non-negative integer")


class Purchase(PurchasePayload):
    id: str = Field(..., min_length=1)

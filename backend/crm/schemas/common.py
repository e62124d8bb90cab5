"""Shared schema helpers and small response bodies."""

from pydantic import BaseModel


def require_text(value: str) -> str:
    """Reject blank strings; the original value is kept as given."""
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class IdResponse(BaseModel):
    id: str


class ConsistencyReport(BaseModel):
    """Ids present on one side of the customer/child-store pair only."""

    dangling_interactions: list[str]
    dangling_purchases: list[str]
    orphaned_interactions: list[str]
    orphaned_purchases: list[str]
    consistent: bool

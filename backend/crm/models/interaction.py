"""Interaction table."""

from crm.db.base import Base
from crm.models.mixins import KeyValueRecordMixin, TimestampMixin


class InteractionRecord(KeyValueRecordMixin, TimestampMixin, Base):
    __tablename__ = "interactions"

    def __repr__(self) -> str:
        return f"<InteractionRecord {self.key}>"

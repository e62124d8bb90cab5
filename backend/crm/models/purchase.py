"""Purchase table."""

from crm.db.base import Base
from crm.models.mixins import KeyValueRecordMixin, TimestampMixin


class PurchaseRecord(KeyValueRecordMixin, TimestampMixin, Base):
    __tablename__ = "purchases"

    def __repr__(self) -> str:
        return f"<PurchaseRecord {self.key}>"

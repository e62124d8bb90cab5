"""Customer table."""

from crm.db.base import Base
from crm.models.mixins import KeyValueRecordMixin, TimestampMixin


class CustomerRecord(KeyValueRecordMixin, TimestampMixin, Base):
    __tablename__ = "customers"

    def __repr__(self) -> str:
        return f"<CustomerRecord {self.key}>"

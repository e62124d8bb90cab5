"""SQLAlchemy tables backing the entity stores."""

from crm.models.customer import CustomerRecord
from crm.models.interaction import InteractionRecord
from crm.models.purchase import PurchaseRecord

__all__ = [
    "CustomerRecord",
    "InteractionRecord",
    "PurchaseRecord",
]

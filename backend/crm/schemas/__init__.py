from crm.schemas.customer import Customer, CustomerPayload
from crm.schemas.interaction import Interaction, InteractionPayload
from crm.schemas.purchase import Purchase, PurchasePayload
from crm.schemas.common import ConsistencyReport, IdResponse

__all__ = [
    "Customer", "CustomerPayload",
    "Interaction", "InteractionPayload",
    "Purchase", "PurchasePayload",
    "ConsistencyReport", "IdResponse",
]

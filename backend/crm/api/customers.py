"""Customer endpoints, including the nested interaction/purchase writes."""

from fastapi import APIRouter, Depends, status

from crm.core.deps import get_manager
from crm.schemas import (
    Customer,
    CustomerPayload,
    IdResponse,
    Interaction,
    InteractionPayload,
    Purchase,
    PurchasePayload,
)
from crm.services.relationships import RelationshipManager

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=list[Customer])
async def list_customers(manager: RelationshipManager = Depends(get_manager)):
    """List all customers in store order."""
    return await manager.list_customers()


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return await manager.get_customer(customer_id)


@router.post("", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def add_customer(
    body: CustomerPayload,
    manager: RelationshipManager = Depends(get_manager),
):
    """Create a customer keyed by its email; an existing email is overwritten."""
    return await manager.add_customer(body)


@router.put("", response_model=Customer)
async def update_customer(
    body: Customer,
    manager: RelationshipManager = Depends(get_manager),
):
    """Replace an existing customer record, embedded lists included."""
    return await manager.update_customer(body)


@router.delete("/{customer_id}", response_model=IdResponse)
async def delete_customer(
    customer_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return IdResponse(id=await manager.delete_customer(customer_id))


@router.get("/{customer_id}/interactions", response_model=list[Interaction])
async def list_customer_interactions(
    customer_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return await manager.list_customer_interactions(customer_id)


@router.post(
    "/{customer_id}/interactions",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_interaction(
    customer_id: str,
    body: InteractionPayload,
    manager: RelationshipManager = Depends(get_manager),
):
    return IdResponse(id=await manager.add_interaction(customer_id, body))


@router.get("/{customer_id}/purchases", response_model=list[Purchase])
async def list_customer_purchases(
    customer_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return await manager.list_customer_purchases(customer_id)


@router.post(
    "/{customer_id}/purchases",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_purchase(
    customer_id: str,
    body: PurchasePayload,
    manager: RelationshipManager = Depends(get_manager),
):
    return IdResponse(id=await manager.add_purchase(customer_id, body))

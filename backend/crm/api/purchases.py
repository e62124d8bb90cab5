"""Top-level Purchase endpoints."""

from fastapi import APIRouter, Depends

from crm.core.deps import get_manager
from crm.schemas import IdResponse, Purchase
from crm.services.relationships import RelationshipManager

router = APIRouter(prefix="/purchases", tags=["purchases"])


@router.get("", response_model=list[Purchase])
async def list_purchases(manager: RelationshipManager = Depends(get_manager)):
    return await manager.list_purchases()


@router.get("/{purchase_id}", response_model=Purchase)
async def get_purchase(
    purchase_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return await manager.get_purchase(purchase_id)


@router.put("", response_model=Purchase)
async def update_purchase(
    body: Purchase,
    manager: RelationshipManager = Depends(get_manager),
):
    """Replace a purchase here and in every customer that embeds it."""
    return await manager.update_purchase(body)


@router.delete("/{purchase_id}", response_model=IdResponse)
async def delete_purchase(
    purchase_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return IdResponse(id=await manager.delete_purchase(purchase_id))

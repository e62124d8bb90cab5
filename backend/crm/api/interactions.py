"""Top-level Interaction endpoints."""

from fastapi import APIRouter, Depends

from crm.core.deps import get_manager
from crm.schemas import IdResponse, Interaction
from crm.services.relationships import RelationshipManager

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.get("", response_model=list[Interaction])
async def list_interactions(manager: RelationshipManager = Depends(get_manager)):
    return await manager.list_interactions()


@router.get("/{interaction_id}", response_model=Interaction)
async def get_interaction(
    interaction_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return await manager.get_interaction(interaction_id)


@router.put("", response_model=Interaction)
async def update_interaction(
    body: Interaction,
    manager: RelationshipManager = Depends(get_manager),
):
    """Replace an interaction here and in every customer that embeds it."""
    return await manager.update_interaction(body)


@router.delete("/{interaction_id}", response_model=IdResponse)
async def delete_interaction(
    interaction_id: str,
    manager: RelationshipManager = Depends(get_manager),
):
    return IdResponse(id=await manager.delete_interaction(interaction_id))

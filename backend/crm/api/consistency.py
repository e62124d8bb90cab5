"""Consistency report between customers and the child stores."""

from fastapi import APIRouter, Depends

from crm.core.deps import get_manager
from crm.schemas import ConsistencyReport
from crm.services.relationships import RelationshipManager

router = APIRouter(prefix="/consistency", tags=["consistency"])


@router.get("", response_model=ConsistencyReport)
async def get_consistency_report(manager: RelationshipManager = Depends(get_manager)):
    """Embedded ids missing from the child stores, and child records no customer embeds."""
    return await manager.consistency_report()

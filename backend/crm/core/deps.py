"""Dependency injection: storage backend selection and the manager."""

from collections.abc import AsyncIterator

from fastapi import Depends

from crm.core.config import settings
from crm.db.base import get_sessionmaker
from crm.services.relationships import RelationshipManager
from crm.stores import MemoryStorage, SqlStorage, Storage

# Process-wide in-memory backend (replace with STORAGE_BACKEND=sql in production)
_memory_storage = MemoryStorage()


async def get_storage() -> AsyncIterator[Storage]:
    """Yield the configured storage; SQL storage gets one session per request."""
    if settings.STORAGE_BACKEND == "memory":
        yield _memory_storage
        return

    async with get_sessionmaker()() as session:
        yield SqlStorage(session)


def get_manager(storage: Storage = Depends(get_storage)) -> RelationshipManager:
    return RelationshipManager(storage, cascade_delete=settings.CASCADE_DELETE)

"""EntityStore interface.

An ordered key-value map holding one entity kind. Missing keys are
reported as ``None``; stores never check references into other stores.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class EntityStore(ABC, Generic[T]):
    """Abstract ordered key-value store for one entity kind."""

    @abstractmethod
    async def get(self, key: str, *, for_update: bool = False) -> T | None:
        """Return the entity stored under ``key``, or None.

        ``for_update`` asks the backend to lock the entry until the current
        unit of work ends, where it can.
        """

    @abstractmethod
    async def list(self) -> list[T]:
        """Return every entity in insertion order."""

    @abstractmethod
    async def insert(self, key: str, entity: T) -> T | None:
        """Store ``entity`` under ``key``, overwriting silently.

        Returns the previous value, or None if the key was new.
        """

    @abstractmethod
    async def remove(self, key: str) -> T | None:
        """Delete ``key`` and return the removed entity, or None."""

"""In-memory EntityStore for development and testing."""

from crm.stores.base import EntityStore, T


class InMemoryEntityStore(EntityStore[T]):
    """Dict-backed store.

    Entities are copied in and out so callers never hold a reference to
    stored state. Overwriting a key keeps its original position.
    """

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    async def get(self, key: str, *, for_update: bool = False) -> T | None:
        entity = self._items.get(key)
        return None if entity is None else entity.model_copy(deep=True)

    async def list(self) -> list[T]:
        return [entity.model_copy(deep=True) for entity in self._items.values()]

    async def insert(self, key: str, entity: T) -> T | None:
        previous = self._items.get(key)
        self._items[key] = entity.model_copy(deep=True)
        return previous

    async def remove(self, key: str) -> T | None:
        return self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)

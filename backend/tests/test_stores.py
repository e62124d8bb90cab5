"""Unit tests for the in-memory entity store and storage bundle."""

import pytest

from crm.schemas import Interaction
from crm.stores import InMemoryEntityStore, MemoryStorage


def _interaction(id_: str, status: str = "open") -> Interaction:
    return Interaction(
        id=id_,
        date="2024-01-01",
        interaction_type="email",
        description=f"about {id_}",
        status=status,
    )


@pytest.mark.asyncio
async def test_get_missing_returns_none():
    store = InMemoryEntityStore[Interaction]()
    assert await store.get("nope") is None
    assert await store.remove("nope") is None


@pytest.mark.asyncio
async def test_insert_is_upsert_and_returns_previous():
    store = InMemoryEntityStore[Interaction]()

    assert await store.insert("a", _interaction("a")) is None
    previous = await store.insert("a", _interaction("a", status="closed"))

    assert previous.status == "open"
    assert (await store.get("a")).status == "closed"
    assert len(store) == 1


@pytest.mark.asyncio
async def test_list_keeps_first_insertion_position():
    store = InMemoryEntityStore[Interaction]()
    for key in ("b", "a", "c"):
        await store.insert(key, _interaction(key))
    await store.insert("b", _interaction("b", status="closed"))

    assert [i.id for i in await store.list()] == ["b", "a", "c"]


@pytest.mark.asyncio
async def test_remove_returns_removed_entity():
    store = InMemoryEntityStore[Interaction]()
    await store.insert("a", _interaction("a"))

    removed = await store.remove("a")

    assert removed.id == "a"
    assert await store.get("a") is None


@pytest.mark.asyncio
async def test_stored_entities_are_isolated_from_callers():
    store = InMemoryEntityStore[Interaction]()
    entity = _interaction("a")
    await store.insert("a", entity)

    entity.status = "mutated"
    fetched = await store.get("a")
    fetched.status = "mutated again"

    assert (await store.get("a")).status == "open"


@pytest.mark.asyncio
async def test_memory_storage_is_not_atomic():
    storage = MemoryStorage()
    assert storage.atomic is False

    with pytest.raises(RuntimeError):
        async with storage.unit_of_work():
            await storage.interactions.insert("a", _interaction("a"))
            raise RuntimeError("boom")

    # no rollback: the write stays
    assert await storage.interactions.get("a") is not None

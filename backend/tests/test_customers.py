"""Unit tests for customer operations on the relationship manager."""

import logging

import pytest

from crm.core.errors import InvalidPayloadError, NotFoundError
from crm.core.identity import generate_id
from crm.schemas import CustomerPayload

from tests.conftest import ADA, INTRO_CALL


@pytest.mark.asyncio
async def test_add_then_get_customer(manager):
    created = await manager.add_customer(ADA)

    assert created.id == generate_id("ada@x.com")
    assert created.interactions == []
    assert created.purchases == []
    assert await manager.get_customer(created.id) == created


@pytest.mark.asyncio
async def test_add_customer_accepts_model_payload(manager):
    created = await manager.add_customer(CustomerPayload(**ADA))
    assert created.email == "ada@x.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, {}, [], "ada", {"name": "Ada"}])
async def test_add_customer_rejects_invalid_payload(manager, storage, payload):
    with pytest.raises(InvalidPayloadError):
        await manager.add_customer(payload)
    assert await storage.customers.list() == []


@pytest.mark.asyncio
async def test_same_email_overwrites_customer(manager):
    first = await manager.add_customer(ADA)
    await manager.add_interaction(first.id, INTRO_CALL)

    second = await manager.add_customer({**ADA, "name": "Ada L."})

    assert second.id == first.id
    customers = await manager.list_customers()
    assert len(customers) == 1
    assert customers[0].name == "Ada L."
    # history is lost on re-add
    assert customers[0].interactions == []


@pytest.mark.asyncio
async def test_get_missing_customer(manager):
    with pytest.raises(NotFoundError) as exc_info:
        await manager.get_customer("missing")

    assert exc_info.value.entity_id == "missing"
    assert str(exc_info.value) == "Customer with id=missing not found"


# ── Update ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_replaces_whole_record(manager):
    created = await manager.add_customer(ADA)
    await manager.add_interaction(created.id, INTRO_CALL)
    customer = await manager.get_customer(created.id)

    updated = await manager.update_customer(
        customer.model_copy(update={"phone": "777", "interactions": []})
    )

    fetched = await manager.get_customer(created.id)
    assert fetched == updated
    assert fetched.phone == "777"
    assert fetched.interactions == []
    # child store is left alone
    assert len(await manager.list_interactions()) == 1


@pytest.mark.asyncio
async def test_update_missing_customer_does_not_insert(manager):
    with pytest.raises(NotFoundError):
        await manager.update_customer({**ADA, "id": "ghost"})

    assert await manager.list_customers() == []


@pytest.mark.asyncio
async def test_update_requires_id(manager):
    with pytest.raises(InvalidPayloadError):
        await manager.update_customer(ADA)


# ── Delete ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_customer(manager):
    created = await manager.add_customer(ADA)

    assert await manager.delete_customer(created.id) == created.id

    with pytest.raises(NotFoundError):
        await manager.get_customer(created.id)
    with pytest.raises(NotFoundError):
        await manager.add_interaction(created.id, INTRO_CALL)


@pytest.mark.asyncio
async def test_delete_missing_customer(manager):
    with pytest.raises(NotFoundError):
        await manager.delete_customer("missing")


@pytest.mark.asyncio
async def test_delete_leaves_children_orphaned(manager):
    created = await manager.add_customer(ADA)
    interaction_id = await manager.add_interaction(created.id, INTRO_CALL)

    await manager.delete_customer(created.id)

    assert (await manager.get_interaction(interaction_id)).id == interaction_id
    report = await manager.consistency_report()
    assert report.orphaned_interactions == [interaction_id]
    assert report.consistent is False


@pytest.mark.asyncio
async def test_invalid_payload_is_logged(manager, caplog):
    with caplog.at_level(logging.WARNING, logger="crm.services.relationships"):
        with pytest.raises(InvalidPayloadError):
            await manager.add_customer({**ADA, "email": ""})

    assert "Invalid payload for CustomerPayload" in caplog.text
    assert "email" in caplog.text

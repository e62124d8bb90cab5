"""Unit tests for purchase operations on the relationship manager."""

import pytest

from crm.core.errors import InvalidPayloadError, NotFoundError
from crm.core.identity import generate_id

from tests.conftest import ADA, WIDGETS


@pytest.mark.asyncio
async def test_add_purchase_writes_both_stores(manager):
    customer = await manager.add_customer(ADA)

    purchase_id = await manager.add_purchase(customer.id, WIDGETS)

    assert purchase_id == generate_id("2024-02-01|widget|3|1250")
    embedded = await manager.list_customer_purchases(customer.id)
    assert len(embedded) == 1
    assert embedded[0].quantity == 3
    assert embedded[0].price == 1250
    assert await manager.get_purchase(purchase_id) == embedded[0]


@pytest.mark.asyncio
async def test_add_purchase_text_and_int_amounts_share_id(manager):
    customer = await manager.add_customer(ADA)

    from_text = await manager.add_purchase(customer.id, WIDGETS)
    from_ints = await manager.add_purchase(customer.id, {**WIDGETS, "quantity": 3, "price": 1250})

    assert from_text == from_ints
    assert len(await manager.list_purchases()) == 1


@pytest.mark.asyncio
async def test_add_purchase_rejects_bad_amount(manager, storage):
    customer = await manager.add_customer(ADA)

    with pytest.raises(InvalidPayloadError) as exc_info:
        await manager.add_purchase(customer.id, {**WIDGETS, "price": "12.50"})

    assert "price" in exc_info.value.detail
    assert await storage.purchases.list() == []


@pytest.mark.asyncio
async def test_add_purchase_unknown_customer(manager, storage):
    with pytest.raises(NotFoundError):
        await manager.add_purchase("missing", WIDGETS)
    assert await storage.purchases.list() == []


@pytest.mark.asyncio
async def test_update_purchase_syncs_embedded_copy(manager):
    customer = await manager.add_customer(ADA)
    purchase_id = await manager.add_purchase(customer.id, WIDGETS)
    purchase = await manager.get_purchase(purchase_id)

    updated = await manager.update_purchase(purchase.model_copy(update={"quantity": 4}))

    assert updated.id == purchase_id
    assert (await manager.get_purchase(purchase_id)).quantity == 4
    assert (await manager.list_customer_purchases(customer.id))[0].quantity == 4


@pytest.mark.asyncio
async def test_update_missing_purchase(manager):
    with pytest.raises(NotFoundError):
        await manager.update_purchase({**WIDGETS, "id": "ghost"})


@pytest.mark.asyncio
async def test_delete_purchase(manager):
    customer = await manager.add_customer(ADA)
    purchase_id = await manager.add_purchase(customer.id, WIDGETS)

    await manager.delete_purchase(purchase_id)

    assert await manager.list_purchases() == []
    assert await manager.list_customer_purchases(customer.id) == []
    with pytest.raises(NotFoundError):
        await manager.delete_purchase(purchase_id)

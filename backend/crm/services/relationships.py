"""Customer / Interaction / Purchase write protocols.

A customer holds full copies of its interactions and purchases, and the
same records are also kept in their own top-level stores under the same
id. Every operation here that touches a nested entity writes the customer
store first and the child store second, inside one unit of work. Whether
that sequence is atomic depends on the storage: on storage that cannot
roll back, a failure after the first write raises ``PartialWriteError`` and
leaves the completed writes in place.

Writes are serialized per customer and per child id inside the process,
and customer rows are read with a row lock where the storage supports it,
so overlapping requests cannot drop each other's embedded entries.

Ids are content hashes, so adding an entity whose hashed field matches an
existing one overwrites the earlier record.
"""

import asyncio
import logging
from collections.abc import Mapping
from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial
from typing import Any, TypeVar
from weakref import WeakValueDictionary

from pydantic import BaseModel, ValidationError

from crm.core.errors import InvalidPayloadError, NotFoundError, PartialWriteError
from crm.core.identity import generate_id, purchase_key
from crm.schemas import (
    ConsistencyReport,
    Customer,
    CustomerPayload,
    Interaction,
    InteractionPayload,
    Purchase,
    PurchasePayload,
)
from crm.stores import EntityStore, Storage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Shared by every manager in the process; a lock lives while someone holds it.
_write_locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()


def _lock_for(key: str) -> asyncio.Lock:
    lock = _write_locks.get(key)
    if lock is None:
        lock = _write_locks[key] = asyncio.Lock()
    return lock


@asynccontextmanager
async def _serialized(*keys: str):
    """Hold the write locks for ``keys``, acquired in the order given."""
    async with AsyncExitStack() as stack:
        for key in dict.fromkeys(keys):
            await stack.enter_async_context(_lock_for(key))
        yield


def _customer_key(customer_id: str) -> str:
    return f"customer:{customer_id}"


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
        for err in exc.errors()
    )


def validate_payload(schema: type[M], payload: Any) -> M:
    """Validate ``payload`` against ``schema`` before any store is touched.

    Accepts a mapping or a pydantic model. Empty or missing payloads and
    schema failures raise InvalidPayloadError.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    if not payload or not isinstance(payload, Mapping):
        logger.warning("Invalid payload for %s: empty or not a mapping", schema.__name__)
        raise InvalidPayloadError("Invalid payload")
    try:
        return schema.model_validate(dict(payload))
    except ValidationError as exc:
        detail = _describe(exc)
        logger.warning("Invalid payload for %s: %s", schema.__name__, detail)
        raise InvalidPayloadError(detail) from exc


class RelationshipManager:
    """Keeps customers' embedded lists in step with the child stores."""

    def __init__(self, storage: Storage, cascade_delete: bool = False):
        self._storage = storage
        self._cascade_delete = cascade_delete

    # ── Customers ──────────────────────────────────

    async def list_customers(self) -> list[Customer]:
        return await self._storage.customers.list()

    async def get_customer(self, customer_id: str) -> Customer:
        return await self._load_customer(customer_id)

    async def add_customer(self, payload: Any) -> Customer:
        """Create a customer keyed by the hash of its email.

        Re-adding an email replaces the earlier customer, history included.
        """
        data = validate_payload(CustomerPayload, payload)
        customer = Customer(id=generate_id(data.email), **data.model_dump())

        async with _serialized(_customer_key(customer.id)):
            async with self._storage.unit_of_work():
                previous = await self._storage.customers.insert(customer.id, customer)

        if previous is not None:
            logger.warning(
                "Customer id=%s overwritten by add (%d interactions, %d purchases dropped)",
                customer.id,
                len(previous.interactions),
                len(previous.purchases),
            )
        logger.info("Customer added: id=%s", customer.id)
        return customer

    async def update_customer(self, payload: Any) -> Customer:
        """Replace an existing customer record wholesale.

        The embedded lists are taken from the payload as-is; the child
        stores are not touched.
        """
        customer = validate_payload(Customer, payload)

        async with _serialized(_customer_key(customer.id)):
            async with self._storage.unit_of_work():
                await self._load_customer(customer.id, for_update=True)
                await self._storage.customers.insert(customer.id, customer)

        logger.info("Customer updated: id=%s", customer.id)
        return customer

    async def delete_customer(self, customer_id: str) -> str:
        async with _serialized(_customer_key(customer_id)):
            async with self._storage.unit_of_work():
                removed = await self._storage.customers.remove(customer_id)
                if removed is None:
                    logger.warning("Customer not found: id=%s", customer_id)
                    raise NotFoundError("Customer", customer_id)
                if self._cascade_delete:
                    await self._cascade(removed)

        logger.info("Customer deleted: id=%s", customer_id)
        return customer_id

    async def _cascade(self, removed: Customer) -> None:
        # Ids still embedded by another customer stay; they are shared keys.
        remaining = await self._storage.customers.list()
        kept_interactions = {i.id for c in remaining for i in c.interactions}
        kept_purchases = {p.id for c in remaining for p in c.purchases}

        for interaction_id in {i.id for i in removed.interactions} - kept_interactions:
            await self._storage.interactions.remove(interaction_id)
        for purchase_id in {p.id for p in removed.purchases} - kept_purchases:
            await self._storage.purchases.remove(purchase_id)

    # ── Interactions ───────────────────────────────

    async def list_interactions(self) -> list[Interaction]:
        return await self._storage.interactions.list()

    async def list_customer_interactions(self, customer_id: str) -> list[Interaction]:
        customer = await self.get_customer(customer_id)
        return customer.interactions

    async def get_interaction(self, interaction_id: str) -> Interaction:
        return await self._get_child(self._storage.interactions, "Interaction", interaction_id)

    async def add_interaction(self, customer_id: str, payload: Any) -> str:
        """Append an interaction to a customer and index it; returns its id."""
        data = validate_payload(InteractionPayload, payload)
        interaction = Interaction(id=generate_id(data.description), **data.model_dump())
        await self._add_child(
            customer_id, interaction, "interactions", self._storage.interactions
        )
        return interaction.id

    async def update_interaction(self, payload: Any) -> Interaction:
        interaction = validate_payload(Interaction, payload)
        await self._replace_child(
            interaction, "Interaction", "interactions", self._storage.interactions
        )
        return interaction

    async def delete_interaction(self, interaction_id: str) -> str:
        await self._delete_child(
            interaction_id, "Interaction", "interactions", self._storage.interactions
        )
        return interaction_id

    # ── Purchases ──────────────────────────────────

    async def list_purchases(self) -> list[Purchase]:
        return await self._storage.purchases.list()

    async def list_customer_purchases(self, customer_id: str) -> list[Purchase]:
        customer = await self.get_customer(customer_id)
        return customer.purchases

    async def get_purchase(self, purchase_id: str) -> Purchase:
        return await self._get_child(self._storage.purchases, "Purchase", purchase_id)

    async def add_purchase(self, customer_id: str, payload: Any) -> str:
        """Append a purchase to a customer and index it; returns its id."""
        data = validate_payload(PurchasePayload, payload)
        purchase = Purchase(
            id=generate_id(purchase_key(data.date, data.product, data.quantity, data.price)),
            **data.model_dump(),
        )
        await self._add_child(customer_id, purchase, "purchases", self._storage.purchases)
        return purchase.id

    async def update_purchase(self, payload: Any) -> Purchase:
        purchase = validate_payload(Purchase, payload)
        await self._replace_child(purchase, "Purchase", "purchases", self._storage.purchases)
        return purchase

    async def delete_purchase(self, purchase_id: str) -> str:
        await self._delete_child(purchase_id, "Purchase", "purchases", self._storage.purchases)
        return purchase_id

    # ── Consistency ────────────────────────────────

    async def consistency_report(self) -> ConsistencyReport:
        """Compare embedded ids against the child stores."""
        customers = await self._storage.customers.list()
        embedded_interactions = {i.id for c in customers for i in c.interactions}
        embedded_purchases = {p.id for c in customers for p in c.purchases}
        stored_interactions = {i.id for i in await self._storage.interactions.list()}
        stored_purchases = {p.id for p in await self._storage.purchases.list()}

        report = ConsistencyReport(
            dangling_interactions=sorted(embedded_interactions - stored_interactions),
            dangling_purchases=sorted(embedded_purchases - stored_purchases),
            orphaned_interactions=sorted(stored_interactions - embedded_interactions),
            orphaned_purchases=sorted(stored_purchases - embedded_purchases),
            consistent=(
                embedded_interactions == stored_interactions
                and embedded_purchases == stored_purchases
            ),
        )
        if not report.consistent:
            logger.warning("Stores are inconsistent: %s", report.model_dump())
        return report

    # ── Internals ──────────────────────────────────

    async def _load_customer(self, customer_id: str, for_update: bool = False) -> Customer:
        customer = await self._storage.customers.get(customer_id, for_update=for_update)
        if customer is None:
            logger.warning("Customer not found: id=%s", customer_id)
            raise NotFoundError("Customer", customer_id)
        return customer

    async def _get_child(self, store: EntityStore, entity: str, entity_id: str):
        child = await store.get(entity_id)
        if child is None:
            logger.warning("%s not found: id=%s", entity, entity_id)
            raise NotFoundError(entity, entity_id)
        return child

    async def _apply(self, operation: str, writes: list[tuple[str, Any]]) -> None:
        """Run ``(target, write)`` pairs in order.

        A failure after at least one completed write is a partial write
        unless the storage rolls the unit of work back.
        """
        completed: list[str] = []
        for target, write in writes:
            try:
                await write()
            except Exception as exc:
                if self._storage.atomic or not completed:
                    raise
                logger.error(
                    "%s left stores diverged after writing %s: %s",
                    operation,
                    ", ".join(completed),
                    exc,
                )
                raise PartialWriteError(operation, completed, target) from exc
            completed.append(target)

    async def _add_child(
        self, customer_id: str, child: BaseModel, field: str, store: EntityStore
    ) -> None:
        # child lock before customer locks, same order as update/delete
        async with _serialized(f"{field}:{child.id}", _customer_key(customer_id)):
            async with self._storage.unit_of_work():
                customer = await self._load_customer(customer_id, for_update=True)
                updated = customer.model_copy(
                    update={field: [*getattr(customer, field), child]}
                )
                customers = self._storage.customers
                await self._apply(
                    f"add {field}",
                    [
                        (f"customer {customer_id}", partial(customers.insert, customer_id, updated)),
                        (f"{field} store", partial(store.insert, child.id, child)),
                    ],
                )

        logger.info("Added %s id=%s to customer id=%s", field, child.id, customer_id)

    async def _holder_ids(self, field: str, child_id: str) -> list[str]:
        return sorted(
            c.id
            for c in await self._storage.customers.list()
            if any(item.id == child_id for item in getattr(c, field))
        )

    async def _rewrite_holders(
        self, operation: str, field: str, child_id: str, rewrite, last: tuple[str, Any]
    ) -> None:
        """Rewrite every customer embedding ``child_id``, then run ``last``."""
        holder_ids = await self._holder_ids(field, child_id)
        async with _serialized(*(_customer_key(i) for i in holder_ids)):
            writes = []
            for customer_id in holder_ids:
                customer = await self._storage.customers.get(customer_id, for_update=True)
                if customer is None:
                    continue
                items = rewrite(getattr(customer, field))
                writes.append((
                    f"customer {customer_id}",
                    partial(
                        self._storage.customers.insert,
                        customer_id,
                        customer.model_copy(update={field: items}),
                    ),
                ))
            writes.append(last)
            await self._apply(operation, writes)

    async def _replace_child(
        self, child: BaseModel, entity: str, field: str, store: EntityStore
    ) -> None:
        async with _serialized(f"{field}:{child.id}"):
            async with self._storage.unit_of_work():
                await self._get_child(store, entity, child.id)
                await self._rewrite_holders(
                    f"update {entity}",
                    field,
                    child.id,
                    lambda items: [child if item.id == child.id else item for item in items],
                    (f"{field} store", partial(store.insert, child.id, child)),
                )

        logger.info("%s updated: id=%s", entity, child.id)

    async def _delete_child(
        self, child_id: str, entity: str, field: str, store: EntityStore
    ) -> None:
        async with _serialized(f"{field}:{child_id}"):
            async with self._storage.unit_of_work():
                await self._get_child(store, entity, child_id)
                await self._rewrite_holders(
                    f"delete {entity}",
                    field,
                    child_id,
                    lambda items: [item for item in items if item.id != child_id],
                    (f"{field} store", partial(store.remove, child_id)),
                )

        logger.info("%s deleted: id=%s", entity, child_id)

"""Storage bundles: one store per entity kind plus a unit of work.

``atomic`` tells callers whether a unit of work is all-or-nothing. The
in-memory bundle applies each write immediately and cannot roll back.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from crm.models import CustomerRecord, InteractionRecord, PurchaseRecord
from crm.schemas import Customer, Interaction, Purchase
from crm.stores.base import EntityStore
from crm.stores.inmemory import InMemoryEntityStore
from crm.stores.sql import SqlEntityStore


class Storage:
    atomic: bool = False

    customers: EntityStore[Customer]
    interactions: EntityStore[Interaction]
    purchases: EntityStore[Purchase]

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[None]:
        yield


class MemoryStorage(Storage):
    atomic = False

    def __init__(self) -> None:
        self.customers = InMemoryEntityStore[Customer]()
        self.interactions = InMemoryEntityStore[Interaction]()
        self.purchases = InMemoryEntityStore[Purchase]()


class SqlStorage(Storage):
    atomic = True

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customers = SqlEntityStore(session, CustomerRecord, Customer)
        self.interactions = SqlEntityStore(session, InteractionRecord, Interaction)
        self.purchases = SqlEntityStore(session, PurchaseRecord, Purchase)

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[None]:
        try:
            yield
        except BaseException:
            await self.session.rollback()
            raise
        await self.session.commit()

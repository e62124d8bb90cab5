"""SQLAlchemy-backed EntityStore.

Each entity kind has its own table of (seq, key, data) rows; ``data`` is
the entity serialized to JSON.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crm.models.mixins import KeyValueRecordMixin
from crm.stores.base import EntityStore, T

logger = logging.getLogger(__name__)


class SqlEntityStore(EntityStore[T]):
    """Store bound to one table and one session.

    Writes are flushed but not committed; the owning ``SqlStorage`` commits
    once per unit of work.
    """

    def __init__(
        self,
        session: AsyncSession,
        record_cls: type[KeyValueRecordMixin],
        entity_cls: type[T],
    ):
        self._session = session
        self._record = record_cls
        self._entity = entity_cls

    async def _find(self, key: str, for_update: bool = False):
        query = select(self._record).where(self._record.key == key)
        if for_update:
            # refresh rows already in the identity map with the locked values
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    def _load(self, record) -> T:
        return self._entity.model_validate(record.data)

    async def get(self, key: str, *, for_update: bool = False) -> T | None:
        record = await self._find(key, for_update=for_update)
        return None if record is None else self._load(record)

    async def list(self) -> list[T]:
        result = await self._session.execute(
            select(self._record).order_by(self._record.seq)
        )
        return [self._load(r) for r in result.scalars().all()]

    async def insert(self, key: str, entity: T) -> T | None:
        data = entity.model_dump(mode="json")
        record = await self._find(key, for_update=True)
        if record is None:
            try:
                async with self._session.begin_nested():
                    self._session.add(self._record(key=key, data=data))
                return None
            except IntegrityError:
                # another transaction inserted the key first; overwrite it
                logger.info(
                    "Concurrent insert of key=%s in %s, updating",
                    key,
                    self._record.__tablename__,
                )
                record = await self._find(key, for_update=True)

        previous = self._load(record)
        record.data = data
        await self._session.flush()
        return previous

    async def remove(self, key: str) -> T | None:
        record = await self._find(key, for_update=True)
        if record is None:
            return None
        removed = self._load(record)
        await self._session.delete(record)
        await self._session.flush()
        return removed

from crm.stores.base import EntityStore
from crm.stores.inmemory import InMemoryEntityStore
from crm.stores.sql import SqlEntityStore
from crm.stores.storage import MemoryStorage, SqlStorage, Storage

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "SqlEntityStore",
    "Storage",
    "MemoryStorage",
    "SqlStorage",
]

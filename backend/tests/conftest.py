import pytest
from fastapi.testclient import TestClient

from crm.core.deps import get_storage
from crm.main import app
from crm.services.relationships import RelationshipManager
from crm.stores import MemoryStorage


ADA = {"name": "Ada", "company": "Acme", "email": "ada@x.com", "phone": "555"}
INTRO_CALL = {
    "date": "2024-01-01",
    "interaction_type": "call",
    "description": "intro",
    "status": "done",
    "comments": "",
}
WIDGETS = {"date": "2024-02-01", "product": "widget", "quantity": "3", "price": "1250"}


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def manager(storage):
    return RelationshipManager(storage)


@pytest.fixture
def client(storage):
    async def _override():
        yield storage

    app.dependency_overrides[get_storage] = _override
    yield TestClient(app)
    app.dependency_overrides.clear()

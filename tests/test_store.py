from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from foodswift.core.config import get_settings
from foodswift.core.exceptions import PersistenceError
from foodswift.services.store import (
    MemoryDocumentStore,
    MongoDocumentStore,
    get_document_store,
    reset_document_store,
)


# =============================================================================
# MEMORY STORE
# =============================================================================

async def test_insert_does_not_mutate_input(store):
    document = {"email": "a@x.com"}
    result = await store.insert_one("users", document)

    assert "_id" not in document
    assert ObjectId.is_valid(result.inserted_id)


async def test_find_one_matches_all_fields(store):
    await store.insert_one("users", {"email": "a@x.com", "role": "customer"})
    await store.insert_one("users", {"email": "a@x.com", "role": "admin"})

    found = await store.find_one("users", {"email": "a@x.com", "role": "admin"})
    assert found["role"] == "admin"
    assert await store.find_one("users", {"email": "b@x.com"}) is None
    assert await store.find_one("nothing-here", {}) is None


async def test_find_one_returns_a_copy(store):
    await store.insert_one("users", {"email": "a@x.com", "tags": []})
    found = await store.find_one("users", {"email": "a@x.com"})
    found["tags"].append("x")

    assert store.documents("users")[0]["tags"] == []


async def test_update_one_counts(store):
    await store.insert_one("users", {"email": "a@x.com", "isBlock": False})

    first = await store.update_one("users", {"email": "a@x.com"}, {"isBlock": True})
    second = await store.update_one("users", {"email": "a@x.com"}, {"isBlock": True})
    missing = await store.update_one("users", {"email": "b@x.com"}, {"isBlock": True})

    assert (first.matched_count, first.modified_count) == (1, 1)
    assert (second.matched_count, second.modified_count) == (1, 0)
    assert (missing.matched_count, missing.modified_count) == (0, 0)


async def test_failing_store_raises_persistence_error():
    store = MemoryDocumentStore(fail_writes=True)
    with pytest.raises(PersistenceError):
        await store.insert_one("messages", {"message": "hi"})
    with pytest.raises(PersistenceError):
        await store.update_one("users", {}, {"isBlock": True})
    assert store.documents("messages") == []


def test_factory_uses_memory_store_in_development():
    reset_document_store()
    try:
        assert get_settings().is_development
        assert isinstance(get_document_store(), MemoryDocumentStore)
        assert get_document_store() is get_document_store()
    finally:
        reset_document_store()


# =============================================================================
# MONGO STORE (driver mocked)
# =============================================================================

@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def mongo_store(collection):
    client = MagicMock()
    db = client.__getitem__.return_value
    db.name = "Food_Swift"
    db.__getitem__.return_value = collection
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = AsyncMock()
    return MongoDocumentStore(client=client)


async def test_mongo_insert_passes_a_copy(mongo_store, collection):
    oid = ObjectId()
    collection.insert_one = AsyncMock(return_value=SimpleNamespace(inserted_id=oid, acknowledged=True))
    document = {"message": "hi"}

    result = await mongo_store.insert_one("messages", document)

    assert result.inserted_id == str(oid)
    sent = collection.insert_one.await_args.args[0]
    assert sent == document and sent is not document


async def test_mongo_find_one_stringifies_id(mongo_store, collection):
    oid = ObjectId()
    collection.find_one = AsyncMock(return_value={"_id": oid, "email": "a@x.com"})

    found = await mongo_store.find_one("users", {"email": "a@x.com"})
    assert found == {"_id": str(oid), "email": "a@x.com"}


async def test_mongo_update_uses_set(mongo_store, collection):
    collection.update_one = AsyncMock(
        return_value=SimpleNamespace(matched_count=1, modified_count=1, acknowledged=True)
    )

    result = await mongo_store.update_one("users", {"email": "a@x.com"}, {"isBlock": True})

    assert result.matched_count == 1
    collection.update_one.assert_awaited_once_with({"email": "a@x.com"}, {"$set": {"isBlock": True}})


async def test_mongo_driver_errors_become_persistence_errors(mongo_store, collection):
    collection.insert_one = AsyncMock(side_effect=PyMongoError("connection reset"))

    with pytest.raises(PersistenceError) as exc:
        await mongo_store.insert_one("locations", {"orderId": "o1"})
    assert exc.value.details == "connection reset"


async def test_mongo_ping(mongo_store):
    assert await mongo_store.ping() is True

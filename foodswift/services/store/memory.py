"""
In-Memory Document Store

Process-local stand-in for MongoDB used in development mode and tests.
Documents live in per-collection lists; ids are BSON ObjectIds rendered
as strings so they look like the ones the real cluster hands out.

Behavior:
    - Equality-only filters (the only kind the application issues)
    - Inserts and updates store deep copies
    - Optional injected failure for exercising error paths

Author: Food Swift Team
Version: 1.0.0
"""

import copy
import logging
from collections import defaultdict
from typing import Any, Mapping, Optional

from bson import ObjectId

from foodswift.core.exceptions import PersistenceError
from foodswift.services.store.base import (
    BaseDocumentStore,
    InsertResult,
    UpdateResult,
)

logger = logging.getLogger(__name__)


def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in query.items())


class MemoryDocumentStore(BaseDocumentStore):
    """
    Mock implementation of the document store.

    Attributes:
        fail_writes: When set, every insert/update raises PersistenceError

    Example:
        >>> store = MemoryDocumentStore()
        >>> await store.insert_one("users", {"email": "a@x.com"})
        >>> await store.find_one("users", {"email": "a@x.com"})
        {'email': 'a@x.com', '_id': '...'}
    """

    def __init__(self, fail_writes: bool = False):
        self.fail_writes = fail_writes
        self._collections: dict[str, list[dict[str, Any]]] = defaultdict(list)
        logger.info("MemoryDocumentStore initialized")

    @property
    def provider_name(self) -> str:
        return "memory"

    def documents(self, collection: str) -> list[dict[str, Any]]:
        """Snapshot of a collection's documents."""
        return copy.deepcopy(self._collections.get(collection, []))

    def _check_writable(self, operation: str, collection: str) -> None:
        if self.fail_writes:
            raise PersistenceError(f"Simulated {operation} failure on '{collection}'")

    async def find_one(
        self,
        collection: str,
        query: Mapping[str, Any],
    ) -> Optional[dict[str, Any]]:
        for document in self._collections.get(collection, []):
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    async def insert_one(
        self,
        collection: str,
        document: Mapping[str, Any],
    ) -> InsertResult:
        self._check_writable("insert", collection)

        stored = copy.deepcopy(dict(document))
        stored.setdefault("_id", str(ObjectId()))
        self._collections[collection].append(stored)

        logger.debug(f"Inserted {stored['_id']} into {collection}")
        return InsertResult(inserted_id=str(stored["_id"]))

    async def update_one(
        self,
        collection: str,
        query: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> UpdateResult:
        self._check_writable("update", collection)

        for document in self._collections.get(collection, []):
            if _matches(document, query):
                changed = any(document.get(k) != v for k, v in values.items())
                document.update(copy.deepcopy(dict(values)))
                return UpdateResult(matched_count=1, modified_count=int(changed))

        return UpdateResult(matched_count=0, modified_count=0)

    async def ping(self) -> bool:
        """Mock always returns healthy."""
        return True

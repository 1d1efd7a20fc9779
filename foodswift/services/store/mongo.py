"""
MongoDB Document Store

Production implementation backed by a MongoDB Atlas cluster through
PyMongo's asyncio client. One client is shared by the whole process;
the driver's default connection pool applies.

Requirements:
    - DB_USER / DB_PASS (or MONGODB_URI) in environment
    - Network access to the cluster

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from typing import Any, Mapping, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from foodswift.core.config import get_settings
from foodswift.core.exceptions import PersistenceError
from foodswift.services.store.base import (
    BaseDocumentStore,
    InsertResult,
    UpdateResult,
)

logger = logging.getLogger(__name__)


class MongoDocumentStore(BaseDocumentStore):
    """
    MongoDB implementation of the document store.

    The client connects lazily on first operation, so constructing the
    store never blocks application startup.

    Example:
        >>> store = MongoDocumentStore()
        >>> result = await store.insert_one("orders", {"status": "pending"})
        >>> print(result.inserted_id)
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database: Optional[str] = None,
        client: Optional[AsyncMongoClient] = None,
    ):
        settings = get_settings()

        self._client = client or AsyncMongoClient(
            uri or settings.database_uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
        )
        self._db = self._client[database or settings.db_name]

        logger.info(f"MongoDocumentStore initialized (database={self._db.name})")

    @property
    def provider_name(self) -> str:
        return "mongodb"

    @staticmethod
    def _normalize(document: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        if document is not None and "_id" in document:
            document["_id"] = str(document["_id"])
        return document

    async def find_one(
        self,
        collection: str,
        query: Mapping[str, Any],
    ) -> Optional[dict[str, Any]]:
        try:
            document = await self._db[collection].find_one(dict(query))
        except PyMongoError as e:
            logger.error(f"find_one on {collection} failed: {e}")
            raise PersistenceError(f"Failed to read from {collection}", details=str(e)) from e
        return self._normalize(document)

    async def insert_one(
        self,
        collection: str,
        document: Mapping[str, Any],
    ) -> InsertResult:
        # The driver adds _id to the dict it is given
        body = dict(document)
        try:
            result = await self._db[collection].insert_one(body)
        except PyMongoError as e:
            logger.error(f"insert_one on {collection} failed: {e}")
            raise PersistenceError(f"Failed to write to {collection}", details=str(e)) from e

        return InsertResult(
            inserted_id=str(result.inserted_id),
            acknowledged=result.acknowledged,
        )

    async def update_one(
        self,
        collection: str,
        query: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> UpdateResult:
        try:
            result = await self._db[collection].update_one(
                dict(query),
                {"$set": dict(values)},
            )
        except PyMongoError as e:
            logger.error(f"update_one on {collection} failed: {e}")
            raise PersistenceError(f"Failed to update {collection}", details=str(e)) from e

        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            acknowledged=result.acknowledged,
        )

    async def ping(self) -> bool:
        """Check cluster connectivity with the admin ping command."""
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB client closed")

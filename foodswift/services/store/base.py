"""
Document Store Abstract Base Class

Defines the interface contract for all document store implementations.
Both MemoryDocumentStore and MongoDocumentStore must implement these methods.

The store is injected into the HTTP routes and the realtime relay instead
of being reached through a module-level client, so tests and local
development can swap in the in-memory implementation.

Use Cases:
    - Identity lookup by email (role checks, block status)
    - Append-only inserts for locations and chat messages
    - Free-form inserts for orders and restaurants
    - Field updates on user records

Author: Food Swift Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass
class InsertResult:
    """
    Result of a single-document insert.

    Attributes:
        inserted_id: String form of the new document's _id
        acknowledged: Whether the store confirmed the write
    """
    inserted_id: str
    acknowledged: bool = True


@dataclass
class UpdateResult:
    """
    Result of a single-document update.

    Attributes:
        matched_count: Documents matching the filter (0 or 1)
        modified_count: Documents actually changed (0 or 1)
        acknowledged: Whether the store confirmed the write
    """
    matched_count: int
    modified_count: int
    acknowledged: bool = True


class BaseDocumentStore(ABC):
    """
    Abstract base class for document stores.

    Implementations raise PersistenceError for any driver-level failure so
    callers handle a single error type regardless of backend.

    Example:
        >>> store = get_document_store()
        >>> result = await store.insert_one("messages", {"message": "hi"})
        >>> doc = await store.find_one("messages", {"_id": result.inserted_id})
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the store provider.

        Returns:
            str: Provider name (e.g., "memory", "mongodb")
        """
        pass

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        query: Mapping[str, Any],
    ) -> Optional[dict[str, Any]]:
        """
        Find the first document whose fields equal every key in `query`.

        Args:
            collection: Collection name
            query: Equality filter

        Returns:
            The matching document, or None
        """
        pass

    @abstractmethod
    async def insert_one(
        self,
        collection: str,
        document: Mapping[str, Any],
    ) -> InsertResult:
        """
        Insert a copy of `document`; the caller's mapping is never mutated.

        Args:
            collection: Collection name
            document: Document body

        Returns:
            InsertResult with the generated id
        """
        pass

    @abstractmethod
    async def update_one(
        self,
        collection: str,
        query: Mapping[str, Any],
        values: Mapping[str, Any],
    ) -> UpdateResult:
        """
        Set `values` on the first document matching `query`.

        Args:
            collection: Collection name
            query: Equality filter
            values: Fields to set ($set semantics)

        Returns:
            UpdateResult with matched/modified counts
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check store connectivity."""
        pass

    async def close(self) -> None:
        """Release client resources; no-op unless overridden."""
        return None

"""
Document Store Factory

Provides a single entry point for obtaining the process-wide document store.
Selects MemoryDocumentStore or MongoDocumentStore from configuration.

Usage:
    from foodswift.services.store import get_document_store

    store = get_document_store()
    user = await store.find_one("users", {"email": "a@x.com"})

Author: Food Swift Team
Version: 1.0.0
"""

import logging
from functools import lru_cache

from foodswift.core.config import get_settings
from foodswift.services.store.base import (
    BaseDocumentStore,
    InsertResult,
    UpdateResult,
)
from foodswift.services.store.memory import MemoryDocumentStore
from foodswift.services.store.mongo import MongoDocumentStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_document_store() -> BaseDocumentStore:
    """
    Get the configured document store instance.

    Development mode without database credentials gets the in-memory
    store; every other configuration talks to MongoDB.

    Returns:
        BaseDocumentStore: Shared store instance
    """
    settings = get_settings()

    if not settings.use_real_services:
        logger.info("Document Store: Using MemoryDocumentStore (development mode)")
        return MemoryDocumentStore()

    logger.info(
        f"Document Store: Using MongoDocumentStore "
        f"({settings.env_mode.value} mode)"
    )
    return MongoDocumentStore()


def reset_document_store() -> None:
    """
    Clear the cached store instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_document_store.cache_clear()
    logger.debug("Document store cache cleared")


__all__ = [
    "get_document_store",
    "reset_document_store",
    "BaseDocumentStore",
    "InsertResult",
    "UpdateResult",
    "MemoryDocumentStore",
    "MongoDocumentStore",
]

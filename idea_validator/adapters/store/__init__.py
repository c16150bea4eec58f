"""Document store adapters (Firestore in production, in-memory for tests)."""

from idea_validator.adapters.store.base import (
    SERVER_TIMESTAMP,
    AbstractDocumentStore,
    Increment,
    StoredDocument,
)
from idea_validator.adapters.store.factory import create_document_store
from idea_validator.adapters.store.memory import InMemoryDocumentStore

__all__ = [
    "SERVER_TIMESTAMP",
    "AbstractDocumentStore",
    "InMemoryDocumentStore",
    "Increment",
    "StoredDocument",
    "create_document_store",
]

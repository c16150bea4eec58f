"""Factory for document store instances."""

from idea_validator.adapters.store.base import AbstractDocumentStore
from idea_validator.adapters.store.memory import InMemoryDocumentStore
from idea_validator.core.config import StoreSettings, settings
from idea_validator.core.errors import ConfigurationAppError


def create_document_store(store_settings: StoreSettings | None = None) -> AbstractDocumentStore:
    """Instantiate the document store selected by STORE_BACKEND.

    Raises:
        ConfigurationAppError: If the backend is unknown or cannot be initialised.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryDocumentStore()

    if backend == "firestore":
        # Imported lazily so the in-memory backend works without Google credentials
        from idea_validator.adapters.store.firestore_store import FirestoreDocumentStore

        return FirestoreDocumentStore.from_settings(cfg)

    raise ConfigurationAppError(
        code="store_unknown_backend",
        message=f"Unknown document store backend: '{backend}'. Supported backends: firestore, memory",
    )

"""Document store interface.

Services depend on this abstraction (not on Firestore directly) so tests and
local development can run against the in-memory implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence


@dataclass(frozen=True)
class Increment:
    """Field value requesting an atomic numeric add on the server."""

    amount: int


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Field value replaced by the store's own clock when written
SERVER_TIMESTAMP = _ServerTimestamp()

WhereClause = tuple[str, str, Any]


@dataclass(frozen=True)
class StoredDocument:
    """A document snapshot: its id plus a copy of its fields."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class AbstractDocumentStore(ABC):
    """Async CRUD and query operations over named collections."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> StoredDocument | None:
        """Return the document, or None when it does not exist."""

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a store-assigned id and return that id."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Merge fields into an existing document.

        Raises:
            NotFoundAppError: If the document does not exist.
        """

    @abstractmethod
    async def query(
        self,
        collection: str,
        *,
        where: Sequence[WhereClause] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        """Return documents matching every equality clause, optionally ordered."""

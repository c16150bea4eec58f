"""In-memory document store for development and tests.

Per-process only: nothing is persisted and nothing is shared between workers.
Sentinel field values are resolved the way Firestore resolves them.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from idea_validator.adapters.store.base import (
    SERVER_TIMESTAMP,
    AbstractDocumentStore,
    Increment,
    StoredDocument,
    WhereClause,
)
from idea_validator.core.errors import NotFoundAppError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryDocumentStore(AbstractDocumentStore):
    """Dict-backed store with equality queries and single-field ordering."""

    def __init__(self, *, now: Callable[[], datetime] = _utcnow) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._now = now

    def _resolve(self, existing: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                resolved[key] = self._now()
            elif isinstance(value, Increment):
                current = existing.get(key)
                base = current if isinstance(current, (int, float)) else 0
                resolved[key] = base + value.amount
            else:
                resolved[key] = copy.deepcopy(value)
        return resolved

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> StoredDocument | None:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return StoredDocument(id=doc_id, data=copy.deepcopy(data))

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = self._resolve({}, data)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._collection(collection)[doc_id] = self._resolve({}, data)

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        docs = self._collection(collection)
        existing = docs.get(doc_id)
        if existing is None:
            raise NotFoundAppError(
                code="document_not_found",
                message=f"No document to update: {collection}/{doc_id}",
                details={"collection": collection, "document_id": doc_id},
            )
        existing.update(self._resolve(existing, data))

    async def query(
        self,
        collection: str,
        *,
        where: Sequence[WhereClause] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        for _, op, _ in where:
            if op != "==":
                raise ValueError(f"Unsupported query operator: {op!r}")

        matches = [
            StoredDocument(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(data.get(field) == value for field, _, value in where)
        ]

        if order_by:
            # Firestore omits documents lacking the ordered field
            matches = [doc for doc in matches if doc.data.get(order_by) is not None]
            matches.sort(key=lambda doc: doc.data[order_by], reverse=descending)

        return matches

    def clear(self) -> None:
        self._collections.clear()

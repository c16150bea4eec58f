"""Firestore document store backed by the firebase-admin async client."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore

from idea_validator.adapters.store.base import (
    SERVER_TIMESTAMP,
    AbstractDocumentStore,
    Increment,
    StoredDocument,
    WhereClause,
)
from idea_validator.core.config import StoreSettings
from idea_validator.core.errors import (
    ConfigurationAppError,
    NotFoundAppError,
    StoreAppError,
)

logger = logging.getLogger(__name__)

# Transport, API and credential-refresh failures all mean "store unavailable"
_REMOTE_ERRORS = (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


def _to_firestore_value(value: Any) -> Any:
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, Increment):
        return firestore.Increment(value.amount)
    return value


def _to_firestore_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {key: _to_firestore_value(value) for key, value in data.items()}


def _store_error(action: str, collection: str, exc: Exception) -> StoreAppError:
    logger.warning(
        "store.request_failed",
        extra={"action": action, "collection": collection, "error_type": type(exc).__name__},
    )
    return StoreAppError(
        code="store_unavailable",
        message=f"Document store {action} failed: {exc}",
        details={"collection": collection},
    )


def _get_firebase_app(store_settings: StoreSettings) -> firebase_admin.App:
    """Return the default Firebase app, initialising it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    try:
        if store_settings.credentials_path:
            cred = credentials.Certificate(store_settings.credentials_path)
        else:
            cred = credentials.ApplicationDefault()
    except (OSError, ValueError) as exc:
        raise ConfigurationAppError(
            code="store_missing_credentials",
            message=f"Firestore credentials could not be loaded: {exc}",
            details={
                "hint": "Set STORE_CREDENTIALS_PATH or configure application default credentials",
            },
        ) from exc

    options = {"projectId": store_settings.project_id} if store_settings.project_id else None
    return firebase_admin.initialize_app(cred, options)


class FirestoreDocumentStore(AbstractDocumentStore):
    """Document store over Cloud Firestore.

    Google API errors are translated into ``StoreAppError`` so callers can
    fall back to cached data; a missing document on update becomes
    ``NotFoundAppError``.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, store_settings: StoreSettings) -> "FirestoreDocumentStore":
        app = _get_firebase_app(store_settings)
        try:
            client = firestore_async.client(app)
        except (auth_exceptions.DefaultCredentialsError, ValueError) as exc:
            raise ConfigurationAppError(
                code="store_missing_credentials",
                message=f"Firestore client could not be created: {exc}",
            ) from exc
        return cls(client)

    async def get(self, collection: str, doc_id: str) -> StoredDocument | None:
        try:
            snapshot = await self._client.collection(collection).document(doc_id).get()
        except _REMOTE_ERRORS as exc:
            raise _store_error("get", collection, exc) from exc

        if not snapshot.exists:
            return None
        return StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {})

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        try:
            _, doc_ref = await self._client.collection(collection).add(_to_firestore_fields(data))
        except _REMOTE_ERRORS as exc:
            raise _store_error("add", collection, exc) from exc
        return doc_ref.id

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        try:
            await self._client.collection(collection).document(doc_id).set(
                _to_firestore_fields(data)
            )
        except _REMOTE_ERRORS as exc:
            raise _store_error("set", collection, exc) from exc

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        try:
            await self._client.collection(collection).document(doc_id).update(
                _to_firestore_fields(data)
            )
        except google_exceptions.NotFound as exc:
            raise NotFoundAppError(
                code="document_not_found",
                message=f"No document to update: {collection}/{doc_id}",
                details={"collection": collection, "document_id": doc_id},
            ) from exc
        except _REMOTE_ERRORS as exc:
            raise _store_error("update", collection, exc) from exc

    async def query(
        self,
        collection: str,
        *,
        where: Sequence[WhereClause] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        query = self._client.collection(collection)
        for field_path, op, value in where:
            query = query.where(filter=firestore.FieldFilter(field_path, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)

        documents: list[StoredDocument] = []
        try:
            async for snapshot in query.stream():
                documents.append(StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {}))
        except _REMOTE_ERRORS as exc:
            raise _store_error("query", collection, exc) from exc
        return documents

"""Persistence of ideas, their analyses and follow-up questions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from idea_validator.adapters.store.base import (
    SERVER_TIMESTAMP,
    AbstractDocumentStore,
    StoredDocument,
)
from idea_validator.core.errors import NotFoundAppError
from idea_validator.schemas.idea import FollowUpQA, Idea
from idea_validator.schemas.news import NewsArticle

logger = logging.getLogger(__name__)

IDEAS_COLLECTION = "ideas"


def _to_idea(document: StoredDocument) -> Idea:
    return Idea.model_validate({**document.data, "id": document.id})


def _not_found(idea_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="idea_not_found",
        message="Idea not found",
        details={"collection": IDEAS_COLLECTION, "document_id": idea_id},
    )


class IdeaRepository:
    """Idea documents in the ``ideas`` collection.

    Documents use camelCase field names (``userId``, ``ideaText``,
    ``newsArticles``, ``createdAt``) so records written by earlier clients
    read back unchanged.
    """

    def __init__(self, store: AbstractDocumentStore) -> None:
        self._store = store

    async def add_idea(self, user_id: str, idea_text: str, keywords: Sequence[str] = ()) -> str:
        """Create an idea in ``processing`` state and return its id."""
        idea_id = await self._store.add(
            IDEAS_COLLECTION,
            {
                "userId": user_id,
                "ideaText": idea_text,
                "keywords": list(keywords),
                "status": "processing",
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info("ideas.created", extra={"idea_id": idea_id})
        return idea_id

    async def update_with_analysis(
        self,
        idea_id: str,
        articles: Sequence[NewsArticle],
        analysis: dict[str, Any],
        keywords: Sequence[str] | None = None,
    ) -> None:
        """Store the news and analysis and mark the idea ``completed``."""
        fields: dict[str, Any] = {
            "newsArticles": [
                article.model_dump(by_alias=True, exclude_none=True) for article in articles
            ],
            "analysis": analysis,
            "status": "completed",
            "updatedAt": SERVER_TIMESTAMP,
        }
        if keywords is not None:
            fields["keywords"] = list(keywords)
        await self._store.update(IDEAS_COLLECTION, idea_id, fields)

    async def add_follow_up(self, idea_id: str, question: str, answer: str) -> FollowUpQA:
        """Append a question and its answer to the idea's history.

        Server timestamps cannot be placed inside arrays, so the entry is
        stamped with this process's clock.

        Raises:
            NotFoundAppError: If the idea does not exist.
        """
        document = await self._store.get(IDEAS_COLLECTION, idea_id)
        if document is None:
            raise _not_found(idea_id)

        entry = FollowUpQA(
            question=question,
            answer=answer,
            timestamp=datetime.now(timezone.utc),
        )
        questions = list(document.get("questions") or [])
        questions.append(entry.model_dump(by_alias=True))

        await self._store.update(
            IDEAS_COLLECTION,
            idea_id,
            {"questions": questions, "updatedAt": SERVER_TIMESTAMP},
        )
        return entry

    async def list_for_user(self, user_id: str) -> list[Idea]:
        """Return the user's ideas, newest first."""
        documents = await self._store.query(
            IDEAS_COLLECTION,
            where=[("userId", "==", user_id)],
            order_by="createdAt",
            descending=True,
        )
        return [_to_idea(document) for document in documents]

    async def get(self, idea_id: str) -> Idea:
        """Return one idea.

        Raises:
            NotFoundAppError: If the idea does not exist.
        """
        document = await self._store.get(IDEAS_COLLECTION, idea_id)
        if document is None:
            raise _not_found(idea_id)
        return _to_idea(document)

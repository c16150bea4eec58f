"""Pydantic schemas for ideas, follow-up questions and quota status."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from idea_validator.schemas.news import NewsArticle

IdeaStatus = Literal["processing", "completed"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class FollowUpQA(_CamelModel):
    question: str
    answer: str
    timestamp: datetime | None = None


class Idea(_CamelModel):
    """A submitted idea together with its analysis and Q&A history.

    ``analysis`` is kept as a plain mapping: older records hold a prose-based
    format that is normalised on read rather than migrated in place.
    """

    id: str
    user_id: str
    idea_text: str
    keywords: list[str] = Field(default_factory=list)
    status: IdeaStatus = "processing"
    news_articles: list[NewsArticle] = Field(default_factory=list)
    analysis: dict[str, Any] | None = None
    questions: list[FollowUpQA] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class IdeaSummary(_CamelModel):
    """Dashboard listing entry."""

    id: str
    idea_text: str
    status: IdeaStatus = "processing"
    idea_summary: str | None = None
    created_at: datetime | None = None


class IdeaCreateRequest(_CamelModel):
    idea_text: str = Field(..., description="Free-text description of the business idea.")


class FollowUpRequest(_CamelModel):
    question: str = Field(..., description="Follow-up question about an analysed idea.")


class QuotaStatus(_CamelModel):
    count: int = Field(..., description="Question credits consumed so far.")
    limit: int = Field(..., description="Question credits available in total.")
    remaining: int
    limit_reached: bool

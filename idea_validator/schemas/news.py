"""Pydantic schemas for news articles."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class NewsArticle(BaseModel):
    """A news article used as supporting evidence for an analysis."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    title: str = Field(..., description="Article headline.")
    description: str | None = Field(
        default=None,
        description="Short article summary, when the source provides one.",
    )
    url: str = Field(..., description="Link to the full article.")
    source: str | None = Field(default=None, description="Publisher name.")
    published_at: str | None = Field(
        default=None,
        description="Publication timestamp as reported by the news service.",
    )

    @field_validator("source", mode="before")
    @classmethod
    def _source_name(cls, value: Any) -> Any:
        # Older records stored the raw NewsAPI {"id", "name"} object
        if isinstance(value, dict):
            return value.get("name")
        return value

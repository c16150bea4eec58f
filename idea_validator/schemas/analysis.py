"""Pydantic schemas for idea analysis payloads.

Field names are snake_case in Python and camelCase on the wire and in the
document store, matching the JSON structure the model is asked to produce.
Scores arrive from the model as numbers or numeric strings; both are accepted.
"""

import re
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _as_text(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


_LEADING_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def _as_number(value: Any) -> Any:
    # "65%", "7/10" and " 6 months" all occur in model output
    if isinstance(value, str):
        match = _LEADING_NUMBER.search(value)
        if match:
            return float(match.group())
    return value


NumericText = Annotated[str, BeforeValidator(_as_text)]
Score = Annotated[float, BeforeValidator(_as_number)]


class MarketPotential(_CamelModel):
    score: NumericText = Field(..., description="Market potential from 1 to 10, or 'N/A'.")
    summary: str = Field(..., description="One or two sentences explaining the score.")


class MarketAnalysis(_CamelModel):
    key_points: list[str] = Field(..., description="Key facts about the market.")
    competitors: list[str] = Field(..., description="Main competitors in this space.")


class SentimentAnalysis(_CamelModel):
    """Share of positive/neutral/negative coverage in the news, in percent."""

    positive: Score = Field(..., ge=0, le=100)
    neutral: Score = Field(..., ge=0, le=100)
    negative: Score = Field(..., ge=0, le=100)


class SwotAnalysis(_CamelModel):
    strengths: list[str]
    weaknesses: list[str]
    opportunities: list[str]
    threats: list[str]


class Reference(_CamelModel):
    title: str
    url: str


class RiskFactors(_CamelModel):
    """Risk scores from 1 (low) to 10 (high); 0 when unavailable."""

    regulatory: Score = Field(..., ge=0, le=10)
    market: Score = Field(..., ge=0, le=10)
    technical: Score = Field(..., ge=0, le=10)
    financial: Score = Field(..., ge=0, le=10)


class IdeaAnalysis(_CamelModel):
    """Structured, visualisation-friendly analysis of a business idea."""

    idea_summary: str = Field(..., description="Concise summary of the idea.")
    market_potential: MarketPotential
    market_analysis: MarketAnalysis
    sentiment_analysis: SentimentAnalysis
    swot_analysis: SwotAnalysis
    key_trends: list[str] = Field(..., description="Current trends in this market.")
    references: list[Reference] = Field(default_factory=list)
    execution_steps: list[str] = Field(..., description="Actionable steps to execute the idea.")
    risk_factors: RiskFactors
    time_to_market: NumericText = Field(..., description="Estimated months to market, or 'N/A'.")
    error: str | None = Field(
        default=None,
        description="Set when this is a placeholder analysis produced after a failure.",
    )

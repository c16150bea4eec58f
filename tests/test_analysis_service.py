"""Unit tests for AnalysisService and its prompt builders."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from idea_validator.core.errors import LLMAppError
from idea_validator.schemas.analysis import IdeaAnalysis
from idea_validator.schemas.idea import FollowUpQA
from idea_validator.schemas.news import NewsArticle
from idea_validator.services.analysis_service import (
    NO_ARTICLES_NOTICE,
    AnalysisService,
    build_analysis_prompt,
    build_fallback_analysis,
    build_follow_up_prompt,
    build_keywords_prompt,
    fallback_keywords,
)

IDEA = "A subscription service delivering healthy meal kits to university students"

VALID_ANALYSIS = {
    "ideaSummary": "Healthy meal kits for students.",
    "marketPotential": {"score": 7, "summary": "Large, price-sensitive market."},
    "marketAnalysis": {
        "keyPoints": ["Students cook more", "Budgets are tight"],
        "competitors": ["HelloFresh", "Gousto"],
    },
    "sentimentAnalysis": {"positive": "65%", "neutral": 20, "negative": 15},
    "swotAnalysis": {
        "strengths": ["Convenient"],
        "weaknesses": ["Thin margins"],
        "opportunities": ["Campus partnerships"],
        "threats": ["Established players"],
    },
    "keyTrends": ["Plant-based diets"],
    "references": [{"title": "Meal kit report", "url": "https://example.com/report"}],
    "executionSteps": ["Survey students", "Launch pilot"],
    "riskFactors": {"regulatory": "3", "market": 6, "technical": 2, "financial": "7/10"},
    "timeToMarket": 6,
}


def _llm(**kwargs) -> MagicMock:
    llm = MagicMock()
    llm.provider = "openai"
    llm.model = "gpt-4o-mini"
    llm.generate_text = AsyncMock(**kwargs)
    return llm


class TestHelperFunctions:
    """Test module-level helpers."""

    def test_fallback_keywords_use_long_words(self) -> None:
        assert fallback_keywords(IDEA) == [
            "subscription",
            "service",
            "delivering",
            "healthy",
            "meal",
        ]

    def test_fallback_keywords_for_short_words_only(self) -> None:
        assert fallback_keywords("an app for me") == []

    def test_fallback_analysis_carries_error(self) -> None:
        analysis = build_fallback_analysis("boom")

        assert analysis.error == "boom"
        assert analysis.market_potential.score == "N/A"
        assert analysis.time_to_market == "N/A"
        assert analysis.references[0].title == "Error Information"

    def test_keywords_prompt_includes_idea(self) -> None:
        prompt = build_keywords_prompt(IDEA)

        assert IDEA in prompt
        assert "JSON array" in prompt

    def test_analysis_prompt_formats_articles(self) -> None:
        articles = [
            NewsArticle(title="Meal kits boom", description=None, url="https://example.com/a"),
        ]

        prompt = build_analysis_prompt(IDEA, articles)

        assert "Article 1:" in prompt
        assert "Title: Meal kits boom" in prompt
        assert "Description: No description available" in prompt
        assert '"riskFactors"' in prompt

    def test_analysis_prompt_without_articles(self) -> None:
        assert NO_ARTICLES_NOTICE in build_analysis_prompt(IDEA, [])

    def test_follow_up_prompt_includes_history(self) -> None:
        previous = [FollowUpQA(question="Who competes?", answer="HelloFresh.")]

        prompt = build_follow_up_prompt("Pricing?", IDEA, {"ideaSummary": "x"}, previous)

        assert "PREVIOUS QUESTIONS AND ANSWERS" in prompt
        assert "Q1: Who competes?\nA1: HelloFresh." in prompt
        assert '"ideaSummary": "x"' in prompt
        assert "Pricing?" in prompt

    def test_follow_up_prompt_without_history(self) -> None:
        prompt = build_follow_up_prompt("Pricing?", IDEA, None)

        assert "PREVIOUS QUESTIONS AND ANSWERS" not in prompt


class TestExtractKeywords:
    """Test keyword extraction and its fallback."""

    @pytest.mark.asyncio
    async def test_parses_fenced_array(self) -> None:
        llm = _llm(return_value='```json\n["meal kits", "students"]\n```')
        service = AnalysisService(llm, temperature=0.2)

        assert await service.extract_keywords(IDEA) == ["meal kits", "students"]
        assert llm.generate_text.await_args.kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_falls_back_on_llm_error(self) -> None:
        llm = _llm(side_effect=LLMAppError(code="llm_request_failed", message="down"))

        assert await AnalysisService(llm).extract_keywords(IDEA) == fallback_keywords(IDEA)

    @pytest.mark.asyncio
    async def test_falls_back_on_malformed_response(self) -> None:
        llm = _llm(return_value="Keywords: meal kits, students")

        assert await AnalysisService(llm).extract_keywords(IDEA) == fallback_keywords(IDEA)

    @pytest.mark.asyncio
    async def test_falls_back_on_empty_array(self) -> None:
        llm = _llm(return_value="[]")

        assert await AnalysisService(llm).extract_keywords(IDEA) == fallback_keywords(IDEA)


class TestAnalyzeIdea:
    """Test structured analysis and fallback handling."""

    @pytest.mark.asyncio
    async def test_valid_response_is_parsed(self) -> None:
        llm = _llm(return_value=f"```json\n{json.dumps(VALID_ANALYSIS)}\n```\nHope this helps!")

        analysis = await AnalysisService(llm).analyze_idea(IDEA, [])

        assert isinstance(analysis, IdeaAnalysis)
        assert analysis.error is None
        assert analysis.market_potential.score == "7"
        assert analysis.sentiment_analysis.positive == 65
        assert analysis.risk_factors.financial == 7
        assert analysis.time_to_market == "6"

    @pytest.mark.asyncio
    async def test_serialises_with_camel_case_keys(self) -> None:
        llm = _llm(return_value=json.dumps(VALID_ANALYSIS))

        analysis = await AnalysisService(llm).analyze_idea(IDEA, [])
        dumped = analysis.model_dump(by_alias=True, exclude_none=True)

        assert "marketPotential" in dumped
        assert "keyPoints" in dumped["marketAnalysis"]
        assert "error" not in dumped

    @pytest.mark.asyncio
    async def test_llm_error_returns_fallback(self) -> None:
        llm = _llm(side_effect=LLMAppError(code="llm_request_failed", message="quota exceeded"))

        analysis = await AnalysisService(llm).analyze_idea(IDEA, [])

        assert analysis.error == "quota exceeded"
        assert analysis.idea_summary == "Unable to generate a complete analysis at this time."

    @pytest.mark.asyncio
    async def test_malformed_json_returns_fallback(self) -> None:
        llm = _llm(return_value="I think this idea is great!")

        analysis = await AnalysisService(llm).analyze_idea(IDEA, [])

        assert analysis.error is not None
        assert "not a valid JSON object" in analysis.error

    @pytest.mark.asyncio
    async def test_missing_fields_return_fallback(self) -> None:
        llm = _llm(return_value='{"ideaSummary": "partial"}')

        analysis = await AnalysisService(llm).analyze_idea(IDEA, [])

        assert analysis.error is not None
        assert analysis.market_potential.score == "N/A"


class TestAnswerFollowUp:
    """Test follow-up answers."""

    @pytest.mark.asyncio
    async def test_answer_is_normalised(self) -> None:
        llm = _llm(return_value="##Pricing\n-Start at $8\n\n\n\n**Note:** test")

        answer = await AnalysisService(llm).answer_follow_up("Pricing?", IDEA, {}, [])

        assert answer == "## Pricing\n- Start at $8\n\n**Note:** test"

    @pytest.mark.asyncio
    async def test_llm_error_returns_apology(self) -> None:
        llm = _llm(side_effect=LLMAppError(code="llm_request_failed", message="timeout"))

        answer = await AnalysisService(llm).answer_follow_up("Pricing?", IDEA, {}, [])

        assert answer.startswith("I'm sorry, but I encountered an error")
        assert "timeout" in answer

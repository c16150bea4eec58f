"""Idea analysis service orchestrating the generative-language calls.

Three prompts drive the product:
- keyword extraction, used to search the news
- the structured market analysis of an idea plus its news coverage
- free-text answers to follow-up questions about an analysed idea

Model failures never reach the caller as exceptions here: keywords fall back
to words from the idea, analyses to a placeholder carrying the error, and
answers to an apology.
"""

import json
import logging
from typing import Any, Sequence

from pydantic import ValidationError

from idea_validator.adapters.llm.base import AbstractLLMClient
from idea_validator.core.errors import LLMAppError
from idea_validator.schemas.analysis import IdeaAnalysis
from idea_validator.schemas.idea import FollowUpQA
from idea_validator.schemas.news import NewsArticle
from idea_validator.utils.llm_json import extract_json_payload
from idea_validator.utils.markdown import normalize_answer_markdown

logger = logging.getLogger(__name__)

NO_ARTICLES_NOTICE = "No relevant news articles found. Please provide general market analysis."


def fallback_keywords(idea_text: str) -> list[str]:
    """First five words longer than three characters."""
    return [word for word in idea_text.split() if len(word) > 3][:5]


def build_fallback_analysis(error_message: str) -> IdeaAnalysis:
    """Placeholder analysis returned when the model output is unusable."""
    return IdeaAnalysis.model_validate(
        {
            "ideaSummary": "Unable to generate a complete analysis at this time.",
            "marketPotential": {
                "score": "N/A",
                "summary": "Analysis unavailable due to technical difficulties.",
            },
            "marketAnalysis": {
                "keyPoints": ["Analysis currently unavailable.", "Please try again later."],
                "competitors": ["Data unavailable"],
            },
            "sentimentAnalysis": {"positive": 0, "neutral": 0, "negative": 0},
            "swotAnalysis": {
                "strengths": ["Analysis unavailable"],
                "weaknesses": ["Analysis unavailable"],
                "opportunities": ["Analysis unavailable"],
                "threats": ["Analysis unavailable"],
            },
            "keyTrends": ["Analysis currently unavailable"],
            "references": [{"title": "Error Information", "url": "#"}],
            "executionSteps": ["Unable to provide suggestions due to technical difficulties"],
            "riskFactors": {"regulatory": 0, "market": 0, "technical": 0, "financial": 0},
            "timeToMarket": "N/A",
            "error": error_message,
        }
    )


def build_keywords_prompt(idea_text: str) -> str:
    return f"""
Extract 3-5 most relevant keywords from the following business idea.
Return only the keywords as a JSON array of strings, without any markdown formatting, code blocks, or additional text.

Business Idea: {idea_text}

Your response should be only: ["keyword1", "keyword2", "keyword3"]
No markdown, no code blocks, no additional explanation.
""".strip()


def format_articles(articles: Sequence[NewsArticle]) -> str:
    """Render articles as numbered prompt sections."""
    if not articles:
        return NO_ARTICLES_NOTICE

    return "\n\n".join(
        f"Article {index}:\n"
        f"Title: {article.title}\n"
        f"Description: {article.description or 'No description available'}\n"
        f"URL: {article.url}"
        for index, article in enumerate(articles, start=1)
    )


def build_analysis_prompt(idea_text: str, articles: Sequence[NewsArticle]) -> str:
    """Build the structured analysis prompt.

    The JSON skeleton mirrors ``IdeaAnalysis`` so the response validates
    directly against the schema.

    Args:
        idea_text: The business idea as submitted.
        articles: News articles found for the idea's keywords.

    Returns:
        Formatted prompt string for the LLM.
    """
    return f"""
You are a business idea validator assistant. Analyze the following business idea and related news articles to provide structured feedback that can be easily visualized.

BUSINESS IDEA:
{idea_text}

RELEVANT NEWS ARTICLES:
{format_articles(articles)}

Please provide analysis in the following JSON format:
{{
  "ideaSummary": "A concise summary of the idea (max 2 sentences)",
  "marketPotential": {{
    "score": "A score from 1-10 rating the market potential",
    "summary": "A brief 1-2 sentence explanation of the score"
  }},
  "marketAnalysis": {{
    "keyPoints": ["3-4 key bullet points about the market (each max 15 words)"],
    "competitors": ["3-5 main competitors or similar companies in this space"]
  }},
  "sentimentAnalysis": {{
    "positive": "Percentage of positive sentiment in news (e.g., 65)",
    "neutral": "Percentage of neutral sentiment in news (e.g., 20)",
    "negative": "Percentage of negative sentiment in news (e.g., 15)"
  }},
  "swotAnalysis": {{
    "strengths": ["3-4 brief bullet points about strengths (each max 10 words)"],
    "weaknesses": ["3-4 brief bullet points about weaknesses (each max 10 words)"],
    "opportunities": ["3-4 brief bullet points about opportunities (each max 10 words)"],
    "threats": ["3-4 brief bullet points about threats (each max 10 words)"]
  }},
  "keyTrends": ["3-5 current trends in this market (each max 15 words)"],
  "references": [
    {{"title": "Reference title", "url": "Reference URL"}}
  ],
  "executionSteps": ["5-6 specific, actionable steps to execute (each max 15 words)"],
  "riskFactors": {{
    "regulatory": "Risk score from 1-10",
    "market": "Risk score from 1-10",
    "technical": "Risk score from 1-10",
    "financial": "Risk score from 1-10"
  }},
  "timeToMarket": "Estimated time to market in months (e.g., 6)"
}}

Keep all text extremely concise, focusing on visualization-friendly data points. Return ONLY the JSON object without any additional text, explanation, or markdown formatting.
""".strip()


def build_follow_up_prompt(
    question: str,
    idea_text: str,
    analysis: dict[str, Any] | None,
    previous: Sequence[FollowUpQA] = (),
) -> str:
    analysis_json = json.dumps(analysis or {}, indent=2, ensure_ascii=False, default=str)

    history = ""
    if previous:
        formatted = "\n\n".join(
            f"Q{index}: {qa.question}\nA{index}: {qa.answer}"
            for index, qa in enumerate(previous, start=1)
        )
        history = f"PREVIOUS QUESTIONS AND ANSWERS:\n{formatted}\n\n"

    return f"""
You are a business idea validator assistant. Answer the following follow-up question based on the business idea and your previous analysis.

BUSINESS IDEA:
{idea_text}

YOUR PREVIOUS ANALYSIS:
{analysis_json}

{history}FOLLOW-UP QUESTION:
{question}

IMPORTANT GUIDELINES FOR YOUR RESPONSE:
1. Be concise and direct - keep your response under 150 words
2. Use bullet points for key information instead of lengthy paragraphs
3. Bold important terms or conclusions using markdown (**term**)
4. Organize the answer with clear section headers if applicable
5. Format numbers and statistics in an easily scannable way
6. Focus only on the most relevant information to the specific question
7. Use a professional, actionable tone
8. Avoid unnecessary preambles or summaries

Your response should be structured, visually appealing, and quickly digestible.
""".strip()


class AnalysisService:
    """Service running the idea prompts against an LLM client.

    Attributes:
        llm: LLM client adapter returning raw text.
        temperature: Sampling temperature passed to every call.
    """

    def __init__(self, llm: AbstractLLMClient, temperature: float = 0.4) -> None:
        self.llm = llm
        self.temperature = temperature

    async def extract_keywords(self, idea_text: str) -> list[str]:
        """Ask the model for 3-5 search keywords describing the idea.

        Returns:
            Keywords from the model, or ``fallback_keywords`` when the call
            fails or the answer is not a JSON array of strings.
        """
        try:
            raw = await self.llm.generate_text(
                build_keywords_prompt(idea_text),
                temperature=self.temperature,
            )
            payload = extract_json_payload(raw, expect="array")
        except LLMAppError as exc:
            keywords = fallback_keywords(idea_text)
            logger.warning(
                "analysis.keywords_fallback",
                extra={"error_code": exc.code, "keyword_count": len(keywords)},
            )
            return keywords

        keywords = [str(item).strip() for item in payload if str(item).strip()]
        if not keywords:
            logger.warning("analysis.keywords_fallback", extra={"error_code": "llm_no_keywords"})
            return fallback_keywords(idea_text)
        return keywords

    async def analyze_idea(
        self, idea_text: str, articles: Sequence[NewsArticle]
    ) -> IdeaAnalysis:
        """Produce the structured analysis for an idea and its news coverage.

        Args:
            idea_text: The business idea as submitted.
            articles: Articles returned by the news search (may be placeholders).

        Returns:
            The validated analysis, or the placeholder analysis with ``error``
            set when the model fails or answers with something unusable.
        """
        logger.info(
            "analysis.started",
            extra={"article_count": len(articles), "provider": self.llm.provider},
        )
        try:
            raw = await self.llm.generate_text(
                build_analysis_prompt(idea_text, articles),
                temperature=self.temperature,
            )
            payload = extract_json_payload(raw, expect="object")
            analysis = IdeaAnalysis.model_validate(payload)
        except LLMAppError as exc:
            logger.error("analysis.failed", extra={"error_code": exc.code})
            return build_fallback_analysis(exc.message)
        except ValidationError as exc:
            logger.error(
                "analysis.invalid_schema",
                extra={"error_count": exc.error_count()},
            )
            return build_fallback_analysis(f"LLM response did not match the analysis schema: {exc}")

        logger.info("analysis.completed", extra={"provider": self.llm.provider})
        return analysis

    async def answer_follow_up(
        self,
        question: str,
        idea_text: str,
        analysis: dict[str, Any] | None,
        previous: Sequence[FollowUpQA] = (),
    ) -> str:
        try:
            raw = await self.llm.generate_text(
                build_follow_up_prompt(question, idea_text, analysis, previous),
                temperature=self.temperature,
            )
        except LLMAppError as exc:
            logger.error("analysis.follow_up_failed", extra={"error_code": exc.code})
            return (
                "I'm sorry, but I encountered an error while processing your question: "
                f"{exc.message}. Please try asking a different question or try again later."
            )
        return normalize_answer_markdown(raw)

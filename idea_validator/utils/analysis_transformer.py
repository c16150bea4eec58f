"""Conversion of legacy prose analyses into the structured format.

Early analyses were stored as free-text sections (``marketAnalysis``,
``trendsAndSentiments``, ``executionSuggestions``, ``risks``). They are
converted on read with simple keyword heuristics so every idea can be shown
and discussed with the same structure.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

_STRUCTURED_KEYS = ("marketPotential", "sentimentAnalysis", "swotAnalysis")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_BULLET_MARKER = re.compile(r"^[-•]\s*")

DEFAULT_EXECUTION_STEPS = [
    "Step 1: Validate concept",
    "Step 2: Research market",
    "Step 3: Develop MVP",
    "Step 4: Gather feedback",
]

RISK_KEYWORDS = {
    "regulatory": ("regulation", "compliance", "legal", "government"),
    "market": ("market", "demand", "customer", "competition"),
    "technical": ("technical", "technology", "development", "engineering"),
    "financial": ("financial", "funding", "cost", "investment"),
}


def is_structured(analysis: Mapping[str, Any]) -> bool:
    return any(analysis.get(key) for key in _STRUCTURED_KEYS)


def extract_bullet_points(text: str | None, count: int = 3, *keywords: str) -> list[str]:
    """Pick up to ``count`` sentences, preferring ones mentioning ``keywords``."""
    if not text:
        return ["No data available"] * count

    sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]

    if keywords:
        relevant = [
            s for s in sentences
            if any(keyword.lower() in s.lower() for keyword in keywords)
        ]
        if relevant:
            return [s.strip() for s in relevant[:count]]

    return [s.strip() for s in sentences[:count]]


def calculate_risk_score(risks_text: str | None, keywords: tuple[str, ...]) -> int:
    """Score 5 by default, 7 with one or two keyword hits, 8 with more."""
    if not risks_text:
        return 5

    text = risks_text.lower()
    matches = sum(1 for keyword in keywords if keyword.lower() in text)
    if matches > 2:
        return 8
    if matches > 0:
        return 7
    return 5


def _execution_steps(suggestions: str | None) -> list[str]:
    if not suggestions:
        return list(DEFAULT_EXECUTION_STEPS)

    steps = []
    for line in suggestions.split("\n"):
        line = line.strip()
        if line.startswith("-") or line.startswith("•"):
            steps.append(_BULLET_MARKER.sub("", line))
    return steps[:6]


def transform_analysis_format(analysis: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``analysis`` in the structured format.

    Structured analyses are returned unchanged (as a new dict).
    """
    if is_structured(analysis):
        return dict(analysis)

    market_text = analysis.get("marketAnalysis") or None
    trends_text = analysis.get("trendsAndSentiments") or None
    risks_text = analysis.get("risks") or None

    summary = (
        market_text.split(".")[0] + "."
        if market_text
        else "No market analysis available"
    )

    return {
        "ideaSummary": analysis.get("ideaSummary") or "No summary available",
        "marketPotential": {"score": "5", "summary": summary},
        "marketAnalysis": {
            "keyPoints": extract_bullet_points(market_text, 4),
            "competitors": ["Data not available in this format"],
        },
        "sentimentAnalysis": {"positive": 50, "neutral": 25, "negative": 25},
        "swotAnalysis": {
            "strengths": extract_bullet_points(market_text, 3, "strength", "advantage", "benefit"),
            "weaknesses": extract_bullet_points(market_text, 3, "weakness", "challenge", "issue"),
            "opportunities": extract_bullet_points(market_text, 3, "opportunity", "potential", "growth"),
            "threats": extract_bullet_points(market_text, 3, "threat", "risk", "competitor"),
        },
        "keyTrends": extract_bullet_points(trends_text, 4, "trend", "growing", "emerging"),
        "references": list(analysis.get("references") or []),
        "executionSteps": _execution_steps(analysis.get("executionSuggestions")),
        "riskFactors": {
            name: calculate_risk_score(risks_text, keywords)
            for name, keywords in RISK_KEYWORDS.items()
        },
        "timeToMarket": "6",
    }

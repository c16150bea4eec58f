"""Extraction of JSON payloads from free-text model responses.

Models asked for "JSON only" still wrap answers in markdown fences, prefix a
``json`` language tag, or add prose after the payload. The extractor keeps
only the payload and refuses anything not delimited by the expected brackets.
"""

from __future__ import annotations

import json
import re
from typing import Any, Literal

from idea_validator.core.errors import LLMAppError

# First fenced block, optional "json" tag, non-greedy body
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_LANGUAGE_TAG = re.compile(r"^json\s+", re.IGNORECASE)

_DELIMITERS = {
    "object": ("{", "}"),
    "array": ("[", "]"),
}


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or ``text`` without fences."""

    text = text.strip()
    if "```" in text:
        match = _FENCED_BLOCK.search(text)
        if match and match.group(1).strip():
            text = match.group(1).strip()
        else:
            text = text.replace("```", "").strip()
    return _LANGUAGE_TAG.sub("", text).strip()


def extract_json_payload(text: str, *, expect: Literal["object", "array"] = "object") -> Any:
    """Parse the JSON object or array contained in a model response.

    Args:
        text: Raw model output.
        expect: Which top-level JSON type the caller requires.

    Returns:
        The decoded dict (``expect="object"``) or list (``expect="array"``).

    Raises:
        LLMAppError: If no payload with the expected delimiters can be decoded.
    """

    opening, closing = _DELIMITERS[expect]
    candidate = strip_code_fences(text or "")

    if not (candidate.startswith(opening) and candidate.endswith(closing)):
        raise LLMAppError(
            code="llm_malformed_response",
            message=f"Response is not a valid JSON {expect}",
        )

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise LLMAppError(
            code="llm_malformed_response",
            message=f"LLM returned invalid JSON: {exc}",
        ) from exc

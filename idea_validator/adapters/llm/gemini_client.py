"""Google Gemini LLM client adapter."""

from typing import Any

from google import genai
from google.genai import types

from idea_validator.adapters.llm.base import AbstractLLMClient
from idea_validator.core.errors import LLMAppError


class GeminiClient(AbstractLLMClient):
    """Client for Gemini text generation.

    Uses the official google-genai SDK through its async (``aio``) surface.
    """

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: float = 45.0,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key.
            model: Model name (e.g., "gemini-2.0-flash").
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
        )
        self.model = model

    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        config = types.GenerateContentConfig(
            temperature=kwargs.pop("temperature", 0.4),
            max_output_tokens=kwargs.pop("max_tokens", None),
            top_p=kwargs.pop("top_p", None),
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as exc:
            raise LLMAppError(
                code="llm_request_failed",
                message=f"Gemini API error: {exc}",
                details={"provider": self.provider, "model": self.model},
            ) from exc

        text = response.text
        if not text or not text.strip():
            raise LLMAppError(
                code="llm_empty_response",
                message="LLM returned empty response",
                details={"provider": self.provider, "model": self.model},
            )
        return text.strip()

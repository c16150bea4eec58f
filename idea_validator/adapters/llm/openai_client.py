"""OpenAI LLM client adapter."""

from typing import Any

from openai import AsyncOpenAI

from idea_validator.adapters.llm.base import AbstractLLMClient
from idea_validator.core.errors import LLMAppError


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI (or OpenAI-compatible) chat completions.

    Uses the official OpenAI Python SDK with async support.
    """

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key for authentication.
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini").
            base_url: Optional custom base URL for OpenAI API.
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": kwargs.pop("temperature", 0.4),
        }

        allowed_params = {
            "max_tokens",
            "top_p",
            "frequency_penalty",
            "presence_penalty",
            "seed",
        }
        for param in allowed_params:
            if param in kwargs:
                request_params[param] = kwargs[param]

        try:
            response = await self.client.chat.completions.create(**request_params)
            content = response.choices[0].message.content
        except Exception as exc:
            raise LLMAppError(
                code="llm_request_failed",
                message=f"OpenAI API error: {exc}",
                details={"provider": self.provider, "model": self.model},
            ) from exc

        if content is None or not content.strip():
            raise LLMAppError(
                code="llm_empty_response",
                message="LLM returned empty response",
                details={"provider": self.provider, "model": self.model},
            )
        return content.strip()

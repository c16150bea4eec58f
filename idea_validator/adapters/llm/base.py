from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
    """Interface for generative-language clients returning raw text."""

    provider: str = "unknown"
    model: str = ""

    @abstractmethod
    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        """Generate a free-text completion for ``prompt``.

        Callers that expect JSON extract and validate it themselves, since
        models often wrap payloads in markdown fences or add prose.

        Args:
            prompt: Full prompt to send to the model.
            **kwargs: Provider options (e.g., temperature, max_tokens).

        Returns:
            The model's text response, stripped.

        Raises:
            LLMAppError: If the provider call fails or returns no text.
        """
        ...

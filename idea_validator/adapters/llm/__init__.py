"""LLM adapter layer - abstracts over generative-language providers."""

from idea_validator.adapters.llm.base import AbstractLLMClient
from idea_validator.adapters.llm.factory import create_llm_client

__all__ = [
    "AbstractLLMClient",
    "create_llm_client",
]

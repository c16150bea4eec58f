"""Factory pattern for creating LLM client instances."""

from idea_validator.adapters.llm.base import AbstractLLMClient
from idea_validator.core.config import LLMSettings, settings
from idea_validator.core.errors import ConfigurationAppError

SUPPORTED_PROVIDERS = ("gemini", "openai")


def create_llm_client(llm_settings: LLMSettings | None = None) -> AbstractLLMClient:
    """Instantiate the LLM client for the configured provider.

    Called lazily on the first request that needs the model, so a missing key
    surfaces as a descriptive error at first use rather than at import.

    Returns:
        AbstractLLMClient: Configured LLM client instance.

    Raises:
        ConfigurationAppError: If the provider is unknown or its API key is missing.
    """
    cfg = llm_settings or settings.llm
    provider = cfg.provider.lower()

    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationAppError(
            code="llm_unknown_provider",
            message=(
                f"Unknown LLM provider: '{provider}'. "
                f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
            ),
        )

    if not cfg.api_key:
        raise ConfigurationAppError(
            code="llm_missing_api_key",
            message=f"{provider} provider requires the LLM_API_KEY environment variable",
            details={"provider": provider},
        )

    if provider == "gemini":
        from idea_validator.adapters.llm.gemini_client import GeminiClient

        return GeminiClient(
            api_key=cfg.api_key,
            model=cfg.model,
            timeout_seconds=cfg.timeout_seconds,
        )

    from idea_validator.adapters.llm.openai_client import OpenAIClient

    return OpenAIClient(
        api_key=cfg.api_key,
        model=cfg.model,
        base_url=cfg.base_url,
        timeout_seconds=cfg.timeout_seconds,
    )

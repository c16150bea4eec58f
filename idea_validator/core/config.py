"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Settings are grouped by concern, each with its own env prefix
(LLM_, NEWS_, STORE_, QUOTA_, LOG_, APP_).
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LLMSettings(BaseSettings):
    """Generative-language provider configuration.

    The API key is optional here on purpose: a missing key is reported by the
    client factory the first time an analysis is requested.
    """

    provider: str = Field(
        "gemini",
        description="LLM provider name (gemini or openai)",
    )
    model: str = Field(
        "gemini-2.0-flash",
        description="Model name (e.g., gemini-2.0-flash, gpt-4o-mini)",
    )
    api_key: str | None = Field(
        None,
        description="API key for the selected provider",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible providers only)",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )
    temperature: float = Field(
        0.4,
        description="Sampling temperature used for analysis prompts",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class NewsSettings(BaseSettings):
    """News-search service configuration (NewsAPI)."""

    api_key: str | None = Field(
        None,
        description="NewsAPI key",
    )
    base_url: str = Field(
        "https://newsapi.org/v2",
        description="NewsAPI base URL",
    )
    language: str = Field("en", description="Article language filter")
    page_size: int = Field(5, ge=1, le=100, description="Articles per search")
    timeout_seconds: float = Field(10.0, description="Request timeout in seconds")

    model_config = SettingsConfigDict(
        env_prefix="NEWS_",
        case_sensitive=False,
    )


class StoreSettings(BaseSettings):
    """Document store configuration."""

    backend: str = Field(
        "firestore",
        description="Document store backend (firestore or memory)",
    )
    credentials_path: str | None = Field(
        None,
        description="Path to a service account JSON file; application default credentials when unset",
    )
    project_id: str | None = Field(
        None,
        description="Google Cloud project id override",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )


class QuotaSettings(BaseSettings):
    """Question-credit quota tracking configuration."""

    question_limit: int = Field(
        10,
        ge=1,
        description="Credits a user may consume (ideas plus follow-up questions)",
    )
    freshness_seconds: float = Field(
        7200.0,
        description="Maximum age of a cached count for plain reads",
    )
    debounce_seconds: float = Field(
        2.0,
        description="Delay after the last increment before pending credits are flushed",
    )
    near_limit_margin: int = Field(
        2,
        ge=0,
        description="Distance from the limit at which stale caches are re-verified",
    )
    reverify_after_seconds: float = Field(
        900.0,
        description="Cache age after which near-limit checks go to the remote store",
    )
    cache_backend: str = Field(
        "auto",
        description="Local quota cache (auto, file or memory)",
    )
    cache_dir: str = Field(
        ".cache/quota",
        description="Directory used by the file-backed quota cache",
    )
    cache_max_age_seconds: float = Field(
        7 * 24 * 3600.0,
        description="Entries older than this are dropped by the file-backed cache",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUOTA_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, description="Rotate after this many bytes (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for authentication",
    )
    max_idea_chars: int = Field(
        5000,
        description="Maximum idea text length in characters",
    )
    max_question_chars: int = Field(
        1000,
        description="Maximum follow-up question length in characters",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Nested groups are built through default_factory so each one reads its own
    prefixed environment variables.
    """

    app_env: str = APP_ENV
    llm: LLMSettings = Field(default_factory=LLMSettings)
    news: NewsSettings = Field(default_factory=NewsSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    quota: QuotaSettings = Field(default_factory=QuotaSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    app: AppSettings = Field(default_factory=AppSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()

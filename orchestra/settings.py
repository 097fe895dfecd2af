"""
orchestra.settings - Centralized Configuration

Single source of truth for orchestra configuration.
Loads from .env files and environment variables using pydantic-settings.

Components never read settings themselves: the Dispatcher and adapters take
explicit configuration objects, built here from the loaded settings.

Usage:
    >>> from orchestra.settings import get_settings
    >>> settings = get_settings()
    >>> settings.dispatcher_pool_size
    16

    >>> config = settings.build_dispatcher_config()
    >>> limits = settings.build_provider_limits()
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from orchestra.execution.config import DispatcherConfig
from orchestra.execution.ratelimit import ProviderLimits
from orchestra.execution.request import ProviderType


class OrchestraSettings(BaseSettings):
    """Centralized orchestra configuration loaded from .env / environment variables.

    All ORCHESTRA_* prefixed env vars are loaded automatically.
    Provider credentials use standard names (no prefix) via aliases.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ORCHESTRA_",
        extra="ignore",
        populate_by_name=True,
    )

    # -- Environment -----------------------------------------------------------
    env: str = "development"

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Dispatcher ------------------------------------------------------------
    dispatcher_pool_size: int = Field(default=16, ge=1)
    default_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay_seconds: float = Field(default=0.5, ge=0)
    retry_max_delay_seconds: float = Field(default=30.0, ge=0)
    retry_jitter_ratio: float = Field(default=0.25, ge=0, le=1)

    # -- Provider limits -------------------------------------------------------
    jira_max_concurrency: int = Field(default=4, ge=1)
    jira_requests_per_minute: int | None = Field(default=100, ge=1)
    llm_max_concurrency: int = Field(default=8, ge=1)
    llm_requests_per_minute: int | None = Field(default=None, ge=1)

    # -- Jira ------------------------------------------------------------------
    jira_base_url: str | None = Field(default=None, alias="JIRA_BASE_URL")
    jira_email: str | None = Field(default=None, alias="JIRA_EMAIL")
    jira_api_token: SecretStr | None = Field(default=None, alias="JIRA_API_TOKEN")
    jira_timeout_seconds: float = Field(default=30.0, gt=0)

    # -- Model provider --------------------------------------------------------
    llm_provider: str = "anthropic"
    llm_model_id: str = "claude-sonnet-4-20250514"
    llm_timeout_seconds: float = Field(default=60.0, gt=0)
    anthropic_api_key: SecretStr | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")

    # -- Helpers ---------------------------------------------------------------

    def has_jira_credentials(self) -> bool:
        """Return True if every Jira connection setting is present."""
        return bool(self.jira_base_url and self.jira_email and self.jira_api_token)

    def llm_api_key(self) -> str | None:
        """Return the API key for the configured model provider, if any."""
        keys = {
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
        }
        secret = keys.get(self.llm_provider)
        return secret.get_secret_value() if secret else None

    def build_dispatcher_config(self) -> DispatcherConfig:
        """Build a DispatcherConfig from server-level settings."""
        return DispatcherConfig(
            pool_size=self.dispatcher_pool_size,
            base_delay_seconds=self.retry_base_delay_seconds,
            max_delay_seconds=max(self.retry_max_delay_seconds, self.retry_base_delay_seconds),
            jitter_ratio=self.retry_jitter_ratio,
        )

    def build_provider_limits(self) -> dict[str, ProviderLimits]:
        """Build per-provider limits keyed by provider tag."""
        return {
            ProviderType.JIRA: ProviderLimits(
                max_concurrency=self.jira_max_concurrency,
                max_requests=self.jira_requests_per_minute,
                window_seconds=60.0,
            ),
            ProviderType.MODEL: ProviderLimits(
                max_concurrency=self.llm_max_concurrency,
                max_requests=self.llm_requests_per_minute,
                window_seconds=60.0,
            ),
        }


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_settings() -> OrchestraSettings:
    """Return the cached OrchestraSettings singleton."""
    return OrchestraSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()

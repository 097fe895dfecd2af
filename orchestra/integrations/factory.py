"""
Tool adapter factory.
"""

import logging

from orchestra.exceptions import ProviderNotConfiguredError, UnknownProviderError
from orchestra.execution.request import ProviderType
from orchestra.integrations.base import ToolAdapter
from orchestra.integrations.jira.adapter import JiraToolAdapter
from orchestra.integrations.jira.types import JiraCredentials
from orchestra.integrations.model.adapter import ModelToolAdapter
from orchestra.llm.provider import LLMProviderFactory
from orchestra.settings import OrchestraSettings

logger = logging.getLogger(__name__)


def create_adapter(provider: str, settings: OrchestraSettings) -> ToolAdapter:
    """Create a configured adapter for the given provider.

    Args:
        provider: Provider tag (e.g. "jira", "model").
        settings: Loaded settings carrying endpoints and credentials.

    Returns:
        ToolAdapter instance.

    Raises:
        ProviderNotConfiguredError: If the provider's credentials are missing.
        UnknownProviderError: If the provider is unknown.
    """
    if provider == ProviderType.JIRA:
        if not settings.has_jira_credentials():
            raise ProviderNotConfiguredError(
                "Jira adapter requires JIRA_BASE_URL, JIRA_EMAIL and JIRA_API_TOKEN"
            )
        credentials = JiraCredentials(
            base_url=settings.jira_base_url,
            email=settings.jira_email,
            api_token=settings.jira_api_token,
        )
        return JiraToolAdapter(credentials, timeout_seconds=settings.jira_timeout_seconds)

    if provider == ProviderType.MODEL:
        api_key = settings.llm_api_key()
        if not api_key:
            raise ProviderNotConfiguredError(
                f"Model adapter requires an API key for provider '{settings.llm_provider}'"
            )
        try:
            llm = LLMProviderFactory.create(
                settings.llm_provider,
                api_key=api_key,
                model_id=settings.llm_model_id,
                timeout_seconds=settings.llm_timeout_seconds,
            )
        except ValueError as e:
            raise ProviderNotConfiguredError(str(e)) from e
        return ModelToolAdapter(llm)

    raise UnknownProviderError(f"Unknown tool provider: {provider}")


def create_configured_adapters(settings: OrchestraSettings) -> dict[ProviderType, ToolAdapter]:
    """Build adapters for every provider that has credentials configured."""
    adapters: dict[ProviderType, ToolAdapter] = {}
    for provider in ProviderType:
        try:
            adapters[provider] = create_adapter(provider, settings)
        except ProviderNotConfiguredError as e:
            logger.info(f"Skipping {provider.value} adapter: {e}")
    return adapters

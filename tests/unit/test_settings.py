"""
Unit tests for orchestra.settings - Centralized Configuration

Tests default values, environment variable overrides, .env file loading,
credential helpers, build_dispatcher_config(), build_provider_limits(),
and clear_settings_cache().
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from orchestra.execution.request import ProviderType
from orchestra.settings import OrchestraSettings, clear_settings_cache, get_settings

# Keys that alias-based fields read from the environment (no ORCHESTRA_ prefix).
# We strip these during tests so the real env doesn't leak in.
_ALIAS_KEYS = [
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Clear settings cache and strip credential env vars so tests are isolated."""
    clear_settings_cache()
    for key in _ALIAS_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    clear_settings_cache()


# ============================================================================
# Default Values
# ============================================================================


class TestDefaults:
    def test_default_env(self):
        settings = OrchestraSettings(_env_file=None)
        assert settings.env == "development"
        assert settings.log_level == "INFO"

    def test_default_dispatcher_settings(self):
        settings = OrchestraSettings(_env_file=None)
        assert settings.dispatcher_pool_size == 16
        assert settings.default_max_attempts == 3
        assert settings.retry_base_delay_seconds == 0.5
        assert settings.retry_max_delay_seconds == 30.0
        assert settings.retry_jitter_ratio == 0.25

    def test_default_credentials_are_none(self):
        settings = OrchestraSettings(_env_file=None)
        assert settings.jira_base_url is None
        assert settings.jira_api_token is None
        assert settings.anthropic_api_key is None
        assert settings.openai_api_key is None


# ============================================================================
# Environment Variable Overrides
# ============================================================================


class TestEnvOverrides:
    def test_orchestra_prefix_overrides(self):
        env = {
            "ORCHESTRA_ENV": "production",
            "ORCHESTRA_DISPATCHER_POOL_SIZE": "4",
            "ORCHESTRA_RETRY_BASE_DELAY_SECONDS": "1.5",
            "ORCHESTRA_LOG_LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = OrchestraSettings(_env_file=None)
            assert settings.env == "production"
            assert settings.dispatcher_pool_size == 4
            assert settings.retry_base_delay_seconds == 1.5
            assert settings.log_level == "DEBUG"

    def test_credential_aliases(self):
        env = {
            "JIRA_BASE_URL": "https://acme.atlassian.net",
            "JIRA_EMAIL": "bot@acme.com",
            "JIRA_API_TOKEN": "jira-token",
            "ANTHROPIC_API_KEY": "sk-ant-test",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = OrchestraSettings(_env_file=None)
            assert settings.jira_base_url == "https://acme.atlassian.net"
            assert settings.jira_api_token.get_secret_value() == "jira-token"
            assert settings.anthropic_api_key.get_secret_value() == "sk-ant-test"

    def test_secrets_hidden_in_repr(self):
        with patch.dict(os.environ, {"JIRA_API_TOKEN": "jira-token"}, clear=False):
            settings = OrchestraSettings(_env_file=None)
            assert "jira-token" not in repr(settings)

    def test_invalid_jitter_ratio_rejected(self):
        with patch.dict(os.environ, {"ORCHESTRA_RETRY_JITTER_RATIO": "1.5"}, clear=False):
            with pytest.raises(ValidationError):
                OrchestraSettings(_env_file=None)


# ============================================================================
# .env File Loading
# ============================================================================


class TestDotenvLoading:
    def test_loads_from_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("ORCHESTRA_ENV=staging\nJIRA_EMAIL=bot@acme.com\n")

        settings = OrchestraSettings(_env_file=str(env_file))
        assert settings.env == "staging"
        assert settings.jira_email == "bot@acme.com"

    def test_env_vars_override_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("ORCHESTRA_ENV=staging\n")

        with patch.dict(os.environ, {"ORCHESTRA_ENV": "production"}, clear=False):
            settings = OrchestraSettings(_env_file=str(env_file))
            assert settings.env == "production"


# ============================================================================
# Credential helpers
# ============================================================================


class TestCredentials:
    def test_jira_needs_every_field(self):
        env = {"JIRA_BASE_URL": "https://acme.atlassian.net", "JIRA_EMAIL": "bot@acme.com"}
        with patch.dict(os.environ, env, clear=False):
            assert OrchestraSettings(_env_file=None).has_jira_credentials() is False
        with patch.dict(os.environ, {**env, "JIRA_API_TOKEN": "t"}, clear=False):
            assert OrchestraSettings(_env_file=None).has_jira_credentials() is True

    def test_llm_api_key_follows_provider(self):
        env = {"ANTHROPIC_API_KEY": "sk-ant-test", "OPENAI_API_KEY": "sk-test"}
        with patch.dict(os.environ, env, clear=False):
            assert OrchestraSettings(_env_file=None).llm_api_key() == "sk-ant-test"
            settings = OrchestraSettings(_env_file=None, llm_provider="openai")
            assert settings.llm_api_key() == "sk-test"

    def test_llm_api_key_unknown_provider(self):
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-ant-test"}, clear=False):
            settings = OrchestraSettings(_env_file=None, llm_provider="mystery")
            assert settings.llm_api_key() is None


# ============================================================================
# Builders
# ============================================================================


class TestBuildDispatcherConfig:
    def test_builds_from_defaults(self):
        config = OrchestraSettings(_env_file=None).build_dispatcher_config()
        assert config.pool_size == 16
        assert config.base_delay_seconds == 0.5
        assert config.max_delay_seconds == 30.0
        assert config.jitter_ratio == 0.25

    def test_max_delay_never_below_base(self):
        settings = OrchestraSettings(
            _env_file=None, retry_base_delay_seconds=5, retry_max_delay_seconds=1
        )
        config = settings.build_dispatcher_config()
        assert config.max_delay_seconds == 5


class TestBuildProviderLimits:
    def test_limits_per_provider(self):
        settings = OrchestraSettings(
            _env_file=None, jira_max_concurrency=2, jira_requests_per_minute=50
        )
        limits = settings.build_provider_limits()

        assert limits[ProviderType.JIRA].max_concurrency == 2
        assert limits[ProviderType.JIRA].max_requests == 50
        assert limits[ProviderType.JIRA].window_seconds == 60.0
        assert limits[ProviderType.MODEL].max_requests is None


# ============================================================================
# Singleton
# ============================================================================


class TestSingleton:
    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_clear_cache_resets_singleton(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first

    def test_clear_cache_picks_up_new_env(self):
        with patch.dict(os.environ, {"ORCHESTRA_ENV": "before"}, clear=False):
            assert get_settings().env == "before"
        clear_settings_cache()
        with patch.dict(os.environ, {"ORCHESTRA_ENV": "after"}, clear=False):
            assert get_settings().env == "after"

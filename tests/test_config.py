"""Tests for fission.config module."""

import pytest

import fission.config as config
from fission.config import (
    API_KEY_ENV_VARS,
    AVAILABLE_MODELS,
    CHECK_THRESHOLDS,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    LLMProvider,
    get_api_key_env_var,
    load_config,
)
from fission.global_config import GlobalConfigError


@pytest.fixture
def restore_active(monkeypatch):
    """Restore the active settings after load_config rewrites them."""
    for name in ("ACTIVE_PROVIDER", "ACTIVE_MODEL", "MAX_TOKENS", "TEMPERATURE", "LLM_TIMEOUT_SECONDS"):
        monkeypatch.setattr(config, name, getattr(config, name))


def _patch_getters(mocker, **values):
    for name in ("active_provider", "active_model", "max_tokens", "temperature", "timeout"):
        mocker.patch(f"fission.global_config.get_{name}", return_value=values.get(name))


class TestLLMProviderEnum:
    """Tests for LLMProvider enum."""

    def test_values(self):
        """Test the provider identifiers used in config.yaml."""
        assert [p.value for p in LLMProvider] == [
            "anthropic",
            "openai",
            "google",
            "groq",
            "cohere",
            "openrouter",
        ]

    def test_default_model_belongs_to_default_provider(self):
        """Test that the fallback model is offered by the fallback provider."""
        assert DEFAULT_MODEL in AVAILABLE_MODELS[DEFAULT_PROVIDER]


class TestLoadConfig:
    """Tests for load_config function."""

    def test_applies_global_settings(self, mocker, restore_active):
        """Test that configured values become the active ones."""
        _patch_getters(
            mocker,
            active_provider=LLMProvider.OPENAI,
            active_model="gpt-4.1",
            max_tokens=1000,
            temperature=0.5,
            timeout=15,
        )

        load_config()

        assert config.ACTIVE_PROVIDER == LLMProvider.OPENAI
        assert config.ACTIVE_MODEL == "gpt-4.1"
        assert config.MAX_TOKENS == 1000
        assert config.TEMPERATURE == 0.5
        assert config.LLM_TIMEOUT_SECONDS == 15

    def test_missing_values_keep_defaults(self, mocker, restore_active):
        """Test that unset values leave the defaults alone."""
        _patch_getters(mocker, active_model="claude-opus-4-20250514")
        before = config.MAX_TOKENS

        load_config()

        assert config.ACTIVE_MODEL == "claude-opus-4-20250514"
        assert config.MAX_TOKENS == before

    def test_zero_temperature_applied(self, mocker, restore_active):
        """Test that a falsy but set temperature is still applied."""
        _patch_getters(mocker, temperature=0.0)

        load_config()

        assert config.TEMPERATURE == 0.0

    def test_unreadable_config_keeps_defaults(self, mocker, restore_active):
        """Test that a broken config file does not stop the CLI."""
        mocker.patch(
            "fission.global_config.get_active_provider", side_effect=GlobalConfigError("bad yaml")
        )
        before = config.ACTIVE_MODEL

        load_config()

        assert config.ACTIVE_MODEL == before


class TestCheckThresholds:
    """Tests for CHECK_THRESHOLDS."""

    def test_strict_is_tighter(self):
        """Test that every strict limit is at least as tight as normal."""
        normal, strict = CHECK_THRESHOLDS["normal"], CHECK_THRESHOLDS["strict"]

        assert normal.keys() == strict.keys()
        for key in ("max_files", "max_insertions", "max_deletions", "max_dirs"):
            assert strict[key] <= normal[key]
        assert strict["min_msg_len"] >= normal["min_msg_len"]


class TestAvailableModels:
    """Tests for AVAILABLE_MODELS dictionary."""

    def test_has_all_providers(self):
        """Test that all providers have models defined."""
        for provider in LLMProvider:
            assert AVAILABLE_MODELS[provider]

    def test_openrouter_models(self):
        """Test OpenRouter models have provider prefix."""
        assert all("/" in m for m in AVAILABLE_MODELS[LLMProvider.OPENROUTER])


class TestAPIKeyEnvVars:
    """Tests for API key environment variables."""

    def test_has_all_providers(self):
        """Test that all providers have env var defined."""
        for provider in LLMProvider:
            assert API_KEY_ENV_VARS[provider].endswith("_API_KEY")

    def test_get_api_key_env_var(self):
        """Test that correct env var is returned."""
        assert get_api_key_env_var(LLMProvider.ANTHROPIC) == "ANTHROPIC_API_KEY"
        assert get_api_key_env_var(LLMProvider.OPENROUTER) == "OPENROUTER_API_KEY"

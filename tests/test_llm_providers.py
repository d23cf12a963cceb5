"""Tests for LLM provider modules."""

import os
from unittest.mock import MagicMock, patch

import pytest

from fission.config import LLMProvider
from fission.llm import LLMError, MissingAPIKeyError, get_provider
from fission.llm.anthropic_provider import AnthropicProvider
from fission.llm.cohere_provider import CohereProvider
from fission.llm.google_provider import GoogleProvider
from fission.llm.groq_provider import GroqProvider
from fission.llm.openai_provider import OpenAIProvider
from fission.llm.openrouter_provider import OpenRouterProvider


@pytest.fixture
def no_keys():
    """Clear the environment and the credentials file."""
    with patch.dict(os.environ, {}, clear=True):
        with patch("fission.llm.base.get_credential", return_value=None):
            yield


def _chat_completion(text, prompt_tokens=12, completion_tokens=34):
    """Build an OpenAI-style chat completion response."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = text
    response.usage.prompt_tokens = prompt_tokens
    response.usage.completion_tokens = completion_tokens
    return response


class TestGetProvider:
    """Tests for get_provider factory function."""

    @pytest.mark.parametrize(
        "provider, cls",
        [
            (LLMProvider.ANTHROPIC, AnthropicProvider),
            (LLMProvider.OPENAI, OpenAIProvider),
            (LLMProvider.GOOGLE, GoogleProvider),
            (LLMProvider.GROQ, GroqProvider),
            (LLMProvider.COHERE, CohereProvider),
            (LLMProvider.OPENROUTER, OpenRouterProvider),
        ],
    )
    def test_returns_provider_class(self, provider, cls):
        """Test that each provider enum maps to its class."""
        assert isinstance(get_provider(provider), cls)

    def test_explicit_model(self):
        """Test that an explicit model is passed through."""
        provider = get_provider(LLMProvider.OPENAI, model="gpt-4.1-mini")

        assert provider.model == "gpt-4.1-mini"

    def test_defaults_to_active_configuration(self):
        """Test that no arguments use the active provider and model."""
        with patch("fission.config.ACTIVE_PROVIDER", LLMProvider.GROQ):
            with patch("fission.config.ACTIVE_MODEL", "llama-3.1-8b-instant"):
                provider = get_provider()

        assert isinstance(provider, GroqProvider)
        assert provider.model == "llama-3.1-8b-instant"

    def test_unsupported_provider(self):
        """Test that an unknown provider raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            get_provider("mistral")


class TestDefaultModels:
    """Tests for each provider's default model."""

    def test_anthropic_uses_active_model(self):
        """Test that Anthropic falls back to the active model."""
        with patch("fission.config.ACTIVE_MODEL", "claude-opus-4-20250514"):
            assert AnthropicProvider().model == "claude-opus-4-20250514"

    def test_openai(self):
        assert OpenAIProvider().model == "gpt-4o"

    def test_google(self):
        assert GoogleProvider().model == "gemini-2.5-flash"

    def test_groq(self):
        assert GroqProvider().model == "llama-3.3-70b-versatile"

    def test_cohere(self):
        assert CohereProvider().model == "command-r-plus"

    def test_openrouter(self):
        assert OpenRouterProvider().model == "anthropic/claude-sonnet-4"


class TestMissingApiKey:
    """Tests for missing API keys across providers."""

    @pytest.mark.parametrize(
        "cls, env_var",
        [
            (AnthropicProvider, "ANTHROPIC_API_KEY"),
            (OpenAIProvider, "OPENAI_API_KEY"),
            (GoogleProvider, "GOOGLE_API_KEY"),
            (GroqProvider, "GROQ_API_KEY"),
            (CohereProvider, "COHERE_API_KEY"),
            (OpenRouterProvider, "OPENROUTER_API_KEY"),
        ],
    )
    def test_missing_api_key_raises_error(self, no_keys, cls, env_var):
        """Test that a missing key names its environment variable."""
        with pytest.raises(MissingAPIKeyError) as exc_info:
            cls().get_api_key()

        assert env_var in str(exc_info.value)

    def test_generate_raw_checks_key_first(self, no_keys):
        """Test that no client is built without a key."""
        with patch("fission.llm.openai_provider.OpenAI") as mock_openai:
            with pytest.raises(MissingAPIKeyError):
                OpenAIProvider().generate_raw("system", "user")

        mock_openai.assert_not_called()


class TestAnthropicProvider:
    """Tests for AnthropicProvider.generate_raw."""

    def test_generate_raw(self):
        """Test the request shape and the parsed result."""
        message = MagicMock()
        message.content = [MagicMock(text='{"commits": []}')]
        message.usage.input_tokens = 100
        message.usage.output_tokens = 20

        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}):
            with patch("fission.llm.anthropic_provider.Anthropic") as mock_cls:
                mock_cls.return_value.messages.create.return_value = message
                result = AnthropicProvider(model="claude-test").generate_raw(
                    "system", "user", max_tokens=777
                )

        assert result.raw_response == '{"commits": []}'
        assert (result.input_tokens, result.output_tokens) == (100, 20)
        assert result.model == "claude-test"
        assert mock_cls.call_args.kwargs["api_key"] == "sk-test"
        kwargs = mock_cls.return_value.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["max_tokens"] == 777
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]

    def test_api_failure_wrapped(self):
        """Test that SDK errors become LLMError."""
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}):
            with patch("fission.llm.anthropic_provider.Anthropic") as mock_cls:
                mock_cls.return_value.messages.create.side_effect = RuntimeError("overloaded")

                with pytest.raises(LLMError, match="Anthropic API call failed: overloaded"):
                    AnthropicProvider().generate_raw("system", "user")


class TestOpenAICompatibleProviders:
    """Tests for providers speaking the chat completions API."""

    def test_openai_generate_raw(self):
        """Test that OpenAI sends system and user messages."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}):
            with patch("fission.llm.openai_provider.OpenAI") as mock_cls:
                create = mock_cls.return_value.chat.completions.create
                create.return_value = _chat_completion("[]")
                result = OpenAIProvider().generate_raw("system", "user")

        assert result.raw_response == "[]"
        assert (result.input_tokens, result.output_tokens) == (12, 34)
        messages = create.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]

    def test_openai_none_content(self):
        """Test that a null message content becomes an empty string."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}):
            with patch("fission.llm.openai_provider.OpenAI") as mock_cls:
                mock_cls.return_value.chat.completions.create.return_value = _chat_completion(None)
                result = OpenAIProvider().generate_raw("system", "user")

        assert result.raw_response == ""

    def test_groq_generate_raw(self):
        """Test the Groq client round trip."""
        with patch.dict(os.environ, {"GROQ_API_KEY": "gsk-test"}):
            with patch("fission.llm.groq_provider.Groq") as mock_cls:
                mock_cls.return_value.chat.completions.create.return_value = _chat_completion("ok")
                result = GroqProvider().generate_raw("system", "user")

        assert result.raw_response == "ok"
        assert mock_cls.call_args.kwargs["api_key"] == "gsk-test"

    def test_groq_failure_wrapped(self):
        """Test that Groq SDK errors become LLMError."""
        with patch.dict(os.environ, {"GROQ_API_KEY": "gsk-test"}):
            with patch("fission.llm.groq_provider.Groq") as mock_cls:
                mock_cls.return_value.chat.completions.create.side_effect = RuntimeError("429")

                with pytest.raises(LLMError, match="Groq API call failed"):
                    GroqProvider().generate_raw("system", "user")

    def test_openrouter_uses_base_url_and_headers(self):
        """Test that OpenRouter targets its endpoint with attribution headers."""
        with patch.dict(os.environ, {"OPENROUTER_API_KEY": "or-test"}):
            with patch("fission.llm.openrouter_provider.OpenAI") as mock_cls:
                create = mock_cls.return_value.chat.completions.create
                create.return_value = _chat_completion("ok")
                OpenRouterProvider().generate_raw("system", "user")

        assert "openrouter.ai" in mock_cls.call_args.kwargs["base_url"]
        assert "extra_headers" in create.call_args.kwargs


class TestGoogleProvider:
    """Tests for GoogleProvider.generate_raw."""

    def _response(self, text="ok", finish_reason="STOP", candidates=True):
        response = MagicMock()
        response.candidates = [MagicMock(finish_reason=finish_reason)] if candidates else []
        response.text = text
        response.usage_metadata.prompt_token_count = 5
        response.usage_metadata.candidates_token_count = 7
        return response

    def _generate(self, response):
        with patch.dict(os.environ, {"GOOGLE_API_KEY": "g-test"}):
            with patch("fission.llm.google_provider.genai") as mock_genai:
                mock_genai.Client.return_value.models.generate_content.return_value = response
                return GoogleProvider().generate_raw("system", "user")

    def test_generate_raw(self):
        """Test a normal Gemini response."""
        result = self._generate(self._response("[]"))

        assert result.raw_response == "[]"
        assert (result.input_tokens, result.output_tokens) == (5, 7)

    def test_no_candidates(self):
        """Test that an empty candidate list is an error."""
        with pytest.raises(LLMError, match="no candidates"):
            self._generate(self._response(candidates=False))

    def test_safety_block(self):
        """Test that a safety stop is reported."""
        with pytest.raises(LLMError, match="blocked response"):
            self._generate(self._response(finish_reason="FinishReason.SAFETY"))

    def test_empty_text(self):
        """Test that a blank response is an error."""
        with pytest.raises(LLMError, match="empty response"):
            self._generate(self._response(text="   "))


class TestCohereProvider:
    """Tests for CohereProvider.generate_raw."""

    def test_generate_raw(self):
        """Test the Cohere v2 chat round trip."""
        response = MagicMock()
        response.message.content = [MagicMock(text='{"is_atomic": true}')]
        response.usage.tokens.input_tokens = 40.0
        response.usage.tokens.output_tokens = 8.0

        with patch.dict(os.environ, {"COHERE_API_KEY": "co-test"}):
            with patch("fission.llm.cohere_provider.cohere") as mock_cohere:
                mock_cohere.ClientV2.return_value.chat.return_value = response
                result = CohereProvider().generate_raw("system", "user")

        assert result.raw_response == '{"is_atomic": true}'
        assert (result.input_tokens, result.output_tokens) == (40, 8)

    def test_api_failure_wrapped(self):
        """Test that Cohere SDK errors become LLMError."""
        with patch.dict(os.environ, {"COHERE_API_KEY": "co-test"}):
            with patch("fission.llm.cohere_provider.cohere") as mock_cohere:
                mock_cohere.ClientV2.return_value.chat.side_effect = RuntimeError("bad gateway")

                with pytest.raises(LLMError, match="Cohere API call failed"):
                    CohereProvider().generate_raw("system", "user")

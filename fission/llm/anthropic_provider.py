"""Anthropic Claude provider implementation."""

from typing import Optional

from anthropic import Anthropic

import fission.config as _config
from fission.config import API_KEY_ENV_VARS, LLMProvider
from fission.llm.base import BaseLLMProvider, RawLLMResult
from fission.llm.exceptions import LLMError, MissingAPIKeyError


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude LLM provider."""

    def __init__(self, model: Optional[str] = None):
        """Initialize the Anthropic provider.

        Args:
            model: The model to use. Defaults to ACTIVE_MODEL from config.
        """
        self.model = model or _config.ACTIVE_MODEL
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.ANTHROPIC]

    def get_api_key(self) -> str:
        """Get the Anthropic API key from environment or credentials file."""
        return self._get_api_key_with_fallback(self.api_key_env_var, "Anthropic")

    def generate_raw(
        self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None
    ) -> RawLLMResult:
        """Generate a raw response using Anthropic Claude.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            LLMError: For other LLM-related errors.
        """
        api_key = self.get_api_key()
        client = Anthropic(api_key=api_key, timeout=self._timeout())

        try:
            message = client.messages.create(
                model=self.model,
                max_tokens=self._token_budget(max_tokens),
                temperature=_config.TEMPERATURE,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )

            raw_response = message.content[0].text
            input_tokens = message.usage.input_tokens
            output_tokens = message.usage.output_tokens

        except MissingAPIKeyError:
            raise
        except Exception as e:
            raise LLMError(f"Anthropic API call failed: {e}")

        return RawLLMResult(
            raw_response=raw_response,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

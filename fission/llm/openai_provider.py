"""OpenAI GPT provider implementation."""

from typing import Optional

from openai import OpenAI

import fission.config as _config
from fission.config import API_KEY_ENV_VARS, LLMProvider
from fission.llm.base import BaseLLMProvider, RawLLMResult
from fission.llm.exceptions import LLMError, MissingAPIKeyError


class OpenAIProvider(BaseLLMProvider):
    """OpenAI GPT LLM provider."""

    def __init__(self, model: Optional[str] = None):
        """Initialize the OpenAI provider.

        Args:
            model: The model to use. Defaults to gpt-4o.
        """
        self.model = model or "gpt-4o"
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.OPENAI]

    def get_api_key(self) -> str:
        """Get the OpenAI API key from environment or credentials file."""
        return self._get_api_key_with_fallback(self.api_key_env_var, "OpenAI")

    def generate_raw(
        self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None
    ) -> RawLLMResult:
        """Generate a raw response using OpenAI.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            LLMError: For other LLM-related errors.
        """
        api_key = self.get_api_key()
        client = OpenAI(api_key=api_key, timeout=self._timeout())

        try:
            response = client.chat.completions.create(
                model=self.model,
                max_tokens=self._token_budget(max_tokens),
                temperature=_config.TEMPERATURE,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )

            raw_response = response.choices[0].message.content or ""
            input_tokens = response.usage.prompt_tokens if response.usage else 0
            output_tokens = response.usage.completion_tokens if response.usage else 0

        except MissingAPIKeyError:
            raise
        except Exception as e:
            raise LLMError(f"OpenAI API call failed: {e}")

        return RawLLMResult(
            raw_response=raw_response,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

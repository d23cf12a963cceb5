"""OpenRouter provider implementation.

OpenRouter exposes many models behind an OpenAI-compatible API.
"""

from typing import Optional

from openai import OpenAI

import fission.config as _config
from fission.config import API_KEY_ENV_VARS, LLMProvider
from fission.llm.base import BaseLLMProvider, RawLLMResult
from fission.llm.exceptions import LLMError, MissingAPIKeyError

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(BaseLLMProvider):
    """OpenRouter LLM provider."""

    def __init__(self, model: Optional[str] = None):
        """Initialize the OpenRouter provider.

        Args:
            model: The model to use, as provider/model. Defaults to anthropic/claude-sonnet-4.
        """
        self.model = model or "anthropic/claude-sonnet-4"
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.OPENROUTER]

    def get_api_key(self) -> str:
        """Get the OpenRouter API key from environment or credentials file."""
        return self._get_api_key_with_fallback(self.api_key_env_var, "OpenRouter")

    def generate_raw(
        self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None
    ) -> RawLLMResult:
        """Generate a raw response through OpenRouter.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            LLMError: For other LLM-related errors.
        """
        api_key = self.get_api_key()

        # OpenAI client pointing to OpenRouter
        client = OpenAI(
            api_key=api_key,
            base_url=OPENROUTER_BASE_URL,
            timeout=self._timeout(),
        )

        try:
            response = client.chat.completions.create(
                model=self.model,
                max_tokens=self._token_budget(max_tokens),
                temperature=_config.TEMPERATURE,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                extra_headers={
                    "HTTP-Referer": "https://github.com/fission",
                    "X-Title": "fission",
                },
            )

            raw_response = response.choices[0].message.content or ""
            input_tokens = response.usage.prompt_tokens if response.usage else 0
            output_tokens = response.usage.completion_tokens if response.usage else 0

        except MissingAPIKeyError:
            raise
        except Exception as e:
            raise LLMError(f"OpenRouter API call failed: {e}")

        return RawLLMResult(
            raw_response=raw_response,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

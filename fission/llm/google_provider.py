"""Google Gemini provider implementation."""

from typing import Optional

from google import genai
from google.genai import types

import fission.config as _config
from fission.config import API_KEY_ENV_VARS, LLMProvider
from fission.llm.base import BaseLLMProvider, RawLLMResult
from fission.llm.exceptions import LLMError, MissingAPIKeyError


class GoogleProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    def __init__(self, model: Optional[str] = None):
        """Initialize the Google provider.

        Args:
            model: The model to use. Defaults to gemini-2.5-flash.
        """
        self.model = model or "gemini-2.5-flash"
        self.api_key_env_var = API_KEY_ENV_VARS[LLMProvider.GOOGLE]

    def get_api_key(self) -> str:
        """Get the Google API key from environment or credentials file."""
        return self._get_api_key_with_fallback(self.api_key_env_var, "Google")

    def generate_raw(
        self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None
    ) -> RawLLMResult:
        """Generate a raw response using Google Gemini.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            LLMError: For other LLM-related errors.
        """
        api_key = self.get_api_key()
        # HttpOptions timeout is in milliseconds
        client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(self._timeout() * 1000)),
        )

        try:
            response = client.models.generate_content(
                model=self.model,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    max_output_tokens=self._token_budget(max_tokens),
                    temperature=_config.TEMPERATURE,
                ),
            )

            if not response.candidates:
                raise LLMError("Google Gemini returned no candidates in response")

            finish_reason = str(getattr(response.candidates[0], "finish_reason", ""))
            if "SAFETY" in finish_reason:
                raise LLMError(f"Google Gemini blocked response: {finish_reason}")

            raw_response = response.text or ""
            if not raw_response.strip():
                raise LLMError("Google Gemini returned empty response")

            usage = response.usage_metadata
            input_tokens = (usage.prompt_token_count or 0) if usage else 0
            output_tokens = (usage.candidates_token_count or 0) if usage else 0

        except MissingAPIKeyError:
            raise
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"Google Gemini API call failed: {e}")

        return RawLLMResult(
            raw_response=raw_response,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

"""Base classes and shared utilities for LLM providers."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import fission.config as _config
from fission.global_config import GlobalConfigError, get_credential
from fission.llm.exceptions import MissingAPIKeyError


@dataclass
class RawLLMResult:
    """Raw text returned by an LLM call, with token usage."""

    raw_response: str
    model: str
    input_tokens: int
    output_tokens: int


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Providers expose a single operation: send a system and user prompt
    with a token budget and return the raw text. Response parsing is left
    to the caller.
    """

    model: str

    @abstractmethod
    def generate_raw(
        self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None
    ) -> RawLLMResult:
        """Generate a raw LLM response.

        Args:
            system_prompt: The system prompt to use.
            user_prompt: The user prompt to use.
            max_tokens: Output token budget. Defaults to MAX_TOKENS from config.

        Returns:
            A RawLLMResult containing the raw response and token usage.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            LLMError: For other LLM-related errors.
        """
        pass

    @abstractmethod
    def get_api_key(self) -> str:
        """Get the API key from environment or credentials file.

        Checks in order:
        1. Environment variable
        2. ~/.fission/credentials file
        3. Repo-level .env file (if loaded)

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If the API key is not found.
        """
        pass

    @staticmethod
    def _token_budget(max_tokens: Optional[int]) -> int:
        return max_tokens if max_tokens is not None else _config.MAX_TOKENS

    @staticmethod
    def _timeout() -> float:
        return float(_config.LLM_TIMEOUT_SECONDS)

    def _get_api_key_with_fallback(self, env_var_name: str, provider_name: str) -> str:
        """Helper to get API key with fallback to credentials file.

        Args:
            env_var_name: Environment variable name to check.
            provider_name: Human-readable provider name for error messages.

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If the API key is not found.
        """
        # First check environment variable
        api_key = os.getenv(env_var_name)
        if api_key:
            return api_key

        # Then check credentials file
        try:
            api_key = get_credential(env_var_name)
        except GlobalConfigError:
            api_key = None
        if api_key:
            return api_key

        raise MissingAPIKeyError(
            f"{provider_name} API key not found. Set it using:\n"
            f"  1. Environment variable: export {env_var_name}=your_key_here\n"
            f"  2. Run: fission config set-key {provider_name.lower()}\n"
            f"  3. Manually add to ~/.fission/credentials"
        )

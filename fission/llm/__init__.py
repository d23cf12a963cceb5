"""LLM provider module for fission.

This module provides a unified interface to multiple LLM providers.
The active provider is configured in fission/config.py.
"""

from typing import Optional

from dotenv import load_dotenv

import fission.config as _config
from fission.config import LLMProvider
from fission.llm.base import BaseLLMProvider, RawLLMResult
from fission.llm.exceptions import JSONParseError, LLMError, MissingAPIKeyError
from fission.llm.parsing import extract_json, parse_json_response

# Load environment variables from .env file
load_dotenv()


def get_provider(
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
) -> BaseLLMProvider:
    """Get an LLM provider instance.

    Args:
        provider: The provider to use. Defaults to ACTIVE_PROVIDER from config.
        model: The model to use. Defaults to ACTIVE_MODEL from config when the
            provider is the active one, else the provider's own default.

    Returns:
        An instance of the appropriate LLM provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    if provider is None:
        provider = _config.ACTIVE_PROVIDER
        model = model or _config.ACTIVE_MODEL

    if provider == LLMProvider.ANTHROPIC:
        from fission.llm.anthropic_provider import AnthropicProvider

        return AnthropicProvider(model=model)

    elif provider == LLMProvider.OPENAI:
        from fission.llm.openai_provider import OpenAIProvider

        return OpenAIProvider(model=model)

    elif provider == LLMProvider.GOOGLE:
        from fission.llm.google_provider import GoogleProvider

        return GoogleProvider(model=model)

    elif provider == LLMProvider.GROQ:
        from fission.llm.groq_provider import GroqProvider

        return GroqProvider(model=model)

    elif provider == LLMProvider.COHERE:
        from fission.llm.cohere_provider import CohereProvider

        return CohereProvider(model=model)

    elif provider == LLMProvider.OPENROUTER:
        from fission.llm.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(model=model)

    else:
        raise ValueError(f"Unsupported provider: {provider}")


# Export commonly used items
__all__ = [
    "BaseLLMProvider",
    "RawLLMResult",
    "LLMError",
    "MissingAPIKeyError",
    "JSONParseError",
    "extract_json",
    "parse_json_response",
    "get_provider",
]

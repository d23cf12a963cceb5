"""Configuration for fission.

Configuration is loaded from ~/.fission/config.yaml
Use 'fission config' commands to modify settings.
"""

from enum import Enum


class LLMProvider(Enum):
    """Supported LLM providers."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    GROQ = "groq"
    COHERE = "cohere"
    OPENROUTER = "openrouter"


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.fission/config.yaml doesn't exist

DEFAULT_PROVIDER = LLMProvider.ANTHROPIC
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.1
DEFAULT_TIMEOUT_SECONDS = 120

# Token budgets per request type
PLAN_MAX_TOKENS = 32768
CLASSIFY_MAX_TOKENS = 2048


# ============================================================
# SPLIT DEFAULTS
# ============================================================

DEFAULT_CONTEXT_LINES = 3
DEFAULT_CLASSIFY_CONCURRENCY = 5
DEFAULT_MAX_RETRIES = 2
MAX_DIFF_CHARS = 200_000
DEBUG_DIR_NAME = ".fission-debug"
PATCH_PREVIEW_CHARS = 500
CHECK_DIFF_CHARS = 8000  # Diff shown to the oracle by `fission check --llm`


# ============================================================
# ATOMICITY CHECK THRESHOLDS
# ============================================================

CHECK_THRESHOLDS = {
    "normal": {
        "max_files": 10,
        "max_insertions": 300,
        "max_deletions": 300,
        "max_dirs": 3,
        "min_msg_len": 10,
    },
    "strict": {
        "max_files": 5,
        "max_insertions": 100,
        "max_deletions": 100,
        "max_dirs": 2,
        "min_msg_len": 20,
    },
}


# ============================================================
# ACTIVE CONFIGURATION (loaded from global config)
# ============================================================

# Initially set to defaults - will be overridden by load_config()
ACTIVE_PROVIDER = DEFAULT_PROVIDER
ACTIVE_MODEL = DEFAULT_MODEL
MAX_TOKENS = DEFAULT_MAX_TOKENS
TEMPERATURE = DEFAULT_TEMPERATURE
LLM_TIMEOUT_SECONDS = DEFAULT_TIMEOUT_SECONDS


def load_config():
    """Load configuration from the global config file.

    This should be called by the CLI before using the LLM.
    """
    global ACTIVE_PROVIDER, ACTIVE_MODEL, MAX_TOKENS, TEMPERATURE, LLM_TIMEOUT_SECONDS

    # Import here to avoid circular dependency
    from fission import global_config

    try:
        provider = global_config.get_active_provider()
        model = global_config.get_active_model()
        max_tokens = global_config.get_max_tokens()
        temperature = global_config.get_temperature()
        timeout = global_config.get_timeout()
    except global_config.GlobalConfigError:
        # Unreadable config: keep defaults
        return

    if provider:
        ACTIVE_PROVIDER = provider
    if model:
        ACTIVE_MODEL = model
    if max_tokens is not None:
        MAX_TOKENS = max_tokens
    if temperature is not None:
        TEMPERATURE = temperature
    if timeout is not None:
        LLM_TIMEOUT_SECONDS = timeout


# ============================================================
# AVAILABLE MODELS PER PROVIDER
# ============================================================

AVAILABLE_MODELS = {
    LLMProvider.ANTHROPIC: [
        "claude-sonnet-4-20250514",
        "claude-opus-4-20250514",
        "claude-3-5-haiku-latest",
    ],
    LLMProvider.OPENAI: [
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4o",
        "gpt-4o-mini",
    ],
    LLMProvider.GOOGLE: [
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
    ],
    LLMProvider.GROQ: [
        "llama-3.3-70b-versatile",
        "llama-3.1-8b-instant",
    ],
    LLMProvider.COHERE: [
        "command-r-plus",
        "command-r",
    ],
    LLMProvider.OPENROUTER: [
        "anthropic/claude-sonnet-4",
        "openai/gpt-4o",
        "google/gemini-2.5-pro",
        "deepseek/deepseek-chat",
        "qwen/qwen-2.5-coder-32b-instruct",
    ],
}

# ============================================================
# API KEY ENVIRONMENT VARIABLES
# ============================================================

API_KEY_ENV_VARS = {
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.GOOGLE: "GOOGLE_API_KEY",
    LLMProvider.GROQ: "GROQ_API_KEY",
    LLMProvider.COHERE: "COHERE_API_KEY",
    LLMProvider.OPENROUTER: "OPENROUTER_API_KEY",
}


def get_api_key_env_var(provider: LLMProvider) -> str:
    """Get the environment variable name for the API key.

    Args:
        provider: The LLM provider.

    Returns:
        The environment variable name.
    """
    return API_KEY_ENV_VARS[provider]

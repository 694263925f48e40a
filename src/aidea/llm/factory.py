from typing import Any

from .base import LLMProvider
from .providers import OpenRouterProvider


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create a completion provider instance.

    Args:
        provider: Provider type ('openrouter' or 'openai')
        **config: Provider configuration
            - api_key: str (required)
            - model: str (default: 'temper-1')
            - base_url: str | None (openrouter default: OpenRouter API)

    Returns:
        Initialized provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "openrouter",
        ...     api_key="sk-or-...",
        ...     model="temper-1"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower not in ("openrouter", "openai"):
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: 'openrouter', 'openai'"
        )
    if not config.get("api_key"):
        raise TypeError(f"{provider} provider requires 'api_key' in config")

    if provider_lower == "openai":
        config.setdefault("base_url", None)
    return OpenRouterProvider(**config)

from .openrouter import MODEL_ALIASES, OPENROUTER_BASE_URL, OpenRouterProvider, normalize_assistant_content

__all__ = [
    "MODEL_ALIASES",
    "OPENROUTER_BASE_URL",
    "OpenRouterProvider",
    "normalize_assistant_content",
]

from .base import LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, LLMResponse
from .providers import MODEL_ALIASES, OpenRouterProvider, normalize_assistant_content

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "LLMResponse",
    "MODEL_ALIASES",
    "OpenRouterProvider",
    "normalize_assistant_content",
]

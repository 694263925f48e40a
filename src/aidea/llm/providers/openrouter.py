import logging
from typing import Any

from openai import AsyncOpenAI

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# UI model names -> service model ids; anything else passes through
MODEL_ALIASES = {
    "temper-1": "openrouter/sherlock-think-alpha",
    "temper-1-colossus": "deepseek/deepseek-r1-0528:free",
}


def resolve_model(name: str) -> str:
    """Map a UI model name to the id the service expects."""
    return MODEL_ALIASES.get(name, name)


def normalize_assistant_content(content: Any) -> str:
    """Flatten the assistant ``content`` field into plain text.

    Strings pass through; lists of parts are joined with newlines using
    each part's ``text`` or ``content``; ``None`` becomes an empty string.
    """
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict):
                parts.append(part.get("text") or part.get("content") or "")
            else:
                text = getattr(part, "text", None) or getattr(part, "content", None)
                if text:
                    parts.append(text)
        return "\n".join(parts)
    return str(content)


def _reasoning_payload(message: Any) -> Any:
    """Pull the reasoning payload off a response message, if any.

    OpenRouter returns structured ``reasoning_details`` and sometimes a
    plain ``reasoning`` string; the SDK keeps both as extra attributes.
    """
    details = getattr(message, "reasoning_details", None)
    if details:
        return details
    return getattr(message, "reasoning", None) or None


def _to_request_message(message: ChatMessage) -> dict[str, Any]:
    payload: dict[str, Any] = {"role": message.role, "content": message.content}
    if message.role == "assistant" and message.reasoning_details:
        payload["reasoning_details"] = message.reasoning_details
    return payload


class OpenRouterProvider(LLMProvider):
    """Completion provider for OpenRouter (or any OpenAI-compatible API).

    Hidden design decisions:
    - OpenAI SDK client pointed at the OpenRouter base URL
    - UI model names mapped to service model ids
    - Reasoning requested on every call and returned untouched
    - Assistant content flattened to a string
    """

    def __init__(
        self,
        api_key: str,
        model: str = "temper-1",
        base_url: str | None = OPENROUTER_BASE_URL,
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: Service API key
            model: Default model (UI name or service id)
            base_url: API base URL, None for the OpenAI default
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def set_model(self, model: str) -> None:
        """Switch the default model."""
        self._model = model
        logger.info("Model set to: %s", resolve_model(model))

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        reasoning: bool = True,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            reasoning: Ask the service to expose model reasoning
            **kwargs: Additional request parameters

        Returns:
            LLMResponse with generated content and reasoning payload

        Raises:
            ValueError: If the service returns no message
        """
        model_to_use = resolve_model(model or self._model)

        request_params: dict[str, Any] = {
            "model": model_to_use,
            "messages": [_to_request_message(msg) for msg in messages],
            **kwargs
        }
        if temperature is not None:
            request_params["temperature"] = temperature
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens
        if reasoning:
            extra_body = dict(request_params.pop("extra_body", None) or {})
            extra_body.setdefault("reasoning", {"enabled": True})
            request_params["extra_body"] = extra_body

        completion = await self._client.chat.completions.create(**request_params)

        if not completion.choices or completion.choices[0].message is None:
            raise ValueError("Invalid response format from API")
        message = completion.choices[0].message

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=normalize_assistant_content(message.content),
            model=completion.model or model_to_use,
            usage=usage,
            reasoning_details=_reasoning_payload(message),
            response_id=completion.id
        )

    async def available_models(self) -> list[str]:
        """List model ids offered by the service (empty on failure)."""
        try:
            page = await self._client.models.list()
        except Exception as e:
            logger.warning("Could not fetch available models: %s", e)
            return []
        return [item.id for item in page.data]

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()

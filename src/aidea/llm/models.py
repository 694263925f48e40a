from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message sent to the completion service."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")
    reasoning_details: Any = Field(
        default=None,
        description="Reasoning returned with an earlier assistant message, passed back as-is"
    )


class LLMResponse(BaseModel):
    """Response from a completion service."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
    reasoning_details: Any = Field(
        default=None,
        description="Reasoning payload of unspecified shape, if the model exposed one"
    )
    response_id: str | None = Field(default=None, description="Provider response id")

"""Outgoing request assembly.

Builds the message list sent to the completion service from the system
prompt, the stored conversation and the user's current input.
"""

from collections.abc import Sequence

from ..llm.models import ChatMessage
from ..memory.models import ChatRecord

DEFAULT_HISTORY_LIMIT = 10
DOCUMENT_PREVIEW_CHARS = 1000


def prepare_message_content(
    text: str | None,
    image_ref: str | None = None,
    document_excerpt: str | None = None,
) -> str:
    """Fold attachment markers into the user's text.

    A document contributes a preview of its first characters; an image
    only contributes a marker, the service never sees its bytes.
    """
    content = text or ""
    if document_excerpt:
        preview = document_excerpt[:DOCUMENT_PREVIEW_CHARS] + "..."
        content = f"[Book file attached]\n\nBook content preview:\n{preview}\n\n{content}"
    if image_ref:
        content = f"[Image attached] {content}"
    return content


def build_message_history(
    system_prompt: str,
    history: Sequence[ChatRecord],
    content: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[ChatMessage]:
    """Assemble the request: system prompt, recent history, current input.

    Args:
        system_prompt: Sent as the first message
        history: Stored messages, oldest first
        content: The current user content (see :func:`prepare_message_content`)
        limit: How many of the most recent stored messages to include

    Returns:
        Messages in the order the service expects
    """
    messages = [ChatMessage(role="system", content=system_prompt)]

    recent = list(history)[-limit:] if limit > 0 else []
    for record in recent:
        if not record.role or not record.text:
            continue
        reasoning = record.reasoning_details if record.role == "assistant" else None
        messages.append(ChatMessage(
            role=record.role,
            content=record.text,
            reasoning_details=reasoning or None,
        ))

    messages.append(ChatMessage(role="user", content=content))
    return messages

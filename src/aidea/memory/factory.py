"""Conversation memory backend selection."""

from typing import Any

from .base import ConversationMemory

BACKENDS = ("memory", "sqlite")


def create_conversation_memory(
    backend: str = "memory",
    **kwargs: Any
) -> ConversationMemory:
    """Create a conversation memory backend.

    Args:
        backend: "memory" (lost on exit) or "sqlite" (kept in a file)
        **kwargs: Backend options. ``default_session_id`` applies to both;
            ``path`` only to sqlite and is ignored otherwise.

    Raises:
        ValueError: If backend type is not supported
    """
    name = backend.strip().lower()

    if name == "sqlite":
        from .sqlite import SQLiteConversationMemory
        return SQLiteConversationMemory(**kwargs)

    if name == "memory":
        from .in_memory import InMemoryConversationMemory
        kwargs.pop("path", None)
        return InMemoryConversationMemory(**kwargs)

    raise ValueError(
        f"Unsupported memory backend: {backend}. "
        f"Supported backends: {', '.join(BACKENDS)}"
    )

"""Abstract base class for conversation memory backends.

This module defines the interface for chat history and notes storage.
The abstraction hides:
- Storage format (in-process objects, SQLite rows)
- Persistence mechanism (none, database file)
- Connection management
"""

from abc import ABC, abstractmethod

from .models import ChatRecord, ConversationState, Note


class ConversationMemory(ABC):
    """Abstract conversation memory backend.

    Provides a unified interface for storing and retrieving chat
    messages and notes across different storage backends.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the memory backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the memory backend gracefully."""

    @abstractmethod
    async def get_state(self, session_id: str | None = None) -> ConversationState:
        """Retrieve conversation state."""

    @abstractmethod
    async def save_state(self, state: ConversationState) -> None:
        """Persist conversation state, replacing what is stored."""

    @abstractmethod
    async def add_message(
        self,
        record: ChatRecord,
        session_id: str | None = None
    ) -> ChatRecord:
        """Append a message to the conversation history."""

    @abstractmethod
    async def get_recent_messages(
        self,
        limit: int = 10,
        session_id: str | None = None
    ) -> list[ChatRecord]:
        """Get the most recent messages, oldest first."""

    @abstractmethod
    async def clear_history(self, session_id: str | None = None) -> None:
        """Clear chat history for a session (notes are kept)."""

    @abstractmethod
    async def add_note(self, note: Note, session_id: str | None = None) -> Note:
        """Save a note."""

    @abstractmethod
    async def list_notes(self, session_id: str | None = None) -> list[Note]:
        """List notes, oldest first."""

    @abstractmethod
    async def delete_note(self, index: int, session_id: str | None = None) -> bool:
        """Delete the note at ``index`` of :meth:`list_notes`."""

    @abstractmethod
    async def clear_notes(self, session_id: str | None = None) -> None:
        """Delete every note for a session."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

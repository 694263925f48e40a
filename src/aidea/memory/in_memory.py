"""In-memory conversation memory backend.

Simple dict-based storage for session-only memory.
Data is lost when the application exits.
"""

from uuid import uuid4

from .base import ConversationMemory
from .models import ChatRecord, ConversationState, Note


class InMemoryConversationMemory(ConversationMemory):
    """In-memory conversation memory (session-only).

    Data is stored in memory and lost when the app exits.
    Suitable for single-session use or testing.
    """

    def __init__(self, default_session_id: str | None = None):
        self._default_session_id = default_session_id or str(uuid4())
        self._states: dict[str, ConversationState] = {}

    async def connect(self) -> None:
        """Initialize memory (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close memory (no-op for in-memory)."""
        pass

    async def get_state(self, session_id: str | None = None) -> ConversationState:
        """Get or create conversation state."""
        sid = session_id or self._default_session_id
        if sid not in self._states:
            self._states[sid] = ConversationState(session_id=sid)
        return self._states[sid]

    async def save_state(self, state: ConversationState) -> None:
        """Save state (just updates dict)."""
        self._states[state.session_id] = state

    async def add_message(
        self,
        record: ChatRecord,
        session_id: str | None = None
    ) -> ChatRecord:
        """Add a message."""
        state = await self.get_state(session_id)
        state.add_message(record)
        return record

    async def get_recent_messages(
        self,
        limit: int = 10,
        session_id: str | None = None
    ) -> list[ChatRecord]:
        """Get recent messages."""
        state = await self.get_state(session_id)
        return state.recent_messages(limit)

    async def clear_history(self, session_id: str | None = None) -> None:
        """Clear history, keeping notes."""
        state = await self.get_state(session_id)
        state.messages.clear()

    async def add_note(self, note: Note, session_id: str | None = None) -> Note:
        state = await self.get_state(session_id)
        state.add_note(note)
        return note

    async def list_notes(self, session_id: str | None = None) -> list[Note]:
        state = await self.get_state(session_id)
        return list(state.notes)

    async def delete_note(self, index: int, session_id: str | None = None) -> bool:
        state = await self.get_state(session_id)
        return state.delete_note(index)

    async def clear_notes(self, session_id: str | None = None) -> None:
        state = await self.get_state(session_id)
        state.notes.clear()

    @property
    def backend_type(self) -> str:
        return "memory"

    @property
    def default_session_id(self) -> str:
        return self._default_session_id

"""Data models for conversation and notes memory.

These models define the structure of stored chat history and notes,
independent of the storage backend used.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Attachments(BaseModel):
    """Files sent along with a user message."""

    model_config = ConfigDict(frozen=True)

    image_ref: str | None = Field(default=None, description="Image data URL or path")
    document_name: str | None = Field(default=None, description="Name of the attached document")
    document_excerpt: str | None = Field(default=None, description="Text extracted from the document")

    @property
    def is_empty(self) -> bool:
        return not (self.image_ref or self.document_excerpt)


class ChatRecord(BaseModel):
    """One message in the conversation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    text: str
    attachments: Attachments | None = None
    reasoning_details: Any = Field(default=None, description="Reasoning payload, as returned")
    timestamp: datetime = Field(default_factory=datetime.now)


class Note(BaseModel):
    """A saved note: text, an image, or both."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    image_ref: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def _has_content(self) -> "Note":
        if not self.text.strip() and not self.image_ref:
            raise ValueError("A note needs text or an image")
        return self

    def preview(self, words: int = 10) -> str:
        """First ``words`` words of the text, with ``...`` when truncated."""
        parts = self.text.split(" ")
        if len(parts) > words:
            return " ".join(parts[:words]) + "..."
        return self.text


class ConversationState(BaseModel):
    """Complete chat and notes state for a session.

    This is the structured representation of memory that can be
    serialized and stored in any backend.
    """

    session_id: str = Field(default_factory=lambda: str(uuid4()))
    messages: list[ChatRecord] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def add_message(self, record: ChatRecord) -> None:
        """Append a message to the history."""
        self.messages.append(record)
        self.updated_at = datetime.now()

    def recent_messages(self, limit: int = 10) -> list[ChatRecord]:
        """Get the most recent messages, oldest first.

        Args:
            limit: Maximum number of messages to return
        """
        if limit <= 0:
            return []
        return list(self.messages[-limit:])

    def add_note(self, note: Note) -> None:
        self.notes.append(note)
        self.updated_at = datetime.now()

    def delete_note(self, index: int) -> bool:
        """Delete the note at ``index``. Returns False if there is none."""
        if not 0 <= index < len(self.notes):
            return False
        del self.notes[index]
        self.updated_at = datetime.now()
        return True

    def export(self) -> str:
        """Serialize the whole state as JSON."""
        return self.model_dump_json(indent=2)

    @classmethod
    def import_data(cls, data: str | dict[str, Any]) -> "ConversationState":
        """Rebuild a state from :meth:`export` output.

        Raises:
            pydantic.ValidationError: If the data does not describe a state
        """
        if isinstance(data, str):
            return cls.model_validate_json(data)
        return cls.model_validate(data)

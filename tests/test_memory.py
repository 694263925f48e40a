"""Tests for conversation memory backends."""
import pytest
from pydantic import ValidationError

from aidea.memory import (
    Attachments,
    ChatRecord,
    ConversationState,
    Note,
    create_conversation_memory,
)
from aidea.memory.in_memory import InMemoryConversationMemory
from aidea.memory.sqlite import SQLiteConversationMemory


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    """Unconnected memory for each backend."""
    if request.param == "sqlite":
        return create_conversation_memory("sqlite", path=tmp_path / "memory.db")
    return create_conversation_memory("memory")


def user(text: str, **kwargs) -> ChatRecord:
    return ChatRecord(role="user", text=text, **kwargs)


def assistant(text: str, **kwargs) -> ChatRecord:
    return ChatRecord(role="assistant", text=text, **kwargs)


class TestModels:
    """Tests for memory data models."""

    def test_note_needs_text_or_image(self):
        """Test note validation."""
        with pytest.raises(ValidationError):
            Note(text="   ")
        assert Note(image_ref="data:image/png;base64,AAAA").text == ""

    def test_note_preview(self):
        """Test word-limited previews."""
        note = Note(text="one two three four")
        assert note.preview(2) == "one two..."
        assert note.preview(10) == "one two three four"

    def test_attachments_is_empty(self):
        """Test the empty attachment check."""
        assert Attachments().is_empty
        assert Attachments(document_name="a.pdf").is_empty
        assert not Attachments(document_excerpt="text").is_empty

    def test_recent_messages(self):
        """Test history windowing on the state."""
        state = ConversationState()
        for i in range(5):
            state.add_message(user(str(i)))
        assert [record.text for record in state.recent_messages(2)] == ["3", "4"]
        assert state.recent_messages(0) == []

    def test_import_rejects_garbage(self):
        """Test that invalid exports raise."""
        with pytest.raises(ValidationError):
            ConversationState.import_data('{"messages": [{"role": "robot"}]}')


class TestConversationMemory:
    """Behaviour shared by every backend."""

    @pytest.mark.asyncio
    async def test_messages_in_order(self, backend):
        """Test adding and windowing messages."""
        await backend.connect()
        try:
            await backend.add_message(user("hi"))
            await backend.add_message(assistant("hello", reasoning_details=[{"text": "t"}]))
            await backend.add_message(user("again"))

            recent = await backend.get_recent_messages(limit=2)
            assert [record.text for record in recent] == ["hello", "again"]
            assert recent[0].reasoning_details == [{"text": "t"}]
            assert await backend.get_recent_messages(limit=0) == []
        finally:
            await backend.disconnect()

    @pytest.mark.asyncio
    async def test_attachments_survive(self, backend):
        """Test that attachments are stored with the message."""
        await backend.connect()
        try:
            attachments = Attachments(document_name="book.pdf", document_excerpt="Once")
            await backend.add_message(user("summarize", attachments=attachments))
            [record] = await backend.get_recent_messages()
            assert record.attachments == attachments
        finally:
            await backend.disconnect()

    @pytest.mark.asyncio
    async def test_notes(self, backend):
        """Test adding, listing and deleting notes by index."""
        await backend.connect()
        try:
            await backend.add_note(Note(text="first"))
            await backend.add_note(Note(text="second"))
            await backend.add_note(Note(text="third"))

            assert await backend.delete_note(1) is True
            assert await backend.delete_note(5) is False
            assert await backend.delete_note(-1) is False
            assert [note.text for note in await backend.list_notes()] == ["first", "third"]

            await backend.clear_notes()
            assert await backend.list_notes() == []
        finally:
            await backend.disconnect()

    @pytest.mark.asyncio
    async def test_clear_history_keeps_notes(self, backend):
        """Test that clearing the conversation leaves notes alone."""
        await backend.connect()
        try:
            await backend.add_message(user("hi"))
            await backend.add_note(Note(text="keep me"))
            await backend.clear_history()
            assert await backend.get_recent_messages() == []
            assert len(await backend.list_notes()) == 1
        finally:
            await backend.disconnect()

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, backend):
        """Test that explicit session ids do not share history."""
        await backend.connect()
        try:
            await backend.add_message(user("a"), session_id="one")
            await backend.add_message(user("b"), session_id="two")
            assert [r.text for r in await backend.get_recent_messages(session_id="one")] == ["a"]
            assert [r.text for r in await backend.get_recent_messages(session_id="two")] == ["b"]
        finally:
            await backend.disconnect()

    @pytest.mark.asyncio
    async def test_export_import(self, backend):
        """Test moving a whole state through JSON."""
        await backend.connect()
        try:
            await backend.add_message(user("question"))
            await backend.add_message(assistant("answer"))
            await backend.add_note(Note(text="remember"))
            exported = (await backend.get_state()).export()

            restored = ConversationState.import_data(exported)
            restored = restored.model_copy(update={"session_id": "restored"})
            await backend.save_state(restored)

            state = await backend.get_state("restored")
            assert [record.text for record in state.messages] == ["question", "answer"]
            assert [note.text for note in state.notes] == ["remember"]
        finally:
            await backend.disconnect()


class TestSQLitePersistence:
    """Tests specific to the SQLite backend."""

    @pytest.mark.asyncio
    async def test_survives_reconnect(self, tmp_path):
        """Test that data persists across connections."""
        path = tmp_path / "nested" / "memory.db"
        memory = SQLiteConversationMemory(path=path)
        await memory.connect()
        await memory.add_message(user("persist me"))
        await memory.add_note(Note(text="and me"))
        await memory.disconnect()

        reopened = SQLiteConversationMemory(path=path)
        await reopened.connect()
        try:
            assert [r.text for r in await reopened.get_recent_messages()] == ["persist me"]
            assert [n.text for n in await reopened.list_notes()] == ["and me"]
        finally:
            await reopened.disconnect()

    @pytest.mark.asyncio
    async def test_save_state_replaces_rows(self, tmp_path):
        """Test that saving a state overwrites the stored session."""
        memory = SQLiteConversationMemory(path=tmp_path / "memory.db")
        await memory.connect()
        try:
            await memory.add_message(user("old"))
            await memory.save_state(ConversationState(
                session_id=memory.default_session_id,
                messages=[user("new")],
            ))
            assert [r.text for r in await memory.get_recent_messages()] == ["new"]
        finally:
            await memory.disconnect()

    def test_defaults(self):
        """Test default configuration."""
        memory = SQLiteConversationMemory()
        assert memory.backend_type == "sqlite"
        assert memory.default_session_id == "default"
        assert memory.db_path.name == "aidea_memory.db"


class TestFactory:
    """Tests for create_conversation_memory."""

    def test_backends(self, tmp_path):
        """Test backend selection."""
        assert isinstance(create_conversation_memory(), InMemoryConversationMemory)
        sqlite = create_conversation_memory("sqlite", path=tmp_path / "m.db")
        assert isinstance(sqlite, SQLiteConversationMemory)

    def test_unknown_backend(self):
        """Test that unsupported backends raise."""
        with pytest.raises(ValueError, match="Unsupported memory backend"):
            create_conversation_memory("postgres")

    def test_in_memory_session_id(self):
        """Test explicit and generated default sessions."""
        assert InMemoryConversationMemory("mine").default_session_id == "mine"
        assert InMemoryConversationMemory().default_session_id

"""SQLite conversation memory backend.

Provides persistent chat history and notes using a SQLite database.
Uses aiosqlite for async access.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from .base import ConversationMemory
from .models import Attachments, ChatRecord, ConversationState, Note


def _dump(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


def _load(value: str | None) -> Any:
    if value is None:
        return None
    return json.loads(value)


def _row_to_record(row: tuple) -> ChatRecord:
    role, text, attachments_json, reasoning_json, ts = row
    attachments = _load(attachments_json)
    return ChatRecord(
        role=role,
        text=text,
        attachments=Attachments(**attachments) if attachments else None,
        reasoning_details=_load(reasoning_json),
        timestamp=datetime.fromisoformat(ts),
    )


def _row_to_note(row: tuple) -> Note:
    text, image_ref, ts = row
    return Note(text=text, image_ref=image_ref, timestamp=datetime.fromisoformat(ts))


class SQLiteConversationMemory(ConversationMemory):
    """SQLite-backed conversation memory.

    Stores messages and notes in a SQLite database file.
    Supports persistent storage across sessions.
    """

    def __init__(
        self,
        path: str | Path = "./aidea_memory.db",
        default_session_id: str | None = None
    ):
        self._db_path = Path(path)
        self._default_session_id = default_session_id or "default"
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()
        await self._ensure_session(self._default_session_id)

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                session_id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                role TEXT NOT NULL,
                text TEXT NOT NULL,
                attachments TEXT,
                reasoning_details TEXT,
                timestamp TEXT NOT NULL,
                FOREIGN KEY (session_id) REFERENCES sessions(session_id) ON DELETE CASCADE
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS notes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                text TEXT NOT NULL,
                image_ref TEXT,
                timestamp TEXT NOT NULL,
                FOREIGN KEY (session_id) REFERENCES sessions(session_id) ON DELETE CASCADE
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_session
            ON messages(session_id, id)
        """)

        await self._connection.commit()

    async def _ensure_session(self, session_id: str) -> None:
        """Ensure a session exists."""
        now = datetime.now().isoformat()
        await self._connection.execute("""
            INSERT OR IGNORE INTO sessions (session_id, created_at, updated_at)
            VALUES (?, ?, ?)
        """, (session_id, now, now))
        await self._connection.commit()

    async def _touch(self, session_id: str) -> None:
        await self._connection.execute(
            "UPDATE sessions SET updated_at = ? WHERE session_id = ?",
            (datetime.now().isoformat(), session_id)
        )

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get_state(self, session_id: str | None = None) -> ConversationState:
        """Retrieve conversation state."""
        sid = session_id or self._default_session_id

        async with self._connection.execute(
            "SELECT created_at, updated_at FROM sessions WHERE session_id = ?",
            (sid,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            await self._ensure_session(sid)
            return ConversationState(session_id=sid)

        created_at, updated_at = row
        messages = await self._select_messages(sid)
        notes = await self.list_notes(sid)

        return ConversationState(
            session_id=sid,
            messages=messages,
            notes=notes,
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
        )

    async def _select_messages(self, session_id: str, limit: int | None = None) -> list[ChatRecord]:
        query = """
            SELECT role, text, attachments, reasoning_details, timestamp
            FROM messages
            WHERE session_id = ?
            ORDER BY id DESC
        """
        params: tuple = (session_id,)
        if limit is not None:
            query += " LIMIT ?"
            params = (session_id, limit)

        async with self._connection.execute(query, params) as cursor:
            rows = await cursor.fetchall()

        return [_row_to_record(row) for row in reversed(rows)]

    async def save_state(self, state: ConversationState) -> None:
        """Persist conversation state."""
        now = datetime.now().isoformat()

        await self._connection.execute("""
            INSERT INTO sessions (session_id, created_at, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET updated_at = excluded.updated_at
        """, (state.session_id, state.created_at.isoformat(), now))

        await self._connection.execute(
            "DELETE FROM messages WHERE session_id = ?", (state.session_id,)
        )
        await self._connection.execute(
            "DELETE FROM notes WHERE session_id = ?", (state.session_id,)
        )

        for record in state.messages:
            await self._insert_message(state.session_id, record)
        for note in state.notes:
            await self._insert_note(state.session_id, note)

        await self._connection.commit()

    async def _insert_message(self, session_id: str, record: ChatRecord) -> None:
        attachments = record.attachments.model_dump() if record.attachments else None
        await self._connection.execute("""
            INSERT INTO messages
            (session_id, role, text, attachments, reasoning_details, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            session_id,
            record.role,
            record.text,
            _dump(attachments),
            _dump(record.reasoning_details),
            record.timestamp.isoformat()
        ))

    async def _insert_note(self, session_id: str, note: Note) -> None:
        await self._connection.execute("""
            INSERT INTO notes (session_id, text, image_ref, timestamp)
            VALUES (?, ?, ?, ?)
        """, (session_id, note.text, note.image_ref, note.timestamp.isoformat()))

    async def add_message(
        self,
        record: ChatRecord,
        session_id: str | None = None
    ) -> ChatRecord:
        """Add a message."""
        sid = session_id or self._default_session_id
        await self._ensure_session(sid)
        await self._insert_message(sid, record)
        await self._touch(sid)
        await self._connection.commit()
        return record

    async def get_recent_messages(
        self,
        limit: int = 10,
        session_id: str | None = None
    ) -> list[ChatRecord]:
        """Get recent messages, oldest first."""
        if limit <= 0:
            return []
        return await self._select_messages(session_id or self._default_session_id, limit)

    async def clear_history(self, session_id: str | None = None) -> None:
        """Clear history, keeping notes."""
        sid = session_id or self._default_session_id
        await self._connection.execute("DELETE FROM messages WHERE session_id = ?", (sid,))
        await self._connection.commit()

    async def add_note(self, note: Note, session_id: str | None = None) -> Note:
        sid = session_id or self._default_session_id
        await self._ensure_session(sid)
        await self._insert_note(sid, note)
        await self._touch(sid)
        await self._connection.commit()
        return note

    async def list_notes(self, session_id: str | None = None) -> list[Note]:
        sid = session_id or self._default_session_id
        async with self._connection.execute(
            "SELECT text, image_ref, timestamp FROM notes WHERE session_id = ? ORDER BY id ASC",
            (sid,)
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_note(row) for row in rows]

    async def delete_note(self, index: int, session_id: str | None = None) -> bool:
        sid = session_id or self._default_session_id
        async with self._connection.execute(
            "SELECT id FROM notes WHERE session_id = ? ORDER BY id ASC",
            (sid,)
        ) as cursor:
            ids = [row[0] for row in await cursor.fetchall()]
        if not 0 <= index < len(ids):
            return False
        await self._connection.execute("DELETE FROM notes WHERE id = ?", (ids[index],))
        await self._touch(sid)
        await self._connection.commit()
        return True

    async def clear_notes(self, session_id: str | None = None) -> None:
        sid = session_id or self._default_session_id
        await self._connection.execute("DELETE FROM notes WHERE session_id = ?", (sid,))
        await self._connection.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def default_session_id(self) -> str:
        return self._default_session_id

    @property
    def db_path(self) -> Path:
        return self._db_path

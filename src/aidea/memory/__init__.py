"""Conversation memory module for aidea.

Stores chat history (for follow-up context) and notes.
"""

from .base import ConversationMemory
from .factory import create_conversation_memory
from .models import Attachments, ChatRecord, ConversationState, Note

__all__ = [
    "Attachments",
    "ChatRecord",
    "ConversationMemory",
    "ConversationState",
    "Note",
    "create_conversation_memory",
]

"""Chat orchestration.

Ties one user turn together: memory, request assembly, the completion
call, the reasoning progress display and rendering of the reply.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..llm.base import LLMProvider
from ..memory.base import ConversationMemory
from ..memory.models import Attachments, ChatRecord, Note
from ..prompts import get_system_prompt
from ..reasoning import ReasoningDisclosure, ReasoningSession, ReasoningStateMachine
from ..render import BlockNode, render
from .messages import DEFAULT_HISTORY_LIMIT, build_message_history, prepare_message_content

logger = logging.getLogger(__name__)

APOLOGY_TEXT = "Sorry, I encountered an error while processing your request. Please try again."

THINKING_MODEL_MARKERS = ("temper-1", "colossus")


def is_thinking_model(model: str) -> bool:
    """Whether ``model`` shows the reasoning progress display while it works."""
    name = model.lower()
    return any(marker in name for marker in THINKING_MODEL_MARKERS)


@dataclass
class AssistantReply:
    """Everything the UI needs to show one assistant message.

    Attributes:
        message: The stored assistant message
        nodes: Render tree of the message text
        disclosure: Per-message reasoning view, if the model exposed reasoning
        session: Final snapshot of the reasoning session for this request
        error: Error description when the request failed
    """

    message: ChatRecord
    nodes: list[BlockNode]
    disclosure: ReasoningDisclosure | None = None
    session: ReasoningSession | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class ChatController:
    """Runs chat turns against a completion provider.

    Args:
        llm: Completion provider
        memory: Conversation and notes storage (must be connected)
        machine: Reasoning progress machine; None disables the display
        model: Active model name (defaults to the provider's model)
        system_prompt: Overrides the packaged system prompt
        history_limit: Stored messages sent along with each request
    """

    def __init__(
        self,
        llm: LLMProvider,
        memory: ConversationMemory,
        machine: ReasoningStateMachine | None = None,
        model: str | None = None,
        system_prompt: str | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._llm = llm
        self._memory = memory
        self._machine = machine
        self._model = model or llm.model
        self._system_prompt = system_prompt
        self._history_limit = history_limit
        self._reply_count = 0

    @property
    def model(self) -> str:
        return self._model

    def set_model(self, model: str) -> None:
        self._model = model
        logger.info("Active model: %s", model)

    @property
    def machine(self) -> ReasoningStateMachine | None:
        return self._machine

    @property
    def memory(self) -> ConversationMemory:
        return self._memory

    @property
    def system_prompt(self) -> str:
        if self._system_prompt is None:
            self._system_prompt = get_system_prompt()
        return self._system_prompt

    async def send(
        self,
        text: str,
        attachments: Attachments | None = None,
    ) -> AssistantReply | None:
        """Send one user turn and wait for the reply.

        Returns:
            The assistant reply, or None if there was nothing to send.
            Provider errors never propagate: the reply then carries the
            apology text and ``error`` is set.
        """
        text = (text or "").strip()
        if attachments is not None and attachments.is_empty:
            attachments = None
        if not text and attachments is None:
            return None

        # A new request supersedes the previous session before anything awaits
        session = None
        if self._machine is not None:
            if is_thinking_model(self._model):
                session = self._machine.begin()
            else:
                self._machine.discard()

        try:
            history = await self._memory.get_recent_messages(self._history_limit)
            await self._memory.add_message(
                ChatRecord(role="user", text=text, attachments=attachments)
            )
        except BaseException:
            if session is not None:
                self._machine.discard(session)
            raise

        content = prepare_message_content(
            text,
            image_ref=attachments.image_ref if attachments else None,
            document_excerpt=attachments.document_excerpt if attachments else None,
        )
        messages = build_message_history(
            self.system_prompt, history, content, limit=self._history_limit
        )

        error = None
        reasoning = None
        try:
            response = await self._llm.chat_completion(messages, model=self._model)
        except asyncio.CancelledError:
            if session is not None and self._machine is not None:
                self._machine.discard(session)
            raise
        except Exception as e:
            logger.error("Completion request failed: %s", e, exc_info=True)
            error = str(e) or type(e).__name__
            reply_text = APOLOGY_TEXT
        else:
            reply_text = response.content
            reasoning = response.reasoning_details
            logger.debug("Reply from %s (usage: %s)", response.model, response.usage)

        if session is not None:
            session = self._settle(session, reasoning, failed=error is not None)

        record = await self._memory.add_message(ChatRecord(
            role="assistant",
            text=reply_text,
            reasoning_details=reasoning,
        ))

        self._reply_count += 1
        return AssistantReply(
            message=record,
            nodes=render(reply_text, id_prefix=f"code_{self._reply_count}"),
            disclosure=ReasoningDisclosure.from_payload(reasoning) if reasoning else None,
            session=session,
            error=error,
        )

    def _settle(
        self,
        session: ReasoningSession,
        reasoning: object,
        failed: bool,
    ) -> ReasoningSession:
        machine = self._machine
        if not machine.is_current(session):
            logger.debug("Reasoning session %s superseded, leaving the display alone", session.id)
            return session
        if failed:
            machine.fail(session)
        else:
            machine.finalize(session, reasoning)
        return machine.session.model_copy(deep=True)

    async def add_note(self, text: str, image_ref: str | None = None) -> Note:
        """Save a note.

        Raises:
            pydantic.ValidationError: If the note has neither text nor image
        """
        return await self._memory.add_note(Note(text=text.strip(), image_ref=image_ref))

    async def list_notes(self) -> list[Note]:
        return await self._memory.list_notes()

    async def delete_note(self, index: int) -> bool:
        return await self._memory.delete_note(index)

    async def history(self, limit: int = 50) -> list[ChatRecord]:
        return await self._memory.get_recent_messages(limit)

    async def clear_history(self) -> None:
        await self._memory.clear_history()

    def teardown(self) -> None:
        """Discard any in-flight reasoning session."""
        if self._machine is not None:
            self._machine.teardown()

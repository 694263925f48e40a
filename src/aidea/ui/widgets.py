"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Chat message rendering from the render tree
- Click-to-copy code blocks
- Live and per-message reasoning display
- Notes list and staged attachment indicator
- Log panel filtering
"""

from datetime import datetime

import pyperclip
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, RichLog, Static, TextArea

from ..chat import AssistantReply
from ..memory import ChatRecord, Note
from ..reasoning import (
    PanelDisplay,
    ReasoningDisclosure,
    ReasoningSession,
    SessionStatus,
    StepStatus,
)
from ..render import CodeBlock, render
from .config import LOG_MAX_MESSAGE_LENGTH, LOG_TIMESTAMP_FORMAT, NOTE_PREVIEW_WORDS, LogLevel
from .formatting import block_renderable, code_block_renderable, steps_text


def copy_text(widget: Static | Vertical, text: str, what: str) -> None:
    """Copy to the system clipboard, falling back to the terminal (OSC 52)."""
    try:
        pyperclip.copy(text)
        widget.app.notify(f"{what} copied", timeout=2)
    except pyperclip.PyperclipException:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{what} copied (terminal)", timeout=2)


class CodeBlockView(Static):
    """A highlighted code block that copies its source when clicked."""

    def __init__(self, block: CodeBlock, *args, **kwargs) -> None:
        super().__init__(code_block_renderable(block), *args, **kwargs)
        self.block = block

    def on_click(self, event: Click) -> None:
        event.stop()
        copy_text(self, self.block.source, f"{self.block.language} code")


class DisclosureView(Vertical):
    """Show/Hide reasoning toggle attached to one assistant message."""

    def __init__(self, disclosure: ReasoningDisclosure, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.disclosure = disclosure

    def compose(self):
        yield Button(self.disclosure.toggle_label, classes="disclosure-toggle")
        steps = Static(steps_text(self.disclosure.steps), classes="disclosure-steps")
        steps.display = self.disclosure.expanded
        yield steps

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.disclosure.toggle()
        event.button.label = self.disclosure.toggle_label
        self.query_one(".disclosure-steps", Static).display = self.disclosure.expanded


class MessageView(Vertical):
    """One chat message: header, rendered blocks, optional reasoning.

    Clicking the message (outside a code block) copies its raw text.
    """

    def __init__(self, record: ChatRecord, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.record = record

    def on_click(self, event: Click) -> None:
        event.stop()
        copy_text(self, self.record.text, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._records: list[ChatRecord] = []
        self._replayed = 0

    @property
    def message_count(self) -> int:
        return len(self._records)

    def add_user_message(self, record: ChatRecord) -> None:
        view = self._start_message(record, "You", ">", "user-message")
        if record.text:
            view.compose_add_child(Static(Text(record.text), classes="message-content"))
        attachments = record.attachments
        if attachments is not None:
            if attachments.image_ref:
                view.compose_add_child(Static("[dim]🖼 image attached[/]", classes="attachment-info"))
            if attachments.document_name:
                view.compose_add_child(Static(
                    Text(f"📚 {attachments.document_name}", style="dim"),
                    classes="attachment-info",
                ))
        self._finish_message(view)

    def add_assistant_reply(self, reply: AssistantReply) -> None:
        self._add_assistant(reply.message, reply.nodes, reply.disclosure, reply.failed)

    def replay(self, record: ChatRecord) -> None:
        """Show a stored message from an earlier session."""
        if record.role == "user":
            self.add_user_message(record)
            return
        self._replayed += 1
        nodes = render(record.text, id_prefix=f"history_{self._replayed}")
        disclosure = None
        if record.reasoning_details:
            disclosure = ReasoningDisclosure.from_payload(record.reasoning_details)
        self._add_assistant(record, nodes, disclosure, failed=False)

    def add_notice(self, content: str) -> None:
        """Show an app message that is not part of the conversation."""
        self.mount(Static(content, classes="chat-notice"))
        self.scroll_end(animate=False)

    def _add_assistant(self, record, nodes, disclosure, failed: bool) -> None:
        classes = "assistant-message error-message" if failed else "assistant-message"
        view = self._start_message(record, "AI<>DEA", "<", classes)
        for node in nodes:
            if isinstance(node, CodeBlock):
                view.compose_add_child(CodeBlockView(node, id=node.id, classes="code-block"))
            else:
                view.compose_add_child(Static(block_renderable(node), classes="message-content"))
        if disclosure is not None:
            view.compose_add_child(DisclosureView(disclosure, classes="disclosure"))
        self._finish_message(view)

    def _start_message(self, record: ChatRecord, who: str, icon: str, classes: str) -> MessageView:
        self._records.append(record)
        timestamp = record.timestamp.strftime("%H:%M:%S")
        view = MessageView(record, classes=f"chat-message {classes}")
        view.compose_add_child(Static(f"{icon} {who} [{timestamp}]", classes="message-header", markup=False))
        return view

    def _finish_message(self, view: MessageView) -> None:
        self.mount(view)
        self.border_subtitle = f"{self.message_count} messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for record in reversed(self._records):
            if record.role == "assistant":
                return record.text
        return None

    def clear_history(self) -> None:
        self._records.clear()
        self.remove_children()
        self.border_subtitle = "Conversation history"


class ReasoningPanel(Static):
    """Live progress of the outstanding request.

    Collapsed it shows only the active step; expanded it lists them all.
    """

    BORDER_TITLE = "Reasoning"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._session: ReasoningSession | None = None
        self._display_mode = PanelDisplay.COLLAPSED

    def on_mount(self) -> None:
        self._refresh_view()

    def update_session(self, session: ReasoningSession | None) -> None:
        self._session = session
        self._refresh_view()

    def set_display(self, display: PanelDisplay) -> None:
        self._display_mode = display
        self._refresh_view()

    def _refresh_view(self) -> None:
        session = self._session
        if session is None or not session.steps:
            self.border_subtitle = "idle"
            self.update(Text("No request in flight", style="dim"))
            return

        thinking = session.status == SessionStatus.THINKING
        count = len(session.steps)
        self.border_subtitle = f"{'thinking' if thinking else 'done'} · {count} step(s)"
        self.set_class(thinking, "thinking")

        if self._display_mode == PanelDisplay.EXPANDED:
            self.update(steps_text(session.steps))
            return

        active = [step for step in session.steps if step.status == StepStatus.ACTIVE]
        if active:
            summary = steps_text(active[-1:])
        else:
            summary = Text(f"● Reasoned in {count} step(s)", style="green")
        summary.append("  (ctrl+t to expand)", style="dim")
        self.update(summary)


class NotesPanel(Static):
    """Saved notes, numbered for /delnote."""

    BORDER_TITLE = "Notes"

    def show_notes(self, notes: list[Note]) -> None:
        self.border_subtitle = f"{len(notes)} note(s)"
        if not notes:
            self.update(Text("No notes yet. Use /note <text>", style="dim"))
            return
        text = Text(overflow="fold")
        for number, note in enumerate(notes, start=1):
            if number > 1:
                text.append("\n")
            text.append(f"{number}. ", style="bold")
            text.append(note.preview(NOTE_PREVIEW_WORDS) or "(image)")
            if note.image_ref:
                text.append(" 🖼", style="dim")
            text.append(f"  {note.timestamp:%Y-%m-%d %H:%M}", style="dim")
        self.update(text)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Ctrl+J submits; Up/Down at the edges walk the input history.

        Terminals do not report modifiers with Enter, so Ctrl+Enter is
        not available.
        """
        if event.key == "ctrl+j":
            self._submit()
        elif event.key == "up" and self._cursor_at(start=True):
            self._navigate_history(-1)
        elif event.key == "down" and self._cursor_at(start=False):
            self._navigate_history(1)
        else:
            return
        event.prevent_default()
        event.stop()

    def _cursor_at(self, start: bool) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        if start:
            return text_area.cursor_location == (0, 0)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        elif self._history_index < len(self._history) - 1:
            self._history_index += 1
        else:
            self._history_index = -1
            text_area.text = ""
            return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class StatusBar(Static):
    """Active model, memory backend and staged attachments."""

    def show_status(self, model: str, memory: str, staged: list[str]) -> None:
        parts = [
            f"[bold cyan]Model:[/] {model}",
            f"[bold green]Memory:[/] {memory}",
        ]
        if staged:
            parts.append(f"[bold yellow]Staged:[/] {', '.join(staged)} [dim](/drop to remove)[/]")
        self.update("  ".join(parts))


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Fed by :class:`aidea.ui.callbacks.DebugPanelHandler`. Hidden by
    default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    COMPONENT_COLORS = {
        "ui": "cyan",
        "chat": "green",
        "llm": "magenta",
        "memory": "bright_green",
        "reasoning": "bright_yellow",
        "render": "bright_blue",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        self.display = False

    def log_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Subsystem name (ui, chat, llm, memory...)
            message: Log message
            level: One of the LogLevel values
        """
        if level < self._log_level:
            return
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        line = Text()
        line.append(datetime.now().strftime(LOG_TIMESTAMP_FORMAT), style="dim")
        line.append(f" {LogLevel.name(level):<7} ", style=self.LEVEL_COLORS.get(level, "white"))
        line.append(f"[{component}] ", style=self.COMPONENT_COLORS.get(component, "white"))
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

    def get_plain_text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Log is empty", timeout=2)
            return
        copy_text(self, text, "Log")

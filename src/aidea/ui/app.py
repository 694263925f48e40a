"""Main Textual TUI application.

Orchestrates the UI components and routes user input either to a slash
command or to the chat controller.
"""

import asyncio
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..chat import ChatController, StagedAttachments
from ..llm import LLMProvider
from ..memory import ChatRecord, create_conversation_memory
from ..reasoning import AsyncioScheduler, ReasoningStateMachine
from .callbacks import DebugPanelHandler, ReasoningPanelCallback
from .config import (
    AVAILABLE_MODELS,
    HISTORY_REPLAY_LIMIT,
    HISTORY_WINDOW,
    NOTIFY_LONG,
    NOTIFY_SHORT,
    REASONING_PREVIEW_STAGES,
    REASONING_TICK_INTERVAL,
    LogLevel,
)
from .screens import ConfirmationScreen
from .styles import APP_CSS
from .themes import AIDEA_DARK
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    NotesPanel,
    ReasoningPanel,
    StatusBar,
)

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /image <path>    stage an image for the next message
  /pdf <path>      stage a PDF for the next message
  /drop [image|pdf] remove staged attachments
  /note <text>     save a note (takes the staged image along)
  /delnote <n>     delete note number n
  /model [name]    show or switch the model
  /clear           clear the conversation
  /help            show this help"""


def parse_command(text: str) -> tuple[str, str] | None:
    """Split ``/name args`` into ``(name, args)``; None for plain chat input."""
    if not text.startswith("/") or text.startswith("//"):
        return None
    name, _, args = text[1:].partition(" ")
    return name.lower(), args.strip()


class AideaApp(App):
    """AI<>DEA chat in the terminal."""

    CSS = APP_CSS
    TITLE = "AI<>DEA"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+t", "toggle_reasoning", "Reasoning"),
        Binding("ctrl+d", "toggle_debug", "Log"),
        Binding("ctrl+k", "clear_chat", "Clear Chat"),
        Binding("ctrl+n", "next_model", "Model"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("escape", "cancel_request", "Cancel"),
    ]

    def __init__(
        self,
        controller: ChatController,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._controller = controller
        self._log_level = log_level
        self._staged = StagedAttachments()
        self._log_handler: DebugPanelHandler | None = None
        self._current_worker = None

    @property
    def controller(self) -> ChatController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        with Vertical(id="side-panel"):
            yield ReasoningPanel(id="reasoning-panel")
            yield NotesPanel(id="notes-panel")
            yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield StatusBar(id="status-bar")
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    async def on_mount(self) -> None:
        self.register_theme(AIDEA_DARK)
        self.theme = "aidea-dark"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        self._install_log_handler(log_panel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()

        machine = self._controller.machine
        if machine is not None:
            machine.set_update_callback(
                ReasoningPanelCallback(self.query_one("#reasoning-panel", ReasoningPanel), app=self)
            )

        memory = self._controller.memory
        await memory.connect()
        logger.info("Memory backend connected: %s", memory.backend_type)

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        history = await self._controller.history(HISTORY_REPLAY_LIMIT)
        for record in history:
            chat.replay(record)
        if history:
            chat.add_notice(f"Restored {len(history)} message(s) from memory.")
        else:
            chat.add_notice(
                "Welcome to AI<>DEA. Ask anything; type /help for commands.\n"
                "Click a code block to copy it, or a message to copy its text."
            )

        await self._refresh_notes()
        self._refresh_status()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _install_log_handler(self, panel: DebugPanel) -> None:
        self._log_handler = DebugPanelHandler(panel, app=self)
        package_logger = logging.getLogger("aidea")
        package_logger.addHandler(self._log_handler)
        package_logger.setLevel(logging.DEBUG)

    async def on_unmount(self) -> None:
        self._controller.teardown()
        if self._log_handler is not None:
            logging.getLogger("aidea").removeHandler(self._log_handler)
            self._log_handler = None
        await self._controller.memory.disconnect()

    def _refresh_status(self) -> None:
        staged = []
        if self._staged.image_name:
            staged.append(f"🖼 {self._staged.image_name}")
        if self._staged.document:
            staged.append(f"📚 {self._staged.document.name}")
        self.query_one("#status-bar", StatusBar).show_status(
            self._controller.model, self._controller.memory.backend_type, staged
        )
        self.sub_title = f"{self._controller.model} | {self._controller.memory.backend_type}"

    async def _refresh_notes(self) -> None:
        notes = await self._controller.list_notes()
        self.query_one("#notes-panel", NotesPanel).show_notes(notes)

    async def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        command = parse_command(event.value)
        if command is not None:
            await self._run_command(*command)
            return

        attachments = self._staged.snapshot()
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.add_user_message(ChatRecord(role="user", text=event.value, attachments=attachments))
        self._staged.clear()
        self._refresh_status()
        self._current_worker = self._send(event.value, attachments)

    @work(exclusive=True, group="chat")
    async def _send(self, text: str, attachments) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        try:
            reply = await self._controller.send(text, attachments)
        except asyncio.CancelledError:
            # Discarded sessions emit no update
            self.query_one("#reasoning-panel", ReasoningPanel).update_session(None)
            chat.add_notice("Request cancelled.")
            raise
        if reply is None:
            return
        chat.add_assistant_reply(reply)
        if reply.failed:
            self.notify(f"Error: {reply.error[:60]}", severity="error", timeout=NOTIFY_LONG)

    async def _run_command(self, name: str, args: str) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)

        if name in ("image", "pdf"):
            if not args:
                self.notify(f"Usage: /{name} <path>", severity="warning", timeout=NOTIFY_SHORT)
                return
            try:
                if name == "image":
                    staged = self._staged.stage_image(args)
                else:
                    staged = await asyncio.to_thread(self._staged.stage_document, args)
            except (FileNotFoundError, ValueError) as e:
                logger.warning("Could not attach %s: %s", args, e)
                self.notify(str(e), severity="error", timeout=NOTIFY_LONG)
                return
            self.notify(f"Attached {staged}", timeout=NOTIFY_SHORT)

        elif name == "drop":
            kinds = {"image": ["image"], "pdf": ["document"], "": ["image", "document"]}
            if args not in kinds:
                self.notify("Usage: /drop [image|pdf]", severity="warning", timeout=NOTIFY_SHORT)
                return
            for kind in kinds[args]:
                self._staged.remove(kind)

        elif name == "note":
            image_ref = self._staged.image_ref
            try:
                await self._controller.add_note(args, image_ref=image_ref)
            except ValueError:
                self.notify("Add some text or stage an image first", severity="warning", timeout=NOTIFY_SHORT)
                return
            if image_ref:
                self._staged.remove("image")
            await self._refresh_notes()
            self.notify("Note saved", timeout=NOTIFY_SHORT)

        elif name == "delnote":
            if not args.isdigit() or not await self._controller.delete_note(int(args) - 1):
                self.notify(f"No note {args!r}", severity="warning", timeout=NOTIFY_SHORT)
                return
            await self._refresh_notes()

        elif name == "model":
            if args:
                self._controller.set_model(args)
            else:
                chat.add_notice(f"Model: {self._controller.model} (available: {', '.join(AVAILABLE_MODELS)})")

        elif name == "clear":
            self.action_clear_chat()

        elif name == "help":
            chat.add_notice(HELP_TEXT)

        else:
            self.notify(f"Unknown command /{name}. Try /help", severity="warning", timeout=NOTIFY_SHORT)

        self._refresh_status()

    def action_toggle_reasoning(self) -> None:
        panel = self.query_one("#reasoning-panel", ReasoningPanel)
        machine = self._controller.machine
        if machine is not None:
            panel.set_display(machine.toggle_display())

    def action_toggle_debug(self) -> None:
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=NOTIFY_SHORT)

    def action_clear_chat(self) -> None:
        async def _clear(confirmed: bool | None) -> None:
            if not confirmed:
                return
            await self._controller.clear_history()
            self.query_one("#chat-history", ChatHistoryWidget).clear_history()
            self.notify("Chat cleared", timeout=NOTIFY_SHORT)

        self.push_screen(ConfirmationScreen("Clear the whole conversation?"), _clear)

    def action_next_model(self) -> None:
        current = self._controller.model
        index = AVAILABLE_MODELS.index(current) + 1 if current in AVAILABLE_MODELS else 0
        self._controller.set_model(AVAILABLE_MODELS[index % len(AVAILABLE_MODELS)])
        self._refresh_status()
        self.notify(f"Model: {self._controller.model}", timeout=NOTIFY_SHORT)

    def action_copy_last_response(self) -> None:
        response = self.query_one("#chat-history", ChatHistoryWidget).get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied", timeout=NOTIFY_SHORT)
        else:
            self.notify("No response to copy", severity="warning", timeout=NOTIFY_SHORT)

    def action_toggle_maximize_chat(self) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        side = self.query_one("#side-panel")
        maximized = chat.has_class("-maximized")
        chat.set_class(not maximized, "-maximized")
        side.display = maximized

    def action_cancel_request(self) -> None:
        if self._current_worker is not None and self._current_worker.is_running:
            self._current_worker.cancel()


async def run_textual_tui(
    llm: LLMProvider,
    model: str | None = None,
    memory_backend: str = "memory",
    memory_path: str | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        llm: Completion provider
        model: Initial model (defaults to the provider's)
        memory_backend: Conversation memory backend ("memory" or "sqlite")
        memory_path: Path for the SQLite database
        log_level: Log panel level (debug/info/warning/error), None to hide
    """
    memory_config = {}
    if memory_path:
        memory_config["path"] = memory_path
    memory = create_conversation_memory(memory_backend, **memory_config)

    machine = ReasoningStateMachine(
        scheduler=AsyncioScheduler(),
        stages=REASONING_PREVIEW_STAGES,
        interval=REASONING_TICK_INTERVAL,
    )
    controller = ChatController(
        llm=llm,
        memory=memory,
        machine=machine,
        model=model,
        history_limit=HISTORY_WINDOW,
    )
    app = AideaApp(controller, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await llm.close()

"""Bridges from the core into the TUI.

Hides how the TUI receives updates: reasoning session snapshots from the
state machine and records from the ``logging`` tree. Both may arrive from
outside the app's thread, so every widget call goes through
``call_from_thread`` when needed.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any

from ..reasoning import ReasoningSession
from .config import LogLevel

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel, ReasoningPanel


def call_thread_safe(app: "App | None", func: Any, *args: Any, **kwargs: Any) -> None:
    """Call ``func`` on the app's thread."""
    if app is not None and app._thread_id != threading.get_ident():
        app.call_from_thread(func, *args, **kwargs)
    else:
        func(*args, **kwargs)


class ReasoningPanelCallback:
    """Update callback for :class:`aidea.reasoning.ReasoningStateMachine`."""

    def __init__(self, panel: "ReasoningPanel", app: "App | None" = None) -> None:
        self.panel = panel
        self.app = app

    def __call__(self, session: ReasoningSession) -> None:
        call_thread_safe(self.app, self.panel.update_session, session)


class DebugPanelHandler(logging.Handler):
    """Routes log records into the debug panel.

    The component shown is the subpackage the record came from, so
    ``aidea.llm.providers.openrouter`` shows up as ``llm``.
    """

    def __init__(self, panel: "DebugPanel", app: "App | None" = None) -> None:
        super().__init__(level=logging.DEBUG)
        self.panel = panel
        self.app = app

    @staticmethod
    def component(logger_name: str) -> str:
        parts = logger_name.split(".")
        if len(parts) > 1 and parts[0] == "aidea":
            return parts[1]
        return parts[0]

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]!r}"
            call_thread_safe(
                self.app,
                self.panel.log_entry,
                self.component(record.name),
                message,
                LogLevel.clamp(record.levelno),
            )
        except Exception:
            self.handleError(record)

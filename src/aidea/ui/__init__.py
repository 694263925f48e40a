"""Terminal UI module for aidea.

Module structure (each module hides a design decision):
- config.py: constants and log levels
- formatting.py: render tree -> Rich renderables
- widgets.py: chat, reasoning, notes and log widgets
- callbacks.py: how core updates and log records reach the widgets
- screens.py: modal dialogs
- styles.py / themes.py: layout and palette
- app.py: application orchestration (user interaction flow)
"""

from .app import AideaApp, parse_command, run_textual_tui
from .callbacks import DebugPanelHandler, ReasoningPanelCallback
from .config import LogLevel
from .formatting import to_group, to_renderables
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, ReasoningPanel

__all__ = [
    "AideaApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "DebugPanelHandler",
    "LogLevel",
    "ReasoningPanel",
    "ReasoningPanelCallback",
    "parse_command",
    "run_textual_tui",
    "to_group",
    "to_renderables",
]

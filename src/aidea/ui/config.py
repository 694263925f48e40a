"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

import logging

from ..chat.messages import DEFAULT_HISTORY_LIMIT
from ..reasoning import DEFAULT_PREVIEW_STAGES, DEFAULT_TICK_INTERVAL


class LogLevel:
    """Log level constants with numeric values for comparison.

    Values match the stdlib ``logging`` levels so records can be
    filtered without translation.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)

    @classmethod
    def clamp(cls, levelno: int) -> int:
        """Map any stdlib level onto the four shown in the log panel."""
        if levelno >= cls.ERROR:
            return cls.ERROR
        if levelno >= cls.WARNING:
            return cls.WARNING
        if levelno >= cls.INFO:
            return cls.INFO
        return cls.DEBUG


# Models offered by the UI, first is the default
AVAILABLE_MODELS = ("temper-1", "temper-1-colossus")

# Reasoning preview
REASONING_TICK_INTERVAL = DEFAULT_TICK_INTERVAL
REASONING_PREVIEW_STAGES = DEFAULT_PREVIEW_STAGES

# Conversation context
HISTORY_WINDOW = DEFAULT_HISTORY_LIMIT  # Stored messages sent with each request
HISTORY_REPLAY_LIMIT = 50  # Stored messages shown on startup

# Notes
NOTE_PREVIEW_WORDS = 10

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Notification timeouts (seconds)
NOTIFY_SHORT = 2
NOTIFY_LONG = 5

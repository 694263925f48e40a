"""Provider factory functions for CLI.

Centralizes creation of the completion provider and memory settings from
environment variables. Hides configuration details from command
implementations.
"""

import os

import typer
from rich.console import Console

from ..llm import LLMProvider, create_llm_provider
from ..llm.providers.openrouter import OPENROUTER_BASE_URL
from ..memory import ConversationMemory, create_conversation_memory

DEFAULT_MODEL = "temper-1"
DEFAULT_MEMORY_PATH = "./aidea_memory.db"

_console = Console()


def get_llm(console: Console | None = None, model: str | None = None) -> LLMProvider:
    """Create the completion provider from environment variables.

    Args:
        console: Optional Rich console for output
        model: Model override (takes precedence over AIDEA_MODEL)

    Raises:
        typer.Exit: If OPENROUTER_API_KEY is not set

    Environment variables:
        OPENROUTER_API_KEY: API key (required)
        AIDEA_BASE_URL: API base URL (default: OpenRouter)
        AIDEA_MODEL: Default model (default: temper-1)
    """
    con = console or _console
    api_key = os.getenv("OPENROUTER_API_KEY")
    if not api_key:
        con.print("[red]Error: OPENROUTER_API_KEY not set in environment[/red]")
        raise typer.Exit(code=1)

    return create_llm_provider(
        "openrouter",
        api_key=api_key,
        model=model or os.getenv("AIDEA_MODEL", DEFAULT_MODEL),
        base_url=os.getenv("AIDEA_BASE_URL", OPENROUTER_BASE_URL),
    )


def memory_settings(backend: str | None = None, path: str | None = None) -> tuple[str, str | None]:
    """Resolve the memory backend and SQLite path.

    Command-line values win over AIDEA_MEMORY_BACKEND / AIDEA_MEMORY_PATH.
    The path only applies to the sqlite backend.
    """
    backend = (backend or os.getenv("AIDEA_MEMORY_BACKEND", "memory")).lower()
    if backend != "sqlite":
        return backend, None
    return backend, path or os.getenv("AIDEA_MEMORY_PATH", DEFAULT_MEMORY_PATH)


def get_memory(backend: str | None = None, path: str | None = None) -> ConversationMemory:
    """Create a conversation memory backend from options and environment."""
    backend, path = memory_settings(backend, path)
    if path:
        return create_conversation_memory(backend, path=path)
    return create_conversation_memory(backend)

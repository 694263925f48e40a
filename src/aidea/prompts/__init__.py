"""Prompt text files.

The packaged prompts sit next to this module. Dropping a file with the
same name into ``./prompts`` overrides it without touching the install.
"""

from functools import lru_cache
from pathlib import Path

PACKAGE_PROMPTS = Path(__file__).parent
SYSTEM_PROMPT = "system"


def prompt_locations(name: str) -> list[Path]:
    """Candidate files for prompt ``name``, highest priority first."""
    filename = f"{name}.txt"
    return [Path.cwd() / "prompts" / filename, PACKAGE_PROMPTS / filename]


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Read prompt ``name`` from the first location that has it.

    Raises:
        FileNotFoundError: If no location has the prompt
    """
    locations = prompt_locations(name)
    for path in locations:
        if path.is_file():
            return path.read_text(encoding="utf-8")

    searched = "\n".join(f"  - {path}" for path in locations)
    raise FileNotFoundError(f"Prompt '{name}' not found. Searched:\n{searched}")


def get_system_prompt() -> str:
    """System prompt sent at the head of every conversation."""
    return load_prompt(SYSTEM_PROMPT).strip()


def clear_cache() -> None:
    """Forget loaded prompts so edited files are read again."""
    load_prompt.cache_clear()


__all__ = [
    "clear_cache",
    "get_system_prompt",
    "load_prompt",
    "prompt_locations",
]

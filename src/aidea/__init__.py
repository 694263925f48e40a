"""
AI<>DEA: a reasoning-aware chat client.

Each subpackage hides one design decision: how assistant text becomes a
render tree (render), how reasoning progress is tracked (reasoning),
which service answers (llm), where conversations live (memory), and how
it is all shown (ui, cli).
"""

__version__ = "0.1.0"

from .reasoning import ReasoningStateMachine
from .render import classify, render, to_html

__all__ = [
    "ReasoningStateMachine",
    "classify",
    "render",
    "to_html",
]

"""Reasoning progress for outstanding requests.

Module structure:
- models.py: steps, sessions and their status enums
- normalize.py: reasoning payload -> step labels
- scheduler.py: cancelable periodic timers
- machine.py: the session lifecycle (idle -> thinking -> complete)
- disclosure.py: static per-message reasoning view
"""

from .disclosure import ReasoningDisclosure
from .machine import DEFAULT_PREVIEW_STAGES, DEFAULT_TICK_INTERVAL, ReasoningStateMachine
from .models import (
    PanelDisplay,
    ReasoningSession,
    ReasoningStep,
    SessionStatus,
    StepStatus,
)
from .normalize import PLACEHOLDER_STEP, normalize_reasoning, steps_from_payload
from .scheduler import AsyncioScheduler, Scheduler, TaskHandle

__all__ = [
    "DEFAULT_PREVIEW_STAGES",
    "DEFAULT_TICK_INTERVAL",
    "PLACEHOLDER_STEP",
    "AsyncioScheduler",
    "PanelDisplay",
    "ReasoningDisclosure",
    "ReasoningSession",
    "ReasoningStateMachine",
    "ReasoningStep",
    "Scheduler",
    "SessionStatus",
    "StepStatus",
    "TaskHandle",
    "normalize_reasoning",
    "steps_from_payload",
]

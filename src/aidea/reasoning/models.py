"""Data structures for reasoning progress.

A session tracks one outstanding request. Its steps are shown while the
request is in flight and frozen once it completes.
"""

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StepStatus(str, Enum):
    """Display status of a single reasoning step."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETE = "complete"


class SessionStatus(str, Enum):
    """Lifecycle of a reasoning session."""

    IDLE = "idle"
    THINKING = "thinking"
    COMPLETE = "complete"


class PanelDisplay(str, Enum):
    """Whether a reasoning panel is folded away or showing its steps."""

    COLLAPSED = "collapsed"
    EXPANDED = "expanded"


class ReasoningStep(BaseModel):
    """One labelled step in a reasoning trace.

    Attributes:
        label: Text shown for the step
        status: pending, active or complete
    """

    model_config = ConfigDict(frozen=True)

    label: str
    status: StepStatus = StepStatus.PENDING

    def completed(self) -> "ReasoningStep":
        """Return a copy of this step marked complete."""
        if self.status == StepStatus.COMPLETE:
            return self
        return self.model_copy(update={"status": StepStatus.COMPLETE})


class ReasoningSession(BaseModel):
    """One lifecycle instance of the reasoning state machine.

    Attributes:
        id: Identity checked before any tick or finalize is applied
        status: idle, thinking or complete
        steps: Ordered steps, append-only while thinking
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    status: SessionStatus = SessionStatus.IDLE
    steps: list[ReasoningStep] = Field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return [step.label for step in self.steps]

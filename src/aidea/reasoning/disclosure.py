"""Per-message "show reasoning" disclosure.

Attached to an assistant message once it is final. Built once from the
message's reasoning payload; only its display state changes afterwards.
"""

from typing import Any

from pydantic import BaseModel, Field

from .models import PanelDisplay, ReasoningStep
from .normalize import steps_from_payload


class ReasoningDisclosure(BaseModel):
    """Static reasoning steps for one message, collapsed by default."""

    steps: list[ReasoningStep] = Field(default_factory=list)
    display: PanelDisplay = PanelDisplay.COLLAPSED

    @classmethod
    def from_payload(cls, payload: Any) -> "ReasoningDisclosure":
        return cls(steps=steps_from_payload(payload))

    @property
    def expanded(self) -> bool:
        return self.display == PanelDisplay.EXPANDED

    @property
    def toggle_label(self) -> str:
        return "Hide reasoning" if self.expanded else "Show reasoning"

    def toggle(self) -> PanelDisplay:
        """Flip between collapsed and expanded, returning the new state."""
        self.display = PanelDisplay.COLLAPSED if self.expanded else PanelDisplay.EXPANDED
        return self.display

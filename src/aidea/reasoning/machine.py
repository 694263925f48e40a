"""Reasoning progress state machine.

Drives the "thinking" display while a request is outstanding:

    idle -> thinking -> complete

``begin()`` opens a session, shows the first synthetic preview step and
starts a periodic timer. Each tick completes the last step and appends
the next preview label; once the labels run out the session completes on
its own. ``finalize()`` ends the session early when the response
arrives, either by replacing the steps with the model's real reasoning
or by completing the synthetic ones. ``discard()`` drops the session
silently.

Every tick and every finalize names the session it belongs to. Anything
addressed to a session other than the current one is ignored, so a slow
timer or a late response from a superseded request can never touch the
active session. No operation here raises.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .models import (
    PanelDisplay,
    ReasoningSession,
    ReasoningStep,
    SessionStatus,
    StepStatus,
)
from .normalize import normalize_reasoning
from .scheduler import AsyncioScheduler, Scheduler, TaskHandle

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_STAGES: tuple[str, ...] = (
    "Analyzing your prompt",
    "Reviewing context & attachments",
    "Planning the response outline",
    "Drafting the final answer",
)
DEFAULT_TICK_INTERVAL = 1.5  # seconds between synthetic steps

UpdateCallback = Callable[[ReasoningSession], None]
SessionRef = ReasoningSession | str


@dataclass
class _ActiveSession:
    """The current session with the timer handle that drives it."""

    session: ReasoningSession
    handle: TaskHandle | None = None
    next_stage: int = 1


def _session_id(session: SessionRef) -> str:
    return session if isinstance(session, str) else session.id


class ReasoningStateMachine:
    """Lifecycle of reasoning sessions, one active at a time.

    Args:
        scheduler: Timer source for synthetic steps (asyncio by default)
        stages: Synthetic preview labels, shown in order
        interval: Seconds between synthetic steps
        on_update: Called with a snapshot of the session after every change
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        stages: Sequence[str] = DEFAULT_PREVIEW_STAGES,
        interval: float = DEFAULT_TICK_INTERVAL,
        on_update: UpdateCallback | None = None,
    ) -> None:
        if not stages:
            raise ValueError("At least one preview stage is required")
        self._scheduler = scheduler or AsyncioScheduler()
        self._stages = tuple(stages)
        self._interval = interval
        self._on_update = on_update
        self._active: _ActiveSession | None = None
        self._display = PanelDisplay.COLLAPSED

    @property
    def session(self) -> ReasoningSession | None:
        """The current session, or None when idle."""
        return self._active.session if self._active else None

    @property
    def status(self) -> SessionStatus:
        if self._active is None:
            return SessionStatus.IDLE
        return self._active.session.status

    @property
    def steps(self) -> list[ReasoningStep]:
        """Steps of the current session (empty when idle)."""
        return list(self._active.session.steps) if self._active else []

    @property
    def display(self) -> PanelDisplay:
        return self._display

    def set_update_callback(self, callback: UpdateCallback | None) -> None:
        """Set the callback receiving session snapshots."""
        self._on_update = callback

    def is_current(self, session: SessionRef) -> bool:
        """Whether ``session`` is the session this machine is tracking."""
        return self._active is not None and self._active.session.id == _session_id(session)

    def begin(self) -> ReasoningSession:
        """Open a new session, superseding any previous one.

        The previous session is invalidated before anything else happens,
        so its pending ticks and late finalize calls are ignored.

        Returns:
            The new session; pass it back to :meth:`finalize` / :meth:`discard`
        """
        self.discard()

        session = ReasoningSession(
            status=SessionStatus.THINKING,
            steps=[ReasoningStep(label=self._stages[0], status=StepStatus.ACTIVE)],
        )
        active = _ActiveSession(session=session)
        self._active = active

        session_id = session.id
        try:
            active.handle = self._scheduler.call_every(
                self._interval, lambda: self.tick(session_id)
            )
        except Exception:
            logger.warning("Could not start reasoning preview timer", exc_info=True)

        logger.debug("Reasoning session %s started", session_id)
        self._emit(session)
        return session

    def tick(self, session: SessionRef) -> bool:
        """Advance the synthetic preview by one step.

        Returns:
            True if the tick was applied, False if it was stale
        """
        session_id = _session_id(session)
        active = self._active
        if active is None or active.session.id != session_id:
            logger.debug("Dropping tick for superseded session %s", session_id)
            return False
        if active.session.status != SessionStatus.THINKING:
            return False

        if active.next_stage >= len(self._stages):
            self._complete(active, None)
            return True

        steps = list(active.session.steps)
        steps[-1] = steps[-1].completed()
        steps.append(ReasoningStep(
            label=self._stages[active.next_stage],
            status=StepStatus.ACTIVE,
        ))
        active.session.steps = steps
        active.next_stage += 1
        self._emit(active.session)
        return True

    def finalize(self, session: SessionRef, reasoning: Any = None) -> bool:
        """End the thinking phase of ``session``.

        If ``reasoning`` normalizes to at least one label, the step list is
        replaced with those labels; otherwise the synthetic steps are
        completed as they stand. Finalizing a completed or stale session
        changes nothing.

        Returns:
            True if the session was finalized by this call
        """
        session_id = _session_id(session)
        active = self._active
        if active is None or active.session.id != session_id:
            logger.debug("Dropping finalize for superseded session %s", session_id)
            return False
        if active.session.status != SessionStatus.THINKING:
            return False

        labels = normalize_reasoning(reasoning)
        steps = None
        if labels:
            steps = [ReasoningStep(label=label, status=StepStatus.COMPLETE) for label in labels]
        self._complete(active, steps)
        return True

    def fail(self, session: SessionRef) -> bool:
        """End ``session`` after a failed request, keeping the synthetic steps."""
        logger.debug("Request for reasoning session %s failed", _session_id(session))
        return self.finalize(session)

    def discard(self, session: SessionRef | None = None) -> bool:
        """Drop the current session without a transition to complete.

        Args:
            session: Only discard if this is the current session; None
                discards whatever is current

        Returns:
            True if a session was discarded
        """
        active = self._active
        if active is None:
            return False
        if session is not None and active.session.id != _session_id(session):
            return False
        if active.handle is not None:
            active.handle.cancel()
        self._active = None
        logger.debug("Reasoning session %s discarded", active.session.id)
        return True

    def teardown(self) -> None:
        """Release the current session, e.g. when the UI goes away."""
        self.discard()

    def toggle_display(self, collapse: bool | None = None) -> PanelDisplay:
        """Flip the panel between collapsed and expanded.

        Args:
            collapse: Force a state instead of flipping

        Returns:
            The new display state
        """
        if collapse is None:
            collapse = self._display == PanelDisplay.EXPANDED
        self._display = PanelDisplay.COLLAPSED if collapse else PanelDisplay.EXPANDED
        return self._display

    def _complete(self, active: _ActiveSession, steps: list[ReasoningStep] | None) -> None:
        if active.handle is not None:
            active.handle.cancel()
            active.handle = None
        if steps is None:
            steps = [step.completed() for step in active.session.steps]
        active.session.steps = steps
        active.session.status = SessionStatus.COMPLETE
        logger.debug(
            "Reasoning session %s complete with %d step(s)",
            active.session.id, len(steps),
        )
        self._emit(active.session)

    def _emit(self, session: ReasoningSession) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(session.model_copy(deep=True))
        except Exception:
            logger.exception("Reasoning update callback failed")

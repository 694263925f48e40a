"""Unit tests for the reasoning state machine."""
import asyncio

import pytest

from aidea.reasoning import (
    DEFAULT_PREVIEW_STAGES,
    AsyncioScheduler,
    PanelDisplay,
    ReasoningDisclosure,
    ReasoningStateMachine,
    SessionStatus,
    StepStatus,
)


class TestLifecycle:
    """Tests for begin, tick and finalize."""

    def test_idle_before_begin(self, machine):
        """Test the initial state."""
        assert machine.session is None
        assert machine.status == SessionStatus.IDLE
        assert machine.steps == []

    def test_begin_seeds_one_active_step(self, machine, scheduler):
        """Test that a new session shows the first preview label."""
        session = machine.begin()

        assert session.status == SessionStatus.THINKING
        assert len(session.steps) == 1
        assert session.steps[0].status == StepStatus.ACTIVE
        assert session.steps[0].label == DEFAULT_PREVIEW_STAGES[0]
        assert len(scheduler.live) == 1

    def test_ticks_then_finalize(self, machine, scheduler):
        """Test two ticks followed by finalize without a payload."""
        session = machine.begin()
        scheduler.fire(2)

        assert [step.status for step in machine.steps] == [
            StepStatus.COMPLETE, StepStatus.COMPLETE, StepStatus.ACTIVE,
        ]

        assert machine.finalize(session) is True
        assert machine.status == SessionStatus.COMPLETE
        assert len(machine.steps) == 3
        assert all(step.status == StepStatus.COMPLETE for step in machine.steps)
        assert scheduler.live == []

        scheduler.fire(3)
        assert len(machine.steps) == 3

    def test_at_most_one_active_step(self, machine, scheduler):
        """Test that every intermediate state has exactly one active step."""
        machine.begin()
        for _ in range(len(DEFAULT_PREVIEW_STAGES) - 1):
            scheduler.fire()
            active = [step for step in machine.steps if step.status == StepStatus.ACTIVE]
            assert len(active) == 1
            assert machine.steps[-1].status == StepStatus.ACTIVE

    def test_exhausted_stages_complete_the_session(self, machine, scheduler):
        """Test that a tick past the last label completes the session."""
        machine.begin()
        scheduler.fire(len(DEFAULT_PREVIEW_STAGES))

        assert machine.status == SessionStatus.COMPLETE
        assert [step.label for step in machine.steps] == list(DEFAULT_PREVIEW_STAGES)
        assert scheduler.live == []

    def test_finalize_replaces_steps_with_payload(self, machine, scheduler, reasoning_details):
        """Test that usable reasoning replaces the synthetic steps."""
        session = machine.begin()
        scheduler.fire()

        machine.finalize(session, reasoning_details)

        assert [step.label for step in machine.steps] == ["Read the question", "Sketch an answer"]
        assert all(step.status == StepStatus.COMPLETE for step in machine.steps)

    def test_unusable_payload_keeps_synthetic_steps(self, machine):
        """Test that an empty payload completes the preview steps instead."""
        session = machine.begin()
        machine.finalize(session, "   \n  ")
        assert [step.label for step in machine.steps] == [DEFAULT_PREVIEW_STAGES[0]]

    def test_finalize_is_idempotent(self, machine):
        """Test that a second finalize changes nothing."""
        session = machine.begin()
        machine.finalize(session, "first")
        assert machine.finalize(session, "second") is False
        assert [step.label for step in machine.steps] == ["first"]

    def test_fail_completes_synthetic_steps(self, machine, scheduler):
        """Test that a failed request ends with the preview steps complete."""
        session = machine.begin()
        scheduler.fire()
        assert machine.fail(session) is True
        assert machine.status == SessionStatus.COMPLETE
        assert len(machine.steps) == 2

    def test_empty_stages_rejected(self, scheduler):
        """Test construction without preview labels."""
        with pytest.raises(ValueError):
            ReasoningStateMachine(scheduler=scheduler, stages=[])


class TestStaleSessions:
    """Tests that superseded sessions can never mutate the current one."""

    def test_begin_cancels_previous_timer(self, machine, scheduler):
        """Test that starting a session stops the previous one's timer."""
        machine.begin()
        first_handle = scheduler.handles[0]
        machine.begin()
        assert first_handle.cancelled
        assert scheduler.live == [scheduler.handles[1]]

    def test_stale_tick_is_ignored(self, machine, scheduler):
        """Test a late tick from the previous session."""
        old = machine.begin()
        stale_callback = scheduler.handles[0].callback
        new = machine.begin()

        stale_callback()
        assert machine.tick(old) is False
        assert machine.session.id == new.id
        assert len(machine.steps) == 1

    def test_stale_finalize_is_ignored(self, machine, reasoning_details):
        """Test a late response for the previous session."""
        old = machine.begin()
        machine.begin()

        assert machine.finalize(old, reasoning_details) is False
        assert machine.status == SessionStatus.THINKING
        assert [step.label for step in machine.steps] == [DEFAULT_PREVIEW_STAGES[0]]

    def test_is_current(self, machine):
        """Test session identity checks by object and by id."""
        old = machine.begin()
        new = machine.begin()
        assert not machine.is_current(old)
        assert machine.is_current(new)
        assert machine.is_current(new.id)


class TestDiscard:
    """Tests for silent session teardown."""

    def test_discard_emits_nothing(self, scheduler):
        """Test that discard cancels the timer without an update."""
        updates = []
        machine = ReasoningStateMachine(scheduler=scheduler, on_update=updates.append)
        session = machine.begin()
        updates.clear()

        assert machine.discard(session) is True
        assert updates == []
        assert machine.session is None
        assert scheduler.live == []

    def test_discard_other_session_is_noop(self, machine):
        """Test that discarding a superseded session keeps the current one."""
        old = machine.begin()
        new = machine.begin()
        assert machine.discard(old) is False
        assert machine.is_current(new)

    def test_teardown(self, machine, scheduler):
        """Test teardown while thinking."""
        machine.begin()
        machine.teardown()
        assert machine.status == SessionStatus.IDLE
        assert scheduler.live == []


class TestUpdates:
    """Tests for the update callback and panel display."""

    def test_updates_are_snapshots(self, scheduler):
        """Test that callbacks receive copies, not live state."""
        updates = []
        machine = ReasoningStateMachine(scheduler=scheduler, on_update=updates.append)
        session = machine.begin()
        scheduler.fire()
        machine.finalize(session)

        assert [len(update.steps) for update in updates] == [1, 2, 2]
        assert updates[0].status == SessionStatus.THINKING
        assert updates[-1].status == SessionStatus.COMPLETE
        assert updates[0] is not machine.session

    def test_callback_errors_are_contained(self, scheduler):
        """Test that a failing callback never breaks the machine."""
        def explode(session):
            raise RuntimeError("boom")

        machine = ReasoningStateMachine(scheduler=scheduler, on_update=explode)
        session = machine.begin()
        scheduler.fire()
        assert machine.finalize(session) is True

    def test_toggle_display(self, machine):
        """Test collapsing and expanding the panel."""
        assert machine.display == PanelDisplay.COLLAPSED
        assert machine.toggle_display() == PanelDisplay.EXPANDED
        assert machine.toggle_display() == PanelDisplay.COLLAPSED
        assert machine.toggle_display(collapse=False) == PanelDisplay.EXPANDED
        assert machine.toggle_display(collapse=False) == PanelDisplay.EXPANDED


class TestDisclosure:
    """Tests for the per-message reasoning view."""

    def test_from_payload(self, reasoning_details):
        """Test building completed steps from a payload."""
        disclosure = ReasoningDisclosure.from_payload(reasoning_details)
        assert [step.label for step in disclosure.steps] == ["Read the question", "Sketch an answer"]
        assert disclosure.display == PanelDisplay.COLLAPSED

    def test_toggle_label(self):
        """Test the toggle control label follows the display state."""
        disclosure = ReasoningDisclosure.from_payload("x")
        assert disclosure.toggle_label == "Show reasoning"
        disclosure.toggle()
        assert disclosure.toggle_label == "Hide reasoning"
        disclosure.toggle()
        assert not disclosure.expanded


class TestAsyncioScheduler:
    """Tests for the event loop backed scheduler."""

    @pytest.mark.asyncio
    async def test_fires_until_cancelled(self):
        """Test periodic firing and cancellation."""
        calls = []
        handle = AsyncioScheduler().call_every(0.01, lambda: calls.append(1))

        await asyncio.sleep(0.1)
        handle.cancel()
        fired = len(calls)
        await asyncio.sleep(0.05)

        assert fired >= 2
        assert len(calls) == fired
        assert handle.cancelled

    @pytest.mark.asyncio
    async def test_machine_ticks_on_the_loop(self):
        """Test the machine driven by real timers."""
        machine = ReasoningStateMachine(
            scheduler=AsyncioScheduler(), stages=["one", "two"], interval=0.01
        )
        machine.begin()
        await asyncio.sleep(0.1)

        assert machine.status == SessionStatus.COMPLETE
        assert [step.label for step in machine.steps] == ["one", "two"]

"""Unit tests for reasoning payload normalization."""
from hypothesis import given
from hypothesis import strategies as st

from aidea.reasoning import PLACEHOLDER_STEP, StepStatus, normalize_reasoning, steps_from_payload


payloads = st.recursive(
    st.none() | st.booleans() | st.integers() | st.floats() | st.text(),
    lambda children: st.lists(children) | st.dictionaries(st.text(), children),
    max_leaves=10,
)


class TestNormalizeReasoning:
    """Tests for normalize_reasoning."""

    def test_text_is_split_into_lines(self):
        """Test the canonical two-step text payload."""
        assert normalize_reasoning("Step 1: parse\nStep 2: plan") == ["Step 1: parse", "Step 2: plan"]

    def test_blank_lines_are_dropped(self):
        """Test trimming and blank line removal."""
        assert normalize_reasoning("  a  \n\n   \nb") == ["a", "b"]

    def test_only_newlines_split_text(self):
        """Test that other line separators stay inside a step."""
        assert normalize_reasoning("a\rb c\x1cd\nnext") == ["a\rb c\x1cd", "next"]

    def test_list_of_strings(self):
        """Test that string elements pass through."""
        assert normalize_reasoning(["x", "", "y"]) == ["x", "y"]

    def test_step_thought_objects(self):
        """Test objects carrying a step and a thought."""
        payload = [
            {"step": "Step 1", "thought": "look"},
            {"thought": "decide"},
            {"step": "Step 3", "content": "answer"},
        ]
        assert normalize_reasoning(payload) == ["Step 1: look", "Step: decide", "Step 3: answer"]

    def test_text_field_objects(self, reasoning_details):
        """Test OpenRouter reasoning_details items."""
        assert normalize_reasoning(reasoning_details) == ["Read the question", "Sketch an answer"]

    def test_other_objects_become_json(self):
        """Test compact JSON for objects without a text field."""
        assert normalize_reasoning([{"type": "reasoning.encrypted", "n": 1}]) == [
            '{"type":"reasoning.encrypted","n":1}'
        ]

    def test_mapping(self):
        """Test one label per mapping field."""
        assert normalize_reasoning({"goal": "answer", "depth": 2}) == ["goal: answer", "depth: 2"]

    def test_empty_payloads(self):
        """Test payloads with nothing to show."""
        assert normalize_reasoning(None) == []
        assert normalize_reasoning("") == []
        assert normalize_reasoning([]) == []
        assert normalize_reasoning({}) == []

    @given(payloads)
    def test_never_raises(self, payload):
        """Property test: any payload yields a list of strings."""
        labels = normalize_reasoning(payload)
        assert isinstance(labels, list)
        assert all(isinstance(label, str) for label in labels)


class TestStepsFromPayload:
    """Tests for steps_from_payload."""

    def test_placeholder_for_empty_payload(self):
        """Test the single placeholder step."""
        [step] = steps_from_payload(None)
        assert step.label == PLACEHOLDER_STEP
        assert step.status == StepStatus.COMPLETE

    def test_steps_are_complete(self):
        """Test that every built step is complete."""
        steps = steps_from_payload("a\nb")
        assert [step.label for step in steps] == ["a", "b"]
        assert {step.status for step in steps} == {StepStatus.COMPLETE}

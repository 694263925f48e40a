"""Tests for terminal rendering of the render tree."""
import pytest
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from aidea.reasoning import ReasoningStep, StepStatus
from aidea.render import TextSpan, render
from aidea.ui.formatting import block_renderable, steps_text, to_group, to_renderables


def plain(renderable) -> str:
    console = Console(width=80, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestToRenderables:
    """Tests for render tree to Rich conversion."""

    def test_block_types(self, sample_response):
        """Test the renderable used for each block kind."""
        renderables = to_renderables(render(sample_response))
        assert [type(r) for r in renderables] == [Text, Text, RichTable, Text, Text, Panel, Text]

    def test_code_panel(self):
        """Test the code panel title and unescaped source."""
        [panel] = to_renderables(render("```py\nif a < b:\n    pass\n```"))
        assert panel.title == "PYTHON"
        assert "if a < b:" in plain(panel)

    def test_unknown_language_still_renders(self):
        """Test that a pass-through tag pygments does not know still prints."""
        [panel] = to_renderables(render("```brainfuck\n+++\n```"))
        assert "+++" in plain(panel)

    def test_emphasis_styles(self):
        """Test that emphasis becomes styled text without markers."""
        [text] = to_renderables(render("**bold** and *it*"))
        assert text.plain == "bold and it"
        styles = {str(span.style) for span in text.spans}
        assert "bold" in styles and "italic" in styles

    def test_ragged_table_rows(self):
        """Test that short rows are padded to the header width."""
        [table] = to_renderables(render("| A | B | C |\n|---|---|---|\n| 1 |"))
        assert table.row_count == 1
        assert len(table.columns) == 3

    def test_lists_and_steps(self):
        """Test list markers and step labels."""
        output = plain(to_group(render("Step 1: start\n1. one\n2. two\n- dot")))
        assert "Step 1: start" in output
        assert "1. one" in output
        assert "2. two" in output
        assert "• dot" in output

    def test_mixed_list_numbers_only_numbered_items(self):
        """Test per-item markers inside one mixed run."""
        [text] = to_renderables(render("1. a\n- b\n2. c"))
        assert text.plain == "1. a\n• b\n2. c"

    def test_group(self, sample_response):
        """Test that a whole tree prints as one group."""
        group = to_group(render(sample_response))
        assert isinstance(group, Group)
        assert "Overview" in plain(group)

    def test_rejects_inline_nodes(self):
        """Test that inline nodes are not blocks."""
        with pytest.raises(TypeError):
            block_renderable(TextSpan(text="x"))


class TestStepsText:
    """Tests for steps_text."""

    def test_icons(self):
        """Test one icon-prefixed line per step."""
        text = steps_text([
            ReasoningStep(label="done", status=StepStatus.COMPLETE),
            ReasoningStep(label="working", status=StepStatus.ACTIVE),
            ReasoningStep(label="later"),
        ])
        assert text.plain == "● done\n◐ working\n○ later"

    def test_empty(self):
        """Test that no steps gives empty text."""
        assert steps_text([]).plain == ""

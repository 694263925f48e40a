"""Render tree to Rich renderables.

Hides how each node kind looks in a terminal: code blocks become
highlighted ``Syntax`` panels, tables become Rich tables and everything
else becomes styled ``Text``.
"""

from collections.abc import Iterable

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table as RichTable
from rich.text import Text

from ..reasoning import ReasoningStep, StepStatus
from ..render import (
    BlockNode,
    CodeBlock,
    Emphasis,
    Heading,
    InlineCode,
    InlineNode,
    ListGroup,
    Paragraph,
    StepHeader,
    Table,
    TextSpan,
)

CODE_THEME = "monokai"

HEADING_STYLES = {
    1: "bold underline magenta",
    2: "bold cyan",
    3: "bold yellow",
}

STEP_ICONS = {
    StepStatus.PENDING: ("○", "dim"),
    StepStatus.ACTIVE: ("◐", "bold yellow"),
    StepStatus.COMPLETE: ("●", "green"),
}

# Language tags that pygments knows under another name
_LEXER_NAMES = {
    "plaintext": "text",
}


def _append_inline(text: Text, spans: Iterable[InlineNode], style: str = "") -> None:
    for span in spans:
        if isinstance(span, TextSpan):
            text.append(span.text, style=style or None)
        elif isinstance(span, InlineCode):
            text.append(span.source, style=f"{style} bold cyan on grey15".strip())
        elif isinstance(span, Emphasis):
            added = "bold" if span.style == "bold" else "italic"
            _append_inline(text, span.children, f"{style} {added}".strip())


def inline_text(spans: Iterable[InlineNode], style: str = "") -> Text:
    """Build a single ``Text`` from inline spans."""
    text = Text(overflow="fold")
    _append_inline(text, spans, style)
    return text


def code_block_renderable(block: CodeBlock, line_numbers: bool = False) -> Panel:
    syntax = Syntax(
        block.source,
        _LEXER_NAMES.get(block.language, block.language),
        theme=CODE_THEME,
        line_numbers=line_numbers,
        word_wrap=True,
    )
    return Panel(
        syntax,
        title=block.language.upper(),
        title_align="left",
        subtitle="click to copy",
        subtitle_align="right",
        border_style="blue",
    )


def table_renderable(table: Table) -> RichTable:
    result = RichTable(show_header=True, header_style="bold magenta", expand=False)
    for header in table.headers:
        result.add_column(header)
    width = len(table.headers)
    for row in table.rows:
        # Pad or trim ragged rows to the header width
        cells = (list(row) + [""] * width)[:width]
        result.add_row(*cells)
    return result


def _list_renderable(group: ListGroup) -> Text:
    text = Text(overflow="fold")
    number = 0
    for position, item in enumerate(group.items):
        if position:
            text.append("\n")
        if item.ordered:
            number += 1
            marker = f"{number}. "
        else:
            marker = "• "
        text.append(marker, style="bold")
        _append_inline(text, item.spans)
    return text


def block_renderable(block: BlockNode) -> RenderableType:
    """Rich renderable for one block node."""
    if isinstance(block, CodeBlock):
        return code_block_renderable(block)
    if isinstance(block, Table):
        return table_renderable(block)
    if isinstance(block, Heading):
        return inline_text(block.spans, HEADING_STYLES[block.level])
    if isinstance(block, ListGroup):
        return _list_renderable(block)
    if isinstance(block, StepHeader):
        text = Text(block.label, style="bold green")
        if block.spans:
            text.append(" ")
            _append_inline(text, block.spans)
        return text
    if isinstance(block, Paragraph):
        return inline_text(block.spans)
    raise TypeError(f"Not a block node: {type(block).__name__}")


def to_renderables(nodes: Iterable[BlockNode]) -> list[RenderableType]:
    """Turn a render tree into Rich renderables, one per block."""
    return [block_renderable(node) for node in nodes]


def to_group(nodes: Iterable[BlockNode]) -> Group:
    """Whole render tree as a single printable group."""
    return Group(*to_renderables(nodes))


def steps_text(steps: Iterable[ReasoningStep]) -> Text:
    """Reasoning steps as an icon-prefixed list."""
    text = Text(overflow="fold")
    for index, step in enumerate(steps):
        if index:
            text.append("\n")
        icon, style = STEP_ICONS[step.status]
        text.append(f"{icon} ", style=style)
        text.append(step.label, style="dim" if step.status == StepStatus.PENDING else None)
    return text

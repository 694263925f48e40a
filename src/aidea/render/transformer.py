"""Assistant text to render tree.

Hides the markdown dialect spoken by the assistant. The transformation
runs in fixed passes, each consuming its own syntax before the next one
looks at the text:

1. fenced code blocks (so nothing inside code is ever reinterpreted)
2. inline code spans
3. pipe tables
4. headings
5. emphasis
6. list items and step markers
7. paragraph assembly and list grouping

Passes 1-3 swap their matches for placeholder tokens; passes 4-7 work line
by line on what is left and turn the tokens back into nodes.
"""

import logging
import re
from typing import Union

from .escaping import escape
from .languages import classify, resolve_alias
from .models import (
    BlockNode,
    CodeBlock,
    Emphasis,
    Heading,
    InlineCode,
    InlineNode,
    ListGroup,
    ListItem,
    Paragraph,
    StepHeader,
    Table,
    TextSpan,
    plain_text,
)

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(
    r"```[ \t]*(?P<language>[\w+#.-]+)?[ \t]*\n(?P<code>.*?)```",
    re.DOTALL,
)
INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")
TABLE_PATTERN = re.compile(
    r"^\|(?P<header>.+)\|[ \t]*\n"
    r"\|(?=[^\n]*-)[-|: \t]+\|[ \t]*(?:\n|\Z)"
    r"(?P<rows>(?:\|.+\|[ \t]*(?:\n|\Z))*)",
    re.MULTILINE,
)
HEADING_PATTERN = re.compile(r"^(#{1,3}) (.*)$")
NUMBERED_ITEM_PATTERN = re.compile(r"^[ \t]*\d+\.\s+(.*)$")
BULLET_ITEM_PATTERN = re.compile(r"^[ \t]*[-*+]\s+(.*)$")
STEP_MARKER_PATTERN = re.compile(r"^(Steps?:|Step \d+:)\s*(.*)$")
EMPHASIS_PATTERN = (
    r"\*\*\*(?P<strong_em>.+?)\*\*\*"
    r"|\*\*(?P<strong>.+?)\*\*"
    r"|\*(?P<em>.+?)\*"
)

# Placeholder markers are private-use characters absent from the input
MARKER_RANGE = range(0xE000, 0xF900)

_Assembled = Union[Paragraph, Heading, CodeBlock, Table, ListItem, StepHeader]


def _trim_blank_lines(code: str) -> str:
    """Drop leading blank lines and trailing whitespace, keep indentation."""
    return re.sub(r"\A(?:[ \t]*\n)+", "", code).rstrip()


def _split_cells(line: str) -> list[str]:
    line = line.strip()
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|"):
        line = line[:-1]
    return [cell.strip() for cell in line.split("|")]


def _free_markers(text: str) -> tuple[str, str]:
    """Two private-use characters that do not occur in ``text``."""
    free = (chr(point) for point in MARKER_RANGE if chr(point) not in text)
    return next(free), next(free)


class _Transformation:
    """State of a single ``render()`` call."""

    def __init__(self, text: str, id_prefix: str) -> None:
        self._text = text
        self._id_prefix = id_prefix
        self._code_blocks: list[CodeBlock] = []
        self._inline_codes: list[str] = []
        self._tables: list[Table] = []

        self._block_mark, self._inline_mark = _free_markers(text)
        block, inline = re.escape(self._block_mark), re.escape(self._inline_mark)
        self._block_token = re.compile(rf"{block}(?P<kind>[CT])(?P<index>\d+){block}")
        self._inline_token = re.compile(rf"{inline}(\d+){inline}")
        self._inline_pattern = re.compile(
            rf"{inline}(?P<code>\d+){inline}|{EMPHASIS_PATTERN}"
        )

    def run(self) -> list[BlockNode]:
        text = FENCE_PATTERN.sub(self._take_fence, self._text)
        text = INLINE_CODE_PATTERN.sub(self._take_inline_code, text)
        text = TABLE_PATTERN.sub(self._take_table, text)
        return _group_lists(self._assemble(text))

    # Pass 1
    def _take_fence(self, match: re.Match) -> str:
        tag = match.group("language")
        code = _trim_blank_lines(match.group("code"))
        language = resolve_alias(tag) if tag else classify(code)
        index = len(self._code_blocks)
        self._code_blocks.append(CodeBlock(
            id=f"{self._id_prefix}_{index + 1}",
            language=language,
            content=escape(code),
        ))
        return f"\n{self._block_mark}C{index}{self._block_mark}\n"

    # Pass 2
    def _take_inline_code(self, match: re.Match) -> str:
        self._inline_codes.append(match.group(1))
        return f"{self._inline_mark}{len(self._inline_codes) - 1}{self._inline_mark}"

    # Pass 3
    def _take_table(self, match: re.Match) -> str:
        headers = self._cells(match.group("header"))
        rows = [
            self._cells(line)
            for line in match.group("rows").strip().split("\n")
            if line.strip()
        ]
        index = len(self._tables)
        self._tables.append(Table(headers=headers, rows=rows))
        return f"\n{self._block_mark}T{index}{self._block_mark}\n"

    def _cells(self, line: str) -> list[str]:
        # Split before restoring so pipes inside inline code stay in their cell
        return [self._restore_inline(cell) for cell in _split_cells(line)]

    def _restore_inline(self, text: str) -> str:
        return self._inline_token.sub(
            lambda m: f"`{self._inline_codes[int(m.group(1))]}`", text
        )

    # Passes 4-7
    def _assemble(self, text: str) -> list[_Assembled]:
        blocks: list[_Assembled] = []
        pending: list[str] = []

        def flush() -> None:
            if pending:
                spans = self._inline("\n".join(pending))
                if spans:
                    blocks.append(Paragraph(text=plain_text(spans), spans=spans))
                pending.clear()

        for line in text.split("\n"):
            stripped = line.strip()
            if not stripped:
                flush()
                continue

            token = self._block_token.fullmatch(stripped)
            if token:
                flush()
                index = int(token.group("index"))
                if token.group("kind") == "C":
                    blocks.append(self._code_blocks[index])
                else:
                    blocks.append(self._tables[index])
                continue

            heading = HEADING_PATTERN.match(line)
            if heading:
                flush()
                spans = self._inline(heading.group(2).strip())
                blocks.append(Heading(
                    level=len(heading.group(1)),
                    text=plain_text(spans),
                    spans=spans,
                ))
                continue

            numbered = NUMBERED_ITEM_PATTERN.match(line)
            bullet = None if numbered else BULLET_ITEM_PATTERN.match(line)
            if numbered or bullet:
                flush()
                spans = self._inline((numbered or bullet).group(1).strip())
                blocks.append(ListItem(
                    ordered=numbered is not None,
                    text=plain_text(spans),
                    spans=spans,
                ))
                continue

            step = STEP_MARKER_PATTERN.match(stripped)
            if step:
                flush()
                spans = self._inline(step.group(2).strip())
                blocks.append(StepHeader(
                    label=step.group(1),
                    text=plain_text(spans),
                    spans=spans,
                ))
                continue

            pending.append(stripped)

        flush()
        return blocks

    def _inline(self, text: str) -> list[InlineNode]:
        spans: list[InlineNode] = []
        position = 0
        for match in self._inline_pattern.finditer(text):
            if match.start() > position:
                spans.append(TextSpan(text=text[position:match.start()]))
            if match.group("code") is not None:
                code = self._inline_codes[int(match.group("code"))]
                spans.append(InlineCode(content=escape(code)))
            elif match.group("strong_em") is not None:
                inner = self._inline(match.group("strong_em"))
                italic = Emphasis(style="italic", text=plain_text(inner), children=inner)
                spans.append(Emphasis(style="bold", text=italic.text, children=[italic]))
            elif match.group("strong") is not None:
                inner = self._inline(match.group("strong"))
                spans.append(Emphasis(style="bold", text=plain_text(inner), children=inner))
            else:
                inner = self._inline(match.group("em"))
                spans.append(Emphasis(style="italic", text=plain_text(inner), children=inner))
            position = match.end()
        if position < len(text):
            spans.append(TextSpan(text=text[position:]))
        return spans


def _group_lists(blocks: list[_Assembled]) -> list[BlockNode]:
    """Coalesce each run of adjacent list items into one list group."""
    grouped: list[BlockNode] = []
    for block in blocks:
        if isinstance(block, ListItem):
            last = grouped[-1] if grouped else None
            if isinstance(last, ListGroup):
                grouped[-1] = ListGroup(items=[*last.items, block])
            else:
                grouped.append(ListGroup(items=[block]))
        else:
            grouped.append(block)
    return grouped


def render(text: str, id_prefix: str = "code") -> list[BlockNode]:
    """Convert assistant text into an ordered sequence of block nodes.

    Never raises. If the transformation fails for any reason the whole
    input comes back as a single paragraph.

    Args:
        text: Raw assistant response
        id_prefix: Prefix for code block ids (``<prefix>_1``, ``<prefix>_2``...)

    Returns:
        Block nodes in document order
    """
    try:
        return _Transformation(text, id_prefix).run()
    except Exception:
        logger.exception("Render failed, falling back to a single paragraph")
        if not text.strip():
            return []
        return [Paragraph(text=text, spans=[TextSpan(text=text)])]

"""Render tree produced from assistant responses.

Block nodes make up the top-level sequence returned by ``render()``.
Inline nodes (text spans, inline code, emphasis) appear in the ``spans``
of paragraphs, headings, list items and step headers.
"""

from collections.abc import Iterable, Iterator
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .escaping import unescape


class TextSpan(BaseModel):
    """Plain run of text inside a block."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class InlineCode(BaseModel):
    """Single-backtick code span. ``content`` is escaped."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline_code"] = "inline_code"
    content: str

    @property
    def source(self) -> str:
        return unescape(self.content)


class Emphasis(BaseModel):
    """Bold or italic run.

    Attributes:
        style: ``bold`` or ``italic``
        text: Plain text of the run, markers removed
        children: Nested spans (a bold run may hold an italic one)
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["emphasis"] = "emphasis"
    style: Literal["bold", "italic"]
    text: str
    children: list["InlineNode"] = Field(default_factory=list)


InlineNode = Annotated[
    Union[TextSpan, InlineCode, Emphasis],
    Field(discriminator="kind"),
]

Emphasis.model_rebuild()


class Paragraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["paragraph"] = "paragraph"
    text: str
    spans: list[InlineNode] = Field(default_factory=list)


class Heading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=3)
    text: str
    spans: list[InlineNode] = Field(default_factory=list)


class CodeBlock(BaseModel):
    """Fenced code block.

    Attributes:
        id: Identifier unique within one ``render()`` call
        language: Canonical language tag
        content: Escaped code, safe to embed in markup
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["code_block"] = "code_block"
    id: str
    language: str
    content: str

    @property
    def source(self) -> str:
        """The code as written, for copying or highlighting."""
        return unescape(self.content)


class Table(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["table"] = "table"
    headers: list[str]
    rows: list[list[str]] = Field(default_factory=list)


class ListItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["list_item"] = "list_item"
    ordered: bool
    text: str
    spans: list[InlineNode] = Field(default_factory=list)


class ListGroup(BaseModel):
    """Run of adjacent list items. Numbered and bulleted items may mix."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    items: list[ListItem]

    @computed_field
    @property
    def ordered(self) -> bool:
        """True when every item in the run is numbered."""
        return bool(self.items) and all(item.ordered for item in self.items)


class StepHeader(BaseModel):
    """A ``Steps:`` / ``Step N:`` marker line.

    Attributes:
        label: The marker itself, e.g. ``Step 2:``
        text: Remainder of the line after the marker
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["step_header"] = "step_header"
    label: str
    text: str = ""
    spans: list[InlineNode] = Field(default_factory=list)


BlockNode = Annotated[
    Union[Paragraph, Heading, CodeBlock, Table, ListGroup, StepHeader],
    Field(discriminator="kind"),
]

RenderNode = Union[
    Paragraph,
    Heading,
    CodeBlock,
    Table,
    ListItem,
    ListGroup,
    StepHeader,
    TextSpan,
    InlineCode,
    Emphasis,
]


class RenderTree(BaseModel):
    """Serializable wrapper around a rendered block sequence."""

    nodes: list[BlockNode] = Field(default_factory=list)


def walk(nodes: Iterable[RenderNode]) -> Iterator[RenderNode]:
    """Yield every node in the tree, depth first, parents before children."""
    for node in nodes:
        yield node
        if isinstance(node, ListGroup):
            yield from walk(node.items)
        elif isinstance(node, Emphasis):
            yield from walk(node.children)
        elif isinstance(node, (Paragraph, Heading, ListItem, StepHeader)):
            yield from walk(node.spans)


def plain_text(spans: Iterable[InlineNode]) -> str:
    """Concatenate the readable text of inline spans."""
    parts = []
    for span in spans:
        if isinstance(span, InlineCode):
            parts.append(span.source)
        else:
            parts.append(span.text)
    return "".join(parts)

"""HTML materialization of a render tree.

Produces the same fragment structure the web client styles: a code block
container with a language header and copy button, ``ai-table`` tables,
``ai-header-N`` headings and ``ai-bold`` / ``ai-italic`` runs.
"""

from collections.abc import Iterable

from .escaping import escape
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
)


def _inline_html(spans: Iterable[InlineNode]) -> str:
    parts = []
    for span in spans:
        if isinstance(span, TextSpan):
            parts.append(escape(span.text).replace("\n", "<br>"))
        elif isinstance(span, InlineCode):
            # Content is already escaped by the transformer
            parts.append(f'<code class="inline-code">{span.content}</code>')
        elif isinstance(span, Emphasis):
            tag, css = ("strong", "ai-bold") if span.style == "bold" else ("em", "ai-italic")
            parts.append(f'<{tag} class="{css}">{_inline_html(span.children)}</{tag}>')
    return "".join(parts)


def _code_block_html(block: CodeBlock) -> str:
    return (
        '<div class="code-block-container">'
        '<div class="code-block-header">'
        f'<span class="code-language">{escape(block.language.upper())}</span>'
        f'<button class="copy-code-btn" data-code-id="{block.id}">Copy</button>'
        '</div>'
        f'<pre><code id="{block.id}" class="language-{escape(block.language)}">'
        f'{block.content}</code></pre>'
        '</div>'
    )


def _table_html(table: Table) -> str:
    head = "".join(f"<th>{escape(cell)}</th>" for cell in table.headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(cell)}</td>" for cell in row) + "</tr>"
        for row in table.rows
    )
    return (
        f'<table class="ai-table"><thead><tr>{head}</tr></thead>'
        f"<tbody>{body}</tbody></table>"
    )


def _item_class(item: ListItem) -> str:
    return "ai-numbered-item" if item.ordered else "ai-bullet-item"


def block_to_html(block: BlockNode) -> str:
    """Materialize one block node."""
    if isinstance(block, CodeBlock):
        return _code_block_html(block)
    if isinstance(block, Table):
        return _table_html(block)
    if isinstance(block, Heading):
        return (
            f'<h{block.level} class="ai-header-{block.level}">'
            f"{_inline_html(block.spans)}</h{block.level}>"
        )
    if isinstance(block, ListGroup):
        tag = "ol" if block.ordered else "ul"
        items = "".join(
            f'<li class="{_item_class(item)}">{_inline_html(item.spans)}</li>'
            for item in block.items
        )
        return f"<{tag}>{items}</{tag}>"
    if isinstance(block, StepHeader):
        rest = f" {_inline_html(block.spans)}" if block.spans else ""
        return f'<div class="ai-step-header">{escape(block.label)}{rest}</div>'
    if isinstance(block, Paragraph):
        return f"<p>{_inline_html(block.spans)}</p>"
    raise TypeError(f"Not a block node: {type(block).__name__}")


def to_html(nodes: Iterable[BlockNode]) -> str:
    """Materialize a block sequence as one HTML fragment."""
    return "\n".join(block_to_html(node) for node in nodes)

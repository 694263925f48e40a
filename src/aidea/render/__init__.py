"""Assistant response rendering.

Module structure (each module hides one decision):
- escaping.py: which characters are unsafe in generated markup
- languages.py: fence tag aliases and heuristic language detection
- models.py: render tree node types
- transformer.py: the markdown dialect and its pass ordering
- html.py: HTML materialization of the render tree
"""

from .escaping import escape, unescape
from .html import to_html
from .languages import (
    KNOWN_LANGUAGES,
    LANGUAGE_ALIASES,
    LANGUAGE_RULES,
    PLAINTEXT,
    LanguageRule,
    Snippet,
    classify,
    first_match,
    resolve_alias,
)
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
    RenderNode,
    RenderTree,
    StepHeader,
    Table,
    TextSpan,
    plain_text,
    walk,
)
from .transformer import render

__all__ = [
    "KNOWN_LANGUAGES",
    "LANGUAGE_ALIASES",
    "LANGUAGE_RULES",
    "PLAINTEXT",
    "BlockNode",
    "CodeBlock",
    "Emphasis",
    "Heading",
    "InlineCode",
    "InlineNode",
    "LanguageRule",
    "ListGroup",
    "ListItem",
    "Paragraph",
    "RenderNode",
    "RenderTree",
    "Snippet",
    "StepHeader",
    "Table",
    "TextSpan",
    "classify",
    "escape",
    "first_match",
    "plain_text",
    "render",
    "resolve_alias",
    "to_html",
    "unescape",
    "walk",
]

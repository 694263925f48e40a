"""Escaping of raw text for embedding in generated markup.

Only markup-significant characters are touched; everything else,
including non-ASCII text, passes through unchanged.
"""

import html


def escape(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` in text."""
    return html.escape(text, quote=False)


def unescape(text: str) -> str:
    """Reverse :func:`escape` (used to recover copyable source)."""
    return html.unescape(text)

"""Source-language detection for code snippets.

Hides two decisions from the transformer:
- how an explicit fence tag (``py``, ``rs``, ``yml``...) maps to a
  canonical language tag
- how an unlabeled snippet is classified

Classification is an ordered list of rules. The first rule whose
predicate matches wins, so the order below is part of the behaviour:
patterns overlap (``class `` is claimed by C++ long before Ruby sees it),
and the Go and JSON signatures are checked before any keyword rule that
would otherwise shadow them.

Known weakness: the XML and YAML rules near the bottom are broad. Any
brace-free, semicolon-free text containing a colon is reported as YAML,
which includes a good deal of plain prose.
"""

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

PLAINTEXT = "plaintext"

KNOWN_LANGUAGES = frozenset({
    "rust",
    "swift",
    "kotlin",
    "java",
    "cpp",
    "c",
    "csharp",
    "go",
    "php",
    "ruby",
    "dart",
    "javascript",
    "typescript",
    "python",
    "html",
    "css",
    "sql",
    "json",
    "xml",
    "yaml",
    "bash",
    "markdown",
    PLAINTEXT,
})

LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "rb": "ruby",
    "sh": "bash",
    "yml": "yaml",
    "md": "markdown",
    "cpp": "cpp",
    "c++": "cpp",
    "cxx": "cpp",
    "cc": "cpp",
    "cs": "csharp",
    "c#": "csharp",
    "kt": "kotlin",
    "rs": "rust",
    "go": "go",
    "golang": "go",
    "php": "php",
    "swift": "swift",
    "dart": "dart",
    "java": "java",
    "json": "json",
    "xml": "xml",
    "yaml": "yaml",
}


@dataclass(frozen=True)
class Snippet:
    """A code snippet prepared for rule evaluation.

    Attributes:
        text: The snippet with surrounding whitespace removed
        lowered: ``text`` lower-cased, used by keyword predicates
    """

    text: str
    lowered: str

    @classmethod
    def from_code(cls, code: str) -> "Snippet":
        text = code.strip()
        return cls(text=text, lowered=text.lower())


Predicate = Callable[[Snippet], bool]


@dataclass(frozen=True)
class LanguageRule:
    """One classification rule: a language tag and the test that claims it."""

    language: str
    matches: Predicate


def contains_any(*needles: str) -> Predicate:
    """Predicate: the lower-cased snippet contains at least one needle."""
    return lambda snippet: any(needle in snippet.lowered for needle in needles)


def contains_all(*needles: str) -> Predicate:
    """Predicate: the lower-cased snippet contains every needle."""
    return lambda snippet: all(needle in snippet.lowered for needle in needles)


def either(*predicates: Predicate) -> Predicate:
    return lambda snippet: any(predicate(snippet) for predicate in predicates)


def both(*predicates: Predicate) -> Predicate:
    return lambda snippet: all(predicate(snippet) for predicate in predicates)


def lacks(*needles: str) -> Predicate:
    """Predicate: none of the needles occur in the lower-cased snippet."""
    return lambda snippet: not any(needle in snippet.lowered for needle in needles)


def _parses_as_json(snippet: Snippet) -> bool:
    text = snippet.text
    if not ((text.startswith("{") and text.endswith("}"))
            or (text.startswith("[") and text.endswith("]"))):
        return False
    try:
        json.loads(text)
    except (ValueError, RecursionError):
        return False
    return True


LANGUAGE_RULES: tuple[LanguageRule, ...] = (
    LanguageRule("json", _parses_as_json),
    # Go signature lines are unambiguous and must not lose to the
    # "fn " / "func " keyword rules below.
    LanguageRule("go", contains_any("package main", 'import "fmt"', "fmt.println")),
    LanguageRule("rust", contains_any(
        "fn ", "let mut ", "use std::", "impl ", "match ", "cargo ",
    )),
    LanguageRule("swift", either(
        contains_any("func ", "var "),
        both(
            contains_any("let "),
            contains_any("import foundation", "import uikit", "override func"),
        ),
    )),
    LanguageRule("kotlin", either(
        contains_any("fun ", "val "),
        both(
            contains_any("var "),
            either(contains_any("import kotlin"), contains_all("class ", ": ")),
        ),
    )),
    LanguageRule("java", contains_any(
        "public class ", "private ", "public static void main", "import java",
        "system.out.println", "extends ",
    )),
    # C++ shares most of its keywords with C, so it goes first.
    LanguageRule("cpp", contains_any(
        "#include <iostream>", "std::", "namespace ", "class ", "cout <<",
        "cin >>", "vector<", "using namespace std",
    )),
    LanguageRule("c", contains_any(
        "#include <stdio.h>", "printf(", "scanf(", "malloc(", "int main()",
        "void main()",
    )),
    LanguageRule("csharp", either(
        contains_any(
            "using system", "console.writeline", "public static void main",
            "namespace ",
        ),
        contains_all("class ", "public "),
    )),
    LanguageRule("go", contains_any(
        "package main", 'import "fmt"', "func main()", "fmt.println", "go ",
        "defer ",
    )),
    LanguageRule("php", either(
        contains_any("<?php", "echo ", "$_get", "$_post"),
        contains_all("function ", "$"),
    )),
    LanguageRule("ruby", either(
        contains_any("def ", "puts ", "require ", "class "),
        contains_all("end", "do"),
    )),
    LanguageRule("dart", either(
        contains_any("void main()", 'import "dart:', "flutter"),
        contains_all("class ", "extends widget"),
    )),
    LanguageRule("javascript", contains_any(
        "function", "const ", "let ", "var ", "=>", "console.log",
    )),
    LanguageRule("python", contains_any(
        "def ", "import ", "print(", "if __name__",
    )),
    LanguageRule("html", contains_any("<html", "<!doctype", "<div", "<script")),
    LanguageRule("css", both(
        contains_all("{", "}"),
        contains_any(":", "px", "color", "margin"),
    )),
    LanguageRule("sql", contains_any("select ", "from ", "where ", "insert ")),
    LanguageRule("xml", either(
        contains_any("<?xml"),
        both(contains_all("<", "</"), lacks("<html", "<div")),
    )),
    LanguageRule("yaml", either(
        contains_any("---"),
        both(contains_any(":"), lacks("{", ";")),
    )),
    LanguageRule("bash", contains_any("#!/bin/bash", "echo ", "cd ", "ls ")),
)


def first_match(
    rules: Iterable[LanguageRule],
    snippet: Snippet,
    default: str = PLAINTEXT,
) -> str:
    """Return the language of the first rule that matches the snippet."""
    for rule in rules:
        if rule.matches(snippet):
            return rule.language
    return default


def classify(code: str, rules: Sequence[LanguageRule] = LANGUAGE_RULES) -> str:
    """Detect the language of an unlabeled code snippet.

    Args:
        code: Snippet text (surrounding whitespace is ignored)
        rules: Ordered rules to evaluate, defaults to :data:`LANGUAGE_RULES`

    Returns:
        A tag from :data:`KNOWN_LANGUAGES`, ``plaintext`` when nothing matches
    """
    language = first_match(rules, Snippet.from_code(code))
    if language == PLAINTEXT:
        logger.debug("No language rule matched %d-char snippet", len(code))
    return language


def resolve_alias(tag: str) -> str:
    """Map an explicit fence tag to its canonical language tag.

    Tags missing from :data:`LANGUAGE_ALIASES` are returned lower-cased
    but otherwise unchanged; an empty tag resolves to ``plaintext``.
    """
    normalized = tag.strip().lower()
    if not normalized:
        return PLAINTEXT
    return LANGUAGE_ALIASES.get(normalized, normalized)

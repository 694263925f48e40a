"""Unit tests for fence tag aliases and language classification."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from aidea.render import (
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
from aidea.render.languages import contains_any


class TestResolveAlias:
    """Tests for explicit fence tags."""

    @pytest.mark.parametrize("tag,expected", [
        ("py", "python"),
        ("rs", "rust"),
        ("ts", "typescript"),
        ("golang", "go"),
        ("C#", "csharp"),
        (" Yml ", "yaml"),
    ])
    def test_known_aliases(self, tag: str, expected: str):
        """Test alias lookup is case and whitespace insensitive."""
        assert resolve_alias(tag) == expected

    def test_unknown_tag_is_lower_cased(self):
        """Test pass-through of tags missing from the alias table."""
        assert resolve_alias("Haskell") == "haskell"

    def test_empty_tag(self):
        """Test that an empty tag is plaintext."""
        assert resolve_alias("   ") == PLAINTEXT

    def test_alias_targets_are_known(self):
        """Test that every alias maps to a known language."""
        assert set(LANGUAGE_ALIASES.values()) <= KNOWN_LANGUAGES


class TestClassify:
    """Tests for heuristic classification of unlabeled snippets."""

    @pytest.mark.parametrize("code,expected", [
        ('{"a": [1, 2]}', "json"),
        ("[1, 2, 3]", "json"),
        ('package main\n\nfunc main() {\n\tfmt.Println("hi")\n}', "go"),
        ('fn main() {\n    println!("hi");\n}', "rust"),
        ("import os\nprint(os.name)", "python"),
        ("SELECT * FROM users", "sql"),
        ("#!/bin/bash\ncd /tmp", "bash"),
        ("key: value", "yaml"),
        ("hello world", PLAINTEXT),
    ])
    def test_snippets(self, code: str, expected: str):
        """Test representative snippets."""
        assert classify(code) == expected

    def test_empty_snippet(self):
        """Test that empty and blank snippets are plaintext."""
        assert classify("") == PLAINTEXT
        assert classify("  \n\t") == PLAINTEXT

    def test_json_requires_valid_document(self):
        """Test that brace-wrapped text that is not JSON falls through."""
        assert classify("{not json}") != "json"

    def test_earlier_rules_shadow_later_ones(self):
        """Test that 'class ' is claimed by C++ before Ruby."""
        assert classify("class Foo") == "cpp"

    def test_custom_rules(self):
        """Test classification against a caller-supplied rule list."""
        rules = (
            LanguageRule("never", lambda snippet: False),
            LanguageRule("toy", contains_any("toy")),
        )
        assert classify("A TOY program", rules=rules) == "toy"
        assert classify("nothing here", rules=rules) == PLAINTEXT

    def test_first_match_default(self):
        """Test the fallback of first_match."""
        assert first_match((), Snippet.from_code("x"), default="other") == "other"

    def test_rules_only_produce_known_languages(self):
        """Test that the built-in rules stay inside the known set."""
        assert {rule.language for rule in LANGUAGE_RULES} <= KNOWN_LANGUAGES

    @given(st.text())
    def test_classify_is_total(self, code: str):
        """Property test: classification never raises and stays in the known set."""
        assert classify(code) in KNOWN_LANGUAGES

    @given(st.text())
    def test_classify_is_deterministic(self, code: str):
        """Property test: the same snippet always gets the same tag."""
        assert classify(code) == classify(code)

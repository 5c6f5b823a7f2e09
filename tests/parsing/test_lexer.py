"""
Tests for the template lexer and whitespace control.
"""

import pytest

from prompteng.exceptions import TemplateSyntaxError
from prompteng.parsing.lexer import TokenKind, tokenize


class TestTokenize:
    """Tests for splitting template source into tokens."""

    def test_plain_text(self):
        tokens = tokenize("just text")
        assert len(tokens) == 1
        assert tokens[0].kind is TokenKind.TEXT
        assert tokens[0].content == "just text"

    def test_empty_source(self):
        assert tokenize("") == []

    def test_mixed_tokens_in_order(self):
        tokens = tokenize("Hi {{ name }}!{% if x %}y{% endif %}")
        assert [t.kind for t in tokens] == [
            TokenKind.TEXT,
            TokenKind.OUTPUT,
            TokenKind.TEXT,
            TokenKind.TAG,
            TokenKind.TEXT,
            TokenKind.TAG,
        ]
        assert tokens[1].content == " name "
        assert tokens[1].source == "{{ name }}"

    def test_tag_name_and_args(self):
        token = tokenize("{% for item in items reversed %}")[0]
        assert token.tag_name == "for"
        assert token.tag_args == "item in items reversed"

    def test_tag_without_args(self):
        token = tokenize("{% endif %}")[0]
        assert token.tag_name == "endif"
        assert token.tag_args == ""

    def test_line_numbers(self):
        tokens = tokenize("line one\nline two {{ x }}\n{% tag %}")
        assert tokens[1].line == 2
        assert tokens[3].line == 3

    def test_multiline_markup_advances_line(self):
        tokens = tokenize("{{\n x\n}}{{ y }}")
        assert tokens[1].line == 3


class TestQuotedDelimiters:
    """Tests that closing delimiters inside string literals are not markup ends."""

    def test_output_with_quoted_closer(self):
        tokens = tokenize('a{{ "}}" }}b')
        assert [t.kind for t in tokens] == [TokenKind.TEXT, TokenKind.OUTPUT, TokenKind.TEXT]
        assert tokens[1].content == ' "}}" '
        assert tokens[2].content == "b"

    def test_tag_with_quoted_closer(self):
        token = tokenize("{% assign x = '%}' %}")[0]
        assert token.tag_args == "x = '%}'"

    def test_unterminated_quote_falls_back_to_plain_search(self):
        tokens = tokenize("{{ x | append: \"a }}tail")
        assert tokens[0].content == ' x | append: "a '
        assert tokens[1].content == "tail"

    def test_rendered_value(self, render):
        assert render('[{{ "}}" }}]{% assign x = "%}" %}{{ x }}') == "[}}]%}"


class TestUnclosedMarkup:
    """Tests for delimiters that are opened but never closed."""

    def test_unclosed_output(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize("Hello {{ name", template_name="greet")
        message = str(exc_info.value)
        assert "not closed" in message
        assert "'}}'" in message
        assert "greet" in message

    def test_unclosed_tag(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize("text\n{% if x")
        assert "'%}'" in str(exc_info.value)
        assert exc_info.value.context.line == 2


class TestWhitespaceControl:
    """Tests for the '-' trim markers."""

    def test_trim_left_strips_preceding_text(self):
        tokens = tokenize("a  \n {{- x }}")
        assert tokens[0].content == "a"

    def test_trim_right_strips_following_text(self):
        tokens = tokenize("{% if x -%}\n   body")
        assert tokens[1].content == "body"

    def test_trim_markers_removed_from_content(self):
        token = tokenize("{%- assign a = 1 -%}")[0]
        assert token.tag_name == "assign"
        assert token.tag_args == "a = 1"
        assert token.trim_left and token.trim_right

    def test_no_trim_keeps_whitespace(self):
        tokens = tokenize("a \n{{ x }}\n b")
        assert tokens[0].content == "a \n"
        assert tokens[2].content == "\n b"

"""Test syntax highlighting."""

import pytest
from rich.style import Style
from slide_deck.highlighter import DEFAULT_STYLE, SyntaxHighlighter


@pytest.fixture
def highlighter():
    return SyntaxHighlighter("monokai")


def _line_text(line):
    return "".join(token.text for token in line)


def test_empty_code(highlighter):
    assert highlighter.highlight("") == []
    assert highlighter.highlight("\n\n") == []


def test_python_lines(highlighter):
    lines = highlighter.highlight("x = 1\ny = 2\n", "python")

    assert [_line_text(line) for line in lines] == ["x = 1", "y = 2"]
    assert all(isinstance(token.style, Style) for line in lines for token in line)


def test_keywords_are_colored(highlighter):
    lines = highlighter.highlight("def f():\n    return 1", "python")
    keyword = lines[0][0]

    assert keyword.text == "def"
    assert keyword.style.color is not None


def test_unknown_language_falls_back_to_text(highlighter):
    lines = highlighter.highlight("some text", "no-such-language")
    assert [_line_text(line) for line in lines] == ["some text"]


def test_no_language(highlighter):
    lines = highlighter.highlight("a\n\nb", None)
    assert [_line_text(line) for line in lines] == ["a", "", "b"]


def test_leading_blank_lines_are_kept(highlighter):
    lines = highlighter.highlight("\nx = 1", "python")
    assert [_line_text(line) for line in lines] == ["", "x = 1"]


def test_tabs_are_expanded(highlighter):
    lines = highlighter.highlight("\tindented", "text")
    assert _line_text(lines[0]) == "    indented"


def test_lexers_are_cached(highlighter):
    assert highlighter.lexer_for("python") is highlighter.lexer_for("Python")


def test_unknown_style_falls_back():
    assert SyntaxHighlighter("no-such-style").style_name == DEFAULT_STYLE

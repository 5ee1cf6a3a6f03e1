"""Test admonition preprocessing and parsing."""

import pytest
from slide_deck.errors import AdmonitionTypeError
from slide_deck.markdown_parser import MarkdownParser, preprocess_admonitions
from slide_deck.models import (
    Admonition,
    AdmonitionType,
    BlockQuote,
    Code,
    ListBlock,
    Paragraph,
    TextSpan,
    spans_text,
)


@pytest.fixture
def parser():
    return MarkdownParser()


@pytest.mark.parametrize("name", ["TIP", "tip", "hint", "  Hint  "])
def test_tip_aliases_resolve_to_same_type(name):
    assert AdmonitionType.parse(name) is AdmonitionType.TIP


@pytest.mark.parametrize("name,expected", [
    ("caution", AdmonitionType.WARNING),
    ("attention", AdmonitionType.WARNING),
    ("tldr", AdmonitionType.ABSTRACT),
    ("done", AdmonitionType.SUCCESS),
    ("faq", AdmonitionType.QUESTION),
    ("missing", AdmonitionType.FAILURE),
    ("cite", AdmonitionType.QUOTE),
    ("Important", AdmonitionType.IMPORTANT),
])
def test_aliases(name, expected):
    assert AdmonitionType.parse(name) is expected


@pytest.mark.parametrize("name", ["foo", "", "no te"])
def test_unknown_type_raises(name):
    with pytest.raises(AdmonitionTypeError) as excinfo:
        AdmonitionType.parse(name)
    assert excinfo.value.name == name
    assert isinstance(excinfo.value, ValueError)


def test_default_title():
    assert AdmonitionType.WARNING.default_title == "Warning"


def test_quoted_form(parser):
    slide = parser.parse_slide("> [!TIP] Be careful\n> body text")

    assert slide.blocks == (
        Admonition(AdmonitionType.TIP, (Paragraph((TextSpan("body text"),)),), "Be careful"),
    )


def test_quoted_form_without_title(parser):
    slide = parser.parse_slide("> [!note]\n> first\n>\n> second")
    admonition = slide.blocks[0]

    assert admonition.title is None
    assert [spans_text(block.spans) for block in admonition.blocks] == ["first", "second"]


def test_fenced_form(parser):
    slide = parser.parse_slide(":::warning\nWatch out\n:::")

    assert slide.blocks == (
        Admonition(AdmonitionType.WARNING, (Paragraph((TextSpan("Watch out"),)),)),
    )


def test_fenced_form_followed_by_content(parser):
    slide = parser.parse_slide("Intro\n:::info Details\nInside\n:::\nOutro")

    assert [type(block) for block in slide.blocks] == [Paragraph, Admonition, Paragraph]
    assert slide.blocks[1].title == "Details"


def test_title_with_special_characters(parser):
    title = 'Use "quotes" & <tags>'
    slide = parser.parse_slide(f":::note {title}\nbody\n:::")

    assert slide.blocks[0].title == title


def test_unknown_type_stays_blockquote(parser):
    slide = parser.parse_slide("> [!FOO] x\n> y")

    assert isinstance(slide.blocks[0], BlockQuote)


def test_unknown_fenced_type_passes_through():
    text = ":::foo\nbody\n:::"
    assert preprocess_admonitions(text) == text


def test_fenced_code_is_not_rewritten():
    text = "```\n:::note\n> [!TIP]\n```"
    assert preprocess_admonitions(text) == text


def test_code_inside_admonition(parser):
    slide = parser.parse_slide(":::tip\n```\n:::\n```\n:::")
    admonition = slide.blocks[0]

    assert admonition.blocks == (Code(":::\n", None),)


def test_unclosed_fence_runs_to_end(parser):
    slide = parser.parse_slide(":::danger\nfirst\n\nsecond")
    admonition = slide.blocks[0]

    assert admonition.admonition_type is AdmonitionType.DANGER
    assert len(admonition.blocks) == 2


def test_nested_admonitions(parser):
    slide = parser.parse_slide(":::note\n:::tip\ninner\n:::\nouter\n:::")
    outer = slide.blocks[0]

    assert outer.admonition_type is AdmonitionType.NOTE
    inner = outer.blocks[0]
    assert inner.admonition_type is AdmonitionType.TIP
    assert spans_text(inner.blocks[0].spans) == "inner"
    assert spans_text(outer.blocks[1].spans) == "outer"


def test_nested_list_inside_admonition(parser):
    slide = parser.parse_slide(":::note\n- A\n  - B\n    - C\n:::")
    top = slide.blocks[0].blocks[0]

    assert isinstance(top, ListBlock)
    assert spans_text(top.items[0].nested.items[0].nested.items[0].spans) == "C"


def test_list_inside_quoted_admonition(parser):
    slide = parser.parse_slide("> [!NOTE]\n> - A\n>   - B")
    top = slide.blocks[0].blocks[0]

    assert spans_text(top.items[0].nested.items[0].spans) == "B"


def test_marker_form():
    out = preprocess_admonitions("> [!WARNING] Heads up\n> text")

    assert '<admonition type="warning" title="Heads up">' in out
    assert "</admonition>" in out
    assert "\ntext\n" in out

"""Test frontmatter extraction."""

import datetime

import pytest
from slide_deck.errors import FrontmatterError, SlideError
from slide_deck.frontmatter import extract_frontmatter, parse_meta
from slide_deck.markdown_parser import parse
from slide_deck.models import DEFAULT_PAGING, Meta


def test_yaml_frontmatter():
    meta, body = extract_frontmatter("---\ntheme: dark\n---\n# Slide")

    assert meta.theme == "dark"
    assert body == "# Slide"


def test_unclosed_frontmatter_fails():
    with pytest.raises(FrontmatterError, match="Unclosed"):
        extract_frontmatter("---\ntheme: dark\n# Slide")


def test_parse_with_frontmatter():
    document = parse("---\ntheme: dark\n---\n# Slide")

    assert document.meta.theme == "dark"
    assert len(document) == 1


def test_parse_unclosed_frontmatter_is_hard_failure():
    with pytest.raises(FrontmatterError):
        parse("---\ntheme: dark\n# Slide")


def test_toml_frontmatter():
    meta, body = extract_frontmatter('+++\ntheme = "light"\nauthor = "Ada"\npaging = "%d of %d"\n+++\nbody text\n')

    assert meta.theme == "light"
    assert meta.author == "Ada"
    assert meta.paging == "%d of %d"
    assert body == "body text\n"


def test_leading_whitespace_before_frontmatter():
    meta, body = extract_frontmatter("\n\n  ---\nauthor: Grace\n---\ncontent")

    assert meta.author == "Grace"
    assert body == "content"


def test_no_frontmatter_returns_text_unchanged():
    text = "# Title\n\nBody\n"
    meta, body = extract_frontmatter(text)

    assert body == text
    assert meta.paging == DEFAULT_PAGING


def test_yaml_date_becomes_string():
    meta, _ = extract_frontmatter("---\ndate: 2024-01-15\n---\n")
    assert meta.date == "2024-01-15"


def test_toml_date_becomes_string():
    meta, _ = extract_frontmatter("+++\ndate = 2024-01-15\n+++\n")
    assert meta.date == "2024-01-15"


def test_empty_header_uses_defaults(monkeypatch):
    monkeypatch.setenv("SLIDES_THEME", "light")
    meta, body = extract_frontmatter("---\n---\n# Slide")

    assert meta.theme == "light"
    assert body == "# Slide"


def test_unknown_keys_are_ignored():
    meta, _ = extract_frontmatter("---\ntheme: dark\ntransition: fade\n---\n")
    assert meta.theme == "dark"


@pytest.mark.parametrize("text", [
    "---\ntheme: [unclosed\n---\n",
    "---\n- a\n- b\n---\n",
    "---\ntheme:\n  nested: value\n---\n",
    "+++\ntheme = \n+++\n",
    "+++\nnot toml at all\n+++\n",
])
def test_malformed_frontmatter_fails(text):
    with pytest.raises(FrontmatterError):
        extract_frontmatter(text)


def test_frontmatter_error_hierarchy():
    assert issubclass(FrontmatterError, SlideError)
    assert issubclass(FrontmatterError, ValueError)


def test_parse_meta_directly():
    meta = parse_meta('author = "Lin"', "TOML")
    assert meta.author == "Lin"


def test_meta_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("SLIDES_THEME", "dracula")
    monkeypatch.setenv("USER", "ada")
    meta = Meta()

    assert meta.theme == "dracula"
    assert meta.author == "ada"
    assert meta.date == datetime.date.today().isoformat()


def test_meta_author_falls_back(monkeypatch):
    monkeypatch.delenv("SLIDES_THEME", raising=False)
    monkeypatch.delenv("USER", raising=False)
    monkeypatch.setenv("USERNAME", "grace")

    meta = Meta()
    assert meta.author == "grace"
    assert meta.theme == "default"


def test_meta_author_unknown(monkeypatch):
    monkeypatch.delenv("USER", raising=False)
    monkeypatch.delenv("USERNAME", raising=False)
    assert Meta().author == "Unknown"

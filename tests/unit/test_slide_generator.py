"""Test the slide generator facade and command-line entry point."""

import logging
import re

import pytest
from slide_deck.errors import FrontmatterError
from slide_deck.generator import SlideGenerator, main

ANSI = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture
def deck_file(tmp_path):
    path = tmp_path / "deck.md"
    path.write_text("# Hello\n\nWorld\n\n??? hidden note\n\n---\n\n# Bye\n", encoding="utf-8")
    return path


def test_generate_returns_ansi_text():
    output = SlideGenerator(width=30).generate("# Hello\n\nWorld")
    plain = ANSI.sub("", output)

    assert "▉ Hello" in plain
    assert "World" in plain


def test_explicit_theme_wins_over_frontmatter():
    generator = SlideGenerator(theme="dark")
    document = generator.parse("---\ntheme: light\n---\n# Slide")

    assert generator.resolve_theme(document).name == "dark"


def test_frontmatter_theme_wins_over_environment(monkeypatch):
    monkeypatch.setenv("SLIDES_THEME", "dracula")
    generator = SlideGenerator()
    document = generator.parse("---\ntheme: light\n---\n# Slide")

    assert generator.resolve_theme(document).name == "light"


def test_environment_theme(monkeypatch):
    monkeypatch.setenv("SLIDES_THEME", "dracula")
    generator = SlideGenerator()

    assert generator.resolve_theme(generator.parse("# Slide")).name == "dracula"


def test_unknown_theme_falls_back(caplog):
    generator = SlideGenerator(theme="nope")
    with caplog.at_level(logging.WARNING, logger="slide_deck.generator"):
        theme = generator.resolve_theme(generator.parse("# Slide"))

    assert theme.name == "default"
    assert "nope" in caplog.text


def test_frontmatter_error_propagates():
    with pytest.raises(FrontmatterError):
        SlideGenerator().generate("---\ntheme: dark\n# Slide")


def test_invalid_width():
    with pytest.raises(ValueError):
        SlideGenerator(width=0)


def test_cli_renders_file(deck_file, capsys):
    main([str(deck_file), "--width", "30"])
    out = ANSI.sub("", capsys.readouterr().out)

    assert "Hello" in out
    assert "═" * 30 in out
    assert "hidden note" not in out


def test_cli_notes(deck_file, capsys):
    main([str(deck_file), "--notes"])
    out = ANSI.sub("", capsys.readouterr().out)

    assert "hidden note" in out


def test_cli_missing_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.md")])
    assert excinfo.value.code == 1


def test_cli_frontmatter_error(tmp_path, capsys):
    path = tmp_path / "bad.md"
    path.write_text("---\ntheme: dark\n# Slide\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().out == ""


def test_cli_list_themes(capsys):
    main(["--list-themes"])
    out = capsys.readouterr().out.split()

    assert "default" in out
    assert "light" in out


def test_cli_requires_file():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2

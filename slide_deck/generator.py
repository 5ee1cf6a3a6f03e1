#!/usr/bin/env python3
"""
Main slide deck module that ties together the parser, layout engine and
terminal renderer.
"""

import io
import logging
from pathlib import Path
from typing import List, Optional, TextIO

from .highlighter import SyntaxHighlighter
from .markdown_parser import MarkdownParser
from .models import Document
from .text_renderer import TextRenderer
from .theme_loader import Theme, get_theme

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"


class SlideGenerator:
    """
    Main class for rendering markdown slide decks to the terminal.
    """

    def __init__(
        self,
        *,
        theme: Optional[str] = None,
        width: int = 80,
        show_notes: bool = False,
        debug: bool = False,
    ):
        """Create a new :class:`SlideGenerator`.

        Parameters
        ----------
        theme
            Theme name.  Overrides the deck's frontmatter ``theme``, which in
            turn overrides ``$SLIDES_THEME``.
        width
            Output width in columns.
        show_notes
            Append each slide's speaker notes to the flat output.
        debug
            Enable verbose layout logging.
        """
        if width < 1:
            raise ValueError(f"Width must be positive, got {width}")

        self.theme = theme
        self.width = width
        self.show_notes = show_notes
        self.debug = debug
        self.parser = MarkdownParser()

    def parse(self, markdown_text: str) -> Document:
        """
        Parse markdown text into a document.

        Raises:
            FrontmatterError: If the frontmatter block is unclosed or malformed
        """
        return self.parser.parse(markdown_text)

    def resolve_theme(self, document: Document) -> Theme:
        """Pick the theme for *document*, falling back to the default theme."""
        name = self.theme or document.meta.theme
        try:
            return get_theme(name)
        except ValueError as exc:
            logger.warning(f"{exc}; using '{DEFAULT_THEME}'")
            return get_theme(DEFAULT_THEME)

    def render(self, markdown_text: str, sink: TextIO) -> Document:
        """
        Parse *markdown_text* and write the flat rendering to *sink*.

        Returns:
            The parsed document
        """
        document = self.parse(markdown_text)
        theme = self.resolve_theme(document)
        renderer = TextRenderer(
            theme,
            width=self.width,
            highlighter=SyntaxHighlighter(theme.code_theme),
            show_notes=self.show_notes,
            debug=self.debug,
        )
        renderer.render(document.slides, sink)

        if self.debug:
            logger.info(f"Rendered {len(document)} slides")
            logger.info(f"Theme: {theme.name}")
        return document

    def generate(self, markdown_text: str) -> str:
        """Render *markdown_text* and return the ANSI text."""
        sink = io.StringIO()
        self.render(markdown_text, sink)
        return sink.getvalue()


def main(argv: Optional[List[str]] = None):
    """Command-line entry point for the slide deck renderer."""
    import argparse
    import sys

    from .errors import FrontmatterError
    from .theme_loader import list_available_themes

    def _build_parser() -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(prog="slidedeck", description="Render a Markdown slide deck to the terminal.")
        p.add_argument("markdown", type=Path, nargs="?", help="Markdown file to render")
        p.add_argument("--width", "-w", type=int, default=80, help="Output width in columns (default: 80)")
        p.add_argument("--theme", "-t", default=None, help="Theme to use (overrides frontmatter and $SLIDES_THEME)")
        p.add_argument("--notes", action="store_true", help="Print speaker notes after each slide")
        p.add_argument("--log-level", default="WARNING",
                       choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
        p.add_argument("--debug", action="store_true", help="Enable verbose logging")
        p.add_argument("--list-themes", action="store_true", help="List built-in themes and exit")
        return p

    parser = _build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    level = logging.DEBUG if args.debug else getattr(logging, args.log_level)
    logging.basicConfig(level=level, format="%(levelname)s  %(message)s")

    if args.list_themes:
        for name in list_available_themes():
            print(name)
        return

    if args.markdown is None:
        parser.error("the following arguments are required: markdown")
    if args.width < 1:
        parser.error("--width must be positive")

    md_path: Path = args.markdown
    if not md_path.exists():
        logger.error(f"Markdown file '{md_path}' not found")
        sys.exit(1)

    generator = SlideGenerator(
        theme=args.theme,
        width=args.width,
        show_notes=args.notes,
        debug=args.debug,
    )
    try:
        generator.render(md_path.read_text(encoding="utf-8"), sys.stdout)
    except FrontmatterError as exc:
        logger.error(f"{md_path}: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()

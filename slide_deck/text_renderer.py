"""
Terminal output for parsed slides.

Two consumers are served here:

* an interactive viewer, which asks for one slide's lines, a status line and
  the notes panel separately (``render_slide_content``, ``render_status_line``,
  ``render_notes``);
* flat output, where :class:`TextRenderer` writes the whole deck as ANSI
  styled text to a file-like sink.
"""
import io
import logging
from typing import List, Optional, Sequence, TextIO

from rich.console import Console
from rich.text import Text

from .highlighter import SyntaxHighlighter
from .layout_engine import LayoutEngine, wrap_text
from .models import Block, Meta, Slide
from .theme_loader import Theme

logger = logging.getLogger(__name__)

SLIDE_SEPARATOR = "═"
NOTES_HEADER = "Notes"


def render_slide_content(blocks: Sequence[Block], theme: Theme, width: int,
                         highlighter: Optional[SyntaxHighlighter] = None) -> List[Text]:
    """Lay out one slide's blocks for an interactive consumer."""
    return LayoutEngine(theme, width=width, highlighter=highlighter).layout_blocks(blocks)


def render_status_line(meta: Meta, index: int, total: int, theme: Theme, width: int) -> Text:
    """Return the dimmed page label, right-aligned to *width*."""
    label = meta.page_label(index, total)
    line = Text(label, style=theme.style("dimmed"))
    line.pad_left(max(width - len(label), 0))
    return line


def render_notes(slide: Slide, theme: Theme, width: int) -> List[Text]:
    """Wrap a slide's speaker notes for the notes panel."""
    if not slide.notes:
        return []
    style = theme.style("dimmed")
    lines: List[Text] = []
    for source_line in slide.notes.split("\n"):
        wrapped = wrap_text(source_line, width)
        if not wrapped:
            lines.append(Text())
        for line in wrapped:
            lines.append(Text(line, style=style))
    return lines


class TextRenderer:
    """
    Flat renderer: every slide, separated by a full-width rule.
    """

    def __init__(self, theme: Theme, width: int = 80,
                 highlighter: Optional[SyntaxHighlighter] = None, show_notes: bool = False,
                 debug: bool = False):
        self.theme = theme
        self.width = width
        self.show_notes = show_notes
        self.engine = LayoutEngine(theme, width=width, highlighter=highlighter, debug=debug)

    def render_lines(self, slides: Sequence[Slide]) -> List[Text]:
        lines: List[Text] = []
        for idx, slide in enumerate(slides):
            if idx:
                lines.append(Text())
                lines.append(Text(SLIDE_SEPARATOR * self.width, style=self.theme.style("rule")))
                lines.append(Text())
            lines.extend(self.engine.layout_blocks(slide.blocks))
            if self.show_notes and slide.notes:
                lines.append(Text(NOTES_HEADER, style=self.theme.style("accent", bold=True)))
                lines.extend(render_notes(slide, self.theme, self.width))
        return lines

    def render(self, slides: Sequence[Slide], sink: TextIO) -> None:
        """
        Write the deck to *sink* as ANSI styled text.

        Raises:
            OSError: If writing to the sink fails
        """
        console = Console(
            file=sink,
            width=self.width,
            force_terminal=True,
            color_system="truecolor",
            no_color=False,
            highlight=False,
            markup=False,
            emoji=False,
        )
        lines = self.render_lines(slides)
        logger.debug("Writing %d lines for %d slides", len(lines), len(slides))
        for line in lines:
            console.print(line, soft_wrap=True, crop=False)

    def render_to_string(self, slides: Sequence[Slide]) -> str:
        sink = io.StringIO()
        self.render(slides, sink)
        return sink.getvalue()

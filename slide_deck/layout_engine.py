#!/usr/bin/env python3
"""Layout engine that turns slide blocks into width-bounded styled lines."""

import logging
import math
import re
from typing import Dict, List, Optional, Sequence, Tuple

from rich.cells import cell_len
from rich.style import Style
from rich.text import Text

from .highlighter import HighlightedToken, SyntaxHighlighter
from .models import (
    Admonition,
    AdmonitionType,
    Alignment,
    Block,
    BlockQuote,
    Cell,
    Code,
    Heading,
    Image,
    ListBlock,
    Paragraph,
    Rule,
    Spans,
    Table,
    TextSpan,
    spans_text,
)
from .theme_loader import Theme

logger = logging.getLogger(__name__)

HEADING_GLYPHS = ("▉", "▓", "▒", "░", "▌", "▌")
BULLET = "• "
LIST_INDENT = 2
CODE_MARGIN = 4
CODE_INDENT = "  "
BLOCKQUOTE_PREFIX = "│ "
MIN_COLUMN_WIDTH = 3
ELLIPSIS = "…"

# icon and theme role per admonition type
ADMONITION_STYLES: Dict[AdmonitionType, Tuple[str, str]] = {
    AdmonitionType.NOTE: ("ⓘ", "admonition_note"),
    AdmonitionType.TIP: ("\U0001f4a1", "admonition_tip"),
    AdmonitionType.IMPORTANT: ("❗", "admonition_tip"),
    AdmonitionType.WARNING: ("⚠", "admonition_warning"),
    AdmonitionType.CAUTION: ("⚠", "admonition_warning"),
    AdmonitionType.DANGER: ("⛔", "admonition_danger"),
    AdmonitionType.ERROR: ("✗", "admonition_danger"),
    AdmonitionType.INFO: ("ⓘ", "admonition_info"),
    AdmonitionType.SUCCESS: ("✓", "admonition_success"),
    AdmonitionType.QUESTION: ("?", "admonition_info"),
    AdmonitionType.EXAMPLE: ("▸", "admonition_success"),
    AdmonitionType.QUOTE: ("“", "admonition_info"),
    AdmonitionType.ABSTRACT: ("§", "admonition_note"),
    AdmonitionType.TODO: ("☐", "admonition_info"),
    AdmonitionType.BUG: ("\U0001f41b", "admonition_danger"),
    AdmonitionType.FAILURE: ("✗", "admonition_danger"),
}

_WHITESPACE = re.compile(r"(\s+)")


# ----------------------------------------------------------------------
# Plain-text helpers
# ----------------------------------------------------------------------
def wrap_words(words: Sequence[str], width: int) -> List[str]:
    """
    Greedy word wrap.

    A word joins the current line while ``len(line) + 1 + len(word)`` fits in
    *width*; a word longer than *width* gets a line of its own, unbroken.
    """
    lines: List[str] = []
    current = ""
    for word in words:
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def wrap_text(text: str, width: int) -> List[str]:
    return wrap_words(text.split(), width)


def heading_prefix(level: int) -> str:
    return HEADING_GLYPHS[min(max(level, 1), 6) - 1] + " "


def calculate_column_widths(table: Table, max_width: int) -> List[int]:
    """
    Size table columns to fit *max_width*.

    Natural width is the longest cell text per column (at least 3).  When the
    natural total does not fit the space left after separators and padding,
    every column is scaled down proportionally, rounding up, and re-floored
    at 3.
    """
    count = table.column_count
    if count == 0:
        return []

    widths = []
    for col in range(count):
        longest = len(spans_text(table.header(col)))
        for row in range(len(table.rows)):
            longest = max(longest, len(spans_text(table.cell(row, col))))
        widths.append(max(MIN_COLUMN_WIDTH, longest))

    available = max(0, max_width - (count - 1) * 3 - count * 2)
    total = sum(widths)
    if total > available:
        widths = [max(MIN_COLUMN_WIDTH, math.ceil(w * available / total)) for w in widths]
    return widths


def build_table_separator(col_widths: Sequence[int]) -> str:
    return "┼".join("─" * (width + 2) for width in col_widths)


# ----------------------------------------------------------------------
# Styled-text helpers
# ----------------------------------------------------------------------
def span_style(span: TextSpan, theme: Theme, heading: bool = False) -> Style:
    """Resolve a span's inline flags against the theme roles."""
    flags = span.style
    if heading:
        role = "heading"
    elif flags.code:
        role = "code"
    elif flags.link:
        role = "link"
    elif flags.bold:
        role = "strong"
    elif flags.italic:
        role = "emphasis"
    else:
        role = "body"
    if heading:
        base = theme.style(role, bold=theme.heading_bold)
        if flags.bold:
            base += Style(bold=True)
    else:
        base = theme.style(role, bold=flags.bold)
    return base + Style(
        italic=flags.italic or None,
        strike=flags.strikethrough or None,
        underline=flags.link or None,
    )


def styled_spans(spans: Spans, theme: Theme, heading: bool = False) -> Text:
    text = Text()
    for span in spans:
        text.append(span.text, style=span_style(span, theme, heading))
    return text


def styled_words(spans: Spans, theme: Theme, heading: bool = False) -> List[Text]:
    """Split spans into words, keeping per-character styles across span edges."""
    words: List[Text] = []
    current = Text()
    for span in spans:
        style = span_style(span, theme, heading)
        for part in _WHITESPACE.split(span.text):
            if not part:
                continue
            if part.isspace():
                if current.plain:
                    words.append(current)
                current = Text()
            else:
                current.append(part, style=style)
    if current.plain:
        words.append(current)
    return words


def wrap_styled(words: Sequence[Text], width: int) -> List[Text]:
    """Styled counterpart of :func:`wrap_words`."""
    lines: List[Text] = []
    current: Optional[Text] = None
    for word in words:
        if current is None:
            current = word.copy()
        elif len(current.plain) + 1 + len(word.plain) <= width:
            current.append(" ")
            current.append(word)
        else:
            lines.append(current)
            current = word.copy()
    if current is not None:
        lines.append(current)
    return lines


def clip_tokens(tokens: Sequence[HighlightedToken], limit: int) -> Text:
    """Join highlighted tokens, cutting the line at *limit* characters."""
    line = Text()
    used = 0
    for token in tokens:
        if used >= limit:
            break
        piece = token.text[:limit - used]
        line.append(piece, style=token.style)
        used += len(piece)
    return line


def _fit_cell(cell: Text, width: int, alignment: Alignment) -> Text:
    length = len(cell.plain)
    if length > width:
        cell.right_crop(length - max(width - 1, 0))
        cell.append(ELLIPSIS)
        length = len(cell.plain)
    pad = max(width - length, 0)
    if alignment == Alignment.RIGHT:
        left, right = pad, 0
    elif alignment == Alignment.CENTER:
        left, right = pad // 2, pad - pad // 2
    else:
        left, right = 0, pad
    return Text.assemble(" " * (left + 1), cell, " " * (right + 1))


def _trim_trailing_blank(lines: List[Text]) -> List[Text]:
    while lines and not lines[-1].plain:
        lines.pop()
    return lines


class LayoutEngine:
    """
    Layout engine that converts blocks into lines of ``rich.text.Text``.

    Every block is laid out at the width of its enclosing scope and followed
    by one blank line.  Measurement is by character count.
    """

    def __init__(self, theme: Theme, *, width: int = 80,
                 highlighter: Optional[SyntaxHighlighter] = None, debug: bool = False):
        if width < 1:
            raise ValueError(f"Width must be positive, got {width}")
        self.theme = theme
        self.width = width
        self.highlighter = highlighter
        self.debug = debug

    def layout_blocks(self, blocks: Sequence[Block], width: Optional[int] = None) -> List[Text]:
        width = self.width if width is None else width
        lines: List[Text] = []
        for block in blocks:
            lines.extend(self.layout_block(block, width))
            lines.append(Text())
        return lines

    def layout_block(self, block: Block, width: Optional[int] = None) -> List[Text]:
        """Lay out one block without the trailing blank line."""
        width = self.width if width is None else width
        if isinstance(block, Heading):
            lines = self._heading(block, width)
        elif isinstance(block, Paragraph):
            lines = wrap_styled(styled_words(block.spans, self.theme), width)
        elif isinstance(block, Code):
            lines = self._code(block, width)
        elif isinstance(block, ListBlock):
            lines = self._list(block, width, 0)
        elif isinstance(block, BlockQuote):
            lines = self._blockquote(block, width)
        elif isinstance(block, Table):
            lines = self._table(block, width)
        elif isinstance(block, Rule):
            lines = [Text("─" * width, style=self.theme.style("rule"))]
        elif isinstance(block, Admonition):
            lines = self._admonition(block, width)
        elif isinstance(block, Image):
            image_style = self.theme.style("dimmed")
            lines = [Text(line, style=image_style)
                     for line in wrap_text(f"[image: {block.alt}] {block.path}", width)]
        else:
            logger.warning(f"Unknown block type: {type(block).__name__}")
            lines = []

        if self.debug:
            logger.debug(f"📐 {type(block).__name__} at width {width}: {len(lines)} lines")
        return lines

    # ------------------------------------------------------------------
    # Block kinds
    # ------------------------------------------------------------------
    def _heading(self, block: Heading, width: int) -> List[Text]:
        prefix = heading_prefix(block.level)
        glyph_style = self.theme.style("heading", bold=self.theme.heading_bold)
        words = styled_words(block.spans, self.theme, heading=True)
        wrapped = wrap_styled(words, max(width - len(prefix), 1)) or [Text()]

        lines = []
        for idx, line in enumerate(wrapped):
            lead = Text(prefix, style=glyph_style) if idx == 0 else Text(" " * len(prefix))
            lead.append(line)
            lines.append(lead)
        return lines

    def _code(self, block: Code, width: int) -> List[Text]:
        fence_style = self.theme.style("code_fence")
        limit = max(width - CODE_MARGIN, 1)

        if self.highlighter is not None:
            highlighted = self.highlighter.highlight(block.code, block.language)
        else:
            code_style = self.theme.style("code")
            highlighted = [
                [HighlightedToken(line, code_style)] if line else []
                for line in block.code.expandtabs(4).rstrip("\n").split("\n")
            ] if block.code.strip("\n") else []

        lines = [Text(("```" + (block.language or ""))[:max(width, 3)], style=fence_style)]
        for tokens in highlighted:
            line = Text(CODE_INDENT)
            line.append(clip_tokens(tokens, limit))
            lines.append(line)
        lines.append(Text("```", style=fence_style))
        return lines

    def _list(self, block: ListBlock, width: int, depth: int) -> List[Text]:
        indent = " " * (LIST_INDENT * depth)
        marker_style = self.theme.style("list_marker")
        lines: List[Text] = []

        for number, item in enumerate(block.items, start=1):
            marker = f"{number}. " if block.ordered else BULLET
            available = max(width - len(indent) - len(marker), 1)
            wrapped = wrap_styled(styled_words(item.spans, self.theme), available) or [Text()]

            for idx, content in enumerate(wrapped):
                if idx == 0:
                    line = Text(indent)
                    line.append(marker, style=marker_style)
                else:
                    line = Text(indent + " " * len(marker))
                line.append(content)
                lines.append(line)

            if item.nested is not None:
                lines.extend(self._list(item.nested, width, depth + 1))
        return lines

    def _blockquote(self, block: BlockQuote, width: int) -> List[Text]:
        border_style = self.theme.style("blockquote_border")
        inner = _trim_trailing_blank(self.layout_blocks(block.blocks, max(width - len(BLOCKQUOTE_PREFIX), 1)))
        if not inner:
            inner = [Text()]

        lines = []
        for content in inner:
            line = Text(BLOCKQUOTE_PREFIX, style=border_style)
            line.append(content)
            lines.append(line)
        return lines

    def _table(self, block: Table, width: int) -> List[Text]:
        widths = calculate_column_widths(block, width)
        if not widths:
            return []
        border_style = self.theme.style("table_border")

        lines = [self._table_row([block.header(col) for col in range(len(widths))], block, widths, heading=True)]
        lines.append(Text(build_table_separator(widths), style=border_style))
        for row in range(len(block.rows)):
            cells = [block.cell(row, col) for col in range(len(widths))]
            lines.append(self._table_row(cells, block, widths, heading=False))
        return lines

    def _table_row(self, cells: List[Cell], table: Table, widths: List[int], heading: bool) -> Text:
        border_style = self.theme.style("table_border")
        line = Text()
        for col, (cell, col_width) in enumerate(zip(cells, widths)):
            if col:
                line.append("│", style=border_style)
            content = styled_spans(cell, self.theme, heading=heading)
            line.append(_fit_cell(content, col_width, table.alignment(col)))
        return line

    def _admonition(self, block: Admonition, width: int) -> List[Text]:
        icon, role = ADMONITION_STYLES[block.admonition_type]
        border = self.theme.style(role)
        title_style = self.theme.style(role, bold=True)
        inner_width = max(width - 4, 1)
        rule = "─" * max(width - 2, 0)

        title = block.title or block.admonition_type.default_title
        icon_width = cell_len(icon)
        room = inner_width - icon_width - 1
        if len(title) > room:
            title = title[:max(room - 1, 0)] + ELLIPSIS

        title_line = Text("│ ", style=border)
        title_line.append(f"{icon} ")
        title_line.append(title, style=title_style)
        title_line.append(" " * max(room - len(title), 0))
        title_line.append(" │", style=border)

        lines = [Text(f"╭{rule}╮", style=border), title_line]

        body = _trim_trailing_blank(self.layout_blocks(block.blocks, inner_width))
        if body:
            lines.append(Text(f"├{rule}┤", style=border))
            for content in body:
                line = Text("│ ", style=border)
                line.append(content)
                line.append(" " * max(inner_width - len(content.plain), 0))
                line.append(" │", style=border)
                lines.append(line)

        lines.append(Text(f"╰{rule}╯", style=border))
        return lines

"""
Markdown parser that turns a slide deck into typed blocks.

The pipeline is: frontmatter extraction, splitting on ``---`` separator
lines, admonition preprocessing, then a single pass over the markdown-it-py
token stream that feeds a :class:`~slide_deck.block.BlockBuilder`.
"""
import html
import logging
import re
from typing import List, Optional, Sequence, Tuple

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .block import (
    AdmonitionFrame,
    BlockBuilder,
    BlockQuoteFrame,
    CodeFrame,
    HeadingFrame,
    ListFrame,
    ParagraphFrame,
    TableFrame,
)
from .errors import AdmonitionTypeError
from .frontmatter import extract_frontmatter
from .markdown_plugins.speaker_notes import NOTES_TOKEN, speaker_notes_plugin
from .models import Alignment, AdmonitionType, Document, Slide

logger = logging.getLogger(__name__)

SLIDE_SEPARATOR = "---"
FENCE_MARKERS = ("```", "~~~")
ADMONITION_FENCE = ":::"

_QUOTED_ADMONITION = re.compile(r'^>\s*\[!([^\]]+)\]\s*(.*)$')
_ADMONITION_OPEN = re.compile(r'^<admonition\s+type="([^"]*)"(?:\s+title="([^"]*)")?\s*>$')
_ADMONITION_CLOSE = "</admonition>"

_ALIGNMENTS = {
    "text-align:left": Alignment.LEFT,
    "text-align:center": Alignment.CENTER,
    "text-align:right": Alignment.RIGHT,
}


def _is_fence(stripped_line: str) -> bool:
    return stripped_line.startswith(FENCE_MARKERS)


# ----------------------------------------------------------------------
# Slide splitting
# ----------------------------------------------------------------------
def split_slides(markdown_text: str) -> List[str]:
    """
    Split a document body into slide sections.

    A line that is exactly ``---`` ends the current section unless it sits
    inside a fenced code block.  Whitespace-only sections are dropped.
    """
    sections: List[str] = []
    current: List[str] = []
    in_fence = False

    for line in markdown_text.splitlines():
        stripped = line.strip()
        if _is_fence(stripped):
            in_fence = not in_fence

        if stripped == SLIDE_SEPARATOR and not in_fence:
            if "".join(current).strip():
                sections.append("\n".join(current) + "\n")
            current = []
        else:
            current.append(line)

    if "".join(current).strip():
        sections.append("\n".join(current) + "\n")

    return sections


# ----------------------------------------------------------------------
# Admonition preprocessing
# ----------------------------------------------------------------------
def _resolve_type(name: str) -> Optional[AdmonitionType]:
    try:
        return AdmonitionType.parse(name)
    except AdmonitionTypeError:
        return None


def _parse_fence_opener(stripped_line: str) -> Optional[Tuple[str, Optional[str]]]:
    """Return (type name, title) for ``:::type Title`` lines."""
    if not stripped_line.startswith(ADMONITION_FENCE):
        return None
    content = stripped_line[len(ADMONITION_FENCE):].strip()
    if not content:
        return None
    parts = content.split(None, 1)
    title = parts[1].strip() if len(parts) > 1 else None
    return parts[0], title or None


def _strip_quote(line: str) -> str:
    body = line.lstrip()[1:]
    return body[1:] if body.startswith(" ") else body


def _admonition_markup(indent: str, admonition_type: AdmonitionType, title: Optional[str], body: List[str]) -> List[str]:
    attrs = f'type="{admonition_type.value}"'
    if title:
        attrs += f' title="{html.escape(title, quote=True)}"'
    return ["", f"{indent}<admonition {attrs}>", "", *body, "", f"{indent}{_ADMONITION_CLOSE}", ""]


def preprocess_admonitions(markdown_text: str) -> str:
    """
    Rewrite callout notations into ``<admonition>`` markers.

    Handles the quoted form (``> [!TIP] Title`` plus ``>`` continuation
    lines) and the fenced form (``:::tip Title`` ... ``:::``).  Notations
    with an unknown type, and anything inside fenced code, pass through.
    """
    lines = markdown_text.split("\n")
    out: List[str] = []
    in_fence = False
    i = 0

    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        indent = line[:len(line) - len(line.lstrip())]

        if _is_fence(stripped):
            in_fence = not in_fence
        if in_fence or _is_fence(stripped):
            out.append(line)
            i += 1
            continue

        opener = _parse_fence_opener(stripped)
        admonition_type = _resolve_type(opener[0]) if opener else None
        if opener and admonition_type is not None:
            body, i = _collect_fenced_body(lines, i + 1)
            body = preprocess_admonitions("\n".join(body)).split("\n")
            out.extend(_admonition_markup(indent, admonition_type, opener[1], body))
            continue

        match = _QUOTED_ADMONITION.match(stripped)
        admonition_type = _resolve_type(match.group(1)) if match else None
        if match and admonition_type is not None:
            i += 1
            body = []
            while i < len(lines) and lines[i].lstrip().startswith(">"):
                body.append(_strip_quote(lines[i]))
                i += 1
            body = preprocess_admonitions("\n".join(body)).split("\n")
            out.extend(_admonition_markup(indent, admonition_type, match.group(2).strip() or None, body))
            continue

        out.append(line)
        i += 1

    return "\n".join(out)


def _collect_fenced_body(lines: Sequence[str], start: int) -> Tuple[List[str], int]:
    """Collect lines up to the matching ``:::``; returns (body, next index)."""
    body: List[str] = []
    depth = 0
    in_fence = False
    i = start
    while i < len(lines):
        stripped = lines[i].strip()
        if _is_fence(stripped):
            in_fence = not in_fence
        elif not in_fence:
            if stripped == ADMONITION_FENCE:
                if depth == 0:
                    return body, i + 1
                depth -= 1
            elif _parse_fence_opener(stripped):
                depth += 1
        body.append(lines[i])
        i += 1
    # Unclosed fence runs to the end of the slide
    return body, i


# ----------------------------------------------------------------------
# Block parsing
# ----------------------------------------------------------------------
class MarkdownParser:
    """
    Slide deck parser using markdown-it-py.
    """

    def __init__(self):
        self.markdown_processor = MarkdownIt('commonmark', {'html': True})
        self.markdown_processor.enable(['table', 'strikethrough'])
        self.markdown_processor.use(speaker_notes_plugin)

    def parse(self, markdown_text: str) -> Document:
        """
        Parse a full document into metadata and slides.

        Raises:
            FrontmatterError: If the frontmatter block is unclosed or malformed
        """
        meta, body = extract_frontmatter(markdown_text)
        slides = self.parse_slides(body)
        logger.debug("Parsed %d slides (theme=%s)", len(slides), meta.theme)
        return Document(meta, tuple(slides))

    def parse_slides(self, body: str) -> List[Slide]:
        """Parse a frontmatter-free body into slides."""
        return [self.parse_slide(section) for section in split_slides(body)]

    def parse_slide(self, section: str) -> Slide:
        """Parse one slide section into blocks.  Never raises."""
        tokens = self.markdown_processor.parse(preprocess_admonitions(section))
        builder = BlockBuilder()
        self._walk(tokens, builder)
        slide = builder.build()
        if slide.is_empty():
            logger.debug("Slide section produced no blocks")
        return slide

    def _walk(self, tokens: List[Token], builder: BlockBuilder) -> None:
        for idx, token in enumerate(tokens):
            ttype = token.type

            if ttype == "inline":
                self._walk_inline(token.children or [], builder)
            elif ttype == "heading_open":
                builder.push(HeadingFrame(int(token.tag[1:])))
            elif ttype == "heading_close":
                builder.close("heading")
            elif ttype == "paragraph_open":
                # Tight list items wrap their text in hidden paragraphs
                if not token.hidden:
                    builder.push(ParagraphFrame())
            elif ttype == "paragraph_close":
                if not token.hidden:
                    builder.close("paragraph")
            elif ttype in ("fence", "code_block"):
                builder.push(CodeFrame(_code_language(token)))
                builder.text(token.content)
                builder.close("code")
            elif ttype in ("bullet_list_open", "ordered_list_open"):
                builder.push(ListFrame(ordered=ttype == "ordered_list_open"))
            elif ttype in ("bullet_list_close", "ordered_list_close"):
                builder.close("list")
            elif ttype == "list_item_open":
                frame = builder.innermost(ListFrame)
                if frame is not None:
                    frame.open_item()
            elif ttype == "list_item_close":
                frame = builder.innermost(ListFrame)
                if frame is not None:
                    frame.close_item()
            elif ttype == "blockquote_open":
                builder.push(BlockQuoteFrame())
            elif ttype == "blockquote_close":
                builder.close("blockquote")
            elif ttype == "table_open":
                builder.push(TableFrame(_table_alignments(tokens, idx)))
            elif ttype == "table_close":
                builder.close("table")
            elif ttype in _TABLE_EVENTS:
                frame = builder.innermost(TableFrame)
                if frame is not None:
                    getattr(frame, _TABLE_EVENTS[ttype])()
            elif ttype == "hr":
                builder.rule()
            elif ttype == "html_block":
                self._handle_html(token.content, builder)
            elif ttype == NOTES_TOKEN:
                builder.add_notes(token.content)

    def _walk_inline(self, children: List[Token], builder: BlockBuilder) -> None:
        builder.set_style(bold=False, italic=False, strikethrough=False, link=False)
        for child in children:
            ctype = child.type
            if ctype == "text":
                builder.text(child.content)
            elif ctype == "code_inline":
                builder.code_span(child.content)
            elif ctype in ("softbreak", "hardbreak"):
                builder.line_break()
            elif ctype in _STYLE_TOGGLES:
                flag, value = _STYLE_TOGGLES[ctype]
                builder.set_style(**{flag: value})
            elif ctype == "image":
                builder.image(str(child.attrGet("src") or ""), child.content)

    def _handle_html(self, content: str, builder: BlockBuilder) -> None:
        raw = content.strip()
        if raw == _ADMONITION_CLOSE:
            builder.close("admonition")
            return

        match = _ADMONITION_OPEN.match(raw)
        if not match:
            return
        admonition_type = _resolve_type(match.group(1))
        if admonition_type is None:
            logger.debug("Ignoring admonition marker with unknown type %r", match.group(1))
            return
        title = html.unescape(match.group(2)) if match.group(2) else None
        builder.push(AdmonitionFrame(admonition_type, title))


_TABLE_EVENTS = {
    "thead_open": "start_head",
    "thead_close": "end_head",
    "tr_open": "start_row",
    "tr_close": "end_row",
    "th_open": "start_cell",
    "th_close": "end_cell",
    "td_open": "start_cell",
    "td_close": "end_cell",
}

_STYLE_TOGGLES = {
    "em_open": ("italic", True),
    "em_close": ("italic", False),
    "strong_open": ("bold", True),
    "strong_close": ("bold", False),
    "s_open": ("strikethrough", True),
    "s_close": ("strikethrough", False),
    "link_open": ("link", True),
    "link_close": ("link", False),
}


def _code_language(token: Token) -> Optional[str]:
    info = (token.info or "").strip()
    if not info:
        return None
    return info.split()[0]


def _table_alignments(tokens: List[Token], start: int) -> List[Alignment]:
    """Read column alignments from the header cells that follow ``table_open``."""
    alignments: List[Alignment] = []
    for token in tokens[start + 1:]:
        if token.type == "tr_close":
            break
        if token.type == "th_open":
            style = str(token.attrGet("style") or "").replace(" ", "")
            alignments.append(_ALIGNMENTS.get(style, Alignment.LEFT))
    return alignments


def parse(markdown_text: str) -> Document:
    """Parse a document with a fresh :class:`MarkdownParser`."""
    return MarkdownParser().parse(markdown_text)

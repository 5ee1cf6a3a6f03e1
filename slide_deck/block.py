#!/usr/bin/env python3
"""
Builder frames for turning a flat markdown event stream into blocks.

Each open block scope (heading, paragraph, code, list, blockquote, table,
admonition) is one frame on an explicit stack.  A frame only holds the state
its own block needs, and ``finalize()`` converts it into immutable model
values.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from .models import (
    CODE,
    PLAIN,
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
    ListItem,
    Paragraph,
    Rule,
    Slide,
    Table,
    TextSpan,
    TextStyle,
)

logger = logging.getLogger(__name__)


class Frame:
    """Base class for an open block scope."""

    kind = ""

    def add_text(self, text: str, style: TextStyle) -> None:
        pass

    def add_image(self, image: Image) -> None:
        pass

    def finalize(self) -> List[Block]:
        raise NotImplementedError


class SpanFrame(Frame):
    """Scope that accumulates inline spans (headings and paragraphs)."""

    def __init__(self):
        self.spans: List[TextSpan] = []
        self.images: List[Image] = []

    def add_text(self, text, style):
        if text:
            self.spans.append(TextSpan(text, style))

    def add_image(self, image):
        self.images.append(image)

    def has_text(self) -> bool:
        return any(span.text.strip() for span in self.spans)

    def trimmed_spans(self):
        """Spans with trailing whitespace removed from the last one."""
        spans = list(self.spans)
        while spans:
            text = spans[-1].text.rstrip()
            if text:
                spans[-1] = replace(spans[-1], text=text)
                break
            spans.pop()
        return tuple(spans)


class HeadingFrame(SpanFrame):
    kind = "heading"

    def __init__(self, level: int):
        super().__init__()
        self.level = min(max(level, 1), 6)

    def finalize(self):
        blocks: List[Block] = []
        if self.has_text():
            blocks.append(Heading(self.level, self.trimmed_spans()))
        return blocks + self.images


class ParagraphFrame(SpanFrame):
    kind = "paragraph"

    def finalize(self):
        # A paragraph holding nothing but an image becomes just the image
        blocks: List[Block] = []
        if self.has_text():
            blocks.append(Paragraph(self.trimmed_spans()))
        return blocks + self.images


class CodeFrame(Frame):
    kind = "code"

    def __init__(self, language: Optional[str]):
        self.language = language
        self.parts: List[str] = []

    def add_text(self, text, style):
        self.parts.append(text)

    def finalize(self):
        return [Code("".join(self.parts), self.language)]


class ListFrame(Frame):
    """
    Scope for an ordered or bullet list.

    Item text accumulates in ``current_spans`` and is flushed into ``items``
    when the item closes.  Blocks finished inside an item that a list item
    cannot hold (code, tables, quotes, ...) are deferred and emitted right
    after the list.
    """

    kind = "list"

    def __init__(self, ordered: bool):
        self.ordered = ordered
        self.items: List[ListItem] = []
        self.current_spans: List[TextSpan] = []
        self.current_nested: Optional[ListBlock] = None
        self.in_item = False
        self.deferred: List[Block] = []

    def open_item(self) -> None:
        if self.in_item:
            self.close_item()
        self.in_item = True

    def close_item(self) -> None:
        if self.current_spans or self.current_nested is not None:
            self.items.append(ListItem(tuple(self.current_spans), self.current_nested))
        self.current_spans = []
        self.current_nested = None
        self.in_item = False

    def add_text(self, text, style):
        if text:
            self.current_spans.append(TextSpan(text, style))

    def add_image(self, image):
        self.deferred.append(image)

    def adopt(self, block: Block) -> None:
        """Attach a block finished while this list was the innermost scope."""
        if isinstance(block, (Paragraph, Heading)):
            if self.current_spans:
                self.current_spans.append(TextSpan(" "))
            self.current_spans.extend(block.spans)
        elif isinstance(block, ListBlock):
            self._nest(block)
        else:
            self.deferred.append(block)

    def _nest(self, nested: ListBlock) -> None:
        if self.in_item or not self.items:
            self.current_nested = _merge_lists(self.current_nested, nested)
            self.in_item = True
            return
        # Sub-list arriving after its item was flushed
        last = self.items[-1]
        self.items[-1] = replace(last, nested=_merge_lists(last.nested, nested))

    def finalize(self):
        if self.in_item:
            self.close_item()
        blocks: List[Block] = []
        if self.items:
            blocks.append(ListBlock(self.ordered, tuple(self.items)))
        return blocks + self.deferred


def _merge_lists(existing: Optional[ListBlock], nested: ListBlock) -> ListBlock:
    if existing is None:
        return nested
    return ListBlock(existing.ordered, existing.items + nested.items)


class ContainerFrame(Frame):
    """Scope whose children are whole blocks (blockquotes, admonitions)."""

    def __init__(self):
        self.blocks: List[Block] = []

    def add_image(self, image):
        self.blocks.append(image)


class BlockQuoteFrame(ContainerFrame):
    kind = "blockquote"

    def finalize(self):
        return [BlockQuote(tuple(self.blocks))]


class AdmonitionFrame(ContainerFrame):
    kind = "admonition"

    def __init__(self, admonition_type: AdmonitionType, title: Optional[str] = None):
        super().__init__()
        self.admonition_type = admonition_type
        self.title = title

    def finalize(self):
        return [Admonition(self.admonition_type, tuple(self.blocks), self.title)]


class TableFrame(Frame):
    kind = "table"

    def __init__(self, alignments: List[Alignment]):
        self.alignments = list(alignments)
        self.headers: List[Cell] = []
        self.rows: List[tuple] = []
        self.current_row: List[Cell] = []
        self.current_cell: List[TextSpan] = []
        self.in_header = False

    def add_text(self, text, style):
        if text:
            self.current_cell.append(TextSpan(text, style))

    def add_image(self, image):
        if image.alt:
            self.current_cell.append(TextSpan(image.alt))

    def start_head(self) -> None:
        self.in_header = True

    def end_head(self) -> None:
        if self.current_row:
            self.headers = self.current_row
        self.current_row = []
        self.in_header = False

    def start_row(self) -> None:
        self.current_row = []

    def end_row(self) -> None:
        if not self.in_header and self.current_row:
            self.rows.append(tuple(self.current_row))
            self.current_row = []

    def start_cell(self) -> None:
        self.current_cell = []

    def end_cell(self) -> None:
        self.current_row.append(tuple(self.current_cell))
        self.current_cell = []

    def finalize(self):
        return [Table(tuple(self.headers), tuple(self.rows), tuple(self.alignments))]


class BlockBuilder:
    """
    Stack-based builder for one slide.

    The parser feeds it block open/close calls and inline content in stream
    order; malformed input degrades to a best-effort tree and never raises.
    """

    def __init__(self):
        self.stack: List[Frame] = []
        self.blocks: List[Block] = []
        self.notes: List[str] = []
        self.style = PLAIN

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------
    def push(self, frame: Frame) -> None:
        self.stack.append(frame)

    def close(self, kind: str) -> None:
        """Pop the innermost frame of *kind*, finalizing anything above it."""
        for depth in range(len(self.stack) - 1, -1, -1):
            if self.stack[depth].kind == kind:
                break
        else:
            logger.debug("Ignoring unmatched close of %s", kind)
            return

        while len(self.stack) > depth:
            frame = self.stack.pop()
            for block in frame.finalize():
                self.attach(block)

    def attach(self, block: Block) -> None:
        """Hand a finished block to the enclosing scope or the slide."""
        parent = self.stack[-1] if self.stack else None
        if parent is None:
            self.blocks.append(block)
        elif isinstance(parent, ContainerFrame):
            parent.blocks.append(block)
        elif isinstance(parent, ListFrame):
            parent.adopt(block)
        else:
            # Inline scopes cannot hold blocks; put it next to them
            self._attach_below(block)

    def _attach_below(self, block: Block) -> None:
        for frame in reversed(self.stack):
            if isinstance(frame, ContainerFrame):
                frame.blocks.append(block)
                return
            if isinstance(frame, ListFrame):
                frame.deferred.append(block)
                return
        self.blocks.append(block)

    def innermost(self, frame_type) -> Optional[Frame]:
        for frame in reversed(self.stack):
            if isinstance(frame, frame_type):
                return frame
        return None

    def current(self) -> Optional[Frame]:
        return self.stack[-1] if self.stack else None

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------
    def text(self, text: str) -> None:
        frame = self.current()
        if frame is not None:
            frame.add_text(text, self.style)

    def code_span(self, text: str) -> None:
        frame = self.current()
        if frame is not None:
            frame.add_text(text, CODE)

    def line_break(self) -> None:
        self.text(" ")

    def set_style(self, **flags) -> None:
        self.style = replace(self.style, **flags)

    def image(self, path: str, alt: str) -> None:
        image = Image(path, alt)
        frame = self.current()
        if frame is None:
            self.blocks.append(image)
        else:
            frame.add_image(image)

    def rule(self) -> None:
        self.attach(Rule())

    def add_notes(self, notes: str) -> None:
        if notes.strip():
            self.notes.append(notes.strip())

    # ------------------------------------------------------------------
    def build(self) -> Slide:
        """Close every open scope and return the finished slide."""
        while self.stack:
            self.close(self.stack[-1].kind)
        notes = "\n\n".join(self.notes) if self.notes else None
        return Slide(tuple(self.blocks), notes)

"""
Data models for parsed slide decks.

Every type here is an immutable value: the parser builds a ``Document`` once
and nothing downstream mutates it.
"""
import datetime
import enum
import os
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

from .errors import AdmonitionTypeError


def _default_theme() -> str:
    return os.environ.get("SLIDES_THEME") or "default"


def _default_author() -> str:
    return os.environ.get("USER") or os.environ.get("USERNAME") or "Unknown"


def _default_date() -> str:
    return datetime.date.today().isoformat()


DEFAULT_PAGING = "Slide %d / %d"


@dataclass(frozen=True)
class Meta:
    """
    Deck metadata taken from the frontmatter block.

    Missing fields fall back to environment-derived defaults at construction
    time.
    """
    theme: str = field(default_factory=_default_theme)
    author: str = field(default_factory=_default_author)
    date: str = field(default_factory=_default_date)
    paging: str = DEFAULT_PAGING

    def page_label(self, index: int, total: int) -> str:
        """
        Format the paging template for a 0-based slide *index*.

        The first two ``%d`` placeholders receive the 1-based slide number and
        the slide count; any further placeholders are left as they are.
        """
        label = self.paging
        for number in (index + 1, total):
            label = label.replace("%d", str(number), 1)
        return label


@dataclass(frozen=True)
class TextStyle:
    """Inline style flags for a span."""
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False
    link: bool = False


PLAIN = TextStyle()
CODE = TextStyle(code=True)


@dataclass(frozen=True)
class TextSpan:
    """A run of text sharing one inline style."""
    text: str
    style: TextStyle = PLAIN

    @classmethod
    def plain(cls, text: str) -> "TextSpan":
        return cls(text)

    @classmethod
    def bold(cls, text: str) -> "TextSpan":
        return cls(text, TextStyle(bold=True))

    @classmethod
    def italic(cls, text: str) -> "TextSpan":
        return cls(text, TextStyle(italic=True))

    @classmethod
    def code(cls, text: str) -> "TextSpan":
        return cls(text, CODE)


Spans = Tuple[TextSpan, ...]


def spans_text(spans: Spans) -> str:
    """Concatenate the text of *spans*."""
    return "".join(span.text for span in spans)


class Alignment(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class AdmonitionType(enum.Enum):
    """Closed set of callout categories."""
    NOTE = "note"
    TIP = "tip"
    IMPORTANT = "important"
    WARNING = "warning"
    CAUTION = "caution"
    DANGER = "danger"
    ERROR = "error"
    INFO = "info"
    SUCCESS = "success"
    QUESTION = "question"
    EXAMPLE = "example"
    QUOTE = "quote"
    ABSTRACT = "abstract"
    TODO = "todo"
    BUG = "bug"
    FAILURE = "failure"

    @classmethod
    def parse(cls, name: str) -> "AdmonitionType":
        """
        Resolve *name* (case-insensitive, aliases allowed) to a type.

        Raises:
            AdmonitionTypeError: If the name is not a known type or alias
        """
        key = (name or "").strip().lower()
        resolved = _ADMONITION_ALIASES.get(key)
        if resolved is None:
            raise AdmonitionTypeError(name)
        return resolved

    @property
    def default_title(self) -> str:
        return self.value.capitalize()


_ADMONITION_ALIASES = {member.value: member for member in AdmonitionType}
_ADMONITION_ALIASES.update({
    "hint": AdmonitionType.TIP,
    # GitHub's CAUTION renders like a warning
    "caution": AdmonitionType.WARNING,
    "attention": AdmonitionType.WARNING,
    "summary": AdmonitionType.ABSTRACT,
    "tldr": AdmonitionType.ABSTRACT,
    "check": AdmonitionType.SUCCESS,
    "done": AdmonitionType.SUCCESS,
    "help": AdmonitionType.QUESTION,
    "faq": AdmonitionType.QUESTION,
    "fail": AdmonitionType.FAILURE,
    "missing": AdmonitionType.FAILURE,
    "cite": AdmonitionType.QUOTE,
})


@dataclass(frozen=True)
class Heading:
    level: int
    spans: Spans


@dataclass(frozen=True)
class Paragraph:
    spans: Spans


@dataclass(frozen=True)
class Code:
    code: str
    language: Optional[str] = None


@dataclass(frozen=True)
class ListItem:
    spans: Spans
    nested: Optional["ListBlock"] = None


@dataclass(frozen=True)
class ListBlock:
    ordered: bool
    items: Tuple[ListItem, ...]


@dataclass(frozen=True)
class BlockQuote:
    blocks: Tuple["Block", ...]


Cell = Tuple[TextSpan, ...]
Row = Tuple[Cell, ...]


@dataclass(frozen=True)
class Table:
    headers: Row
    rows: Tuple[Row, ...]
    alignments: Tuple[Alignment, ...]

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def cell(self, row: int, col: int) -> Cell:
        """Return the spans of a body cell, or ``()`` when out of range."""
        if not 0 <= row < len(self.rows):
            return ()
        cells = self.rows[row]
        if not 0 <= col < len(cells):
            return ()
        return cells[col]

    def header(self, col: int) -> Cell:
        if not 0 <= col < len(self.headers):
            return ()
        return self.headers[col]

    def alignment(self, col: int) -> Alignment:
        if not 0 <= col < len(self.alignments):
            return Alignment.LEFT
        return self.alignments[col]


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class Admonition:
    admonition_type: AdmonitionType
    blocks: Tuple["Block", ...]
    title: Optional[str] = None


@dataclass(frozen=True)
class Image:
    path: str
    alt: str = ""


Block = Union[Heading, Paragraph, Code, ListBlock, BlockQuote, Table, Rule, Admonition, Image]


@dataclass(frozen=True)
class Slide:
    """An ordered sequence of blocks plus optional speaker notes."""
    blocks: Tuple[Block, ...] = ()
    notes: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.blocks


@dataclass(frozen=True)
class Document:
    """Parsed deck: metadata plus slides."""
    meta: Meta
    slides: Tuple[Slide, ...]

    def __len__(self) -> int:
        return len(self.slides)

    def __iter__(self) -> Iterator[Slide]:
        return iter(self.slides)

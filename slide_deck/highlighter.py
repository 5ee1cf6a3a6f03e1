"""Syntax highlighting for code blocks, backed by Pygments."""
import logging
from typing import Dict, List, NamedTuple, Optional

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound
from rich.style import Style

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"
TAB_SIZE = 4


class HighlightedToken(NamedTuple):
    text: str
    style: Style


HighlightedLine = List[HighlightedToken]


class SyntaxHighlighter:
    """
    Turns code text plus a language hint into per-line styled tokens.

    Construct one and pass it to the layout engine; lexers and token styles
    are cached on the instance.
    """

    def __init__(self, style_name: str = DEFAULT_STYLE):
        try:
            self.style_class = get_style_by_name(style_name)
            self.style_name = style_name
        except ClassNotFound:
            logger.warning(f"Unknown code style '{style_name}', using '{DEFAULT_STYLE}'")
            self.style_class = get_style_by_name(DEFAULT_STYLE)
            self.style_name = DEFAULT_STYLE
        self._lexers: Dict[str, Lexer] = {}
        self._styles: Dict[tuple, Style] = {}

    def lexer_for(self, language: Optional[str]) -> Lexer:
        """Return a lexer for *language*, falling back to plain text."""
        key = (language or "").strip().lower()
        if key not in self._lexers:
            try:
                lexer = get_lexer_by_name(key, stripnl=False, ensurenl=False) if key else None
            except ClassNotFound:
                logger.debug("No lexer for language %r, using plain text", key)
                lexer = None
            self._lexers[key] = lexer or TextLexer(stripnl=False, ensurenl=False)
        return self._lexers[key]

    def style_for(self, token_type: tuple) -> Style:
        if token_type not in self._styles:
            token_style = self.style_class.style_for_token(token_type)
            self._styles[token_type] = Style(
                color=f"#{token_style['color']}" if token_style.get("color") else None,
                bold=token_style.get("bold") or None,
                italic=token_style.get("italic") or None,
                underline=token_style.get("underline") or None,
            )
        return self._styles[token_type]

    def highlight(self, code: str, language: Optional[str] = None) -> List[HighlightedLine]:
        """
        Highlight *code* into lines of styled tokens.

        Tabs are expanded and trailing newlines dropped; empty code yields no
        lines.
        """
        code = code.expandtabs(TAB_SIZE).rstrip("\n")
        if not code:
            return []

        lines: List[HighlightedLine] = [[]]
        for token_type, value in self.lexer_for(language).get_tokens(code):
            style = self.style_for(token_type)
            for idx, part in enumerate(value.split("\n")):
                if idx:
                    lines.append([])
                if part:
                    lines[-1].append(HighlightedToken(part, style))
        return lines

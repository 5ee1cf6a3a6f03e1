"""
Exceptions raised by the slide parser.

Only frontmatter handling fails hard; everything downstream of it degrades
to a best-effort block tree instead of raising.
"""


class SlideError(Exception):
    """Base class for all slide_deck errors."""


class FrontmatterError(SlideError, ValueError):
    """Frontmatter block is unclosed or cannot be deserialized."""


class AdmonitionTypeError(SlideError, ValueError):
    """Admonition type name does not resolve to a known type."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown admonition type: {name!r}")

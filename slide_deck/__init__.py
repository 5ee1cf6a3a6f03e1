"""
Slide Deck Package

A package for turning Markdown slide decks into styled terminal output.
"""

from .generator import SlideGenerator
from .layout_engine import LayoutEngine
from .markdown_parser import MarkdownParser, parse
from .models import Block, Document, Meta, Slide
from .text_renderer import TextRenderer

__all__ = ['SlideGenerator', 'LayoutEngine', 'MarkdownParser', 'TextRenderer', 'Block', 'Document', 'Meta', 'Slide', 'parse']

"""
Slide Deck Package

A package for converting slide markdown into a slide-deck model and
rendering it as a LaTeX beamer document or a PowerPoint presentation.
"""

from .errors import (
    EmptySpanError,
    EncodingError,
    RenderError,
    SlideDeckError,
    StructuralParseError,
)
from .generator import SlideGenerator
from .latex_renderer import LatexRenderer
from .markdown_parser import MarkdownParser, parse_markdown
from .models import Document, SlideDeck
from .postprocess import postprocess
from .pptx_renderer import PPTXRenderer

__all__ = [
    'SlideGenerator', 'MarkdownParser', 'parse_markdown', 'postprocess',
    'LatexRenderer', 'PPTXRenderer', 'Document', 'SlideDeck',
    'SlideDeckError', 'StructuralParseError', 'EncodingError', 'EmptySpanError', 'RenderError',
]

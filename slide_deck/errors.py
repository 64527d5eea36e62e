"""
Errors raised by the slide deck pipeline.

Every error is a :class:`ValueError` so callers that only care about "bad
input" can catch that, while the CLI can tell parse problems from I/O ones.
"""
from typing import Optional


class SlideDeckError(ValueError):
    """Base class for all pipeline errors."""


class StructuralParseError(SlideDeckError):
    """The header, a slide header or a block matched no alternative."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class EncodingError(SlideDeckError):
    """Input bytes are not valid UTF-8."""


class EmptySpanError(SlideDeckError):
    """The span lexer was asked to lex an empty string."""


class RenderError(SlideDeckError):
    """A renderer cannot express part of the slide deck."""

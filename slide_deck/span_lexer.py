"""
Inline span lexer.

Turns one line of text into an ordered list of spans.  Delimited forms are
tried in a fixed priority order at every position; anything else is plain
text, grown lazily until one of the delimited forms would match.

Each parser takes ``(text, pos)`` and returns ``(span, end)`` where *end* is
the offset just past the match, or ``None`` when it does not match at *pos*.
"""
from typing import List, Optional, Tuple

from .errors import EmptySpanError
from .models import Bold, Equation, Italics, Span, Strikethrough, Text

SpanMatch = Optional[Tuple[Span, int]]


def _parse_delimited(text: str, pos: int, delimiter: str, span_type) -> SpanMatch:
    if not text.startswith(delimiter, pos):
        return None
    start = pos + len(delimiter)
    end = text.find(delimiter, start)
    if end == -1:
        return None
    return span_type(text[start:end]), end + len(delimiter)


# TODO: escaped delimiters (``\*``) are taken literally as markup.
def parse_strikethrough(text: str, pos: int = 0) -> SpanMatch:
    return _parse_delimited(text, pos, "~~", Strikethrough)


def parse_bold(text: str, pos: int = 0) -> SpanMatch:
    return _parse_delimited(text, pos, "**", Bold)


def parse_italics(text: str, pos: int = 0) -> SpanMatch:
    return _parse_delimited(text, pos, "*", Italics)


def parse_equation(text: str, pos: int = 0) -> SpanMatch:
    return _parse_delimited(text, pos, "$$", Equation)


# Priority order when several forms could start at the same position.
DELIMITED_PARSERS = (
    parse_strikethrough,
    parse_bold,
    parse_italics,
    parse_equation,
)


def parse_delimited(text: str, pos: int = 0) -> SpanMatch:
    """Return the first delimited form matching at *pos*, if any."""
    for parser in DELIMITED_PARSERS:
        matched = parser(text, pos)
        if matched is not None:
            return matched
    return None


def parse_text(text: str, pos: int = 0) -> SpanMatch:
    """
    Match plain text starting at *pos*.

    The candidate grows one character at a time and stops as soon as a
    delimited form would match at the scan position, so the result is the
    shortest run of text up to the next marker.
    """
    end = pos
    while end < len(text) and parse_delimited(text, end) is None:
        end += 1
    if end == pos:
        return None
    return Text(text[pos:end]), end


def lex_spans(text: str) -> List[Span]:
    """
    Lex *text* into spans.

    Raises:
        EmptySpanError: if *text* is empty.
    """
    if not text:
        raise EmptySpanError("cannot lex spans from empty text")

    spans: List[Span] = []
    pos = 0
    while pos < len(text):
        matched = parse_delimited(text, pos) or parse_text(text, pos)
        span, pos = matched
        spans.append(span)
    return spans

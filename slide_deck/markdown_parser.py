"""
Document parser for the slide markdown dialect.

A document is a ``# title`` line, an ``AUTHOR=name`` line, then any number
of ``## slide title`` sections whose bodies are handed to the block parser.
"""
import logging
import re
from typing import List, Optional, Tuple

from .block_parser import (
    DiagnosticSink,
    is_slide_header,
    line_at,
    line_number,
    next_line,
    parse_blocks,
    skip_blank_lines,
)
from .errors import EncodingError, StructuralParseError
from .models import Document, ParsedSlide, ParseWarning, Title
from .span_lexer import lex_spans

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"[ \t]*# (.*)")
AUTHOR_RE = re.compile(r"[ \t]*AUTHOR=(.*)")
SLIDE_TITLE_RE = re.compile(r"[ \t]*## (.*)")


class MarkdownParser:
    """
    Recursive-descent parser producing a :class:`Document`.
    """

    def __init__(self, collect_warnings: bool = True):
        """
        Initialize the parser.

        Args:
            collect_warnings: Whether to record unsupported markdown constructs
                in :attr:`warnings` while parsing
        """
        self.collect_warnings = collect_warnings
        # Diagnostics from the most recent parse
        self.warnings: List[ParseWarning] = []

    def parse(self, markdown_text: str) -> Document:
        """
        Parse markdown text into a document.

        Args:
            markdown_text: Raw markdown content

        Returns:
            The parsed :class:`Document`

        Raises:
            StructuralParseError: if the header or a slide header is malformed
            EmptySpanError: if a title or bullet has no text
        """
        self.warnings = []
        text = markdown_text.lstrip("\ufeff").replace("\r\n", "\n")
        sink = self._record_warning if self.collect_warnings else None

        title, author, pos = self._parse_header(text)

        slides: List[ParsedSlide] = []
        while True:
            pos = skip_blank_lines(text, pos)
            if pos >= len(text):
                break
            slide, pos = self._parse_slide(text, pos, sink)
            slides.append(slide)

        logger.debug("Parsed %d slide section(s), %d warning(s)", len(slides), len(self.warnings))
        return Document(title=title, author=author, slides=slides)

    def parse_bytes(self, data: bytes) -> Document:
        """Decode UTF-8 *data* and parse it."""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Markdown input is not valid UTF-8: {exc}") from exc
        return self.parse(text)

    def _record_warning(self, line: int, message: str) -> None:
        self.warnings.append(ParseWarning(line=line, message=message))

    def _parse_header(self, text: str) -> Tuple[Title, str, int]:
        pos = skip_blank_lines(text, 0)
        title_match = TITLE_RE.fullmatch(line_at(text, pos))
        if title_match is None:
            raise StructuralParseError(
                "expected a '# <presentation title>' line", line_number(text, pos)
            )

        pos = next_line(text, pos)
        author_match = AUTHOR_RE.fullmatch(line_at(text, pos))
        if author_match is None:
            raise StructuralParseError(
                "expected an 'AUTHOR=<name>' line right after the title", line_number(text, pos)
            )

        title = lex_spans(title_match.group(1).strip())
        return title, author_match.group(1).strip(), next_line(text, pos)

    def _parse_slide(
        self, text: str, pos: int, sink: Optional[DiagnosticSink]
    ) -> Tuple[ParsedSlide, int]:
        line = line_at(text, pos)
        if not is_slide_header(line):
            raise StructuralParseError(
                "expected a '## <slide title>' line", line_number(text, pos)
            )

        title = lex_spans(SLIDE_TITLE_RE.fullmatch(line).group(1).strip())
        blocks, pos = parse_blocks(text, next_line(text, pos), sink=sink)
        return ParsedSlide(title=title, blocks=blocks), pos


def parse_markdown(markdown_text: str) -> Document:
    """Parse *markdown_text* with a fresh :class:`MarkdownParser`."""
    return MarkdownParser().parse(markdown_text)

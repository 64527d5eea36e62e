"""
Block parser for the body of a slide.

The body is scanned line by line from an offset into the full document
text.  Every block attempt tries the alternatives in a fixed order
(directive, picture, bulleted list, fenced code) and falls back to a
paragraph; the first alternative that matches wins.  Parsers never mutate
shared state: each one receives ``(text, pos)`` and returns
``(block, new_pos)`` or ``None``, so a failed attempt needs no rollback.

Offsets handed between parsers always sit at the start of a line.
"""
import re
from typing import Callable, List, Optional, Tuple

from .errors import StructuralParseError
from .models import (
    Block,
    BulletedList,
    BulletItem,
    Code,
    Directive,
    DirectiveKind,
    Height,
    Nested,
    Paragraph,
    ParsePicture,
    Picture,
    PictureDirective,
    Single,
    Vertical,
    Width,
)
from .span_lexer import lex_spans

DiagnosticSink = Callable[[int, str], None]
BlockMatch = Optional[Tuple[Block, int]]

SLIDE_HEADER_RE = re.compile(r"[ \t]*## ")
PICTURE_RE = re.compile(r"[ \t]*!\[([^\]\n]*)\]\(([^)\n]*)\)\s*")
BULLET_RE = re.compile(r"([ \t]*)\* (.*)")
CODE_FENCE = "```"
INDENT_WIDTH = 4

# Markdown the dialect does not support; such lines end up as paragraph text.
UNSUPPORTED_CONSTRUCTS = [
    (re.compile(r"\s*#{3,} "), "headings below '##' are not supported, kept as paragraph text"),
    (re.compile(r"\s*# "), "a '#' title is only allowed at the top of the document"),
    (re.compile(r"\s*[-+] "), "only '* ' bullets are supported, kept as paragraph text"),
    (re.compile(r"\s*\d+[.)] "), "numbered lists are not supported, kept as paragraph text"),
    (re.compile(r"\s*>"), "block quotes are not supported, kept as paragraph text"),
    (re.compile(r"\s*\|"), "tables are not supported, kept as paragraph text"),
    (re.compile(r"\s*%[A-Z]+"), "unknown or misplaced directive, kept as paragraph text"),
]

# Blocks that only start after a blank line; inside a paragraph they are text.
CONTINUATION_CONSTRUCTS = [
    (re.compile(r"\s*\* "), "a list needs a blank line before it, kept as paragraph text"),
    (re.compile(r"\s*```"), "a code fence needs a blank line before it, kept as paragraph text"),
    (re.compile(r"\s*!\["), "a picture needs a blank line before it, kept as paragraph text"),
]


# ----------------------------------------------------------------------
# Line helpers
# ----------------------------------------------------------------------

def line_end(text: str, pos: int) -> int:
    end = text.find("\n", pos)
    return len(text) if end == -1 else end


def next_line(text: str, pos: int) -> int:
    """Offset of the line after the one containing *pos*."""
    return min(line_end(text, pos) + 1, len(text))


def line_at(text: str, pos: int) -> str:
    return text[pos:line_end(text, pos)]


def line_number(text: str, pos: int) -> int:
    return text.count("\n", 0, pos) + 1


def skip_blank_lines(text: str, pos: int) -> int:
    while pos < len(text) and not line_at(text, pos).strip():
        pos = next_line(text, pos)
    return pos


def is_slide_header(line: str) -> bool:
    return SLIDE_HEADER_RE.match(line) is not None


def indentation_level(whitespace: str) -> int:
    """Indentation in list levels: four columns per level, a tab counts four."""
    columns = whitespace.count(" ") + INDENT_WIDTH * whitespace.count("\t")
    return columns // INDENT_WIDTH


# ----------------------------------------------------------------------
# Block alternatives
# ----------------------------------------------------------------------

def parse_directive(text: str, pos: int) -> BlockMatch:
    if line_at(text, pos).strip() != "%NEWSLIDE":
        return None
    return Directive(DirectiveKind.NEW_SLIDE), next_line(text, pos)


def parse_picture_directive(text: str, pos: int) -> Optional[Tuple[PictureDirective, int]]:
    """Match one ``%VERTICAL`` / ``%WIDTH=`` / ``%HEIGHT=`` line, blank lines allowed before it."""
    pos = skip_blank_lines(text, pos)
    if pos >= len(text):
        return None

    line = line_at(text, pos).strip()
    if line == "%VERTICAL":
        directive = Vertical()
    elif line.startswith("%WIDTH="):
        directive = Width(line[len("%WIDTH="):].strip())
    elif line.startswith("%HEIGHT="):
        directive = Height(line[len("%HEIGHT="):].strip())
    else:
        return None
    return directive, next_line(text, pos)


def parse_picture(text: str, pos: int) -> BlockMatch:
    match = PICTURE_RE.fullmatch(line_at(text, pos))
    if match is None:
        return None

    caption = match.group(1).strip() or None
    path = match.group(2).strip()
    pos = next_line(text, pos)

    directives: List[PictureDirective] = []
    while True:
        matched = parse_picture_directive(text, pos)
        if matched is None:
            break
        directive, pos = matched
        directives.append(directive)

    picture = ParsePicture(path=path, caption=caption, directives=directives or None)
    return Picture(picture), pos


def parse_bullet_line(text: str, pos: int) -> Optional[Tuple[int, Single]]:
    """Lex one ``* item`` line into ``(indentation_level, Single)``."""
    match = BULLET_RE.fullmatch(line_at(text, pos))
    if match is None:
        return None
    spans = lex_spans(match.group(2).strip())
    return indentation_level(match.group(1)), Single(spans)


def collect_bullet_items(
    flat: List[Tuple[int, Single]],
    cursor: int = 0,
    level: int = 0,
) -> Tuple[List[BulletItem], int]:
    """
    Fold a flat ``(level, item)`` sequence into a bullet tree.

    Items at *level* become siblings, a deeper item starts a ``Nested``
    subtree built by a recursive call (which consumes that item), and a
    shallower item hands control back to the caller.  Returns the items
    collected at this level and the cursor just past them.
    """
    items: List[BulletItem] = []
    while cursor < len(flat):
        item_level, item = flat[cursor]
        if item_level == level:
            items.append(item)
            cursor += 1
        elif item_level > level:
            nested, cursor = collect_bullet_items(flat, cursor, item_level)
            items.append(Nested(nested))
        else:
            break
    return items, cursor


def build_bullet_tree(flat: List[Tuple[int, Single]]) -> List[BulletItem]:
    """
    Build the tree for a whole list.

    Levels are taken relative to the first item, so an indented first bullet
    sits at the top level and later items shallower than it are clamped there.
    """
    if not flat:
        return []
    base = flat[0][0]
    normalized = [(max(level - base, 0), item) for level, item in flat]
    items, _ = collect_bullet_items(normalized)
    return items


def parse_bullets(text: str, pos: int) -> BlockMatch:
    flat: List[Tuple[int, Single]] = []
    end = pos
    cursor = pos
    while cursor < len(text):
        matched = parse_bullet_line(text, cursor)
        if matched is None:
            break
        flat.append(matched)
        end = next_line(text, cursor)
        # blank lines between bullets do not end the list
        cursor = skip_blank_lines(text, end)

    if not flat:
        return None
    return BulletedList(build_bullet_tree(flat)), end


def parse_code(text: str, pos: int) -> BlockMatch:
    header = line_at(text, pos).strip()
    if not header.startswith(CODE_FENCE):
        return None

    language = header[len(CODE_FENCE):].strip()
    body_start = next_line(text, pos)
    close = text.find(CODE_FENCE, body_start)
    if close == -1:
        raise StructuralParseError("unterminated code fence", line_number(text, pos))

    return Code(language=language, text=text[body_start:close]), next_line(text, close)


def parse_paragraph(text: str, pos: int, sink: Optional[DiagnosticSink] = None) -> BlockMatch:
    """Take lines until a blank line, a slide header or the end of input."""
    lines: List[str] = []
    while pos < len(text):
        line = line_at(text, pos)
        if not line.strip() or is_slide_header(line):
            break
        if sink is not None:
            constructs = UNSUPPORTED_CONSTRUCTS
            if lines:
                constructs = CONTINUATION_CONSTRUCTS + UNSUPPORTED_CONSTRUCTS
            _report_unsupported(line, line_number(text, pos), sink, constructs)
        lines.append(line.strip())
        pos = next_line(text, pos)

    if not lines:
        return None
    return Paragraph(lex_spans("\n".join(lines))), pos


def _report_unsupported(line: str, lineno: int, sink: DiagnosticSink, constructs) -> None:
    for pattern, message in constructs:
        if pattern.match(line):
            sink(lineno, message)
            return


BLOCK_PARSERS = (
    parse_directive,
    parse_picture,
    parse_bullets,
    parse_code,
)


def parse_blocks(
    text: str,
    pos: int = 0,
    *,
    sink: Optional[DiagnosticSink] = None,
) -> Tuple[List[Block], int]:
    """
    Parse blocks from *pos* until the end of input or the next slide header.

    Args:
        text: Full input text
        pos: Offset of the first line of the slide body
        sink: Optional ``sink(line, message)`` receiving diagnostics about
            unsupported markdown

    Returns:
        The blocks in source order and the offset of the first unconsumed
        line (a slide header or the end of input).
    """
    blocks: List[Block] = []
    while True:
        pos = skip_blank_lines(text, pos)
        if pos >= len(text) or is_slide_header(line_at(text, pos)):
            break

        for parser in BLOCK_PARSERS:
            matched = parser(text, pos)
            if matched is not None:
                break
        else:
            matched = parse_paragraph(text, pos, sink)

        if matched is None:
            raise StructuralParseError("no block matches this line", line_number(text, pos))
        block, pos = matched
        blocks.append(block)

    return blocks, pos

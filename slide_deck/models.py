"""
Data models for the slide deck pipeline.

Parsing produces a :class:`Document` (title, author and one
:class:`ParsedSlide` per ``##`` section).  Postprocessing turns it into a
:class:`SlideDeck` whose slides carry exactly one :class:`ContentOptions`
value.  Tagged variants are small dataclass families sharing a base class so
that values compare structurally.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple


# ----------------------------------------------------------------------
# Inline spans
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Span:
    """A fragment of inline text.  Delimited forms hold their inner text."""
    text: str


@dataclass(frozen=True)
class Text(Span):
    pass


@dataclass(frozen=True)
class Bold(Span):
    pass


@dataclass(frozen=True)
class Italics(Span):
    pass


@dataclass(frozen=True)
class Strikethrough(Span):
    pass


@dataclass(frozen=True)
class Equation(Span):
    pass


Title = List[Span]

# Picture sources that are never fetched
REMOTE_PREFIXES = ("http://", "https://", "data:")


def plain_text(spans: List[Span]) -> str:
    """Concatenate the text of *spans*, dropping all markup."""
    return "".join(span.text for span in spans)


# ----------------------------------------------------------------------
# Bulleted lists
# ----------------------------------------------------------------------

@dataclass
class BulletItem:
    """Base class for list entries."""


@dataclass
class Single(BulletItem):
    """One bullet at the current level."""
    spans: List[Span]


@dataclass
class Nested(BulletItem):
    """A sub-list one indentation level deeper than its siblings."""
    items: List[BulletItem]


def flatten_bullets(items: List[BulletItem], level: int = 0) -> Iterator[Tuple[int, Single]]:
    """Walk a bullet tree in order, yielding ``(depth, item)`` pairs."""
    for item in items:
        if isinstance(item, Nested):
            yield from flatten_bullets(item.items, level + 1)
        else:
            yield level, item


# ----------------------------------------------------------------------
# Pictures
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class PictureDirective:
    """Layout hint attached to a picture."""


@dataclass(frozen=True)
class Vertical(PictureDirective):
    pass


@dataclass(frozen=True)
class Width(PictureDirective):
    value: str


@dataclass(frozen=True)
class Height(PictureDirective):
    value: str


@dataclass
class ParsePicture:
    path: str
    caption: Optional[str] = None
    directives: Optional[List[PictureDirective]] = None

    @property
    def is_remote(self) -> bool:
        return self.path.startswith(REMOTE_PREFIXES)

    @property
    def vertical(self) -> bool:
        return any(isinstance(d, Vertical) for d in self.directives or [])

    @property
    def width(self) -> Optional[str]:
        """Last ``%WIDTH`` value, if any."""
        values = [d.value for d in self.directives or [] if isinstance(d, Width)]
        return values[-1] if values else None

    @property
    def height(self) -> Optional[str]:
        """Last ``%HEIGHT`` value, if any."""
        values = [d.value for d in self.directives or [] if isinstance(d, Height)]
        return values[-1] if values else None


# ----------------------------------------------------------------------
# Blocks
# ----------------------------------------------------------------------

class DirectiveKind(Enum):
    NEW_SLIDE = "NEWSLIDE"


@dataclass
class Block:
    """Base class for a unit of slide content."""


@dataclass
class Paragraph(Block):
    spans: List[Span]


@dataclass
class BulletedList(Block):
    items: List[BulletItem]


@dataclass
class Code(Block):
    language: str
    text: str


@dataclass
class Picture(Block):
    picture: ParsePicture


@dataclass
class Directive(Block):
    kind: DirectiveKind


# ----------------------------------------------------------------------
# Parsed document
# ----------------------------------------------------------------------

@dataclass
class ParsedSlide:
    title: Title
    blocks: List[Block]


@dataclass
class Document:
    title: Title
    author: str
    slides: List[ParsedSlide]


@dataclass(frozen=True)
class ParseWarning:
    """A markdown construct the parser does not support and fell back on."""
    line: int
    message: str


# ----------------------------------------------------------------------
# Final deck
# ----------------------------------------------------------------------

@dataclass
class ContentOptions:
    """Rendering mode of a slide's content."""


@dataclass
class OnlyText(ContentOptions):
    blocks: List[Block]


@dataclass
class OnlyPicture(ContentOptions):
    picture: ParsePicture


@dataclass
class TextAndPicture(ContentOptions):
    blocks: List[Block]
    picture: ParsePicture


@dataclass
class Slide:
    title: Title
    contents: ContentOptions

    def has_code(self) -> bool:
        blocks = getattr(self.contents, "blocks", [])
        return any(isinstance(block, Code) for block in blocks)


@dataclass
class SlideDeck:
    title: Title
    author: str
    slides: List[Slide]

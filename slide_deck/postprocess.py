"""
Postprocessing: turn parsed slide sections into final slides.

Each ``##`` section is split at ``%NEWSLIDE`` directives into one or more
units, and every unit is classified by whether it holds pictures:

* no picture                -> ``OnlyText``
* only pictures             -> ``OnlyPicture`` (first picture)
* pictures mixed with text  -> ``TextAndPicture`` (text blocks, first picture)

Only the first picture of a unit is kept; later ones are dropped.
"""
import copy
import logging
from typing import List

from .models import (
    Block,
    ContentOptions,
    Directive,
    DirectiveKind,
    Document,
    OnlyPicture,
    OnlyText,
    ParsedSlide,
    Picture,
    Slide,
    SlideDeck,
    TextAndPicture,
    plain_text,
)

logger = logging.getLogger(__name__)


def split_units(blocks: List[Block], carry_forward: bool = False) -> List[List[Block]]:
    """
    Split *blocks* at ``NEW_SLIDE`` directives.

    With N directives the result always has N + 1 units.  By default each
    split starts an empty unit; with *carry_forward* the next unit starts as
    a copy of everything accumulated so far.
    """
    units: List[List[Block]] = []
    current: List[Block] = []

    for block in blocks:
        if isinstance(block, Directive) and block.kind is DirectiveKind.NEW_SLIDE:
            units.append(current)
            current = copy.deepcopy(current) if carry_forward else []
        else:
            current.append(block)

    units.append(current)
    return units


def classify(blocks: List[Block]) -> ContentOptions:
    """Pick the rendering mode for one unit of blocks."""
    pictures = [block.picture for block in blocks if isinstance(block, Picture)]
    text = [block for block in blocks if not isinstance(block, Picture)]

    if not pictures:
        return OnlyText(text)

    if len(pictures) > 1:
        logger.debug("Dropping %d extra picture(s): %s",
                     len(pictures) - 1, [p.path for p in pictures[1:]])

    if not text:
        return OnlyPicture(pictures[0])
    return TextAndPicture(text, pictures[0])


def expand_slide(parsed: ParsedSlide, carry_forward: bool = False) -> List[Slide]:
    """Produce the final slides for one parsed section, all sharing its title."""
    return [
        Slide(title=copy.deepcopy(parsed.title), contents=classify(unit))
        for unit in split_units(parsed.blocks, carry_forward=carry_forward)
    ]


def postprocess(document: Document, *, carry_forward: bool = False) -> SlideDeck:
    """
    Build the final slide deck from a parsed document.

    Args:
        document: Output of the markdown parser; left untouched
        carry_forward: Start each unit after a split with the blocks that
            preceded it instead of an empty list

    Returns:
        A new :class:`SlideDeck` sharing no data with *document*
    """
    slides: List[Slide] = []
    for parsed in copy.deepcopy(document.slides):
        expanded = expand_slide(parsed, carry_forward=carry_forward)
        if len(expanded) > 1:
            logger.debug("Slide '%s' split into %d slides", plain_text(parsed.title), len(expanded))
        slides.extend(expanded)

    return SlideDeck(
        title=copy.deepcopy(document.title),
        author=document.author,
        slides=slides,
    )

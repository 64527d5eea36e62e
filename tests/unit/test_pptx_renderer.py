#!/usr/bin/env python3
"""
Test PowerPoint rendering of slide decks.
"""

import pytest
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Pt

from slide_deck.markdown_parser import parse_markdown
from slide_deck.models import (
    Bold,
    BulletedList,
    Code,
    Nested,
    OnlyPicture,
    OnlyText,
    ParsePicture,
    Paragraph,
    Single,
    Slide,
    SlideDeck,
    Strikethrough,
    Text,
    TextAndPicture,
    Vertical,
)
from slide_deck.postprocess import postprocess
from slide_deck.pptx_renderer import PPTXRenderer, directive_length


def slide_texts(pptx_slide):
    return [shape.text_frame.text for shape in pptx_slide.shapes if shape.has_text_frame]


def render(deck, tmp_path, **kwargs):
    output = tmp_path / "deck.pptx"
    PPTXRenderer(base_dir=tmp_path, **kwargs).render(deck, str(output))
    return Presentation(str(output))


def deck_of(*slides):
    return SlideDeck(title=[Text("Deck "), Bold("title")], author="Someone", slides=list(slides))


@pytest.mark.parametrize("value,full,expected", [
    ("0.5", 800, 400),
    ("1", 800, 800),
    ("300", 800, 300),
    ("240px", 800, 240),
    ("2in", 800, 192),
    ("72pt", 800, 96),
    ("0.5\\textwidth", 800, 400),
    ("50%", 800, 400),
    ("25 %", 800, 200),
    ("wide", 800, None),
])
def test_directive_length(value, full, expected):
    assert directive_length(value, full) == expected


def test_title_slide(tmp_path):
    prs = render(deck_of(), tmp_path)

    assert len(prs.slides) == 1
    texts = slide_texts(prs.slides[0])
    assert "Deck title" in texts
    assert "Someone" in texts


def test_one_pptx_slide_per_deck_slide(tmp_path, sample_markdown):
    deck = postprocess(parse_markdown(sample_markdown))
    prs = render(deck, tmp_path)

    assert len(prs.slides) == len(deck.slides) + 1
    titles = [slide_texts(s)[0] for s in list(prs.slides)[1:]]
    assert titles == ["Intro", "Picture", "Split", "Split"]


def test_text_content_and_styles(tmp_path):
    slide = Slide(
        title=[Text("Text")],
        contents=OnlyText([
            Paragraph([Text("plain "), Bold("strong"), Text(" "), Strikethrough("gone")]),
            BulletedList([Single([Text("top")]), Nested([Single([Text("inner")])])]),
            Code(language="python", text="a = 1\nb = 2\n"),
        ]),
    )
    prs = render(deck_of(slide), tmp_path)
    body = [s for s in prs.slides[1].shapes if s.has_text_frame][1].text_frame
    paragraphs = body.paragraphs

    assert paragraphs[0].text == "plain strong gone"
    runs = paragraphs[0].runs
    assert runs[1].font.bold is True
    assert runs[3].font._element.get("strike") == "sngStrike"

    assert paragraphs[1].text == "• top"
    assert paragraphs[2].text == "• inner"
    assert paragraphs[2].level == 1

    assert [p.text for p in paragraphs[3:]] == ["a = 1", "b = 2"]
    assert paragraphs[3].runs[0].font.name == "Courier New"


def test_picture_with_caption(tmp_path, png_file):
    slide = Slide(
        title=[Text("Pic")],
        contents=OnlyPicture(ParsePicture(png_file.name, caption="A cat")),
    )
    prs = render(deck_of(slide), tmp_path)
    shapes = list(prs.slides[1].shapes)

    pictures = [s for s in shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE]
    assert len(pictures) == 1
    assert "A cat" in slide_texts(prs.slides[1])


def test_picture_keeps_aspect_ratio(tmp_path, png_file):
    slide = Slide(title=[Text("Pic")], contents=OnlyPicture(ParsePicture(png_file.name)))
    prs = render(deck_of(slide), tmp_path)
    picture = [s for s in prs.slides[1].shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE][0]

    # source image is 40x20
    assert abs(picture.width / picture.height - 2) < 0.01


def test_text_and_vertical_picture(tmp_path, png_file):
    picture = ParsePicture(png_file.name, directives=[Vertical()])
    slide = Slide(title=[Text("Both")], contents=TextAndPicture([Paragraph([Text("above")])], picture))
    prs = render(deck_of(slide), tmp_path)
    shapes = list(prs.slides[1].shapes)

    text_shape = [s for s in shapes if s.has_text_frame and s.text_frame.text == "above"][0]
    picture_shape = [s for s in shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE][0]
    assert picture_shape.top > text_shape.top + text_shape.height


def test_text_and_picture_side_by_side(tmp_path, png_file):
    picture = ParsePicture(png_file.name)
    slide = Slide(title=[Text("Both")], contents=TextAndPicture([Paragraph([Text("left")])], picture))
    prs = render(deck_of(slide), tmp_path)
    shapes = list(prs.slides[1].shapes)

    text_shape = [s for s in shapes if s.has_text_frame and s.text_frame.text == "left"][0]
    picture_shape = [s for s in shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE][0]
    assert picture_shape.left > text_shape.left + text_shape.width


@pytest.mark.parametrize("path", ["missing.png", "https://example.com/cat.png"])
def test_missing_image_placeholder(tmp_path, path):
    slide = Slide(title=[Text("Pic")], contents=OnlyPicture(ParsePicture(path)))
    prs = render(deck_of(slide), tmp_path)

    texts = slide_texts(prs.slides[1])
    assert any(text.startswith("[Missing image: ") for text in texts)


def test_theme_font_sizes(tmp_path):
    slide = Slide(title=[Text("Sized")], contents=OnlyText([Paragraph([Text("body")])]))
    prs = render(deck_of(slide), tmp_path, theme="dark")
    title, body = [s for s in prs.slides[1].shapes if s.has_text_frame]

    assert title.text_frame.paragraphs[0].runs[0].font.size == Pt(32)
    assert body.text_frame.paragraphs[0].runs[0].font.size == Pt(20)


def test_unknown_theme():
    with pytest.raises(FileNotFoundError):
        PPTXRenderer(theme="no_such_theme")

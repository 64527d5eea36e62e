#!/usr/bin/env python3
"""
PowerPoint renderer for converting a slide deck to PowerPoint slides.
"""
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_AUTO_SIZE, PP_ALIGN
from pptx.util import Inches, Pt

from .models import (
    Block,
    Bold,
    BulletedList,
    Code,
    Equation,
    Italics,
    OnlyPicture,
    OnlyText,
    Paragraph,
    ParsePicture,
    Slide,
    SlideDeck,
    Span,
    Strikethrough,
    TextAndPicture,
    flatten_bullets,
    plain_text,
)
from .paths import is_remote, resolve_asset
from .theme_loader import get_css

logger = logging.getLogger(__name__)

# x, y, width, height in CSS pixels
Box = Tuple[float, float, float, float]

FONT_SIZE_PATTERNS = {
    'h1': r'h1\s*{[^}]*font-size:\s*(\d+)px',
    'h2': r'h2\s*{[^}]*font-size:\s*(\d+)px',
    'p': r'(?<![\w-])p\s*{[^}]*font-size:\s*(\d+)px',
    'li': r'ul,\s*ol\s*{[^}]*font-size:\s*(\d+)px',
    'code': r'pre\s*{[^}]*font-size:\s*(\d+)px',
    'caption': r'figcaption\s*{[^}]*font-size:\s*(\d+)px',
}

COLOR_PATTERNS = {
    # 'color:' in the body rule, skipping 'background-color:'
    'text': r'body\s*{[^}]*?(?<!background-)color:\s*(#[0-9a-fA-F]{6})',
    'background': r'body\s*{[^}]*background-color:\s*(#[0-9a-fA-F]{6})',
    'heading_text': r'h1\s*{[^}]*color:\s*(#[0-9a-fA-F]{6})',
    'code_text': r'pre\s*{[^}]*color:\s*(#[0-9a-fA-F]{6})',
    'caption_text': r'figcaption\s*{[^}]*color:\s*(#[0-9a-fA-F]{6})',
}

# "3in", "240px", "12pt", "50%", or a bare number; LaTeX lengths such as
# "0.5\textwidth" are read as their leading factor.
LENGTH_RE = re.compile(r'\s*([0-9]*\.?[0-9]+)\s*(in|px|pt|%)?')

BULLET = "• "


# Helper function to convert pixels to inches
def px(pixels):
    return Inches(pixels / 96)


def directive_length(value: str, full_px: float) -> Optional[float]:
    """
    Convert a ``%WIDTH``/``%HEIGHT`` value to pixels.

    Numbers up to 1 and percentages are fractions of *full_px*, larger
    bare numbers are pixels.  Returns None for values that cannot be read.
    """
    match = LENGTH_RE.match(value)
    if not match:
        return None
    number, unit = float(match.group(1)), match.group(2)
    if unit == '%':
        return number / 100 * full_px
    if unit == 'in':
        return number * 96
    if unit == 'pt':
        return number * 96 / 72
    if unit == 'px' or number > 1:
        return number
    return number * full_px


class PPTXRenderer:
    """
    Renderer for converting a slide deck to a PowerPoint presentation.
    """

    def __init__(self, theme: str = "default", debug: bool = False, base_dir: Optional[Path] = None):
        """
        Initialize the PowerPoint renderer with theme support.

        Args:
            theme: Name of the CSS theme under ``slide_deck/themes``
            debug: Enable verbose logging
            base_dir: Directory relative picture paths are resolved against
        """
        self.theme = theme
        self.debug = debug
        self.base_dir = base_dir
        self.theme_config = self._parse_theme_config()

    def _parse_theme_config(self) -> Dict:
        """Parse CSS theme to extract dimensions, font sizes and colours."""
        css_content = get_css(self.theme)

        config = {
            'font_sizes': {},
            'colors': {},
            'slide_dimensions': {},
        }

        # Parse font sizes from CSS - REQUIRED, no defaults
        for element, pattern in FONT_SIZE_PATTERNS.items():
            match = re.search(pattern, css_content, re.IGNORECASE | re.DOTALL)
            if not match:
                raise ValueError(f"❌ CSS theme '{self.theme}' missing required font-size for {element}. "
                                 f"Add 'font-size: XXpx' to the {element} rule in themes/{self.theme}.css")
            # 1 px ≈ 1 pt in PowerPoint; keep half-point precision
            config['font_sizes'][element] = round(int(match.group(1)) * 2) / 2

        line_height_match = re.search(r'line-height:\s*([\d.]+)', css_content)
        if not line_height_match:
            raise ValueError(f"❌ CSS theme '{self.theme}' missing required line-height. "
                             f"Add 'line-height: X.X' to the body rule in themes/{self.theme}.css")
        config['line_height'] = float(line_height_match.group(1))

        width_match = re.search(r'--slide-width:\s*(\d+)px', css_content)
        height_match = re.search(r'--slide-height:\s*(\d+)px', css_content)
        padding_match = re.search(r'--slide-padding:\s*(\d+)px', css_content)
        font_family_match = re.search(r'--slide-font-family:\s*[\'"]([^\'"]+)[\'"]', css_content)
        code_font_match = re.search(r'--code-font-family:\s*[\'"]([^\'"]+)[\'"]', css_content)

        if not width_match or not height_match or not padding_match:
            raise ValueError(f"❌ CSS theme '{self.theme}' missing required slide dimensions. "
                             f"Add '--slide-width', '--slide-height' and '--slide-padding' to :root "
                             f"in themes/{self.theme}.css")
        if not font_family_match:
            raise ValueError(f"❌ CSS theme '{self.theme}' missing required --slide-font-family variable. "
                             f"Add '--slide-font-family: \"FontName\"' to :root in themes/{self.theme}.css")

        config['slide_dimensions'] = {
            'width_px': int(width_match.group(1)),
            'height_px': int(height_match.group(1)),
            'padding_px': int(padding_match.group(1)),
        }
        config['font_family'] = font_family_match.group(1)
        config['code_font_family'] = code_font_match.group(1) if code_font_match else 'Courier New'

        for color_type, pattern in COLOR_PATTERNS.items():
            match = re.search(pattern, css_content, re.IGNORECASE | re.DOTALL)
            if match:
                config['colors'][color_type] = match.group(1)
            elif color_type != 'caption_text':
                raise ValueError(f"❌ CSS theme '{self.theme}' missing required color for {color_type}.")
        config['colors'].setdefault('caption_text', config['colors']['text'])

        return config

    def _hex_to_rgb(self, hex_color: str) -> RGBColor:
        """Convert a #rrggbb colour to RGBColor."""
        hex_color = hex_color.lstrip('#')
        return RGBColor(*(int(hex_color[i:i + 2], 16) for i in (0, 2, 4)))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, deck: SlideDeck, output_path: str) -> str:
        """
        Render a slide deck to a PowerPoint presentation.

        Args:
            deck: Postprocessed slide deck
            output_path: Path where the PPTX file should be saved

        Returns:
            str: *output_path*
        """
        prs = Presentation()

        dims = self.theme_config['slide_dimensions']
        prs.slide_width = px(dims['width_px'])
        prs.slide_height = px(dims['height_px'])

        self._add_title_slide(prs, deck)

        for slide_idx, slide in enumerate(deck.slides):
            if self.debug:
                logger.info(f"Slide {slide_idx + 1}: '{plain_text(slide.title)}' "
                            f"({type(slide.contents).__name__})")
            self._add_content_slide(prs, slide)

        prs.save(output_path)
        return str(output_path)

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------

    def _new_slide(self, prs):
        slide = prs.slides.add_slide(prs.slide_layouts[6])  # Blank layout

        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = self._hex_to_rgb(self.theme_config['colors']['background'])
        return slide

    def _add_title_slide(self, prs, deck: SlideDeck):
        slide = self._new_slide(prs)
        dims = self.theme_config['slide_dimensions']
        width, height, pad = dims['width_px'], dims['height_px'], dims['padding_px']
        sizes = self.theme_config['font_sizes']
        colors = self.theme_config['colors']

        title_h = sizes['h1'] * 3
        text_frame = self._add_textbox(slide, (pad, height * 0.3, width - 2 * pad, title_h))
        para = text_frame.paragraphs[0]
        para.alignment = PP_ALIGN.CENTER
        self._add_runs(para, deck.title, sizes['h1'], colors['heading_text'], bold=True)

        if deck.author:
            author_box = (pad, height * 0.3 + title_h + pad / 2, width - 2 * pad, sizes['p'] * 2)
            para = self._add_textbox(slide, author_box).paragraphs[0]
            para.alignment = PP_ALIGN.CENTER
            run = para.add_run()
            run.text = deck.author
            self._style_run(run, sizes['p'], colors['text'])

    def _add_content_slide(self, prs, slide: Slide):
        pptx_slide = self._new_slide(prs)
        dims = self.theme_config['slide_dimensions']
        width, height, pad = dims['width_px'], dims['height_px'], dims['padding_px']
        sizes = self.theme_config['font_sizes']

        title_h = sizes['h2'] * 1.6
        para = self._add_textbox(pptx_slide, (pad, pad, width - 2 * pad, title_h)).paragraphs[0]
        self._add_runs(para, slide.title, sizes['h2'], self.theme_config['colors']['heading_text'], bold=True)

        top = pad + title_h + pad / 2
        content: Box = (pad, top, width - 2 * pad, height - top - pad)
        contents = slide.contents

        if isinstance(contents, OnlyText):
            self._fill_blocks(self._add_textbox(pptx_slide, content), contents.blocks)
        elif isinstance(contents, OnlyPicture):
            self._add_picture(pptx_slide, contents.picture, content)
        elif isinstance(contents, TextAndPicture):
            text_box, picture_box = self._split_box(content, contents.picture.vertical)
            self._fill_blocks(self._add_textbox(pptx_slide, text_box), contents.blocks)
            self._add_picture(pptx_slide, contents.picture, picture_box)

    def _split_box(self, box: Box, vertical: bool) -> Tuple[Box, Box]:
        """Text gets 40% of the content area, the picture the last 55%."""
        x, y, w, h = box
        if vertical:
            return (x, y, w, h * 0.4), (x, y + h * 0.45, w, h * 0.55)
        return (x, y, w * 0.4, h), (x + w * 0.45, y, w * 0.55, h)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _add_textbox(self, slide, box: Box):
        x, y, w, h = box
        textbox = slide.shapes.add_textbox(px(x), px(y), px(w), px(h))
        text_frame = textbox.text_frame
        text_frame.clear()
        text_frame.margin_left = 0
        text_frame.margin_right = 0
        text_frame.margin_top = 0
        text_frame.margin_bottom = 0
        text_frame.word_wrap = True
        text_frame.auto_size = MSO_AUTO_SIZE.NONE
        return text_frame

    def _style_run(self, run, size: float, color: str, font_name: Optional[str] = None):
        run.font.size = Pt(size)
        run.font.name = font_name or self.theme_config['font_family']
        run.font.color.rgb = self._hex_to_rgb(color)

    def _add_runs(self, paragraph, spans: List[Span], size: float, color: str, bold: bool = False):
        """Add one run per span, mapping span types to run formatting."""
        for span in spans:
            run = paragraph.add_run()
            # soft line breaks inside a paragraph behave like spaces
            run.text = span.text.replace("\n", " ")
            self._style_run(run, size, color)
            if bold or isinstance(span, Bold):
                run.font.bold = True
            if isinstance(span, Italics):
                run.font.italic = True
            elif isinstance(span, Strikethrough):
                # run.font has no strike property
                run.font._element.attrib['strike'] = 'sngStrike'
            elif isinstance(span, Equation):
                # raw LaTeX, shown as-is
                run.font.name = self.theme_config['code_font_family']
                run.font.italic = True

    def _fill_blocks(self, text_frame, blocks: List[Block]):
        sizes = self.theme_config['font_sizes']
        colors = self.theme_config['colors']
        paragraphs = []

        def next_paragraph():
            para = text_frame.paragraphs[0] if not paragraphs else text_frame.add_paragraph()
            para.line_spacing = self.theme_config['line_height']
            paragraphs.append(para)
            return para

        for block in blocks:
            if isinstance(block, Paragraph):
                para = next_paragraph()
                para.space_after = Pt(sizes['p'] / 2)
                self._add_runs(para, block.spans, sizes['p'], colors['text'])

            elif isinstance(block, BulletedList):
                for level, item in flatten_bullets(block.items):
                    para = next_paragraph()
                    para.level = min(level, 8)
                    bullet_run = para.add_run()
                    bullet_run.text = BULLET
                    self._style_run(bullet_run, sizes['li'], colors['text'])
                    self._add_runs(para, item.spans, sizes['li'], colors['text'])

            elif isinstance(block, Code):
                for line in block.text.rstrip("\n").split("\n"):
                    run = next_paragraph().add_run()
                    run.text = line
                    self._style_run(run, sizes['code'], colors['code_text'],
                                    font_name=self.theme_config['code_font_family'])

    # ------------------------------------------------------------------
    # Pictures
    # ------------------------------------------------------------------

    def _add_picture(self, slide, picture: ParsePicture, box: Box):
        """Place *picture* inside *box*, keeping its aspect ratio."""
        x, y, w, h = box
        sizes = self.theme_config['font_sizes']
        caption_h = sizes['caption'] * 2 if picture.caption else 0
        avail_w, avail_h = w, h - caption_h

        if picture.width:
            avail_w = directive_length(picture.width, w) or avail_w
        if picture.height:
            avail_h = directive_length(picture.height, h - caption_h) or avail_h

        image_path = resolve_asset(picture.path, base_dir=self.base_dir)
        if self.debug:
            logger.info(f"Attempting to add image: {image_path}")

        if is_remote(image_path) or not os.path.exists(image_path):
            logger.warning("Image file not accessible: %s", image_path)
            self._add_missing_image(slide, image_path, box)
            return

        try:
            with Image.open(image_path) as img:
                img_w, img_h = img.size
        except OSError as e:
            logger.warning("Cannot read image %s: %s", image_path, e)
            self._add_missing_image(slide, image_path, box)
            return

        scale = min(avail_w / img_w, avail_h / img_h)
        pic_w, pic_h = img_w * scale, img_h * scale
        left = x + (w - pic_w) / 2
        slide.shapes.add_picture(image_path, px(left), px(y), width=px(pic_w), height=px(pic_h))

        if picture.caption:
            para = self._add_textbox(slide, (x, y + pic_h + 4, w, caption_h)).paragraphs[0]
            para.alignment = PP_ALIGN.CENTER
            run = para.add_run()
            run.text = picture.caption
            self._style_run(run, sizes['caption'], self.theme_config['colors']['caption_text'])

    def _add_missing_image(self, slide, image_path: str, box: Box):
        para = self._add_textbox(slide, box).paragraphs[0]
        run = para.add_run()
        run.text = f"[Missing image: {os.path.basename(image_path) if image_path else 'No src'}]"
        self._style_run(run, self.theme_config['font_sizes']['p'], self.theme_config['colors']['text'])

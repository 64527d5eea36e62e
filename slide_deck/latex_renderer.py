#!/usr/bin/env python3
"""
LaTeX beamer renderer for a finished slide deck.

Templates live in a ``DictLoader`` and use ``<< >>`` / ``<% %>`` delimiters
so that LaTeX braces never clash with Jinja2 syntax.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional

from jinja2 import DictLoader, Environment, StrictUndefined

from .errors import RenderError
from .models import (
    Bold,
    BulletedList,
    Code,
    Equation,
    Italics,
    Nested,
    OnlyPicture,
    OnlyText,
    Paragraph,
    ParsePicture,
    Slide,
    SlideDeck,
    Span,
    Strikethrough,
    TextAndPicture,
)
from .paths import resolve_asset

logger = logging.getLogger(__name__)

TEMPLATES = {
    "document.tex": r"""
\documentclass{beamer}
\usepackage{graphicx}
\usepackage{float}
\usepackage{hyperref}
\usepackage[normalem]{ulem}

\hypersetup{
colorlinks=true,
linkcolor=blue,
filecolor=magenta,
urlcolor=cyan,
}

\urlstyle{same}

\title{<< deck.title | spans >>}
\date{\today}
\author{<< deck.author | latex_escape >>}
\begin{document}
\frame{\titlepage}

<% for frame in frames %>
<< frame >>
<% endfor %>
\end{document}
""",
    "macros.tex": r"""
<% macro itemize(items) %>
    \begin{itemize}
<% for item in items %>
<% if item is nested %>
<< itemize(item.items) >>
<% else %>
        \item << item.spans | spans >>
<% endif %>
<% endfor %>
    \end{itemize}
<% endmacro %>

<% macro render_blocks(blocks) %>
<% for block in blocks %>
<% if block is paragraph %>
    << block.spans | spans >>

<% elif block is bulleted_list %>
<< itemize(block.items) >>
<% elif block is code %>
\begin{verbatim}
<< block.text | rstrip_newlines >>
\end{verbatim}
<% endif %>
<% endfor %>
<% endmacro %>

<% macro figure(picture, mode) %>
    \begin{figure}
        \centering
        \includegraphics[<< picture | graphics_options(mode) >>]{<< picture | asset >>}
<% if picture.caption %>
        \caption{<< picture.caption | latex_escape >>}
<% endif %>
    \end{figure}
<% endmacro %>
""",
    "frame.tex": r"""
<% from "macros.tex" import itemize, render_blocks, figure %>
\begin{frame}<% if slide.has_code() %>[fragile]<% endif %>

    \frametitle{<< slide.title | spans >>}

<% set contents = slide.contents %>
<% if contents is only_picture %>
<< figure(contents.picture, "full") >>
<% elif contents is text_and_picture and contents.picture.vertical %>
<< render_blocks(contents.blocks) >>
<< figure(contents.picture, "stacked") >>
<% elif contents is text_and_picture %>
    \begin{minipage}{0.4\textwidth}
<< render_blocks(contents.blocks) >>
    \end{minipage}%
    \hfill
    \begin{minipage}{0.55\textwidth}
<< figure(contents.picture, "side") >>
    \end{minipage}
<% else %>
<< render_blocks(contents.blocks) >>
<% endif %>

\end{frame}
""",
}

LATEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}
_LATEX_SPECIALS_RE = re.compile("|".join(re.escape(c) for c in LATEX_SPECIALS))

# Default (width, height) of \includegraphics per layout mode
GRAPHICS_DEFAULTS = {
    "full": (r"0.9\paperwidth", r"0.7\paperheight"),
    "side": (r"\textwidth", None),
    "stacked": (r"\textwidth", r"0.45\textheight"),
}

# "50%" in a directive; a bare % starts a LaTeX comment
PERCENT_RE = re.compile(r"\s*([0-9]*\.?[0-9]+)\s*%\s*")


def latex_escape(text: str) -> str:
    """Escape characters that LaTeX treats specially."""
    return _LATEX_SPECIALS_RE.sub(lambda m: LATEX_SPECIALS[m.group(0)], text)


def render_spans(spans: List[Span]) -> str:
    out = []
    for span in spans:
        if isinstance(span, Bold):
            out.append(r"\textbf{%s}" % latex_escape(span.text))
        elif isinstance(span, Italics):
            out.append(r"\emph{%s}" % latex_escape(span.text))
        elif isinstance(span, Strikethrough):
            out.append(r"\sout{%s}" % latex_escape(span.text))
        elif isinstance(span, Equation):
            # equations are already LaTeX
            out.append(f"${span.text}$")
        else:
            out.append(latex_escape(span.text))
    return "".join(out)


def latex_length(value: str, reference: str) -> str:
    """Turn a percentage such as ``50%`` into a fraction of *reference*."""
    match = PERCENT_RE.fullmatch(value)
    if match is None:
        return value
    return f"{float(match.group(1)) / 100:g}{reference}"


def graphics_options(picture: ParsePicture, mode: str = "full") -> str:
    """``\\includegraphics`` options; ``%WIDTH``/``%HEIGHT`` replace the defaults."""
    width, height = GRAPHICS_DEFAULTS[mode]
    if picture.width or picture.height:
        width = picture.width and latex_length(picture.width, r"\linewidth")
        height = picture.height and latex_length(picture.height, r"\textheight")

    options = []
    if width:
        options.append(f"width={width}")
    if height:
        options.append(f"height={height}")
    if width and height:
        options.append("keepaspectratio")
    return ",".join(options)


class LatexRenderer:
    """
    Renderer for converting a slide deck to a beamer ``.tex`` document.
    """

    def __init__(self, base_dir: Optional[Path] = None, debug: bool = False):
        """
        Initialize the renderer.

        Args:
            base_dir: Directory relative picture paths are resolved against.
                If None, paths are written as they appear in the markdown.
            debug: Enable verbose logging
        """
        self.base_dir = base_dir
        self.debug = debug

        # Each renderer gets its own env
        self.jinja_env = Environment(
            loader=DictLoader(TEMPLATES),
            block_start_string="<%",
            block_end_string="%>",
            variable_start_string="<<",
            variable_end_string=">>",
            comment_start_string="<#",
            comment_end_string="#>",
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        # ── filters / tests ────────────────────────────────────────────
        self.jinja_env.filters["spans"] = render_spans
        self.jinja_env.filters["latex_escape"] = latex_escape
        self.jinja_env.filters["graphics_options"] = graphics_options
        self.jinja_env.filters["asset"] = self._asset_path
        self.jinja_env.filters["rstrip_newlines"] = lambda text: text.rstrip("\n")
        self.jinja_env.tests["nested"] = lambda item: isinstance(item, Nested)
        self.jinja_env.tests["paragraph"] = lambda block: isinstance(block, Paragraph)
        self.jinja_env.tests["bulleted_list"] = lambda block: isinstance(block, BulletedList)
        self.jinja_env.tests["code"] = lambda block: isinstance(block, Code)
        self.jinja_env.tests["only_text"] = lambda c: isinstance(c, OnlyText)
        self.jinja_env.tests["only_picture"] = lambda c: isinstance(c, OnlyPicture)
        self.jinja_env.tests["text_and_picture"] = lambda c: isinstance(c, TextAndPicture)

    def _asset_path(self, picture: ParsePicture) -> str:
        if picture.is_remote:
            raise RenderError(
                f"Picture '{picture.path}' is a remote link; download it and use a local path"
            )
        return resolve_asset(picture.path, base_dir=self.base_dir)

    def render_frame(self, slide: Slide) -> str:
        """Render one slide as a beamer frame."""
        return self.jinja_env.get_template("frame.tex").render(slide=slide)

    def render(self, deck: SlideDeck) -> str:
        """
        Render a whole slide deck.

        Args:
            deck: Postprocessed slide deck

        Returns:
            The LaTeX source as a string

        Raises:
            RenderError: if a picture cannot be referenced from LaTeX
        """
        frames = [self.render_frame(slide) for slide in deck.slides]
        if self.debug:
            logger.info(f"Rendered {len(frames)} frame(s)")
        return self.jinja_env.get_template("document.tex").render(deck=deck, frames=frames)

    def write(self, deck: SlideDeck, output_path) -> str:
        """Render *deck* and write it to *output_path* (UTF-8)."""
        latex = self.render(deck)
        Path(output_path).write_text(latex, encoding="utf-8")
        return str(output_path)

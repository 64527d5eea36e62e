#!/usr/bin/env python3
"""
Main slide generator module that ties together parser, postprocessor and renderers.
"""

import logging
import os
from pathlib import Path

from .latex_renderer import LatexRenderer
from .markdown_parser import MarkdownParser
from .models import SlideDeck
from .paths import output_path_for, prepare_output_dir
from .postprocess import postprocess
from .pptx_renderer import PPTXRenderer

logger = logging.getLogger(__name__)

OUTPUT_SUFFIXES = {
    "latex": ".tex",
    "pptx": ".pptx",
}


class SlideGenerator:
    """
    Main class for generating presentations from slide markdown.
    """

    def __init__(
        self,
        *,
        output_dir,
        base_dir: str = None,
        output_format: str = "latex",
        theme: str = "default",
        carry_forward: bool = False,
        debug: bool = False,
    ):
        """Create a new :class:`SlideGenerator`.

        Parameters
        ----------
        output_dir
            Directory where the rendered presentation will be written.
            *Required*.
        base_dir
            Base directory for resolving relative picture paths in markdown.
            If None, defaults to current working directory.
        output_format
            ``latex`` (beamer ``.tex``) or ``pptx``.
        theme
            Name of the CSS theme used for ``pptx`` output (``default`` /
            ``dark`` / …).
        carry_forward
            After a ``%NEWSLIDE`` split, start the next slide with the blocks
            that preceded the split instead of an empty slide.
        debug
            Enable verbose logging.
        """
        if output_format not in OUTPUT_SUFFIXES:
            raise ValueError(
                f"Unknown output format '{output_format}'. Choose one of: {sorted(OUTPUT_SUFFIXES)}"
            )

        self.debug = debug
        self.theme = theme
        self.output_format = output_format
        self.carry_forward = carry_forward
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.output_dir = prepare_output_dir(output_dir)

        self.parser = MarkdownParser()
        if output_format == "pptx":
            self.renderer = PPTXRenderer(theme=theme, debug=debug, base_dir=self.base_dir)
        else:
            self.renderer = LatexRenderer(base_dir=self.base_dir, debug=debug)

    def build_deck(self, markdown_text: str) -> SlideDeck:
        """
        Parse and postprocess markdown into a slide deck.

        Args:
            markdown_text: The markdown content to convert

        Returns:
            SlideDeck: The finished slide-deck model
        """
        document = self.parser.parse(markdown_text)
        for warning in self.parser.warnings:
            logger.warning("line %d: %s", warning.line, warning.message)

        deck = postprocess(document, carry_forward=self.carry_forward)
        if self.debug:
            logger.info(f"Parsed {len(document.slides)} section(s) into {len(deck.slides)} slide(s)")
        return deck

    def generate(self, markdown_text: str, output_path: str = "presentation") -> str:
        """
        Generate a presentation from markdown text.

        Args:
            markdown_text: The markdown content to convert
            output_path: Path where the presentation should be saved; the
                extension for the output format is added when missing

        Returns:
            str: Path to the generated file
        """
        suffix = OUTPUT_SUFFIXES[self.output_format]
        output_path = str(output_path)
        if not output_path.endswith(suffix):
            output_path = f"{output_path}{suffix}"

        output_path = Path(output_path)
        if not output_path.is_absolute() and len(output_path.parts) == 1:
            # If it's just a filename, put it in the output directory
            output_path = self.output_dir / output_path

        os.makedirs(output_path.parent, exist_ok=True)

        deck = self.build_deck(markdown_text)
        self._render(deck, output_path)
        return str(output_path)

    def _render(self, deck: SlideDeck, output_path: Path) -> None:
        if self.output_format == "pptx":
            self.renderer.render(deck, str(output_path))
        else:
            self.renderer.write(deck, output_path)

        if self.debug:
            logger.info(f"Generated presentation saved to: {output_path}")
            logger.info(f"Total slides: {len(deck.slides)}")

    def generate_file(self, markdown_path) -> str:
        """
        Convert a markdown file into ``<output_dir>/<stem>.tex`` (or ``.pptx``).

        Raises:
            EncodingError: if the file is not valid UTF-8
        """
        markdown_path = Path(markdown_path)
        document = self.parser.parse_bytes(markdown_path.read_bytes())
        for warning in self.parser.warnings:
            logger.warning("%s:%d: %s", markdown_path.name, warning.line, warning.message)

        deck = postprocess(document, carry_forward=self.carry_forward)
        output_path = output_path_for(
            markdown_path, self.output_dir, OUTPUT_SUFFIXES[self.output_format]
        )
        self._render(deck, output_path)
        return str(output_path)


def main(argv=None):
    """Command-line entry point for the slide generator."""
    import argparse
    import sys

    def _build_parser() -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(prog="slidedeck", description="Convert slide markdown to a beamer or PPTX presentation.")
        p.add_argument("markdown", type=Path, help="Markdown file to convert")
        p.add_argument("output_dir", type=Path, help="Directory for the generated presentation")
        p.add_argument("--format", "-f", dest="output_format", choices=sorted(OUTPUT_SUFFIXES), default="latex", help="Output format (default: latex)")
        p.add_argument("--theme", "-t", default="default", help="CSS theme for pptx output (default, dark, …)")
        p.add_argument("--asset-base", type=Path, help="Base directory for resolving relative picture paths (default: parent of markdown file)")
        p.add_argument("--carry-forward", action="store_true", help="Repeat earlier content on the slide after each %%NEWSLIDE")
        p.add_argument("--debug", action="store_true", help="Enable verbose logging")
        return p

    args = _build_parser().parse_args(argv)

    # Set up logging
    level = "DEBUG" if args.debug else os.getenv("SLIDEDECK_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(levelname)s  %(message)s")

    md_path: Path = args.markdown
    if not md_path.exists():
        logger.error(f"Markdown file '{md_path}' not found")
        sys.exit(1)

    try:
        generator = SlideGenerator(
            output_dir=args.output_dir,
            base_dir=args.asset_base if args.asset_base else md_path.parent,
            output_format=args.output_format,
            theme=args.theme,
            carry_forward=args.carry_forward,
            debug=args.debug,
        )
        output_path = generator.generate_file(md_path)
    except (ValueError, OSError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        sys.exit(1)

    logger.info("✅ Presentation written to %s", output_path)


if __name__ == "__main__":
    main()

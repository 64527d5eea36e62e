#!/usr/bin/env python3
"""
Test the main SlideGenerator functionality.
"""
import logging
import os

import pytest
from pptx import Presentation

from slide_deck.errors import EncodingError, StructuralParseError
from slide_deck.generator import SlideGenerator, main


def test_generate_latex(tmp_path, sample_markdown):
    """Test that SlideGenerator writes a beamer document."""
    generator = SlideGenerator(output_dir=tmp_path)

    result_path = generator.generate(sample_markdown, "talk")

    assert result_path == str(tmp_path.resolve() / "talk.tex")
    latex = open(result_path, encoding="utf-8").read()
    assert r"\documentclass{beamer}" in latex
    assert latex.count(r"\begin{frame}") == 4


def test_generate_pptx(tmp_path, sample_markdown):
    """Test that SlideGenerator can create a PowerPoint presentation."""
    generator = SlideGenerator(output_dir=tmp_path, output_format="pptx")

    result_path = generator.generate(sample_markdown, "talk.pptx")

    assert result_path.endswith("talk.pptx")
    prs = Presentation(result_path)
    assert len(prs.slides) == 5  # title slide + 4 content slides
    for slide in prs.slides:
        assert len(slide.shapes) > 0


def test_generate_to_nested_path(tmp_path, sample_markdown):
    generator = SlideGenerator(output_dir=tmp_path / "unused")
    output = tmp_path / "nested" / "dir" / "deck"

    result_path = generator.generate(sample_markdown, output)

    assert result_path == str(output) + ".tex"
    assert os.path.exists(result_path)


def test_generate_file_names_output_after_input(tmp_path, sample_markdown):
    markdown_path = tmp_path / "lecture.md"
    markdown_path.write_text(sample_markdown, encoding="utf-8")

    generator = SlideGenerator(output_dir=tmp_path / "out", base_dir=tmp_path)
    result_path = generator.generate_file(markdown_path)

    assert result_path == str((tmp_path / "out").resolve() / "lecture.tex")
    assert str(tmp_path.resolve() / "cat.png") in open(result_path, encoding="utf-8").read()


def test_generate_file_invalid_utf8(tmp_path):
    markdown_path = tmp_path / "bad.md"
    markdown_path.write_bytes(b"# Title\nAUTHOR=\xff\n")

    with pytest.raises(EncodingError):
        SlideGenerator(output_dir=tmp_path).generate_file(markdown_path)


def test_carry_forward(tmp_path):
    markdown = "# T\nAUTHOR=A\n\n## S\nfirst\n\n%NEWSLIDE\n\nsecond\n"

    reset = SlideGenerator(output_dir=tmp_path).build_deck(markdown)
    carried = SlideGenerator(output_dir=tmp_path, carry_forward=True).build_deck(markdown)

    assert len(reset.slides[1].contents.blocks) == 1
    assert len(carried.slides[1].contents.blocks) == 2


def test_parse_warnings_are_logged(tmp_path, caplog):
    generator = SlideGenerator(output_dir=tmp_path)
    with caplog.at_level(logging.WARNING, logger="slide_deck.generator"):
        generator.build_deck("# T\nAUTHOR=A\n## S\n| a | b |\n")

    assert "line 4" in caplog.text
    assert "tables" in caplog.text


def test_structural_error_propagates(tmp_path):
    with pytest.raises(StructuralParseError):
        SlideGenerator(output_dir=tmp_path).generate("no header here")


def test_unknown_format(tmp_path):
    with pytest.raises(ValueError, match="Unknown output format"):
        SlideGenerator(output_dir=tmp_path, output_format="html")


class TestCommandLine:
    """The ``slidedeck`` entry point."""

    def test_latex_default(self, tmp_path, sample_markdown):
        markdown_path = tmp_path / "talk.md"
        markdown_path.write_text(sample_markdown, encoding="utf-8")

        main([str(markdown_path), str(tmp_path / "out")])

        assert (tmp_path / "out" / "talk.tex").exists()

    def test_pptx_with_theme(self, tmp_path, sample_markdown):
        markdown_path = tmp_path / "talk.md"
        markdown_path.write_text(sample_markdown, encoding="utf-8")

        main([str(markdown_path), str(tmp_path), "--format", "pptx", "--theme", "dark"])

        assert (tmp_path / "talk.pptx").exists()

    def test_missing_markdown(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "nope.md"), str(tmp_path)])
        assert exc_info.value.code == 1

    def test_parse_error_exits(self, tmp_path, caplog):
        markdown_path = tmp_path / "broken.md"
        markdown_path.write_text("# Title\nno author line\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main([str(markdown_path), str(tmp_path)])

        assert exc_info.value.code == 1
        assert "StructuralParseError" in caplog.text
        assert not (tmp_path / "broken.tex").exists()

    def test_unknown_format_rejected_by_argparse(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "x.md"), str(tmp_path), "--format", "html"])
        assert exc_info.value.code == 2

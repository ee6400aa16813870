#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_api.py
"""Unit tests for the public conversion functions."""

import io
import zipfile
from pathlib import Path

import pytest

from mdtex import (
    ArchivePackageOptions,
    ImageRegistry,
    LatexRendererOptions,
    MarkdownParserOptions,
    collect_image_urls,
    latex_to_zipped_latex,
    markdown_to_latex,
    markdown_to_zipped_latex,
    write_latex,
)

BODY_ONLY = LatexRendererOptions(include_preamble=False)


@pytest.mark.unit
class TestMarkdownToLatex:
    """Test string conversion."""

    def test_body(self) -> None:
        """Test a document body with math."""
        latex = markdown_to_latex("# Title\n\nText with $$a_1$$.", options=BODY_ONLY)

        assert latex == "\\section{Title}\n\nText with $a_1$.\n"

    def test_complete_document(self) -> None:
        """Test that the default output is a complete document."""
        latex = markdown_to_latex("Hello")

        assert latex.startswith("% Generated by mdtex")
        assert "\\begin{document}\n\nHello\n" in latex
        assert latex.endswith("\\end{document}\n")

    def test_image_callback(self) -> None:
        """Test resolving image paths through a callback."""
        latex = markdown_to_latex("![x](a.png)", image_callback=lambda url: f"figs/{url}", options=BODY_ONLY)

        assert latex == "\\includegraphics[width=\\textwidth]{figs/a.png}\n"

    def test_parser_options(self) -> None:
        """Test switching off strikethrough."""
        latex = markdown_to_latex(
            "~~a~~", options=BODY_ONLY, parser_options=MarkdownParserOptions(parse_strikethrough=False)
        )

        assert "\\sout" not in latex


@pytest.mark.unit
class TestWriteLatex:
    """Test writing to paths and streams."""

    def test_path(self, tmp_path: Path) -> None:
        """Test writing to a file path."""
        target = tmp_path / "out.tex"

        write_latex("*a*", target, options=BODY_ONLY)

        assert target.read_text(encoding="utf-8") == "\\emph{a}\n"

    def test_text_stream(self) -> None:
        """Test writing to a text stream."""
        buffer = io.StringIO()

        write_latex("*a*", buffer, options=BODY_ONLY)

        assert buffer.getvalue() == "\\emph{a}\n"


@pytest.mark.unit
class TestCollectImageUrls:
    """Test the image discovery pass."""

    def test_document_order_without_repeats(self) -> None:
        """Test URL order and de-duplication."""
        markdown = "![a](one.png) ![b](https://example.com/two.png)\n\n![c](one.png)\n\n> ![d](three.jpg)\n"

        assert collect_image_urls(markdown) == ["one.png", "https://example.com/two.png", "three.jpg"]

    def test_links_are_not_images(self) -> None:
        """Test that only images are reported."""
        assert collect_image_urls("[link](a.png)") == []


@pytest.mark.unit
class TestZippedLatex:
    """Test archive building through the public API."""

    def test_markdown_to_zipped_latex(self, png_bytes: bytes) -> None:
        """Test that only used images are packaged."""
        registry = ImageRegistry()
        registry.register("plot.png", "plot.png", png_bytes)
        registry.register("unused.png", "unused.png", png_bytes)

        data = markdown_to_zipped_latex("![p](plot.png)", registry, renderer_options=BODY_ONLY)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == ["figures/", "figures/plot.png", "main.tex"]
            assert archive.read("main.tex") == b"\\includegraphics[width=\\textwidth]{figures/plot.png}\n"

    def test_latex_to_zipped_latex(self, png_bytes: bytes, jpeg_bytes: bytes) -> None:
        """Test packaging pre-rendered LaTeX with every registered image."""
        registry = ImageRegistry()
        registry.register("a.png", "a.png", png_bytes)
        registry.register("b.jpg", "b.jpg", jpeg_bytes)

        data = latex_to_zipped_latex(
            "\\input{x}", registry, options=ArchivePackageOptions(main_filename="paper", figures_dir="img")
        )

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == ["img/", "img/a.png", "img/b.jpg", "paper.tex"]
            assert archive.read("img/b.jpg") == jpeg_bytes

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/cli/test_output_naming.py
"""Unit tests for deriving output file names from document titles."""

from pathlib import Path

import pytest

from mdtex.cli.output import default_output_path, document_title, title_stem
from mdtex.utils.io_utils import open_unique_file, unique_path


@pytest.mark.unit
@pytest.mark.cli
class TestTitleStem:
    """Test file stems built from titles."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Quarterly Report: Q3 2024", "quarterly_report"),
            ("Hello", "hello"),
            ("snake_case-and-kebab", "snake_case"),
            ("Über-Analyse", "über_analyse"),
            ("A b", "mdtex"),
            ("!!! ???", "mdtex"),
            ("", "mdtex"),
            (None, "mdtex"),
        ],
    )
    def test_title_stem(self, title, expected: str) -> None:
        """Test stems for a range of titles."""
        assert title_stem(title) == expected


@pytest.mark.unit
@pytest.mark.cli
class TestDocumentTitle:
    """Test finding the document title."""

    def test_first_heading_text(self) -> None:
        """Test that inline formatting is dropped from the title."""
        assert document_title("Intro text\n\n## The *Big* Title\n\n# Second") == "The Big Title"

    def test_code_in_heading(self) -> None:
        """Test that code span content is part of the title."""
        assert document_title("# Using `mdtex`") == "Using mdtex"

    def test_character_references_in_title(self) -> None:
        """Test that references in heading text are decoded."""
        assert document_title("# Q&amp;A") == "Q&A"

    def test_no_heading(self) -> None:
        """Test a document without headings."""
        assert document_title("Just text.") is None


@pytest.mark.unit
@pytest.mark.cli
class TestDefaultOutputPath:
    """Test preferred output paths."""

    def test_from_heading(self, tmp_path: Path) -> None:
        """Test naming after the first heading."""
        assert default_output_path("# Field Notes\n", "x.md", tmp_path) == tmp_path / "field_notes.tex"

    def test_from_input_name(self, tmp_path: Path) -> None:
        """Test falling back to the input file stem."""
        assert default_output_path("text", "my notes.md", tmp_path) == tmp_path / "my_notes.tex"

    def test_default_stem(self, tmp_path: Path) -> None:
        """Test the fallback for stdin without a heading."""
        assert default_output_path("text", None, tmp_path) == tmp_path / "mdtex.tex"


@pytest.mark.unit
class TestUniquePaths:
    """Test never overwriting existing output."""

    def test_unique_path(self, tmp_path: Path) -> None:
        """Test numeric suffixes for taken paths."""
        (tmp_path / "a.tex").write_text("", encoding="utf-8")
        (tmp_path / "a-1.tex").write_text("", encoding="utf-8")

        assert unique_path(tmp_path / "a.tex") == tmp_path / "a-2.tex"
        assert unique_path(tmp_path / "b.tex") == tmp_path / "b.tex"

    def test_open_unique_file(self, tmp_path: Path) -> None:
        """Test that successive opens create distinct files."""
        first, handle = open_unique_file(tmp_path / "out.tex")
        with handle:
            handle.write("one")
        second, handle = open_unique_file(tmp_path / "out.tex")
        with handle:
            handle.write("two")

        assert first.name == "out.tex"
        assert second.name == "out-1.tex"
        assert first.read_text(encoding="utf-8") == "one"

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_options.py
"""Unit tests for options dataclasses."""

from dataclasses import FrozenInstanceError

import pytest

from mdtex.options import LatexRendererOptions, MarkdownParserOptions


@pytest.mark.unit
class TestLatexRendererOptions:
    """Test renderer options."""

    def test_defaults(self) -> None:
        """Test default values."""
        options = LatexRendererOptions()

        assert options.include_preamble is True
        assert options.preamble_path is None
        assert options.indent_width == 2
        assert options.math_aware_escaping is True
        assert options.soft_break_mode == "hard"
        assert options.image_width == "\\textwidth"

    def test_frozen(self) -> None:
        """Test that options cannot be mutated."""
        options = LatexRendererOptions()

        with pytest.raises(FrozenInstanceError):
            options.indent_width = 4  # type: ignore[misc]

    def test_create_updated(self) -> None:
        """Test deriving a modified copy."""
        options = LatexRendererOptions()
        updated = options.create_updated(indent_width=4, include_preamble=False)

        assert updated.indent_width == 4
        assert updated.include_preamble is False
        assert options.indent_width == 2

    def test_create_updated_validates(self) -> None:
        """Test that copies are validated like new instances."""
        with pytest.raises(ValueError):
            LatexRendererOptions().create_updated(indent_width=-1)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"indent_width": -1},
            {"soft_break_mode": "newline"},
            {"image_width": "  "},
            {"max_asset_size_bytes": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        """Test rejected values."""
        with pytest.raises(ValueError):
            LatexRendererOptions(**kwargs)

    def test_field_names(self) -> None:
        """Test the field name listing used for configuration routing."""
        names = LatexRendererOptions.field_names()

        assert "indent_width" in names
        assert "max_asset_size_bytes" in names
        assert "parse_tables" not in names


@pytest.mark.unit
class TestMarkdownParserOptions:
    """Test parser options."""

    def test_all_plugins_by_default(self) -> None:
        """Test the default plugin list."""
        assert MarkdownParserOptions().plugin_names() == ["strikethrough", "table", "footnotes", "task_lists"]

    def test_disabling_plugins(self) -> None:
        """Test switching plugins off."""
        options = MarkdownParserOptions(parse_tables=False, parse_footnotes=False)

        assert options.plugin_names() == ["strikethrough", "task_lists"]

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_escape.py
"""Unit tests for LaTeX text escaping."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mdtex.utils.escape import LATEX_SPECIAL_CHARS, decode_entities, escape_latex


@pytest.mark.unit
class TestEscapeLatex:
    """Test the character substitution table."""

    @pytest.mark.parametrize(
        "char,expected",
        [
            ("&", r"\&"),
            ("%", r"\%"),
            ("$", r"\$"),
            ("#", r"\#"),
            ("_", r"\_"),
            ("{", r"\{"),
            ("}", r"\}"),
            ("~", r"\textasciitilde{}"),
            ("^", r"\textasciicircum{}"),
            ("\\", r"\textbackslash{}"),
        ],
    )
    def test_special_characters(self, char: str, expected: str) -> None:
        """Test each LaTeX special character."""
        assert escape_latex(char) == expected

    def test_typographic_characters(self) -> None:
        """Test dashes, ellipsis and no-break space."""
        assert escape_latex("1–2") == "1--2"
        assert escape_latex("a—b") == "a---b"
        assert escape_latex("wait…") == r"wait\ldots{}"
        assert escape_latex("10\u00a0km") == "10~km"

    def test_three_dots(self) -> None:
        """Test that three literal dots become an ellipsis."""
        assert escape_latex("and so on...") == r"and so on\ldots{}"
        assert escape_latex("....") == r"\ldots{}."

    def test_space_runs_collapse(self) -> None:
        """Test that runs of spaces collapse to one and single spaces survive."""
        assert escape_latex("a    b c") == "a b c"

    def test_other_characters_pass_through(self) -> None:
        """Test that ordinary text and non-ASCII letters are unchanged."""
        assert escape_latex("Plain text, with (punctuation)!") == "Plain text, with (punctuation)!"
        assert escape_latex("café") == "café"

    def test_empty_string(self) -> None:
        """Test escaping nothing."""
        assert escape_latex("") == ""

    def test_mixed_content(self) -> None:
        """Test a sentence with several special characters."""
        assert escape_latex("50% of $x_1$") == r"50\% of \$x\_1\$"

    @given(st.text(alphabet="&%$#_{}", max_size=40))
    def test_simple_specials_are_always_backslashed(self, text: str) -> None:
        """Test that no simple special character survives unescaped."""
        assert escape_latex(text) == "".join("\\" + char for char in text)

    @given(st.text(alphabet="&%$#_{}~^\\ab", max_size=40))
    def test_every_special_is_substituted(self, text: str) -> None:
        """Test that each of the ten specials is replaced by its table entry."""
        escaped = escape_latex(text)

        assert escaped == "".join(LATEX_SPECIAL_CHARS.get(char, char) for char in text)
        # Only the substitutions themselves may contain special characters
        leftover = escaped
        for replacement in sorted(set(LATEX_SPECIAL_CHARS[char] for char in "&%$#_{}~^\\"), key=len, reverse=True):
            leftover = leftover.replace(replacement, "")
        assert not set(leftover) & set("&%$#_{}~^\\")


@pytest.mark.unit
class TestDecodeEntities:
    """Test HTML character reference decoding."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Tom &amp; Jerry &lt;3", "Tom & Jerry <3"),
            ("&copy; 2025", "© 2025"),
            ("&#36;5 and &#x41;", "$5 and A"),
            ("AT&T", "AT&T"),
            ("&copy without semicolon", "&copy without semicolon"),
            ("&madeup;", "&madeup;"),
            ("&ampxyz;", "&ampxyz;"),
            ("", ""),
        ],
    )
    def test_decode_entities(self, text: str, expected: str) -> None:
        """Test complete references only."""
        assert decode_entities(text) == expected

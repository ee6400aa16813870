#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/options/latex.py
"""Configuration options for LaTeX rendering.

This module defines options for the markdown-to-LaTeX renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import get_args

from mdtex.constants import (
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_INCLUDE_PREAMBLE,
    DEFAULT_INDENT_WIDTH,
    DEFAULT_MATH_AWARE_ESCAPING,
    DEFAULT_SOFT_BREAK_MODE,
    SoftBreakMode,
)
from mdtex.options.base import BaseRendererOptions


@dataclass(frozen=True)
class LatexRendererOptions(BaseRendererOptions):
    r"""Configuration options for event-to-LaTeX rendering.

    Parameters
    ----------
    include_preamble : bool, default True
        Whether to frame the body with the document preamble and a closing
        ``\end{document}``. When False only the body is written.
    preamble_path : str or None, default None
        Path to a custom preamble file. The bundled preamble is used when None.
        The file must end with ``\begin{document}``.
    indent_width : int, default 2
        Spaces per indentation level inside list environments.
    math_aware_escaping : bool, default True
        Whether ``$$`` inside text fragments opens an unescaped inline math
        span. When False every ``$`` is escaped.
    soft_break_mode : {"hard", "space"}, default "hard"
        How soft line breaks are written. "hard" emits a LaTeX manual line
        break, "space" joins the lines with a single space.
    image_width : str, default "\textwidth"
        Value of the ``width`` key passed to ``\includegraphics``.

    """

    include_preamble: bool = field(
        default=DEFAULT_INCLUDE_PREAMBLE,
        metadata={
            "help": "Wrap output in the document preamble and \\end{document}",
            "cli_name": "no-preamble",
            "importance": "core",
        },
    )
    preamble_path: str | None = field(
        default=None,
        metadata={
            "help": "Path to a custom preamble file ending with \\begin{document}",
            "cli_name": "preamble",
            "importance": "advanced",
        },
    )
    indent_width: int = field(
        default=DEFAULT_INDENT_WIDTH,
        metadata={"help": "Spaces per indentation level", "type": int, "importance": "advanced"},
    )
    math_aware_escaping: bool = field(
        default=DEFAULT_MATH_AWARE_ESCAPING,
        metadata={
            "help": "Treat $$ inside text as an inline math delimiter instead of escaping it",
            "cli_name": "no-math-aware-escaping",
            "importance": "advanced",
        },
    )
    soft_break_mode: SoftBreakMode = field(
        default=DEFAULT_SOFT_BREAK_MODE,
        metadata={
            "help": "Render soft line breaks as manual line breaks or spaces",
            "choices": ["hard", "space"],
            "cli_name": "soft-breaks",
            "importance": "core",
        },
    )
    image_width: str = field(
        default=DEFAULT_IMAGE_WIDTH,
        metadata={"help": "Width passed to \\includegraphics", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate LaTeX renderer options.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        super().__post_init__()

        if self.indent_width < 0:
            raise ValueError(f"indent_width must be non-negative, got {self.indent_width}")

        if self.soft_break_mode not in get_args(SoftBreakMode):
            raise ValueError(
                f"soft_break_mode must be one of {get_args(SoftBreakMode)}, got {self.soft_break_mode!r}"
            )

        if not self.image_width.strip():
            raise ValueError("image_width must not be empty")

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/renderers/__init__.py
"""Renderers turning markdown event streams into LaTeX.

- LatexRenderer: the event-to-LaTeX transducer
- LatexFormatter: whitespace and math-aware escaping layer it writes through
"""

from __future__ import annotations

from mdtex.renderers.base import BaseRenderer
from mdtex.renderers.formatter import LatexFormatter, WhitespaceFormatter
from mdtex.renderers.latex import LatexRenderer

__all__ = ["BaseRenderer", "LatexFormatter", "LatexRenderer", "WhitespaceFormatter"]

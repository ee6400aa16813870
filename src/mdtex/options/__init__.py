#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for mdtex parsing, rendering and packaging.

Each component has its own frozen Options dataclass. Use
``create_updated`` to derive modified copies.
"""

from __future__ import annotations

from mdtex.options.base import BaseParserOptions, BaseRendererOptions, CloneFrozenMixin
from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.options.packaging import ArchivePackageOptions

__all__ = [
    "ArchivePackageOptions",
    "BaseParserOptions",
    "BaseRendererOptions",
    "CloneFrozenMixin",
    "LatexRendererOptions",
    "MarkdownParserOptions",
]

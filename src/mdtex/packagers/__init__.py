#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/packagers/__init__.py
"""Packagers for self-contained LaTeX projects.

Available packagers:
- LatexArchivePackager: zip archive with ``main.tex`` and ``figures/``

"""

from __future__ import annotations

from mdtex.packagers.archive import LatexArchivePackager, write_package

__all__ = ["LatexArchivePackager", "write_package"]

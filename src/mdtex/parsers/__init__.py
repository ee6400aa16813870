#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/parsers/__init__.py
"""Parsers producing ``(Event, SourceRange)`` streams."""

from __future__ import annotations

from mdtex.parsers.base import BaseParser
from mdtex.parsers.markdown import MarkdownEventParser, normalize_line_endings

__all__ = ["BaseParser", "MarkdownEventParser", "normalize_line_endings"]

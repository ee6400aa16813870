#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/cli/output.py
"""Output naming for the mdtex CLI.

Without ``-o`` the LaTeX file is named after the first words of the
document title and never replaces an existing file.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from mdtex.constants import DEFAULT_OUTPUT_STEM, MIN_TITLE_STEM_LENGTH, TITLE_WORDS_IN_FILENAME
from mdtex.events import EventKind, TagKind
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.parsers.markdown import MarkdownEventParser, normalize_line_endings
from mdtex.utils.escape import decode_entities

logger = logging.getLogger(__name__)

_WORD_SEPARATORS = re.compile(r"[\s\-_]+")


def document_title(markdown: str, parser_options: MarkdownParserOptions | None = None) -> str | None:
    """Return the plain text of the first heading, or None if there is none."""
    parser = MarkdownEventParser(parser_options)
    parts: list[str] = []
    in_heading = False

    for event, _range in parser.events(normalize_line_endings(markdown)):
        if event.tag is not None and event.tag.kind is TagKind.HEADING:
            if event.kind is EventKind.END:
                return "".join(parts).strip() or None
            in_heading = True
        elif in_heading and event.kind in (EventKind.TEXT, EventKind.CODE) and event.text:
            parts.append(event.text if event.kind is EventKind.CODE else decode_entities(event.text))

    return None


def title_stem(title: str | None) -> str:
    """Build a file stem from the first words of ``title``.

    Words are split on whitespace, hyphens and underscores, reduced to
    lowercase alphanumerics and joined with underscores. Titles too short
    to be meaningful fall back to the default stem.

    Examples
    --------
    >>> title_stem("Quarterly Report: Q3 2024")
    'quarterly_report'
    >>> title_stem("A b")
    'mdtex'

    """
    if not title:
        return DEFAULT_OUTPUT_STEM

    words = [word for word in _WORD_SEPARATORS.split(title) if word][:TITLE_WORDS_IN_FILENAME]
    beginning = "".join("".join(c for c in word if c.isalnum()).lower() + "_" for word in words)
    if len(beginning) <= MIN_TITLE_STEM_LENGTH:
        return DEFAULT_OUTPUT_STEM
    return beginning[:-1]


def default_output_path(
    markdown: str,
    input_name: str | None = None,
    directory: Path | None = None,
    parser_options: MarkdownParserOptions | None = None,
) -> Path:
    """Return the preferred ``.tex`` path for a document.

    The first heading supplies the title; without one the input file's stem
    is used. The returned path may exist; callers pick a free variant with
    :func:`mdtex.utils.io_utils.open_unique_file`.
    """
    title = document_title(markdown, parser_options)
    if title is None and input_name:
        title = Path(input_name).stem
    stem = title_stem(title)
    logger.debug(f"Derived output stem {stem!r} from title {title!r}")
    return (directory or Path.cwd()) / f"{stem}.tex"


__all__ = ["default_output_path", "document_title", "title_stem"]

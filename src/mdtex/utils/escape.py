#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/utils/escape.py
"""LaTeX text escaping utilities.

The substitution table is best-effort and not intended to neutralize
hostile input. Characters outside the table pass through unchanged.

"""

from __future__ import annotations

import html
import re
from html.entities import html5

LATEX_SPECIAL_CHARS: dict[str, str] = {
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "\\": r"\textbackslash{}",
    "\u00a0": "~",
    "–": "--",
    "—": "---",
    "…": r"\ldots{}",
}

# Multi-character sequences come first so the longest match wins
_ESCAPE_PATTERN = re.compile(r"\.\.\.| {2,}|[&%$#_{}~^\\\u00a0–—…]")
_ENTITY_PATTERN = re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});")


def _substitute(match: re.Match[str]) -> str:
    token = match.group(0)
    if token == "...":
        return r"\ldots{}"
    if token[0] == " ":
        return " "
    return LATEX_SPECIAL_CHARS[token]


def escape_latex(text: str) -> str:
    r"""Escape special LaTeX characters in text content.

    Parameters
    ----------
    text : str
        Text to escape

    Returns
    -------
    str
        Escaped text safe to place in a LaTeX paragraph

    Examples
    --------
        >>> escape_latex("50% of $x_1$")
        '50\\% of \\$x\\_1\\$'
        >>> escape_latex("wait...  what")
        'wait\\ldots{} what'

    """
    if not text:
        return text
    return _ESCAPE_PATTERN.sub(_substitute, text)


def _decode_reference(match: re.Match[str]) -> str:
    reference = match.group(0)
    if reference[1] == "#":
        return html.unescape(reference)
    return html5.get(reference[1:], reference)


def decode_entities(text: str) -> str:
    """Replace HTML entity and numeric character references with their characters.

    Only complete references ending in ``;`` are decoded. Unknown entity
    names are left as written.

    Examples
    --------
        >>> decode_entities("Tom &amp; Jerry &#60;3")
        'Tom & Jerry <3'

    """
    if "&" not in text:
        return text
    return _ENTITY_PATTERN.sub(_decode_reference, text)

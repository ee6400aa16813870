#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/renderers/formatter.py
"""Whitespace-fusing output formatters.

Newlines are requested lazily and only written right before the next text,
which lets adjacent blocks fuse their spacing. A paragraph that asks for two
trailing newlines followed by a heading that asks for three leading ones
yields three newlines, not five:

    >>> import io
    >>> buf = io.StringIO()
    >>> fmt = WhitespaceFormatter(buf)
    >>> fmt.write("Some paragraph.")
    >>> fmt.add_newlines(2)
    >>> fmt.add_newlines(3)
    >>> fmt.write("## Heading")
    >>> buf.getvalue()
    'Some paragraph.\\n\\n\\n## Heading'

:class:`LatexFormatter` adds LaTeX escaping, optionally passing inline
``$$...$$`` math through unescaped.

"""

from __future__ import annotations

import logging
import re
from typing import TextIO

from mdtex.constants import MAX_INDENT, MAX_NEWLINES
from mdtex.utils.escape import escape_latex

logger = logging.getLogger(__name__)

# Characters with special meaning inside a math span
_MATH_PLAIN_RUN = re.compile(r"[^\\$#\n]+")


class WhitespaceFormatter:
    """Wrap a text sink, fusing newlines and applying indentation.

    Parameters
    ----------
    sink : TextIO
        Destination for the formatted text. Only ``write`` is used.
    indent_width : int, default 2
        Spaces per indentation level

    Notes
    -----
    Indentation is inserted only after lazily requested newlines. Newline
    characters contained in written text are not indented. Nothing is
    written before the first text, so output never starts with blank lines.

    """

    def __init__(self, sink: TextIO, indent_width: int = 2):
        self._sink = sink
        self._indent_width = indent_width
        self._indent_level = 0
        self._pending_newlines = 0
        self._newline_limit = 0

    @property
    def indent_level(self) -> int:
        return self._indent_level

    @property
    def pending_newlines(self) -> int:
        return self._pending_newlines

    @property
    def newline_limit(self) -> int:
        return self._newline_limit

    def add_newlines(self, count: int) -> None:
        """Request at least ``count`` newlines before the next text.

        Repeated requests without intervening text fuse to their maximum,
        capped by :meth:`limit_newlines` and by a global ceiling of 4.
        """
        self._pending_newlines = max(self._pending_newlines, count)

    def limit_newlines(self, count: int) -> None:
        """Allow at most ``count`` newlines before the next text.

        The limit applies until the next write, then resets to 4.
        """
        self._newline_limit = min(self._newline_limit, count)

    def increase_indent(self) -> None:
        self._indent_level += 1

    def decrease_indent(self) -> None:
        """Decrease the indentation level by one if it is not zero."""
        if self._indent_level > 0:
            self._indent_level -= 1

    def write(self, text: str) -> None:
        """Write pending newlines and indentation, then ``text`` verbatim."""
        self._prepare()
        self._sink.write(text)

    def write_on_single_line(self, text: str) -> None:
        """Write ``text`` with at least one newline above and below it."""
        self.add_newlines(1)
        self.write(text)
        self.add_newlines(1)

    def get_sink(self) -> TextIO:
        """Flush pending whitespace and return the wrapped sink.

        Text written straight to the sink bypasses newline fusion, which
        suits runs of small writes known not to start a new line.
        """
        self._prepare()
        return self._sink

    def finish(self) -> TextIO:
        """Write any pending newlines and return the wrapped sink.

        Call :meth:`limit_newlines` with 0 first to drop them instead.
        """
        self._prepare()
        return self._sink

    def _newline_count(self) -> int:
        return min(self._pending_newlines, self._newline_limit, MAX_NEWLINES)

    def _prepare(self) -> None:
        newlines = self._newline_count()
        if newlines:
            indent = min(MAX_INDENT, self._indent_width * self._indent_level)
            self._sink.write("\n" * newlines + " " * indent)
        self._pending_newlines = 0
        self._newline_limit = MAX_NEWLINES


class LatexFormatter(WhitespaceFormatter):
    r"""Whitespace formatter with LaTeX escaping.

    With ``math_aware`` enabled, ``$$`` in escaped text opens an inline math
    span that is written as ``$...$`` without escaping, so LaTeX commands
    such as ``\frac`` survive. Inside a span only ``#`` and lone ``$`` are
    escaped and backslash pairs are copied as a unit. Malformed spans are
    closed at the next line break so the output stays balanced.

    Parameters
    ----------
    sink : TextIO
        Destination for the formatted text
    indent_width : int, default 2
        Spaces per indentation level
    math_aware : bool, default True
        Whether ``$$`` delimits unescaped inline math

    """

    def __init__(self, sink: TextIO, indent_width: int = 2, math_aware: bool = True):
        super().__init__(sink, indent_width)
        self._math_aware = math_aware
        self._math_mode = False

    @property
    def math_mode(self) -> bool:
        """Whether an inline math span is currently open."""
        return self._math_mode

    def write_escaped(self, text: str) -> None:
        """Write pending whitespace, then ``text`` with LaTeX escaping applied."""
        self._prepare()
        if not self._math_aware:
            self._sink.write(escape_latex(text))
            return

        sink = self._sink
        i = 0
        length = len(text)

        if self._math_mode and text.startswith("$"):
            # A span closed at the start of a fragment. The leading space keeps
            # the two dollars from reading as a display math opener.
            logger.warning("Stray '$' at the start of a math span; closing the span")
            sink.write(" $")
            i = 2 if text.startswith("$$") else 1
            self._math_mode = False

        while i < length:
            if self._math_mode:
                i = self._write_math(text, i)
                continue
            delimiter = text.find("$$", i)
            if delimiter < 0:
                sink.write(escape_latex(text[i:]))
                break
            sink.write(escape_latex(text[i:delimiter]))
            sink.write("$")
            self._math_mode = True
            i = delimiter + 2

    def _write_math(self, text: str, i: int) -> int:
        """Write math content starting at ``i`` and return where text mode resumes."""
        sink = self._sink
        length = len(text)
        while i < length:
            run = _MATH_PLAIN_RUN.match(text, i)
            if run:
                sink.write(run.group(0))
                i = run.end()
                continue

            char = text[i]
            if char == "\\":
                sink.write(text[i : i + 2])
                i += 2
            elif char == "$":
                if text.startswith("$$", i):
                    sink.write("$")
                    self._math_mode = False
                    return i + 2
                sink.write(r"\$")
                i += 1
            elif char == "#":
                sink.write(r"\#")
                i += 1
            else:
                # Newline inside a span: close it and let text mode write the newline
                logger.warning("Unterminated inline math span closed at line break")
                sink.write("$")
                self._math_mode = False
                return i
        return i

    def _prepare(self) -> None:
        if self._math_mode and self._newline_count():
            logger.warning("Unterminated inline math span closed at block boundary")
            self._sink.write("$")
            self._math_mode = False
        super()._prepare()

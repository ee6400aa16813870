#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/preprocess.py
"""Reversible disguise of ``$$`` math delimiters.

Markdown parsers treat ``_`` and ``*`` inside LaTeX math as emphasis
markers. Before parsing, every ``$$`` that is not adjacent to a backtick is
rewritten to a double backtick so the parser reports the math span as an
inline code span instead. The offsets of those rewrites are recorded in a
:class:`MathSpanReplacer`, which later tells the renderer whether a code
span was really math and restores ``$$`` inside any other fragment that
happens to contain a rewritten delimiter.

Offsets are indices into the Python string. ``$`` and the backtick are
single code points, so an index into the preprocessed text always lines up
with the same index into the original.

Examples
--------
    >>> text, replacer = MathSpanReplacer.replace("see $$x_1$$ here")
    >>> text
    'see ``x_1`` here'
    >>> replacer.is_replacement_point(4)
    True

"""

from __future__ import annotations

import logging
from typing import Sequence

from mdtex.constants import MATH_DELIMITER, MIN_REPLACEABLE_LENGTH
from mdtex.events import SourceRange
from mdtex.exceptions import ReplacementConsistencyError

logger = logging.getLogger(__name__)

_BACKTICK = "`"


class MathSpanReplacer:
    """Table of disguised ``$$`` offsets with a forward-only cursor.

    Instances are created by :meth:`replace` and live for one conversion.
    All queries must be issued with non-decreasing positions. Querying a
    position below one already consumed does not rewind the cursor and
    its result is undefined.

    Parameters
    ----------
    positions : Sequence[int]
        Strictly increasing offsets of rewritten delimiters, terminated by
        a sentinel equal to the text length.

    """

    def __init__(self, positions: Sequence[int]):
        self._positions: tuple[int, ...] = tuple(positions)
        self._index = 0

    @classmethod
    def replace(cls, text: str) -> tuple[str, MathSpanReplacer]:
        """Disguise ``$$`` delimiters as double backticks.

        The scan runs left to right over the partially rewritten text, so a
        run such as ``$$$$`` yields one replacement: the second pair is now
        preceded by a backtick.

        Parameters
        ----------
        text : str
            Original markdown text

        Returns
        -------
        tuple[str, MathSpanReplacer]
            The preprocessed text and the replacement table for it

        """
        chars = list(text)
        length = len(chars)
        positions: list[int] = []

        if length >= MIN_REPLACEABLE_LENGTH:
            for i in range(length - 1):
                if chars[i] != "$" or chars[i + 1] != "$":
                    continue
                if i > 0 and chars[i - 1] == _BACKTICK:
                    continue
                if i + 2 < length and chars[i + 2] == _BACKTICK:
                    continue
                positions.append(i)
                chars[i] = _BACKTICK
                chars[i + 1] = _BACKTICK

        positions.append(length)
        if len(positions) > 1:
            logger.debug("Disguised %d math delimiter(s)", len(positions) - 1)
        return "".join(chars), cls(positions)

    @property
    def positions(self) -> tuple[int, ...]:
        """Recorded offsets, sentinel excluded."""
        return self._positions[:-1]

    def is_replacement_point(self, pos: int) -> bool:
        """Check whether a ``$$`` was disguised at ``pos``.

        Consumes every recorded offset below ``pos``.

        Parameters
        ----------
        pos : int
            Offset into the preprocessed text

        Returns
        -------
        bool
            True if ``pos`` is a recorded offset

        """
        return self._skip_smaller_than(pos) == pos

    def un_replace(self, fragment: str, source_range: SourceRange) -> str:
        """Restore disguised delimiters inside a fragment.

        Parameters
        ----------
        fragment : str
            Text reported by the parser for ``source_range``
        source_range : SourceRange
            Half-open range of ``fragment`` in the preprocessed text

        Returns
        -------
        str
            ``fragment`` with every recorded offset in range turned back
            into ``$$``. Returned unchanged, with a warning, when its length
            disagrees with the range, since offsets cannot be correlated.

        Raises
        ------
        ReplacementConsistencyError
            If a recorded offset inside the range does not hold two backticks.

        """
        start, end = source_range
        if len(fragment) != end - start:
            logger.warning(
                'Ambiguous use of "$$". Some generated text may contain stray "`" characters instead of "$".'
            )
            return fragment

        pos = self._skip_smaller_than(start)
        if len(fragment) < 2 or pos >= end - 1:
            return fragment

        chars = list(fragment)
        while pos < end - 1:
            local = pos - start
            if chars[local] != _BACKTICK or chars[local + 1] != _BACKTICK:
                raise ReplacementConsistencyError(
                    f"Expected disguised delimiter at offset {pos}, found {fragment[local:local + 2]!r}",
                    position=pos,
                )
            chars[local] = MATH_DELIMITER[0]
            chars[local + 1] = MATH_DELIMITER[1]
            self._index += 1
            # The sentinel guarantees this index exists
            pos = self._positions[self._index]
        return "".join(chars)

    def _skip_smaller_than(self, pos: int) -> int:
        positions = self._positions
        index = self._index
        last = len(positions) - 1
        while index < last and positions[index] < pos:
            index += 1
        self._index = index
        return positions[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(positions={list(self.positions)!r}, cursor={self._index})"

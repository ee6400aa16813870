#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/parsers/base.py
"""Base class for event stream parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from mdtex.events import Event, SourceRange
from mdtex.exceptions import InvalidOptionsError
from mdtex.options.base import BaseParserOptions


class BaseParser(ABC):
    """Abstract base class for parsers producing ``(Event, SourceRange)`` streams.

    Parameters
    ----------
    options : BaseParserOptions or None, default = None
        Format-specific parsing options

    """

    def __init__(self, options: BaseParserOptions | None = None):
        self.options = options

    @abstractmethod
    def events(self, text: str) -> Iterator[tuple[Event, SourceRange]]:
        """Yield events for ``text`` in document order.

        Ranges index into ``text`` exactly as given.
        """

    @staticmethod
    def _validate_options_type(options: BaseParserOptions | None, expected_type: type, parser_name: str) -> None:
        """Validate that options are of the correct type for this parser.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                converter_name=parser_name,
                expected_type=expected_type,
                received_type=type(options),
            )

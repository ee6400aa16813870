#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/renderers/base.py
"""Base class for event stream renderers.

A renderer consumes the ``(Event, SourceRange)`` stream of a preprocessed
document and writes the target format to a text sink.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from io import StringIO
from pathlib import Path
from typing import IO, Union

from mdtex.exceptions import InvalidOptionsError
from mdtex.options.base import BaseRendererOptions


class BaseRenderer(ABC):
    """Abstract base class for all renderers.

    Parameters
    ----------
    options : BaseRendererOptions or None, default = None
        Format-specific rendering options

    """

    def __init__(self, options: BaseRendererOptions | None = None):
        self.options = options

    @abstractmethod
    def render(self, markdown: str, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Render markdown to the specified output.

        Parameters
        ----------
        markdown : str
            Markdown source text
        output : str, Path, IO[bytes], or IO[str]
            Output destination

        Raises
        ------
        RenderingError
            If rendering fails

        """

    def render_to_string(self, markdown: str) -> str:
        """Render markdown to a string.

        Parameters
        ----------
        markdown : str
            Markdown source text

        Returns
        -------
        str
            Rendered document

        """
        buffer = StringIO()
        self.render(markdown, buffer)
        return buffer.getvalue()

    @staticmethod
    def _validate_options_type(options: BaseRendererOptions | None, expected_type: type, renderer_name: str) -> None:
        """Validate that options are of the correct type for this renderer.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                converter_name=renderer_name,
                expected_type=expected_type,
                received_type=type(options),
            )

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/api.py
r"""Public conversion functions.

Examples
--------
Render a document body:

    >>> from mdtex import markdown_to_latex
    >>> from mdtex.options import LatexRendererOptions
    >>> markdown_to_latex("# Title\n\nText", options=LatexRendererOptions(include_preamble=False))
    '\\section{Title}\n\nText\n'

Package a document with its figures:

    >>> from mdtex import ImageRegistry, collect_image_urls, markdown_to_zipped_latex
    >>> registry = ImageRegistry()
    >>> for url in collect_image_urls(markdown):
    ...     registry.register(url, filename_for(url), load(url))
    >>> data = markdown_to_zipped_latex(markdown, registry)

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Union

from mdtex.images import ImageCallback, ImageRegistry, RecordingResolver
from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.options.packaging import ArchivePackageOptions
from mdtex.packagers.archive import LatexArchivePackager
from mdtex.renderers.latex import LatexRenderer

logger = logging.getLogger(__name__)


def markdown_to_latex(
    markdown: str,
    image_callback: ImageCallback | None = None,
    options: LatexRendererOptions | None = None,
    parser_options: MarkdownParserOptions | None = None,
) -> str:
    """Convert markdown with ``$$...$$`` inline math to LaTeX.

    Parameters
    ----------
    markdown : str
        Markdown source text
    image_callback : callable, optional
        Maps each inline image URL to the path used in ``\\includegraphics``.
        Returning None (or passing no callback) comments the image out.
    options : LatexRendererOptions, optional
        Rendering options
    parser_options : MarkdownParserOptions, optional
        Markdown extension switches

    Returns
    -------
    str
        LaTeX source

    """
    renderer = LatexRenderer(options, parser_options)
    return renderer.render_to_string(markdown, image_callback=image_callback)


def write_latex(
    markdown: str,
    output: Union[str, Path, IO[bytes], IO[str]],
    image_callback: ImageCallback | None = None,
    options: LatexRendererOptions | None = None,
    parser_options: MarkdownParserOptions | None = None,
) -> None:
    """Convert markdown to LaTeX and write it to a path or stream.

    Raises
    ------
    OutputWriteError
        If the output cannot be written

    """
    renderer = LatexRenderer(options, parser_options)
    renderer.render(markdown, output, image_callback=image_callback)


def collect_image_urls(markdown: str, parser_options: MarkdownParserOptions | None = None) -> list[str]:
    """Return the URLs of all inline images in document order, without repeats.

    This is the discovery pass that precedes image registration.
    """
    recorder = RecordingResolver()
    renderer = LatexRenderer(LatexRendererOptions(include_preamble=False), parser_options)
    renderer.render_to_string(markdown, image_callback=recorder)
    logger.debug(f"Discovered {len(recorder.unique_urls)} image URL(s)")
    return recorder.unique_urls


def markdown_to_zipped_latex(
    markdown: str,
    registry: ImageRegistry,
    options: ArchivePackageOptions | None = None,
    renderer_options: LatexRendererOptions | None = None,
) -> bytes:
    """Render markdown and package it with the registered images it uses.

    Returns
    -------
    bytes
        Zip archive with ``main.tex`` and ``figures/``

    """
    return LatexArchivePackager(options, renderer_options).package_markdown(markdown, registry)


def latex_to_zipped_latex(
    latex: str,
    registry: ImageRegistry,
    options: ArchivePackageOptions | None = None,
) -> bytes:
    """Package pre-rendered LaTeX with every registered image."""
    return LatexArchivePackager(options).package_latex(latex, registry)


__all__ = [
    "collect_image_urls",
    "latex_to_zipped_latex",
    "markdown_to_latex",
    "markdown_to_zipped_latex",
    "write_latex",
]

"""mdtex - Convert markdown with inline math to LaTeX.

mdtex turns CommonMark documents (with strikethrough and task lists) into
LaTeX source. Inline math is written between double dollar signs,
``$$x^2$$``, and is emitted as ``$x^2$``. Everything else is escaped so the
result compiles with a standard TeX distribution.

Examples
--------
Render a complete document:

    >>> from mdtex import markdown_to_latex
    >>> latex = markdown_to_latex("# Results\\n\\nThe loss is $$\\\\mathcal{L}$$.")

Package a document together with its figures:

    >>> from mdtex import ImageRegistry, markdown_to_zipped_latex
    >>> registry = ImageRegistry()
    >>> registry.register("plot.png", "plot.png", png_bytes)
    >>> archive = markdown_to_zipped_latex("![](plot.png)", registry)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "mdtex requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from mdtex.api import (
    collect_image_urls,
    latex_to_zipped_latex,
    markdown_to_latex,
    markdown_to_zipped_latex,
    write_latex,
)
from mdtex.exceptions import DependencyError, MdtexError, ParsingError, RenderingError
from mdtex.images import ImageRegistry, RecordingResolver, RegisteredImage
from mdtex.options import (
    ArchivePackageOptions,
    LatexRendererOptions,
    MarkdownParserOptions,
)
from mdtex.renderers.latex import LatexRenderer

__all__ = [
    "__version__",
    "markdown_to_latex",
    "write_latex",
    "collect_image_urls",
    "markdown_to_zipped_latex",
    "latex_to_zipped_latex",
    "ImageRegistry",
    "RegisteredImage",
    "RecordingResolver",
    "LatexRenderer",
    "LatexRendererOptions",
    "MarkdownParserOptions",
    "ArchivePackageOptions",
    "MdtexError",
    "DependencyError",
    "ParsingError",
    "RenderingError",
]

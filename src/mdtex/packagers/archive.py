#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/packagers/archive.py
"""Zipped LaTeX project packaging.

Builds an in-memory zip archive holding the main ``.tex`` file and a
figures directory with the registered images the document refers to.
The archive compiles as-is with ``pdflatex main.tex``.

"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Union

from mdtex.exceptions import OutputWriteError
from mdtex.images import ImageRegistry, RegisteredImage
from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.options.packaging import ArchivePackageOptions
from mdtex.renderers.latex import LatexRenderer

logger = logging.getLogger(__name__)

# Fixed timestamp so identical inputs produce identical archives
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_ENTRY_PERMISSIONS = 0o755

_COMPRESSION_METHODS = {
    "stored": zipfile.ZIP_STORED,
    "deflated": zipfile.ZIP_DEFLATED,
}


class LatexArchivePackager:
    """Package LaTeX output and figures into a zip archive.

    Parameters
    ----------
    options : ArchivePackageOptions or None, default = None
        Archive layout options
    renderer_options : LatexRendererOptions or None, default = None
        Options used when packaging markdown
    parser_options : MarkdownParserOptions or None, default = None
        Markdown parser options used when packaging markdown

    Examples
    --------
        >>> registry = ImageRegistry()
        >>> registry.register("plot.png", "plot.png", png_bytes)
        >>> data = LatexArchivePackager().package_markdown("![](plot.png)", registry)

    """

    def __init__(
        self,
        options: ArchivePackageOptions | None = None,
        renderer_options: LatexRendererOptions | None = None,
        parser_options: MarkdownParserOptions | None = None,
    ):
        self.options = options or ArchivePackageOptions()
        self.renderer = LatexRenderer(renderer_options, parser_options)

    @property
    def main_entry(self) -> str:
        return f"{self.options.main_filename}.tex"

    def package_markdown(self, markdown: str, registry: ImageRegistry) -> bytes:
        """Render markdown and package it with the images it uses.

        Registered images are referenced as ``<figures_dir>/<filename>``;
        unregistered ones are commented out in the LaTeX. Only images the
        document actually refers to are added to the archive.

        Parameters
        ----------
        markdown : str
            Markdown source text
        registry : ImageRegistry
            Images available for the document

        Returns
        -------
        bytes
            Zip archive content

        """
        used: dict[str, RegisteredImage] = {}
        figures_dir = self.options.figures_dir

        def resolve(url: str) -> str | None:
            image = registry.get(url)
            if image is None:
                logger.info(f"Image {url!r} is not registered; leaving it out of the archive")
                return None
            used.setdefault(url, image)
            return f"{figures_dir}/{image.filename}"

        latex = self.renderer.render_to_string(markdown, image_callback=resolve)
        return self._build_archive(latex, list(used.values()))

    def package_latex(self, latex: str, registry: ImageRegistry) -> bytes:
        """Package already rendered LaTeX with every registered image.

        Parameters
        ----------
        latex : str
            LaTeX source
        registry : ImageRegistry
            Images to include

        Returns
        -------
        bytes
            Zip archive content

        """
        return self._build_archive(latex, [image for _url, image in registry.items()])

    def _build_archive(self, latex: str, images: list[RegisteredImage]) -> bytes:
        compression = _COMPRESSION_METHODS[self.options.compression]
        figures_dir = self.options.figures_dir
        buffer = BytesIO()

        with zipfile.ZipFile(buffer, "w", compression) as archive:
            directory = zipfile.ZipInfo(f"{figures_dir}/", date_time=_ZIP_DATE_TIME)
            directory.external_attr = (0o40000 | _ENTRY_PERMISSIONS) << 16 | 0x10
            archive.writestr(directory, b"")

            written: dict[str, bytes] = {}
            for image in images:
                if image.filename in written:
                    if written[image.filename] != image.data:
                        logger.warning(f"Different images share the filename {image.filename!r}; keeping the first")
                    continue
                archive.writestr(self._entry(f"{figures_dir}/{image.filename}", compression), image.data)
                written[image.filename] = image.data

            archive.writestr(self._entry(self.main_entry, compression), latex.encode("utf-8"))

        data = buffer.getvalue()
        logger.info(f"Packaged {self.main_entry} with {len(written)} figure(s), {len(data)} bytes")
        return data

    @staticmethod
    def _entry(name: str, compression: int) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(name, date_time=_ZIP_DATE_TIME)
        info.compress_type = compression
        info.external_attr = (0o100000 | _ENTRY_PERMISSIONS) << 16
        return info


def write_package(data: bytes, path: Union[str, Path]) -> Path:
    """Write archive bytes to ``path``.

    Raises
    ------
    OutputWriteError
        If the file cannot be written

    """
    output_path = Path(path)
    try:
        output_path.write_bytes(data)
    except OSError as e:
        raise OutputWriteError(file_path=str(output_path), original_error=e) from e
    logger.info(f"Wrote {output_path}")
    return output_path


__all__ = ["LatexArchivePackager", "write_package"]

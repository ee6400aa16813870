#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/options/packaging.py
"""Configuration options for LaTeX archive packaging."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import get_args

from mdtex.constants import (
    DEFAULT_ARCHIVE_COMPRESSION,
    DEFAULT_FIGURES_DIR,
    DEFAULT_MAIN_FILENAME,
    ArchiveCompression,
)
from mdtex.options.base import CloneFrozenMixin


@dataclass(frozen=True)
class ArchivePackageOptions(CloneFrozenMixin):
    """Configuration options for zipped LaTeX projects.

    Parameters
    ----------
    main_filename : str, default "main"
        Stem of the LaTeX source entry; ``.tex`` is appended.
    figures_dir : str, default "figures"
        Directory inside the archive that holds registered images.
    compression : {"stored", "deflated"}, default "stored"
        Zip compression method for all entries.

    """

    main_filename: str = field(
        default=DEFAULT_MAIN_FILENAME,
        metadata={"help": "Stem of the main .tex entry in the archive", "importance": "advanced"},
    )
    figures_dir: str = field(
        default=DEFAULT_FIGURES_DIR,
        metadata={"help": "Archive directory for image files", "importance": "advanced"},
    )
    compression: ArchiveCompression = field(
        default=DEFAULT_ARCHIVE_COMPRESSION,
        metadata={"help": "Zip compression method", "choices": ["stored", "deflated"], "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate archive options.

        Raises
        ------
        ValueError
            If a name is empty or contains a path separator, or the
            compression method is unknown.

        """
        for name in ("main_filename", "figures_dir"):
            value = getattr(self, name)
            if not value or "/" in value or "\\" in value or value in (".", ".."):
                raise ValueError(f"{name} must be a plain, non-empty name, got {value!r}")

        if self.compression not in get_args(ArchiveCompression):
            raise ValueError(f"compression must be one of {get_args(ArchiveCompression)}, got {self.compression!r}")

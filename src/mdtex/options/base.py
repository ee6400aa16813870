#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/options/base.py
"""Base classes for parser, renderer and packager options."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from mdtex.constants import DEFAULT_MAX_ASSET_SIZE_BYTES


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities.

    This mixin adds the ability to create modified copies of frozen dataclass
    instances, which is useful for immutable configuration objects.
    """

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        """Return the names of all dataclass fields on this options class."""
        return frozenset(f.name for f in fields(cls))


@dataclass(frozen=True)
class BaseRendererOptions(CloneFrozenMixin):
    """Base class for all renderer options.

    Parameters
    ----------
    max_asset_size_bytes : int
        Maximum allowed size in bytes for any single asset (images, downloads)

    """

    max_asset_size_bytes: int = field(
        default=DEFAULT_MAX_ASSET_SIZE_BYTES,
        metadata={
            "help": "Maximum allowed size in bytes for any single asset (images, downloads)",
            "type": int,
            "importance": "security",
        },
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges for base renderer options.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.max_asset_size_bytes <= 0:
            raise ValueError(f"max_asset_size_bytes must be positive, got {self.max_asset_size_bytes}")


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for all parser options.

    Subclasses define format-specific parsing options as frozen dataclass fields.
    """
